"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Colosseum test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from colosseum.core.config import BattleSettings
from colosseum.models.combatant import Combatant


if TYPE_CHECKING:
    from collections.abc import Generator

    from colosseum.storage.store import BattleStore


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from colosseum.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True, scope="session")
def quiet_logging() -> None:
    """Route structured logs to stderr at WARNING for the whole session."""
    from colosseum.core.logging import configure_logging

    configure_logging(level="WARNING")


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in a temp directory with the database pointed inside it.

    Returns:
        The temporary working directory.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COLOSSEUM_DATABASE_PATH", str(tmp_path / "colosseum.db"))
    return tmp_path


@pytest.fixture
def plain_rules() -> BattleSettings:
    """Battle rules without critical rolls.

    Returns:
        BattleSettings with critical hits disabled.
    """
    return BattleSettings(critical_hits=False)


# =============================================================================
# Fighter Fixtures
# =============================================================================


@pytest.fixture
def dummy_data() -> dict[str, Any]:
    """Provide a training dummy that only attacks.

    Returns:
        Fighter definition dictionary.
    """
    return {
        "name": "Dummy",
        "health": 25,
        "base_attack": 4,
        "base_defense": 2,
        "heal_delta": 0,
        "attack_min": 3,
        "attack_max": 5,
        "spells": [],
        "behavior": {"attack_chance": 1.0, "heal_chance": 0.0, "spell_chances": []},
    }


@pytest.fixture
def shadow_data() -> dict[str, Any]:
    """Provide a fighter that attacks and heals.

    Returns:
        Fighter definition dictionary.
    """
    return {
        "name": "Shadow",
        "health": 45,
        "base_attack": 5,
        "base_defense": 0,
        "heal_delta": 5,
        "attack_min": 4,
        "attack_max": 7,
        "spells": [],
        "behavior": {"attack_chance": 0.7, "heal_chance": 0.3, "spell_chances": []},
    }


@pytest.fixture
def mage_data() -> dict[str, Any]:
    """Provide a spellcaster in the original fighter file format.

    Returns:
        Fighter definition dictionary.
    """
    return {
        "name": "Mage",
        "health": 30,
        "heal_delta": 4,
        "base_attack": 3,
        "base_defense": 1,
        "spells": [
            {"name": "Fireball", "effect": {"kind": "damage", "power": 10}},
            {"name": "Arcane Lance", "effect": {"power": 6, "pierce_defense": True}},
            {"name": "Mend", "effect": {"kind": "heal", "power": 8}},
        ],
        "behavior": {
            "attack_chance": 0.40,
            "heal_chance": 0.20,
            "spell_chances": [0.15, 0.15, 0.10],
        },
    }


@pytest.fixture
def dummy(dummy_data: dict[str, Any]) -> Combatant:
    return Combatant.from_definition(dummy_data)


@pytest.fixture
def shadow(shadow_data: dict[str, Any]) -> Combatant:
    return Combatant.from_definition(shadow_data)


@pytest.fixture
def mage(mage_data: dict[str, Any]) -> Combatant:
    return Combatant.from_definition(mage_data)


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "colosseum.db"


@pytest.fixture
def store(db_path: Path) -> BattleStore:
    """Provide an empty battle store in a temp directory."""
    from colosseum.storage.store import BattleStore

    return BattleStore(db_path)


@pytest.fixture
def stocked_store(
    store: BattleStore,
    dummy: Combatant,
    shadow: Combatant,
    mage: Combatant,
) -> BattleStore:
    """Provide a saved store holding Dummy, Shadow and Mage."""
    with store.transaction():
        store.add_fighter(dummy)
        store.add_fighter(shadow)
        store.add_fighter(mage)
    return store
