"""Tests for arena operations."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from colosseum.core.config import BattleSettings
from colosseum.core.exceptions import DuplicateError, NotFoundError, ValidationError
from colosseum.engine.random_source import ScriptedRandomSource
from colosseum.models import BattleCompleted, BattleStatus
from colosseum.services.arena import Arena
from colosseum.storage.store import BattleStore


@pytest.fixture
def arena(stocked_store: BattleStore) -> Arena:
    """Provide an arena over a stocked store with default rules."""
    return Arena(stocked_store, rules=BattleSettings(max_turns=80))


class TestFighterOperations:
    """Tests for creating and importing fighters."""

    def test_create_fighter(self, store: BattleStore, shadow_data: dict[str, Any]) -> None:
        """Test that a created fighter is saved."""
        arena = Arena(store, rules=BattleSettings())

        arena.create_fighter(shadow_data)

        assert BattleStore(store.db_path).list_fighters() == ["Shadow"]

    def test_create_invalid_fighter(self, store: BattleStore, shadow_data: dict[str, Any]) -> None:
        """Test that invalid definitions never reach the store."""
        shadow_data["behavior"]["heal_chance"] = 0.9

        with pytest.raises(ValidationError):
            Arena(store, rules=BattleSettings()).create_fighter(shadow_data)

        assert store.list_fighters() == []

    def test_import_is_all_or_nothing(
        self,
        arena: Arena,
        tmp_path: Path,
        shadow_data: dict[str, Any],
    ) -> None:
        """Test that one duplicate name aborts the whole import."""
        newcomer = {**shadow_data, "name": "Newcomer"}
        path = tmp_path / "more.json"
        path.write_text(json.dumps([newcomer, shadow_data]), encoding="utf-8")

        with pytest.raises(DuplicateError):
            arena.import_fighters(path)

        assert "Newcomer" not in arena.store.list_fighters()

    def test_list_fighters(self, arena: Arena) -> None:
        """Test the fighter listing."""
        assert [f.name for f in arena.list_fighters()] == ["Dummy", "Mage", "Shadow"]


class TestBattleOperations:
    """Tests for creating, running and watching battles."""

    def test_create_pending(self, arena: Arena) -> None:
        """Test that a new battle is stored pending."""
        record = arena.create_battle("Dummy", "Shadow")

        assert record.status is BattleStatus.PENDING
        assert arena.store.get_battle(record.id) == record

    def test_create_and_run(self, arena: Arena) -> None:
        """Test that --run completes the battle before storing it."""
        record = arena.create_battle("Mage", "Shadow", run=True, seed=4)

        assert record.is_completed
        assert isinstance(record.events[-1], BattleCompleted)
        assert arena.store.get_battle(record.id).is_completed

    def test_create_without_saving(self, arena: Arena) -> None:
        """Test that persist=False leaves the store alone."""
        arena.create_battle("Mage", "Shadow", run=True, persist=False, seed=4)

        assert arena.list_battles() == []

    def test_self_battle(self, arena: Arena) -> None:
        """Test that a fighter cannot battle themselves."""
        with pytest.raises(ValidationError, match="themselves"):
            arena.create_battle("Mage", "Mage")

    def test_unknown_fighter(self, arena: Arena) -> None:
        """Test a battle with a missing fighter."""
        with pytest.raises(NotFoundError):
            arena.create_battle("Mage", "Nobody")

    def test_random_battles(self, arena: Arena) -> None:
        """Test that random pairings never repeat a fighter."""
        records = arena.create_random_battles(20, seed=8)

        assert len(records) == 20
        assert all(r.fighter1_name != r.fighter2_name for r in records)
        assert len(arena.list_battles(pending_only=True)) == 20

    def test_random_battles_need_two_fighters(self, store: BattleStore) -> None:
        """Test random battles on an empty roster."""
        with pytest.raises(ValidationError):
            Arena(store, rules=BattleSettings()).create_random_battles(1)

    def test_watch_runs_pending_once(self, arena: Arena) -> None:
        """Test that watching completes a pending battle exactly once."""
        pending = arena.create_battle("Dummy", "Shadow")

        watched = arena.watch_battle(pending.id, seed=2)
        again = arena.watch_battle(pending.id, seed=999)

        assert watched.is_completed
        assert watched.events
        assert again == watched
        assert arena.store.get_battle(pending.id) == watched

    def test_watch_with_injected_source(
        self,
        stocked_store: BattleStore,
        plain_rules: BattleSettings,
    ) -> None:
        """Test the reference battle through the arena."""
        arena = Arena(
            stocked_store,
            rules=plain_rules,
            source_factory=lambda seed: ScriptedRandomSource([0.0, 0.999999]),
        )
        pending = arena.create_battle("Dummy", "Shadow")

        record = arena.watch_battle(pending.id)

        assert record.winner == "Shadow"

    def test_watch_unknown(self, arena: Arena) -> None:
        """Test watching a battle that does not exist."""
        with pytest.raises(NotFoundError):
            arena.watch_battle("battle_0")

    def test_clear_battles(self, arena: Arena) -> None:
        """Test that clean removes battles and keeps fighters."""
        arena.create_random_battles(3, seed=1)

        assert arena.clear_battles() == 3
        assert arena.list_battles() == []
        assert len(arena.list_fighters()) == 3
