"""Fighter definition files.

A fighter file is JSON holding either one fighter object or a list of
them, in the format::

    {
        "name": "Shadow",
        "health": 45,
        "heal_delta": 5,
        "base_attack": 5,
        "base_defense": 1,
        "spells": [{"name": "Umbral Bolt", "effect": {"power": 9}}],
        "behavior": {"attack_chance": 0.6, "heal_chance": 0.2, "spell_chances": [0.2]}
    }

Every definition goes through ``Combatant.from_definition``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from colosseum.core.exceptions import NotFoundError, PersistenceError, ValidationError
from colosseum.core.logging import get_logger
from colosseum.models.combatant import Combatant


logger = get_logger(__name__)


def parse_fighters(data: Any) -> list[Combatant]:
    """Validate decoded fighter definitions.

    Args:
        data: A single definition mapping or a list of them.

    Returns:
        The validated combatants, in file order.

    Raises:
        ValidationError: If a definition is invalid or a name repeats.
    """
    if isinstance(data, Mapping):
        data = [data]
    if not isinstance(data, list):
        raise ValidationError(
            "Fighter data must be an object or a list of objects",
            invalid_value=type(data).__name__,
        )

    fighters: list[Combatant] = []
    seen: set[str] = set()
    for definition in data:
        fighter = Combatant.from_definition(definition)
        if fighter.name in seen:
            raise ValidationError(
                f"Fighter '{fighter.name}' is defined more than once",
                field_name="name",
                invalid_value=fighter.name,
            )
        seen.add(fighter.name)
        fighters.append(fighter)
    return fighters


def load_fighters(path: str | Path) -> list[Combatant]:
    """Read and validate a fighter definition file.

    Raises:
        NotFoundError: If the file does not exist.
        PersistenceError: If the file exists but cannot be read.
        ValidationError: If the file is not UTF-8 JSON or holds an
            invalid definition.
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Fighter file not found: {path}", kind="file", key=str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError(
            f"Fighter file {path} is not UTF-8 text: {exc.reason} at byte {exc.start}",
        ) from exc
    except OSError as exc:
        raise PersistenceError(
            f"Cannot read fighter file {path}: {exc.strerror or exc}",
            kind="file",
            key=str(path),
        ) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            f"Fighter file {path} is not valid JSON: {exc.msg} (line {exc.lineno})",
        ) from exc

    fighters = parse_fighters(data)
    logger.info("Fighters loaded", path=str(path), count=len(fighters))
    return fighters


__all__ = [
    "parse_fighters",
    "load_fighters",
]
