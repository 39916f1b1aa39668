"""Colosseum - two-fighter battle simulation engine.

Fighters take turns choosing actions by weighted chance; every roll and
every health change is recorded as an event. Battles are stored with
their event log and starting snapshots, so any battle can be replayed
exactly without re-rolling anything.

RANDOMNESS:
- The engine draws every random number from an injected RandomSource
- SeededRandomSource makes a battle reproducible from its seed
- ScriptedRandomSource drives battles from a fixed list of draws in tests

Example:
    >>> from colosseum import Combatant, SeededRandomSource, TurnEngine
    >>>
    >>> dummy = Combatant.from_definition({...})
    >>> shadow = Combatant.from_definition({...})
    >>> engine = TurnEngine(dummy, shadow, SeededRandomSource(42))
    >>> result = engine.run()
    >>> print(result.message)

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for fighters, events and battle records.
    engine: Random sources, action resolver, turn engine and replay.
    storage: SQLite battle store and fighter file loader.
    services: Arena operations driven by the command line.
    cli: argparse command line and plain-text rendering.
"""

from __future__ import annotations

# Core
from colosseum.core.config import Settings, get_settings
from colosseum.core.exceptions import ColosseumError
from colosseum.core.logging import configure_logging, get_logger

# Models
from colosseum.models import (
    ActionChoice,
    BattleEvent,
    BattleRecord,
    Combatant,
    Side,
    TurnPhase,
)

# Engine
from colosseum.engine import (
    ActionResolver,
    ScriptedRandomSource,
    SeededRandomSource,
    TurnEngine,
    TurnResult,
    replay,
)

# Storage & services
from colosseum.services import Arena
from colosseum.storage import BattleStore


__version__ = "0.1.0"

__all__ = [
    # Core
    "Settings",
    "get_settings",
    "ColosseumError",
    "configure_logging",
    "get_logger",
    # Models
    "ActionChoice",
    "BattleEvent",
    "BattleRecord",
    "Combatant",
    "Side",
    "TurnPhase",
    # Engine
    "ActionResolver",
    "ScriptedRandomSource",
    "SeededRandomSource",
    "TurnEngine",
    "TurnResult",
    "replay",
    # Storage & services
    "Arena",
    "BattleStore",
]
