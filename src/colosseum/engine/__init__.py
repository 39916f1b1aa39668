"""Battle engine: randomness, action resolution, turns and replay.

Submodules:
    random_source: Injected randomness (seeded and scripted sources)
    dice: Integer and d20 rolls drawn from a random source
    resolver: Weighted action choice and effect computation
    turn_engine: The turn-by-turn battle state machine
    replay: Folding a stored battle log back into health values
"""

from __future__ import annotations

from colosseum.engine.dice import D20Roll, DiceRoller
from colosseum.engine.random_source import (
    RandomSource,
    ScriptedRandomSource,
    SeededRandomSource,
)
from colosseum.engine.replay import ReplayFrame, ReplayResult, replay, verify_record
from colosseum.engine.resolver import ActionResolver, Resolution
from colosseum.engine.turn_engine import TurnEngine, TurnResult, TurnStatus


__all__ = [
    # Randomness
    "RandomSource",
    "SeededRandomSource",
    "ScriptedRandomSource",
    "D20Roll",
    "DiceRoller",
    # Resolution
    "ActionResolver",
    "Resolution",
    # Turns
    "TurnEngine",
    "TurnResult",
    "TurnStatus",
    # Replay
    "ReplayFrame",
    "ReplayResult",
    "replay",
    "verify_record",
]
