"""Battle log replay.

Replaying folds the health-changing events of a stored battle log over
copies of the starting snapshots. No randomness is involved: the log
already holds every rolled amount, so the same log always reconstructs
the same progression.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from colosseum.core.exceptions import ReplayError
from colosseum.core.logging import get_logger
from colosseum.models.combatant import Combatant
from colosseum.models.enums import CompletionReason
from colosseum.models.events import (
    BattleCompleted,
    BattleEvent,
    DamageApplied,
    HealingApplied,
)
from colosseum.models.records import BattleRecord


logger = get_logger(__name__)


@dataclass(frozen=True)
class ReplayFrame:
    """State of the battle right after one event.

    Attributes:
        index: Position of the event in the log.
        event: The event itself.
        health: Health of every fighter after the event.
    """

    index: int
    event: BattleEvent
    health: dict[str, int]


@dataclass
class ReplayResult:
    """Outcome of folding a battle log."""

    frames: list[ReplayFrame] = field(default_factory=list)
    final_health: dict[str, int] = field(default_factory=dict)
    winner: str | None = None
    reason: CompletionReason | None = None
    completed: bool = False


def _fold_health(
    fighters: dict[str, Combatant],
    index: int,
    event: DamageApplied | HealingApplied,
) -> None:
    target = fighters.get(event.target)
    if target is None:
        raise ReplayError(
            f"Event {index} targets unknown fighter '{event.target}'",
            turn=event.turn,
        )
    if isinstance(event, DamageApplied):
        target.apply_damage(event.amount)
    else:
        target.apply_heal(event.amount)
    if target.health != event.health_after:
        raise ReplayError(
            f"Event {index}: {target.name} replays to {target.health} HP "
            f"but the log records {event.health_after}",
            combatant=target.name,
            turn=event.turn,
        )


def replay(snapshots: Sequence[Combatant], events: Sequence[BattleEvent]) -> ReplayResult:
    """Fold a battle log over the starting snapshots.

    Args:
        snapshots: The two combatants as they were before the battle.
        events: The battle log.

    Returns:
        ReplayResult with one frame per event.

    Raises:
        ReplayError: If the log does not fit the snapshots.
    """
    if len(snapshots) != 2 or snapshots[0].name == snapshots[1].name:
        raise ReplayError("Replay needs the starting snapshots of two distinct fighters")

    fighters = {snapshot.name: snapshot.snapshot() for snapshot in snapshots}
    result = ReplayResult()

    for index, event in enumerate(events):
        if result.completed:
            raise ReplayError(
                f"Event {index} follows the battle completion",
                turn=event.turn,
            )
        if isinstance(event, (DamageApplied, HealingApplied)):
            _fold_health(fighters, index, event)
        elif isinstance(event, BattleCompleted):
            result.completed = True
            result.winner = event.winner
            result.reason = event.reason

        result.frames.append(
            ReplayFrame(
                index=index,
                event=event,
                health={name: fighter.health for name, fighter in fighters.items()},
            )
        )

    result.final_health = {name: fighter.health for name, fighter in fighters.items()}
    return result


def verify_record(record: BattleRecord) -> ReplayResult:
    """Replay a completed record and check it against its own outcome.

    Raises:
        ReplayError: If the record is pending, or the folded health or
            winner disagree with the completion event or the winner field.
    """
    completion = record.completion
    if not record.is_completed or completion is None:
        raise ReplayError(f"Battle {record.id} has not been run")

    result = replay(record.snapshots, record.events)

    if result.final_health != completion.final_health:
        raise ReplayError(
            f"Battle {record.id}: replayed health {result.final_health} "
            f"disagrees with recorded {completion.final_health}",
        )
    if result.winner != record.winner:
        raise ReplayError(
            f"Battle {record.id}: replayed winner {result.winner} "
            f"disagrees with recorded {record.winner}",
        )
    if result.winner is not None:
        loser = completion.loser
        if loser is None or result.final_health.get(loser) != 0:
            raise ReplayError(f"Battle {record.id}: loser {loser} is still standing")
        if result.final_health.get(result.winner, 0) == 0:
            raise ReplayError(f"Battle {record.id}: winner {result.winner} was defeated")

    logger.debug("Battle log verified", battle_id=record.id, events=len(record.events))
    return result


__all__ = [
    "ReplayFrame",
    "ReplayResult",
    "replay",
    "verify_record",
]
