"""Persisted battle records.

A BattleRecord is created pending (no events, no winner) and becomes
completed exactly once, when its battle is run. Completed records carry
the battle log and the starting snapshots needed to replay it.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

from colosseum.core.exceptions import InvalidBattleStateError, ValidationError
from colosseum.models.combatant import Combatant
from colosseum.models.enums import BattleStatus
from colosseum.models.events import BattleCompleted, BattleEvent


class BattleSummary(BaseModel):
    """One line of the battle listing."""

    model_config = ConfigDict(frozen=True)

    id: str
    matchup: str
    status: BattleStatus
    winner: str | None = None
    created_at: datetime


class BattleRecord(BaseModel):
    """Persisted metadata plus battle log for one battle.

    Attributes:
        id: Unique, timestamp-derived identifier.
        fighter1_name: Name of the first participant (side A).
        fighter2_name: Name of the second participant (side B).
        created_at: Creation time (UTC).
        events: The battle log; empty while pending.
        snapshots: Starting combatants; empty while pending.
        winner: Winner name, None while pending or for a draw.
        is_completed: Whether the battle has been run.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    fighter1_name: str = Field(min_length=1)
    fighter2_name: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    events: list[BattleEvent] = Field(default_factory=list)
    snapshots: list[Combatant] = Field(default_factory=list)
    winner: str | None = None
    is_completed: bool = False

    @model_validator(mode="after")
    def validate_lifecycle(self) -> "BattleRecord":
        """Check that the record is a valid pending or completed battle.

        Raises:
            ValidationError: On a self-battle, a pending record with
                events, or a completed record without a completion event.
        """
        if self.fighter1_name == self.fighter2_name:
            raise ValidationError(
                "A fighter cannot battle themselves",
                field_name="fighter2_name",
                invalid_value=self.fighter2_name,
            )
        if not self.is_completed:
            if self.events or self.snapshots or self.winner is not None:
                raise ValidationError(
                    f"Pending battle {self.id} must have an empty log and no winner",
                    field_name="events",
                )
            return self

        if not self.events or not isinstance(self.events[-1], BattleCompleted):
            raise ValidationError(
                f"Completed battle {self.id} must end with a completion event",
                field_name="events",
            )
        if [s.name for s in self.snapshots] != [self.fighter1_name, self.fighter2_name]:
            raise ValidationError(
                f"Completed battle {self.id} must carry both starting snapshots",
                field_name="snapshots",
            )
        if self.winner != self.events[-1].winner:
            raise ValidationError(
                f"Completed battle {self.id}: winner disagrees with the battle log",
                field_name="winner",
                invalid_value=self.winner,
            )
        return self

    @classmethod
    def pending(
        cls,
        battle_id: str,
        fighter1_name: str,
        fighter2_name: str,
        *,
        created_at: datetime | None = None,
    ) -> BattleRecord:
        """Create a pending battle record."""
        return cls(
            id=battle_id,
            fighter1_name=fighter1_name,
            fighter2_name=fighter2_name,
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def status(self) -> BattleStatus:
        return BattleStatus.COMPLETED if self.is_completed else BattleStatus.PENDING

    @property
    def matchup(self) -> str:
        return f"{self.fighter1_name} vs {self.fighter2_name}"

    @property
    def completion(self) -> BattleCompleted | None:
        """The completion event, if the battle has been run."""
        if self.events and isinstance(self.events[-1], BattleCompleted):
            return self.events[-1]
        return None

    def summary(self) -> BattleSummary:
        return BattleSummary(
            id=self.id,
            matchup=self.matchup,
            status=self.status,
            winner=self.winner,
            created_at=self.created_at,
        )

    def complete(
        self,
        events: Sequence[BattleEvent],
        snapshots: Sequence[Combatant],
    ) -> BattleRecord:
        """Return the completed version of this pending record.

        Args:
            events: The full battle log, ending with a completion event.
            snapshots: The two starting combatants, side A first.

        Returns:
            A new, completed BattleRecord.

        Raises:
            InvalidBattleStateError: If this record is already completed.
            ValidationError: If the log or snapshots are inconsistent.
        """
        if self.is_completed:
            raise InvalidBattleStateError(
                f"Battle {self.id} has already been completed",
                current_state=BattleStatus.COMPLETED.value,
                expected_states=[BattleStatus.PENDING.value],
            )
        completion = events[-1] if events else None
        return BattleRecord(
            id=self.id,
            fighter1_name=self.fighter1_name,
            fighter2_name=self.fighter2_name,
            created_at=self.created_at,
            events=list(events),
            snapshots=[snapshot.snapshot() for snapshot in snapshots],
            winner=completion.winner if isinstance(completion, BattleCompleted) else None,
            is_completed=True,
        )


__all__ = [
    "BattleSummary",
    "BattleRecord",
]
