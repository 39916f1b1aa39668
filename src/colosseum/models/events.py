"""Battle events.

Every atomic occurrence of a battle is recorded as an immutable, tagged
event. The ordered list of events (the battle log) is the authoritative
history of a battle: it is what gets persisted, replayed and rendered.

Events are discriminated by their ``kind`` field so a stored log can be
validated back into the right classes with ``battle_log_adapter``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from colosseum.models.enums import ActionKind, CompletionReason, CriticalOutcome, Side


class _Event(BaseModel):
    """Common base of all battle events."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    turn: int = Field(ge=0, description="Turn number (0 for initiative)")


class InitiativeRolled(_Event):
    """A side rolled a d20 for initiative."""

    kind: Literal["initiative_rolled"] = "initiative_rolled"
    actor: str
    roll: int = Field(ge=1)


class TurnStarted(_Event):
    """A side begins its turn."""

    kind: Literal["turn_started"] = "turn_started"
    actor: str
    side: Side


class ActionChosen(_Event):
    """The acting side selected an action.

    ``draw`` is the uniform value behind a weighted choice and is None when
    the action was supplied by a player.
    """

    kind: Literal["action_chosen"] = "action_chosen"
    actor: str
    action: ActionKind
    spell_name: str | None = None
    draw: float | None = Field(default=None, ge=0.0, lt=1.0)


class EffectRolled(_Event):
    """The numeric effect of the chosen action was computed."""

    kind: Literal["effect_rolled"] = "effect_rolled"
    actor: str
    target: str
    action: ActionKind
    spell_name: str | None = None
    dice: int | None = Field(default=None, ge=1, description="Natural d20 roll, if rolled")
    raw_amount: int = Field(ge=0, description="Effect before critical and defense")
    amount: int = Field(ge=0, description="Effect to apply")
    critical: CriticalOutcome = CriticalOutcome.NONE


class DamageApplied(_Event):
    """Damage was applied to the target."""

    kind: Literal["damage_applied"] = "damage_applied"
    actor: str
    target: str
    amount: int = Field(ge=0)
    health_after: int = Field(ge=0)


class HealingApplied(_Event):
    """Healing was applied to the target."""

    kind: Literal["healing_applied"] = "healing_applied"
    actor: str
    target: str
    amount: int = Field(ge=0)
    health_after: int = Field(ge=0)


class BattleCompleted(_Event):
    """The battle reached its terminal state.

    ``winner`` and ``loser`` are None for a draw.
    """

    kind: Literal["battle_completed"] = "battle_completed"
    winner: str | None = None
    loser: str | None = None
    reason: CompletionReason
    final_health: dict[str, int]

    @property
    def is_draw(self) -> bool:
        return self.winner is None


BattleEvent = Annotated[
    Union[
        InitiativeRolled,
        TurnStarted,
        ActionChosen,
        EffectRolled,
        DamageApplied,
        HealingApplied,
        BattleCompleted,
    ],
    Field(discriminator="kind"),
]
"""Any battle event, discriminated by ``kind``."""

battle_log_adapter: TypeAdapter[list[BattleEvent]] = TypeAdapter(list[BattleEvent])
"""Validates and serializes whole battle logs."""


__all__ = [
    "InitiativeRolled",
    "TurnStarted",
    "ActionChosen",
    "EffectRolled",
    "DamageApplied",
    "HealingApplied",
    "BattleCompleted",
    "BattleEvent",
    "battle_log_adapter",
]
