"""Enumeration types for Colosseum.

These enums are the closed vocabularies shared by the data model, the
battle engine and the persisted event log. Their string values are part of
the stored format and must not change.
"""

from __future__ import annotations

from enum import StrEnum


class ActionKind(StrEnum):
    """Actions a combatant can take on its turn."""

    ATTACK = "attack"
    HEAL = "heal"
    SPELL = "spell"


class EffectKind(StrEnum):
    """What a resolved effect does to its target.

    Damage targets the opponent, healing targets the actor.
    """

    DAMAGE = "damage"
    HEAL = "heal"


class CriticalOutcome(StrEnum):
    """Critical modifier of a resolved action.

    A single outcome per roll; a roll is never both a positive and a
    negative critical.
    """

    NONE = "none"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class Side(StrEnum):
    """The two sides of a battle."""

    A = "a"
    B = "b"

    @property
    def other(self) -> Side:
        """Get the opposing side.

        Returns:
            Side B for side A and vice versa.
        """
        return Side.B if self is Side.A else Side.A


class TurnPhase(StrEnum):
    """States of the turn engine."""

    NOT_STARTED = "not_started"
    """Initiative has not been rolled yet."""

    SIDE_A_TURN = "side_a_turn"
    """Side A acts next, unattended."""

    SIDE_B_TURN = "side_b_turn"
    """Side B acts next, unattended."""

    AWAITING_RESOLUTION = "awaiting_resolution"
    """An action was chosen and its effect is being applied."""

    PLAYER_TURN = "player_turn"
    """A human-controlled side must supply its action."""

    COMPLETE = "complete"
    """Terminal: one side was defeated or the turn cap was reached."""

    @classmethod
    def for_side(cls, side: Side) -> TurnPhase:
        """Get the unattended turn phase of a side."""
        return cls.SIDE_A_TURN if side is Side.A else cls.SIDE_B_TURN


class CompletionReason(StrEnum):
    """Why a battle ended."""

    KNOCKOUT = "knockout"
    TURN_LIMIT = "turn_limit"


class BattleStatus(StrEnum):
    """Lifecycle status of a battle record."""

    PENDING = "pending"
    COMPLETED = "completed"


__all__ = [
    "ActionKind",
    "EffectKind",
    "CriticalOutcome",
    "Side",
    "TurnPhase",
    "CompletionReason",
    "BattleStatus",
]
