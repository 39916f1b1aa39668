"""Turn-by-turn battle state machine.

This module provides the TurnEngine, which advances a two-sided battle
one turn at a time. Each turn selects an action, computes its effect,
applies it to the engine's private copies of the combatants and appends
the resulting events to the battle log.

Phases:

    not_started --start()--> side_a_turn | side_b_turn | player_turn
    side_x_turn --step()--> awaiting_resolution --> next phase | complete
    player_turn --submit_player_action()--> awaiting_resolution --> ...

A turn's events are appended only once the whole turn has been applied,
so the log never holds a partial turn.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from colosseum.core.config import BattleSettings, get_settings
from colosseum.core.constants import INITIATIVE_TURN
from colosseum.core.exceptions import (
    BattleInvariantError,
    InvalidActionError,
    InvalidBattleStateError,
    ValidationError,
)
from colosseum.core.logging import get_logger
from colosseum.engine.dice import DiceRoller
from colosseum.engine.random_source import RandomSource
from colosseum.engine.resolver import ActionResolver, Resolution
from colosseum.models.combatant import ActionChoice, Combatant
from colosseum.models.enums import CompletionReason, EffectKind, Side, TurnPhase
from colosseum.models.events import (
    ActionChosen,
    BattleCompleted,
    BattleEvent,
    DamageApplied,
    EffectRolled,
    HealingApplied,
    InitiativeRolled,
    TurnStarted,
)


logger = get_logger(__name__)


class TurnStatus(StrEnum):
    """Status returned after advancing the engine."""

    WAITING_FOR_PLAYER = "waiting_for_player"
    TURN_COMPLETED = "turn_completed"
    BATTLE_COMPLETE = "battle_complete"


@dataclass
class TurnResult:
    """Result of advancing the battle.

    Attributes:
        status: Where the engine stopped.
        phase: Engine phase after the call.
        turn: Number of turns taken so far.
        actor: Name of the side that acted, or that must act next when
            waiting for a player.
        winner: Winner name once complete; None for a draw or while running.
        message: Human-readable description.
        events: Events appended by this call.
    """

    status: TurnStatus
    phase: TurnPhase
    turn: int
    actor: str | None = None
    winner: str | None = None
    message: str = ""
    events: list[BattleEvent] = field(default_factory=list)


_UNATTENDED = (TurnPhase.SIDE_A_TURN, TurnPhase.SIDE_B_TURN)


class TurnEngine:
    """Run one battle between two combatants.

    The engine copies both combatants on construction; the caller's
    objects are never modified.

    Example:
        >>> engine = TurnEngine(dummy, shadow, SeededRandomSource(3))
        >>> result = engine.run()
        >>> result.status
        <TurnStatus.BATTLE_COMPLETE: 'battle_complete'>
    """

    def __init__(
        self,
        side_a: Combatant,
        side_b: Combatant,
        source: RandomSource,
        *,
        rules: BattleSettings | None = None,
        human_sides: Iterable[Side] = (),
        first_side: Side | None = None,
    ) -> None:
        """Initialize the turn engine.

        Args:
            side_a: Combatant on side A.
            side_b: Combatant on side B.
            source: Source of every random draw in the battle.
            rules: Battle rules; defaults to the configured rules.
            human_sides: Sides whose actions are supplied by the caller.
            first_side: Force the first side and skip the initiative roll.

        Raises:
            ValidationError: If both sides are the same fighter or a
                combatant starts the battle defeated.
        """
        if side_a.name == side_b.name:
            raise ValidationError(
                "A fighter cannot battle themselves",
                field_name="side_b",
                invalid_value=side_b.name,
            )
        for combatant in (side_a, side_b):
            if combatant.is_defeated():
                raise ValidationError(
                    f"Fighter {combatant.name} cannot start a battle defeated",
                    field_name="health",
                    invalid_value=combatant.health,
                )

        self._rules = rules or get_settings().battle
        self._source = source
        self._roller = DiceRoller(source)
        self._resolver = ActionResolver(self._rules)
        self._starting = (side_a.snapshot(), side_b.snapshot())
        self._fighters = {Side.A: side_a.snapshot(), Side.B: side_b.snapshot()}
        self._human = frozenset(human_sides)
        self._first_side = first_side

        self._phase = TurnPhase.NOT_STARTED
        self._turn = 0
        self._active: Side | None = None
        self._log: list[BattleEvent] = []
        self._winner: str | None = None
        self._reason: CompletionReason | None = None

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def turn(self) -> int:
        """Number of turns taken so far."""
        return self._turn

    @property
    def log(self) -> list[BattleEvent]:
        """Copy of the battle log so far."""
        return list(self._log)

    @property
    def active_side(self) -> Side | None:
        """Side that acts next, None before start and after completion."""
        return self._active

    @property
    def winner(self) -> str | None:
        return self._winner

    @property
    def reason(self) -> CompletionReason | None:
        return self._reason

    @property
    def is_complete(self) -> bool:
        return self._phase is TurnPhase.COMPLETE

    @property
    def starting_snapshots(self) -> tuple[Combatant, Combatant]:
        """Copies of both combatants as they were before the battle."""
        return (self._starting[0].snapshot(), self._starting[1].snapshot())

    def fighter(self, side: Side) -> Combatant:
        """Get a copy of a side's combatant in its current state."""
        return self._fighters[side].snapshot()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self) -> Side:
        """Decide which side acts first.

        Without a forced first side both sides roll a d20; the higher roll
        acts first. Ties are re-rolled up to ``initiative_rerolls`` times,
        after which side A goes first.

        Returns:
            The side that acts first.

        Raises:
            InvalidBattleStateError: If the battle has already started.
        """
        self._require_phase("start", TurnPhase.NOT_STARTED)

        staged: list[BattleEvent] = []
        first = self._first_side
        if first is None:
            first = Side.A
            for _ in range(self._rules.initiative_rerolls + 1):
                rolls: dict[Side, int] = {}
                for side in (Side.A, Side.B):
                    rolls[side] = self._roller.roll_d20().value
                    staged.append(
                        InitiativeRolled(
                            turn=INITIATIVE_TURN,
                            actor=self._fighters[side].name,
                            roll=rolls[side],
                        )
                    )
                if rolls[Side.A] != rolls[Side.B]:
                    first = Side.A if rolls[Side.A] > rolls[Side.B] else Side.B
                    break

        self._log.extend(staged)
        self._activate(first)
        logger.info(
            "Battle started",
            side_a=self._fighters[Side.A].name,
            side_b=self._fighters[Side.B].name,
            first=self._fighters[first].name,
        )
        return first

    def step(self) -> TurnResult:
        """Play one unattended turn.

        Returns:
            TurnResult for the turn just played.

        Raises:
            InvalidBattleStateError: If it is not an unattended side's turn.
        """
        self._require_phase("step", *_UNATTENDED)
        return self._play_turn(None)

    def submit_player_action(self, choice: ActionChoice) -> TurnResult:
        """Play the suspended player turn with a supplied action.

        Args:
            choice: The action chosen by the player.

        Returns:
            TurnResult for the turn just played.

        Raises:
            InvalidActionError: If no player turn is pending or the actor
                cannot perform the action. The battle is left unchanged.
        """
        if self._phase is not TurnPhase.PLAYER_TURN:
            raise InvalidActionError(
                f"No player action expected in phase {self._phase}",
                turn=self._turn,
                details={"phase": self._phase.value},
            )
        actor = self._fighters[self._require_active()]
        normalized = self._resolver.normalize_choice(actor, choice)
        return self._play_turn(normalized)

    def run(self) -> TurnResult:
        """Play unattended turns until a player must act or the battle ends.

        Returns:
            TurnResult with status WAITING_FOR_PLAYER or BATTLE_COMPLETE.
        """
        if self._phase is TurnPhase.NOT_STARTED:
            self.start()
        while self._phase in _UNATTENDED:
            self._play_turn(None)
        return self._current_result()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_phase(self, operation: str, *allowed: TurnPhase) -> None:
        if self._phase not in allowed:
            raise InvalidBattleStateError(
                f"Cannot {operation} in phase {self._phase}",
                current_state=self._phase.value,
                expected_states=[phase.value for phase in allowed],
            )

    def _require_active(self) -> Side:
        if self._active is None:
            raise BattleInvariantError(
                f"No active side in phase {self._phase}",
                turn=self._turn,
                details={"phase": self._phase.value},
            )
        return self._active

    def _activate(self, side: Side) -> None:
        self._active = side
        if side in self._human:
            self._phase = TurnPhase.PLAYER_TURN
        else:
            self._phase = TurnPhase.for_side(side)

    def _play_turn(self, choice: ActionChoice | None) -> TurnResult:
        side = self._require_active()
        actor = self._fighters[side]
        defender = self._fighters[side.other]
        if actor.is_defeated():
            raise BattleInvariantError(
                f"Defeated fighter {actor.name} was asked to act",
                combatant=actor.name,
                turn=self._turn,
            )

        turn = self._turn + 1
        resolution = self._resolver.resolve(actor, defender, self._source, choice=choice)

        self._phase = TurnPhase.AWAITING_RESOLUTION
        staged: list[BattleEvent] = [
            TurnStarted(turn=turn, actor=actor.name, side=side),
            ActionChosen(
                turn=turn,
                actor=actor.name,
                action=resolution.action,
                spell_name=resolution.spell_name,
                draw=resolution.draw,
            ),
            EffectRolled(
                turn=turn,
                actor=actor.name,
                target=resolution.target,
                action=resolution.action,
                spell_name=resolution.spell_name,
                dice=resolution.dice,
                raw_amount=resolution.raw_amount,
                amount=resolution.amount,
                critical=resolution.critical,
            ),
            self._apply(turn, resolution, actor, defender),
        ]
        self._turn = turn

        if defender.is_defeated():
            staged.append(self._complete(winner=actor, loser=defender))
        elif turn >= self._rules.max_turns:
            staged.append(self._complete(winner=None, loser=None))
        else:
            self._activate(side.other)

        self._log.extend(staged)
        return TurnResult(
            status=(
                TurnStatus.BATTLE_COMPLETE if self.is_complete else TurnStatus.TURN_COMPLETED
            ),
            phase=self._phase,
            turn=turn,
            actor=actor.name,
            winner=self._winner,
            message=self._describe(resolution),
            events=staged,
        )

    def _apply(
        self,
        turn: int,
        resolution: Resolution,
        actor: Combatant,
        defender: Combatant,
    ) -> BattleEvent:
        if resolution.effect is EffectKind.DAMAGE:
            removed = defender.apply_damage(resolution.amount)
            return DamageApplied(
                turn=turn,
                actor=actor.name,
                target=defender.name,
                amount=removed,
                health_after=defender.health,
            )
        restored = actor.apply_heal(resolution.amount)
        return HealingApplied(
            turn=turn,
            actor=actor.name,
            target=actor.name,
            amount=restored,
            health_after=actor.health,
        )

    def _complete(self, *, winner: Combatant | None, loser: Combatant | None) -> BattleCompleted:
        self._phase = TurnPhase.COMPLETE
        self._active = None
        self._winner = winner.name if winner else None
        self._reason = CompletionReason.KNOCKOUT if winner else CompletionReason.TURN_LIMIT

        final_health = {fighter.name: fighter.health for fighter in self._fighters.values()}
        logger.info(
            "Battle completed",
            winner=self._winner,
            reason=self._reason.value,
            turns=self._turn,
            final_health=final_health,
        )
        return BattleCompleted(
            turn=self._turn,
            winner=self._winner,
            loser=loser.name if loser else None,
            reason=self._reason,
            final_health=final_health,
        )

    def _current_result(self) -> TurnResult:
        if self.is_complete:
            if self._winner is None:
                message = f"Draw after {self._turn} turns"
            else:
                message = f"{self._winner} wins after {self._turn} turns"
            return TurnResult(
                status=TurnStatus.BATTLE_COMPLETE,
                phase=self._phase,
                turn=self._turn,
                winner=self._winner,
                message=message,
            )
        actor = self._fighters[self._require_active()].name
        return TurnResult(
            status=TurnStatus.WAITING_FOR_PLAYER,
            phase=self._phase,
            turn=self._turn,
            actor=actor,
            message=f"Waiting for {actor} to act",
        )

    @staticmethod
    def _describe(resolution: Resolution) -> str:
        what = resolution.spell_name or resolution.action.value
        if resolution.effect is EffectKind.DAMAGE:
            return f"{resolution.actor} uses {what} on {resolution.target} for {resolution.amount}"
        return f"{resolution.actor} uses {what} and restores {resolution.amount}"


__all__ = [
    "TurnStatus",
    "TurnResult",
    "TurnEngine",
]
