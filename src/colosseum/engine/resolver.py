"""Action selection and effect computation.

The resolver answers two questions for the acting combatant: which action
it takes, and what that action does in numbers. It never mutates either
combatant; applying the effect is the turn engine's job.

Draws are consumed in a fixed order so a scripted source can drive a
battle exactly:

1. the weighted-choice draw (skipped when the action is supplied),
2. the d20 critical roll (only when critical hits are enabled),
3. the attack range roll (attacks only).
"""

from __future__ import annotations

from dataclasses import dataclass

from colosseum.core.config import BattleSettings, get_settings
from colosseum.core.exceptions import BattleInvariantError, InvalidActionError, ValidationError
from colosseum.core.logging import get_logger
from colosseum.engine.dice import DiceRoller
from colosseum.engine.random_source import RandomSource
from colosseum.models.combatant import ActionChoice, Combatant
from colosseum.models.enums import ActionKind, CriticalOutcome, EffectKind


logger = get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """The computed outcome of one action.

    Attributes:
        action: Action kind that was resolved.
        effect: Whether the amount damages the target or heals it.
        actor: Name of the acting combatant.
        target: Name of the combatant the amount applies to.
        spell_name: Spell cast, if the action is a spell.
        draw: Weighted-choice draw, None for a supplied action.
        dice: Natural d20 roll, None when critical hits are disabled.
        raw_amount: Effect before critical modifier and defense.
        amount: Effect to apply, never negative.
        critical: Critical outcome of the d20 roll.
    """

    action: ActionKind
    effect: EffectKind
    actor: str
    target: str
    spell_name: str | None
    draw: float | None
    dice: int | None
    raw_amount: int
    amount: int
    critical: CriticalOutcome = CriticalOutcome.NONE


class ActionResolver:
    """Weighted action choice and effect computation.

    Example:
        >>> resolver = ActionResolver()
        >>> resolution = resolver.resolve(shadow, dummy, SeededRandomSource(7))
        >>> resolution.amount >= 0
        True
    """

    def __init__(self, rules: BattleSettings | None = None) -> None:
        """Initialize the resolver.

        Args:
            rules: Battle rules; defaults to the configured rules.
        """
        self._rules = rules or get_settings().battle

    @property
    def rules(self) -> BattleSettings:
        return self._rules

    # -------------------------------------------------------------------------
    # Action choice
    # -------------------------------------------------------------------------

    @staticmethod
    def choose_action(actor: Combatant, draw: float) -> ActionChoice:
        """Pick an action by weighted choice.

        The first action whose cumulative range ``[lo, lo + p)`` contains the
        draw is chosen, in the order attack, heal, then spells. Zero-weight
        actions are never chosen. If float accumulation leaves the draw above
        the total, the last positive-weight action is chosen.

        Args:
            actor: The acting combatant.
            draw: Uniform value in [0, 1).

        Returns:
            The chosen action.

        Raises:
            ValidationError: If draw is outside [0, 1).
            BattleInvariantError: If the actor has no action with a positive
                chance, which a validated behavior rules out.
        """
        if not 0.0 <= draw < 1.0:
            raise ValidationError(
                "Choice draw must lie in [0, 1)",
                field_name="draw",
                invalid_value=draw,
            )

        cumulative = 0.0
        fallback: ActionChoice | None = None
        for choice, chance in actor.weighted_actions():
            if chance <= 0.0:
                continue
            fallback = choice
            if draw < cumulative + chance:
                return choice
            cumulative += chance

        if fallback is None:
            raise BattleInvariantError(
                f"Fighter {actor.name} has no action with a positive chance",
                combatant=actor.name,
            )
        return fallback

    @staticmethod
    def normalize_choice(actor: Combatant, choice: ActionChoice) -> ActionChoice:
        """Check a supplied action against the actor's repertoire.

        Spells may be referenced by name, by index, or both; the returned
        choice always carries both.

        Raises:
            InvalidActionError: If the actor cannot perform the action.
        """
        if choice.kind is not ActionKind.SPELL:
            if choice.spell_index is not None or choice.spell_name is not None:
                raise InvalidActionError(
                    f"A {choice.kind} action cannot reference a spell",
                    combatant=actor.name,
                )
            return choice

        index = choice.spell_index
        if choice.spell_name is not None:
            by_name = actor.find_spell(choice.spell_name)
            if by_name is None:
                raise InvalidActionError(
                    f"{actor.name} does not know the spell '{choice.spell_name}'",
                    combatant=actor.name,
                )
            if index is not None and index != by_name:
                raise InvalidActionError(
                    f"Spell index {index} does not match spell '{choice.spell_name}'",
                    combatant=actor.name,
                )
            index = by_name

        if index is None or index >= len(actor.spells):
            raise InvalidActionError(
                f"{actor.name} has no spell at index {index}",
                combatant=actor.name,
            )
        return ActionChoice(
            kind=ActionKind.SPELL,
            spell_index=index,
            spell_name=actor.spells[index].name,
        )

    # -------------------------------------------------------------------------
    # Effects
    # -------------------------------------------------------------------------

    def apply_critical(self, raw: int, critical: CriticalOutcome) -> int:
        """Apply the critical modifier to a raw effect."""
        if critical is CriticalOutcome.POSITIVE:
            return int(raw * self._rules.critical_multiplier)
        if critical is CriticalOutcome.NEGATIVE:
            return 0
        return raw

    def resolve(
        self,
        actor: Combatant,
        defender: Combatant,
        source: RandomSource,
        *,
        choice: ActionChoice | None = None,
    ) -> Resolution:
        """Choose (unless supplied) and compute one action.

        Args:
            actor: The acting combatant.
            defender: The opposing combatant.
            source: Source of uniform draws.
            choice: Player-supplied action; drawn by weighted choice if None.

        Returns:
            The computed Resolution. Neither combatant is modified.

        Raises:
            InvalidActionError: If a supplied action is not in the repertoire.
        """
        roller = DiceRoller(source)

        draw: float | None = None
        if choice is None:
            draw = roller.draw()
            choice = self.choose_action(actor, draw)
        else:
            choice = self.normalize_choice(actor, choice)

        dice: int | None = None
        critical = CriticalOutcome.NONE
        if self._rules.critical_hits:
            d20 = roller.roll_d20(
                success_at=self._rules.critical_success_roll,
                failure_at=self._rules.critical_failure_roll,
            )
            dice, critical = d20.value, d20.critical

        spell_name: str | None = None
        pierce = False
        if choice.kind is ActionKind.ATTACK:
            effect = EffectKind.DAMAGE
            raw = roller.roll_range(*actor.attack_range)
        elif choice.kind is ActionKind.HEAL:
            effect = EffectKind.HEAL
            raw = actor.heal_delta
        else:
            if choice.spell_index is None:
                raise BattleInvariantError(
                    f"Spell action of {actor.name} was not resolved to an index",
                    combatant=actor.name,
                )
            spell = actor.spells[choice.spell_index]
            spell_name = spell.name
            effect = spell.effect.kind
            raw = spell.effect.power
            pierce = spell.effect.pierce_defense

        amount = self.apply_critical(raw, critical)
        if effect is EffectKind.DAMAGE:
            target = defender.name
            if not pierce:
                amount = max(0, amount - defender.base_defense)
        else:
            target = actor.name

        logger.debug(
            "Action resolved",
            actor=actor.name,
            action=choice.kind.value,
            spell=spell_name,
            raw=raw,
            amount=amount,
            critical=critical.value,
        )

        return Resolution(
            action=choice.kind,
            effect=effect,
            actor=actor.name,
            target=target,
            spell_name=spell_name,
            draw=draw,
            dice=dice,
            raw_amount=raw,
            amount=amount,
            critical=critical,
        )


__all__ = [
    "Resolution",
    "ActionResolver",
]
