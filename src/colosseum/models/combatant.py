"""Pydantic V2 schemas for fighters.

This module defines the Combatant stat block together with its spell
repertoire and behaviour weights. A Combatant is produced only through
``Combatant.from_definition``, which validates the whole definition and
reports every failure as a ``ValidationError``. Stat fields are frozen;
health changes only through ``apply_damage`` and ``apply_heal``.

Example:
    >>> dummy = Combatant.from_definition({
    ...     "name": "Dummy",
    ...     "health": 25,
    ...     "base_attack": 4,
    ...     "base_defense": 2,
    ...     "attack_min": 3,
    ...     "attack_max": 5,
    ...     "behavior": {"attack_chance": 1.0, "heal_chance": 0.0},
    ... })
    >>> dummy.apply_damage(30)
    25
    >>> dummy.is_defeated()
    True
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from colosseum.core.constants import MAX_NAME_LENGTH, PROBABILITY_TOLERANCE
from colosseum.core.exceptions import ValidationError
from colosseum.models.enums import ActionKind, EffectKind


Probability = Annotated[float, Field(ge=0.0, le=1.0)]


class SpellEffect(BaseModel):
    """Effect descriptor of a spell.

    Attributes:
        kind: Damage hits the opponent, heal restores the caster.
        power: Raw magnitude before critical and defense.
        pierce_defense: Damage ignores the defender's defense.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: EffectKind = Field(default=EffectKind.DAMAGE, description="Effect kind")
    power: int = Field(default=0, ge=0, description="Raw magnitude")
    pierce_defense: bool = Field(default=False, description="Ignore defender defense")


class Spell(BaseModel):
    """A named spell in a fighter's repertoire."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH, description="Spell name")
    effect: SpellEffect = Field(default_factory=SpellEffect, description="Effect descriptor")

    def __str__(self) -> str:
        return self.name


class Behavior(BaseModel):
    """Probability of each action a fighter may choose.

    Attributes:
        attack_chance: Probability of attacking.
        heal_chance: Probability of healing.
        spell_chances: One probability per spell, in repertoire order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attack_chance: Probability = Field(description="Attack probability")
    heal_chance: Probability = Field(description="Heal probability")
    spell_chances: tuple[Probability, ...] = Field(
        default=(),
        description="Per-spell probabilities",
    )

    @property
    def total(self) -> float:
        """Sum of all probabilities."""
        return self.attack_chance + self.heal_chance + math.fsum(self.spell_chances)

    @model_validator(mode="after")
    def validate_total(self) -> "Behavior":
        """Ensure the probabilities sum to 1.0.

        Raises:
            ValidationError: If the sum is off by more than the tolerance.
        """
        total = self.total
        if abs(total - 1.0) > PROBABILITY_TOLERANCE:
            raise ValidationError(
                f"Behavior probabilities sum to {total} but must equal 1.0 "
                f"(attack: {self.attack_chance}, heal: {self.heal_chance}, "
                f"spells: {list(self.spell_chances)})",
                field_name="behavior",
            )
        return self


class ActionChoice(BaseModel):
    """One selectable action.

    Produced by the weighted choice for unattended turns and supplied by
    the caller for a player-controlled turn. A spell may be referenced by
    name, index, or both.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ActionKind
    spell_index: int | None = Field(default=None, ge=0)
    spell_name: str | None = None

    @classmethod
    def attack(cls) -> ActionChoice:
        return cls(kind=ActionKind.ATTACK)

    @classmethod
    def heal(cls) -> ActionChoice:
        return cls(kind=ActionKind.HEAL)

    @classmethod
    def spell(cls, name: str) -> ActionChoice:
        return cls(kind=ActionKind.SPELL, spell_name=name)


class Combatant(BaseModel):
    """A battle participant's stat block.

    Attributes:
        name: Unique fighter name.
        max_health: Maximum health.
        health: Current health; 0 means defeated.
        base_attack: Base attack value.
        base_defense: Flat damage reduction.
        heal_delta: Health restored by the heal action.
        attack_min: Lower bound of the attack roll, if an explicit range is modelled.
        attack_max: Upper bound of the attack roll, if an explicit range is modelled.
        spells: Ordered spell repertoire.
        behavior: Action probabilities.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH, frozen=True)
    max_health: int = Field(ge=1, frozen=True)
    health: int = Field(ge=0)
    base_attack: int = Field(ge=0, frozen=True)
    base_defense: int = Field(default=0, ge=0, frozen=True)
    heal_delta: int = Field(default=0, ge=0, frozen=True)
    attack_min: int | None = Field(default=None, ge=0, frozen=True)
    attack_max: int | None = Field(default=None, ge=0, frozen=True)
    spells: tuple[Spell, ...] = Field(default=(), frozen=True)
    behavior: Behavior = Field(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def default_max_health(cls, data: Any) -> Any:
        """Treat ``health`` as the maximum when no maximum is given."""
        if isinstance(data, Mapping) and "max_health" not in data and "health" in data:
            return {**data, "max_health": data["health"]}
        return data

    @field_validator("health", mode="before")
    @classmethod
    def validate_health_bounds(cls, value: Any, info: ValidationInfo) -> Any:
        """Keep health within 0..max_health, on creation and on assignment."""
        if not isinstance(value, int):
            return value
        name = info.data.get("name", "<unnamed>")
        if value < 0:
            raise ValidationError(
                f"Fighter {name}: health {value} must not be negative",
                field_name="health",
                invalid_value=value,
            )
        max_health = info.data.get("max_health")
        if max_health is not None and value > max_health:
            raise ValidationError(
                f"Fighter {name}: health {value} exceeds max_health {max_health}",
                field_name="health",
                invalid_value=value,
            )
        return value

    @model_validator(mode="after")
    def validate_invariants(self) -> "Combatant":
        """Check cross-field invariants.

        Raises:
            ValidationError: On a malformed attack range, a spell/probability
                count mismatch or duplicate spells.
        """
        if (self.attack_min is None) != (self.attack_max is None):
            raise ValidationError(
                f"Fighter {self.name}: attack_min and attack_max must be given together",
                field_name="attack_min" if self.attack_min is None else "attack_max",
            )
        if self.attack_min is not None and self.attack_max is not None:
            if self.attack_min > self.attack_max:
                raise ValidationError(
                    f"Fighter {self.name}: attack_min {self.attack_min} exceeds "
                    f"attack_max {self.attack_max}",
                    field_name="attack_min",
                    invalid_value=self.attack_min,
                )
        if len(self.behavior.spell_chances) != len(self.spells):
            raise ValidationError(
                f"Fighter {self.name}: {len(self.behavior.spell_chances)} spell chances "
                f"but {len(self.spells)} spells",
                field_name="behavior.spell_chances",
            )
        names = [spell.name for spell in self.spells]
        if len(set(names)) != len(names):
            raise ValidationError(
                f"Fighter {self.name}: spell names must be unique",
                field_name="spells",
                invalid_value=names,
            )
        return self

    # -------------------------------------------------------------------------
    # Builder
    # -------------------------------------------------------------------------

    @classmethod
    def from_definition(cls, definition: Mapping[str, Any] | Combatant) -> Combatant:
        """Build a validated Combatant.

        This is the only supported way to obtain a Combatant. Schema
        failures (missing fields, negative stats, out-of-range
        probabilities) are reported as ``ValidationError``.

        Args:
            definition: Mapping in the fighter file format, or an existing
                Combatant to copy.

        Returns:
            A new, fully validated Combatant.

        Raises:
            ValidationError: If the definition is invalid.
        """
        if isinstance(definition, Combatant):
            definition = definition.model_dump()
        if not isinstance(definition, Mapping):
            raise ValidationError(
                "Fighter definition must be a mapping",
                invalid_value=type(definition).__name__,
            )

        try:
            return cls.model_validate(definition)
        except PydanticValidationError as exc:
            name = definition.get("name", "<unnamed>")
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'definition'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ValidationError(
                f"Invalid fighter definition {name}: {problems}",
                details={"errors": exc.error_count()},
            ) from exc

    def to_definition(self) -> dict[str, Any]:
        """Serialize to the fighter file format."""
        return self.model_dump(mode="json")

    def snapshot(self) -> Combatant:
        """Return an independent copy of this combatant."""
        return self.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Derived stats
    # -------------------------------------------------------------------------

    @property
    def attack_range(self) -> tuple[int, int]:
        """Inclusive attack roll range.

        Without an explicit range both bounds equal ``base_attack``.
        """
        if self.attack_min is not None and self.attack_max is not None:
            return (self.attack_min, self.attack_max)
        return (self.base_attack, self.base_attack)

    def weighted_actions(self) -> list[tuple[ActionChoice, float]]:
        """Ordered (action, probability) pairs: attack, heal, then spells."""
        actions: list[tuple[ActionChoice, float]] = [
            (ActionChoice.attack(), self.behavior.attack_chance),
            (ActionChoice.heal(), self.behavior.heal_chance),
        ]
        for index, (spell, chance) in enumerate(zip(self.spells, self.behavior.spell_chances)):
            actions.append(
                (
                    ActionChoice(kind=ActionKind.SPELL, spell_index=index, spell_name=spell.name),
                    chance,
                )
            )
        return actions

    def find_spell(self, name: str) -> int | None:
        """Get the repertoire index of a spell by name."""
        for index, spell in enumerate(self.spells):
            if spell.name == name:
                return index
        return None

    # -------------------------------------------------------------------------
    # Health mutators
    # -------------------------------------------------------------------------

    def is_defeated(self) -> bool:
        """Check whether health has reached 0."""
        return self.health == 0

    def apply_damage(self, amount: int) -> int:
        """Reduce health, floored at 0.

        Returns:
            Health actually removed.

        Raises:
            ValidationError: If amount is negative.
        """
        if amount < 0:
            raise ValidationError(
                "Damage amount must not be negative",
                field_name="amount",
                invalid_value=amount,
            )
        removed = min(self.health, amount)
        self.health -= removed
        return removed

    def apply_heal(self, amount: int) -> int:
        """Increase health, capped at max_health.

        Returns:
            Health actually restored.

        Raises:
            ValidationError: If amount is negative.
        """
        if amount < 0:
            raise ValidationError(
                "Heal amount must not be negative",
                field_name="amount",
                invalid_value=amount,
            )
        restored = min(self.max_health - self.health, amount)
        self.health += restored
        return restored


__all__ = [
    "SpellEffect",
    "Spell",
    "Behavior",
    "ActionChoice",
    "Combatant",
]
