"""Dice built on an injected randomness source.

DiceRoller turns uniform draws into the integer rolls the engine needs:
inclusive ranges for damage and d20 rolls for initiative and criticals.
Each roll consumes exactly one draw from the source.
"""

from __future__ import annotations

from dataclasses import dataclass

from colosseum.core.constants import D20_SIDES
from colosseum.core.exceptions import ValidationError
from colosseum.core.logging import get_logger
from colosseum.engine.random_source import RandomSource
from colosseum.models.enums import CriticalOutcome


logger = get_logger(__name__)


@dataclass(frozen=True)
class D20Roll:
    """A natural d20 roll and its critical outcome.

    Attributes:
        value: The natural roll (1-20).
        critical: Critical outcome of the roll under the active thresholds.
    """

    value: int
    critical: CriticalOutcome


class DiceRoller:
    """Integer rolls drawn from a RandomSource.

    Example:
        >>> roller = DiceRoller(SeededRandomSource(42))
        >>> 3 <= roller.roll_range(3, 5) <= 5
        True
    """

    def __init__(self, source: RandomSource) -> None:
        """Initialize the dice roller.

        Args:
            source: Source of uniform draws.
        """
        self._source = source

    @property
    def source(self) -> RandomSource:
        return self._source

    def draw(self) -> float:
        """Take one uniform draw in [0, 1)."""
        return self._source.random()

    def roll_range(self, low: int, high: int) -> int:
        """Roll a uniform integer in the inclusive range [low, high].

        The largest draw below 1.0 maps to ``high`` and 0.0 maps to ``low``.

        Raises:
            ValidationError: If low > high.
        """
        if low > high:
            raise ValidationError(
                f"Invalid roll range [{low}, {high}]",
                field_name="low",
                invalid_value=low,
            )
        span = high - low + 1
        offset = min(int(self.draw() * span), span - 1)
        return low + offset

    def roll_d20(
        self,
        *,
        success_at: int = D20_SIDES,
        failure_at: int = 1,
    ) -> D20Roll:
        """Roll a d20 and classify critical outcomes.

        Args:
            success_at: Natural roll at or above which the roll is a positive critical.
            failure_at: Natural roll at or below which the roll is a negative critical.

        Returns:
            D20Roll with the natural value and critical outcome.
        """
        value = self.roll_range(1, D20_SIDES)
        if value >= success_at:
            critical = CriticalOutcome.POSITIVE
        elif value <= failure_at:
            critical = CriticalOutcome.NEGATIVE
        else:
            critical = CriticalOutcome.NONE

        logger.debug("d20 rolled", value=value, critical=critical.value)
        return D20Roll(value=value, critical=critical)


__all__ = [
    "D20Roll",
    "DiceRoller",
]
