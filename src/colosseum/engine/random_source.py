"""Randomness sources for the battle engine.

The engine never touches a process-wide generator. Every random decision
is a draw from a ``RandomSource`` handed to it by the caller, which makes
battles reproducible under a seed and fully scriptable in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from random import Random
from typing import Protocol, runtime_checkable

from colosseum.core.exceptions import BattleEngineError, ValidationError


@runtime_checkable
class RandomSource(Protocol):
    """Anything that draws uniform floats in [0, 1).

    ``random.Random`` instances satisfy this protocol.
    """

    def random(self) -> float:
        """Return the next uniform draw in the range [0.0, 1.0)."""
        ...


class SeededRandomSource:
    """Deterministic source built on top of random.Random."""

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._random = Random(seed)

    def random(self) -> float:
        return self._random.random()

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed!r})"


class ScriptedRandomSource:
    """Source that replays a fixed list of draws.

    Example:
        >>> source = ScriptedRandomSource([0.0, 0.999999])
        >>> source.random(), source.random(), source.random()
        (0.0, 0.999999, 0.0)
    """

    def __init__(self, values: Sequence[float], *, cycle: bool = True) -> None:
        """Initialize the scripted source.

        Args:
            values: Draws to return, in order.
            cycle: Start over when the values run out instead of failing.

        Raises:
            ValidationError: If values is empty or a value is outside [0, 1).
        """
        if not values:
            raise ValidationError("Scripted random source needs at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValidationError(
                    "Scripted draws must lie in [0, 1)",
                    field_name="values",
                    invalid_value=value,
                )
        self._values = tuple(values)
        self._cycle = cycle
        self._position = 0

    @property
    def draws_taken(self) -> int:
        return self._position

    def random(self) -> float:
        """Return the next scripted draw.

        Raises:
            BattleEngineError: If the script is exhausted and not cycling.
        """
        if self._position >= len(self._values) and not self._cycle:
            raise BattleEngineError(
                "Scripted random source exhausted",
                details={"draws": self._position},
            )
        value = self._values[self._position % len(self._values)]
        self._position += 1
        return value


__all__ = [
    "RandomSource",
    "SeededRandomSource",
    "ScriptedRandomSource",
]
