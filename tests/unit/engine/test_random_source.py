"""Tests for randomness sources."""

from __future__ import annotations

from random import Random

import pytest

from colosseum.core.exceptions import BattleEngineError, ValidationError
from colosseum.engine.random_source import (
    RandomSource,
    ScriptedRandomSource,
    SeededRandomSource,
)


class TestSeededRandomSource:
    """Tests for the seeded source."""

    def test_same_seed_same_draws(self) -> None:
        """Test that equal seeds give equal sequences."""
        first = SeededRandomSource(42)
        second = SeededRandomSource(42)

        assert [first.random() for _ in range(10)] == [second.random() for _ in range(10)]

    def test_draws_in_unit_interval(self) -> None:
        """Test that draws lie in [0, 1)."""
        source = SeededRandomSource(7)
        assert all(0.0 <= source.random() < 1.0 for _ in range(200))

    def test_satisfies_protocol(self) -> None:
        """Test protocol conformance of our sources and random.Random."""
        assert isinstance(SeededRandomSource(1), RandomSource)
        assert isinstance(ScriptedRandomSource([0.5]), RandomSource)
        assert isinstance(Random(1), RandomSource)


class TestScriptedRandomSource:
    """Tests for the scripted source."""

    def test_cycles_values(self) -> None:
        """Test that values repeat when cycling."""
        source = ScriptedRandomSource([0.0, 0.999999])

        assert [source.random() for _ in range(5)] == [0.0, 0.999999, 0.0, 0.999999, 0.0]
        assert source.draws_taken == 5

    def test_exhaustion_without_cycle(self) -> None:
        """Test that a non-cycling source fails when exhausted."""
        source = ScriptedRandomSource([0.25], cycle=False)
        source.random()

        with pytest.raises(BattleEngineError, match="exhausted"):
            source.random()

    def test_empty_rejected(self) -> None:
        """Test that an empty script is rejected."""
        with pytest.raises(ValidationError):
            ScriptedRandomSource([])

    @pytest.mark.parametrize("value", [-0.1, 1.0, 1.5])
    def test_out_of_range_rejected(self, value: float) -> None:
        """Test that values outside [0, 1) are rejected."""
        with pytest.raises(ValidationError):
            ScriptedRandomSource([0.5, value])
