"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from colosseum.core.exceptions import (
    BattleEngineError,
    BattleInvariantError,
    ColosseumError,
    ConfigurationError,
    DuplicateError,
    InvalidActionError,
    InvalidBattleStateError,
    NotFoundError,
    PersistenceError,
    ReplayError,
    StoreError,
    ValidationError,
)


class TestColosseumError:
    """Tests for the base ColosseumError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = ColosseumError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = ColosseumError("Test error", details={"key": "value", "count": 42})
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        repr_str = repr(ColosseumError("Test", details={"x": 1}))
        assert "ColosseumError" in repr_str
        assert "Test" in repr_str
        assert "x" in repr_str


class TestValidationExceptions:
    """Tests for configuration and validation exceptions."""

    def test_configuration_error_key(self) -> None:
        """Test ConfigurationError records the offending key."""
        exc = ConfigurationError("Bad value", config_key="max_turns")
        assert exc.details["config_key"] == "max_turns"

    def test_validation_error_field_and_value(self) -> None:
        """Test ValidationError records field and value."""
        exc = ValidationError("Invalid health", field_name="health", invalid_value=-5)
        assert exc.details["field_name"] == "health"
        assert exc.details["invalid_value"] == -5

    def test_validation_error_keeps_falsy_value(self) -> None:
        """Test that a zero invalid value is still recorded."""
        exc = ValidationError("Invalid", field_name="power", invalid_value=0)
        assert exc.details["invalid_value"] == 0


class TestStoreExceptions:
    """Tests for store-related exceptions."""

    @pytest.mark.parametrize("exc_class", [NotFoundError, DuplicateError, PersistenceError])
    def test_inherits_from_store_error(self, exc_class: type[StoreError]) -> None:
        """Test that store exceptions share a base."""
        exc = exc_class("Failed", kind="fighter", key="Dummy")
        assert isinstance(exc, StoreError)
        assert isinstance(exc, ColosseumError)
        assert exc.details == {"kind": "fighter", "key": "Dummy"}


class TestEngineExceptions:
    """Tests for battle engine exceptions."""

    def test_engine_error_context(self) -> None:
        """Test BattleEngineError records combatant and turn."""
        exc = BattleEngineError("Failed", combatant="Shadow", turn=0)
        assert exc.details == {"combatant": "Shadow", "turn": 0}

    def test_invalid_state_error(self) -> None:
        """Test InvalidBattleStateError records the phases."""
        exc = InvalidBattleStateError(
            "Wrong phase",
            current_state="complete",
            expected_states=["side_a_turn", "side_b_turn"],
        )
        assert exc.details["current_state"] == "complete"
        assert exc.details["expected_states"] == ["side_a_turn", "side_b_turn"]

    @pytest.mark.parametrize(
        "exc_class",
        [InvalidActionError, InvalidBattleStateError, BattleInvariantError, ReplayError],
    )
    def test_inherits_from_engine_error(self, exc_class: type[BattleEngineError]) -> None:
        """Test that engine exceptions share a base."""
        assert issubclass(exc_class, BattleEngineError)
        assert issubclass(exc_class, ColosseumError)
