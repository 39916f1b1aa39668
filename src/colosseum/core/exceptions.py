"""Custom exception hierarchy for the Colosseum battle engine.

This module defines the exception hierarchy shared by every layer of the
application. All exceptions inherit from ColosseumError, enabling unified
error handling at the CLI boundary while preserving domain-specific context.

Example:
    >>> from colosseum.core.exceptions import NotFoundError
    >>> raise NotFoundError("Fighter not found", kind="fighter", key="Dummy")
"""

from __future__ import annotations

from typing import Any


class ColosseumError(Exception):
    """Base exception for all Colosseum errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(ColosseumError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(ColosseumError):
    """Raised when a fighter definition or other input fails validation.

    Validation errors are always surfaced to the caller; values are never
    clamped or corrected on the caller's behalf.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Storage Exceptions
# =============================================================================


class StoreError(ColosseumError):
    """Base exception for battle store errors."""

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize store error with the offending collection and key.

        Args:
            message: Human-readable error description.
            kind: Collection involved ('fighter' or 'battle').
            key: Fighter name or battle id involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if kind:
            combined_details["kind"] = kind
        if key:
            combined_details["key"] = key
        super().__init__(message, details=combined_details)


class NotFoundError(StoreError):
    """Raised when a fighter name or battle id is unknown."""


class DuplicateError(StoreError):
    """Raised when a fighter name or battle id is already taken."""


class PersistenceError(StoreError):
    """Raised when reading or writing the persistence medium fails.

    The store guarantees the medium holds either the old or the new
    version of both collections when this is raised.
    """


# =============================================================================
# Battle Engine Exceptions
# =============================================================================


class BattleEngineError(ColosseumError):
    """Base exception for turn engine, resolver and replay errors."""

    def __init__(
        self,
        message: str,
        *,
        combatant: str | None = None,
        turn: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize engine error with battle context.

        Args:
            message: Human-readable error description.
            combatant: Name of the combatant involved.
            turn: Turn number when the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant:
            combined_details["combatant"] = combatant
        if turn is not None:
            combined_details["turn"] = turn
        super().__init__(message, details=combined_details)


class InvalidActionError(BattleEngineError):
    """Raised when a supplied player action cannot be performed.

    The turn state is left unchanged and no event is emitted.
    """


class InvalidBattleStateError(BattleEngineError):
    """Raised when an engine operation is requested in the wrong phase."""

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error with phase context.

        Args:
            message: Human-readable error description.
            current_state: The current phase identifier.
            expected_states: Phases in which the operation is allowed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class BattleInvariantError(BattleEngineError):
    """Raised when a defeated combatant is asked to act.

    This is a programmer error. It is not reachable through the public
    engine API and callers should not try to recover from it.
    """


class ReplayError(BattleEngineError):
    """Raised when a stored battle log disagrees with its battle record."""


__all__ = [
    # Base exception
    "ColosseumError",
    # Configuration & validation
    "ConfigurationError",
    "ValidationError",
    # Storage
    "StoreError",
    "NotFoundError",
    "DuplicateError",
    "PersistenceError",
    # Battle engine
    "BattleEngineError",
    "InvalidActionError",
    "InvalidBattleStateError",
    "BattleInvariantError",
    "ReplayError",
]
