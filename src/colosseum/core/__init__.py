"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        ColosseumError: Base exception for all application errors.
        ValidationError, NotFoundError, DuplicateError, PersistenceError,
        InvalidActionError and the rest of the hierarchy.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        configure_from_settings: Set up logging from Settings.
        battle_context: Tag log entries with a battle id.
"""

from __future__ import annotations

from colosseum.core.config import (
    BattleSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
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
from colosseum.core.logging import (
    battle_context,
    configure_from_settings,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "ColosseumError",
    # Configuration & validation exceptions
    "ConfigurationError",
    "ValidationError",
    # Storage exceptions
    "StoreError",
    "NotFoundError",
    "DuplicateError",
    "PersistenceError",
    # Battle engine exceptions
    "BattleEngineError",
    "InvalidActionError",
    "InvalidBattleStateError",
    "BattleInvariantError",
    "ReplayError",
    # Configuration
    "Settings",
    "StorageSettings",
    "BattleSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "configure_from_settings",
    "battle_context",
]
