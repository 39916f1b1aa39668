"""Configuration management for Colosseum.

This module provides centralized configuration management using
pydantic-settings, supporting environment variables, .env files, and
runtime configuration overrides.

Example:
    >>> from colosseum.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.battle.max_turns)
    100

Environment Variables:
    COLOSSEUM_DATABASE_PATH: Path to the SQLite database file
    COLOSSEUM_FIGHTERS_PATH: Default fighter definition file for imports
    COLOSSEUM_BATTLE_MAX_TURNS: Turn cap after which a battle is a draw
    COLOSSEUM_BATTLE_CRITICAL_HITS: Enable d20 critical rolls
    COLOSSEUM_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from colosseum.core.constants import D20_SIDES
from colosseum.core.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Configuration for persistence paths.

    Attributes:
        database_path: Path to the SQLite database holding fighters and battles.
        fighters_path: Default JSON file read by ``fighter import``.
    """

    model_config = SettingsConfigDict(
        env_prefix="COLOSSEUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/colosseum.db"),
        description="Path to SQLite database",
    )
    fighters_path: Path = Field(
        default=Path("data/fighters.json"),
        description="Default fighter definition file",
    )

    @field_validator("database_path", "fighters_path", mode="after")
    @classmethod
    def expand_user(cls, value: Path) -> Path:
        """Expand a leading ``~`` in configured paths."""
        return value.expanduser()


class BattleSettings(BaseSettings):
    """Rules applied by the action resolver and turn engine.

    Attributes:
        max_turns: Total turns after which a battle with two survivors is a draw.
        critical_hits: Roll a d20 with every action for critical outcomes.
            Off unless enabled.
        critical_success_roll: Natural roll at or above which the effect is a
            positive critical.
        critical_failure_roll: Natural roll at or below which the effect is a
            negative critical.
        critical_multiplier: Factor applied to the raw effect on a positive
            critical.
        initiative_rerolls: Tied initiative re-rolls before side A goes first.
    """

    model_config = SettingsConfigDict(
        env_prefix="COLOSSEUM_BATTLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_turns: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Turn cap before a draw",
    )
    critical_hits: bool = Field(
        default=False,
        description="Enable critical rolls",
    )
    critical_success_roll: int = Field(
        default=20,
        ge=1,
        le=D20_SIDES,
        description="Natural roll for a positive critical",
    )
    critical_failure_roll: int = Field(
        default=1,
        ge=1,
        le=D20_SIDES,
        description="Natural roll for a negative critical",
    )
    critical_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Raw effect multiplier on a positive critical",
    )
    initiative_rerolls: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Re-rolls allowed on tied initiative",
    )

    @model_validator(mode="after")
    def validate_critical_rolls(self) -> "BattleSettings":
        """Ensure the failure roll sits strictly below the success roll.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the two critical ranges overlap.
        """
        if self.critical_failure_roll >= self.critical_success_roll:
            raise ConfigurationError(
                f"critical_failure_roll ({self.critical_failure_roll}) must be less than "
                f"critical_success_roll ({self.critical_success_roll})",
                config_key="critical_failure_roll",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit JSON log lines instead of console output.
        storage: Persistence settings.
        battle: Battle rule settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="COLOSSEUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Colosseum",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON logs",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    battle: BattleSettings = Field(default_factory=BattleSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "StorageSettings",
    "BattleSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
