"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from colosseum.core.config import (
    BattleSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from colosseum.core.exceptions import ConfigurationError


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_paths(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default storage paths."""
        monkeypatch.chdir(tmp_path)

        settings = StorageSettings()

        assert settings.database_path == Path("data/colosseum.db")
        assert settings.fighters_path == Path("data/fighters.json")

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the database path comes from the environment."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("COLOSSEUM_DATABASE_PATH", str(tmp_path / "arena.db"))

        assert StorageSettings().database_path == tmp_path / "arena.db"

    def test_user_home_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a leading ~ is expanded."""
        monkeypatch.chdir(tmp_path)

        settings = StorageSettings(database_path=Path("~/arena.db"))

        assert "~" not in str(settings.database_path)


class TestBattleSettings:
    """Tests for BattleSettings configuration."""

    def test_default_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default battle rules."""
        monkeypatch.chdir(tmp_path)

        settings = BattleSettings()

        assert settings.max_turns == 100
        assert settings.critical_hits is False
        assert settings.critical_success_roll == 20
        assert settings.critical_failure_roll == 1
        assert settings.critical_multiplier == 2.0
        assert settings.initiative_rerolls == 10

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test battle rules come from COLOSSEUM_BATTLE_ variables."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("COLOSSEUM_BATTLE_MAX_TURNS", "12")
        monkeypatch.setenv("COLOSSEUM_BATTLE_CRITICAL_HITS", "true")

        settings = BattleSettings()

        assert settings.max_turns == 12
        assert settings.critical_hits is True

    def test_critical_roll_validation(self) -> None:
        """Test that the failure roll must sit below the success roll."""
        with pytest.raises(ConfigurationError) as exc_info:
            BattleSettings(critical_success_roll=10, critical_failure_roll=10)

        assert "critical_failure_roll" in str(exc_info.value)


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "Colosseum"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "WARNING"
        assert settings.battle.max_turns == 100

    def test_log_level_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test log level setting."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("COLOSSEUM_LOG_LEVEL", "DEBUG")

        assert Settings().log_level == "DEBUG"


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_cached_instance(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that get_settings returns the same instance."""
        monkeypatch.chdir(tmp_path)

        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that clearing the cache picks up new environment values."""
        monkeypatch.chdir(tmp_path)
        first = get_settings()

        monkeypatch.setenv("COLOSSEUM_DEBUG", "true")
        clear_settings_cache()

        second = get_settings()
        assert second is not first
        assert second.debug is True

    def test_invalid_env_raises_configuration_error(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that load failures are reported as ConfigurationError."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("COLOSSEUM_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
