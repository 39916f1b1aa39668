"""Integration tests for the full battle lifecycle.

Fighters are imported from a file, battles are created pending, watched
(which runs them), reopened from disk and replayed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from colosseum.core.config import BattleSettings
from colosseum.engine.replay import replay, verify_record
from colosseum.models import BattleCompleted, BattleStatus
from colosseum.services.arena import Arena
from colosseum.storage.store import BattleStore


@pytest.fixture
def fighters_file(
    tmp_path: Path,
    dummy_data: dict[str, Any],
    shadow_data: dict[str, Any],
    mage_data: dict[str, Any],
) -> Path:
    """Write a fighter file holding three fighters."""
    path = tmp_path / "fighters.json"
    path.write_text(json.dumps([dummy_data, shadow_data, mage_data]), encoding="utf-8")
    return path


class TestBattleLifecycle:
    """Tests for pending → completed → replayed."""

    def test_watch_then_reopen_and_replay(self, db_path: Path, fighters_file: Path) -> None:
        """Test that a watched battle replays identically after a reopen."""
        rules = BattleSettings(max_turns=80)
        arena = Arena(BattleStore(db_path), rules=rules)
        arena.import_fighters(fighters_file)
        pending = arena.create_battle("Mage", "Shadow")

        watched = arena.watch_battle(pending.id, seed=21)

        reopened = Arena(BattleStore(db_path), rules=rules)
        stored = reopened.store.get_battle(pending.id)
        assert stored == watched
        assert stored.status is BattleStatus.COMPLETED

        completion = stored.events[-1]
        assert isinstance(completion, BattleCompleted)
        result = replay(stored.snapshots, stored.events)
        assert result.final_health == completion.final_health
        assert result.winner == stored.winner

        assert reopened.watch_battle(pending.id) == watched

    def test_many_random_battles_verify(self, db_path: Path, fighters_file: Path) -> None:
        """Test that every watched random battle passes verification."""
        arena = Arena(BattleStore(db_path), rules=BattleSettings(max_turns=50))
        arena.import_fighters(fighters_file)

        for record in arena.create_random_battles(10, seed=3):
            arena.watch_battle(record.id, seed=int(record.id.removeprefix("battle_")) % 1000)

        assert arena.list_battles(pending_only=True) == []
        for summary in arena.list_battles():
            verify_record(arena.store.get_battle(summary.id))
