"""Tests for battle log replay."""

from __future__ import annotations

import pytest

from colosseum.core.config import BattleSettings
from colosseum.core.exceptions import ReplayError
from colosseum.engine.random_source import ScriptedRandomSource, SeededRandomSource
from colosseum.engine.replay import replay, verify_record
from colosseum.engine.turn_engine import TurnEngine
from colosseum.models import (
    BattleCompleted,
    BattleRecord,
    Combatant,
    DamageApplied,
    Side,
)


@pytest.fixture
def finished_engine(
    dummy: Combatant,
    shadow: Combatant,
    plain_rules: BattleSettings,
) -> TurnEngine:
    """Provide the reference Dummy vs Shadow battle, already run."""
    engine = TurnEngine(
        dummy,
        shadow,
        ScriptedRandomSource([0.0, 0.999999]),
        rules=plain_rules,
        first_side=Side.A,
    )
    engine.run()
    return engine


@pytest.fixture
def completed_record(finished_engine: TurnEngine) -> BattleRecord:
    """Provide a completed record of the reference battle."""
    return BattleRecord.pending("battle_1", "Dummy", "Shadow").complete(
        finished_engine.log, finished_engine.starting_snapshots
    )


class TestReplay:
    """Tests for folding a log over snapshots."""

    def test_reconstructs_final_health(self, finished_engine: TurnEngine) -> None:
        """Test that replay reaches the engine's final state."""
        result = replay(finished_engine.starting_snapshots, finished_engine.log)

        assert result.completed
        assert result.winner == "Shadow"
        assert result.final_health == {
            "Dummy": finished_engine.fighter(Side.A).health,
            "Shadow": finished_engine.fighter(Side.B).health,
        }
        assert len(result.frames) == len(finished_engine.log)

    def test_frames_track_health(self, finished_engine: TurnEngine) -> None:
        """Test intermediate health after the first hit."""
        result = replay(finished_engine.starting_snapshots, finished_engine.log)

        first_hit = next(f for f in result.frames if isinstance(f.event, DamageApplied))
        assert first_hit.health == {"Dummy": 25, "Shadow": 40}

    def test_replay_is_repeatable(self, mage: Combatant, shadow: Combatant) -> None:
        """Test that replaying twice gives the same frames."""
        engine = TurnEngine(mage, shadow, SeededRandomSource(5))
        engine.run()

        first = replay(engine.starting_snapshots, engine.log)
        second = replay(engine.starting_snapshots, engine.log)

        assert first.frames == second.frames

    def test_snapshots_are_not_mutated(self, finished_engine: TurnEngine) -> None:
        """Test that replay folds over copies."""
        snapshots = finished_engine.starting_snapshots

        replay(snapshots, finished_engine.log)

        assert [s.health for s in snapshots] == [25, 45]

    def test_unknown_target(self, dummy: Combatant, shadow: Combatant) -> None:
        """Test that an event for a stranger is rejected."""
        events = [DamageApplied(turn=1, actor="Dummy", target="Ghost", amount=1, health_after=0)]

        with pytest.raises(ReplayError, match="Ghost"):
            replay([dummy, shadow], events)

    def test_health_mismatch(self, dummy: Combatant, shadow: Combatant) -> None:
        """Test that a recorded health_after must match the fold."""
        events = [DamageApplied(turn=1, actor="Dummy", target="Shadow", amount=5, health_after=30)]

        with pytest.raises(ReplayError):
            replay([dummy, shadow], events)

    def test_event_after_completion(self, finished_engine: TurnEngine) -> None:
        """Test that nothing may follow the completion event."""
        events = [*finished_engine.log, finished_engine.log[-2]]

        with pytest.raises(ReplayError, match="follows"):
            replay(finished_engine.starting_snapshots, events)


class TestVerifyRecord:
    """Tests for checking a stored record against its log."""

    def test_valid_record(self, completed_record: BattleRecord) -> None:
        """Test that an untouched record verifies."""
        result = verify_record(completed_record)
        assert result.winner == completed_record.winner

    def test_pending_record(self) -> None:
        """Test that a pending record has nothing to verify."""
        with pytest.raises(ReplayError, match="not been run"):
            verify_record(BattleRecord.pending("battle_1", "Dummy", "Shadow"))

    def test_tampered_final_health(
        self,
        finished_engine: TurnEngine,
    ) -> None:
        """Test that a doctored completion event is detected."""
        completion = finished_engine.log[-1]
        assert isinstance(completion, BattleCompleted)
        doctored = completion.model_copy(update={"final_health": {"Dummy": 0, "Shadow": 45}})
        record = BattleRecord.pending("battle_1", "Dummy", "Shadow").complete(
            [*finished_engine.log[:-1], doctored], finished_engine.starting_snapshots
        )

        with pytest.raises(ReplayError, match="disagrees"):
            verify_record(record)
