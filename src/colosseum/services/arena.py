"""Arena operations.

The Arena ties the store and the turn engine together: it is the layer
the command line drives. Every operation that changes the store runs
inside ``BattleStore.transaction()``, so a failure leaves the persisted
state untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from colosseum.core.config import BattleSettings, get_settings
from colosseum.core.exceptions import BattleEngineError, ValidationError
from colosseum.core.logging import battle_context, get_logger
from colosseum.engine.dice import DiceRoller
from colosseum.engine.random_source import RandomSource, SeededRandomSource
from colosseum.engine.replay import verify_record
from colosseum.engine.turn_engine import TurnEngine, TurnStatus
from colosseum.models.combatant import Combatant
from colosseum.models.records import BattleRecord, BattleSummary
from colosseum.storage.loader import load_fighters
from colosseum.storage.store import BattleStore


logger = get_logger(__name__)

SourceFactory = Callable[[int | None], RandomSource]


class Arena:
    """Fighter and battle management on top of a BattleStore.

    Attributes:
        store: The backing store.
        rules: Battle rules applied to every battle run here.
    """

    def __init__(
        self,
        store: BattleStore,
        *,
        rules: BattleSettings | None = None,
        source_factory: SourceFactory = SeededRandomSource,
    ) -> None:
        """Initialize the arena.

        Args:
            store: The backing store.
            rules: Battle rules; defaults to the configured rules.
            source_factory: Builds the random source for a battle from an
                optional seed.
        """
        self.store = store
        self.rules = rules or get_settings().battle
        self._source_factory = source_factory

    # =========================================================================
    # Fighters
    # =========================================================================

    def create_fighter(self, definition: Mapping[str, Any] | Combatant) -> Combatant:
        """Validate and store a new fighter.

        Raises:
            ValidationError: If the definition is invalid.
            DuplicateError: If the name is taken.
        """
        fighter = Combatant.from_definition(definition)
        with self.store.transaction():
            self.store.add_fighter(fighter)
        return fighter

    def import_fighters(self, path: str | Path | None = None) -> list[Combatant]:
        """Store every fighter of a definition file, or none of them.

        Args:
            path: Fighter file; defaults to the configured fighters path.

        Raises:
            NotFoundError: If the file does not exist.
            ValidationError: If a definition is invalid.
            DuplicateError: If any name is already taken.
        """
        if path is None:
            path = get_settings().storage.fighters_path
        fighters = load_fighters(path)
        with self.store.transaction():
            for fighter in fighters:
                self.store.add_fighter(fighter)
        logger.info("Fighters imported", path=str(path), count=len(fighters))
        return fighters

    def list_fighters(self) -> list[Combatant]:
        """All stored fighters, sorted by name."""
        return [self.store.get_fighter(name) for name in self.store.list_fighters()]

    def show_fighter(self, name: str) -> Combatant:
        return self.store.get_fighter(name)

    # =========================================================================
    # Battles
    # =========================================================================

    def create_battle(
        self,
        fighter1: str,
        fighter2: str,
        *,
        run: bool = False,
        persist: bool = True,
        seed: int | None = None,
    ) -> BattleRecord:
        """Create a battle between two stored fighters.

        Args:
            fighter1: Name of the side A fighter.
            fighter2: Name of the side B fighter.
            run: Run the battle right away instead of leaving it pending.
            persist: Store the record.
            seed: Seed for the battle's random source.

        Returns:
            The new record, pending or completed.

        Raises:
            ValidationError: If both names are the same fighter.
            NotFoundError: If a fighter does not exist.
        """
        if fighter1 == fighter2:
            raise ValidationError(
                "A fighter cannot battle themselves",
                field_name="fighter2",
                invalid_value=fighter2,
            )
        side_a = self.store.get_fighter(fighter1)
        side_b = self.store.get_fighter(fighter2)

        record = BattleRecord.pending(self.store.generate_battle_id(), fighter1, fighter2)
        if run:
            record = self._run(record, side_a, side_b, seed)
        if persist:
            with self.store.transaction():
                self.store.add_battle(record)
        return record

    def create_random_battles(self, count: int, *, seed: int | None = None) -> list[BattleRecord]:
        """Create pending battles between randomly paired fighters.

        Raises:
            ValidationError: If count < 1 or fewer than two fighters exist.
        """
        if count < 1:
            raise ValidationError(
                "Battle count must be at least 1",
                field_name="count",
                invalid_value=count,
            )
        names = self.store.list_fighters()
        if len(names) < 2:
            raise ValidationError(
                f"Random battles need at least two fighters, found {len(names)}",
                field_name="fighters",
            )

        picker = DiceRoller(self._source_factory(seed))
        records: list[BattleRecord] = []
        with self.store.transaction():
            for _ in range(count):
                first = picker.roll_range(0, len(names) - 1)
                second = picker.roll_range(0, len(names) - 2)
                if second >= first:
                    second += 1
                record = BattleRecord.pending(
                    self.store.generate_battle_id(), names[first], names[second]
                )
                self.store.add_battle(record)
                records.append(record)
        logger.info("Random battles created", count=count, seed=seed)
        return records

    def list_battles(self, *, pending_only: bool = False) -> list[BattleSummary]:
        return self.store.list_summaries(pending_only=pending_only)

    def watch_battle(self, battle_id: str, *, seed: int | None = None) -> BattleRecord:
        """Get a battle's log, running the battle first if it is pending.

        A completed battle is verified by replaying its stored log and is
        returned unchanged.

        Raises:
            NotFoundError: If the battle or one of its fighters is unknown.
            ReplayError: If a stored log disagrees with its record.
        """
        with self.store.transaction():
            record = self.store.get_battle(battle_id)
            if record.is_completed:
                verify_record(record)
                return record

            side_a = self.store.get_fighter(record.fighter1_name)
            side_b = self.store.get_fighter(record.fighter2_name)
            completed = self._run(record, side_a, side_b, seed)
            self.store.update_battle(completed)
        return completed

    def clear_battles(self) -> int:
        """Delete every battle record; fighters are kept."""
        with self.store.transaction():
            return self.store.clear_battles()

    # =========================================================================
    # Internals
    # =========================================================================

    def _run(
        self,
        record: BattleRecord,
        side_a: Combatant,
        side_b: Combatant,
        seed: int | None,
    ) -> BattleRecord:
        with battle_context(record.id):
            engine = TurnEngine(side_a, side_b, self._source_factory(seed), rules=self.rules)
            result = engine.run()
            if result.status is not TurnStatus.BATTLE_COMPLETE:
                raise BattleEngineError(
                    f"Battle {record.id} stopped before completion",
                    turn=result.turn,
                    details={"status": result.status.value},
                )
            logger.info("Battle run", matchup=record.matchup, message=result.message)
            return record.complete(engine.log, engine.starting_snapshots)


__all__ = [
    "Arena",
    "SourceFactory",
]
