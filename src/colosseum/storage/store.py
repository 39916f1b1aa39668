"""SQLite persistence for fighters and battles.

The BattleStore keeps both collections in memory and writes them back
together. A save rewrites the ``fighters`` and ``battles`` tables inside
a single SQLite transaction, so the database file always holds either
the previous or the new version of both.

Storage location: ``COLOSSEUM_DATABASE_PATH`` (default data/colosseum.db)
"""

from __future__ import annotations

import json
import sqlite3
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from colosseum.core.config import get_settings
from colosseum.core.constants import BATTLE_ID_PREFIX
from colosseum.core.exceptions import (
    ColosseumError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
)
from colosseum.core.logging import get_logger
from colosseum.models.combatant import Combatant
from colosseum.models.events import battle_log_adapter
from colosseum.models.records import BattleRecord, BattleSummary


logger = get_logger(__name__)


class BattleStore:
    """Fighter and battle store backed by one SQLite file.

    Mutating operations change the in-memory collections only. Run them
    inside ``transaction()``, which reloads, mutates and saves while holding
    both the store lock and the SQLite write lock.

    Example:
        >>> store = BattleStore("data/colosseum.db")
        >>> with store.transaction():
        ...     store.add_fighter(shadow)
    """

    SCHEMA_VERSION = 1
    LOCK_TIMEOUT_SECONDS = 10.0

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Open the store and load both collections.

        Args:
            db_path: Path to the database file. If None, uses the configured path.

        Raises:
            PersistenceError: If the database cannot be created or read.
        """
        if db_path is None:
            db_path = get_settings().storage.database_path
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        self._fighters: dict[str, Combatant] = {}
        self._battles: dict[str, BattleRecord] = {}
        self._last_id_ns = 0
        self._in_transaction = False

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(
                f"Cannot open battle store at {self.db_path}: {exc}",
            ) from exc
        self.reload()

        logger.info(
            "Battle store opened",
            path=str(self.db_path),
            fighters=len(self._fighters),
            battles=len(self._battles),
        )

    # =========================================================================
    # Connection & Schema
    # =========================================================================

    @contextmanager
    def _get_connection(self, *, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """Get a connection inside one transaction that commits on success.

        Args:
            immediate: Take the database write lock when the transaction
                begins instead of at the first write.
        """
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.LOCK_TIMEOUT_SECONDS,
            isolation_level=None,
        )
        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection(immediate=True) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS fighters (
                    name TEXT PRIMARY KEY,
                    definition_json TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS battles (
                    id TEXT PRIMARY KEY,
                    fighter1_name TEXT NOT NULL,
                    fighter2_name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    is_completed INTEGER NOT NULL,
                    winner TEXT,
                    events_json TEXT NOT NULL,
                    snapshots_json TEXT NOT NULL
                )
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Row Conversion
    # =========================================================================

    @staticmethod
    def _battle_row(record: BattleRecord) -> tuple[Any, ...]:
        return (
            record.id,
            record.fighter1_name,
            record.fighter2_name,
            record.created_at.isoformat(),
            int(record.is_completed),
            record.winner,
            battle_log_adapter.dump_json(record.events).decode("utf-8"),
            json.dumps([snapshot.to_definition() for snapshot in record.snapshots]),
        )

    @staticmethod
    def _battle_from_row(row: tuple[Any, ...]) -> BattleRecord:
        return BattleRecord(
            id=row[0],
            fighter1_name=row[1],
            fighter2_name=row[2],
            created_at=row[3],
            is_completed=bool(row[4]),
            winner=row[5],
            events=battle_log_adapter.validate_json(row[6]),
            snapshots=[Combatant.from_definition(item) for item in json.loads(row[7])],
        )

    # =========================================================================
    # Load & Save
    # =========================================================================

    @staticmethod
    def _fetch_rows(
        conn: sqlite3.Connection,
    ) -> tuple[list[tuple[Any, ...]], list[tuple[Any, ...]]]:
        fighters = conn.execute(
            "SELECT name, definition_json FROM fighters ORDER BY name"
        ).fetchall()
        battles = conn.execute("""
            SELECT id, fighter1_name, fighter2_name, created_at, is_completed,
                   winner, events_json, snapshots_json
            FROM battles ORDER BY created_at, id
        """).fetchall()
        return fighters, battles

    def _apply_rows(
        self,
        fighter_rows: list[tuple[Any, ...]],
        battle_rows: list[tuple[Any, ...]],
    ) -> None:
        """Decode database rows into the in-memory collections.

        Nothing is replaced unless every row decodes.
        """
        try:
            fighters = {
                row[0]: Combatant.from_definition(json.loads(row[1]))
                for row in fighter_rows
            }
            battles = {row[0]: self._battle_from_row(row) for row in battle_rows}
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            raise PersistenceError(f"Failed to load battle store: {exc}") from exc
        except ColosseumError as exc:
            raise PersistenceError(
                f"Battle store holds an invalid row: {exc.message}",
                details=exc.details,
            ) from exc

        self._fighters = fighters
        self._battles = battles
        logger.debug("Battle store loaded", fighters=len(fighters), battles=len(battles))

    def _insert_rows(self, conn: sqlite3.Connection) -> None:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM fighters")
        cursor.executemany(
            "INSERT INTO fighters (name, definition_json) VALUES (?, ?)",
            [
                (name, json.dumps(fighter.to_definition()))
                for name, fighter in self._fighters.items()
            ],
        )
        cursor.execute("DELETE FROM battles")
        cursor.executemany(
            """
            INSERT INTO battles
            (id, fighter1_name, fighter2_name, created_at, is_completed,
             winner, events_json, snapshots_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [self._battle_row(record) for record in self._battles.values()],
        )

    @retry(
        retry=retry_if_exception_type(sqlite3.OperationalError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        reraise=True,
    )
    def _read_rows(self) -> tuple[list[tuple[Any, ...]], list[tuple[Any, ...]]]:
        with self._get_connection() as conn:
            return self._fetch_rows(conn)

    @retry(
        retry=retry_if_exception_type(sqlite3.OperationalError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        reraise=True,
    )
    def _write_rows(self) -> None:
        with self._get_connection(immediate=True) as conn:
            self._insert_rows(conn)

    def reload(self) -> None:
        """Replace the in-memory collections with the persisted state.

        Raises:
            PersistenceError: If the database cannot be read or holds
                invalid rows.
        """
        with self._lock:
            try:
                fighter_rows, battle_rows = self._read_rows()
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to load battle store: {exc}") from exc
            self._apply_rows(fighter_rows, battle_rows)

    def save(self) -> None:
        """Overwrite the database with both in-memory collections.

        Writes exactly what is in memory: rows other stores committed since
        the last load are dropped. Prefer ``transaction()``.

        Raises:
            PersistenceError: If the write fails. The database keeps the
                previously saved version of both collections.
        """
        with self._lock:
            try:
                self._write_rows()
            except sqlite3.Error as exc:
                logger.error("Battle store save failed", error=str(exc))
                raise PersistenceError(f"Failed to save battle store: {exc}") from exc
            logger.debug(
                "Battle store saved",
                fighters=len(self._fighters),
                battles=len(self._battles),
            )

    @contextmanager
    def transaction(self) -> Iterator[BattleStore]:
        """Run a load-mutate-save cycle under the database write lock.

        The SQLite write lock is taken first, then both collections are
        reloaded, so the body sees every change committed by other stores
        and no other store can commit until the body's changes are written.
        On any error nothing is written and the in-memory collections go
        back to the state loaded at entry.

        Raises:
            PersistenceError: If the database cannot be locked, read or
                written.
        """
        with self._lock:
            if self._in_transaction:
                # Nested: the outer transaction already holds the write lock.
                yield self
                return

            previous = (dict(self._fighters), dict(self._battles))
            self._in_transaction = True
            try:
                with self._get_connection(immediate=True) as conn:
                    self._apply_rows(*self._fetch_rows(conn))
                    previous = (dict(self._fighters), dict(self._battles))
                    yield self
                    self._insert_rows(conn)
            except sqlite3.Error as exc:
                self._fighters, self._battles = previous
                logger.error("Battle store transaction failed", error=str(exc))
                raise PersistenceError(f"Battle store transaction failed: {exc}") from exc
            except Exception:
                self._fighters, self._battles = previous
                raise
            finally:
                self._in_transaction = False
            logger.debug(
                "Battle store saved",
                fighters=len(self._fighters),
                battles=len(self._battles),
            )

    # =========================================================================
    # Fighter Operations
    # =========================================================================

    def add_fighter(self, fighter: Combatant) -> None:
        """Add a fighter.

        Raises:
            DuplicateError: If a fighter with the same name exists.
        """
        with self._lock:
            if fighter.name in self._fighters:
                raise DuplicateError(
                    f"A fighter named '{fighter.name}' already exists",
                    kind="fighter",
                    key=fighter.name,
                )
            self._fighters[fighter.name] = fighter.snapshot()
        logger.info("Fighter added", fighter=fighter.name)

    def get_fighter(self, name: str) -> Combatant:
        """Get a copy of a fighter by name.

        Raises:
            NotFoundError: If no fighter has this name.
        """
        with self._lock:
            fighter = self._fighters.get(name)
            if fighter is None:
                raise NotFoundError(
                    f"No fighter named '{name}'",
                    kind="fighter",
                    key=name,
                )
            return fighter.snapshot()

    def list_fighters(self) -> list[str]:
        """Fighter names, sorted."""
        with self._lock:
            return sorted(self._fighters)

    # =========================================================================
    # Battle Operations
    # =========================================================================

    def generate_battle_id(self) -> str:
        """Create a new battle id from the current time in nanoseconds.

        Ids are strictly increasing within the store.

        Raises:
            DuplicateError: If the new id is already taken by a stored
                battle. The clock or another writer produced it first.
        """
        with self._lock:
            stamp = max(time.time_ns(), self._last_id_ns + 1)
            self._last_id_ns = stamp
            battle_id = f"{BATTLE_ID_PREFIX}{stamp}"
            if battle_id in self._battles:
                raise DuplicateError(
                    f"Generated battle id '{battle_id}' is already taken",
                    kind="battle",
                    key=battle_id,
                )
            return battle_id

    def add_battle(self, record: BattleRecord) -> None:
        """Add a battle record.

        Raises:
            DuplicateError: If a battle with the same id exists.
        """
        with self._lock:
            if record.id in self._battles:
                raise DuplicateError(
                    f"A battle with id '{record.id}' already exists",
                    kind="battle",
                    key=record.id,
                )
            self._battles[record.id] = record.model_copy(deep=True)
        logger.info("Battle added", battle_id=record.id, matchup=record.matchup)

    def get_battle(self, battle_id: str) -> BattleRecord:
        """Get a copy of a battle record.

        Raises:
            NotFoundError: If no battle has this id.
        """
        with self._lock:
            record = self._battles.get(battle_id)
            if record is None:
                raise NotFoundError(
                    f"No battle with id '{battle_id}'",
                    kind="battle",
                    key=battle_id,
                )
            return record.model_copy(deep=True)

    def update_battle(self, record: BattleRecord) -> None:
        """Replace an existing battle record.

        Raises:
            NotFoundError: If no battle has the record's id.
        """
        with self._lock:
            if record.id not in self._battles:
                raise NotFoundError(
                    f"No battle with id '{record.id}'",
                    kind="battle",
                    key=record.id,
                )
            self._battles[record.id] = record.model_copy(deep=True)
        logger.info("Battle updated", battle_id=record.id, completed=record.is_completed)

    def list_summaries(self, *, pending_only: bool = False) -> list[BattleSummary]:
        """Summaries of stored battles, oldest first."""
        with self._lock:
            records = sorted(self._battles.values(), key=lambda r: (r.created_at, r.id))
            return [
                record.summary()
                for record in records
                if not (pending_only and record.is_completed)
            ]

    def clear_battles(self) -> int:
        """Remove every battle record.

        Returns:
            Number of records removed.
        """
        with self._lock:
            removed = len(self._battles)
            self._battles.clear()
        logger.info("Battles cleared", removed=removed)
        return removed


__all__ = [
    "BattleStore",
]
