"""SQLite database service."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Generator

logger = structlog.get_logger(__name__)


class Database:
    """SQLite database service with schema management.

    The connection runs in autocommit mode; writes go through ``transaction()``,
    which takes an immediate (write) lock so each read-modify-write is
    single-writer. The connection is shared between threads, serialized by an
    internal re-entrant lock.
    """

    def __init__(self, db_path: str = "data/uptime.db") -> None:
        self.db_path = db_path
        self._ensure_directory()
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def _ensure_directory(self) -> None:
        """Ensure the parent directory of the database file exists."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        with self._lock:
            if self._connection is None:
                self._connection = sqlite3.connect(
                    self.db_path,
                    isolation_level=None,
                    check_same_thread=False,
                    timeout=30.0,
                )
                self._connection.row_factory = sqlite3.Row
                self._connection.execute("PRAGMA journal_mode=WAL")
                self._connection.execute("PRAGMA foreign_keys=ON")
            return self._connection

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open on the connection."""
        return self._connection is not None and self._connection.in_transaction

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Context manager for write transactions (BEGIN IMMEDIATE ... COMMIT)."""
        with self._lock:
            conn = self.connection
            if conn.in_transaction:
                msg = "nested transactions are not supported"
                raise RuntimeError(msg)
            conn.execute("BEGIN IMMEDIATE")
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def execute(self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement."""
        with self._lock:
            return self.connection.execute(sql, params)

    def fetchone(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> sqlite3.Row | None:
        """Execute and fetch one row."""
        with self._lock:
            cursor = self.connection.execute(sql, params)
            return cursor.fetchone()

    def fetchall(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> list[sqlite3.Row]:
        """Execute and fetch all rows."""
        with self._lock:
            cursor = self.connection.execute(sql, params)
            return cursor.fetchall()

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def init_db(self) -> None:
        """Initialize database schema. Creates all tables and indexes."""
        logger.info("initializing_database", path=self.db_path)

        with self.transaction() as cursor:
            # monitor_targets table (owned by the account system; read-mostly here)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS monitor_targets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL,
                    name TEXT,
                    confirmation_threshold INTEGER NOT NULL DEFAULT 2
                        CHECK (confirmation_threshold >= 1),
                    monitoring_enabled INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_monitor_targets_url ON monitor_targets(url)"
            )

            # availability_states table: one row per target
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS availability_states (
                    target_id INTEGER PRIMARY KEY,
                    state TEXT NOT NULL CHECK (state IN ('UP', 'DOWN')),
                    consecutive_failures INTEGER NOT NULL DEFAULT 0,
                    consecutive_successes INTEGER NOT NULL DEFAULT 0,
                    last_outcome TEXT NOT NULL,
                    last_http_status INTEGER,
                    last_latency_ms INTEGER,
                    last_final_url TEXT,
                    last_observed_at TEXT NOT NULL,
                    changed_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    CHECK (consecutive_failures = 0 OR consecutive_successes = 0),
                    FOREIGN KEY (target_id)
                        REFERENCES monitor_targets(id) ON DELETE CASCADE
                )
            """)

            # transition_events table: append-only
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS transition_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    target_id INTEGER NOT NULL,
                    from_state TEXT NOT NULL,
                    to_state TEXT NOT NULL,
                    reason_outcome TEXT NOT NULL,
                    reason_http_status INTEGER,
                    observed_at TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (target_id)
                        REFERENCES monitor_targets(id) ON DELETE CASCADE
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_transition_events_target_id"
                " ON transition_events(target_id, created_at)"
            )

            # content_snapshots table: append-only backward-linked chain per target
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS content_snapshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    target_id INTEGER NOT NULL,
                    sequence_number INTEGER NOT NULL,
                    body TEXT NOT NULL,
                    body_size INTEGER NOT NULL,
                    status_code INTEGER,
                    headers TEXT NOT NULL,
                    previous_snapshot_id INTEGER,
                    diff_summary TEXT NOT NULL,
                    change_level TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (target_id)
                        REFERENCES monitor_targets(id) ON DELETE CASCADE,
                    FOREIGN KEY (previous_snapshot_id)
                        REFERENCES content_snapshots(id) ON DELETE SET NULL,
                    UNIQUE(target_id, sequence_number)
                )
            """)
            cursor.execute(
                "CREATE UNIQUE INDEX IF NOT EXISTS idx_content_snapshots_previous"
                " ON content_snapshots(previous_snapshot_id)"
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_content_snapshots_created_at"
                " ON content_snapshots(created_at)"
            )

            # processing_errors table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS processing_errors (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entity_type TEXT NOT NULL,
                    entity_id INTEGER,
                    error_type TEXT NOT NULL,
                    error_message TEXT NOT NULL,
                    occurred_at TEXT NOT NULL
                )
            """)

        logger.info("database_initialized", path=self.db_path)
