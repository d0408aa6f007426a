"""SQLite-backed key-value store."""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from typing import List, Optional

from .base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class SqliteKeyValueStore(KeyValueStore):
    """Persistent key-value storage backed by a single SQLite table.

    A new connection is opened for every operation, so one instance can be
    shared between request handlers and the worker threads they spawn.
    """

    name = "sqlite"

    def __init__(self, storage_path: str, timeout: float = 5.0):
        self.storage_path = storage_path
        self.timeout = timeout
        os.makedirs(self.storage_path, mode=0o755, exist_ok=True)
        self.db_path = os.path.join(self.storage_path, "kv.db")
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize key-value database {self.db_path}: {e}")
            raise StorageError(f"Failed to initialize key-value database: {e}") from e

    def put(self, key: str, value: str) -> None:
        """Upsert value by key."""
        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, updated_at),
                )
        except (sqlite3.Error, UnicodeError) as e:
            logger.error(f"Failed to store key {key} in SQLite: {e}")
            raise StorageError(str(e)) from e

    def get(self, key: str) -> Optional[str]:
        """Get value by key from SQLite."""
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT value FROM kv WHERE key = ?",
                    (key,),
                ).fetchone()
        except (sqlite3.Error, UnicodeError) as e:
            logger.error(f"Failed to read key {key} from SQLite: {e}")
            raise StorageError(str(e)) from e

        if row:
            return row["value"]
        return None

    def list(self, prefix: str = "") -> List[str]:
        """Return keys starting with prefix, in key order."""
        # BINARY collation orders UTF-8 by code point, matching sorted()
        try:
            with closing(self._connect()) as conn:
                if prefix:
                    rows = conn.execute(
                        "SELECT key FROM kv WHERE substr(key, 1, length(?)) = ? ORDER BY key",
                        (prefix, prefix),
                    ).fetchall()
                else:
                    rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        except (sqlite3.Error, UnicodeError) as e:
            logger.error(f"Failed to list keys with prefix {prefix!r} from SQLite: {e}")
            raise StorageError(str(e)) from e

        return [row["key"] for row in rows]

    def delete(self, key: str) -> None:
        """Delete key. Deleting a missing key is a no-op."""
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except (sqlite3.Error, UnicodeError) as e:
            logger.error(f"Failed to delete key {key} from SQLite: {e}")
            raise StorageError(str(e)) from e

    def __repr__(self) -> str:
        return f"SqliteKeyValueStore({self.db_path!r})"
