"""SQLite-backed persistent key-value store."""

import sqlite3
import threading
from pathlib import Path

from expiring_messages.errors import StoreError


class SQLiteStore:
    """SQLite-backed persistent key-value store.

    Expiration entries written here survive process restarts, so buckets
    scheduled before a crash are found again by the next sweep or cleanup.
    The connection is shared between the hook thread and the scheduler
    thread, so every statement runs under a lock.
    """

    def __init__(self, db_path: Path) -> None:
        """Open (and create if needed) the store.

        Args:
            db_path: Path to the SQLite database file

        Raises:
            StoreError: If the database can't be opened or initialised
        """
        self.db_path = db_path
        self._lock = threading.Lock()

        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._create_table()
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Failed to open store at {db_path}: {e}") from e

    def _create_table(self) -> None:
        """Create the key-value table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL
            )
        """)
        self._conn.commit()

    def _execute(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            with self._lock:
                cursor = self._conn.execute(sql, params)
                rows = cursor.fetchall()
                self._conn.commit()
                return rows
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    def set(self, key: str, value: bytes) -> None:
        if not key:
            raise StoreError("key must not be empty")
        self._execute(
            """
            INSERT INTO kv_store (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, bytes(value)),
        )

    def get(self, key: str) -> bytes | None:
        rows = self._execute("SELECT value FROM kv_store WHERE key = ?", (key,))
        if not rows:
            return None
        return bytes(rows[0][0])

    def delete(self, key: str) -> None:
        self._execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def list_keys(self, page: int, per_page: int) -> list[str]:
        rows = self._execute(
            "SELECT key FROM kv_store ORDER BY key LIMIT ? OFFSET ?",
            (per_page, page * per_page),
        )
        return [row[0] for row in rows]

    def list_keys_with_prefix(self, prefix: str, page: int, per_page: int) -> list[str]:
        # substr() instead of LIKE: "_" is a LIKE wildcard and appears in every bucket key
        rows = self._execute(
            """
            SELECT key FROM kv_store
            WHERE substr(key, 1, ?) = ?
            ORDER BY key
            LIMIT ? OFFSET ?
            """,
            (len(prefix), prefix, per_page, page * per_page),
        )
        return [row[0] for row in rows]

    def count(self) -> int:
        """Return the number of stored keys."""
        return self._execute("SELECT COUNT(*) FROM kv_store")[0][0]

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()
