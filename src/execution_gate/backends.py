from __future__ import annotations

"""Persistent key-value backends for the record store.

The record store only needs an opaque byte-blob slot, so every backend exposes
the same three-call contract. SQLite is the durable default; the in-memory
backend serves tests and hosts that do not need persistence across restarts.
"""

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Protocol

from execution_gate.errors import StorageReadError, StorageWriteError
from execution_gate.logger import get_logger
from execution_gate.timeutil import utc_now_iso


class KeyValueBackend(Protocol):
    """Byte-blob store contract used by RecordStore."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def remove(self, key: str) -> None: ...


class SQLiteKeyValueBackend:
    """SQLite implementation of the key-value backend.

    Each call opens its own connection, commits and closes it on exit, so a successful
    ``set`` is on disk before it returns.
    """

    def __init__(self, db_path: str = ".tmp/execution_gate.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = get_logger("backends.sqlite")
        self._initialize_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_schema(self) -> None:
        """Create the key-value table if absent."""
        with closing(self._connect()) as conn, conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv_entries (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )

    def get(self, key: str) -> bytes | None:
        try:
            with closing(self._connect()) as conn, conn:
                row = conn.execute(
                    "SELECT value FROM kv_entries WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageReadError(f"Failed to read {key!r} from {self.db_path}: {e}") from e

        if row is None:
            self.logger.debug("KV GET MISS key=%s", key)
            return None
        self.logger.debug("KV GET HIT key=%s", key)
        return bytes(row["value"])

    def set(self, key: str, value: bytes) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO kv_entries (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value=excluded.value,
                        updated_at=excluded.updated_at
                    """,
                    (key, sqlite3.Binary(value), utc_now_iso()),
                )
        except sqlite3.Error as e:
            raise StorageWriteError(f"Failed to write {key!r} to {self.db_path}: {e}") from e
        self.logger.debug("KV SET key=%s bytes=%s", key, len(value))

    def remove(self, key: str) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute("DELETE FROM kv_entries WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageWriteError(f"Failed to remove {key!r} from {self.db_path}: {e}") from e
        self.logger.debug("KV REMOVE key=%s", key)


class InMemoryKeyValueBackend:
    """Dict-backed backend; contents live only as long as the instance."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        value = self._data.get(key)
        return None if value is None else bytes(value)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data
