"""Storage backends for command history.

CommandHistory keeps the authoritative copy of a session's commands in
memory. A HistoryStore mirrors them somewhere durable so they can be
searched and reloaded in later sessions. NullHistoryStore stands in when
nothing durable is attached.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from mud_input.types import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryStoreError(Exception):
    """Raised by a HistoryStore when the backing storage fails."""


class HistoryStore(ABC):
    """Append-only command store with ordered and substring queries."""

    durable = False

    def initialize(self, path: str | Path | None = None) -> None:
        """Prepare the store. Must be safe to call on an existing store."""

    @abstractmethod
    def insert(self, entry: HistoryEntry) -> None:
        ...

    @abstractmethod
    def query_recent(self, limit: int) -> list[str]:
        """Return up to `limit` commands, newest first."""

    @abstractmethod
    def query_substring(self, pattern: str, limit: int) -> list[str]:
        """Return up to `limit` distinct commands containing `pattern`, newest first."""

    def close(self) -> None:
        pass


class NullHistoryStore(HistoryStore):
    """Discards everything. Used when history is in-memory only."""

    def insert(self, entry: HistoryEntry) -> None:
        pass

    def query_recent(self, limit: int) -> list[str]:
        return []

    def query_substring(self, pattern: str, limit: int) -> list[str]:
        return []


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        command TEXT NOT NULL,
        timestamp INTEGER NOT NULL,
        session_id TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_history_timestamp ON history(timestamp DESC)",
    "CREATE INDEX IF NOT EXISTS idx_history_command ON history(command)",
)

_NEWEST_FIRST = "SELECT command FROM history ORDER BY timestamp DESC, id DESC"


class SqliteHistoryStore(HistoryStore):
    """History persisted to a SQLite database file.

    Command text is fetched as raw bytes and decoded here, so a row that
    is not valid UTF-8 is skipped instead of failing the whole query.
    """

    durable = True

    def __init__(self, path: str | Path | None = None):
        self.path: Path | None = Path(path).expanduser() if path is not None else None
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def initialize(self, path: str | Path | None = None) -> None:
        if path is not None:
            self.path = Path(path).expanduser()
        if self.path is None:
            raise HistoryStoreError("no database path given")
        if self._conn is not None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path))
        except (OSError, sqlite3.Error) as e:
            raise HistoryStoreError(f"cannot open {self.path}: {e}") from e
        conn.text_factory = bytes
        try:
            with conn:
                for stmt in _SCHEMA:
                    conn.execute(stmt)
        except sqlite3.Error as e:
            conn.close()
            raise HistoryStoreError(f"cannot create schema in {self.path}: {e}") from e
        self._conn = conn
        logger.debug("Opened history database %s", self.path)

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise HistoryStoreError("history store is closed")
        return self._conn

    def insert(self, entry: HistoryEntry) -> None:
        conn = self._require_conn()
        try:
            with conn:
                conn.execute(
                    "INSERT INTO history (command, timestamp, session_id) VALUES (?, ?, ?)",
                    (entry.command, entry.timestamp, entry.session_id),
                )
        except sqlite3.Error as e:
            raise HistoryStoreError(f"insert failed: {e}") from e

    def query_recent(self, limit: int) -> list[str]:
        conn = self._require_conn()
        try:
            rows = conn.execute(f"{_NEWEST_FIRST} LIMIT ?", (limit,)).fetchall()
        except sqlite3.Error as e:
            raise HistoryStoreError(f"query failed: {e}") from e
        return [cmd for cmd in map(_decode_row, rows) if cmd is not None]

    def query_substring(self, pattern: str, limit: int) -> list[str]:
        """Case-insensitive with str.lower semantics; first (newest) occurrence wins."""
        conn = self._require_conn()
        lp = pattern.lower()
        results: list[str] = []
        seen = set()
        if limit <= 0:
            return results
        try:
            for row in conn.execute(_NEWEST_FIRST):
                cmd = _decode_row(row)
                if cmd is None or cmd in seen:
                    continue
                seen.add(cmd)
                if lp in cmd.lower():
                    results.append(cmd)
                    if len(results) >= limit:
                        break
        except sqlite3.Error as e:
            raise HistoryStoreError(f"search failed: {e}") from e
        return results

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            logger.warning("Error closing history database %s: %s", self.path, e)
        finally:
            self._conn = None


def _decode_row(row) -> str | None:
    """Command text of a result row, or None if the row is malformed."""
    value = row[0]
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            pass
    logger.debug("Skipping malformed history row: %r", value)
    return None
