from __future__ import annotations

import logging
from pathlib import Path

from mud_input.history_store import (
    HistoryStore,
    HistoryStoreError,
    NullHistoryStore,
    SqliteHistoryStore,
)
from mud_input.types import HistoryEntry, InputState, now_ms

logger = logging.getLogger(__name__)

DEFAULT_HYDRATE_LIMIT = 1000
DEFAULT_SEARCH_LIMIT = 50
DEFAULT_CHARACTER_DIR = "~/.mud-input/characters"


class CommandHistory:
    """Tracks submitted commands with up/down replay and search.

    The in-memory list is authoritative for the session. An attached
    durable store mirrors every added command and serves search_deep();
    if it fails, the history keeps working from memory alone.
    """

    def __init__(
        self,
        store: HistoryStore | None = None,
        path: str | Path | None = None,
        session_id: str | None = None,
        hydrate_limit: int = DEFAULT_HYDRATE_LIMIT,
    ):
        self._history: list[str] = []
        self._position = 0  # len(self._history) means past the newest entry
        self._store: HistoryStore = NullHistoryStore()
        self.session_id = session_id
        self.hydrate_limit = hydrate_limit
        self.write_failures = 0
        if store is not None:
            self.attach(store, path)

    def __len__(self) -> int:
        return len(self._history)

    @property
    def position(self) -> int:
        return self._position

    @property
    def state(self) -> InputState:
        if self._position < len(self._history):
            return InputState.NAVIGATING
        return InputState.IDLE

    @property
    def is_persistent(self) -> bool:
        return self._store.durable

    # --- Durable store lifecycle ---

    def attach(self, store: HistoryStore, path: str | Path | None = None) -> bool:
        """Attach a store and load its most recent commands into memory.

        Returns False (and stays in-memory only) if the store can't be
        initialized.
        """
        self.close()
        try:
            store.initialize(path)
            recent = store.query_recent(self.hydrate_limit)
        except HistoryStoreError as e:
            logger.warning("History store unavailable, using memory only: %s", e)
            store.close()
            return False
        self._store = store
        self._history = list(reversed(recent))
        self._position = len(self._history)
        logger.debug("Loaded %d history entries", len(self._history))
        return True

    def open_path(self, path: str | Path) -> bool:
        """Persist history to a SQLite database at `path`."""
        return self.attach(SqliteHistoryStore(), path)

    def open_for_character(self, character_id: str, base_dir: str | Path | None = None) -> bool:
        """Persist history to <base_dir>/<character_id>/history.db."""
        base = Path(base_dir or DEFAULT_CHARACTER_DIR).expanduser()
        return self.open_path(base / character_id / "history.db")

    def close(self) -> None:
        """Release the durable store. Safe to call more than once."""
        store, self._store = self._store, NullHistoryStore()
        store.close()

    # --- Recording and navigation ---

    def add(self, command: str):
        """Add a command. Consecutive duplicates are skipped."""
        if self._history and self._history[-1] == command:
            self.reset()
            return
        self._history.append(command)
        self.reset()
        try:
            self._store.insert(HistoryEntry(command, now_ms(), self.session_id))
        except HistoryStoreError as e:
            self.write_failures += 1
            logger.warning("Failed to persist history entry: %s", e)

    def previous(self) -> str | None:
        """Move to an older entry. Stops at the oldest entry."""
        if not self._history:
            return None
        if self._position > 0:
            self._position -= 1
        return self._history[self._position]

    def next(self) -> str | None:
        """Move to a newer entry. Returns None once past the newest."""
        if self._position < len(self._history) - 1:
            self._position += 1
            return self._history[self._position]
        self._position = len(self._history)
        return None

    def reset(self):
        """Move the cursor past the newest entry."""
        self._position = len(self._history)

    # --- Lookup ---

    def get_last(self) -> str | None:
        return self._history[-1] if self._history else None

    def get_by_index(self, index: int) -> str | None:
        """Look up an entry by 1-based index (as shown by `list`)."""
        if 1 <= index <= len(self._history):
            return self._history[index - 1]
        return None

    def find_by_prefix(self, prefix: str) -> str | None:
        """Most recent entry starting with `prefix` (case sensitive)."""
        for cmd in reversed(self._history):
            if cmd.startswith(prefix):
                return cmd
        return None

    def search(self, pattern: str) -> list[str]:
        """Entries containing `pattern` (case insensitive), newest first, no repeats."""
        lp = pattern.lower()
        results = []
        seen = set()
        for cmd in reversed(self._history):
            if cmd not in seen and lp in cmd.lower():
                results.append(cmd)
                seen.add(cmd)
        return results

    def search_deep(self, pattern: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[str]:
        """Search the durable store, reaching past what is loaded in memory.

        Falls back to search() when no durable store is attached or the
        query fails.
        """
        if not self._store.durable:
            return self.search(pattern)
        try:
            return self._store.query_substring(pattern, limit)
        except HistoryStoreError as e:
            logger.warning("Deep history search failed, searching memory: %s", e)
            return self.search(pattern)

    def get_all(self) -> list[str]:
        """Copy of all entries, oldest first."""
        return list(self._history)
