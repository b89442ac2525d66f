"""Tests for the history storage backends."""

import sqlite3

import pytest

from mud_input.history_store import (
    HistoryStore,
    HistoryStoreError,
    NullHistoryStore,
    SqliteHistoryStore,
)
from mud_input.types import HistoryEntry


@pytest.fixture
def store(tmp_path):
    s = SqliteHistoryStore()
    s.initialize(tmp_path / "nested" / "history.db")
    yield s
    s.close()


class TestHistoryStore:
    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            HistoryStore()

    def test_subclass_must_implement_queries(self):
        class InsertOnly(HistoryStore):
            def insert(self, entry):
                pass

        with pytest.raises(TypeError):
            InsertOnly()


class TestNullHistoryStore:
    def test_discards_everything(self):
        s = NullHistoryStore()
        s.initialize()
        s.insert(HistoryEntry("look", 1))
        assert s.query_recent(10) == []
        assert s.query_substring("look", 10) == []
        assert not s.durable
        s.close()


class TestSqliteHistoryStore:
    def test_creates_parent_directory(self, store, tmp_path):
        assert (tmp_path / "nested" / "history.db").is_file()
        assert store.durable

    def test_initialize_is_idempotent(self, store, tmp_path):
        store.insert(HistoryEntry("look", 1))
        store.initialize()
        again = SqliteHistoryStore(tmp_path / "nested" / "history.db")
        again.initialize()
        assert again.query_recent(10) == ["look"]
        again.close()

    def test_requires_path(self):
        with pytest.raises(HistoryStoreError):
            SqliteHistoryStore().initialize()

    def test_query_recent_newest_first(self, store):
        store.insert(HistoryEntry("a", 100))
        store.insert(HistoryEntry("b", 200))
        store.insert(HistoryEntry("c", 300))
        assert store.query_recent(10) == ["c", "b", "a"]
        assert store.query_recent(2) == ["c", "b"]

    def test_same_timestamp_keeps_insert_order(self, store):
        store.insert(HistoryEntry("a", 100))
        store.insert(HistoryEntry("b", 100))
        assert store.query_recent(10) == ["b", "a"]

    def test_query_substring_distinct_newest_first(self, store):
        store.insert(HistoryEntry("kill goblin", 100))
        store.insert(HistoryEntry("kill orc", 200))
        store.insert(HistoryEntry("north", 300))
        store.insert(HistoryEntry("kill goblin", 400))
        assert store.query_substring("kill", 10) == ["kill goblin", "kill orc"]

    def test_query_substring_case_insensitive(self, store):
        store.insert(HistoryEntry("Cast 'Fireball'", 100))
        store.insert(HistoryEntry("ÉTUDIER livre", 200))
        assert store.query_substring("fireball", 10) == ["Cast 'Fireball'"]
        assert store.query_substring("étudier", 10) == ["ÉTUDIER livre"]

    def test_query_substring_literal_wildcards(self, store):
        store.insert(HistoryEntry("say 100%", 100))
        store.insert(HistoryEntry("say 1000", 200))
        assert store.query_substring("0%", 10) == ["say 100%"]

    def test_query_substring_limit(self, store):
        for i in range(5):
            store.insert(HistoryEntry(f"get coin{i}", i))
        assert store.query_substring("coin", 2) == ["get coin4", "get coin3"]

    def test_skips_malformed_rows(self, store, tmp_path):
        store.insert(HistoryEntry("look", 100))
        conn = sqlite3.connect(str(tmp_path / "nested" / "history.db"))
        with conn:
            conn.execute(
                "INSERT INTO history (command, timestamp) VALUES (?, ?)",
                (b"\xff\xfe", 200),
            )
        conn.close()
        assert store.query_recent(10) == ["look"]

    def test_skips_text_rows_with_invalid_utf8(self, store, tmp_path):
        store.insert(HistoryEntry("look", 100))
        store.insert(HistoryEntry("look north", 300))
        conn = sqlite3.connect(str(tmp_path / "nested" / "history.db"))
        with conn:
            conn.execute(
                "INSERT INTO history (command, timestamp) VALUES (CAST(x'ff' AS TEXT), 200)"
            )
        conn.close()
        assert store.query_recent(10) == ["look north", "look"]
        assert store.query_substring("LOOK", 10) == ["look north", "look"]

    def test_closed_store_raises(self, store):
        store.close()
        assert not store.is_open
        with pytest.raises(HistoryStoreError):
            store.insert(HistoryEntry("look", 1))
        with pytest.raises(HistoryStoreError):
            store.query_recent(1)
        store.close()
