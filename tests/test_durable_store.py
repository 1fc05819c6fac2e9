"""
Tests for DurableStore and StoreInitializer against a real SQLite file.
"""

import os
import sqlite3

import pytest

from pathstore.engine.initializer import StoreInitializer
from pathstore.models.durable_store import DurableStore, quote_identifier
from pathstore.models.options import StoreOptions
from pathstore.models.value import MISSING


@pytest.fixture
def durable(temp_dir):
    """Provide a DurableStore on a fresh database file."""
    options = StoreOptions(name="games", data_dir=temp_dir)
    with StoreInitializer(options) as initializer:
        store, created = initializer.open_store()
    assert created
    yield store
    store.close()


def _tables(path: str) -> set[str]:
    with sqlite3.connect(path) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


class TestSchema:
    """Tests for ensure_schema."""

    def test_creates_all_tables(self, durable, temp_dir):
        tables = _tables(os.path.join(temp_dir, "base.sqlite"))

        assert {"games", "internal::changes::games", "internal::autonum"} <= tables

    def test_idempotent(self, durable):
        """Test that a second call keeps data and reports no creation."""
        durable.write_one("k", 1)

        assert durable.ensure_schema() is False
        assert durable.read_one("k") == 1

    def test_wal_journal_mode(self, durable, temp_dir):
        with sqlite3.connect(os.path.join(temp_dir, "base.sqlite")) as conn:
            mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "wal"

    def test_auxiliary_tables_stay_empty(self, durable, temp_dir):
        durable.write_one("k", {"a": 1})
        durable.delete_one("k")

        with sqlite3.connect(os.path.join(temp_dir, "base.sqlite")) as conn:
            changes = conn.execute('SELECT count(*) FROM "internal::changes::games"').fetchone()
            autonum = conn.execute('SELECT count(*) FROM "internal::autonum"').fetchone()
        assert changes[0] == 0
        assert autonum[0] == 0

    def test_awkward_table_names(self, temp_dir):
        """Test that table names are quoted rather than interpolated raw."""
        options = StoreOptions(name='odd "name"; DROP', data_dir=temp_dir)
        with StoreInitializer(options) as initializer:
            store, _ = initializer.open_store()
        try:
            store.write_one("k", "v")
            assert store.read_one("k") == "v"
        finally:
            store.close()

    def test_table_names_ignore_case(self, durable, temp_dir):
        """Test that reopening under a differently-cased name reuses the table."""
        durable.write_one("k", 1)

        with StoreInitializer(StoreOptions(name="GAMES", data_dir=temp_dir)) as initializer:
            store, created = initializer.open_store()
        try:
            assert created is False
            assert store.read_one("k") == 1
        finally:
            store.close()

    def test_quote_identifier(self):
        assert quote_identifier('a"b') == '"a""b"'


class TestEntries:
    """Tests for entry reads and writes."""

    def test_write_and_read(self, durable, sample_user):
        durable.write_one("user:1", sample_user)

        assert durable.read_one("user:1") == sample_user
        assert durable.read_one("user:2") is MISSING

    def test_stored_null(self, durable):
        durable.write_one("nothing", None)

        assert durable.read_one("nothing") is None

    def test_upsert_replaces(self, durable):
        durable.write_one("k", {"a": 1})
        durable.write_one("k", [1, 2])

        assert durable.read_one("k") == [1, 2]
        assert durable.count() == 1

    def test_persisted_as_json_text(self, durable, temp_dir):
        durable.write_one("k", {"a": [1, True, None]})

        with sqlite3.connect(os.path.join(temp_dir, "base.sqlite")) as conn:
            row = conn.execute("SELECT value FROM games WHERE key = 'k'").fetchone()
        assert row[0] == '{"a":[1,true,null]}'

    def test_read_all_and_keys(self, durable):
        for i in range(5):
            durable.write_one(f"key{i}", i)

        assert sorted(durable.read_all()) == [(f"key{i}", i) for i in range(5)]
        assert sorted(durable.list_keys()) == [f"key{i}" for i in range(5)]

    def test_delete_one(self, durable):
        durable.write_one("k", 1)

        assert durable.delete_one("k") is True
        assert durable.delete_one("k") is False
        assert durable.read_one("k") is MISSING

    def test_delete_all(self, durable):
        for i in range(3):
            durable.write_one(str(i), i)

        durable.delete_all()

        assert durable.list_keys() == []
        assert durable.count() == 0

    def test_closed_connection_errors_propagate(self, durable):
        """Test that storage failures reach the caller unchanged."""
        durable.close()

        with pytest.raises(sqlite3.ProgrammingError):
            durable.read_one("k")


class TestInitializer:
    """Tests for StoreInitializer."""

    def test_failed_startup_closes_connection(self, temp_dir):
        options = StoreOptions(name="t", data_dir=temp_dir)

        with pytest.raises(RuntimeError):
            with StoreInitializer(options) as initializer:
                store, _ = initializer.open_store()
                raise RuntimeError("startup failed")

        with pytest.raises(sqlite3.ProgrammingError):
            store.read_one("k")

    def test_clean_exit_keeps_connection(self, temp_dir):
        with StoreInitializer(StoreOptions(name="t", data_dir=temp_dir)) as initializer:
            store, _ = initializer.open_store()
        try:
            assert store.read_one("k") is MISSING
        finally:
            store.close()

    def test_creates_nested_data_dir(self, temp_dir):
        data_dir = os.path.join(temp_dir, "a", "b")
        options = StoreOptions(name="t", data_dir=data_dir)

        with StoreInitializer(options) as initializer:
            store, _ = initializer.open_store()
        store.close()

        assert os.path.isfile(os.path.join(data_dir, "base.sqlite"))

    def test_stores_share_one_file(self, temp_dir):
        """Test that two names live side by side in base.sqlite."""
        opened = []
        for name in ("first", "second"):
            with StoreInitializer(StoreOptions(name=name, data_dir=temp_dir)) as initializer:
                opened.append(initializer.open_store()[0])

        first, second = opened
        first.write_one("k", 1)
        second.write_one("k", 2)

        assert first.read_one("k") == 1
        assert second.read_one("k") == 2
        for store in opened:
            store.close()

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permission checks are bypassed for root",
    )
    def test_unwritable_data_dir(self, temp_dir):
        locked = os.path.join(temp_dir, "locked")
        os.mkdir(locked, 0o500)
        try:
            options = StoreOptions(name="t", data_dir=os.path.join(locked, "data"))
            with pytest.raises(PermissionError):
                with StoreInitializer(options):
                    pass
        finally:
            os.chmod(locked, 0o700)
