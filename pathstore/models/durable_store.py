"""
DurableStore - One SQLite table of JSON-encoded entries.
"""

import logging
import sqlite3
from typing import Any

from pathstore.interfaces.entry_source import EntrySource
from pathstore.models.value import MISSING, decode_value, encode_value

logger = logging.getLogger(__name__)

AUTONUM_TABLE = "internal::autonum"


def quote_identifier(name: str) -> str:
    """Quote a table name for use in SQL text."""
    return '"' + name.replace('"', '""') + '"'


def changes_table_name(name: str) -> str:
    return f"internal::changes::{name}"


class DurableStore(EntrySource):
    """
    Persistent key-value table, one row per top-level key.

    Schema:
    - <name>: key TEXT PRIMARY KEY, value TEXT (JSON)
    - internal::changes::<name>: reserved, never read or written here
    - internal::autonum: reserved, never read or written here

    Every statement runs in autocommit mode, so each write is its own
    transaction. SQLite errors propagate to the caller unchanged.
    """

    def __init__(self, connection: sqlite3.Connection, name: str) -> None:
        """
        Initialize DurableStore.

        Args:
            connection: Open SQLite connection in autocommit mode.
            name: Name of the primary table.
        """
        self._conn = connection
        self.name = name
        self._table = quote_identifier(name)

    def ensure_schema(self) -> bool:
        """
        Create the tables if needed and configure durability.

        Idempotent.

        Returns:
            True if the primary table was created by this call.
        """
        row = self._conn.execute(
            "SELECT count(*) FROM sqlite_master "
            "WHERE type = 'table' AND name = ? COLLATE NOCASE",
            (self.name,),
        ).fetchone()
        created = row[0] == 0

        if created:
            self._conn.execute(
                f"CREATE TABLE {self._table} (key TEXT PRIMARY KEY, value TEXT)"
            )
            logger.debug("Created table %s", self.name)

        self._conn.execute(
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(changes_table_name(self.name))} "
            "(type TEXT, key TEXT, value TEXT, timestamp INTEGER, pid INTEGER)"
        )
        self._conn.execute(
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(AUTONUM_TABLE)} "
            "(enmap TEXT PRIMARY KEY, lastnum INTEGER)"
        )

        # synchronous is per connection, journal_mode persists in the file
        self._conn.execute("PRAGMA synchronous = 1")
        self._conn.execute("PRAGMA journal_mode = wal")

        return created

    def read_all(self) -> list[tuple[str, Any]]:
        rows = self._conn.execute(f"SELECT key, value FROM {self._table}").fetchall()
        return [(key, decode_value(text)) for key, text in rows]

    def read_one(self, key: str) -> Any:
        """
        Read the value stored under key.

        Args:
            key: Normalized key.

        Returns:
            The decoded value, or MISSING if no row exists.
        """
        row = self._conn.execute(
            f"SELECT value FROM {self._table} WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return MISSING
        return decode_value(row[0])

    def write_one(self, key: str, value: Any) -> None:
        """
        Insert or replace the row for key.

        Args:
            key: Normalized key.
            value: Value tree to serialize.
        """
        self._conn.execute(
            f"INSERT OR REPLACE INTO {self._table} (key, value) VALUES (?, ?)",
            (key, encode_value(value)),
        )

    def delete_one(self, key: str) -> bool:
        """
        Delete the row for key.

        Returns:
            True if a row was removed.
        """
        cursor = self._conn.execute(f"DELETE FROM {self._table} WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def delete_all(self) -> None:
        self._conn.execute(f"DELETE FROM {self._table}")

    def list_keys(self) -> list[str]:
        rows = self._conn.execute(f"SELECT key FROM {self._table}").fetchall()
        return [row[0] for row in rows]

    def count(self) -> int:
        return self._conn.execute(f"SELECT count(*) FROM {self._table}").fetchone()[0]

    def close(self) -> None:
        self._conn.close()
