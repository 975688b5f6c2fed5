"""Metadata ledger for tossed objects.

This module provides the Ledger class, a small repository over a SQLite
database recording which objects live in the holding area and where
they came from.

Schema (compatibility contract):
    entries(id TEXT PRIMARY KEY, original_path TEXT, bin_name TEXT,
            tossed_at TEXT ISO-8601, is_dir INTEGER 0/1, size_bytes INTEGER)
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from types import TracebackType

from toss.core.errors import DuplicateIDError, LedgerError, LedgerInitError
from toss.models.entry import Entry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    id            TEXT PRIMARY KEY,
    original_path TEXT NOT NULL,
    bin_name      TEXT NOT NULL,
    tossed_at     TEXT NOT NULL,
    is_dir        INTEGER NOT NULL,
    size_bytes    INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_entries_tossed_at ON entries(tossed_at);
"""

_COLUMNS = "id, original_path, bin_name, tossed_at, is_dir, size_bytes"


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class Ledger:
    """Durable, queryable record of trashed objects.

    Use Ledger.open() to obtain an instance. Each mutating call commits
    immediately; there is no transaction spanning several calls.

    Attributes:
        path: Location of the SQLite database file.
    """

    def __init__(self, connection: sqlite3.Connection, path: Path) -> None:
        """Wrap an already-initialized connection.

        Args:
            connection: Open SQLite connection with the schema in place.
            path: Database file path (for messages).
        """
        self._conn = connection
        self.path = path

    @classmethod
    def open(cls, path: Path) -> Ledger:
        """Open (creating if absent) the ledger at path.

        Missing parent directories are created. Opening an existing
        ledger leaves its contents untouched.

        Args:
            path: Database file path.

        Returns:
            Open Ledger.

        Raises:
            LedgerInitError: If the directory, database or schema cannot
                be created.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create ledger directory {path.parent}: {e}"
            raise LedgerInitError(msg, path=str(path), cause=e) from e

        conn: sqlite3.Connection | None = None
        try:
            conn = sqlite3.connect(path)
            conn.create_function("casefold", 1, _casefold, deterministic=True)
            conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            msg = f"Cannot initialize ledger {path}: {e}"
            raise LedgerInitError(msg, path=str(path), cause=e) from e

        logger.debug("Opened ledger %s", path)
        return cls(conn, path)

    def __enter__(self) -> Ledger:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def append(self, entry: Entry) -> None:
        """Insert a new entry.

        Args:
            entry: Entry to record.

        Raises:
            DuplicateIDError: If an entry with the same id exists.
            LedgerError: If the write fails.
        """
        try:
            with self._conn:
                self._conn.execute(
                    f"INSERT INTO entries ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    entry.to_row(),
                )
        except sqlite3.IntegrityError as e:
            msg = f"Entry {entry.id} already exists"
            raise DuplicateIDError(msg, path=entry.original_path, cause=e) from e
        except sqlite3.Error as e:
            msg = f"Failed to record {entry.original_path}: {e}"
            raise LedgerError(msg, path=entry.original_path, cause=e) from e

    def remove(self, entry_id: str) -> None:
        """Delete the entry with the given id.

        Removing an id that does not exist is not an error.

        Args:
            entry_id: Identifier of the entry to delete.

        Raises:
            LedgerError: If the write fails.
        """
        try:
            with self._conn:
                self._conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
        except sqlite3.Error as e:
            msg = f"Failed to remove entry {entry_id}: {e}"
            raise LedgerError(msg, cause=e) from e

    def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of entries removed.

        Raises:
            LedgerError: If the write fails.
        """
        try:
            with self._conn:
                cursor = self._conn.execute("DELETE FROM entries")
        except sqlite3.Error as e:
            msg = f"Failed to clear ledger: {e}"
            raise LedgerError(msg, cause=e) from e
        return cursor.rowcount

    def all(self) -> list[Entry]:
        """Return every entry, oldest first."""
        return self._select(f"SELECT {_COLUMNS} FROM entries ORDER BY tossed_at, rowid")

    def find_by_query(self, text: str) -> list[Entry]:
        """Find entries whose original path or bin name contains text.

        Matching is case-insensitive and literal (no wildcards).

        Args:
            text: Substring to look for.

        Returns:
            Matching entries, oldest first. Empty if nothing matches.
        """
        needle = text.casefold()
        return self._select(
            f"SELECT {_COLUMNS} FROM entries "
            "WHERE instr(casefold(original_path), ?) > 0 "
            "OR instr(casefold(bin_name), ?) > 0 "
            "ORDER BY tossed_at, rowid",
            (needle, needle),
        )

    def get(self, entry_id: str) -> Entry | None:
        """Look up a single entry by id.

        Returns:
            The entry, or None if no such id is recorded.
        """
        entries = self._select(f"SELECT {_COLUMNS} FROM entries WHERE id = ?", (entry_id,))
        return entries[0] if entries else None

    def count(self) -> int:
        """Return the number of live entries."""
        try:
            row = self._conn.execute("SELECT COUNT(*) FROM entries").fetchone()
        except sqlite3.Error as e:
            msg = f"Failed to count entries: {e}"
            raise LedgerError(msg, cause=e) from e
        return int(row[0])

    def _select(self, sql: str, params: tuple[str, ...] = ()) -> list[Entry]:
        """Run a query and decode its rows.

        Rows that cannot be decoded are skipped with a warning. Decoded
        entries are put in toss-time order, so rows stored with a non-UTC
        offset still sort correctly; rows with equal times keep query order.

        Raises:
            LedgerError: If the query fails.
        """
        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            msg = f"Failed to read ledger: {e}"
            raise LedgerError(msg, cause=e) from e

        entries: list[Entry] = []
        for row in rows:
            try:
                entries.append(Entry.from_row(row))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping corrupt ledger row %r: %s", row[0], e)
        entries.sort(key=lambda entry: entry.tossed_at)
        return entries
