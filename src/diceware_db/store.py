"""SQLite word store mapping dice keys to words.

The file holds a single table, ``diceware(id INTEGER PRIMARY KEY, word TEXT)``,
with one row per dice key. Stores are built once from a word list by
:func:`create_store` and read afterwards through :func:`open_store`.

Every statement runs through the store's busy-retry policy, so a lock held by
another process delays an operation instead of failing it.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from diceware_db.errors import (
    DicewareIOError,
    IncompleteStoreError,
    RollbackError,
    StoreError,
    StoreFormatError,
    WordNotFoundError,
)
from diceware_db.keys import WORDLIST_SIZE, all_keys
from diceware_db.retry import BusyRetry
from diceware_db.wordlist import load_into, parse_and_validate

logger = logging.getLogger(__name__)

T = TypeVar("T")

TABLE = "diceware"

_CREATE_TABLE = f"CREATE TABLE {TABLE} (id INTEGER PRIMARY KEY, word TEXT);"
_GET_WORD = f"SELECT word FROM {TABLE} WHERE id = ?;"
_INSERT_WORD = f"INSERT INTO {TABLE} (id, word) VALUES (?, ?);"
_COUNT = f"SELECT COUNT(*) FROM {TABLE};"
_ALL_IDS = f"SELECT id FROM {TABLE};"

_FORMAT_MESSAGES = ("no such table", "no such column", "not a database", "already exists")


def _engine_error(action: str, error: Exception) -> StoreError:
    msg = f"{action}: {error}"
    if any(pattern in str(error).lower() for pattern in _FORMAT_MESSAGES):
        return StoreFormatError(msg)
    return StoreError(msg)


class WordStore:
    """Handle on a diceware word database.

    Owns the connection and two reusable cursors, one for inserts and one
    for lookups. Cursors are created on first use and closed with the store.
    """

    def __init__(self, conn: sqlite3.Connection, path: str, retry: Callable | None = None):
        self._conn: sqlite3.Connection | None = conn
        self._path = path
        self._retry = retry or BusyRetry()
        self._insert: sqlite3.Cursor | None = None
        self._query: sqlite3.Cursor | None = None

    @classmethod
    def open(
        cls,
        path: str | Path,
        timeout: float = 0.0,
        max_busy_retries: int | None = None,
    ) -> WordStore:
        """Open or create the database file at path. Contents are not checked.

        timeout is SQLite's own busy wait in seconds; with the default of 0,
        lock conflicts go straight to the retry policy.
        Raises DicewareIOError if the file cannot be opened.
        """
        path = str(path)
        try:
            conn = sqlite3.connect(path, timeout=timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise DicewareIOError(f"cannot open word store {path}: {e}") from e
        logger.debug("opened word store %s", path)
        return cls(conn, path, retry=BusyRetry(max_retries=max_busy_retries))

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError(f"word store {self._path} is closed")
        return self._conn

    @property
    def in_bulk_load(self) -> bool:
        return self._conn is not None and self._conn.in_transaction

    def _run(self, action: str, operation: Callable[[], T]) -> T:
        try:
            return self._retry(operation)
        except (sqlite3.Error, OverflowError) as e:
            raise _engine_error(action, e) from e

    def create_schema(self) -> None:
        """Create the word table. Fails with StoreFormatError if it already exists."""
        self._run("create table", lambda: self.conn.execute(_CREATE_TABLE))

    # Bulk load

    def begin_bulk_load(self) -> None:
        self._run("begin transaction", lambda: self.conn.execute("BEGIN"))

    def insert(self, key: int, word: str) -> None:
        """Insert one entry into the current bulk load."""
        if self._insert is None:
            self._insert = self.conn.cursor()
        cursor = self._insert
        self._run(f"insert {key}", lambda: cursor.execute(_INSERT_WORD, (key, word)))

    def commit_bulk_load(self) -> None:
        self._run("commit transaction", lambda: self.conn.execute("COMMIT"))

    def rollback_bulk_load(self) -> None:
        """Undo everything since begin_bulk_load, including the table itself.

        Raises RollbackError if SQLite refuses; the store can no longer be
        trusted in that case.
        """
        if not self.in_bulk_load:
            return
        try:
            self._run("rollback transaction", lambda: self.conn.execute("ROLLBACK"))
        except StoreError as e:
            raise RollbackError(str(e)) from e
        logger.debug("rolled back bulk load on %s", self._path)

    @contextmanager
    def bulk_load(self) -> Iterator[WordStore]:
        """Run the body as one transaction, committed on success and rolled back on any error."""
        self.begin_bulk_load()
        try:
            yield self
        except BaseException:
            self.rollback_bulk_load()
            raise
        try:
            self.commit_bulk_load()
        except StoreError:
            self.rollback_bulk_load()
            raise

    # Reads

    def lookup(self, key: int) -> str:
        """Return the word stored under key. Raises WordNotFoundError if there is none."""
        if self._query is None:
            self._query = self.conn.cursor()
        cursor = self._query
        row = self._run(f"lookup {key}", lambda: cursor.execute(_GET_WORD, (key,)).fetchone())
        if row is None:
            raise WordNotFoundError(key)
        if row[0] is None:
            raise StoreFormatError(f"lookup {key}: stored word is NULL")
        return row[0]

    def count(self) -> int:
        return self._run("count entries", lambda: self.conn.execute(_COUNT).fetchone()[0])

    def missing_keys(self) -> list[int]:
        """Return the dice keys that have no entry, in ascending order."""
        rows = self._run("list entries", lambda: self.conn.execute(_ALL_IDS).fetchall())
        present = {row[0] for row in rows}
        return [key for key in all_keys() if key not in present]

    def verify(self) -> None:
        """Check that the store holds exactly one word per dice key.

        Raises IncompleteStoreError listing missing keys, or StoreFormatError
        if rows exist for keys outside the dice key space.
        """
        missing = self.missing_keys()
        if missing:
            raise IncompleteStoreError(missing)
        total = self.count()
        if total != WORDLIST_SIZE:
            raise StoreFormatError(
                f"word store {self._path} has {total - WORDLIST_SIZE} entries outside the dice key space"
            )

    def close(self) -> None:
        """Release cursors and the connection. Calling it again does nothing."""
        for cursor in (self._insert, self._query):
            if cursor is not None:
                cursor.close()
        self._insert = None
        self._query = None
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("closed word store %s", self._path)

    def __enter__(self) -> WordStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_store(path: str | Path, **options) -> WordStore:
    """Open an existing word store. Options are passed to WordStore.open."""
    return WordStore.open(path, **options)


def _exists(path: str) -> bool:
    return path == ":memory:" or os.path.exists(path)


def create_store(
    db_path: str | Path,
    wordlist_path: str | Path,
    strict: bool = False,
    **options,
) -> WordStore:
    """Build a new word store at db_path from the word list at wordlist_path.

    The list is fully validated before the store file is touched. Table and
    entries are then written in one transaction, so readers see either the
    complete store or nothing. On failure the store is closed, and a file
    created by this call is removed again.

    Returns the open store; the caller must close it.
    """
    db_path = str(db_path)
    entries = parse_and_validate(wordlist_path, strict=strict)

    existed = _exists(db_path)
    store = WordStore.open(db_path, **options)
    try:
        with store.bulk_load():
            store.create_schema()
            load_into(store, entries)
    except BaseException:
        store.close()
        if not existed and os.path.exists(db_path):
            os.remove(db_path)
        raise
    logger.info("created word store %s from %s (%d entries)", db_path, wordlist_path, len(entries))
    # Minimal validation lets lists with keys outside the dice key space through
    try:
        store.verify()
    except (IncompleteStoreError, StoreFormatError) as e:
        logger.warning("word store %s is not a complete diceware table: %s", db_path, e)
    return store
