"""SQLite-backed key-value store.

This adapter implements the KeyValueStore protocol on top of a single
SQLite file. SQLite supplies durability, file locking and atomic commit;
the adapter only lays a bucket/key/value model over two tables.

File Format:
    kv_buckets(name, sequence)          one row per bucket
    kv_entries(bucket, key, value)      ordered by (bucket, key)

Keys and values are BLOBs, so ``ORDER BY key`` is plain byte order.

Thread Safety:
    None. A store belongs to the single session that opened it.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterator

from kvsql.infrastructure.logging import get_logger
from kvsql.ports.outbound import (
    BucketNotFoundError,
    KeyValueStoreError,
    ReadOnlyTransactionError,
    StoreClosedError,
)

logger = get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_buckets (
    name     TEXT PRIMARY KEY NOT NULL,
    sequence INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS kv_entries (
    bucket TEXT NOT NULL,
    key    BLOB NOT NULL,
    value  BLOB NOT NULL,
    PRIMARY KEY (bucket, key)
) WITHOUT ROWID;
"""


class _SqliteBucket:
    """Bucket handle bound to one transaction."""

    def __init__(self, tx: _SqliteTransaction, name: str) -> None:
        self._tx = tx
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get(self, key: bytes) -> bytes | None:
        row = self._tx.execute(
            "SELECT value FROM kv_entries WHERE bucket = ? AND key = ?",
            (self._name, key),
        ).fetchone()
        return bytes(row[0]) if row is not None else None

    def put(self, key: bytes, value: bytes) -> None:
        self._tx.require_writable()
        self._tx.execute(
            "INSERT OR REPLACE INTO kv_entries (bucket, key, value) VALUES (?, ?, ?)",
            (self._name, bytes(key), bytes(value)),
        )

    def delete(self, key: bytes) -> None:
        self._tx.require_writable()
        self._tx.execute(
            "DELETE FROM kv_entries WHERE bucket = ? AND key = ?",
            (self._name, key),
        )

    def items(self, prefix: bytes = b"") -> Iterator[tuple[bytes, bytes]]:
        rows = self._tx.execute(
            "SELECT key, value FROM kv_entries WHERE bucket = ? AND key >= ? ORDER BY key",
            (self._name, bytes(prefix)),
        ).fetchall()
        return self._iter_snapshot(rows, prefix)

    @staticmethod
    def _iter_snapshot(rows: list[Any], prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        for key, value in rows:
            key = bytes(key)
            if not key.startswith(prefix):
                break
            yield key, bytes(value)

    def next_sequence(self) -> int:
        self._tx.require_writable()
        self._tx.execute(
            "UPDATE kv_buckets SET sequence = sequence + 1 WHERE name = ?",
            (self._name,),
        )
        row = self._tx.execute(
            "SELECT sequence FROM kv_buckets WHERE name = ?", (self._name,)
        ).fetchone()
        if row is None:
            raise BucketNotFoundError(self._name)
        return int(row[0])


class _SqliteTransaction:
    """Transaction over the SQLite connection."""

    def __init__(self, conn: sqlite3.Connection, writable: bool) -> None:
        self._conn = conn
        self._writable = writable
        self._active = True

    @property
    def writable(self) -> bool:
        return self._writable

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        if not self._active:
            raise KeyValueStoreError("transaction has already finished")
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise KeyValueStoreError(f"storage operation failed: {e}") from e

    def require_writable(self) -> None:
        if not self._writable:
            raise ReadOnlyTransactionError("cannot write inside a read-only transaction")

    def finish(self) -> None:
        self._active = False

    def bucket(self, name: str) -> _SqliteBucket | None:
        row = self.execute("SELECT 1 FROM kv_buckets WHERE name = ?", (name,)).fetchone()
        return _SqliteBucket(self, name) if row is not None else None

    def create_bucket_if_not_exists(self, name: str) -> _SqliteBucket:
        if not name:
            raise KeyValueStoreError("bucket name required")
        self.require_writable()
        self.execute("INSERT OR IGNORE INTO kv_buckets (name) VALUES (?)", (name,))
        return _SqliteBucket(self, name)

    def delete_bucket(self, name: str) -> None:
        self.require_writable()
        cursor = self.execute("DELETE FROM kv_buckets WHERE name = ?", (name,))
        if cursor.rowcount == 0:
            raise BucketNotFoundError(name)
        self.execute("DELETE FROM kv_entries WHERE bucket = ?", (name,))

    def bucket_names(self) -> list[str]:
        rows = self.execute("SELECT name FROM kv_buckets ORDER BY name").fetchall()
        return [row[0] for row in rows]


class SqliteKeyValueStore:
    """SQLite implementation of the KeyValueStore protocol.

    Attributes:
        path: Path to the database file.
    """

    def __init__(self, path: str | Path, timeout: float = 1.0) -> None:
        """Open (or create) the store.

        Args:
            path: Path to the database file. The parent directory must exist.
            timeout: Seconds to wait when another process holds the file lock.

        Raises:
            KeyValueStoreError: If the file cannot be opened or is not a store.
        """
        self._path = Path(path)
        self._conn: sqlite3.Connection | None = None
        self._in_transaction = False

        if self._path.is_dir():
            raise KeyValueStoreError(f"path points to a directory, expected a file: {self._path}")

        try:
            conn = sqlite3.connect(str(self._path), timeout=timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise KeyValueStoreError(f"cannot open {self._path}: {e}") from e

        try:
            conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            conn.close()
            raise KeyValueStoreError(f"cannot open {self._path}: {e}") from e

        self._conn = conn
        logger.debug("store_opened", path=str(self._path))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._conn is None

    @contextmanager
    def view(self) -> Generator[_SqliteTransaction, None, None]:
        """Read-only transaction; always rolled back."""
        conn = self._begin("BEGIN")
        tx = _SqliteTransaction(conn, writable=False)
        try:
            yield tx
        finally:
            tx.finish()
            self._end("ROLLBACK")

    @contextmanager
    def update(self) -> Generator[_SqliteTransaction, None, None]:
        """Read-write transaction; committed unless the block raises."""
        conn = self._begin("BEGIN IMMEDIATE")
        tx = _SqliteTransaction(conn, writable=True)
        try:
            yield tx
        except BaseException:
            tx.finish()
            self._end("ROLLBACK")
            raise
        tx.finish()
        try:
            self._end("COMMIT")
        except KeyValueStoreError:
            # A busy COMMIT leaves BEGIN IMMEDIATE open on the connection
            self._abandon()
            raise

    def _abandon(self) -> None:
        """Roll back whatever transaction is still open after a failed COMMIT."""
        if self._conn is None or not self._conn.in_transaction:
            return
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.error("rollback_failed", path=str(self._path), error=str(e))
            raise KeyValueStoreError(f"ROLLBACK failed: {e}") from e
        logger.warning("commit_rolled_back", path=str(self._path))

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            raise KeyValueStoreError(f"cannot close {self._path}: {e}") from e
        finally:
            self._conn = None
        logger.debug("store_closed", path=str(self._path))

    def _begin(self, statement: str) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreClosedError(f"store {self._path} is closed")
        if self._in_transaction:
            raise KeyValueStoreError("a transaction is already in progress")
        try:
            self._conn.execute(statement)
        except sqlite3.Error as e:
            raise KeyValueStoreError(f"cannot begin transaction: {e}") from e
        self._in_transaction = True
        return self._conn

    def _end(self, statement: str) -> None:
        self._in_transaction = False
        if self._conn is None:
            return
        try:
            self._conn.execute(statement)
        except sqlite3.Error as e:
            raise KeyValueStoreError(f"{statement} failed: {e}") from e

    def __repr__(self) -> str:
        return f"SqliteKeyValueStore({str(self._path)!r})"
