"""In-memory key-value store adapter.

A dict-backed implementation of KeyValueStore for testing and for the
``memory`` backend. Data is not persisted across restarts.

Write transactions work on a copy of the buckets that replaces the live
data only on commit, so a failed statement leaves nothing behind.

Usage:
    store = InMemoryKeyValueStore()
    with store.update() as tx:
        tx.create_bucket_if_not_exists("users").put(b"1:name", b"Alice")
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generator, Iterator

from kvsql.ports.outbound import (
    BucketNotFoundError,
    KeyValueStoreError,
    ReadOnlyTransactionError,
    StoreClosedError,
)


@dataclass
class BucketData:
    """Contents of one bucket."""

    entries: dict[bytes, bytes] = field(default_factory=dict)
    sequence: int = 0


class _MemoryBucket:
    def __init__(self, tx: _MemoryTransaction, name: str, data: BucketData) -> None:
        self._tx = tx
        self._name = name
        self._data = data

    @property
    def name(self) -> str:
        return self._name

    def get(self, key: bytes) -> bytes | None:
        self._tx.require_active()
        return self._data.entries.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        self._tx.require_writable()
        self._data.entries[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._tx.require_writable()
        self._data.entries.pop(bytes(key), None)

    def items(self, prefix: bytes = b"") -> Iterator[tuple[bytes, bytes]]:
        self._tx.require_active()
        snapshot = sorted(
            (k, v) for k, v in self._data.entries.items() if k.startswith(prefix)
        )
        return iter(snapshot)

    def next_sequence(self) -> int:
        self._tx.require_writable()
        self._data.sequence += 1
        return self._data.sequence


class _MemoryTransaction:
    def __init__(self, buckets: dict[str, BucketData], writable: bool) -> None:
        self._buckets = buckets
        self._writable = writable
        self._active = True

    @property
    def writable(self) -> bool:
        return self._writable

    def require_active(self) -> None:
        if not self._active:
            raise KeyValueStoreError("transaction has already finished")

    def require_writable(self) -> None:
        self.require_active()
        if not self._writable:
            raise ReadOnlyTransactionError("cannot write inside a read-only transaction")

    def finish(self) -> None:
        self._active = False

    def bucket(self, name: str) -> _MemoryBucket | None:
        self.require_active()
        data = self._buckets.get(name)
        return _MemoryBucket(self, name, data) if data is not None else None

    def create_bucket_if_not_exists(self, name: str) -> _MemoryBucket:
        if not name:
            raise KeyValueStoreError("bucket name required")
        self.require_writable()
        data = self._buckets.setdefault(name, BucketData())
        return _MemoryBucket(self, name, data)

    def delete_bucket(self, name: str) -> None:
        self.require_writable()
        if name not in self._buckets:
            raise BucketNotFoundError(name)
        del self._buckets[name]

    def bucket_names(self) -> list[str]:
        self.require_active()
        return sorted(self._buckets)


class InMemoryKeyValueStore:
    """In-memory implementation of the KeyValueStore protocol.

    Stores buckets in a dictionary. Passing the same ``buckets`` dict to
    several stores makes them share contents, which is how the memory
    backend lets a database be closed and reopened within one process.
    """

    def __init__(
        self,
        path: str | Path = ":memory:",
        buckets: dict[str, BucketData] | None = None,
    ) -> None:
        self._path = Path(path)
        self._buckets: dict[str, BucketData] = buckets if buckets is not None else {}
        self._closed = False
        self._in_transaction = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def view(self) -> Generator[_MemoryTransaction, None, None]:
        self._begin()
        tx = _MemoryTransaction(self._buckets, writable=False)
        try:
            yield tx
        finally:
            tx.finish()
            self._in_transaction = False

    @contextmanager
    def update(self) -> Generator[_MemoryTransaction, None, None]:
        self._begin()
        working = copy.deepcopy(self._buckets)
        tx = _MemoryTransaction(working, writable=True)
        try:
            yield tx
        finally:
            tx.finish()
            self._in_transaction = False
        # Commit: swap in place so stores sharing the dict see it
        self._buckets.clear()
        self._buckets.update(working)

    def close(self) -> None:
        self._closed = True

    def _begin(self) -> None:
        if self._closed:
            raise StoreClosedError(f"store {self._path} is closed")
        if self._in_transaction:
            raise KeyValueStoreError("a transaction is already in progress")
        self._in_transaction = True

    def __repr__(self) -> str:
        return f"InMemoryKeyValueStore({str(self._path)!r})"
