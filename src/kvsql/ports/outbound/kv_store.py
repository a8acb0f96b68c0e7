"""Key-value store port.

This outbound port defines the contract for the embedded ordered key-value
store that holds every database. A store is one file; inside it, named
buckets (one per table) hold ordered byte keys.

The store is responsible for:
- Isolated, ordered keyspaces ("buckets")
- Atomic multi-key transactions
- A monotonic sequence counter per bucket

Usage:
    with store.update() as tx:
        bucket = tx.create_bucket_if_not_exists("users")
        bucket.put(b"1:name", b"Alice")

    with store.view() as tx:
        for key, value in tx.bucket("users").items():
            ...
"""

from __future__ import annotations

from abc import abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Iterator, Protocol


class KeyValueStoreError(Exception):
    """Error raised by a key-value store adapter."""

    pass


class BucketNotFoundError(KeyValueStoreError):
    """The requested bucket does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"bucket '{name}' not found")
        self.name = name


class ReadOnlyTransactionError(KeyValueStoreError):
    """A write was attempted inside a read-only transaction."""

    pass


class StoreClosedError(KeyValueStoreError):
    """The store was used after close()."""

    pass


class Bucket(Protocol):
    """An isolated ordered keyspace inside a transaction.

    A bucket handle is only valid inside the transaction that produced it.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the bucket name."""
        ...

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """Return the value stored under ``key`` or None."""
        ...

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            ReadOnlyTransactionError: If the transaction is read-only.
        """
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Remove ``key``. Deleting a missing key is a no-op.

        Raises:
            ReadOnlyTransactionError: If the transaction is read-only.
        """
        ...

    @abstractmethod
    def items(self, prefix: bytes = b"") -> Iterator[tuple[bytes, bytes]]:
        """Iterate key/value pairs in ascending byte order of the key.

        The iteration works on a snapshot taken when it starts, so the
        bucket may be modified while iterating.

        Args:
            prefix: Only yield keys starting with this prefix.
        """
        ...

    @abstractmethod
    def next_sequence(self) -> int:
        """Increment and return the bucket's sequence counter.

        The first call on a new bucket returns 1. Values are never reused.

        Raises:
            ReadOnlyTransactionError: If the transaction is read-only.
        """
        ...


class Transaction(Protocol):
    """A read-only or read-write transaction over the whole store."""

    @property
    @abstractmethod
    def writable(self) -> bool:
        """Whether the transaction may modify the store."""
        ...

    @abstractmethod
    def bucket(self, name: str) -> Bucket | None:
        """Return the bucket called ``name`` or None if it does not exist."""
        ...

    @abstractmethod
    def create_bucket_if_not_exists(self, name: str) -> Bucket:
        """Return the bucket called ``name``, creating it if needed.

        Raises:
            ReadOnlyTransactionError: If the transaction is read-only.
        """
        ...

    @abstractmethod
    def delete_bucket(self, name: str) -> None:
        """Delete a bucket with all its keys and its sequence.

        Raises:
            BucketNotFoundError: If the bucket does not exist.
            ReadOnlyTransactionError: If the transaction is read-only.
        """
        ...

    @abstractmethod
    def bucket_names(self) -> list[str]:
        """Return the names of all buckets in ascending order."""
        ...


class KeyValueStore(Protocol):
    """Protocol for an embedded ordered key-value store.

    ``update()`` commits when the block exits normally and rolls back when
    it raises. ``view()`` never commits anything.
    """

    @property
    @abstractmethod
    def path(self) -> Path:
        """Return the location of the store."""
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether close() has been called."""
        ...

    @abstractmethod
    def view(self) -> AbstractContextManager[Transaction]:
        """Open a read-only transaction."""
        ...

    @abstractmethod
    def update(self) -> AbstractContextManager[Transaction]:
        """Open a read-write transaction."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the store. Closing twice is a no-op."""
        ...
