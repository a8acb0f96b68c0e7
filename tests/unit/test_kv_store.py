"""Unit tests for the key-value store adapters.

The same contract is checked against the in-memory and SQLite stores.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Generator

import pytest

from kvsql.adapters.outbound import InMemoryKeyValueStore, SqliteKeyValueStore
from kvsql.ports.outbound import (
    BucketNotFoundError,
    KeyValueStore,
    KeyValueStoreError,
    ReadOnlyTransactionError,
    StoreClosedError,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, temp_dir: Path) -> Generator[KeyValueStore, None, None]:
    """Provide each store implementation in turn."""
    if request.param == "memory":
        s: KeyValueStore = InMemoryKeyValueStore()
    else:
        s = SqliteKeyValueStore(temp_dir / "contract.db")
    yield s
    s.close()


@pytest.mark.unit
class TestKeyValueStoreContract:
    """Behaviour every KeyValueStore must provide."""

    def test_put_and_get(self, store: KeyValueStore) -> None:
        """A committed value can be read back."""
        with store.update() as tx:
            tx.create_bucket_if_not_exists("t").put(b"k", b"v")

        with store.view() as tx:
            bucket = tx.bucket("t")
            assert bucket is not None
            assert bucket.get(b"k") == b"v"
            assert bucket.get(b"missing") is None

    def test_missing_bucket(self, store: KeyValueStore) -> None:
        """Looking up an unknown bucket gives None."""
        with store.view() as tx:
            assert tx.bucket("nope") is None

    def test_items_ordered_by_key_bytes(self, store: KeyValueStore) -> None:
        """Items come back in byte order of their keys."""
        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            for key in (b"b", b"a", b"c", b"ab"):
                bucket.put(key, key.upper())

        with store.view() as tx:
            keys = [k for k, _ in tx.bucket("t").items()]

        assert keys == [b"a", b"ab", b"b", b"c"]

    def test_items_prefix(self, store: KeyValueStore) -> None:
        """A prefix limits items to the matching keys."""
        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            for key in (b"col:a", b"col:b", b"1:a", b"meta:x"):
                bucket.put(key, b"")

        with store.view() as tx:
            keys = [k for k, _ in tx.bucket("t").items(b"col:")]

        assert keys == [b"col:a", b"col:b"]

    def test_delete_during_iteration(self, store: KeyValueStore) -> None:
        """items() is a snapshot, so deleting while iterating is safe."""
        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            for i in range(5):
                bucket.put(f"{i}:x".encode(), b"v")
            for key, _ in bucket.items():
                bucket.delete(key)

        with store.view() as tx:
            assert list(tx.bucket("t").items()) == []

    def test_buckets_are_isolated(self, store: KeyValueStore) -> None:
        """The same key in two buckets holds two values."""
        with store.update() as tx:
            tx.create_bucket_if_not_exists("a").put(b"k", b"1")
            tx.create_bucket_if_not_exists("b").put(b"k", b"2")

        with store.view() as tx:
            assert tx.bucket("a").get(b"k") == b"1"
            assert tx.bucket("b").get(b"k") == b"2"
            assert tx.bucket_names() == ["a", "b"]

    def test_sequence_is_monotonic(self, store: KeyValueStore) -> None:
        """Bucket sequences keep counting across transactions."""
        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            assert [bucket.next_sequence() for _ in range(3)] == [1, 2, 3]

        with store.update() as tx:
            assert tx.bucket("t").next_sequence() == 4

    def test_failed_update_rolls_back(self, store: KeyValueStore) -> None:
        """An exception in an update discards every write."""
        with store.update() as tx:
            tx.create_bucket_if_not_exists("t").put(b"k", b"old")

        with pytest.raises(RuntimeError):
            with store.update() as tx:
                bucket = tx.bucket("t")
                bucket.put(b"k", b"new")
                bucket.next_sequence()
                tx.create_bucket_if_not_exists("other")
                raise RuntimeError("boom")

        with store.update() as tx:
            assert tx.bucket("t").get(b"k") == b"old"
            assert tx.bucket("other") is None
            assert tx.bucket("t").next_sequence() == 1

    def test_view_is_read_only(self, store: KeyValueStore) -> None:
        """Writes inside a view are refused."""
        with store.update() as tx:
            tx.create_bucket_if_not_exists("t")

        with store.view() as tx:
            with pytest.raises(ReadOnlyTransactionError):
                tx.bucket("t").put(b"k", b"v")
            with pytest.raises(ReadOnlyTransactionError):
                tx.create_bucket_if_not_exists("u")

    def test_delete_bucket(self, store: KeyValueStore) -> None:
        """A deleted bucket disappears."""
        with store.update() as tx:
            tx.create_bucket_if_not_exists("t").put(b"k", b"v")

        with store.update() as tx:
            tx.delete_bucket("t")

        with store.view() as tx:
            assert tx.bucket("t") is None

    def test_delete_missing_bucket(self, store: KeyValueStore) -> None:
        """Deleting an unknown bucket raises."""
        with pytest.raises(BucketNotFoundError):
            with store.update() as tx:
                tx.delete_bucket("nope")

    def test_recreated_bucket_starts_empty(self, store: KeyValueStore) -> None:
        """A bucket created again has no entries and a fresh sequence."""
        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            bucket.put(b"1:a", b"v")
            bucket.next_sequence()
            tx.delete_bucket("t")

        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            assert list(bucket.items()) == []
            assert bucket.next_sequence() == 1

    def test_nested_transaction_rejected(self, store: KeyValueStore) -> None:
        """Only one transaction may be open at a time."""
        with store.view():
            with pytest.raises(KeyValueStoreError):
                with store.update():
                    pass

    def test_use_after_close(self, store: KeyValueStore) -> None:
        """A closed store refuses new transactions."""
        store.close()

        assert store.closed
        with pytest.raises(StoreClosedError):
            with store.view():
                pass


@pytest.mark.unit
class TestSqliteKeyValueStore:
    """SQLite-specific behaviour."""

    def test_data_survives_reopen(self, temp_dir: Path) -> None:
        """Entries and sequences persist across reopening the file."""
        path = temp_dir / "persist.db"
        store = SqliteKeyValueStore(path)
        with store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            bucket.put(b"k", b"v")
            bucket.next_sequence()
        store.close()

        reopened = SqliteKeyValueStore(path)
        try:
            with reopened.update() as tx:
                assert tx.bucket("t").get(b"k") == b"v"
                assert tx.bucket("t").next_sequence() == 2
        finally:
            reopened.close()

    def test_busy_commit_leaves_store_usable(self, temp_dir: Path) -> None:
        """A COMMIT blocked by a reader is rolled back and the next update works."""
        path = temp_dir / "busy.db"
        store = SqliteKeyValueStore(path, timeout=0.1)
        reader = sqlite3.connect(path, isolation_level=None)
        try:
            reader.execute("BEGIN")
            reader.execute("SELECT * FROM kv_entries").fetchall()

            with pytest.raises(KeyValueStoreError, match="COMMIT failed"):
                with store.update() as tx:
                    tx.create_bucket_if_not_exists("t").put(b"k", b"lost")

            reader.execute("ROLLBACK")

            with store.update() as tx:
                assert tx.bucket("t") is None
                tx.create_bucket_if_not_exists("t").put(b"k", b"kept")
            with store.view() as tx:
                assert tx.bucket("t").get(b"k") == b"kept"
        finally:
            reader.close()
            store.close()

    def test_directory_path_rejected(self, temp_dir: Path) -> None:
        """A directory cannot be opened as a store."""
        with pytest.raises(KeyValueStoreError):
            SqliteKeyValueStore(temp_dir)

    def test_not_a_database(self, temp_dir: Path) -> None:
        """A file that is not SQLite is rejected."""
        path = temp_dir / "junk.db"
        path.write_bytes(b"this is not an sqlite file at all" * 200)

        with pytest.raises(KeyValueStoreError):
            SqliteKeyValueStore(path)

    def test_close_is_idempotent(self, sqlite_store: SqliteKeyValueStore) -> None:
        """Closing twice is harmless."""
        sqlite_store.close()
        sqlite_store.close()

        assert sqlite_store.closed


@pytest.mark.unit
class TestInMemoryKeyValueStore:
    """In-memory specific behaviour."""

    def test_shared_buckets_see_commits(self) -> None:
        """Stores sharing a bucket dict behave like one file reopened."""
        shared: dict = {}
        first = InMemoryKeyValueStore("db", buckets=shared)
        with first.update() as tx:
            tx.create_bucket_if_not_exists("t").put(b"k", b"v")
        first.close()

        second = InMemoryKeyValueStore("db", buckets=shared)
        with second.view() as tx:
            assert tx.bucket("t").get(b"k") == b"v"
