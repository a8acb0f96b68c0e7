"""Builds the function the session uses to open database files."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from kvsql.adapters.outbound.memory_kv_store import BucketData, InMemoryKeyValueStore
from kvsql.adapters.outbound.sqlite_kv_store import SqliteKeyValueStore
from kvsql.infrastructure.config import StorageConfig
from kvsql.ports.outbound import KeyValueStore

StoreFactory = Callable[[Path], KeyValueStore]


def create_store_factory(storage: StorageConfig) -> StoreFactory:
    """Return an opener for the configured backend.

    The memory backend keeps one bucket dict per path for the lifetime of
    the factory, so ``USE`` of a previously opened name finds its tables.
    """
    if storage.backend == "memory":
        files: dict[Path, dict[str, BucketData]] = {}

        def open_memory(path: Path) -> KeyValueStore:
            return InMemoryKeyValueStore(path, buckets=files.setdefault(path, {}))

        return open_memory

    def open_sqlite(path: Path) -> KeyValueStore:
        return SqliteKeyValueStore(path, timeout=storage.lock_timeout_seconds)

    return open_sqlite
