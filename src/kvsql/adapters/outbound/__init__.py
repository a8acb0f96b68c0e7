"""Outbound adapters - implementations of outbound ports.

These adapters implement the key-value store the databases live in.
"""

from kvsql.adapters.outbound.memory_kv_store import BucketData, InMemoryKeyValueStore
from kvsql.adapters.outbound.sqlite_kv_store import SqliteKeyValueStore
from kvsql.adapters.outbound.store_factory import StoreFactory, create_store_factory

__all__ = [
    "BucketData",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "StoreFactory",
    "create_store_factory",
]
