"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that kvsql depends on,
namely the embedded ordered key-value store.
"""

from kvsql.ports.outbound.kv_store import (
    Bucket,
    BucketNotFoundError,
    KeyValueStore,
    KeyValueStoreError,
    ReadOnlyTransactionError,
    StoreClosedError,
    Transaction,
)

__all__ = [
    "Bucket",
    "Transaction",
    "KeyValueStore",
    "KeyValueStoreError",
    "BucketNotFoundError",
    "ReadOnlyTransactionError",
    "StoreClosedError",
]
