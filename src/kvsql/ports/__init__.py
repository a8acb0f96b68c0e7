"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (QueryService)
- Outbound ports: Dependencies on external systems (KeyValueStore)

Adapters implement these ports with concrete functionality.
"""

from kvsql.ports.inbound import ExecutionResult, QueryService, Row
from kvsql.ports.outbound import (
    Bucket,
    BucketNotFoundError,
    KeyValueStore,
    KeyValueStoreError,
    ReadOnlyTransactionError,
    StoreClosedError,
    Transaction,
)

__all__ = [
    # Inbound ports
    "ExecutionResult",
    "QueryService",
    "Row",
    # Outbound ports
    "Bucket",
    "BucketNotFoundError",
    "KeyValueStore",
    "KeyValueStoreError",
    "ReadOnlyTransactionError",
    "StoreClosedError",
    "Transaction",
]
