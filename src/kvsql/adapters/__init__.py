"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming statements (parser, shell, renderer)
- Outbound adapters: Implement the key-value store (SQLite, in-memory)
"""

from kvsql.adapters.outbound import (
    InMemoryKeyValueStore,
    SqliteKeyValueStore,
    create_store_factory,
)

__all__ = [
    # Outbound adapters
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "create_store_factory",
]
