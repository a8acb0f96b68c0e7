"""Application layer for kvsql.

The application layer orchestrates domain logic to fulfill use cases:
one statement in, one result out.

Exports:
    - QueryEngine: Main entry point; parses and executes statements
    - QueryExecutor: Executes typed commands against the active database
    - Session: Owns the active database handle
"""

from kvsql.application.executor import QueryExecutor
from kvsql.application.query_engine import QueryEngine
from kvsql.application.session import Session

__all__ = [
    "QueryEngine",
    "QueryExecutor",
    "Session",
]
