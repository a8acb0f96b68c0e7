"""Inbound ports - APIs offered to front ends."""

from kvsql.ports.inbound.query_service import ExecutionResult, QueryService, Row

__all__ = [
    "ExecutionResult",
    "QueryService",
    "Row",
]
