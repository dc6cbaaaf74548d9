"""fluentql Exceptions - Error taxonomy for the query builder.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations


class QueryBuilderError(Exception):
    """Base exception for query builder errors."""
    pass


class InvalidArgumentError(QueryBuilderError, ValueError):
    """A clause was configured with an argument the builder cannot accept."""
    pass


class UnsupportedOperationError(QueryBuilderError, RuntimeError):
    """The active grammar does not implement the requested operation."""
    pass


class ConnectionNotConfiguredError(QueryBuilderError):
    """A statement was executed on a builder that has no connection."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot run {operation}(): the query builder has no connection"
        )
        self.operation = operation


__all__ = [
    "QueryBuilderError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "ConnectionNotConfiguredError",
]
