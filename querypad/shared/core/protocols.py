"""Protocols for dependency injection in querypad services.

This module defines Protocol classes for the external collaborators the
query domain consumes, so tests and alternative backends can be swapped in.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from querypad.domains.query.app.execution import QueryResult
    from querypad.domains.query.schema.index import TableInfo


@runtime_checkable
class QueryExecutorProtocol(Protocol):
    """Protocol for the transport that runs SQL against a data source."""

    def execute(self, connection_id: str, sql: str) -> QueryResult:
        """Execute SQL.

        Args:
            connection_id: Identifier of the selected data source.
            sql: SQL text to execute.

        Returns:
            The query result.

        Raises:
            ExecutionError: On syntax, connectivity or permission failures.
        """
        ...


@runtime_checkable
class TableListerProtocol(Protocol):
    """Protocol for listing the tables of a data source."""

    def list_tables(self, connection_id: str) -> Sequence[str]:
        """Return table names for the connection."""
        ...


@runtime_checkable
class SchemaLoaderProtocol(Protocol):
    """Protocol for loading column metadata."""

    def get_table_info(self, connection_id: str) -> Sequence[TableInfo]:
        """Return every table with its columns."""
        ...


@runtime_checkable
class HistoryStoreProtocol(Protocol):
    """Protocol for query history storage.

    This protocol defines the interface for persisting executed queries
    across sessions.
    """

    def save_query(self, connection_id: str, query: str) -> None:
        """Record a successful query as the newest entry for a connection."""
        ...

    def load_for_connection(self, connection_id: str) -> list[str]:
        """Return stored queries for a connection, oldest first."""
        ...


@runtime_checkable
class SettingsStoreProtocol(Protocol):
    """Protocol for settings storage."""

    def load_all(self) -> dict:
        """Load settings."""
        ...

    def save_all(self, settings: dict) -> None:
        """Save settings."""
        ...
