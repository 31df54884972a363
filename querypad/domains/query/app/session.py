"""Editor-facing facade over completion, history recall and execution."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING

from querypad.config import Settings
from querypad.domains.query.completion import CompletionCandidate, CursorPosition, assemble
from querypad.domains.query.history.keys import HistoryKeyDispatcher, KeyEventResult
from querypad.domains.query.history.ring import HistoryRing
from querypad.domains.query.schema.index import SchemaIndex
from querypad.domains.query.schema.loader import MetadataLoader

from .execution import ExecutionCoordinator, QueryResult

if TYPE_CHECKING:
    from querypad.shared.core.protocols import (
        HistoryStoreProtocol,
        QueryExecutorProtocol,
        SchemaLoaderProtocol,
        TableListerProtocol,
    )

logger = logging.getLogger(__name__)


class QuerySession:
    """State for one query editor buffer.

    Wires the external collaborators to the completion engine, the history
    ring and the execution coordinator, and exposes the three calls an editor
    needs: get_completions, on_key_event and run_query.

    Args:
        executor: Runs SQL against a connection.
        table_lister: Lists tables for a connection.
        schema_loader: Loads tables with columns for a connection.
        settings: Resolved settings (defaults when omitted).
        history_store: Optional persistent history, used to seed the ring on
            connection change and to save successful queries.
    """

    def __init__(
        self,
        executor: QueryExecutorProtocol,
        table_lister: TableListerProtocol | None = None,
        schema_loader: SchemaLoaderProtocol | None = None,
        settings: Settings | None = None,
        history_store: HistoryStoreProtocol | None = None,
    ):
        self.settings = settings or Settings()
        self._static = self.settings.static_candidates
        self._history_store = history_store
        self._connection_id: str | None = None

        self.history = HistoryRing(max_entries=self.settings.max_history)
        self.keys = HistoryKeyDispatcher(
            self.history,
            older_key=self.settings.history_older_key,
            newer_key=self.settings.history_newer_key,
        )
        self.metadata = MetadataLoader(
            table_lister,
            schema_loader,
            current_connection=lambda: self._connection_id,
        )
        self.coordinator = ExecutionCoordinator(
            executor,
            history=self.history,
            history_store=history_store,
        )

    @property
    def connection_id(self) -> str | None:
        return self._connection_id

    @property
    def schema(self) -> SchemaIndex:
        return self.metadata.snapshot

    async def select_connection(self, connection_id: str | None) -> SchemaIndex:
        """Switch the active connection, reload its history and refresh metadata."""
        self._connection_id = connection_id
        logger.info("Selected connection %s", connection_id)
        if connection_id is None:
            self.history.replace(())
            return self.metadata.clear()

        if self._history_store is not None:
            self.history.replace(self._history_store.load_for_connection(connection_id))

        return await self.metadata.refresh(connection_id)

    async def refresh_schema(self) -> SchemaIndex:
        """Reload metadata for the active connection."""
        if self._connection_id is None:
            return self.metadata.snapshot
        return await self.metadata.refresh(self._connection_id)

    def get_completions(self, sql: str, cursor: CursorPosition | tuple[int, int]) -> list[CompletionCandidate]:
        """Candidates for the popup at ``cursor``, using the current schema snapshot."""
        return assemble(sql, cursor, self.metadata.snapshot, static=self._static)

    def on_key_event(self, key: str, popup_visible: bool, current_text: str = "") -> KeyEventResult:
        """Route a key press to history recall unless the popup owns it."""
        return self.keys.on_key_event(key, popup_visible, current_text=current_text)

    def run_query(self, connection_id: str | None, sql: str) -> Awaitable[QueryResult]:
        """Execute ``sql``. Raises ValidationError immediately without a connection."""
        return self.coordinator.run(connection_id, sql)
