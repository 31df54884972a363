"""Refreshes the schema snapshot from the external table lister and schema loader."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from querypad.domains.query.app.errors import MetadataLoadError

from .index import SchemaIndex, TableInfo

if TYPE_CHECKING:
    from querypad.shared.core.protocols import SchemaLoaderProtocol, TableListerProtocol

logger = logging.getLogger(__name__)


class MetadataLoader:
    """Loads table and column metadata into a new SchemaIndex snapshot.

    Failures never propagate: each failing part is logged as a
    MetadataLoadError and contributes nothing, so completion falls back to the
    static candidates.

    Args:
        table_lister: Collaborator returning table names.
        schema_loader: Collaborator returning tables with their columns.
        current_connection: Callable returning the currently selected
            connection id. Used to drop snapshots for a connection the user
            has already switched away from.
    """

    def __init__(
        self,
        table_lister: TableListerProtocol | None,
        schema_loader: SchemaLoaderProtocol | None,
        current_connection: Callable[[], str | None] | None = None,
    ):
        self._table_lister = table_lister
        self._schema_loader = schema_loader
        self._current_connection = current_connection
        self._snapshot = SchemaIndex.empty()

    @property
    def snapshot(self) -> SchemaIndex:
        """The latest snapshot; safe to read while a refresh is running."""
        return self._snapshot

    def clear(self) -> SchemaIndex:
        """Drop all metadata (e.g. when the connection is deselected)."""
        self._snapshot = SchemaIndex.empty(version=self._snapshot.version + 1)
        return self._snapshot

    async def refresh(self, connection_id: str) -> SchemaIndex:
        """Reload metadata for ``connection_id`` and publish a new snapshot.

        Returns:
            The published snapshot, or the unchanged current one when the
            selected connection changed while loading.
        """
        tables = await self._load(connection_id, "table list", self._list_tables)
        infos = await self._load(connection_id, "schema columns", self._get_table_info)

        if self._current_connection is not None and self._current_connection() != connection_id:
            logger.debug("Discarding stale schema snapshot for %s", connection_id)
            return self._snapshot

        self._snapshot = SchemaIndex.build(
            infos,
            table_list=tables,
            version=self._snapshot.version + 1,
        )
        logger.debug(
            "Schema snapshot v%d for %s: %d tables, %d with columns",
            self._snapshot.version,
            connection_id,
            len(self._snapshot.table_names),
            len(self._snapshot.tables),
        )
        return self._snapshot

    def _list_tables(self, connection_id: str) -> list[str]:
        if self._table_lister is None:
            return []
        return [str(name) for name in self._table_lister.list_tables(connection_id)]

    def _get_table_info(self, connection_id: str) -> list[TableInfo]:
        if self._schema_loader is None:
            return []
        infos = []
        for item in self._schema_loader.get_table_info(connection_id):
            infos.append(item if isinstance(item, TableInfo) else TableInfo.from_dict(item))
        return infos

    async def _load(self, connection_id: str, what: str, fn: Callable[[str], Sequence]) -> list:
        try:
            return list(await asyncio.to_thread(fn, connection_id))
        except Exception as e:
            error = MetadataLoadError(connection_id, what, e)
            logger.warning("%s", error)
            return []
