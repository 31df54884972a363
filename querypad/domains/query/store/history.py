"""Executed queries kept across sessions, one list per connection.

The file is a JSON object mapping a connection id to its queries, oldest
first. That is the order HistoryRing holds, so a loaded list seeds the ring
as is.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from querypad.shared.core.store import CONFIG_DIR, JSONFileStore

DEFAULT_MAX_ENTRIES = 100


class HistoryStore(JSONFileStore):
    """Per-connection query history in ``~/.querypad/query_history.json``.

    Args:
        file_path: History file (defaults to the config dir).
        max_entries: Newest queries kept per connection.
    """

    def __init__(self, file_path: Path | None = None, max_entries: int | None = None) -> None:
        super().__init__(file_path or CONFIG_DIR / "query_history.json")
        self.max_entries = max_entries or DEFAULT_MAX_ENTRIES

    @staticmethod
    def _queries(document: dict[str, Any], connection_id: str) -> list[str]:
        queries = document.get(connection_id)
        if not isinstance(queries, list):
            return []
        return [q for q in queries if isinstance(q, str) and q.strip()]

    def load_for_connection(self, connection_id: str) -> list[str]:
        """Stored queries for ``connection_id``, oldest first."""
        return self._queries(self.load(), connection_id)

    def save_query(self, connection_id: str, query: str) -> None:
        """Record ``query`` as the newest entry for ``connection_id``.

        Re-running a stored query moves it to the end rather than adding a copy.
        Blank queries are ignored.
        """
        query = query.strip()
        if not query:
            return

        document = self.load()
        queries = [q for q in self._queries(document, connection_id) if q.strip() != query]
        queries.append(query)
        document[connection_id] = queries[-self.max_entries :]
        self.save(document)

    def clear_for_connection(self, connection_id: str) -> int:
        """Forget every query for ``connection_id``. Returns how many were removed."""
        document = self.load()
        removed = len(self._queries(document, connection_id))
        if document.pop(connection_id, None) is not None:
            self.save(document)
        return removed
