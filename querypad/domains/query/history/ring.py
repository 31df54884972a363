"""In-session query history with a keyboard recall cursor."""

from __future__ import annotations

from collections.abc import Iterable

NOT_BROWSING = -1


class HistoryRing:
    """Ordered history of executed queries (oldest first) plus a recall cursor.

    ``index`` is ``-1`` while the buffer shows live edits, otherwise it counts
    back from the newest entry (``0`` is the newest). Recall is suppressed
    while the completion popup is visible, since both use the same keys.

    Args:
        max_entries: Oldest entries are dropped beyond this many (None: unbounded).
    """

    def __init__(self, entries: Iterable[str] = (), max_entries: int | None = None):
        self._entries: list[str] = []
        self._index = NOT_BROWSING
        self._draft = ""
        self._max_entries = max_entries
        for entry in entries:
            self._append(entry)

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_browsing(self) -> bool:
        return self._index != NOT_BROWSING

    def __len__(self) -> int:
        return len(self._entries)

    def _append(self, query: str) -> bool:
        if not query.strip():
            return False
        self._entries.append(query)
        if self._max_entries is not None and len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]
        return True

    def submit(self, query: str) -> bool:
        """Append a query and stop browsing. Blank queries are ignored.

        Returns:
            True if the query was added.
        """
        if not self._append(query):
            return False
        self._index = NOT_BROWSING
        self._draft = ""
        return True

    def replace(self, entries: Iterable[str]) -> None:
        """Replace all entries (e.g. history loaded for a new connection)."""
        self._entries = []
        for entry in entries:
            self._append(entry)
        self._index = NOT_BROWSING
        self._draft = ""

    def recall_older(self, popup_visible: bool = False, current_text: str = "") -> str | None:
        """Move one step toward older entries.

        Args:
            popup_visible: When True the call is a no-op.
            current_text: Buffer text, kept as the draft when browsing starts.

        Returns:
            The new buffer text, or None when the buffer should not change.
        """
        if popup_visible or not self._entries:
            return None

        if self._index == NOT_BROWSING:
            self._draft = current_text

        self._index = min(self._index + 1, len(self._entries) - 1)
        return self._entries[len(self._entries) - 1 - self._index]

    def recall_newer(self, popup_visible: bool = False) -> str | None:
        """Move one step toward newer entries, back to the draft at the end.

        Returns:
            The new buffer text, or None when the buffer should not change.
        """
        if popup_visible or self._index == NOT_BROWSING:
            return None

        self._index = max(self._index - 1, NOT_BROWSING)
        if self._index == NOT_BROWSING:
            draft, self._draft = self._draft, ""
            return draft
        return self._entries[len(self._entries) - 1 - self._index]
