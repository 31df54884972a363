"""Query persistence stores."""

from .history import DEFAULT_MAX_ENTRIES, HistoryStore

__all__ = ["DEFAULT_MAX_ENTRIES", "HistoryStore"]
