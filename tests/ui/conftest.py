"""Pytest fixtures for UI (Pilot) tests."""

from __future__ import annotations

import pytest

from querypad.config import Settings
from querypad.domains.connections.sqlite import SQLiteBackend
from querypad.domains.query.app.session import QuerySession
from querypad.domains.query.store.history import HistoryStore
from querypad.ui.app import QueryPadApp


@pytest.fixture
def sqlite_backend():
    backend = SQLiteBackend(max_rows=100)
    yield backend
    backend.close()


@pytest.fixture
def make_app(sqlite_backend, history_path):
    """Build a QueryPadApp over the SQLite backend with an isolated history file."""

    def _make(connection_id: str | None = None, settings: Settings | None = None) -> QueryPadApp:
        session = QuerySession(
            sqlite_backend,
            table_lister=sqlite_backend,
            schema_loader=sqlite_backend,
            settings=settings,
            history_store=HistoryStore(history_path),
        )
        return QueryPadApp(session, connection_id=connection_id)

    return _make
