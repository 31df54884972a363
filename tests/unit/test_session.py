"""Tests for the QuerySession facade."""

from __future__ import annotations

import pytest

from querypad.config import Settings
from querypad.domains.query.app.errors import ValidationError
from querypad.domains.query.app.execution import QueryResult
from querypad.domains.query.app.session import QuerySession
from querypad.domains.query.completion import CompletionKind
from querypad.domains.query.schema.index import TableInfo


class FakeBackend:
    """Executor, lister and schema loader in one object."""

    def __init__(self):
        self.executed: list[tuple[str, str]] = []
        self.tables = [TableInfo("customers", ("id", "name"))]

    def execute(self, connection_id, sql):
        self.executed.append((connection_id, sql))
        return QueryResult.create(["n"], [(1,)])

    def list_tables(self, connection_id):
        return [info.table_name for info in self.tables]

    def get_table_info(self, connection_id):
        return list(self.tables)


class FakeHistoryStore:
    def __init__(self, queries=()):
        self.queries = list(queries)
        self.saved: list[tuple[str, str]] = []

    def save_query(self, connection_name, query):
        self.saved.append((connection_name, query))

    def load_for_connection(self, connection_name):
        return list(self.queries) if connection_name == "db" else []


def _session(backend=None, **kwargs) -> QuerySession:
    backend = backend or FakeBackend()
    return QuerySession(backend, table_lister=backend, schema_loader=backend, **kwargs)


class TestSelectConnection:
    """Tests for switching connections."""

    @pytest.mark.asyncio
    async def test_loads_schema(self):
        """Selecting a connection loads its schema snapshot."""
        session = _session()
        schema = await session.select_connection("db")
        assert session.connection_id == "db"
        assert schema.columns_for("customers") == ("id", "name")
        assert session.schema is schema

    @pytest.mark.asyncio
    async def test_seeds_history_oldest_first(self):
        """Stored history seeds the ring in the same oldest-first order."""
        session = _session(history_store=FakeHistoryStore(["SELECT 1", "SELECT 2", "SELECT 3"]))
        await session.select_connection("db")
        assert session.history.entries == ("SELECT 1", "SELECT 2", "SELECT 3")

    @pytest.mark.asyncio
    async def test_deselect_clears_everything(self):
        """Selecting None drops history and metadata."""
        session = _session(history_store=FakeHistoryStore(["SELECT 1"]))
        await session.select_connection("db")
        await session.select_connection(None)
        assert session.history.entries == ()
        assert session.schema.table_names == []

    @pytest.mark.asyncio
    async def test_refresh_schema_picks_up_new_tables(self):
        """refresh_schema reloads metadata for the selected connection."""
        backend = FakeBackend()
        session = _session(backend)
        first = await session.select_connection("db")
        backend.tables.append(TableInfo("orders", ("id", "total")))

        refreshed = await session.refresh_schema()
        assert refreshed.version > first.version
        assert refreshed.columns_for("orders") == ("id", "total")

    @pytest.mark.asyncio
    async def test_refresh_without_connection(self):
        """Nothing is loaded when no connection is selected."""
        session = _session()
        assert (await session.refresh_schema()).table_names == []


class TestCompletions:
    """Tests for QuerySession.get_completions."""

    @pytest.mark.asyncio
    async def test_uses_current_snapshot(self):
        """Column candidates come from the loaded schema."""
        session = _session()
        await session.select_connection("db")
        candidates = session.get_completions("SELECT c. FROM customers c", (0, 9))
        columns = [c.label for c in candidates if c.kind is CompletionKind.COLUMN]
        assert columns == ["id", "name"]

    def test_floor_before_any_connection(self):
        """Without a snapshot only static candidates are offered."""
        session = _session()
        candidates = session.get_completions("SELECT c. FROM customers c", (0, 9))
        assert all(c.kind in (CompletionKind.SNIPPET, CompletionKind.KEYWORD) for c in candidates)

    def test_configured_floor(self):
        """Settings keywords and snippets form the floor."""
        session = _session(settings=Settings(keywords=("SELECT",), snippets=()))
        assert [c.label for c in session.get_completions("S", (0, 1))] == ["SELECT"]


class TestKeysAndRuns:
    """Tests for key routing and query runs through the session."""

    @pytest.mark.asyncio
    async def test_run_then_recall(self):
        """An executed query can be recalled with the older key."""
        session = _session()
        await session.run_query("db", "SELECT 1")
        result = session.on_key_event("up", popup_visible=False, current_text="")
        assert result.handled
        assert result.new_buffer_text == "SELECT 1"

    def test_run_without_connection(self):
        """run_query validates synchronously."""
        session = _session()
        with pytest.raises(ValidationError):
            session.run_query(session.connection_id, "SELECT 1")

    @pytest.mark.asyncio
    async def test_run_saves_to_store(self):
        """Successful runs are persisted when a store is injected."""
        store = FakeHistoryStore()
        session = _session(history_store=store)
        await session.run_query("db", "SELECT 1")
        assert store.saved == [("db", "SELECT 1")]

    def test_configured_history_keys(self):
        """Settings choose which keys walk history."""
        session = _session(settings=Settings(history_older_key="ctrl+p", history_newer_key="ctrl+n"))
        session.history.submit("SELECT 1")
        assert not session.on_key_event("up", popup_visible=False).handled
        assert session.on_key_event("ctrl+p", popup_visible=False).new_buffer_text == "SELECT 1"
