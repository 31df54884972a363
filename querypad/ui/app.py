"""Textual front end: a SQL editor with completion, history recall and a results grid."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from typing import Any

from rich.markup import escape as escape_markup
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.events import Key
from textual.timer import Timer
from textual.widgets import Footer, Static, TextArea
from textual.worker import Worker

from querypad.domains.query.app.errors import QueryPadError, ValidationError
from querypad.domains.query.app.execution import ExecutionState, QueryResult
from querypad.domains.query.app.session import QuerySession
from querypad.domains.query.completion import resolve_context
from querypad.shared.core.utils import format_duration_ms, offset_to_location

from .widgets import AutocompleteDropdown, QueryTextArea, ResultsTable

logger = logging.getLogger(__name__)

AUTOCOMPLETE_DEBOUNCE = 0.1


class QueryPadApp(App):
    """Single-buffer SQL editor bound to one QuerySession."""

    TITLE = "querypad"

    CSS = """
    Screen {
        layers: base autocomplete;
    }

    #query-area {
        height: 40%;
        border: round $border;
        border-title-align: left;
    }

    #query-input {
        height: 100%;
        border: none;
    }

    #results-area {
        height: 1fr;
        border: round $border;
        border-title-align: left;
    }

    #status-bar {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #autocomplete-dropdown {
        layer: autocomplete;
        position: absolute;
    }
    """

    BINDINGS = [
        Binding("ctrl+enter", "run_query", "Run", priority=True),
        Binding("f5", "run_query", "Run", priority=True),
        Binding("ctrl+r", "refresh_schema", "Refresh schema"),
        Binding("ctrl+l", "clear_query", "Clear"),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, session: QuerySession, connection_id: str | None = None) -> None:
        super().__init__()
        self.session = session
        self._startup_connection = connection_id
        self.autocomplete_visible = False
        self._autocomplete_debounce_timer: Timer | None = None
        self._autocomplete_source: str | None = None
        self._autocomplete_just_applied = False
        self._history_just_recalled = False
        self._text_just_changed = False
        self._query_worker: Worker[Any] | None = None
        self._query_start_time = 0.0
        self._last_elapsed_ms = 0.0
        self._unsubscribe = session.coordinator.subscribe(self._on_execution_state)

    def compose(self) -> ComposeResult:
        with Vertical(id="main-panel"):
            with Container(id="query-area"):
                yield QueryTextArea("", language="sql", id="query-input")
                yield AutocompleteDropdown(id="autocomplete-dropdown")
            with Container(id="results-area"):
                yield ResultsTable(id="results-table", zebra_stripes=True, show_header=False)
        yield Static("Not connected", id="status-bar")
        yield Footer()

    @property
    def query_input(self) -> QueryTextArea:
        return self.query_one("#query-input", QueryTextArea)

    @property
    def autocomplete_dropdown(self) -> AutocompleteDropdown:
        return self.query_one("#autocomplete-dropdown", AutocompleteDropdown)

    @property
    def results_table(self) -> ResultsTable:
        return self.query_one("#results-table", ResultsTable)

    @property
    def status_bar(self) -> Static:
        return self.query_one("#status-bar", Static)

    def on_mount(self) -> None:
        self.query_one("#query-area").border_title = "Query"
        self.query_one("#results-area").border_title = "Results"
        self.query_input.focus()
        if self._startup_connection:
            self.select_connection(self._startup_connection)

    def on_unmount(self) -> None:
        self._unsubscribe()

    # Connection and schema

    def select_connection(self, connection_id: str | None) -> Worker[Any]:
        """Switch connection in a worker; the schema loads in the background."""
        return self.run_worker(
            self._select_connection(connection_id),
            name="select-connection",
            group="schema",
            exclusive=True,
        )

    async def _select_connection(self, connection_id: str | None) -> None:
        self.status_bar.update("Loading schema..." if connection_id else "Not connected")
        await self.session.select_connection(connection_id)
        self._update_status_bar()

    def action_refresh_schema(self) -> None:
        if self.session.connection_id is None:
            self.notify("Not connected", severity="warning")
            return
        self.run_worker(self._refresh_schema(), name="refresh-schema", group="schema", exclusive=True)

    async def _refresh_schema(self) -> None:
        schema = await self.session.refresh_schema()
        self._update_status_bar()
        self.notify(f"Loaded {len(schema.table_names)} tables")

    def _update_status_bar(self) -> None:
        connection_id = self.session.connection_id
        if connection_id is None:
            self.status_bar.update("Not connected")
            return

        parts = [f"[bold]{escape_markup(connection_id)}[/]"]
        parts.append(f"{len(self.session.schema.table_names)} tables")

        coordinator = self.session.coordinator
        if coordinator.state is ExecutionState.PENDING:
            parts.append("Running query...")
        elif coordinator.state is ExecutionState.FAILED:
            parts.append("[red]Query failed[/]")
        elif coordinator.state is ExecutionState.SUCCEEDED and coordinator.result is not None:
            parts.append(self._describe_result(coordinator.result))

        self.status_bar.update("  |  ".join(parts))

    def _describe_result(self, result: QueryResult) -> str:
        time_str = format_duration_ms(self._last_elapsed_ms)
        if not result.returns_rows:
            return f"{result.rows_affected or 0} row(s) affected in {time_str}"
        suffix = "+" if result.truncated else ""
        return f"{result.row_count}{suffix} rows in {time_str}"

    # Autocomplete

    def _show_autocomplete(self, partial_word: str) -> None:
        candidates = self.session.get_completions(self.query_input.text, self.query_input.cursor_location)
        dropdown = self.autocomplete_dropdown
        dropdown.set_candidates(candidates, partial_word)
        if not dropdown.filtered:
            self._hide_autocomplete()
            return

        row, column = self.query_input.cursor_location
        dropdown.styles.offset = (column + 2, row + 1)
        dropdown.show()
        self._autocomplete_source = self.query_input.text
        self.autocomplete_visible = True

    def _hide_autocomplete(self) -> None:
        self.autocomplete_dropdown.hide()
        self._autocomplete_source = None
        self.autocomplete_visible = False

    def _apply_autocomplete(self) -> None:
        """Replace the word under the cursor with the selected candidate."""
        candidate = self.autocomplete_dropdown.get_selected()
        if candidate is None:
            self._hide_autocomplete()
            return

        text = self.query_input.text
        replace_range = candidate.replace_range
        if text != self._autocomplete_source:
            # Typed ahead of the debounce; recompute the word bounds
            replace_range = resolve_context(text, self.query_input.cursor_location).replace_range

        start = offset_to_location(text, replace_range.start_offset)
        end = offset_to_location(text, replace_range.end_offset)
        self._autocomplete_just_applied = True
        self.query_input.replace(candidate.insert_text, start, end, maintain_selection_offset=False)
        self._hide_autocomplete()

    def _trigger_autocomplete(self) -> None:
        self._autocomplete_debounce_timer = None
        context = resolve_context(self.query_input.text, self.query_input.cursor_location)
        if context.partial_word or context.qualifier:
            self._show_autocomplete(context.partial_word)
        else:
            self._hide_autocomplete()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id != "query-input":
            return

        self._text_just_changed = True

        if self._autocomplete_just_applied or self._history_just_recalled:
            self._autocomplete_just_applied = False
            self._history_just_recalled = False
            self._hide_autocomplete()
            return

        if self._autocomplete_debounce_timer is not None:
            self._autocomplete_debounce_timer.stop()
        self._autocomplete_debounce_timer = self.set_timer(AUTOCOMPLETE_DEBOUNCE, self._trigger_autocomplete)

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        """Hide autocomplete when the cursor moves without a text change."""
        if not self.autocomplete_visible or event.text_area.id != "query-input":
            return
        if self._text_just_changed:
            self._text_just_changed = False
            return
        self._hide_autocomplete()

    def on_key(self, event: Key) -> None:
        """Route keys to history recall first, then to the popup."""
        if self.focused is not self.query_input:
            return

        result = self.session.on_key_event(
            event.key,
            self.autocomplete_visible,
            current_text=self.query_input.text,
        )
        if result.handled:
            event.prevent_default()
            event.stop()
            if result.new_buffer_text is not None:
                self._load_query_text(result.new_buffer_text)
            return

        if not self.autocomplete_visible:
            return

        dropdown = self.autocomplete_dropdown
        if event.key == "down":
            dropdown.move_selection(1)
        elif event.key == "up":
            dropdown.move_selection(-1)
        elif event.key in ("tab", "enter"):
            self._apply_autocomplete()
        elif event.key == "escape":
            self._hide_autocomplete()
        else:
            return
        event.prevent_default()
        event.stop()

    def _load_query_text(self, text: str) -> None:
        if text == self.query_input.text:
            return
        self._history_just_recalled = True
        self.query_input.load_text(text)
        self.query_input.move_cursor(self.query_input.document.end)

    def action_clear_query(self) -> None:
        self._hide_autocomplete()
        self.query_input.load_text("")

    # Execution

    def action_run_query(self) -> None:
        """Execute the buffer on the selected connection."""
        self._hide_autocomplete()
        sql = self.query_input.text
        if not sql.strip():
            self.notify("No query to execute", severity="warning")
            return

        try:
            pending = self.session.run_query(self.session.connection_id, sql)
        except ValidationError as e:
            self.notify(str(e), severity="warning")
            return

        self._query_start_time = time.perf_counter()
        self._query_worker = self.run_worker(
            self._await_query(pending),
            name="query_execution",
            exclusive=True,
        )

    async def _await_query(self, pending: Awaitable[QueryResult]) -> None:
        try:
            result = await pending
        except QueryPadError as e:
            self.notify(escape_markup(str(e)), title="Query error", severity="error")
            return

        self._last_elapsed_ms = (time.perf_counter() - self._query_start_time) * 1000
        await self._display_result(result)
        self._update_status_bar()

    async def _display_result(self, result: QueryResult) -> None:
        if result.returns_rows:
            columns, rows = list(result.columns), list(result.rows)
        else:
            columns = ["Result"]
            rows = [(f"{result.rows_affected or 0} row(s) affected",)]

        old_table = self.results_table
        was_focused = old_table.has_focus
        await old_table.remove()
        new_table = ResultsTable.from_rows(columns, rows, id="results-table")
        await self.query_one("#results-area", Container).mount(new_table)
        if was_focused:
            new_table.focus()

        if result.truncated:
            self.notify(f"Showing the first {result.row_count} rows (truncated)", severity="warning")

    def _on_execution_state(self, state: ExecutionState) -> None:
        logger.debug("Execution state: %s", state.value)
        if self.is_running:
            self._update_status_bar()
