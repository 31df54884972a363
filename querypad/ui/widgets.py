"""Custom widgets for querypad."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import pyarrow as pa
from rich.markup import escape as escape_markup
from textual.containers import VerticalScroll
from textual.widgets import Static, TextArea
from textual_fastdatatable import DataTable as FastDataTable
from textual_fastdatatable.backend import ArrowBackend

from querypad.domains.query.completion import CompletionCandidate
from querypad.shared.core.utils import format_cell

if TYPE_CHECKING:
    from textual.events import Key

MAX_COLUMN_CONTENT_WIDTH = 60
MAX_VISIBLE_ITEMS = 50


class QueryTextArea(TextArea):
    """TextArea that defers Enter to the app while the completion popup is showing."""

    async def _on_key(self, event: Key) -> None:
        if event.key in ("enter", "tab"):
            app = self.app
            if getattr(app, "autocomplete_visible", False):
                # The app accepts the selected candidate; don't insert a newline or tab
                event.prevent_default()
                return
        await super()._on_key(event)


class AutocompleteDropdown(VerticalScroll):
    """Dropdown listing completion candidates, filtered by the word being typed."""

    DEFAULT_CSS = """
    AutocompleteDropdown {
        layer: autocomplete;
        width: auto;
        min-width: 25;
        max-width: 80;
        height: auto;
        max-height: 12;
        background: $surface;
        border: round $border;
        padding: 0;
        display: none;
        scrollbar-size: 1 1;
        constrain: inside inside;
    }

    AutocompleteDropdown.visible {
        display: block;
    }

    AutocompleteDropdown .autocomplete-item {
        width: 100%;
        height: 1;
        padding: 0 1;
    }

    AutocompleteDropdown .autocomplete-item.selected {
        background: $primary;
        color: $background;
    }
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.candidates: list[CompletionCandidate] = []
        self.filtered: list[CompletionCandidate] = []
        self.selected_index: int = 0
        self.filter_text: str = ""

    def set_candidates(self, candidates: Sequence[CompletionCandidate], filter_text: str = "") -> None:
        """Set the candidates and the prefix they are filtered by."""
        self.candidates = list(candidates)
        self.filter_text = filter_text.lower()

        if self.filter_text:
            self.filtered = [c for c in self.candidates if c.label.lower().startswith(self.filter_text)]
        else:
            self.filtered = self.candidates[:MAX_VISIBLE_ITEMS]

        self.selected_index = 0
        self._rebuild()
        self.scroll_to(y=0, animate=False)

    def move_selection(self, delta: int) -> None:
        """Move selection up or down, wrapping around."""
        if not self.filtered:
            return
        old_index = self.selected_index
        self.selected_index = (self.selected_index + delta) % len(self.filtered)
        children = list(self.children)
        if old_index < len(children):
            children[old_index].remove_class("selected")
        if self.selected_index < len(children):
            children[self.selected_index].add_class("selected")
        self.scroll_to(y=max(0, self.selected_index - 5), animate=False)

    def get_selected(self) -> CompletionCandidate | None:
        if self.filtered and 0 <= self.selected_index < len(self.filtered):
            return self.filtered[self.selected_index]
        return None

    def _rebuild(self) -> None:
        self.remove_children()
        for i, candidate in enumerate(self.filtered):
            text = escape_markup(candidate.label)
            if candidate.detail:
                text += f" [dim]{escape_markup(candidate.detail)}[/]"
            label = Static(f" {text} ", classes="autocomplete-item")
            if i == self.selected_index:
                label.add_class("selected")
            self.mount(label)

    def show(self) -> None:
        self.add_class("visible")

    def hide(self) -> None:
        """Hide the dropdown and reset selection."""
        self.remove_class("visible")
        self.selected_index = 0


def build_arrow_table(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> pa.Table:
    """Build an Arrow table from result rows.

    Columns pyarrow cannot infer a single type for are rendered as strings.
    """
    arrays = []
    for idx, _name in enumerate(columns):
        values = [row[idx] for row in rows]
        try:
            arrays.append(pa.array(values))
        except (TypeError, ValueError, pa.ArrowInvalid, pa.ArrowTypeError):
            arrays.append(
                pa.array(
                    [format_cell(value) if value is not None else None for value in values],
                    type=pa.string(),
                )
            )
    return pa.Table.from_arrays(arrays, names=list(columns))


class ResultsTable(FastDataTable):
    """Results grid backed by an Arrow table."""

    @classmethod
    def from_rows(
        cls,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        **kwargs: Any,
    ) -> ResultsTable:
        if not columns:
            return cls(zebra_stripes=True, show_header=False, **kwargs)
        return cls(
            zebra_stripes=True,
            backend=ArrowBackend(build_arrow_table(columns, rows)),
            column_labels=list(columns),
            max_column_content_width=MAX_COLUMN_CONTENT_WIDTH,
            render_markup=False,
            null_rep="NULL",
            **kwargs,
        )
