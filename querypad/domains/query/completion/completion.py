"""Main SQL completion engine.

Combines table reference extraction, token context and the schema snapshot
into the ranked candidate list the editor popup shows.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .context import TokenContext, resolve_context
from .core import (
    CompletionCandidate,
    CompletionKind,
    CursorPosition,
    ReplaceRange,
    build_alias_map,
    dedupe_by_insert_text,
    extract_table_refs,
)

if TYPE_CHECKING:
    from querypad.domains.query.schema.index import SchemaIndex

# Keywords after which the next word is a table name
TABLE_CONTEXT_KEYWORDS = frozenset({"from", "join", "update", "into"})


@dataclass(frozen=True)
class StaticCandidate:
    """A candidate that is always offered, independent of the buffer."""

    label: str
    kind: CompletionKind
    insert_text: str
    detail: str = ""

    def at(self, replace_range: ReplaceRange) -> CompletionCandidate:
        return CompletionCandidate(
            label=self.label,
            kind=self.kind,
            insert_text=self.insert_text,
            replace_range=replace_range,
            detail=self.detail,
        )


DEFAULT_SNIPPETS: tuple[StaticCandidate, ...] = (
    StaticCandidate("sel", CompletionKind.SNIPPET, "SELECT * FROM ", "Select all columns"),
    StaticCandidate("cnt", CompletionKind.SNIPPET, "SELECT COUNT(*) FROM ", "Count rows"),
)

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "SELECT",
    "FROM",
    "WHERE",
    "JOIN",
    "LEFT",
    "INNER",
    "ON",
    "AS",
    "AND",
    "OR",
    "NOT",
    "IN",
    "IS",
    "NULL",
    "LIKE",
    "GROUP",
    "ORDER",
    "BY",
    "HAVING",
    "LIMIT",
    "DISTINCT",
    "INSERT",
    "INTO",
    "VALUES",
    "UPDATE",
    "SET",
    "DELETE",
)


def build_static_candidates(
    keywords: Sequence[str] = DEFAULT_KEYWORDS,
    snippets: Sequence[StaticCandidate] = DEFAULT_SNIPPETS,
) -> tuple[StaticCandidate, ...]:
    """Build the static floor: snippets first, then the keyword list."""
    keyword_candidates = tuple(StaticCandidate(kw, CompletionKind.KEYWORD, kw) for kw in keywords)
    return tuple(snippets) + keyword_candidates


DEFAULT_STATIC_CANDIDATES = build_static_candidates()


def _column_candidates(
    context: TokenContext, alias_map: dict[str, str], schema: SchemaIndex | None
) -> list[CompletionCandidate]:
    if context.qualifier is None or schema is None:
        return []

    # Exact, case-sensitive alias lookup; unknown aliases get nothing
    table_name = alias_map.get(context.qualifier)
    if table_name is None:
        return []

    return [
        CompletionCandidate(
            label=column,
            kind=CompletionKind.COLUMN,
            insert_text=column,
            replace_range=context.replace_range,
            detail=table_name,
        )
        for column in schema.columns_for(table_name)
    ]


def _table_candidates(context: TokenContext, schema: SchemaIndex | None) -> list[CompletionCandidate]:
    if context.qualifier is not None or schema is None:
        return []
    if not context.keyword_before or context.keyword_before.lower() not in TABLE_CONTEXT_KEYWORDS:
        return []

    return [
        CompletionCandidate(
            label=table,
            kind=CompletionKind.TABLE,
            insert_text=table,
            replace_range=context.replace_range,
        )
        for table in schema.table_names
    ]


def assemble(
    sql: str,
    cursor: CursorPosition | tuple[int, int],
    schema: SchemaIndex | None,
    static: Sequence[StaticCandidate] | None = None,
) -> list[CompletionCandidate]:
    """Get completion candidates for the given SQL and cursor position.

    The static floor always comes first. Columns are added only when the token
    before the cursor is qualified by a known alias. Table names are added
    after FROM/JOIN/UPDATE/INTO.

    Args:
        sql: The full SQL text
        cursor: Zero-based (line, column) of the cursor
        schema: Schema snapshot, or None when nothing is loaded
        static: Static floor candidates (defaults to DEFAULT_STATIC_CANDIDATES)

    Returns:
        Candidates de-duplicated by insert_text, in ranking order
    """
    context = resolve_context(sql, cursor)
    alias_map = build_alias_map(extract_table_refs(sql))

    floor = DEFAULT_STATIC_CANDIDATES if static is None else static
    results = [candidate.at(context.replace_range) for candidate in floor]
    results.extend(_column_candidates(context, alias_map, schema))
    results.extend(_table_candidates(context, schema))

    return dedupe_by_insert_text(results)
