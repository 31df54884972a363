"""Core SQL completion types and table reference extraction.

Shared logic for the completion engine: candidate types, cursor/range helpers,
and the regex-based FROM/JOIN scanner that tolerates partial or invalid SQL.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class CompletionKind(Enum):
    """Kinds of completion candidates shown in the popup."""

    SNIPPET = "snippet"
    KEYWORD = "keyword"
    TABLE = "table"
    COLUMN = "column"


class CursorPosition(NamedTuple):
    """Zero-based (line, column) cursor location, same shape as TextArea.cursor_location."""

    line: int
    column: int


@dataclass(frozen=True)
class ReplaceRange:
    """Span of buffer text a candidate replaces when accepted.

    Offsets are absolute positions into the buffer; both always fall on ``line``.
    """

    start_offset: int
    end_offset: int
    line: int = 0

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset


@dataclass(frozen=True)
class CompletionCandidate:
    """A single suggestion offered at the cursor."""

    label: str
    kind: CompletionKind
    insert_text: str
    replace_range: ReplaceRange
    detail: str = ""


@dataclass(frozen=True)
class TableReference:
    """A table referenced by FROM/JOIN, with its alias (the table name when none)."""

    table_name: str
    alias: str


# Words that directly follow a table name but are never aliases
ALIAS_STOP_WORDS = frozenset({"on", "where", "inner", "left", "right", "join"})

# FROM|JOIN <table or schema.table>
_FROM_JOIN_PATTERN = re.compile(
    r"\b(?:FROM|JOIN)\s+"
    r"([^\s.(),;]+(?:\.[^\s.(),;]+)?)"  # table name, optionally dotted once
    r"(\()?",  # captured when the name is a function call
    re.IGNORECASE,
)

# [AS] alias, matched right after a table name without consuming it in the scan
_ALIAS_PATTERN = re.compile(r"\s+(?:AS\s+)?(\w+)", re.IGNORECASE)


def extract_table_refs(sql: str) -> list[TableReference]:
    """Extract table references and aliases from SQL.

    Handles patterns like:
    - FROM users
    - FROM users u
    - FROM users AS u
    - JOIN orders o ON ...
    - FROM schema.users u

    Table-valued function calls (``FROM generate_series(...)``) are skipped.
    Never raises; text without FROM/JOIN yields an empty list.

    Args:
        sql: The SQL text to scan

    Returns:
        TableReference objects in source order
    """
    refs: list[TableReference] = []

    for match in _FROM_JOIN_PATTERN.finditer(sql):
        table, call_paren = match.groups()
        if call_paren:
            continue

        alias_match = _ALIAS_PATTERN.match(sql, match.end())
        alias = alias_match.group(1) if alias_match else None

        # A trailing AS with nothing after it is not an alias yet
        if alias and (alias.lower() in ALIAS_STOP_WORDS or alias.lower() == "as"):
            alias = None

        refs.append(TableReference(table_name=table, alias=alias or table))

    return refs


def build_alias_map(refs: Iterable[TableReference]) -> dict[str, str]:
    """Build a map of alias -> table name. Later references win."""
    return {ref.alias: ref.table_name for ref in refs}


def dedupe_by_insert_text(candidates: Iterable[CompletionCandidate]) -> list[CompletionCandidate]:
    """Remove duplicates while preserving order (first seen wins)."""
    seen: set[str] = set()
    unique: list[CompletionCandidate] = []
    for candidate in candidates:
        if candidate.insert_text in seen:
            continue
        seen.add(candidate.insert_text)
        unique.append(candidate)
    return unique
