"""Token context resolution for the cursor position.

Looks only at the current line: the text before the cursor decides what the
user is typing, whether it is qualified (``alias.col``) and which span an
accepted candidate replaces.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .core import CursorPosition, ReplaceRange

_QUALIFIER_PATTERN = re.compile(r"(\w+)\.\w*$")
_KEYWORD_BEFORE_PATTERN = re.compile(r"(\w+)\s+$")


@dataclass(frozen=True)
class TokenContext:
    """What the user is completing at the cursor."""

    line_prefix: str
    preceding_token: str
    qualifier: str | None
    partial_word: str
    keyword_before: str | None
    replace_range: ReplaceRange


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def word_range_before(line_text: str, column: int) -> tuple[int, int]:
    """Return (start, end) columns of the word ending at ``column``.

    Word characters are alphanumerics and underscore. ``end`` is always the
    cursor column, so an empty word gives a zero-width range at the cursor.
    """
    start = column
    while start > 0 and _is_word_char(line_text[start - 1]):
        start -= 1
    return start, column


def _clamp_cursor(lines: list[str], cursor: CursorPosition | tuple[int, int]) -> CursorPosition:
    line, column = cursor
    line = min(max(line, 0), len(lines) - 1)
    column = min(max(column, 0), len(lines[line]))
    return CursorPosition(line, column)


def resolve_context(sql: str, cursor: CursorPosition | tuple[int, int]) -> TokenContext:
    """Resolve the completion context at ``cursor``.

    Args:
        sql: The full buffer text
        cursor: Zero-based (line, column); out-of-range values are clamped

    Returns:
        TokenContext for the current line
    """
    lines = sql.split("\n")
    line, column = _clamp_cursor(lines, cursor)
    line_text = lines[line]
    line_prefix = line_text[:column]

    # Blank or whitespace-terminated prefix means nothing is being typed
    if not line_prefix.strip() or line_prefix[-1].isspace():
        preceding_token = ""
    else:
        preceding_token = line_prefix.split()[-1]

    qualifier_match = _QUALIFIER_PATTERN.search(preceding_token)
    qualifier = qualifier_match.group(1) if qualifier_match else None

    start_col, end_col = word_range_before(line_text, column)
    partial_word = line_text[start_col:end_col]

    keyword_match = _KEYWORD_BEFORE_PATTERN.search(line_prefix[:start_col])
    keyword_before = keyword_match.group(1) if keyword_match else None

    line_offset = sum(len(text) + 1 for text in lines[:line])
    replace_range = ReplaceRange(
        start_offset=line_offset + start_col,
        end_offset=line_offset + end_col,
        line=line,
    )

    return TokenContext(
        line_prefix=line_prefix,
        preceding_token=preceding_token,
        qualifier=qualifier,
        partial_word=partial_word,
        keyword_before=keyword_before,
        replace_range=replace_range,
    )
