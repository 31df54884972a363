"""SQL completion engine.

Provides in-editor SQL autocompletion with:
- FROM/JOIN table and alias extraction that tolerates partial SQL
- Alias-qualified column suggestions (FROM users u -> u. suggests users columns)
- Table names after FROM/JOIN/UPDATE/INTO
- A configurable static floor of snippets and keywords
"""

from .completion import (
    DEFAULT_KEYWORDS,
    DEFAULT_SNIPPETS,
    DEFAULT_STATIC_CANDIDATES,
    TABLE_CONTEXT_KEYWORDS,
    StaticCandidate,
    assemble,
    build_static_candidates,
)
from .context import TokenContext, resolve_context, word_range_before
from .core import (
    ALIAS_STOP_WORDS,
    CompletionCandidate,
    CompletionKind,
    CursorPosition,
    ReplaceRange,
    TableReference,
    build_alias_map,
    dedupe_by_insert_text,
    extract_table_refs,
)

__all__ = [
    # Main API
    "assemble",
    "resolve_context",
    "extract_table_refs",
    "build_alias_map",
    # Types
    "CompletionCandidate",
    "CompletionKind",
    "CursorPosition",
    "ReplaceRange",
    "StaticCandidate",
    "TableReference",
    "TokenContext",
    # Constants
    "ALIAS_STOP_WORDS",
    "DEFAULT_KEYWORDS",
    "DEFAULT_SNIPPETS",
    "DEFAULT_STATIC_CANDIDATES",
    "TABLE_CONTEXT_KEYWORDS",
    # Utilities
    "build_static_candidates",
    "dedupe_by_insert_text",
    "word_range_before",
]
