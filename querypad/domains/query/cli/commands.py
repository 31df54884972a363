"""CLI query command handlers."""

from __future__ import annotations

import asyncio
import csv
import json
import sys
from pathlib import Path
from typing import Any

from querypad.config import Settings, load_settings
from querypad.domains.connections.sqlite import SQLiteBackend, resolve_file_path
from querypad.domains.query.app.errors import QueryPadError
from querypad.domains.query.app.execution import QueryResult
from querypad.domains.query.app.session import QuerySession
from querypad.domains.query.completion import CompletionCandidate
from querypad.domains.query.store.history import HistoryStore
from querypad.shared.core.utils import format_cell


def create_session(settings: Settings, backend: SQLiteBackend | None = None) -> QuerySession:
    """Build a QuerySession over SQLite with persistent history."""
    backend = backend or SQLiteBackend(max_rows=settings.max_rows)
    return QuerySession(
        backend,
        table_lister=backend,
        schema_loader=backend,
        settings=settings,
        history_store=HistoryStore(max_entries=settings.max_history),
    )


def _output_table(columns: list[str], rows: list[tuple], truncated: bool) -> None:
    """Output query results in table format."""
    max_col_width = 50

    # Only scan first 100 rows for performance
    col_widths = [min(len(col), max_col_width) for col in columns]
    for row in rows[:100]:
        for i, val in enumerate(row):
            col_widths[i] = min(max_col_width, max(col_widths[i], len(format_cell(val))))

    header = " | ".join(col[: col_widths[i]].ljust(col_widths[i]) for i, col in enumerate(columns))
    print(header)
    print("-" * len(header))

    for row in rows:
        row_parts = []
        for i, val in enumerate(row):
            val_str = format_cell(val)
            if len(val_str) > col_widths[i]:
                val_str = val_str[: col_widths[i] - 2] + ".."
            row_parts.append(val_str.ljust(col_widths[i]))
        print(" | ".join(row_parts))

    if truncated:
        print(f"\n({len(rows)} rows shown, results truncated)")
    else:
        print(f"\n({len(rows)} row(s) returned)")


def _output_result(result: QueryResult, output_format: str) -> None:
    if not result.returns_rows:
        print(f"Query executed successfully. Rows affected: {result.rows_affected or 0}")
        return

    columns = list(result.columns)
    rows = list(result.rows)
    if output_format == "csv":
        writer = csv.writer(sys.stdout)
        writer.writerow(columns)
        for row in rows:
            writer.writerow(format_cell(val) if val is not None else "" for val in row)
    elif output_format == "json":
        json_result = [dict(zip(columns, row)) for row in rows]
        print(json.dumps(json_result, indent=2, default=str))
    else:
        _output_table(columns, rows, result.truncated)
        return

    if result.truncated:
        print(f"\n({len(rows)} rows shown, results truncated)", file=sys.stderr)
    else:
        print(f"\n({len(rows)} row(s) returned)", file=sys.stderr)


def cmd_query(
    args: Any,
    *,
    backend: SQLiteBackend | None = None,
) -> int:
    """Execute a SQL query against a database file."""
    if args.query:
        query = args.query
    elif args.file:
        try:
            query = Path(args.file).read_text(encoding="utf-8")
        except FileNotFoundError:
            print(f"Error: File '{args.file}' not found.")
            return 1
        except OSError as e:
            print(f"Error reading file: {e}")
            return 1
    else:
        print("Error: Either --query or --file must be provided.")
        return 1

    settings = load_settings()
    if args.limit is None:
        max_rows: int | None = settings.max_rows
    else:
        # 0 means unlimited
        max_rows = args.limit if args.limit > 0 else None
    session = create_session(settings, backend or SQLiteBackend(max_rows=max_rows))

    connection_id = resolve_file_path(args.database)
    try:
        result = asyncio.run(session.run_query(connection_id, query))
    except QueryPadError as e:
        print(f"Error: {e}")
        return 1

    _output_result(result, args.format)
    return 0


def _candidate_to_dict(candidate: CompletionCandidate) -> dict[str, Any]:
    replace_range = candidate.replace_range
    return {
        "label": candidate.label,
        "kind": candidate.kind.value,
        "insert_text": candidate.insert_text,
        "detail": candidate.detail,
        "replace_range": {
            "line": replace_range.line,
            "start_offset": replace_range.start_offset,
            "end_offset": replace_range.end_offset,
        },
    }


def cmd_complete(
    args: Any,
    *,
    backend: SQLiteBackend | None = None,
) -> int:
    """Print completion candidates for a cursor position as JSON."""
    connection_id = resolve_file_path(args.database)
    if not Path(connection_id).exists():
        print(f"Error: Database file not found: {connection_id}")
        return 1

    sql = args.sql if args.sql is not None else sys.stdin.read()
    session = create_session(load_settings(), backend)
    asyncio.run(session.select_connection(connection_id))

    candidates = session.get_completions(sql, (args.line, args.column))
    print(json.dumps([_candidate_to_dict(c) for c in candidates], indent=2))
    return 0
