"""Command-line interface for querypad."""

from __future__ import annotations

import argparse
import os
import sys

SUBCOMMANDS = frozenset({"query", "complete"})

# Global flags followed by a value
_VALUE_FLAGS = frozenset({"--settings", "--log-level"})


def _extract_database(argv: list[str]) -> tuple[str | None, list[str]]:
    """Pull the optional database path out of argv.

    A bare positional before any subcommand would otherwise be parsed as the
    subcommand name.

    Returns:
        Tuple of (database path or None, remaining argv).
    """
    database = None
    result_argv = [argv[0]] if argv else []
    i = 1
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("-"):
            result_argv.append(arg)
            if arg in _VALUE_FLAGS and i + 1 < len(argv):
                i += 1
                result_argv.append(argv[i])
            i += 1
            continue

        # A subcommand takes everything after it
        if arg in SUBCOMMANDS:
            result_argv.extend(argv[i:])
            break

        if database is None:
            database = arg
        else:
            result_argv.append(arg)
        i += 1

    return database, result_argv


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    database, filtered_argv = _extract_database(list(argv) if argv is not None else sys.argv)

    parser = argparse.ArgumentParser(
        prog="querypad",
        description="A SQL editor with schema-aware completion and query history",
        epilog="Open a database: querypad path/to/db.sqlite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--settings", metavar="PATH", help="Path to settings JSON file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: log_level setting, WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    query_parser = subparsers.add_parser("query", help="Execute a SQL query")
    query_parser.add_argument("database", help="SQLite database file")
    query_parser.add_argument("--query", "-q", help="SQL query to execute")
    query_parser.add_argument("--file", "-f", help="SQL file to execute")
    query_parser.add_argument(
        "--format",
        "-o",
        default="table",
        choices=["table", "csv", "json"],
        help="Output format (default: table)",
    )
    query_parser.add_argument(
        "--limit",
        "-l",
        type=int,
        default=None,
        help="Maximum rows to fetch (default: max_rows setting, use 0 for unlimited)",
    )

    complete_parser = subparsers.add_parser("complete", help="Print completion candidates as JSON")
    complete_parser.add_argument("database", help="SQLite database file")
    complete_parser.add_argument("--sql", help="Buffer text (default: read from stdin)")
    complete_parser.add_argument("--line", type=int, required=True, help="Zero-based cursor line")
    complete_parser.add_argument("--column", type=int, required=True, help="Zero-based cursor column")

    args = parser.parse_args(filtered_argv[1:])  # Skip program name
    if args.settings:
        os.environ["QUERYPAD_SETTINGS_PATH"] = str(args.settings)

    from .config import LOG_PATH, configure_logging, load_settings

    settings = load_settings()
    log_level = args.log_level or settings.log_level

    if args.command is None:
        from .domains.connections.sqlite import resolve_file_path
        from .domains.query.cli.commands import create_session
        from .ui.app import QueryPadApp

        configure_logging(log_level, log_file=LOG_PATH)
        connection_id = resolve_file_path(database) if database else None
        app = QueryPadApp(create_session(settings), connection_id=connection_id)
        app.run()
        return 0

    configure_logging(log_level)

    from .domains.query.cli.commands import cmd_complete, cmd_query

    if args.command == "query":
        return cmd_query(args)
    if args.command == "complete":
        return cmd_complete(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
