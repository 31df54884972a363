"""SQLite backend using built-in sqlite3.

Implements the executor, table lister and schema loader collaborators for
SQLite database files. The connection id is the database file path.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any

import sqlparse

from querypad.domains.query.app.errors import ExecutionError
from querypad.domains.query.app.execution import QueryResult
from querypad.domains.query.schema.index import TableInfo

# First keywords of statements that return rows
SELECT_KEYWORDS = frozenset(["SELECT", "WITH", "PRAGMA", "EXPLAIN", "VALUES"])


def is_select_query(sql: str) -> bool:
    """Determine if the first statement in ``sql`` returns rows.

    Leading comments and whitespace are skipped.
    """
    for statement in sqlparse.parse(sql):
        token = statement.token_first(skip_ws=True, skip_cm=True)
        if token is None:
            continue
        words = token.value.lstrip("(").split(None, 1)
        if not words:
            continue
        return words[0].upper() in SELECT_KEYWORDS
    return False


def resolve_file_path(path: str) -> str:
    """Expand ``~`` and make the path absolute (``:memory:`` is left alone)."""
    if path == ":memory:":
        return path
    return str(Path(path).expanduser().resolve())


class SQLiteBackend:
    """Runs queries and reads metadata from SQLite files.

    Connections are opened lazily per file and reused. All access goes
    through one lock because queries run on worker threads.

    Args:
        max_rows: Maximum rows fetched for a row-returning statement (None: no limit).
    """

    def __init__(self, max_rows: int | None = None):
        self.max_rows = max_rows
        self._connections: dict[str, sqlite3.Connection] = {}
        self._lock = threading.Lock()

    def _connect(self, connection_id: str) -> sqlite3.Connection:
        conn = self._connections.get(connection_id)
        if conn is None:
            file_path = resolve_file_path(connection_id)
            if file_path != ":memory:" and not Path(file_path).exists():
                raise ExecutionError(f"Database file not found: {file_path}")
            # check_same_thread=False allows the connection to be used from worker threads
            conn = sqlite3.connect(file_path, check_same_thread=False)
            self._connections[connection_id] = conn
        return conn

    def quote_identifier(self, name: str) -> str:
        """Quote an identifier for SQLite."""
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def execute(self, connection_id: str, sql: str) -> QueryResult:
        """Execute one statement.

        Raises:
            ExecutionError: On any sqlite3 error, with the driver message.
        """
        with self._lock:
            conn = self._connect(connection_id)
            try:
                if is_select_query(sql):
                    return self._execute_query(conn, sql)
                return self._execute_non_query(conn, sql)
            except sqlite3.Error as e:
                raise ExecutionError(str(e)) from e

    def _execute_query(self, conn: sqlite3.Connection, sql: str) -> QueryResult:
        changes_before = conn.total_changes
        cursor = conn.cursor()
        cursor.execute(sql)
        if not cursor.description:
            # WITH ... INSERT/UPDATE/DELETE; sqlite3 leaves rowcount at -1 for these
            rowcount = cursor.rowcount
            if rowcount < 0:
                rowcount = conn.total_changes - changes_before
            conn.commit()
            return QueryResult.create([], [], rows_affected=rowcount)

        columns = [col[0] for col in cursor.description]
        if self.max_rows is not None:
            # Fetch one extra row to detect if there are more
            rows = cursor.fetchmany(self.max_rows + 1)
            truncated = len(rows) > self.max_rows
            if truncated:
                rows = rows[: self.max_rows]
        else:
            rows = cursor.fetchall()
            truncated = False
        return QueryResult.create(columns, rows, truncated=truncated)

    def _execute_non_query(self, conn: sqlite3.Connection, sql: str) -> QueryResult:
        cursor = conn.cursor()
        cursor.execute(sql)
        if cursor.description:
            # INSERT/UPDATE/DELETE ... RETURNING
            columns = [col[0] for col in cursor.description]
            rows = cursor.fetchall()
            conn.commit()
            return QueryResult.create(columns, rows, rows_affected=len(rows))

        rowcount = int(cursor.rowcount)
        conn.commit()
        return QueryResult.create([], [], rows_affected=max(rowcount, 0))

    def list_tables(self, connection_id: str) -> list[str]:
        """Get table and view names, sorted."""
        with self._lock:
            conn = self._connect(connection_id)
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type IN ('table', 'view') "
                "AND name NOT LIKE 'sqlite_%' ORDER BY name"
            )
            return [row[0] for row in cursor.fetchall()]

    def get_table_info(self, connection_id: str) -> list[TableInfo]:
        """Get every table with its column names in definition order."""
        tables = self.list_tables(connection_id)
        infos = []
        with self._lock:
            conn = self._connect(connection_id)
            for table in tables:
                cursor = conn.cursor()
                cursor.execute(f"PRAGMA table_info({self.quote_identifier(table)})")
                # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
                columns = tuple(row[1] for row in cursor.fetchall())
                infos.append(TableInfo(table_name=table, columns=columns))
        return infos

    def close(self, connection_id: str | None = None) -> None:
        """Close one cached connection, or all of them."""
        with self._lock:
            ids = [connection_id] if connection_id is not None else list(self._connections)
            for key in ids:
                conn: Any = self._connections.pop(key, None)
                if conn is not None:
                    conn.close()
