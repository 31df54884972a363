"""Query execution lifecycle: request, success, failure.

The ExecutionCoordinator submits the buffer to an external executor, tracks
the pending/succeeded/failed state, owns the latest result and records
successful queries in history.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import ExecutionError, ValidationError

if TYPE_CHECKING:
    from querypad.domains.query.history.ring import HistoryRing
    from querypad.shared.core.protocols import HistoryStoreProtocol, QueryExecutorProtocol

logger = logging.getLogger(__name__)

NO_CONNECTION_MESSAGE = "Please select a connection first"


class ExecutionState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryResult:
    """Result of a query execution.

    Row-returning statements fill ``columns``/``rows``; other statements
    leave them empty and report ``rows_affected``.
    """

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]
    truncated: bool = False
    rows_affected: int | None = None

    @classmethod
    def create(
        cls,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        truncated: bool = False,
        rows_affected: int | None = None,
    ) -> QueryResult:
        return cls(
            columns=tuple(columns),
            rows=tuple(tuple(row) for row in rows),
            truncated=truncated,
            rows_affected=rows_affected,
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def returns_rows(self) -> bool:
        return bool(self.columns)


StateListener = Callable[[ExecutionState], None]


class ExecutionCoordinator:
    """Runs queries through an executor and tracks their lifecycle.

    States go IDLE -> PENDING -> SUCCEEDED | FAILED, and back to IDLE via
    reset(). A new run while one is pending supersedes it: the earlier
    awaiter still receives its outcome, but only the latest run updates the
    state, the result and history.

    Args:
        executor: Collaborator that executes SQL.
        history: Ring receiving successfully executed queries.
        history_store: Optional persistent store for executed queries.
    """

    def __init__(
        self,
        executor: QueryExecutorProtocol,
        history: HistoryRing | None = None,
        history_store: HistoryStoreProtocol | None = None,
    ):
        self._executor = executor
        self._history = history
        self._history_store = history_store
        self._state = ExecutionState.IDLE
        self._result: QueryResult | None = None
        self._error: str | None = None
        self._generation = 0
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def result(self) -> QueryResult | None:
        return self._result

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_pending(self) -> bool:
        return self._state is ExecutionState.PENDING

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener(state)`` on every transition. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: ExecutionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def reset(self) -> None:
        """Return to IDLE after a settled run. No effect while pending."""
        if self._state in (ExecutionState.SUCCEEDED, ExecutionState.FAILED):
            self._set_state(ExecutionState.IDLE)

    def run(self, connection_id: str | None, sql: str) -> Awaitable[QueryResult]:
        """Start executing ``sql`` on ``connection_id``.

        Validation happens immediately, before anything is awaited.

        Returns:
            Awaitable resolving to the QueryResult.

        Raises:
            ValidationError: No connection is selected (raised synchronously).
        """
        if not connection_id:
            logger.debug("Rejected run: no connection selected")
            raise ValidationError(NO_CONNECTION_MESSAGE)

        self._generation += 1
        generation = self._generation
        self._error = None
        self._set_state(ExecutionState.PENDING)
        return self._execute(generation, connection_id, sql)

    async def _execute(self, generation: int, connection_id: str, sql: str) -> QueryResult:
        try:
            result = await asyncio.to_thread(self._executor.execute, connection_id, sql)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(ExecutionState.IDLE)
            raise
        except Exception as e:
            error = ExecutionError.from_exception(e)
            logger.info("Query failed on %s: %s", connection_id, error.message)
            if generation == self._generation:
                self._result = None
                self._error = error.message
                self._set_state(ExecutionState.FAILED)
            if error is e:
                raise
            raise error from e

        if generation != self._generation:
            logger.debug("Ignoring result of superseded run on %s", connection_id)
            return result

        self._result = result
        self._set_state(ExecutionState.SUCCEEDED)
        self._record_history(connection_id, sql)
        return result

    def _record_history(self, connection_id: str, sql: str) -> None:
        if self._history is not None:
            self._history.submit(sql)
        if self._history_store is not None and sql.strip():
            try:
                self._history_store.save_query(connection_id, sql)
            except OSError as e:
                logger.warning("Could not save query history: %s", e)
