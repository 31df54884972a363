"""Exceptions raised by the query domain."""

from __future__ import annotations

GENERIC_ERROR_MESSAGE = "An error occurred"


class QueryPadError(Exception):
    """Base class for querypad errors."""


class ValidationError(QueryPadError):
    """A user action was rejected before anything was sent to the database."""


class ExecutionError(QueryPadError):
    """The query executor reported a failure (syntax, connectivity, permissions)."""

    def __init__(self, message: str | None = None):
        self.message = message.strip() if message and message.strip() else GENERIC_ERROR_MESSAGE
        super().__init__(self.message)

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExecutionError:
        """Wrap any executor exception, keeping its message when it has one."""
        if isinstance(exc, ExecutionError):
            return exc
        return cls(str(exc))


class MetadataLoadError(QueryPadError):
    """Loading the table list or schema columns failed."""

    def __init__(self, connection_id: str, what: str, cause: BaseException | None = None):
        self.connection_id = connection_id
        self.what = what
        self.cause = cause
        detail = f": {cause}" if cause is not None and str(cause) else ""
        super().__init__(f"Failed to load {what} for {connection_id}{detail}")
