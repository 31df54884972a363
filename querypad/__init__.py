"""querypad - A SQL editor with schema-aware completion and query history."""

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "main",
    "QueryPadApp",
    "QuerySession",
]

if TYPE_CHECKING:
    from querypad.domains.query.app.session import QuerySession
    from querypad.ui.app import QueryPadApp

    from .cli import main


def __getattr__(name: str) -> Any:
    """Lazy import for heavy modules to keep package import side-effect free."""
    if name == "main":
        from .cli import main

        return main
    if name == "QueryPadApp":
        from querypad.ui.app import QueryPadApp

        return QueryPadApp
    if name == "QuerySession":
        from querypad.domains.query.app.session import QuerySession

        return QuerySession
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
