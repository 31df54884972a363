"""Configuration management for querypad.

Settings live in a JSON object at ~/.querypad/settings.json (the directory can
be moved with QUERYPAD_CONFIG_DIR, the file alone with QUERYPAD_SETTINGS_PATH).
Every key is optional; malformed values fall back to their defaults.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from querypad.domains.query.completion import (
    DEFAULT_KEYWORDS,
    DEFAULT_SNIPPETS,
    CompletionKind,
    StaticCandidate,
    build_static_candidates,
)
from querypad.domains.query.history.keys import DEFAULT_NEWER_KEY, DEFAULT_OLDER_KEY
from querypad.shared.core.store import CONFIG_DIR, JSONFileStore

if TYPE_CHECKING:
    from querypad.shared.core.protocols import SettingsStoreProtocol

DEFAULT_MAX_HISTORY = 100
DEFAULT_MAX_ROWS = 10000
DEFAULT_LOG_LEVEL = "WARNING"
LOG_PATH = CONFIG_DIR / "querypad.log"


def _resolve_settings_path() -> Path:
    override = os.environ.get("QUERYPAD_SETTINGS_PATH", "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR / "settings.json"


class SettingsStore(JSONFileStore):
    """Store for managing application settings."""

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or _resolve_settings_path())

    def load_all(self) -> dict[str, Any]:
        """Load all settings.

        Returns:
            Dictionary of settings, or empty dict if none exist.
        """
        return self.load()

    def save_all(self, settings: dict[str, Any]) -> None:
        """Save all settings, replacing existing."""
        self.save(settings)


def _string_list(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return default
    return tuple(v for v in value if v.strip())


def _snippets(value: Any) -> tuple[StaticCandidate, ...]:
    if not isinstance(value, list):
        return DEFAULT_SNIPPETS
    snippets = []
    for item in value:
        if not isinstance(item, dict):
            continue
        label = item.get("label")
        insert_text = item.get("insert_text", label)
        if not isinstance(label, str) or not isinstance(insert_text, str) or not label:
            continue
        detail = item.get("detail", "")
        snippets.append(
            StaticCandidate(
                label=label,
                kind=CompletionKind.SNIPPET,
                insert_text=insert_text,
                detail=detail if isinstance(detail, str) else "",
            )
        )
    return tuple(snippets)


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _key_name(value: Any, default: str) -> str:
    return value.strip() if isinstance(value, str) and value.strip() else default


def _log_level(value: Any) -> str:
    if isinstance(value, str) and isinstance(logging.getLevelName(value.upper()), int):
        return value.upper()
    return DEFAULT_LOG_LEVEL


@dataclass(frozen=True)
class Settings:
    """Resolved application settings."""

    keywords: tuple[str, ...] = DEFAULT_KEYWORDS
    snippets: tuple[StaticCandidate, ...] = DEFAULT_SNIPPETS
    history_older_key: str = DEFAULT_OLDER_KEY
    history_newer_key: str = DEFAULT_NEWER_KEY
    max_history: int = DEFAULT_MAX_HISTORY
    max_rows: int = DEFAULT_MAX_ROWS
    log_level: str = DEFAULT_LOG_LEVEL
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Settings:
        """Create Settings from raw JSON data, ignoring invalid values."""
        known = {
            "keywords",
            "snippets",
            "history_older_key",
            "history_newer_key",
            "max_history",
            "max_rows",
            "log_level",
        }
        return cls(
            keywords=_string_list(data.get("keywords"), DEFAULT_KEYWORDS),
            snippets=_snippets(data.get("snippets")),
            history_older_key=_key_name(data.get("history_older_key"), DEFAULT_OLDER_KEY),
            history_newer_key=_key_name(data.get("history_newer_key"), DEFAULT_NEWER_KEY),
            max_history=_positive_int(data.get("max_history"), DEFAULT_MAX_HISTORY),
            max_rows=_positive_int(data.get("max_rows"), DEFAULT_MAX_ROWS),
            log_level=_log_level(data.get("log_level")),
            extra={k: v for k, v in data.items() if k not in known},
        )

    @property
    def static_candidates(self) -> tuple[StaticCandidate, ...]:
        return build_static_candidates(self.keywords, self.snippets)


def load_settings(store: SettingsStoreProtocol | None = None) -> Settings:
    """Load settings from the settings file (defaults when missing)."""
    store = store or SettingsStore()
    return Settings.from_dict(store.load_all())


def configure_logging(level: str = DEFAULT_LOG_LEVEL, log_file: Path | None = None) -> None:
    """Configure the ``querypad`` logger.

    Logs go to stderr, or to ``log_file`` when given (the TUI owns the terminal).
    """
    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger("querypad")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
