"""JSON documents kept in the querypad config directory."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# QUERYPAD_CONFIG_DIR moves every file (tests point it at a temp dir)
CONFIG_DIR = Path(os.environ.get("QUERYPAD_CONFIG_DIR") or Path.home() / ".querypad")


class JSONFileStore:
    """One JSON document on disk.

    ``load`` never raises for a missing, unreadable or malformed file; it
    returns an empty ``document_type`` instead. ``save`` replaces the whole
    file atomically and leaves it readable by the owner only.
    """

    document_type: type = dict

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)

    def load(self) -> Any:
        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.document_type()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", self.file_path, e)
            return self.document_type()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed %s: %s", self.file_path, e)
            return self.document_type()

        if not isinstance(data, self.document_type):
            logger.warning("Ignoring %s: expected a JSON %s", self.file_path, self.document_type.__name__)
            return self.document_type()
        return data

    def save(self, data: Any) -> None:
        directory = self.file_path.parent
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)

        tmp = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{self.file_path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = Path(tmp.name)
        try:
            with tmp:
                json.dump(data, tmp, indent=2)
            tmp_path.chmod(0o600)
            tmp_path.replace(self.file_path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
