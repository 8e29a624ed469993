"""JSON document store: one file per persisted document.

Every save rewrites the whole file through a temporary sibling and an atomic
rename. Loads never raise; a missing or unreadable document yields ``None`` and
the caller falls back to its default.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()

    def load(self, filename: str) -> Any:
        """Return the decoded document or None when missing or corrupt."""
        path = self.path_for(filename)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path}: {type(e).__name__}: {e}")
            return None

    def save(self, filename: str, data: Any) -> None:
        path = self.path_for(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
        logger.debug(f"Saved {path.name}")
