"""Base class for JSON-backed stores with thread-safe read/write operations."""
from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict


class BaseJSONStore:
    """Base class for JSON-backed stores with thread-safe operations.

    Provides:
    - Thread-safe file I/O with atomic writes
    - Versioning and timestamp tracking
    - Automatic parent directory creation
    - Corrupt or missing files fall back to the initial data

    Subclasses should:
    - Define VERSION as a class variable
    - Override _init_data() to provide initial data structure
    - Override _merge_payload() to copy validated fields from disk
    """

    VERSION = 1

    def __init__(self, path: Path) -> None:
        """Initialize store with file path.

        Args:
            path: Path to JSON file for persistence
        """
        self.path = Path(path)
        self.lock = threading.Lock()
        self._data: Dict[str, Any] = self._init_data()
        self._load()

    def _init_data(self) -> Dict[str, Any]:
        """Return the initial data structure, including version and updated_at."""
        return {
            "version": self.VERSION,
            "updated_at": int(time.time()),
        }

    def _load(self) -> None:
        """Load data from the JSON file if it exists.

        A missing file keeps the defaults. So does a corrupt one; the next
        write replaces it.
        """
        if not self.path.exists():
            return
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return
        if not isinstance(payload, dict):
            return

        version = payload.get("version")
        if isinstance(version, int) and version > 0:
            self._data["version"] = version

        updated = payload.get("updated_at")
        if isinstance(updated, (int, float)):
            self._data["updated_at"] = int(updated)

        self._merge_payload(payload)

    def _merge_payload(self, payload: Dict[str, Any]) -> None:
        """Copy subclass-specific fields from a loaded payload."""

    def _touch_locked(self) -> None:
        """Update version and timestamp. Must be called with lock held."""
        self._data["version"] = self.VERSION
        self._data["updated_at"] = int(time.time())

    def _write_locked(self) -> None:
        """Write data to disk atomically. Must be called with lock held.

        Writes to a temporary sibling first and then replaces the original, so
        a crash mid-write never leaves a truncated file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        temp_path.write_text(
            json.dumps(self._data, ensure_ascii=False, indent=2),
            encoding="utf-8"
        )
        temp_path.replace(self.path)
