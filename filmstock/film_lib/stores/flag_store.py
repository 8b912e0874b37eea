"""Persisted boolean flags that gate one-time work."""
from __future__ import annotations

import time
from typing import Any, Dict, Iterable

from .json_store import BaseJSONStore


class FlagStore(BaseJSONStore):
    """Track which one-time migrations have already run.

    A migration whose logic changes gets a new flag name; the old name is
    listed as retired and cleared, which makes the migration run once more.
    """

    VERSION = 1

    def _init_data(self) -> Dict[str, Any]:
        return {
            "version": self.VERSION,
            "updated_at": int(time.time()),
            "flags": {},
        }

    def _merge_payload(self, payload: Dict[str, Any]) -> None:
        flags = payload.get("flags")
        if isinstance(flags, dict):
            self._data["flags"] = {str(k): bool(v) for k, v in flags.items()}

    def is_set(self, name: str) -> bool:
        return bool(self._data["flags"].get(name))

    def set(self, name: str) -> None:
        with self.lock:
            self._data["flags"][name] = True
            self._touch_locked()
            self._write_locked()

    def clear(self, names: Iterable[str]) -> int:
        """Remove ``names``; returns how many were present."""
        with self.lock:
            flags = self._data["flags"]
            removed = sum(1 for name in names if flags.pop(name, None) is not None)
            if removed:
                self._touch_locked()
                self._write_locked()
        return removed

    def all(self) -> Dict[str, bool]:
        return dict(self._data["flags"])
