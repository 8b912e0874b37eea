"""Error types raised by the film image helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class FilmLibError(Exception):
    """Base class for library errors."""


class CatalogUnavailable(FilmLibError):
    """The alias catalog could not be read or parsed.

    Callers degrade to an empty catalog; resolution then falls through to
    filename guessing.
    """

    def __init__(self, path: Optional[Path], reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Catalog unavailable ({path}): {reason}")


class StorageWriteFailed(FilmLibError):
    """A user photo could not be encoded or written to the primary store."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class DegenerateCrop(FilmLibError):
    """The clamped crop region has no area; use the uncropped source instead."""
