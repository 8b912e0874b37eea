"""Namespaced on-disk storage for user film photos.

Layout::

    <primary_root>/<manufacturer>/<identifier>.jpg
    <shared_root>/<manufacturer>/<identifier>.jpg   (mirror)

The store is the only writer of both trees. The mirror exists so another
process (the home-screen widget) can read user photos; this process never
reads from it.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from PIL import Image

from .errors import StorageWriteFailed
from .imaging import encode_jpeg, open_image
from .names import slugify_film_name

STORED_EXTENSION = ".jpg"
LISTED_EXTENSIONS = {".jpg", ".jpeg"}
SUFFIX_LENGTH = 8
UNSAFE_COMPONENTS = {"", ".", ".."}


@dataclass(frozen=True)
class StoredImage:
    identifier: str
    manufacturer: str
    path: Path

    def open(self) -> Optional[Image.Image]:
        return open_image(self.path)


class ImageStore:
    def __init__(
        self,
        primary_root: Path,
        shared_root: Optional[Path] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.primary_root = Path(primary_root)
        self.shared_root = Path(shared_root) if shared_root is not None else None
        self.logger = logger or logging.getLogger(__name__)

    def path_for(self, identifier: str, manufacturer: str) -> Path:
        """Primary path for a photo.

        Raises:
            ValueError: ``identifier`` or ``manufacturer`` is not a single path
                component.
        """
        _check_component(identifier)
        _check_component(manufacturer)
        return self.primary_root / manufacturer / f"{identifier}{STORED_EXTENSION}"

    def mirror_path_for(self, identifier: str, manufacturer: str) -> Optional[Path]:
        if self.shared_root is None:
            return None
        _check_component(identifier)
        _check_component(manufacturer)
        return self.shared_root / manufacturer / f"{identifier}{STORED_EXTENSION}"

    def exists(self, identifier: str, manufacturer: str) -> bool:
        if not is_safe_component(identifier) or not is_safe_component(manufacturer):
            return False
        return self.path_for(identifier, manufacturer).is_file()

    def save(self, image: Image.Image, manufacturer: str, film_name: str) -> str:
        """Persist ``image`` and return its identifier.

        Raises:
            StorageWriteFailed: the manufacturer is not a usable folder name,
                or encoding or the primary write failed. The caller's
                ``image`` is untouched and still usable.
        """
        identifier = f"{slugify_film_name(film_name)}_{uuid.uuid4().hex[:SUFFIX_LENGTH]}"
        if not is_safe_component(manufacturer):
            raise StorageWriteFailed(self.primary_root, f"unusable manufacturer folder name {manufacturer!r}")
        target = self.path_for(identifier, manufacturer)
        try:
            payload = encode_jpeg(image)
        except (OSError, ValueError) as exc:
            raise StorageWriteFailed(target, f"JPEG encode failed: {exc}") from exc
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as exc:
            raise StorageWriteFailed(target, str(exc)) from exc
        self.logger.debug("Saved %s (%d bytes)", target, len(payload))
        self._mirror(identifier, manufacturer, payload)
        return identifier

    def load(self, identifier: str, manufacturer: str) -> Optional[Image.Image]:
        if not self.exists(identifier, manufacturer):
            return None
        return open_image(self.path_for(identifier, manufacturer))

    def delete(self, identifier: str, manufacturer: str) -> bool:
        """Remove the photo and its mirror, pruning emptied manufacturer dirs.

        Returns True when the primary file existed.
        """
        if not is_safe_component(identifier) or not is_safe_component(manufacturer):
            return False
        target = self.path_for(identifier, manufacturer)
        removed = _unlink(target)
        mirror = self.mirror_path_for(identifier, manufacturer)
        if mirror is not None:
            try:
                _unlink(mirror)
                _prune_empty_dir(mirror.parent)
            except OSError as exc:
                self.logger.debug("Mirror cleanup failed for %s: %s", mirror, exc)
        _prune_empty_dir(target.parent)
        return removed

    def list_all(self) -> Iterator[StoredImage]:
        """Yield stored photos ordered by manufacturer, then identifier."""
        if not self.primary_root.is_dir():
            return
        manufacturers = sorted(p for p in self.primary_root.iterdir() if p.is_dir())
        for manufacturer_dir in manufacturers:
            entries: List[Path] = sorted(
                (p for p in manufacturer_dir.iterdir() if p.is_file() and p.suffix.lower() in LISTED_EXTENSIONS),
                key=lambda p: p.stem,
            )
            for entry in entries:
                yield StoredImage(identifier=entry.stem, manufacturer=manufacturer_dir.name, path=entry)

    def _mirror(self, identifier: str, manufacturer: str, payload: bytes) -> None:
        mirror = self.mirror_path_for(identifier, manufacturer)
        if mirror is None:
            return
        try:
            mirror.parent.mkdir(parents=True, exist_ok=True)
            mirror.write_bytes(payload)
        except OSError as exc:
            # Widget just won't see this photo until a later save succeeds.
            self.logger.debug("Mirror write failed for %s: %s", mirror, exc)


def _unlink(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def _prune_empty_dir(directory: Path) -> None:
    try:
        next(directory.iterdir())
    except StopIteration:
        try:
            directory.rmdir()
        except OSError:
            # Already removed, or refilled by a concurrent save.
            pass
    except (FileNotFoundError, NotADirectoryError):
        pass


def is_safe_component(value: str) -> bool:
    """True when ``value`` names one entry inside its parent directory."""
    if not isinstance(value, str) or value in UNSAFE_COMPONENTS:
        return False
    return "/" not in value and "\\" not in value and "\x00" not in value


def _check_component(value: str) -> None:
    if not is_safe_component(value):
        raise ValueError(f"Not a single path component: {value!r}")
