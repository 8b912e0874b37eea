"""Read-only access to bundled film artwork (``<manufacturer>_<film>.png``)."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from PIL import Image

from .imaging import open_image
from .names import split_bundled_stem

BUNDLED_EXTENSION = ".png"


@dataclass(frozen=True)
class BundledAsset:
    manufacturer: str
    stem: str
    path: Path


def is_bundled_image(path: Path) -> bool:
    return path.suffix.lower() == BUNDLED_EXTENSION


class BundleLibrary:
    """Bundled artwork rooted at a directory.

    ``grouped=False`` is the app bundle layout: every file sits flat in
    ``root``. ``grouped=True`` is the shared-container copy, where files live in
    ``root/<manufacturer>/``. Stems are compared exactly, so the casing probe
    behaves the same on case-insensitive filesystems; the ``.png`` suffix
    matches in any case.

    Directory listings are cached and re-read when the directory's mtime
    changes, since the shared copy is filled in by another step.
    """

    def __init__(self, root: Path, *, grouped: bool = False) -> None:
        self.root = Path(root)
        self.grouped = grouped
        self._listings: Dict[Path, Tuple[int, Dict[str, str]]] = {}

    def _directory_for(self, stem: str) -> Optional[Path]:
        if not stem:
            return None
        if not self.grouped:
            return self.root
        parts = split_bundled_stem(stem)
        if parts is None:
            return None
        return self.root / parts[0]

    def path_for(self, stem: str) -> Optional[Path]:
        """Path of ``stem``, using the on-disk suffix casing when the file exists."""
        directory = self._directory_for(stem)
        if directory is None:
            return None
        filename = self._listing(directory).get(stem, f"{stem}{BUNDLED_EXTENSION}")
        return directory / filename

    def exists(self, stem: str) -> bool:
        directory = self._directory_for(stem)
        if directory is None:
            return False
        return stem in self._listing(directory)

    def load(self, stem: str) -> Optional[Image.Image]:
        if not self.exists(stem):
            return None
        return open_image(self.path_for(stem))

    def iter_assets(self) -> Iterator[BundledAsset]:
        """Yield every bundled PNG whose stem carries a manufacturer prefix."""
        if not self.root.is_dir():
            return
        candidates = self.root.rglob("*") if self.grouped else self.root.iterdir()
        for entry in sorted(candidates):
            if not entry.is_file() or not is_bundled_image(entry):
                continue
            parts = split_bundled_stem(entry.stem)
            if parts is None:
                continue
            yield BundledAsset(manufacturer=parts[0], stem=entry.stem, path=entry)

    def _listing(self, directory: Path) -> Dict[str, str]:
        """Map stem -> filename for the PNGs in ``directory``."""
        mtime = _stat_mtime(directory)
        if mtime is None:
            self._listings.pop(directory, None)
            return {}
        cached = self._listings.get(directory)
        if cached is not None and cached[0] == mtime:
            return cached[1]
        names: Dict[str, str] = {}
        try:
            entries = sorted(directory.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return {}
        for entry in entries:
            if not entry.is_file() or not is_bundled_image(entry):
                continue
            # Prefer the lowercase suffix when both spellings exist.
            if entry.stem not in names or entry.suffix == BUNDLED_EXTENSION:
                names[entry.stem] = entry.name
        self._listings[directory] = (mtime, names)
        return names


def _stat_mtime(directory: Path) -> Optional[int]:
    try:
        return directory.stat().st_mtime_ns
    except (FileNotFoundError, NotADirectoryError):
        return None
