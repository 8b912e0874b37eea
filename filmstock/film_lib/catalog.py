"""Manufacturer / film alias catalog loaded from ``manufacturers.json``.

The catalog maps each manufacturer to its films and the alternate spellings a
user might type for them. It is read once and never mutated afterwards.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from .errors import CatalogUnavailable
from .names import normalize


@dataclass(frozen=True)
class FilmCatalogEntry:
    filename: str
    speed: Optional[int] = None
    type: Optional[str] = None
    aliases: Tuple[str, ...] = ()

    def all_names(self) -> Tuple[str, ...]:
        """Canonical filename first, then aliases."""
        return (self.filename,) + self.aliases


@dataclass(frozen=True)
class ManufacturerCatalogEntry:
    name: str
    films: Tuple[FilmCatalogEntry, ...] = field(default_factory=tuple)


class CatalogMatch(NamedTuple):
    manufacturer: ManufacturerCatalogEntry
    film: FilmCatalogEntry


class CatalogLoadResult(NamedTuple):
    catalog: "AliasCatalog"
    error: Optional[CatalogUnavailable]

    @property
    def ok(self) -> bool:
        return self.error is None


class AliasCatalog:
    """Read-only index over manufacturer and film aliases."""

    def __init__(self, manufacturers: Tuple[ManufacturerCatalogEntry, ...] = ()) -> None:
        self._manufacturers = tuple(manufacturers)
        self._by_key: Dict[str, ManufacturerCatalogEntry] = {}
        self._film_keys: Dict[str, List[Tuple[FilmCatalogEntry, frozenset]]] = {}
        for entry in self._manufacturers:
            key = normalize(entry.name)
            # First listed manufacturer wins on duplicate names.
            if key in self._by_key:
                continue
            self._by_key[key] = entry
            self._film_keys[key] = [
                (film, frozenset(normalize(name) for name in film.all_names()))
                for film in entry.films
            ]

    @classmethod
    def empty(cls) -> "AliasCatalog":
        return cls(())

    @classmethod
    def load(cls, path: Path, logger: Optional[logging.Logger] = None) -> CatalogLoadResult:
        """Load ``path``, degrading to an empty catalog when it is unusable."""
        try:
            return CatalogLoadResult(load_catalog(path), None)
        except CatalogUnavailable as exc:
            (logger or logging.getLogger(__name__)).warning("%s; using empty catalog", exc)
            return CatalogLoadResult(cls.empty(), exc)

    @property
    def manufacturers(self) -> Tuple[ManufacturerCatalogEntry, ...]:
        return self._manufacturers

    def __len__(self) -> int:
        return len(self._manufacturers)

    def __iter__(self) -> Iterator[ManufacturerCatalogEntry]:
        return iter(self._manufacturers)

    def manufacturer(self, name: str) -> Optional[ManufacturerCatalogEntry]:
        return self._by_key.get(normalize(name))

    def find(self, manufacturer: str, film_name: str) -> Optional[CatalogMatch]:
        """Return the catalog film matching ``film_name`` under ``manufacturer``.

        Both sides are compared as normalized strings and must be equal; there
        is no substring or edit-distance matching. The first listed film whose
        filename or alias matches wins.
        """
        key = normalize(manufacturer)
        entry = self._by_key.get(key)
        if entry is None:
            return None
        wanted = normalize(film_name)
        if not wanted:
            return None
        for film, keys in self._film_keys[key]:
            if wanted in keys:
                return CatalogMatch(entry, film)
        return None

    def search(self, query: str) -> List[CatalogMatch]:
        """Substring search over filenames and aliases, in catalog order."""
        needle = (query or "").strip().lower()
        matches: List[CatalogMatch] = []
        for entry in self._manufacturers:
            for film in entry.films:
                if not needle or any(needle in name.lower() for name in film.all_names()):
                    matches.append(CatalogMatch(entry, film))
        return matches


def load_catalog(path: Path) -> AliasCatalog:
    """Parse the catalog JSON at ``path``.

    Raises:
        CatalogUnavailable: the file is missing, not JSON, or lacks the
            manufacturer/film structure.
    """
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CatalogUnavailable(path, "file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogUnavailable(path, f"unreadable: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogUnavailable(path, f"invalid JSON: {exc}") from exc
    return AliasCatalog(parse_manufacturers(payload, path))


def parse_manufacturers(payload: Any, path: Optional[Path] = None) -> Tuple[ManufacturerCatalogEntry, ...]:
    if not isinstance(payload, dict) or not isinstance(payload.get("manufacturers"), list):
        raise CatalogUnavailable(path, "missing 'manufacturers' list")
    entries: List[ManufacturerCatalogEntry] = []
    for raw in payload["manufacturers"]:
        if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
            raise CatalogUnavailable(path, "manufacturer entry without a name")
        films_raw = raw.get("films") or []
        if not isinstance(films_raw, list):
            raise CatalogUnavailable(path, f"films for {raw['name']} is not a list")
        films = tuple(_parse_film(film, raw["name"], path) for film in films_raw)
        entries.append(ManufacturerCatalogEntry(name=raw["name"], films=films))
    return tuple(entries)


def _parse_film(raw: Any, manufacturer: str, path: Optional[Path]) -> FilmCatalogEntry:
    if not isinstance(raw, dict) or not isinstance(raw.get("filename"), str):
        raise CatalogUnavailable(path, f"film entry under {manufacturer} without a filename")
    speed = raw.get("speed")
    if isinstance(speed, bool) or not isinstance(speed, int):
        speed = None
    film_type = raw.get("type")
    if not isinstance(film_type, str):
        film_type = None
    aliases_raw = raw.get("aliases")
    aliases = tuple(a for a in aliases_raw if isinstance(a, str)) if isinstance(aliases_raw, list) else ()
    return FilmCatalogEntry(filename=raw["filename"], speed=speed, type=film_type, aliases=aliases)


class LazyCatalog:
    """Loads the catalog on first use, then serves the same instance."""

    def __init__(self, path: Path, *, logger: Optional[logging.Logger] = None) -> None:
        self.path = Path(path)
        self.logger = logger or logging.getLogger(__name__)
        self.lock = threading.Lock()
        self._result: Optional[CatalogLoadResult] = None

    def get(self) -> AliasCatalog:
        return self.result().catalog

    def result(self) -> CatalogLoadResult:
        if self._result is None:
            with self.lock:
                # Double-check after acquiring lock
                if self._result is None:
                    self._result = AliasCatalog.load(self.path, logger=self.logger)
        return self._result
