"""Image source tags and the persisted image fields of a film."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ImageSource(Enum):
    """Which tier a film's picture comes from."""
    CUSTOM = "custom"
    CATALOG = "catalog"
    AUTO_DETECTED = "auto"
    NONE = "none"

    @classmethod
    def decode(cls, raw: Optional[str]) -> "ImageSource":
        """Read the persisted string; unknown or missing values mean auto-detect."""
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return cls.AUTO_DETECTED

    def encode(self) -> str:
        return self.value


@dataclass(frozen=True)
class FilmImageRecord:
    """The fields a film record persists about its picture.

    ``image_name`` holds a user photo identifier for ``CUSTOM`` (optionally
    ``"<manufacturer>/<identifier>"``) or a bundled stem for ``CATALOG``.
    """

    name: str
    manufacturer: str
    image_source: ImageSource = ImageSource.AUTO_DETECTED
    image_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "manufacturer": self.manufacturer,
            "imageSource": self.image_source.encode(),
            "imageName": self.image_name,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FilmImageRecord":
        image_name = payload.get("imageName")
        return cls(
            name=str(payload.get("name") or ""),
            manufacturer=str(payload.get("manufacturer") or ""),
            image_source=ImageSource.decode(payload.get("imageSource")),
            image_name=image_name if isinstance(image_name, str) and image_name else None,
        )
