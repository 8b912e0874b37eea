"""Helpers for carrying the EXIF orientation tag through pixel edits.

Captured photos keep their raw sensor layout plus an orientation tag (EXIF
0x0112, values 1-8). Cropping works on the raw pixels, so the tag has to be
copied onto the result for viewers to draw it upright.
"""
from __future__ import annotations

from typing import Any, Optional

from PIL import Image, ImageOps

ORIENTATION_TAG = 0x0112
UPRIGHT = 1


def normalize_orientation(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        orientation = int(value)
    except (TypeError, ValueError):
        return None
    if 1 <= orientation <= 8:
        return orientation
    return None


def read_exif_orientation(image: Image.Image) -> Optional[int]:
    try:
        exif = image.getexif()
    except Exception:  # pragma: no cover - some encoders lack EXIF
        return None
    if not exif:
        return None
    return normalize_orientation(exif.get(ORIENTATION_TAG))


def tag_orientation(image: Image.Image, orientation: Optional[int]) -> Image.Image:
    """Write ``orientation`` into ``image``'s EXIF block in place and return it."""
    value = normalize_orientation(orientation)
    exif = image.getexif()
    if value is None or value == UPRIGHT:
        exif.pop(ORIENTATION_TAG, None)
    else:
        exif[ORIENTATION_TAG] = value
    image.info["exif"] = exif.tobytes()
    return image


def display_upright(image: Image.Image) -> Image.Image:
    """Return a copy rotated per the orientation tag, as a viewer would show it."""
    if image is None:
        raise ValueError("image is required")
    return ImageOps.exif_transpose(image)
