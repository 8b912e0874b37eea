"""Map a selection drawn over an aspect-fill preview onto the captured photo.

The preview shows the photo scaled uniformly until it covers the viewport, so
one axis overflows and is cut off evenly on both sides. A selection rectangle in
viewport points therefore maps to source pixels by one scale factor plus an
offset on the overflowing axis.

Cropping works in raw pixel space (no EXIF transpose); the orientation tag is
copied onto the result so it still displays upright.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from PIL import Image

from .errors import DegenerateCrop
from .orientation import UPRIGHT, read_exif_orientation, tag_orientation

SQUARE_OUTPUT_SIZE = 1000

logger = logging.getLogger(__name__)


class Size(NamedTuple):
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Rectangle in viewport points (selection) or source pixels (crop)."""
    x: float
    y: float
    width: float
    height: float


# Crop results live in source pixel space.
PixelRect = Rect


@dataclass(frozen=True)
class CropRequest:
    viewport_size: Size
    selection: Rect
    source_size: Size
    orientation: int = UPRIGHT


class CropOutcome(NamedTuple):
    image: Image.Image
    rect: Optional[PixelRect]
    cropped: bool


def aspect_fill_transform(viewport: Size, source: Size) -> Tuple[float, float, float]:
    """Return ``(scale, offset_x, offset_y)`` mapping viewport points to pixels."""
    if source.width / source.height > viewport.width / viewport.height:
        # Source is wider: it fills the viewport height and overflows sideways.
        scale = source.height / viewport.height
        return scale, (source.width - viewport.width * scale) / 2, 0.0
    scale = source.width / viewport.width
    return scale, 0.0, (source.height - viewport.height * scale) / 2


def compute_crop(request: CropRequest) -> PixelRect:
    """Crop rectangle in source pixels for ``request``.

    The result always lies inside the source bounds.

    Raises:
        DegenerateCrop: a size is not positive, or the clamped rectangle has
            no area. Callers keep the uncropped source in that case.

    Example:
        >>> compute_crop(CropRequest(Size(100, 100), Rect(25, 25, 50, 50), Size(200, 400)))
        Rect(x=50.0, y=150.0, width=100.0, height=100.0)
    """
    viewport = Size(*request.viewport_size)
    source = Size(*request.source_size)
    if viewport.width <= 0 or viewport.height <= 0 or source.width <= 0 or source.height <= 0:
        raise DegenerateCrop(f"non-positive size: viewport={tuple(viewport)} source={tuple(source)}")

    scale, offset_x, offset_y = aspect_fill_transform(viewport, source)
    selection = request.selection
    crop_width = selection.width * scale
    crop_height = selection.height * scale
    crop_x = selection.x * scale + offset_x
    crop_y = selection.y * scale + offset_y

    # Origin first, then size against the remaining space.
    crop_x = max(0.0, min(crop_x, source.width - crop_width))
    crop_y = max(0.0, min(crop_y, source.height - crop_height))
    crop_width = min(crop_width, source.width - crop_x)
    crop_height = min(crop_height, source.height - crop_y)
    if crop_width <= 0 or crop_height <= 0:
        raise DegenerateCrop(f"empty crop {crop_width}x{crop_height} for selection {selection}")
    return PixelRect(float(crop_x), float(crop_y), float(crop_width), float(crop_height))


def pixel_box(rect: PixelRect, source: Size) -> Tuple[int, int, int, int]:
    """Round ``rect`` to an integer ``(left, top, right, bottom)`` box in bounds."""
    left = max(0, min(int(round(rect.x)), int(source.width) - 1))
    top = max(0, min(int(round(rect.y)), int(source.height) - 1))
    right = max(left + 1, min(int(round(rect.x + rect.width)), int(source.width)))
    bottom = max(top + 1, min(int(round(rect.y + rect.height)), int(source.height)))
    return left, top, right, bottom


def crop_image(image: Image.Image, request: CropRequest) -> CropOutcome:
    """Crop ``image`` per ``request``, falling back to the uncropped image."""
    try:
        rect = compute_crop(request)
    except DegenerateCrop as exc:
        logger.info("Keeping uncropped image: %s", exc)
        return CropOutcome(image=image, rect=None, cropped=False)
    cropped = image.crop(pixel_box(rect, Size(*request.source_size)))
    tag_orientation(cropped, request.orientation)
    return CropOutcome(image=cropped, rect=rect, cropped=True)


def crop_capture(image: Image.Image, viewport_size: Size, selection: Rect) -> CropOutcome:
    """Crop a captured photo using its own pixel size and orientation tag."""
    request = CropRequest(
        viewport_size=Size(*viewport_size),
        selection=selection,
        source_size=Size(*image.size),
        orientation=read_exif_orientation(image) or UPRIGHT,
    )
    return crop_image(image, request)


def render_square(image: Image.Image, output_size: int = SQUARE_OUTPUT_SIZE) -> Image.Image:
    """Resample a cropped selection to a fixed square, keeping its orientation tag."""
    orientation = read_exif_orientation(image)
    resized = image.resize((output_size, output_size), Image.Resampling.LANCZOS)
    return tag_orientation(resized, orientation)
