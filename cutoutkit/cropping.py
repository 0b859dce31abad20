from __future__ import annotations

from .errors import CropOutOfBoundsError
from .geometry import to_pixel_rect
from .models import Image, NormalizedRect, PixelRect


def crop(image: Image, rect: PixelRect) -> Image:
    """
    Cut `rect` out of `image` after clamping it to the image bounds.
    Raises CropOutOfBoundsError when nothing of the rect lies inside the image.
    """
    bounds = PixelRect(0, 0, image.width, image.height)
    clamped = rect.intersection(bounds)
    if clamped.is_empty():
        raise CropOutOfBoundsError(
            f"Crop rect {rect} does not intersect image of {image.width}x{image.height}"
        )
    pixels = image.pixels[clamped.y : clamped.bottom, clamped.x : clamped.right].copy()
    return Image(pixels, image.color_space, image.path)


def crop_normalized(image: Image, normalized: NormalizedRect) -> Image:
    return crop(image, to_pixel_rect(normalized, image.width, image.height))
