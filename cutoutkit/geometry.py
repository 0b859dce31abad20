from __future__ import annotations

import math

from .models import EMPTY_RECT, NormalizedRect, PixelRect

# Float noise allowed before an edge rounds outward to the next pixel
_EDGE_EPS = 1e-6


def to_pixel_rect(normalized: NormalizedRect, image_width: int, image_height: int) -> PixelRect:
    """
    Map a normalized, bottom-left-origin rect into an integral, top-left-origin
    pixel rect clamped to the image. Malformed input yields an empty rect.
    """
    if normalized.width < 0 or normalized.height < 0 or image_width <= 0 or image_height <= 0:
        return EMPTY_RECT

    left = normalized.x * image_width
    top = (1.0 - normalized.y - normalized.height) * image_height
    right = left + normalized.width * image_width
    bottom = top + normalized.height * image_height

    x1 = math.floor(left + _EDGE_EPS)
    y1 = math.floor(top + _EDGE_EPS)
    x2 = math.ceil(right - _EDGE_EPS)
    y2 = math.ceil(bottom - _EDGE_EPS)

    rect = PixelRect(x1, y1, x2 - x1, y2 - y1)
    return rect.intersection(PixelRect(0, 0, image_width, image_height))


def to_normalized_rect(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    image_width: int,
    image_height: int,
    score: float = 1.0,
) -> NormalizedRect:
    """Inverse mapping for top-left pixel corner boxes (e.g. detector xyxy output)."""
    w = max(0.0, x2 - x1) / image_width
    h = max(0.0, y2 - y1) / image_height
    return NormalizedRect(
        x=x1 / image_width,
        y=1.0 - (y2 / image_height),
        width=w,
        height=h,
        score=score,
    )


def fitted_size(
    image_size: tuple[float, float], container_size: tuple[float, float]
) -> tuple[float, float]:
    """Size of an image drawn aspect-fit inside a container, both as (width, height)."""
    iw, ih = image_size
    cw, ch = container_size
    image_aspect = iw / ih
    container_aspect = cw / ch
    if image_aspect > container_aspect:
        return cw, cw / image_aspect
    return ch * image_aspect, ch


def scale_to_fit(size: tuple[int, int], target: tuple[int, int]) -> tuple[int, int]:
    """Whole-pixel aspect-fit size of `size` inside `target`, at least 1x1."""
    fw, fh = fitted_size(size, target)
    return max(1, int(round(fw))), max(1, int(round(fh)))
