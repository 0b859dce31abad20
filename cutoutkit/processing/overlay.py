from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ..geometry import scale_to_fit, to_pixel_rect
from ..models import Image, NormalizedRect, PixelRect

RED = (255, 0, 0)


def draw_rectangles(
    image: Image,
    rects: Sequence[NormalizedRect],
    color: tuple[int, int, int] = RED,
    thickness: int = 2,
    fit_within: tuple[int, int] | None = None,
) -> tuple[Image, list[PixelRect]]:
    """
    Draw an outline for each normalized rect on a copy of `image`.

    With `fit_within=(width, height)` the copy is first shrunk or grown to its
    aspect-fit size inside that box, and the rects are mapped onto the display
    size, so strokes keep the same width whatever the source resolution.
    Returns the annotated copy and the pixel rects that were drawn.
    """
    import cv2  # type: ignore

    canvas = np.ascontiguousarray(image.pixels.copy())
    if fit_within is not None:
        dw, dh = scale_to_fit((image.width, image.height), fit_within)
        if (dw, dh) != (image.width, image.height):
            canvas = np.ascontiguousarray(cv2.resize(canvas, (dw, dh), interpolation=cv2.INTER_AREA))
    height, width = canvas.shape[:2]

    stroke = color if image.channels == 3 else (*color, 255)
    drawn: list[PixelRect] = []
    for r in rects:
        px = to_pixel_rect(r, width, height)
        if px.is_empty():
            continue
        cv2.rectangle(canvas, (px.x, px.y), (px.right - 1, px.bottom - 1), stroke, thickness)
        drawn.append(px)
    return Image(canvas, image.color_space, image.path), drawn
