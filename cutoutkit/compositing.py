from __future__ import annotations

import logging
import math

import numpy as np

from .colorspace import to_standard_color_space
from .errors import MaskGenerationError
from .models import ColorSpace, Image, Mask

logger = logging.getLogger(__name__)

Color = tuple[int, int, int]


def fit_mask(mask: Mask, width: int, height: int) -> np.ndarray:
    """
    Return a (height, width) uint8 mask covering the whole frame.

    A mask with a different resolution is scaled uniformly by the larger of the two
    axis ratios, so it may overscan on one axis but never leaves a gap. The scaled
    mask is anchored at the bottom-left corner and the frame-sized window is cut out.
    """
    values = np.asarray(mask.values)
    mh, mw = values.shape[:2]
    if mw == 0 or mh == 0:
        raise MaskGenerationError(f"Cannot fit an empty {mw}x{mh} mask to a {width}x{height} frame")
    if (mw, mh) == (width, height):
        return values

    # lazy import cv2 in functions
    import cv2  # type: ignore

    scale = max(width / mw, height / mh)
    sw = max(width, int(math.ceil(mw * scale - 1e-6)))
    sh = max(height, int(math.ceil(mh * scale - 1e-6)))
    resized = cv2.resize(values, (sw, sh), interpolation=cv2.INTER_LINEAR)
    window = resized[sh - height : sh, 0:width]
    logger.debug(
        "Scaled mask %dx%d by %.4f to %dx%d for %dx%d frame",
        mw,
        mh,
        scale,
        sw,
        sh,
        width,
        height,
    )
    return np.ascontiguousarray(window)


def apply_mask(image: Image, mask: Mask, background: Color | None = None) -> Image:
    """
    Blend `image` with `mask` (0 background .. 255 foreground).

    background=None gives an RGBA image whose alpha is weighted by the mask.
    A colour tuple gives an RGB image blended over that solid colour (black for live frames).
    The image is re-rendered to 8-bit sRGB before blending.
    """
    image = to_standard_color_space(image)
    pixels = image.pixels
    h, w = pixels.shape[:2]
    weight = fit_mask(mask, w, h).astype(np.float32) / 255.0
    rgb = pixels[:, :, :3].astype(np.float32)
    alpha = pixels[:, :, 3].astype(np.float32) if image.has_alpha else np.full((h, w), 255.0, np.float32)

    if background is None:
        out_alpha = np.rint(alpha * weight)
        out = np.dstack([pixels[:, :, :3], out_alpha.astype(np.uint8)])
    else:
        coverage = (weight * (alpha / 255.0))[:, :, None]
        bg = np.asarray(background, dtype=np.float32).reshape(1, 1, 3)
        out = np.rint(rgb * coverage + bg * (1.0 - coverage)).clip(0, 255).astype(np.uint8)

    return Image(np.ascontiguousarray(out), ColorSpace.SRGB, image.path)
