from __future__ import annotations

import logging

import numpy as np

from .errors import ColorSpaceConversionError
from .models import ColorSpace, Image

logger = logging.getLogger(__name__)


def _to_unit_float(pixels: np.ndarray) -> np.ndarray:
    if pixels.dtype == np.uint8:
        return pixels.astype(np.float32) / 255.0
    if pixels.dtype == np.uint16:
        return pixels.astype(np.float32) / 65535.0
    if np.issubdtype(pixels.dtype, np.floating):
        return np.clip(pixels.astype(np.float32), 0.0, 1.0)
    raise ColorSpaceConversionError(f"Unsupported pixel dtype: {pixels.dtype}")


def linear_to_srgb(values: np.ndarray) -> np.ndarray:
    """Standard sRGB transfer function on [0, 1] floats."""
    return np.where(
        values <= 0.0031308,
        values * 12.92,
        1.055 * np.power(np.maximum(values, 0.0031308), 1.0 / 2.4) - 0.055,
    )


def to_standard_color_space(image: Image) -> Image:
    """
    Re-render `image` into 8-bit sRGB with RGB or RGBA channels.

    Gray inputs are expanded to RGB, linear-light inputs are gamma encoded,
    16-bit and float inputs are rescaled. The segmentation providers expect this layout.
    """
    pixels = np.asarray(image.pixels)
    if pixels.size == 0:
        raise ColorSpaceConversionError("Image has no pixels")

    if pixels.ndim == 2:
        pixels = pixels[:, :, None]
    if pixels.ndim != 3 or pixels.shape[2] not in (1, 2, 3, 4):
        raise ColorSpaceConversionError(f"Unsupported pixel layout: shape={image.pixels.shape}")

    if (
        image.color_space == ColorSpace.SRGB
        and pixels.dtype == np.uint8
        and pixels.shape[2] in (3, 4)
    ):
        return Image(pixels.copy(), ColorSpace.SRGB, image.path)

    unit = _to_unit_float(pixels)
    channels = unit.shape[2]
    alpha = unit[:, :, channels - 1 :] if channels in (2, 4) else None
    color = unit[:, :, :1] if channels in (1, 2) else unit[:, :, :3]

    if color.shape[2] == 1:
        color = np.repeat(color, 3, axis=2)
    if image.color_space == ColorSpace.LINEAR_SRGB:
        color = linear_to_srgb(color)

    out = color if alpha is None else np.concatenate([color, alpha], axis=2)
    out8 = np.rint(np.clip(out, 0.0, 1.0) * 255.0).astype(np.uint8)
    logger.debug(
        "Converted %s %s%s -> srgb uint8 %s",
        image.color_space.value,
        pixels.dtype,
        tuple(image.pixels.shape),
        tuple(out8.shape),
    )
    return Image(out8, ColorSpace.SRGB, image.path)
