from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import numpy as np


class ColorSpace(str, Enum):
    SRGB = "srgb"
    LINEAR_SRGB = "linear-srgb"
    GRAY = "gray"


@dataclass
class Image:
    """
    Pixel data plus the colour space it is encoded in.

    After normalization `pixels` is (H, W, 3) or (H, W, 4), dtype uint8, RGB(A) order.
    """

    pixels: np.ndarray
    color_space: ColorSpace = ColorSpace.SRGB
    path: Path | None = None

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels in (2, 4)


@dataclass
class Mask:
    values: np.ndarray  # (H, W) uint8, 0 = background, 255 = foreground

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @classmethod
    def from_probabilities(cls, probs: np.ndarray) -> Mask:
        clipped = np.clip(np.asarray(probs, dtype=np.float32), 0.0, 1.0)
        return cls(np.rint(clipped * 255.0).astype(np.uint8))


@dataclass(frozen=True)
class NormalizedRect:
    x: float
    y: float  # bottom edge, origin bottom-left
    width: float
    height: float
    score: float = field(default=1.0, compare=False)


@dataclass(frozen=True)
class PixelRect:
    x: int
    y: int  # top edge, origin top-left
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersection(self, other: PixelRect) -> PixelRect:
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.right, other.right)
        y2 = min(self.bottom, other.bottom)
        if self.is_empty() or other.is_empty() or x2 <= x1 or y2 <= y1:
            return EMPTY_RECT
        return PixelRect(x1, y1, x2 - x1, y2 - y1)


EMPTY_RECT = PixelRect(0, 0, 0, 0)
