from __future__ import annotations

import sys

import numpy as np
import pytest

from cutoutkit.detectors.base import HumanDetector
from cutoutkit.models import Image, Mask, NormalizedRect
from cutoutkit.segmenters.base import PersonSegmenter


class StubDetector(HumanDetector):
    def __init__(self, boxes: list[NormalizedRect] | None = None) -> None:
        self.boxes = list(boxes or [])
        self.calls = 0
        self.closed = False

    def warmup(self) -> None:  # pragma: no cover - unused in tests
        pass

    def detect(self, image: Image):
        self.calls += 1
        return list(self.boxes)

    def close(self) -> None:
        self.closed = True


class StubSegmenter(PersonSegmenter):
    """Returns a fixed mask, or one built by `factory(image)`."""

    def __init__(self, mask: Mask | None = None, factory=None, error: Exception | None = None):
        self.mask = mask
        self.factory = factory
        self.error = error
        self.calls = 0
        self.closed = False

    def warmup(self) -> None:  # pragma: no cover - unused in tests
        pass

    def segment(self, image: Image) -> Mask:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.factory is not None:
            return self.factory(image)
        assert self.mask is not None
        return self.mask

    def close(self) -> None:
        self.closed = True


def solid_image(width: int, height: int, color=(10, 120, 240)) -> Image:
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:] = color
    return Image(pixels)


def gradient_image(width: int, height: int) -> Image:
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.dstack([xs % 256, ys % 256, (xs + ys) % 256]).astype(np.uint8)
    return Image(pixels)


@pytest.fixture()
def fresh_ml_modules():
    """Drop provider modules before and after a test that stubs torch/ultralytics."""
    names = ["cutoutkit.devices", "cutoutkit.detectors.yolo", "cutoutkit.segmenters.yolo"]
    saved = {n: sys.modules.pop(n) for n in names if n in sys.modules}
    yield
    for n in names:
        sys.modules.pop(n, None)
    sys.modules.update(saved)
