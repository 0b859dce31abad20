from __future__ import annotations

from pathlib import Path

import numpy as np

from ..errors import ImageDecodeError
from ..models import ColorSpace, Image


def _swap_rb(arr: np.ndarray) -> np.ndarray:
    # OpenCV works in BGR(A); the rest of the package works in RGB(A)
    if arr.ndim == 3 and arr.shape[2] == 3:
        return arr[:, :, ::-1].copy()
    if arr.ndim == 3 and arr.shape[2] == 4:
        return arr[:, :, [2, 1, 0, 3]].copy()
    return arr


def decode_image(data: bytes, source: str | None = None) -> Image:
    import cv2  # type: ignore

    if not data:
        raise ImageDecodeError("Empty image data", source)
    arr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if arr is None:
        raise ImageDecodeError(f"Cannot decode image: {source or '<bytes>'}", source)
    color_space = ColorSpace.GRAY if arr.ndim == 2 else ColorSpace.SRGB
    return Image(_swap_rb(arr), color_space, Path(source) if source else None)


def read_image(path: Path) -> Image:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Cannot read image: {path} ({e})", str(path)) from e
    return decode_image(data, str(path))


def write_image(image: Image, path: Path) -> Path:
    import cv2  # type: ignore

    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), _swap_rb(image.pixels)):
        raise OSError(f"Cannot write image: {path}")
    return path


def frame_to_image(frame_bgr: np.ndarray) -> Image:
    return Image(_swap_rb(frame_bgr), ColorSpace.SRGB)


def image_to_frame(image: Image) -> np.ndarray:
    return _swap_rb(image.pixels[:, :, :3] if image.has_alpha else image.pixels)
