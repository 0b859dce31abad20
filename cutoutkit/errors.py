"""
Error kinds raised by the processing stages.

Every stage fails fast; callers get an exception instead of a placeholder image.
"""

from __future__ import annotations


class CutoutError(Exception):
    """Base class for all cutoutkit errors."""


class ImageDecodeError(CutoutError):
    """Input bytes could not be decoded into an image."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class ColorSpaceConversionError(CutoutError):
    """Pixel data could not be re-rendered into standard sRGB."""


class ModelUnavailableError(CutoutError):
    """A detection or segmentation model could not be loaded."""

    def __init__(self, message: str, model_name: str):
        super().__init__(message)
        self.model_name = model_name


class InferenceError(CutoutError):
    """A provider failed while running inference."""


class MaskGenerationError(CutoutError):
    """Segmentation ran but produced no mask."""


class CropOutOfBoundsError(CutoutError):
    """The crop rectangle does not intersect the image."""
