from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import Image, Mask


class PersonSegmenter(ABC):
    """Base interface for person segmentation providers."""

    @abstractmethod
    def warmup(self) -> None:
        """Optional warmup phase (e.g., for GPU)."""

    @abstractmethod
    def segment(self, image: Image) -> Mask:
        """
        Return a single-channel foreground mask for an sRGB `Image`.

        The mask may have a different resolution than the image.
        Raises MaskGenerationError when no mask is produced, InferenceError on failure.
        """

    @abstractmethod
    def close(self) -> None:
        """Release resources (model/session)."""
