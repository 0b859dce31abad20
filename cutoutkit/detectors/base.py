from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from ..models import Image, NormalizedRect


class HumanDetector(ABC):
    """
    Base interface for human detectors. Implementations should be used in a
    thread-safe manner or instantiated per worker.
    """

    @abstractmethod
    def warmup(self) -> None:
        """Optional warmup phase (e.g., for GPU)."""

    @abstractmethod
    def detect(self, image: Image) -> Sequence[NormalizedRect]:
        """
        Return one `NormalizedRect` per detected person in an sRGB `Image`.
        Coordinates are fractions of the image size with a bottom-left origin.
        An empty sequence means nobody was found; failures raise InferenceError.
        """

    def detect_many(self, images: Iterable[Image]) -> Iterable[Sequence[NormalizedRect]]:
        """
        Default: call `detect` iteratively. Implementations can override for batch inference.
        """
        for img in images:
            yield self.detect(img)

    @abstractmethod
    def close(self) -> None:
        """Release resources (model/session)."""
