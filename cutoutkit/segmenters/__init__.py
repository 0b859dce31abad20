from .base import PersonSegmenter
from .factory import create_segmenter

__all__ = [
    "PersonSegmenter",
    "create_segmenter",
]
