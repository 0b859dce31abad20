from .base import HumanDetector
from .factory import create_detector

__all__ = [
    "HumanDetector",
    "create_detector",
]
