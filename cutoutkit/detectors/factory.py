from __future__ import annotations

from .base import HumanDetector


def create_detector(
    name: str,
    *,
    model_path: str,
    confidence: float,
    iou: float,
) -> HumanDetector:
    name_u = name.upper()
    if name_u == "YOLO":
        # Lazy import so tests that don't use YOLO won't require ultralytics
        from .yolo import YOLOHumanDetector

        return YOLOHumanDetector(
            model_path=model_path,
            confidence=confidence,
            iou=iou,
        )
    else:
        raise ValueError(f"Unknown detector: {name}")
