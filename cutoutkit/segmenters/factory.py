from __future__ import annotations

from .base import PersonSegmenter


def create_segmenter(
    name: str,
    *,
    model_path: str,
    confidence: float,
    quality: str,
    mask_threshold: float,
) -> PersonSegmenter:
    name_u = name.upper()
    if name_u == "YOLO":
        # Lazy import so tests can stub this module without ultralytics installed
        from .yolo import YOLOPersonSegmenter

        return YOLOPersonSegmenter(
            model_path=model_path,
            confidence=confidence,
            quality=quality,
            mask_threshold=mask_threshold,
        )
    else:
        raise ValueError(f"Unknown segmenter: {name}")
