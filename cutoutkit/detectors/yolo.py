from __future__ import annotations

from pathlib import Path
from typing import Sequence

import logging
import numpy as np
from ultralytics import YOLO

from ..colorspace import to_standard_color_space
from ..devices import select_device
from ..errors import InferenceError, ModelUnavailableError
from ..geometry import to_normalized_rect
from ..models import Image, NormalizedRect
from .base import HumanDetector


logger = logging.getLogger(__name__)

PERSON_CLASS = "person"


def _class_names(model) -> dict[int, str]:
    names = model.model.names if hasattr(model, "model") else model.names  # type: ignore[attr-defined]
    if isinstance(names, list):
        return {i: str(n) for i, n in enumerate(names)}
    return {int(k): str(v) for k, v in names.items()}


class YOLOHumanDetector(HumanDetector):
    def __init__(
        self,
        model_path: str | Path = "yolov8n.pt",
        confidence: float = 0.25,
        iou: float = 0.45,
    ) -> None:
        try:
            self.model = YOLO(str(model_path))
        except Exception as e:
            raise ModelUnavailableError(f"Cannot load detector model: {e}", str(model_path)) from e
        self.confidence = confidence
        self.iou = iou
        self.device = select_device()
        logger.info("YOLOHumanDetector using device: %s", self.device)
        self.class_names = _class_names(self.model)

    def warmup(self) -> None:  # pragma: no cover (fast path, optional)
        dummy = np.zeros((320, 320, 3), dtype=np.uint8)
        _ = self.model.predict(
            dummy,
            imgsz=320,
            conf=self.confidence,
            iou=self.iou,
            verbose=False,
            device=self.device,
        )

    def detect(self, image: Image) -> Sequence[NormalizedRect]:
        rgb = to_standard_color_space(image).pixels[:, :, :3]
        # Ultralytics treats numpy input as BGR (OpenCV convention)
        frame_bgr = np.ascontiguousarray(rgb[:, :, ::-1])
        try:
            results = self.model.predict(
                frame_bgr,
                conf=self.confidence,
                iou=self.iou,
                verbose=False,
                device=self.device,
            )
        except Exception as e:
            raise InferenceError(f"Human detection failed: {e}") from e

        out: list[NormalizedRect] = []
        if not results:
            return out
        r = results[0]
        boxes = getattr(r, "boxes", None)
        if boxes is None:
            return out
        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes, "xyxy") else None
        conf = boxes.conf.cpu().numpy() if hasattr(boxes, "conf") else None
        cls = boxes.cls.cpu().numpy() if hasattr(boxes, "cls") else None
        if xyxy is None or conf is None or cls is None:
            return out
        h, w = frame_bgr.shape[:2]
        for (x1, y1, x2, y2), sc, ci in zip(xyxy, conf, cls):
            name = self.class_names.get(int(ci), str(int(ci))).lower()
            if name != PERSON_CLASS:
                continue
            out.append(to_normalized_rect(float(x1), float(y1), float(x2), float(y2), w, h, float(sc)))
        return out

    def close(self) -> None:  # pragma: no cover
        # Nothing to close for Ultralytics
        return
