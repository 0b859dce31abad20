from __future__ import annotations

from pathlib import Path

import logging
import numpy as np
from ultralytics import YOLO

from ..colorspace import to_standard_color_space
from ..detectors.yolo import PERSON_CLASS, _class_names
from ..devices import select_device
from ..errors import InferenceError, MaskGenerationError, ModelUnavailableError
from ..models import Image, Mask
from .base import PersonSegmenter


logger = logging.getLogger(__name__)

# Inference size per quality level
QUALITY_IMGSZ = {"fast": 320, "balanced": 640, "accurate": 1024}


class YOLOPersonSegmenter(PersonSegmenter):
    """
    Person segmentation with an Ultralytics instance-segmentation model.

    All `person` instances are merged into one foreground mask.
    """

    def __init__(
        self,
        model_path: str | Path = "yolov8n-seg.pt",
        confidence: float = 0.25,
        quality: str = "balanced",
        mask_threshold: float = 0.5,
    ) -> None:
        if quality not in QUALITY_IMGSZ:
            raise ValueError(f"Unknown segmentation quality: {quality}")
        try:
            self.model = YOLO(str(model_path))
        except Exception as e:
            raise ModelUnavailableError(f"Cannot load segmentation model: {e}", str(model_path)) from e
        self.confidence = confidence
        self.imgsz = QUALITY_IMGSZ[quality]
        self.mask_threshold = mask_threshold
        self.device = select_device()
        logger.info("YOLOPersonSegmenter using device: %s (imgsz=%d)", self.device, self.imgsz)
        self.class_names = _class_names(self.model)

    def warmup(self) -> None:  # pragma: no cover (fast path, optional)
        dummy = np.zeros((320, 320, 3), dtype=np.uint8)
        _ = self.model.predict(dummy, imgsz=320, verbose=False, device=self.device)

    def segment(self, image: Image) -> Mask:
        rgb = to_standard_color_space(image).pixels[:, :, :3]
        frame_bgr = np.ascontiguousarray(rgb[:, :, ::-1])
        h, w = frame_bgr.shape[:2]
        try:
            results = self.model.predict(
                frame_bgr,
                conf=self.confidence,
                imgsz=self.imgsz,
                retina_masks=True,
                verbose=False,
                device=self.device,
            )
        except Exception as e:
            raise InferenceError(f"Person segmentation failed: {e}") from e

        if not results:
            raise MaskGenerationError("Segmentation returned no result")
        r = results[0]
        masks = getattr(r, "masks", None)
        boxes = getattr(r, "boxes", None)
        if masks is None or boxes is None:
            # Nobody in frame
            return Mask(np.zeros((h, w), dtype=np.uint8))

        data = masks.data.cpu().numpy()
        cls = boxes.cls.cpu().numpy()
        keep = [
            i
            for i, ci in enumerate(cls)
            if self.class_names.get(int(ci), "").lower() == PERSON_CLASS
        ]
        if not keep:
            return Mask(np.zeros(data.shape[1:], dtype=np.uint8))

        union = np.max(data[keep], axis=0)
        return Mask.from_probabilities(union > self.mask_threshold)

    def close(self) -> None:  # pragma: no cover
        return
