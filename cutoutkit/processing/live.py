from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from ..compositing import apply_mask
from ..config import AppConfig
from ..errors import InferenceError, MaskGenerationError
from ..segmenters.base import PersonSegmenter
from .image_io import frame_to_image, image_to_frame

BLACK = (0, 0, 0)


def process_frame(frame_bgr: np.ndarray, segmenter: PersonSegmenter) -> np.ndarray:
    """Replace everything but people with black in one BGR frame."""
    image = frame_to_image(frame_bgr)
    mask = segmenter.segment(image)
    return image_to_frame(apply_mask(image, mask, BLACK))


def _open_source(source: str | int):
    import cv2  # type: ignore

    if isinstance(source, str) and source.isdigit():
        source = int(source)
    cap = cv2.VideoCapture(source if isinstance(source, int) else str(source))
    if not cap.isOpened():
        raise RuntimeError(f"Cannot open video source: {source}")
    return cap


def process_stream(
    source: str | int,
    output_video: Path,
    segmenter: PersonSegmenter,
    cfg: AppConfig,
    logger: logging.Logger,
    max_frames: int | None = None,
) -> int:
    """
    Run per-frame background removal over a video file or camera index.

    Only every `cfg.frame_stride`-th frame is processed; the others are dropped.
    Frames without a mask are dropped too. Returns the number of frames written.
    """
    import cv2  # type: ignore

    cap = _open_source(source)
    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0
    stride = max(1, int(cfg.frame_stride))
    writer = None
    frame_idx = 0
    written = 0
    dropped = 0

    try:
        while max_frames is None or written < max_frames:
            ret, frame = cap.read()
            if not ret:
                break
            if frame_idx % stride != 0:
                frame_idx += 1
                continue
            frame_idx += 1
            try:
                out = process_frame(frame, segmenter)
            except (MaskGenerationError, InferenceError) as e:
                dropped += 1
                logger.warning("Dropping frame %d: %s", frame_idx - 1, e)
                continue
            if writer is None:
                h, w = out.shape[:2]
                output_video.parent.mkdir(parents=True, exist_ok=True)
                fourcc = cv2.VideoWriter_fourcc(*"mp4v")  # type: ignore[attr-defined]
                writer = cv2.VideoWriter(str(output_video), fourcc, float(fps) / stride, (w, h))
            writer.write(out)
            written += 1
    finally:
        cap.release()
        if writer is not None:
            writer.release()

    logger.info(
        "Live processing done: %d frame(s) written, %d dropped -> %s",
        written,
        dropped,
        output_video,
    )
    return written
