from __future__ import annotations

import logging
import re
from pathlib import Path

from .colorspace import to_standard_color_space
from .compositing import Color, apply_mask
from .config import AppConfig
from .cropping import crop
from .detectors.base import HumanDetector
from .errors import CropOutOfBoundsError
from .geometry import to_pixel_rect
from .models import Image, PixelRect
from .processing.image_io import read_image, write_image
from .processing.overlay import draw_rectangles
from .segmenters.base import PersonSegmenter

IMAGE_EXTS = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")

# Stems of files written by process_image_file
_OUTPUT_STEM = re.compile(r"_(nobg|humans|person\d{2,})$")

_log = logging.getLogger(__name__)


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTS


def is_output_file(path: Path) -> bool:
    """True for images this tool wrote itself, e.g. when output and input share a directory."""
    return is_image_file(path) and _OUTPUT_STEM.search(path.stem) is not None


def remove_background(
    image: Image,
    segmenter: PersonSegmenter,
    background: Color | None = None,
    logger: logging.Logger = _log,
) -> Image:
    srgb = to_standard_color_space(image)
    mask = segmenter.segment(srgb)
    logger.debug(
        "Mask %dx%d for image %dx%d", mask.width, mask.height, srgb.width, srgb.height
    )
    return apply_mask(srgb, mask, background)


def extract_subjects(
    image: Image,
    detector: HumanDetector,
    segmenter: PersonSegmenter,
    background: Color | None = None,
    logger: logging.Logger = _log,
) -> list[Image]:
    """
    Cut out every detected person: one background-removed crop per bounding box.
    Segmentation runs once per image, not once per subject.
    """
    srgb = to_standard_color_space(image)
    boxes = detector.detect(srgb)
    if not boxes:
        logger.info("No humans detected")
        return []

    composite = apply_mask(srgb, segmenter.segment(srgb), background)
    subjects: list[Image] = []
    for i, box in enumerate(boxes, start=1):
        rect = to_pixel_rect(box, composite.width, composite.height)
        try:
            subjects.append(crop(composite, rect))
        except CropOutOfBoundsError:
            logger.warning("Skipping subject %d: box %s is outside the image", i, box)
    logger.info("Extracted %d of %d subject(s)", len(subjects), len(boxes))
    return subjects


def annotate_humans(
    image: Image,
    detector: HumanDetector,
    logger: logging.Logger = _log,
    fit_within: tuple[int, int] | None = None,
) -> tuple[Image, list[PixelRect]]:
    srgb = to_standard_color_space(image)
    boxes = detector.detect(srgb)
    annotated, rects = draw_rectangles(srgb, boxes, fit_within=fit_within)
    logger.info("Detected %d human(s)", len(rects))
    return annotated, rects


def process_image_file(
    path: Path,
    cfg: AppConfig,
    detector: HumanDetector | None,
    segmenter: PersonSegmenter | None,
    logger: logging.Logger,
) -> list[Path]:
    image = read_image(path)
    logger.info(
        "Processing: %s | %dx%d mode=%s", path.name, image.width, image.height, cfg.mode
    )
    base = path.stem
    out_dir = cfg.output_dir

    if cfg.mode == "remove-background":
        if segmenter is None:
            raise ValueError("remove-background mode requires a segmenter")
        result = remove_background(image, segmenter, cfg.background, logger)
        return [write_image(result, out_dir / f"{base}_nobg.png")]

    if cfg.mode == "subjects":
        if detector is None or segmenter is None:
            raise ValueError("subjects mode requires a detector and a segmenter")
        subjects = extract_subjects(image, detector, segmenter, cfg.background, logger)
        return [
            write_image(s, out_dir / f"{base}_person{i:02d}.png")
            for i, s in enumerate(subjects, start=1)
        ]

    if cfg.mode == "detect":
        if detector is None:
            raise ValueError("detect mode requires a detector")
        fit = None
        if cfg.annotation_max_size:
            fit = (cfg.annotation_max_size, cfg.annotation_max_size)
        annotated, _ = annotate_humans(image, detector, logger, fit_within=fit)
        return [write_image(annotated, out_dir / f"{base}_humans.png")]

    raise ValueError(f"Unknown mode: {cfg.mode}")
