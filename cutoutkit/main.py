from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .cli import parse_args
from .config import load_config
from .detectors.factory import create_detector
from .errors import CutoutError
from .logging_setup import setup_logging
from .pipeline import is_image_file, is_output_file, process_image_file
from .segmenters.factory import create_segmenter
from .watcher import watch_directory

if TYPE_CHECKING:
    from .config import AppConfig
    from .detectors.base import HumanDetector
    from .segmenters.base import PersonSegmenter


def _make_detector(cfg: AppConfig) -> HumanDetector:
    return create_detector(
        cfg.detector,
        model_path=cfg.detector_model,
        confidence=cfg.confidence_threshold,
        iou=cfg.nms_iou,
    )


def _make_segmenter(cfg: AppConfig) -> PersonSegmenter:
    return create_segmenter(
        cfg.segmenter,
        model_path=cfg.segmenter_model,
        confidence=cfg.confidence_threshold,
        quality=cfg.segmentation_quality,
        mask_threshold=cfg.mask_threshold,
    )


def _process_image(path: Path, cfg: AppConfig, logger: logging.Logger) -> list[Path]:
    # Providers live for one image; nothing is carried over between selections
    with contextlib.ExitStack() as stack:
        detector = None
        segmenter = None
        if cfg.mode in ("subjects", "detect"):
            detector = _make_detector(cfg)
            stack.callback(detector.close)
        if cfg.mode in ("subjects", "remove-background"):
            segmenter = _make_segmenter(cfg)
            stack.callback(segmenter.close)
        outputs = process_image_file(path, cfg, detector, segmenter, logger)
    if outputs:
        logger.info(f"Wrote files: {[p.name for p in outputs]}")
    else:
        logger.info(f"Nothing produced for {path.name}")
    return outputs


def _run_live(source: str, cfg: AppConfig, logger: logging.Logger) -> None:
    # cv2 is only needed for the live path
    from .processing.live import process_stream

    segmenter = _make_segmenter(cfg)
    try:
        name = f"live_{Path(source).stem}.mp4" if not source.isdigit() else f"camera{source}.mp4"
        process_stream(source, cfg.output_dir / name, segmenter, cfg, logger)
    finally:
        segmenter.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    cfg = load_config(args.input, args.output, args.mode)

    logger = setup_logging(cfg.output_dir, level=cfg.log_level)
    logger.info("cutoutkit started")
    logger.info(f"Input: {cfg.input_dir}")
    logger.info(f"Output: {cfg.output_dir}")
    logger.info(f"Mode: {cfg.mode}")

    cfg.output_dir.mkdir(parents=True, exist_ok=True)

    if getattr(args, "live", None):
        _run_live(args.live, cfg, logger)
        return

    cfg.input_dir.mkdir(parents=True, exist_ok=True)

    def on_image_ready(p: Path) -> None:
        try:
            _process_image(p, cfg, logger)
        except CutoutError as e:
            logger.error(f"No result for {p.name}: {e}")
        except Exception as e:
            logger.exception(f"Error while processing {p}: {e}")

    existing = [
        p
        for p in sorted(cfg.input_dir.iterdir())
        if p.is_file() and is_image_file(p) and not is_output_file(p)
    ]
    for p in existing:
        logger.info(f"Found existing file: {p.name}")
        if getattr(args, "once", False):
            on_image_ready(p)

    if getattr(args, "once", False):
        return

    watch_directory(cfg.input_dir, on_image_ready, cfg.file_stability_seconds, logger)
