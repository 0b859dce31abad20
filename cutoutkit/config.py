from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

MODES = ("remove-background", "subjects", "detect")
QUALITIES = ("fast", "balanced", "accurate")


@dataclass
class AppConfig:
    input_dir: Path
    output_dir: Path

    mode: str = "remove-background"  # remove-background | subjects | detect

    detector: str = "YOLO"
    segmenter: str = "YOLO"
    detector_model: str = "yolov8n.pt"
    segmenter_model: str = "yolov8n-seg.pt"

    confidence_threshold: float = 0.25
    nms_iou: float = 0.45
    segmentation_quality: str = "balanced"  # fast | balanced | accurate
    mask_threshold: float = 0.5

    # None = transparent output; otherwise an RGB fill colour
    background: tuple[int, int, int] | None = None

    # Live mode: process every n-th frame, drop the rest
    frame_stride: int = 1

    # Detect mode: longest side of the annotated preview, None keeps the source size
    annotation_max_size: int | None = None

    file_stability_seconds: float = 1.0

    log_level: str = "INFO"


def _get_env_from_file(env_path: Path) -> dict[str, str]:
    if env_path.exists():
        return {k: v for k, v in dotenv_values(env_path).items() if k and v}
    return {}


def _coerce_float(value: str | None, default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _coerce_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _coerce_choice(value: str | None, choices: tuple[str, ...], default: str) -> str:
    if value is None:
        return default
    v = value.strip().lower()
    return v if v in choices else default


def _coerce_background(
    value: str | None, default: tuple[int, int, int] | None
) -> tuple[int, int, int] | None:
    if value is None:
        return default
    v = value.strip().lower()
    if v in {"", "transparent", "none"}:
        return None
    if v == "black":
        return (0, 0, 0)
    if v == "white":
        return (255, 255, 255)
    parts = [p.strip() for p in v.split(",")]
    if len(parts) != 3:
        return default
    try:
        r, g, b = (max(0, min(255, int(p))) for p in parts)
    except ValueError:
        return default
    return (r, g, b)


def load_config(
    cli_input: Path | None,
    cli_output: Path | None,
    cli_mode: str | None,
) -> AppConfig:
    """
    Load configuration with the following priority order:
    1) CLI arguments (input/output/mode)
    2) .env in the input directory
    3) Defaults
    """

    # 1) Base: input/output from CLI or environment
    input_dir = cli_input or Path(os.getenv("INPUT_DIR", ".")).resolve()
    env_from_input = _get_env_from_file(input_dir / ".env")

    # 2) Output: CLI > .env > default: ./output next to input
    output_dir: Path
    if cli_output is not None:
        output_dir = cli_output
    else:
        env_out = env_from_input.get("OUTPUT_DIR")
        if env_out is not None:
            output_dir = Path(env_out)
        else:
            default_output = input_dir.parent / "output"
            output_dir = Path(os.getenv("OUTPUT_DIR", str(default_output))).resolve()

    # 3) Mode: CLI > .env > default
    mode = cli_mode or _coerce_choice(env_from_input.get("MODE"), MODES, "remove-background")

    # 4) Providers
    detector = env_from_input.get("DETECTOR", "YOLO").upper()
    segmenter = env_from_input.get("SEGMENTER", "YOLO").upper()
    detector_model = env_from_input.get("DETECTOR_MODEL", "yolov8n.pt")
    segmenter_model = env_from_input.get("SEGMENTER_MODEL", "yolov8n-seg.pt")

    confidence_threshold = _coerce_float(env_from_input.get("CONFIDENCE_THRESHOLD"), 0.25)
    nms_iou = _coerce_float(env_from_input.get("NMS_IOU"), 0.45)
    segmentation_quality = _coerce_choice(
        env_from_input.get("SEGMENTATION_QUALITY"), QUALITIES, "balanced"
    )
    mask_threshold = _coerce_float(env_from_input.get("MASK_THRESHOLD"), 0.5)

    # 5) Output rendering
    background = _coerce_background(env_from_input.get("BACKGROUND"), None)
    frame_stride = max(1, _coerce_int(env_from_input.get("FRAME_STRIDE"), 1))
    annotation_max_size = max(0, _coerce_int(env_from_input.get("ANNOTATION_MAX_SIZE"), 0)) or None

    file_stability_seconds = _coerce_float(env_from_input.get("FILE_STABILITY_SECONDS"), 1.0)
    log_level = env_from_input.get("LOG_LEVEL", "INFO").upper()

    # Ensure the output directory exists
    with contextlib.suppress(Exception):
        output_dir.mkdir(parents=True, exist_ok=True)

    return AppConfig(
        input_dir=input_dir,
        output_dir=output_dir,
        mode=mode,
        detector=detector,
        segmenter=segmenter,
        detector_model=detector_model,
        segmenter_model=segmenter_model,
        confidence_threshold=confidence_threshold,
        nms_iou=nms_iou,
        segmentation_quality=segmentation_quality,
        mask_threshold=mask_threshold,
        background=background,
        frame_stride=frame_stride,
        annotation_max_size=annotation_max_size,
        file_stability_seconds=file_stability_seconds,
        log_level=log_level,
    )
