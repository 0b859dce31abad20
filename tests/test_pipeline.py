from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pytest

from conftest import StubDetector, StubSegmenter, gradient_image, solid_image
from cutoutkit.config import AppConfig
from cutoutkit.errors import MaskGenerationError
from cutoutkit.models import Image, Mask, NormalizedRect, PixelRect
from cutoutkit.pipeline import (
    annotate_humans,
    extract_subjects,
    is_image_file,
    is_output_file,
    process_image_file,
    remove_background,
)
from cutoutkit.processing.image_io import read_image, write_image

logger = logging.getLogger("test")


def _left_half_mask(image: Image) -> Mask:
    values = np.zeros((image.height, image.width), dtype=np.uint8)
    values[:, : image.width // 2] = 255
    return Mask(values)


@pytest.fixture()
def cfg(tmp_path: Path) -> AppConfig:
    return AppConfig(input_dir=tmp_path / "in", output_dir=tmp_path / "out")


def test_is_image_file():
    assert is_image_file(Path("a.PNG"))
    assert is_image_file(Path("b.jpeg"))
    assert not is_image_file(Path("c.mp4"))


def test_is_output_file_matches_written_names():
    assert is_output_file(Path("photo_nobg.png"))
    assert is_output_file(Path("photo_person03.png"))
    assert is_output_file(Path("photo_humans.png"))
    assert not is_output_file(Path("photo.png"))
    assert not is_output_file(Path("nobg.png"))
    assert not is_output_file(Path("photo_nobg.txt"))


def test_remove_background_transparent():
    img = gradient_image(10, 6)
    seg = StubSegmenter(factory=_left_half_mask)
    out = remove_background(img, seg, logger=logger)
    assert out.pixels.shape == (6, 10, 4)
    assert (out.pixels[:, :5, 3] == 255).all()
    assert (out.pixels[:, 5:, 3] == 0).all()
    assert seg.calls == 1


def test_remove_background_scales_low_res_mask():
    seg = StubSegmenter(mask=Mask(np.full((257, 257), 255, np.uint8)))
    out = remove_background(solid_image(513, 513), seg, logger=logger)
    assert (out.pixels[:, :, 3] == 255).all()


def test_remove_background_propagates_mask_failure():
    seg = StubSegmenter(error=MaskGenerationError("no mask"))
    with pytest.raises(MaskGenerationError):
        remove_background(solid_image(4, 4), seg, logger=logger)


def test_extract_subjects_one_crop_per_box():
    img = gradient_image(100, 100)
    det = StubDetector(
        [NormalizedRect(0.0, 0.0, 0.5, 1.0), NormalizedRect(0.5, 0.5, 0.5, 0.5)]
    )
    seg = StubSegmenter(factory=_left_half_mask)
    subjects = extract_subjects(img, det, seg, logger=logger)

    assert len(subjects) == 2
    assert (subjects[0].width, subjects[0].height) == (50, 100)
    assert (subjects[0].pixels[:, :, 3] == 255).all()
    assert (subjects[1].width, subjects[1].height) == (50, 50)
    assert (subjects[1].pixels[:, :, 3] == 0).all()
    # Segmentation runs once for the whole image
    assert seg.calls == 1


def test_extract_subjects_does_not_accumulate_between_calls():
    det = StubDetector([NormalizedRect(0.1, 0.1, 0.5, 0.5)])
    seg = StubSegmenter(factory=_left_half_mask)
    first = extract_subjects(gradient_image(20, 20), det, seg, logger=logger)
    second = extract_subjects(gradient_image(20, 20), det, seg, logger=logger)
    assert len(first) == 1
    assert len(second) == 1


def test_extract_subjects_skips_out_of_bounds_boxes():
    det = StubDetector([NormalizedRect(1.2, 0.0, 0.2, 0.2), NormalizedRect(0.0, 0.0, 1.0, 1.0)])
    seg = StubSegmenter(factory=_left_half_mask)
    subjects = extract_subjects(gradient_image(20, 20), det, seg, logger=logger)
    assert len(subjects) == 1
    assert (subjects[0].width, subjects[0].height) == (20, 20)


def test_extract_subjects_without_detections_skips_segmentation():
    seg = StubSegmenter(factory=_left_half_mask)
    assert extract_subjects(gradient_image(8, 8), StubDetector([]), seg, logger=logger) == []
    assert seg.calls == 0


def test_annotate_humans_returns_pixel_rects():
    det = StubDetector([NormalizedRect(0.25, 0.5, 0.3, 0.2)])
    annotated, rects = annotate_humans(solid_image(1000, 1000), det, logger=logger)
    assert rects == [PixelRect(250, 300, 300, 200)]
    assert annotated.pixels[300, 250].tolist() == [255, 0, 0]


def test_process_image_file_remove_background(cfg: AppConfig, tmp_path: Path):
    src = write_image(gradient_image(12, 8), tmp_path / "in" / "photo.jpg")
    outputs = process_image_file(
        src, cfg, None, StubSegmenter(factory=_left_half_mask), logger
    )
    assert outputs == [cfg.output_dir / "photo_nobg.png"]
    loaded = read_image(outputs[0])
    assert loaded.pixels.shape == (8, 12, 4)


def test_process_image_file_black_background(cfg: AppConfig, tmp_path: Path):
    cfg.background = (0, 0, 0)
    src = write_image(solid_image(6, 6, (200, 200, 200)), tmp_path / "in" / "p.png")
    seg = StubSegmenter(mask=Mask(np.zeros((6, 6), np.uint8)))
    outputs = process_image_file(src, cfg, None, seg, logger)
    loaded = read_image(outputs[0])
    assert loaded.pixels.shape == (6, 6, 3)
    assert not loaded.pixels.any()


def test_process_image_file_subjects(cfg: AppConfig, tmp_path: Path):
    cfg.mode = "subjects"
    src = write_image(gradient_image(40, 20), tmp_path / "in" / "group.png")
    det = StubDetector([NormalizedRect(0.0, 0.0, 0.5, 1.0), NormalizedRect(0.5, 0.0, 0.5, 1.0)])
    outputs = process_image_file(src, cfg, det, StubSegmenter(factory=_left_half_mask), logger)
    assert [p.name for p in outputs] == ["group_person01.png", "group_person02.png"]
    assert all(p.exists() for p in outputs)


def test_process_image_file_detect(cfg: AppConfig, tmp_path: Path):
    cfg.mode = "detect"
    src = write_image(solid_image(10, 10), tmp_path / "in" / "crowd.png")
    det = StubDetector([NormalizedRect(0.0, 0.0, 1.0, 1.0)])
    outputs = process_image_file(src, cfg, det, None, logger)
    assert outputs == [cfg.output_dir / "crowd_humans.png"]


def test_process_image_file_detect_shrinks_preview(cfg: AppConfig, tmp_path: Path):
    cfg.mode = "detect"
    cfg.annotation_max_size = 50
    src = write_image(solid_image(200, 100, (0, 0, 0)), tmp_path / "in" / "wide.png")
    det = StubDetector([NormalizedRect(0.2, 0.2, 0.5, 0.5)])
    outputs = process_image_file(src, cfg, det, None, logger)
    loaded = read_image(outputs[0])
    assert loaded.pixels.shape == (25, 50, 3)
    assert loaded.pixels[7, 10].tolist() == [255, 0, 0]


def test_process_image_file_outputs_are_recognised(cfg: AppConfig, tmp_path: Path):
    cfg.mode = "subjects"
    src = write_image(gradient_image(20, 20), tmp_path / "in" / "pair.png")
    det = StubDetector([NormalizedRect(0.0, 0.0, 1.0, 1.0)])
    outputs = process_image_file(src, cfg, det, StubSegmenter(factory=_left_half_mask), logger)
    assert outputs and all(is_output_file(p) for p in outputs)
    assert not is_output_file(src)


def test_process_image_file_requires_providers(cfg: AppConfig, tmp_path: Path):
    src = write_image(solid_image(4, 4), tmp_path / "in" / "x.png")
    with pytest.raises(ValueError):
        process_image_file(src, cfg, None, None, logger)
    cfg.mode = "detect"
    with pytest.raises(ValueError):
        process_image_file(src, cfg, None, StubSegmenter(), logger)
