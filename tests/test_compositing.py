from __future__ import annotations

import numpy as np
import pytest

from conftest import gradient_image, solid_image
from cutoutkit.colorspace import to_standard_color_space
from cutoutkit.compositing import apply_mask, fit_mask
from cutoutkit.errors import MaskGenerationError
from cutoutkit.models import ColorSpace, Image, Mask


def _mask(width: int, height: int, value: int) -> Mask:
    return Mask(np.full((height, width), value, dtype=np.uint8))


def test_full_mask_keeps_image():
    img = gradient_image(40, 30)
    out = apply_mask(img, _mask(40, 30, 255))
    assert out.pixels.shape == (30, 40, 4)
    assert np.array_equal(out.pixels[:, :, :3], img.pixels)
    assert (out.pixels[:, :, 3] == 255).all()


def test_empty_mask_is_fully_transparent():
    out = apply_mask(gradient_image(40, 30), _mask(40, 30, 0))
    assert (out.pixels[:, :, 3] == 0).all()


def test_empty_mask_with_black_background():
    out = apply_mask(solid_image(8, 8), _mask(8, 8, 0), background=(0, 0, 0))
    assert out.pixels.shape == (8, 8, 3)
    assert (out.pixels == 0).all()


def test_full_mask_with_background_keeps_colors():
    img = gradient_image(16, 9)
    out = apply_mask(img, _mask(16, 9, 255), background=(0, 0, 0))
    assert np.array_equal(out.pixels, img.pixels)


def test_half_mask_blends_toward_background():
    out = apply_mask(solid_image(2, 2, (200, 100, 50)), _mask(2, 2, 128), background=(0, 0, 0))
    expected = np.rint(np.array([200, 100, 50]) * (128 / 255.0))
    assert np.allclose(out.pixels[0, 0], expected, atol=1)


def test_existing_alpha_is_weighted():
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[..., 3] = 200
    out = apply_mask(Image(pixels), _mask(2, 2, 255))
    assert (out.pixels[..., 3] == 200).all()


def test_smaller_mask_covers_frame_513_from_257():
    out = fit_mask(_mask(257, 257, 255), 513, 513)
    assert out.shape == (513, 513)
    assert (out == 255).all()


@pytest.mark.parametrize(
    "mask_size,image_size",
    [((257, 257), (513, 513)), ((3, 7), (100, 41)), ((640, 480), (33, 17)), ((1, 1), (5, 9)), ((100, 60), (101, 61))],
)
def test_any_ratio_covers_frame_without_gaps(mask_size, image_size):
    mw, mh = mask_size
    iw, ih = image_size
    out = apply_mask(solid_image(iw, ih), _mask(mw, mh, 255))
    assert out.pixels.shape == (ih, iw, 4)
    assert (out.pixels[:, :, 3] == 255).all()


def test_overscan_is_anchored_bottom_left():
    # Square mask on a wide frame: scale by width, extra rows overhang at the top
    values = np.zeros((10, 10), dtype=np.uint8)
    values[4:, :] = 255  # lower rows foreground
    out = fit_mask(Mask(values), 20, 10)
    assert out.shape == (10, 20)
    # Scaled mask is 20x20; the frame is its bottom 10 rows, all foreground
    # (a top-left anchor would have picked up the empty top rows)
    assert (out == 255).all()


def test_non_standard_input_is_normalized_first():
    gray = Image(np.full((4, 4), 90, dtype=np.uint8))
    out = apply_mask(gray, _mask(4, 4, 255))
    assert out.pixels.shape == (4, 4, 4)
    assert (out.pixels[:, :, :3] == 90).all()


def test_linear_input_is_gamma_encoded_before_blending():
    linear = Image(np.full((2, 2, 3), 50, dtype=np.uint8), ColorSpace.LINEAR_SRGB)
    out = apply_mask(linear, _mask(2, 2, 255), background=(0, 0, 0))
    expected = to_standard_color_space(linear).pixels
    assert out.color_space == ColorSpace.SRGB
    assert np.array_equal(out.pixels, expected)
    assert (out.pixels != 50).all()


@pytest.mark.parametrize("shape", [(0, 0), (0, 5), (5, 0)])
def test_empty_mask_raises_mask_generation_error(shape):
    with pytest.raises(MaskGenerationError):
        apply_mask(solid_image(4, 4), Mask(np.zeros(shape, dtype=np.uint8)))
