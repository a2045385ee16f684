"""Resampler: exact output size, affine corner mapping, background fill."""

import numpy as np
import pytest
from PIL import Image

from helpers import BLUE, GREEN, RED, YELLOW, assert_pixel_close, make_quadrants
from gridcutter.errors import InvalidGeometry
from gridcutter.models.geometry import CropRect, OutputFormat, TargetSize
from gridcutter.services.resample_service import ResampleService


@pytest.mark.parametrize("size", [(1, 1), (50, 80), (300, 120), (203, 203)])
@pytest.mark.parametrize("fmt", [OutputFormat.lossless(), OutputFormat.jpeg()])
def test_output_has_exact_target_size(quadrant_image, size, fmt):
    out = ResampleService().resample(quadrant_image, CropRect(10, 5, 60, 70), TargetSize(*size), fmt)
    assert out.size == size


def test_output_mode_follows_format(quadrant_image):
    service = ResampleService()
    crop = CropRect.full(100, 100)
    assert service.resample(quadrant_image, crop, TargetSize(10, 10), OutputFormat.lossless()).mode == "RGBA"
    assert service.resample(quadrant_image, crop, TargetSize(10, 10), OutputFormat.jpeg()).mode == "RGB"


def test_crop_corners_map_to_output_corners():
    # quadrants only inside the crop; the black surround must not bleed in
    source = make_quadrants(200, 200, box=(40, 40, 100, 100))
    out = ResampleService().resample(source, CropRect(40, 40, 100, 100), TargetSize(20, 30), OutputFormat.lossless())
    arr = np.asarray(out)

    for (x, y), color in {(0, 0): RED, (19, 0): GREEN, (0, 29): BLUE, (19, 29): YELLOW}.items():
        assert_pixel_close(arr[y, x], color)


def test_stretch_ignores_aspect_ratio(quadrant_image):
    out = ResampleService().resample(quadrant_image, CropRect.full(100, 100), TargetSize(40, 10), OutputFormat.lossless())
    arr = np.asarray(out)
    # left half red on top row, right half green: horizontal split at 20
    assert_pixel_close(arr[0, 5], RED)
    assert_pixel_close(arr[0, 35], GREEN)


def test_full_crop_at_same_size_keeps_content(gradient_image):
    crop = CropRect.full(*gradient_image.size)
    out = ResampleService().resample(gradient_image, crop, TargetSize(*gradient_image.size), OutputFormat.lossless())
    np.testing.assert_array_equal(np.asarray(out), np.asarray(gradient_image))


def test_lossy_fills_transparent_regions_white(transparent_image):
    out = ResampleService().resample(transparent_image, CropRect(5, 5, 20, 20), TargetSize(16, 9), OutputFormat.jpeg())
    assert (np.asarray(out) == 255).all()


def test_lossless_keeps_transparency(transparent_image):
    out = ResampleService().resample(transparent_image, CropRect(0, 0, 40, 30), TargetSize(8, 6), OutputFormat.lossless())
    assert (np.asarray(out)[..., 3] == 0).all()


def test_subpixel_crop_is_accepted(gradient_image):
    out = ResampleService().resample(
        gradient_image, CropRect(0.5, 1.25, 20.5, 10.75), TargetSize(41, 21), OutputFormat.lossless()
    )
    assert out.size == (41, 21)


def test_source_is_not_mutated(gradient_image):
    before = gradient_image.tobytes()
    ResampleService().resample(gradient_image, CropRect(3, 3, 30, 20), TargetSize(7, 9), OutputFormat.jpeg())
    assert gradient_image.tobytes() == before
    assert gradient_image.mode == "RGBA"


def test_rgb_source_is_supported():
    source = Image.new("RGB", (30, 20), (10, 20, 30))
    out = ResampleService().resample(source, CropRect.full(30, 20), TargetSize(15, 10), OutputFormat.jpeg())
    assert_pixel_close(out.getpixel((7, 5)), (10, 20, 30), tol=1)


def test_zero_width_target_fails(quadrant_image):
    with pytest.raises(InvalidGeometry):
        ResampleService().resample(quadrant_image, CropRect.full(100, 100), TargetSize(0, 5), OutputFormat.jpeg())


@pytest.mark.parametrize(
    "crop",
    [
        CropRect(-1, 0, 10, 10),
        CropRect(95, 0, 10, 10),
        CropRect(0, 0, 0, 10),
        CropRect(0, 50, 10, 51),
        CropRect(float("nan"), 0, 10, 10),
    ],
)
def test_invalid_crop_fails(quadrant_image, crop):
    with pytest.raises(InvalidGeometry):
        ResampleService().resample(quadrant_image, crop, TargetSize(10, 10), OutputFormat.lossless())
