"""Shared image fixtures."""

import numpy as np
import pytest
from PIL import Image

from helpers import make_quadrants


@pytest.fixture
def quadrant_image():
    return make_quadrants(100, 100)


@pytest.fixture
def gradient_image():
    """Deterministic RGBA image where every pixel is distinct enough to catch offsets."""
    h, w = 37, 53
    ys, xs = np.mgrid[0:h, 0:w]
    arr = np.stack(
        [(xs * 4) % 256, (ys * 6) % 256, (xs + ys) % 256, np.full_like(xs, 255)],
        axis=-1,
    ).astype(np.uint8)
    return Image.fromarray(arr)


@pytest.fixture
def transparent_image():
    return Image.new("RGBA", (40, 30), (0, 0, 0, 0))
