"""Image builders and pixel assertions shared by the tests."""

import numpy as np
from PIL import Image

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
YELLOW = (255, 255, 0, 255)


def make_quadrants(width, height, box=None, background=(0, 0, 0, 255)):
    """RGBA image whose `box` (x, y, w, h) is split into red/green/blue/yellow quadrants."""
    x, y, w, h = box if box is not None else (0, 0, width, height)
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[:, :] = background
    mx, my = x + w // 2, y + h // 2
    arr[y:my, x:mx] = RED
    arr[y:my, mx:x + w] = GREEN
    arr[my:y + h, x:mx] = BLUE
    arr[my:y + h, mx:x + w] = YELLOW
    return Image.fromarray(arr)


def assert_pixel_close(pixel, expected, tol=2):
    diff = np.abs(np.asarray(pixel, dtype=int) - np.asarray(expected, dtype=int))
    assert diff.max() <= tol, f"{tuple(pixel)} != {tuple(expected)}"
