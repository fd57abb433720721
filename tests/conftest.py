"""Shared synthetic images for the test suite."""

import numpy as np
import pytest

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def solid(width, height, rgb):
    img = np.empty((height, width, 3), dtype=np.uint8)
    img[...] = np.array(rgb, dtype=np.uint8)
    return img


def quadrants(block_w, block_h, colours):
    """2x2 target: colours in order top-left, top-right, bottom-left, bottom-right."""
    img = np.empty((2 * block_h, 2 * block_w, 3), dtype=np.uint8)
    for k, rgb in enumerate(colours):
        r, c = divmod(k, 2)
        img[r * block_h : (r + 1) * block_h, c * block_w : (c + 1) * block_w] = rgb
    return img


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
