"""Pytest configuration and fixtures."""

import numpy as np
import pytest
from PIL import Image


def make_split_image(width: int, height: int, left=(255, 0, 0), right=(0, 0, 255)) -> np.ndarray:
    """Image whose left half is one color and right half another."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, : width // 2] = left
    image[:, width // 2 :] = right
    return image


@pytest.fixture
def red_blue_image():
    """100x100 image, left half pure red, right half pure blue."""
    return make_split_image(100, 100)


@pytest.fixture
def uniform_image():
    """10x10 image of a single color (10, 20, 30)."""
    return np.full((10, 10, 3), (10, 20, 30), dtype=np.uint8)


@pytest.fixture
def random_observations():
    """Reproducible random RGB observations."""
    rng = np.random.RandomState(0)
    return rng.randint(0, 256, size=(2000, 3)).astype(np.float64)


@pytest.fixture
def red_blue_png(tmp_path, red_blue_image):
    """Path to the red/blue split image saved as PNG."""
    path = tmp_path / "red_blue.png"
    Image.fromarray(red_blue_image).save(path)
    return path
