"""Pytest configuration and fixtures."""

import numpy as np
import pytest

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GREEN = (0, 255, 0)


def make_image(height: int, width: int, color=(0, 0, 0)) -> np.ndarray:
    """Solid (H, W, 3) uint8 image."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return image


@pytest.fixture
def rng():
    """Seeded generator so clustering tests are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def white_columns_image():
    """4x4 image: outer columns white (all corners), middle columns (10, 10, 10)."""
    image = make_image(4, 4, WHITE)
    image[:, 1:3] = (10, 10, 10)
    return image


@pytest.fixture
def clipart_image():
    """20x20 white backdrop with a red square holding a white 'hole' in its middle."""
    image = make_image(20, 20, WHITE)
    image[5:15, 5:15] = (200, 30, 30)
    image[9:11, 9:11] = WHITE
    return image


@pytest.fixture
def three_color_image():
    """Bands of 15, 10 and 5 pixels; the corners match no background rule."""
    image = np.zeros((6, 5, 3), dtype=np.uint8)
    image[0:3] = (120, 40, 40)
    image[3:5] = (40, 120, 40)
    image[5:6] = (40, 40, 120)
    return image


@pytest.fixture
def output_dir(tmp_path):
    """Directory for test outputs."""
    out_dir = tmp_path / "output"
    out_dir.mkdir()
    return out_dir
