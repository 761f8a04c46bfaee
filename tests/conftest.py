"""Shared fixtures for refill tests."""

import numpy as np
import pytest

RED = (255, 0, 0, 255)


def solid(width: int, height: int, color=RED) -> np.ndarray:
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:] = color
    return image


def square_mask(width: int, height: int, x: int, y: int, size: int) -> np.ndarray:
    mask = np.zeros((height, width), dtype=bool)
    mask[y : y + size, x : x + size] = True
    return mask


@pytest.fixture
def red_image() -> np.ndarray:
    """20x20 opaque red image."""
    return solid(20, 20)


@pytest.fixture
def center_mask() -> np.ndarray:
    """4x4 masked square in the middle of a 20x20 grid."""
    return square_mask(20, 20, 8, 8, 4)


@pytest.fixture
def stripes() -> np.ndarray:
    """32x32 image of vertical 4-pixel stripes, with a black blot in the middle."""
    image = np.zeros((32, 32, 4), dtype=np.uint8)
    image[..., 3] = 255
    for x in range(32):
        if (x // 4) % 2 == 0:
            image[:, x, :3] = (200, 40, 40)
        else:
            image[:, x, :3] = (40, 40, 200)
    image[12:20, 12:20, :3] = 0
    return image


@pytest.fixture
def blot_mask() -> np.ndarray:
    return square_mask(32, 32, 12, 12, 8)


@pytest.fixture
def noise_image() -> np.ndarray:
    rng = np.random.default_rng(1234)
    image = rng.integers(0, 256, size=(24, 24, 4), dtype=np.uint8)
    image[..., 3] = 255
    return image
