"""
Shared fixtures: synthetic texture generators.
"""
from pathlib import Path

import cv2
import numpy as np
import pytest


def constant_texture(size: int = 48, value: int = 128) -> np.ndarray:
    return np.full((size, size), value, dtype=np.uint8)


def flat_texture(size: int = 48, seed: int = 0) -> np.ndarray:
    """Flat gray with +-1 sensor noise."""
    rng = np.random.default_rng(seed)
    return (128 + rng.integers(-1, 2, size=(size, size))).astype(np.uint8)


def checkerboard_texture(size: int = 48, cell: int = 1) -> np.ndarray:
    yy, xx = np.mgrid[0:size, 0:size]
    return np.where(((yy // cell) + (xx // cell)) % 2 == 0, 255, 0).astype(np.uint8)


def noise_texture(size: int = 48, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(size, size)).astype(np.uint8)


def stripe_texture(size: int = 48, width: int = 2) -> np.ndarray:
    xx = np.mgrid[0:size, 0:size][1]
    return np.where((xx // width) % 2 == 0, 255, 0).astype(np.uint8)


@pytest.fixture
def write_image(tmp_path):
    """Write an image array to a PNG file under tmp_path and return its path."""
    def _write(name: str, image: np.ndarray) -> Path:
        path = tmp_path / name
        assert cv2.imwrite(str(path), image)
        return path
    return _write
