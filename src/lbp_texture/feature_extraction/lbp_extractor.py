"""
LBP (Local Binary Patterns) feature extractor.

Rotation invariant uniform patterns (LBP riu2) and local variance, following
Ojala, Pietikainen, Maenpaa: "Multiresolution Gray-Scale and Rotation
Invariant Texture Classification with Local Binary Patterns", IEEE TPAMI 24(7),
2002.

All functions operate on a single-band plane of floats in the 0-1 range,
indexed as ``plane[y, x]``. The scalar functions work on one pixel and are
kept for clarity and testing; the ``*_codes``/``*_variances`` functions do the
same computation for every interior pixel at once.
"""
import math
from typing import Sequence, Tuple

import numpy as np

# Coordinates closer than this to an integer are read without interpolation
SNAP_TOLERANCE = 1e-4


def _split_coordinate(c: float) -> Tuple[int, int, float]:
    """Return (lower, upper, fraction) for a fractional pixel coordinate."""
    nearest = int(round(c))
    if abs(c - nearest) < SNAP_TOLERANCE:
        return nearest, nearest, 0.0
    lower = int(math.floor(c))
    return lower, lower + 1, c - lower


def interpolate(plane: np.ndarray, x: float, y: float) -> float:
    """
    Bilinear interpolation of a single-band plane.

    No bounds checking is performed; the four pixels around (x, y) must exist.

    Args:
        plane: 2-D float array (0-1 range)
        x: Column coordinate
        y: Row coordinate

    Returns:
        Interpolated sample value
    """
    x1, x2, fx = _split_coordinate(x)
    y1, y2, fy = _split_coordinate(y)

    # Lerp form: a neighborhood of equal samples yields exactly that sample
    lower = plane[y1, x1] + (plane[y1, x2] - plane[y1, x1]) * fx
    upper = plane[y2, x1] + (plane[y2, x2] - plane[y2, x1]) * fx
    return float(lower + (upper - lower) * fy)


def circle_offsets(num_points: int, radius: int) -> np.ndarray:
    """
    Offsets of the sampling points on a circle around a pixel.

    Neighbor i lies at angle i * 2pi / p, displaced by (-r sin, r cos).

    Returns:
        Array of shape (p, 2) holding (dx, dy) per neighbor
    """
    angles = np.arange(num_points) * (2 * np.pi / num_points)
    dx = -radius * np.sin(angles)
    dy = radius * np.cos(angles)
    return np.stack([dx, dy], axis=1)


def load_circle(plane: np.ndarray, x: int, y: int,
                num_points: int, radius: int) -> np.ndarray:
    """
    Sample the p neighbors of pixel (x, y) on a circle of the given radius.

    The pixel must lie at least ``radius`` pixels away from every border.
    """
    offsets = circle_offsets(num_points, radius)
    return np.array([interpolate(plane, x + dx, y + dy) for dx, dy in offsets])


def lbpriu2(center: float, neighbors: Sequence[float]) -> int:
    """
    Rotation invariant uniform local binary pattern of one pixel.

    Args:
        center: Center pixel value
        neighbors: Circle samples as returned by load_circle

    Returns:
        Number of set bits for uniform patterns (0..p), p + 1 otherwise
    """
    p = len(neighbors)
    s = [1 if g - center >= 0 else 0 for g in neighbors]
    # Equation (10): circular bit transitions
    u = sum(1 for i in range(p) if s[i] != s[(i + 1) % p])
    # Equation (9)
    if u <= 2:
        return sum(s)
    return p + 1


def local_variance(neighbors: Sequence[float]) -> float:
    """Rotation invariant local variance (population variance of the circle)."""
    g = np.asarray(neighbors, dtype=np.float64)
    mu = g.mean()
    return float(np.mean((g - mu) ** 2))


def interior_shape(plane: np.ndarray, radius: int) -> Tuple[int, int]:
    """Shape (rows, cols) of the region with a full neighborhood margin."""
    height, width = plane.shape[:2]
    return max(height - 2 * radius, 0), max(width - 2 * radius, 0)


def _shifted(plane: np.ndarray, radius: int, dy: int, dx: int) -> np.ndarray:
    """Interior window of the plane moved by an integer offset."""
    rows, cols = interior_shape(plane, radius)
    y0 = radius + dy
    x0 = radius + dx
    return plane[y0:y0 + rows, x0:x0 + cols]


def sample_circle(plane: np.ndarray, num_points: int, radius: int) -> np.ndarray:
    """
    Circle samples for every interior pixel.

    Since all pixels share the same offsets, each neighbor is a weighted sum
    of four shifted copies of the plane, with the same weights and snapping
    rule as ``interpolate``.

    Args:
        plane: 2-D float array (0-1 range)
        num_points: Number of neighbors p
        radius: Circle radius r

    Returns:
        Array of shape (p, rows, cols) with rows = H - 2r, cols = W - 2r
    """
    rows, cols = interior_shape(plane, radius)
    samples = np.empty((num_points, rows, cols), dtype=np.float64)

    for i, (dx, dy) in enumerate(circle_offsets(num_points, radius)):
        x1, x2, fx = _split_coordinate(dx)
        y1, y2, fy = _split_coordinate(dy)
        lower = _shifted(plane, radius, y1, x1)
        lower = lower + (_shifted(plane, radius, y1, x2) - lower) * fx
        upper = _shifted(plane, radius, y2, x1)
        upper = upper + (_shifted(plane, radius, y2, x2) - upper) * fx
        samples[i] = lower + (upper - lower) * fy

    return samples


def center_values(plane: np.ndarray, radius: int) -> np.ndarray:
    """Center pixel values of every interior pixel, shape (rows, cols)."""
    return _shifted(plane, radius, 0, 0)


def lbpriu2_codes(centers: np.ndarray, samples: np.ndarray) -> np.ndarray:
    """
    Vectorized ``lbpriu2``.

    Args:
        centers: Center values, shape (rows, cols)
        samples: Circle samples, shape (p, rows, cols)

    Returns:
        Integer codes in [0, p + 1], shape (rows, cols)
    """
    p = samples.shape[0]
    s = (samples - centers[np.newaxis] >= 0).astype(np.int64)
    transitions = np.sum(s != np.roll(s, -1, axis=0), axis=0)
    ones = s.sum(axis=0)
    return np.where(transitions <= 2, ones, p + 1)


def local_variances(samples: np.ndarray) -> np.ndarray:
    """Vectorized ``local_variance`` over axis 0, shape (rows, cols)."""
    return samples.var(axis=0)


def extract_lbp_features(plane: np.ndarray, num_points: int,
                         radius: int, with_variance: bool = True
                         ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute LBP codes and (optionally) local variances of a plane.

    Args:
        plane: 2-D float array (0-1 range)
        num_points: Number of neighbors p
        radius: Circle radius r
        with_variance: Whether to compute the local variance

    Returns:
        Tuple of (codes, variances); variances is None when not requested
    """
    samples = sample_circle(plane, num_points, radius)
    codes = lbpriu2_codes(center_values(plane, radius), samples)
    variances = local_variances(samples) if with_variance else None
    return codes, variances
