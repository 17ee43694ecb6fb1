"""
Single-resolution LBP model.

An LBPSubModel holds the pattern histogram and (optionally) the variance
histogram for one (p, r, b) triple and updates them image by image. It is
used through LBPModel, which owns one sub-model per resolution.
"""
import logging
from typing import Optional, Tuple

import numpy as np

from ..exceptions import (
    EmptyModelError,
    EmptySampleError,
    InvalidModelError,
    ParameterMismatchError,
    ValidationError,
)
from ..feature_extraction.lbp_extractor import extract_lbp_features

logger = logging.getLogger(__name__)

# Variances below 10**-6 all fall into the lowest bin
LOG_VARIANCE_FLOOR = -6.0
# Guards against floating point noise pushing a value into the next bin
BIN_EPSILON = 1e-6


def variance_histogram(variances: np.ndarray, num_bins: int) -> np.ndarray:
    """
    Histogram of local variances with fixed, logarithmically spaced bins.

    Fixed bin edges (instead of the data dependent edges of the paper) make
    updating and comparing models straightforward; the log spacing mirrors
    the bins the adaptive algorithm tends to produce.

    Args:
        variances: Local variance per pixel
        num_bins: Number of bins b

    Returns:
        Normalized histogram of length b
    """
    variances = np.asarray(variances, dtype=np.float64).ravel()
    with np.errstate(divide='ignore'):
        log_var = np.log10(variances)
    f = (np.maximum(log_var, LOG_VARIANCE_FLOOR) - LOG_VARIANCE_FLOOR) / -LOG_VARIANCE_FLOOR
    idx = np.floor(num_bins * f - BIN_EPSILON).astype(np.int64)
    # Variances above 1 (unnormalized input) end up in the top bin
    idx = np.clip(idx, 0, num_bins - 1)
    counts = np.bincount(idx, minlength=num_bins).astype(np.float64)
    return counts / variances.size


def compute_image_histograms(plane: np.ndarray, num_points: int, radius: int,
                             num_bins: int) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Normalized pattern and variance histograms of a single image.

    Args:
        plane: 2-D float array (0-1 range)
        num_points: Number of neighbors p
        radius: Radius r
        num_bins: Number of variance bins b (0 disables the variance histogram)

    Returns:
        Tuple of (pattern histogram of length p + 2, variance histogram or None)
    """
    height, width = plane.shape[:2]
    if width <= 2 * radius or height <= 2 * radius:
        raise ValidationError(
            f"Image of size {width}x{height} is too small for radius {radius}: "
            f"both sides must exceed {2 * radius} pixels"
        )

    codes, variances = extract_lbp_features(plane, num_points, radius,
                                            with_variance=num_bins > 0)
    num_pixels = codes.size
    pattern = np.bincount(codes.ravel(), minlength=num_points + 2).astype(np.float64)
    pattern /= num_pixels

    var_hist = None
    if num_bins > 0:
        var_hist = variance_histogram(variances, num_bins)
    return pattern, var_hist


class LBPSubModel:
    """Pattern and variance histograms for one (p, r, b) triple."""

    def __init__(self, num_points: int, radius: int, num_bins: int):
        self.p = num_points
        self.r = radius
        self.b = num_bins
        self.pattern_hist: Optional[np.ndarray] = None
        self.var_hist: Optional[np.ndarray] = None
        self.image_count = 0

    @property
    def parameters(self) -> Tuple[int, int, int]:
        return self.p, self.r, self.b

    @property
    def is_empty(self) -> bool:
        return self.pattern_hist is None

    def incorporate(self, plane: np.ndarray) -> None:
        """
        Update the model with the data from one image.

        Every image gets the same weight regardless of its size: the new
        histograms are merged into a cumulative moving average.

        Args:
            plane: 2-D float array (0-1 range)
        """
        pattern, var_hist = compute_image_histograms(plane, self.p, self.r, self.b)
        self.merge(pattern, var_hist)

    def merge(self, pattern: np.ndarray, var_hist: Optional[np.ndarray]) -> None:
        """Merge the normalized histograms of one image into the model."""
        if pattern.shape != (self.p + 2,):
            raise ValidationError(
                f"Pattern histogram must have {self.p + 2} entries, got {pattern.shape}"
            )
        if self.b > 0 and (var_hist is None or var_hist.shape != (self.b,)):
            raise ValidationError(
                f"Variance histogram must have {self.b} entries, "
                f"got {None if var_hist is None else var_hist.shape}"
            )

        n = self.image_count
        if n == 0:
            self.pattern_hist = pattern.astype(np.float64, copy=True)
            if self.b > 0:
                self.var_hist = var_hist.astype(np.float64, copy=True)
        else:
            self.pattern_hist = (n * self.pattern_hist + pattern) / (n + 1)
            if self.b > 0:
                self.var_hist = (n * self.var_hist + var_hist) / (n + 1)
        self.image_count = n + 1
        logger.debug("Sub-model %d/%d/%d now holds %d image(s)",
                     self.p, self.r, self.b, self.image_count)

    def goodness_of_fit(self, model: "LBPSubModel") -> float:
        """
        Goodness-of-fit of this sample against a reference model.

        Based on the G statistic (log-likelihood ratio); higher is better.
        Cells that are empty in the reference are skipped, otherwise any
        sample mass there would drive the statistic to -infinity. The
        statistic is not symmetric: ``a.goodness_of_fit(b)`` is in general
        different from ``b.goodness_of_fit(a)``.

        Args:
            model: Reference sub-model with the same (p, r, b)

        Returns:
            Goodness-of-fit statistic
        """
        if model.parameters != self.parameters:
            raise ParameterMismatchError(
                "Model and sample parameters differ: "
                f"model {model.p}/{model.r}/{model.b}, sample {self.p}/{self.r}/{self.b}"
            )
        if self.image_count == 0:
            raise EmptySampleError("Sample contains no data")
        if model.is_empty:
            raise EmptyModelError("Model contains no data")

        if self.b == 0:
            ref = model.pattern_hist
            weights = self.pattern_hist
        else:
            ref = np.outer(model.pattern_hist, model.var_hist)
            weights = np.outer(self.pattern_hist, self.var_hist)

        mask = ref > 0
        return float(np.sum(weights[mask] * np.log(ref[mask])))

    def to_string(self) -> str:
        """Serialize as "h0/.../h_{p+1}:v0/.../v_{b-1}"."""
        if self.is_empty:
            raise EmptyModelError(
                f"Sub-model {self.p}/{self.r}/{self.b} has no data to serialize"
            )
        pattern = "/".join(repr(float(x)) for x in self.pattern_hist)
        variance = ""
        if self.b > 0:
            variance = "/".join(repr(float(x)) for x in self.var_hist)
        return f"{pattern}:{variance}"

    def load_from_string(self, s: str) -> None:
        """
        Load histogram data from a string produced by ``to_string``.

        The image count is not persisted; a loaded sub-model is meant to be
        used as a reference for classification.
        """
        fields = s.strip().split(":")
        if len(fields) != 2:
            raise InvalidModelError(
                f"Invalid sub-model string for {self.p}/{self.r}/{self.b}: "
                f"expected 2 ':'-separated fields, got {len(fields)}"
            )
        pattern = self._parse_histogram(fields[0], self.p + 2, "pattern")
        var_hist = None
        if self.b > 0:
            var_hist = self._parse_histogram(fields[1], self.b, "variance")
        elif fields[1]:
            raise InvalidModelError(
                f"Invalid sub-model string for {self.p}/{self.r}/0: "
                "variance histogram must be empty"
            )
        self.pattern_hist = pattern
        self.var_hist = var_hist

    def _parse_histogram(self, field: str, length: int, name: str) -> np.ndarray:
        subs = field.split("/")
        if len(subs) != length:
            raise InvalidModelError(
                f"Invalid {name} histogram for {self.p}/{self.r}/{self.b}: "
                f"expected {length} values, got {len(subs)}"
            )
        try:
            hist = np.array([float(x) for x in subs], dtype=np.float64)
        except ValueError:
            raise InvalidModelError(
                f"Invalid {name} histogram for {self.p}/{self.r}/{self.b}: "
                f"non-numeric value in {field!r}"
            ) from None
        if not np.all(np.isfinite(hist)) or np.any(hist < 0):
            raise InvalidModelError(
                f"Invalid {name} histogram for {self.p}/{self.r}/{self.b}: "
                f"values must be finite and non-negative in {field!r}"
            )
        return hist

    def __repr__(self) -> str:
        return (f"LBPSubModel(p={self.p}, r={self.r}, b={self.b}, "
                f"images={self.image_count})")
