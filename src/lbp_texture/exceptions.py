"""
Exceptions raised by the LBP texture classifier.
"""


class LBPError(Exception):
    """Base class for all errors raised by lbp_texture."""


class ValidationError(LBPError, ValueError):
    """Input has the wrong shape, type or range."""


class ParameterError(ValidationError):
    """Invalid LBP parameter arrays or parameter string."""


class InvalidModelError(ValidationError):
    """A persisted model is truncated or malformed."""


class ParameterMismatchError(ValidationError):
    """Sample and reference were built with different (p, r, b)."""


class EmptySampleError(ValidationError):
    """Goodness-of-fit was requested for a sample without any images."""


class EmptyModelError(ValidationError):
    """A model without histogram data was used as reference or saved."""


class ImageLoadError(LBPError, OSError):
    """An image file could not be decoded."""
