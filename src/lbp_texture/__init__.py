"""
Texture classification with multiresolution, rotation invariant LBP models.
"""
from .exceptions import (
    EmptyModelError,
    EmptySampleError,
    ImageLoadError,
    InvalidModelError,
    LBPError,
    ParameterError,
    ParameterMismatchError,
    ValidationError,
)
from .feature_extraction.parameters import DEFAULT_RESOLUTIONS, LBPParameters
from .models.lbp_model import LBPModel
from .models.sub_model import LBPSubModel

__version__ = "0.1.0"
