"""
Multiresolution LBP texture model.

Implements the method of Ojala, Pietikainen, Maenpaa: "Multiresolution
Gray-Scale and Rotation Invariant Texture Classification with Local Binary
Patterns", IEEE TPAMI 24(7), 2002, with two changes:

- the variance histograms use fixed, logarithmically spaced bins;
- the goodness-of-fit statistic skips histogram cells that are empty in the
  reference model.

The same class represents trained texture classes and samples to classify.
Only the first band of each image is used.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Union

import numpy as np

from ..exceptions import (
    EmptyModelError,
    InvalidModelError,
    ParameterMismatchError,
    ValidationError,
)
from ..feature_extraction.parameters import LBPParameters
from ..utils import first_band, image_generator, normalize_plane
from .sub_model import LBPSubModel, compute_image_histograms

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def best_index(scores: Sequence[float]) -> int:
    """Index of the largest score; the first one wins on ties."""
    if len(scores) == 0:
        raise ValidationError("At least one candidate model is required")

    best = 0
    max_gof = float('-inf')
    for i, gof in enumerate(scores):
        if gof > max_gof:
            max_gof = gof
            best = i
    return best


class LBPModel:
    """
    LBP model built from one or more images.

    Use ``classify`` on a model built from a sample image to pick the best
    matching texture class among a list of trained models.
    """

    def __init__(self, params: LBPParameters):
        """
        Create an empty model.

        Args:
            params: Parameters (one sub-model is created per resolution)
        """
        self.params = params
        self.sub_models: List[LBPSubModel] = [
            LBPSubModel(p, r, b) for p, r, b in params
        ]

    @classmethod
    def from_images(cls, params: LBPParameters,
                    images: Iterable[np.ndarray]) -> "LBPModel":
        """
        Build a model from images.

        Args:
            params: Parameters
            images: Iterable of images with raw 0-255 samples; may be lazy

        Returns:
            Trained model
        """
        model = cls(params)
        for image in images:
            model.incorporate(image)
        return model

    @classmethod
    def from_files(cls, params: LBPParameters,
                   files: Iterable[PathLike]) -> "LBPModel":
        """
        Build a model from image files.

        The images are loaded one after the other, so only one of them is in
        memory at any time.
        """
        model = cls(params)
        for image, path in image_generator(files):
            logger.debug("Incorporating %s", path)
            model.incorporate(image)
        return model

    @property
    def parameters(self) -> LBPParameters:
        return self.params

    @property
    def image_count(self) -> int:
        return self.sub_models[0].image_count

    def incorporate(self, image: np.ndarray) -> None:
        """
        Incorporate an image into every sub-model.

        Args:
            image: 2-D or 3-D array of raw 0-255 samples (first band is used)
        """
        plane = normalize_plane(first_band(image))
        # All resolutions are computed before any sub-model changes
        histograms = [
            compute_image_histograms(plane, s.p, s.r, s.b) for s in self.sub_models
        ]
        for sub_model, (pattern, var_hist) in zip(self.sub_models, histograms):
            sub_model.merge(pattern, var_hist)

    def incorporate_file(self, path: PathLike) -> None:
        """Load an image file and incorporate it."""
        for image, _ in image_generator([path]):
            self.incorporate(image)

    def goodness_of_fit(self, model: "LBPModel") -> float:
        """
        Goodness-of-fit of this sample against a model.

        Sum of the sub-model statistics; higher means a better match. The
        statistic is not symmetric, always call it on the sample.

        Args:
            model: Reference model built with the same parameters

        Returns:
            Goodness-of-fit statistic
        """
        if len(model.sub_models) != len(self.sub_models):
            raise ParameterMismatchError(
                f"Model and sample parameters differ: model {model.params}, "
                f"sample {self.params}"
            )
        return sum(
            sample.goodness_of_fit(reference)
            for sample, reference in zip(self.sub_models, model.sub_models)
        )

    def scores(self, models: Sequence["LBPModel"]) -> List[float]:
        """Goodness-of-fit against each model, in order."""
        return [self.goodness_of_fit(m) for m in models]

    def classify(self, models: Sequence["LBPModel"]) -> int:
        """
        Classify this sample.

        Args:
            models: Candidate models

        Returns:
            Index of the model with the largest statistic (first one on ties)
        """
        return best_index(self.scores(models))

    def to_string(self) -> str:
        """Text representation: parameter line, then one line per sub-model."""
        lines = [self.params.to_string()]
        lines.extend(sub_model.to_string() for sub_model in self.sub_models)
        return "\n".join(lines) + "\n"

    @classmethod
    def from_string(cls, text: str) -> "LBPModel":
        """Parse the representation produced by ``to_string``."""
        lines = text.splitlines()
        if not lines or not lines[0].strip():
            raise InvalidModelError("Invalid model: missing parameter line")
        try:
            params = LBPParameters.from_string(lines[0])
        except ValidationError as e:
            raise InvalidModelError(f"Invalid model: {e}") from e

        model = cls(params)
        if len(lines) - 1 < params.size():
            raise InvalidModelError(
                f"Invalid model: expected {params.size()} sub-model lines, "
                f"got {len(lines) - 1}"
            )
        for sub_model, line in zip(model.sub_models, lines[1:]):
            sub_model.load_from_string(line)
        return model

    def save(self, path: PathLike) -> None:
        """
        Store this model in a text file.

        Args:
            path: Target file
        """
        if any(s.is_empty for s in self.sub_models):
            raise EmptyModelError("Cannot save a model without any images")
        text = self.to_string()
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info("Saved model %s to %s", self.params, path)

    @classmethod
    def load(cls, path: PathLike) -> "LBPModel":
        """
        Load a model from a text file.

        Args:
            path: Model file

        Returns:
            Model usable as a reference for classification
        """
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        try:
            model = cls.from_string(text)
        except InvalidModelError as e:
            raise InvalidModelError(f"{path}: {e}") from e
        logger.info("Loaded model %s from %s", model.params, path)
        return model

    def __repr__(self) -> str:
        return f"LBPModel(params={self.params}, images={self.image_count})"
