"""
Utility functions: configuration and image loading.
Generator pattern for memory-efficient image loading.
"""
from pathlib import Path
from typing import Generator, Iterable, List, Optional, Tuple

import cv2
import numpy as np
import yaml
from PIL import Image

from .exceptions import ImageLoadError, ParameterError, ValidationError
from .feature_extraction.parameters import DEFAULT_RESOLUTIONS, LBPParameters


def load_config(config_path: Optional[Path]) -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml (None or a missing file gives {})

    Returns:
        Configuration dictionary
    """
    if config_path is None or not Path(config_path).exists():
        return {}
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def config_section(config: dict, name: str) -> dict:
    """Return a top-level config section, {} when it is missing or empty."""
    if not isinstance(config, dict):
        raise ParameterError(f"Configuration must be a mapping, got {config!r}")
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ParameterError(f"Config section '{name}' must be a mapping, got {section!r}")
    return section


def parameters_from_config(config: dict) -> LBPParameters:
    """
    Build the training parameters from the ``lbp.resolutions`` entry.

    Falls back to DEFAULT_RESOLUTIONS when the entry is missing.
    """
    resolutions = config_section(config, 'lbp').get('resolutions', DEFAULT_RESOLUTIONS)
    if not isinstance(resolutions, list):
        raise ParameterError(
            f"lbp.resolutions must be a list of [p, r, b] triples, got {resolutions!r}"
        )
    return LBPParameters.from_triples(resolutions)


def ensure_dir(path: Path) -> None:
    """Ensure directory exists."""
    path.mkdir(parents=True, exist_ok=True)


def first_band(image: np.ndarray) -> np.ndarray:
    """
    Return the first band of an image.

    Only one band is modeled; pass other bands explicitly if needed.

    Args:
        image: 2-D (H, W) or 3-D (H, W, C) array

    Returns:
        2-D array (H, W)
    """
    image = np.asarray(image)
    if image.ndim == 2:
        return image
    if image.ndim == 3 and image.shape[2] >= 1:
        return image[:, :, 0]
    raise ValidationError(
        f"Image must have shape (H, W) or (H, W, C), got {image.shape}"
    )


def normalize_plane(band: np.ndarray) -> np.ndarray:
    """Convert raw 0-255 samples to floats in the 0-1 range."""
    return np.asarray(band, dtype=np.float64) / 255.0


def load_image(image_path: Path) -> np.ndarray:
    """
    Load the first band of an image file.

    OpenCV is tried first, Pillow is used for formats OpenCV cannot decode.

    Args:
        image_path: Path to image file (.png, .jpg, ...)

    Returns:
        Raw samples of the first band as a 2-D array
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    img = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if img is not None:
        # OpenCV stores color images as BGR; the first band is red
        if img.ndim == 3 and img.shape[2] >= 3:
            img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB if img.shape[2] == 3
                               else cv2.COLOR_BGRA2RGBA)
        return first_band(img)

    try:
        with Image.open(image_path) as pil_img:
            img = np.array(pil_img)
    except (OSError, ValueError) as e:
        raise ImageLoadError(f"Could not decode image {image_path}: {e}") from e
    return first_band(img)


def image_generator(image_paths: Iterable[Path]) -> Generator[Tuple[np.ndarray, Path], None, None]:
    """
    Generator that loads images one at a time for memory efficiency.

    Args:
        image_paths: Image file paths

    Yields:
        Tuple of (first band, image_path)
    """
    for img_path in image_paths:
        img = load_image(Path(img_path))
        yield img, Path(img_path)
        # Memory is freed once the caller drops the image


def collect_image_paths(paths: Iterable[str]) -> List[Path]:
    """Turn command line arguments into paths, expanding directories."""
    image_paths = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            image_paths.extend(sorted(
                f for f in path.iterdir()
                if f.suffix.lower() in {'.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff', '.gif'}
            ))
        else:
            image_paths.append(path)
    return image_paths
