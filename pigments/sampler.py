"""Pixel sampling: turn a decoded image into an observation set."""

import logging
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from .types import EmptyInputError, ImageArray, ImageProcessError, SampleResult

logger = logging.getLogger(__name__)

ImageLike = Union[Image.Image, ImageArray]


def _to_rgb_array(image: ImageLike) -> np.ndarray:
    """Normalize a PIL image or numpy array to a float64 (H, W, 3) array."""
    if isinstance(image, Image.Image):
        rgb = image if image.mode == "RGB" else image.convert("RGB")
        return np.asarray(rgb).astype(np.float64).reshape(rgb.size[1], rgb.size[0], 3)

    if not isinstance(image, np.ndarray):
        raise ImageProcessError(
            f"Expected PIL image or numpy array, got {type(image).__name__}"
        )

    if image.ndim == 2:
        # Grayscale - replicate into three channels
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise ImageProcessError(f"Expected 2D or 3D array, got {image.ndim}D")

    if image.shape[2] == 4:
        # Alpha is ignored, matching Image.convert("RGB")
        image = image[..., :3]
    elif image.shape[2] != 3:
        raise ImageProcessError(f"Expected 3 or 4 channels, got {image.shape[2]}")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise EmptyInputError("Cannot sample an image with zero pixels")

    rgb = image.astype(np.float64)
    if not np.all(np.isfinite(rgb)):
        raise ImageProcessError("Image contains non-finite pixel values")

    return np.clip(rgb, 0, 255)


def target_size(width: int, height: int, max_dimension: Optional[int]) -> Tuple[int, int]:
    """Compute the sampling grid size for an image.

    The aspect ratio is preserved and the longer side is capped at
    ``max_dimension``. Images already within the bound keep their size.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        max_dimension: Maximum side length, or None for no bound

    Returns:
        Tuple of (width, height) to sample at
    """
    if max_dimension is None or max(width, height) <= max_dimension:
        return width, height

    scale = max_dimension / max(width, height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def sample(image: ImageLike, max_dimension: Optional[int] = None) -> SampleResult:
    """Convert an image into an ordered (N, 3) observation array.

    Args:
        image: PIL image (any mode) or numpy array (H, W), (H, W, 3) or
            (H, W, 4) with values 0-255
        max_dimension: If either side exceeds this, the image is resized
            with a Lanczos filter before sampling. None disables resizing.

    Returns:
        SampleResult holding float64 observations in row-major order

    Raises:
        EmptyInputError: If the image has no pixels
        ImageProcessError: If the image has an unsupported shape or
            non-finite pixel values
        ValueError: If max_dimension < 1
    """
    if max_dimension is not None and max_dimension < 1:
        raise ValueError(f"max_dimension must be >= 1 or None, got {max_dimension}")

    rgb = _to_rgb_array(image)
    original_height, original_width = rgb.shape[:2]

    if original_width == 0 or original_height == 0:
        raise EmptyInputError("Cannot sample an image with zero pixels")

    width, height = target_size(original_width, original_height, max_dimension)
    if (width, height) != (original_width, original_height):
        # Round to 8 bits for Lanczos resampling
        img = Image.fromarray(np.rint(rgb).astype(np.uint8))
        img = img.resize((width, height), Image.Resampling.LANCZOS)
        rgb = np.asarray(img).astype(np.float64)
        logger.debug(
            f"Resized {original_width}x{original_height} -> {width}x{height} for sampling"
        )

    observations = np.ascontiguousarray(rgb.reshape(-1, 3))
    observations.flags.writeable = False

    return SampleResult(
        observations=observations,
        width=width,
        height=height,
        original_width=original_width,
        original_height=original_height,
    )


class PixelSampler:
    """Samples images with a fixed downsampling bound."""

    def __init__(self, max_dimension: Optional[int] = 500):
        if max_dimension is not None and max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1 or None, got {max_dimension}")
        self.max_dimension = max_dimension

    def sample(self, image: ImageLike) -> SampleResult:
        return sample(image, self.max_dimension)
