"""Image file loading."""

from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .types import ImageDecodeError


def load_image(path: Union[str, Path]) -> Image.Image:
    """
    Load an image file as an RGB PIL image.

    EXIF orientation is applied and alpha is dropped. The returned image is
    fully loaded, so the file is closed when this returns.

    Args:
        path: Path to image file

    Returns:
        RGB PIL image

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageDecodeError: If the path is not a file or cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageDecodeError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            return img.convert("RGB")

    except UnidentifiedImageError as e:
        raise ImageDecodeError(f"Unrecognized image format {path}: {e}") from e
    except (IOError, OSError) as e:
        raise ImageDecodeError(f"Failed to load image {path}: {e}") from e
