"""pigments: dominant color extraction with k-means clustering.

Samples an image's pixels as points in RGB space, clusters them with
Lloyd's algorithm and reports each centroid with its share of the pixels.
"""

from .extract import ColorExtractor, extract_colors
from .kmeans import KMeansEngine
from .sampler import PixelSampler
from .types import (
    ClusterResult,
    Color,
    ColorExtractionError,
    EmptyInputError,
    ExtractorConfig,
    ImageDecodeError,
    ImageProcessError,
    InvalidClusterCount,
    PigmentsError,
    SampleResult,
)

__version__ = "0.1.0"
__all__ = [
    "ColorExtractor",
    "extract_colors",
    "KMeansEngine",
    "PixelSampler",
    "ClusterResult",
    "Color",
    "ColorExtractionError",
    "EmptyInputError",
    "ExtractorConfig",
    "ImageDecodeError",
    "ImageProcessError",
    "InvalidClusterCount",
    "PigmentsError",
    "SampleResult",
]
