"""Dominant color extraction: sampling, clustering and ranking."""

import logging
from typing import List, Optional

import numpy as np

from .kmeans import KMeansEngine
from .sampler import ImageLike, PixelSampler
from .types import (
    ClusterResult,
    Color,
    ColorExtractionError,
    ExtractorConfig,
    PigmentsError,
)

logger = logging.getLogger(__name__)


def rank_colors(result: ClusterResult, total: int) -> List[Color]:
    """Convert a cluster result into colors ordered by coverage.

    Colors are sorted by member count, largest first; clusters with equal
    counts keep their cluster index order.

    Args:
        result: Output of KMeansEngine.cluster
        total: Number of observations that were clustered

    Returns:
        One Color per cluster with percentage = 100 * count / total
    """
    channels = result.colors()
    order = np.argsort(-result.counts, kind="stable")

    return [
        Color(
            r=int(channels[i, 0]),
            g=int(channels[i, 1]),
            b=int(channels[i, 2]),
            percentage=100.0 * float(result.counts[i]) / total,
        )
        for i in order
    ]


class ColorExtractor:
    """Extract the dominant colors of an image."""

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        self.sampler = PixelSampler(self.config.max_dimension)
        self.engine = KMeansEngine(self.config)

    def extract(self, image: ImageLike, num_colors: Optional[int] = None) -> List[Color]:
        """Cluster an image's pixels and report the centroids as colors.

        Args:
            image: PIL image or numpy array (H, W, 3) with values 0-255
            num_colors: Number of colors to extract (defaults to config.num_colors)

        Returns:
            Exactly num_colors Color records, most common first

        Raises:
            EmptyInputError: If the image has no pixels
            InvalidClusterCount: If num_colors < 1 or exceeds the sampled pixel count
            ColorExtractionError: If clustering fails
        """
        k = self.config.num_colors if num_colors is None else num_colors

        sample = self.sampler.sample(image)
        logger.info(
            f"Sampling {sample.width}x{sample.height} "
            f"(original {sample.original_width}x{sample.original_height}), "
            f"{sample.total} pixels"
        )

        try:
            result = self.engine.cluster(sample.observations, k)
        except (PigmentsError, ValueError):
            raise
        except Exception as e:
            raise ColorExtractionError(f"Color clustering failed: {e}") from e

        return rank_colors(result, sample.total)


def extract_colors(
    image: ImageLike, num_colors: int, config: Optional[ExtractorConfig] = None
) -> List[Color]:
    """Extract ``num_colors`` dominant colors from an image.

    Convenience wrapper around :class:`ColorExtractor`.
    """
    return ColorExtractor(config).extract(image, num_colors)
