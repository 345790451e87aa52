"""Common types, configuration and exceptions for pigments."""

from dataclasses import dataclass, field, asdict
from typing import Iterator, Optional, Tuple

import numpy as np

# Type aliases
ImageArray = np.ndarray
Observations = np.ndarray

CHANNEL_MIN = 0.0
CHANNEL_MAX = 255.0

INIT_METHODS = ("k-means++", "random")


@dataclass
class ExtractorConfig:
    """Configuration for dominant color extraction."""

    # Requested palette size
    num_colors: int = 5

    # Sampling - images larger than this on either side are downsampled
    max_dimension: Optional[int] = 500

    # Clustering
    max_iterations: int = 100
    tolerance: float = 1e-4
    init: str = "k-means++"
    random_state: int = 42

    # Assignment step parallelism
    n_workers: int = 1
    chunk_size: int = 65536

    def __post_init__(self):
        if self.num_colors < 1:
            raise InvalidClusterCount(f"num_colors must be >= 1, got {self.num_colors}")
        if self.max_dimension is not None and self.max_dimension < 1:
            raise ValueError(
                f"max_dimension must be >= 1 or None, got {self.max_dimension}"
            )
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be > 0, got {self.tolerance}")
        if self.init not in INIT_METHODS:
            raise ValueError(
                f"init must be one of {', '.join(INIT_METHODS)}, got {self.init!r}"
            )
        if self.n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")


@dataclass
class Color:
    """One extracted color with its share of the sampled pixels."""

    r: int
    g: int
    b: int
    percentage: float

    def to_hex(self) -> str:
        """Return the color as an upper-case ``#RRGGBB`` string."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SampleResult:
    """Observation set produced by the pixel sampler."""

    observations: Observations  # (N, 3) float64, row-major pixel order
    width: int                  # Sampled grid width (after resize)
    height: int                 # Sampled grid height (after resize)
    original_width: int
    original_height: int

    @property
    def total(self) -> int:
        """Number of sampled pixels, the denominator for percentages."""
        return len(self.observations)

    @property
    def downsampled(self) -> bool:
        return (self.width, self.height) != (self.original_width, self.original_height)


@dataclass(frozen=True)
class ClusterResult:
    """Outcome of one k-means run.

    ``centroids`` are clamped to the channel range but kept as floats;
    use :meth:`colors` for rounded channel values. Iterating yields
    ``(centroid, count)`` pairs in cluster index order.
    """

    centroids: np.ndarray  # (K, 3) float64
    counts: np.ndarray     # (K,) int64, sums to the observation count
    labels: np.ndarray     # (N,) cluster index per observation
    n_iter: int
    converged: bool
    inertia: float = field(default=0.0)

    def __len__(self) -> int:
        return len(self.centroids)

    def __iter__(self) -> Iterator[Tuple[np.ndarray, int]]:
        for centroid, count in zip(self.centroids, self.counts):
            yield centroid, int(count)

    def colors(self) -> np.ndarray:
        """Centroids rounded to the nearest channel integer, as uint8."""
        return np.rint(self.centroids).astype(np.uint8)


class PigmentsError(Exception):
    """Base exception for color extraction errors."""

    pass


class ImageProcessError(PigmentsError):
    """Exception raised when an image cannot be turned into observations."""

    pass


class ImageDecodeError(ImageProcessError):
    """Exception raised when an image file cannot be decoded."""

    pass


class EmptyInputError(PigmentsError):
    """Exception raised when there are no observations to cluster."""

    pass


class InvalidClusterCount(PigmentsError):
    """Exception raised when the requested cluster count is out of range."""

    pass


class ColorExtractionError(PigmentsError):
    """Exception raised when clustering fails."""

    pass
