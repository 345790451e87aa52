"""K-means clustering engine (Lloyd's algorithm) for RGB observations."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from scipy.spatial.distance import cdist
from sklearn.cluster import kmeans_plusplus

from .types import (
    CHANNEL_MAX,
    CHANNEL_MIN,
    ClusterResult,
    ColorExtractionError,
    EmptyInputError,
    ExtractorConfig,
    InvalidClusterCount,
    Observations,
)

logger = logging.getLogger(__name__)


@dataclass
class _Assignment:
    """Result of one assignment step over all observations."""

    labels: np.ndarray     # (N,) nearest centroid index
    distances: np.ndarray  # (N,) squared distance to that centroid
    sums: np.ndarray       # (K, 3) per-cluster coordinate sums
    counts: np.ndarray     # (K,) per-cluster member counts


def _assign_chunk(
    chunk: np.ndarray, centroids: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Assign one contiguous block of observations and reduce it to partial sums."""
    k = len(centroids)
    dist = cdist(chunk, centroids, "sqeuclidean")
    # argmin returns the first minimum, so exact ties go to the lowest index
    labels = np.argmin(dist, axis=1)
    min_dist = dist[np.arange(len(chunk)), labels]
    counts = np.bincount(labels, minlength=k)
    sums = np.stack(
        [np.bincount(labels, weights=chunk[:, c], minlength=k) for c in range(chunk.shape[1])],
        axis=1,
    )
    return labels, min_dist, sums, counts


def assign_labels(observations: Observations, centroids: np.ndarray) -> np.ndarray:
    """Label each observation with the index of its nearest centroid.

    Args:
        observations: Array of points (N, 3)
        centroids: Array of centroids (K, 3)

    Returns:
        Array of centroid indices (N,); ties resolve to the lowest index
    """
    observations = np.asarray(observations, dtype=np.float64)
    centroids = np.asarray(centroids, dtype=np.float64)
    labels, _, _, _ = _assign_chunk(observations, centroids)
    return labels


class KMeansEngine:
    """Partition observations into K clusters by iterative centroid refinement.

    Seeding is k-means++ (``sklearn.cluster.kmeans_plusplus``) or uniform
    sampling without replacement, both driven by ``config.random_state`` so a
    run is fully reproducible from its inputs.

    The assignment step works on fixed-size chunks of ``config.chunk_size``
    observations. With ``config.n_workers > 1`` the chunks are processed on a
    thread pool; partial sums are always merged in chunk order, so the output
    does not depend on the number of workers.

    A cluster that ends an assignment step with no members is re-seeded at
    the observation farthest from its current centroid. When the iteration
    ceiling is hit before convergence, a final assignment against the last
    centroids supplies the reported counts.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()

    def cluster(
        self,
        observations: Observations,
        k: int,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
    ) -> ClusterResult:
        """Run k-means on an observation set.

        Args:
            observations: Array of points (N, 3) with channel values 0-255
            k: Number of clusters (1 <= k <= N)
            max_iterations: Iteration ceiling (defaults to config.max_iterations)
            tolerance: Stop once no centroid moves this far or more
                (defaults to config.tolerance)

        Returns:
            ClusterResult with K clamped centroids and member counts

        Raises:
            EmptyInputError: If there are no observations
            InvalidClusterCount: If k < 1 or k > N
            ColorExtractionError: If centroids stop being finite
            ValueError: If observations, max_iterations or tolerance are invalid
        """
        X = self._validate_observations(observations)
        n = len(X)

        if k < 1:
            raise InvalidClusterCount(f"Number of clusters must be at least 1, got {k}")
        if k > n:
            raise InvalidClusterCount(
                f"Number of clusters ({k}) exceeds number of observations ({n})"
            )

        if max_iterations is None:
            max_iterations = self.config.max_iterations
        if tolerance is None:
            tolerance = self.config.tolerance
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        if not tolerance > 0:
            raise ValueError(f"tolerance must be > 0, got {tolerance}")

        centroids = self._init_centroids(X, k)
        logger.info(f"Clustering {n} observations into {k} clusters ({self.config.init})")

        workers = self.config.n_workers
        executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        converged = False
        try:
            for iteration in range(1, max_iterations + 1):
                step = self._assign(X, centroids, executor)
                new_centroids = self._update(X, centroids, step)

                if not np.all(np.isfinite(new_centroids)):
                    raise ColorExtractionError(
                        f"Centroids diverged to non-finite values at iteration {iteration}"
                    )

                shift = float(np.max(np.linalg.norm(new_centroids - centroids, axis=1)))
                centroids = new_centroids
                logger.debug(f"Iteration {iteration}: max centroid shift {shift:.6f}")

                if shift < tolerance:
                    converged = True
                    break

            if not converged:
                # Counts and labels must describe the centroids being reported
                step = self._assign(X, centroids, executor)
        finally:
            if executor is not None:
                executor.shutdown()

        if converged:
            logger.info(f"Converged after {iteration} iterations")
        else:
            logger.warning(
                f"Did not converge within {max_iterations} iterations "
                f"(last shift {shift:.6f}, tolerance {tolerance})"
            )

        return ClusterResult(
            centroids=np.clip(centroids, CHANNEL_MIN, CHANNEL_MAX),
            counts=step.counts.astype(np.int64),
            labels=step.labels,
            n_iter=iteration,
            converged=converged,
            inertia=float(step.distances.sum()),
        )

    @staticmethod
    def _validate_observations(observations: Observations) -> np.ndarray:
        X = np.asarray(observations, dtype=np.float64)

        if X.ndim != 2 or X.shape[1] != 3:
            if X.size == 0:
                raise EmptyInputError("Cannot cluster an empty observation set")
            raise ValueError(f"Observations must have shape (N, 3), got {X.shape}")
        if len(X) == 0:
            raise EmptyInputError("Cannot cluster an empty observation set")
        if not np.all(np.isfinite(X)):
            raise ValueError("Observations must be finite")

        return X

    def _init_centroids(self, X: np.ndarray, k: int) -> np.ndarray:
        """Pick K starting centroids from the observations."""
        if self.config.init == "k-means++":
            centers, _ = kmeans_plusplus(X, n_clusters=k, random_state=self.config.random_state)
        else:
            rng = np.random.RandomState(self.config.random_state)
            indices = rng.choice(len(X), size=k, replace=False)
            centers = X[indices]

        return np.array(centers, dtype=np.float64)

    def _chunk_bounds(self, n: int) -> List[Tuple[int, int]]:
        size = self.config.chunk_size
        return [(start, min(start + size, n)) for start in range(0, n, size)]

    def _assign(
        self,
        X: np.ndarray,
        centroids: np.ndarray,
        executor: Optional[ThreadPoolExecutor],
    ) -> _Assignment:
        """Nearest-centroid assignment with per-cluster sums and counts."""
        bounds = self._chunk_bounds(len(X))

        if executor is None:
            partials = [_assign_chunk(X[start:stop], centroids) for start, stop in bounds]
        else:
            # map() yields in submission order, which fixes the reduction order
            partials = list(
                executor.map(lambda b: _assign_chunk(X[b[0]:b[1]], centroids), bounds)
            )

        k = len(centroids)
        sums = np.zeros((k, X.shape[1]), dtype=np.float64)
        counts = np.zeros(k, dtype=np.int64)
        for _, _, chunk_sums, chunk_counts in partials:
            sums += chunk_sums
            counts += chunk_counts

        return _Assignment(
            labels=np.concatenate([p[0] for p in partials]),
            distances=np.concatenate([p[1] for p in partials]),
            sums=sums,
            counts=counts,
        )

    @staticmethod
    def _update(X: np.ndarray, centroids: np.ndarray, step: _Assignment) -> np.ndarray:
        """Move each centroid to the mean of its members, re-seeding empty ones."""
        new_centroids = centroids.copy()
        occupied = step.counts > 0
        new_centroids[occupied] = step.sums[occupied] / step.counts[occupied, None]

        empty = np.flatnonzero(~occupied)
        if len(empty) > 0:
            distances = step.distances.copy()
            for j in empty:
                # Each re-seed consumes its point so two empty clusters never share one
                idx = int(np.argmax(distances))
                new_centroids[j] = X[idx]
                distances[idx] = -1.0
                logger.warning(f"Re-seeded empty cluster {j} at observation {idx}")

        return new_centroids
