"""K-means clustering of sampled colors (Lloyd's algorithm)."""
import logging
from typing import List, Optional, Sequence

import numpy as np

from apexcolor.centroids import get_aggregator, sort_by_dominance
from apexcolor.distance import DistanceMetric, RGBDistance
from apexcolor.seeding import seed_centroids
from apexcolor.types import (
    Centroid,
    CentroidAggregation,
    ClusterResult,
    Color,
    ColorSample,
    DEFAULT_MAX_ROUNDS,
    EmptyInputError,
    SeedingStrategy,
)

logger = logging.getLogger(__name__)


class KMeansEngine:
    """
    Cluster distinct colors into k dominant centroids.

    Args:
        metric: Distance strategy (default squared RGB)
        aggregation: How centroids are recomputed from their bucket
        seeding: How initial centroids are chosen
        max_rounds: Iteration cap; reaching it is logged and the last
            centroids are returned
    """

    def __init__(
        self,
        metric: Optional[DistanceMetric] = None,
        aggregation: CentroidAggregation = CentroidAggregation.MEDIAN,
        seeding: SeedingStrategy = SeedingStrategy.KMEANS_PLUS_PLUS,
        max_rounds: int = DEFAULT_MAX_ROUNDS
    ):
        self.metric = metric or RGBDistance()
        self.aggregation = CentroidAggregation(aggregation)
        self.seeding = SeedingStrategy(seeding)
        self.max_rounds = max_rounds
        self._aggregate = get_aggregator(self.aggregation)

    def run(
        self,
        samples: Sequence[ColorSample],
        k: int,
        rng: Optional[np.random.Generator] = None
    ) -> ClusterResult:
        """
        Cluster samples into at most k centroids.

        Args:
            samples: Distinct colors with occurrence counts
            k: Requested number of clusters
            rng: Random generator for seeding; a fresh one is created if None

        Returns:
            ClusterResult with centroids sorted most dominant first

        Raises:
            EmptyInputError: If there are no samples
            InvalidKError: If k < 1
        """
        if len(samples) == 0:
            raise EmptyInputError(
                "No non-transparent pixels found (fully transparent image, "
                "or the background mask removed every pixel)"
            )

        if len(samples) == 1:
            return ClusterResult(centroids=list(samples), shortcut="single_color")

        if 1 <= k and len(samples) <= k:
            return ClusterResult(centroids=sort_by_dominance(samples), shortcut="few_colors")

        if rng is None:
            rng = np.random.default_rng()

        centroids = seed_centroids(k, samples, self.metric, self.seeding, rng)
        return self._refine(samples, centroids)

    def _assign(self, colors: Sequence[Color], centroids: Sequence[Centroid]):
        """Nearest centroid index and distance for every sample (ties to the lowest index)."""
        table = self.metric.pairwise(colors, [c.color for c in centroids])
        labels = np.argmin(table, axis=1).astype(np.int64)
        distances = table[np.arange(len(colors)), labels]
        return labels, distances

    def _relocate_empty(
        self,
        labels: np.ndarray,
        distances: np.ndarray,
        k: int
    ) -> None:
        """
        Give every empty bucket one sample so all centroids keep weight.

        The sample moved is the one farthest from its centroid among buckets
        that still hold two or more samples.
        """
        for bucket in range(k):
            if np.any(labels == bucket):
                continue

            sizes = np.bincount(labels, minlength=k)
            candidates = np.nonzero(sizes[labels] > 1)[0]
            if len(candidates) == 0:
                break

            far = int(candidates[np.argmax(distances[candidates])])
            logger.debug(f"Bucket {bucket} empty, moving sample {far} from bucket {labels[far]}")
            labels[far] = bucket
            distances[far] = 0.0

    def _refine(
        self,
        samples: Sequence[ColorSample],
        centroids: List[Centroid]
    ) -> ClusterResult:
        k = len(centroids)
        colors = [sample.color for sample in samples]
        previous = np.full(len(samples), -1, dtype=np.int64)

        rounds = 0
        changes = 1
        while changes > 0 and rounds < self.max_rounds:
            labels, distances = self._assign(colors, centroids)
            # Relocations count as changes against the previous round
            self._relocate_empty(labels, distances, k)
            changes = int(np.count_nonzero(labels != previous))
            previous = labels

            centroids = [
                self._aggregate([samples[i] for i in np.nonzero(labels == bucket)[0]])
                for bucket in range(k)
            ]
            rounds += 1

        converged = changes == 0
        if not converged:
            logger.warning(
                f"Terminated k-means after reaching max number of iterations ({self.max_rounds})"
            )
        else:
            logger.debug(f"K-means converged after {rounds} rounds")

        return ClusterResult(
            centroids=sort_by_dominance(centroids),
            rounds=rounds,
            converged=converged
        )


def cluster_colors(
    samples: Sequence[ColorSample],
    k: int,
    metric: Optional[DistanceMetric] = None,
    aggregation: CentroidAggregation = CentroidAggregation.MEDIAN,
    seeding: SeedingStrategy = SeedingStrategy.KMEANS_PLUS_PLUS,
    rng: Optional[np.random.Generator] = None,
    max_rounds: int = DEFAULT_MAX_ROUNDS
) -> ClusterResult:
    """Convenience function for one-off clustering."""
    engine = KMeansEngine(metric, aggregation, seeding, max_rounds)
    return engine.run(samples, k, rng)
