"""Initial centroid selection for K-means."""
import logging
from typing import List, Sequence

import numpy as np

from apexcolor.distance import DistanceMetric
from apexcolor.types import Centroid, ColorSample, InvalidKError, SeedingStrategy

logger = logging.getLogger(__name__)


def seed_random(
    k: int,
    samples: Sequence[ColorSample],
    rng: np.random.Generator
) -> List[Centroid]:
    """Pick k distinct samples uniformly at random (rejection on repeats)."""
    taken = set()
    centroids = []

    while len(centroids) < k:
        idx = int(rng.integers(len(samples)))
        if idx in taken:
            continue
        taken.add(idx)
        centroids.append(samples[idx])

    return centroids


def seed_kmeans_plus_plus(
    k: int,
    samples: Sequence[ColorSample],
    metric: DistanceMetric,
    rng: np.random.Generator
) -> List[Centroid]:
    """
    K-means++ seeding.

    The first centroid is uniform. Every following one is drawn with
    probability proportional to the squared distance from each unchosen
    sample to its nearest chosen centroid. If all remaining weight is zero
    the last unchosen sample is taken.
    """
    n = len(samples)
    taken = np.zeros(n, dtype=bool)

    first = int(rng.integers(n))
    centroids = [samples[first]]
    taken[first] = True

    colors = [sample.color for sample in samples]

    # Squared distance from each sample to its nearest chosen centroid
    nearest_sq = metric.pairwise_squared(colors, [samples[first].color])[:, 0]

    for _ in range(1, k):
        weights = np.where(taken, 0.0, nearest_sq)
        total = float(weights.sum())

        chosen = -1
        if total > 0:
            target = rng.random() * total
            cumulative = np.cumsum(weights)
            candidates = np.nonzero((cumulative > target) & (weights > 0))[0]
            if len(candidates) > 0:
                chosen = int(candidates[0])

        if chosen < 0:
            # Degenerate weights: fall back to the last unclaimed sample
            chosen = int(np.nonzero(~taken)[0][-1])
            logger.debug(f"K-means++ zero weight, falling back to sample {chosen}")

        centroids.append(samples[chosen])
        taken[chosen] = True

        d = metric.pairwise_squared(colors, [samples[chosen].color])[:, 0]
        nearest_sq = np.minimum(nearest_sq, d)

    return centroids


def seed_centroids(
    k: int,
    samples: Sequence[ColorSample],
    metric: DistanceMetric,
    strategy: SeedingStrategy,
    rng: np.random.Generator
) -> List[Centroid]:
    """
    Choose k initial centroids.

    Raises:
        InvalidKError: If k < 1 or k exceeds the number of distinct samples
    """
    if k < 1:
        raise InvalidKError(f"k must be >= 1, got {k}")
    if k > len(samples):
        raise InvalidKError(f"k larger than number of distinct colors: {k} vs {len(samples)}")

    strategy = SeedingStrategy(strategy)
    if strategy is SeedingStrategy.RANDOM:
        return seed_random(k, samples, rng)
    return seed_kmeans_plus_plus(k, samples, metric, rng)
