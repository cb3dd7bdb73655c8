"""Centroid aggregation and dominance ordering."""
from typing import Callable, Iterable, List, Sequence

import numpy as np

from apexcolor.types import Centroid, CentroidAggregation, Color, ColorSample


def mean_centroid(members: Sequence[ColorSample]) -> Centroid:
    """
    Mean color of a cluster.

    Channels are averaged over distinct members (not weighted by count)
    and floored. The centroid weight is the summed member count.
    """
    weight = sum(sample.count for sample in members)
    if not members:
        return Centroid(color=Color(0, 0, 0), count=0)

    values = np.array([sample.color.as_tuple() for sample in members], dtype=np.float64)
    r, g, b = (int(v) for v in np.floor(values.sum(axis=0) / len(members)))
    return Centroid(color=Color(r, g, b), count=weight)


def median_centroid(members: Sequence[ColorSample]) -> Centroid:
    """
    Per-channel median of a cluster.

    Each channel independently takes element n // 2 of its sorted values,
    so the result may not be a member color.
    """
    weight = sum(sample.count for sample in members)
    if not members:
        return Centroid(color=Color(0, 0, 0), count=0)

    values = np.sort(np.array([sample.color.as_tuple() for sample in members]), axis=0)
    r, g, b = (int(v) for v in values[len(members) // 2])
    return Centroid(color=Color(r, g, b), count=weight)


def get_aggregator(mode: CentroidAggregation) -> Callable[[Sequence[ColorSample]], Centroid]:
    mode = CentroidAggregation(mode)
    if mode is CentroidAggregation.MEAN:
        return mean_centroid
    return median_centroid


def sort_by_dominance(items: Iterable[ColorSample]) -> List[ColorSample]:
    """Most frequent first; equal counts ordered by ascending hex string."""
    return sorted(items, key=lambda item: (-item.count, item.hex))
