"""apexcolor: find the most prominent colors of an image.

Background masking with corner flood fill, followed by K-means clustering
(K-means++ seeding, RGB or LAB distance, median or mean centroids).
"""
from apexcolor.types import (
    BackgroundMaskSpec,
    CentroidAggregation,
    ClusterResult,
    Color,
    ColorSample,
    Cropping,
    DistanceMetricKind,
    EmptyInputError,
    ExtractionConfig,
    InvalidKError,
    MASK_BLACK,
    MASK_GREEN,
    MASK_WHITE,
    ProminentColorError,
    SeedingStrategy,
    default_masks,
)
from apexcolor.pipeline import (
    ProminentColorPipeline,
    kmeans,
    kmeans_with_all,
    kmeans_with_args,
)

__version__ = "0.1.0"

__all__ = [
    "BackgroundMaskSpec",
    "CentroidAggregation",
    "ClusterResult",
    "Color",
    "ColorSample",
    "Cropping",
    "DistanceMetricKind",
    "EmptyInputError",
    "ExtractionConfig",
    "InvalidKError",
    "MASK_BLACK",
    "MASK_GREEN",
    "MASK_WHITE",
    "ProminentColorError",
    "ProminentColorPipeline",
    "SeedingStrategy",
    "default_masks",
    "kmeans",
    "kmeans_with_all",
    "kmeans_with_args",
]
