"""Core types for prominent color extraction."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import warnings

import numpy as np


# Type aliases
RGBA16 = Tuple[int, int, int, int]
ImageArray = np.ndarray


class SeedingStrategy(Enum):
    """How initial centroids are picked."""
    KMEANS_PLUS_PLUS = "kmeans++"
    RANDOM = "random"


class CentroidAggregation(Enum):
    """How a cluster's representative color is computed."""
    MEDIAN = "median"
    MEAN = "mean"


class Cropping(Enum):
    """Preprocessing crop applied before masking."""
    CENTER = "center"  # 25% off each side
    NONE = "none"


class DistanceMetricKind(Enum):
    """Color distance used for clustering."""
    RGB = "rgb"
    LAB = "lab"


@dataclass(frozen=True, order=True)
class Color:
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name} must be in 0..255, got {value}")

    @property
    def hex(self) -> str:
        """Color as a 6 character uppercase hex string (no leading '#')."""
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        value = value.lstrip('#')
        if len(value) != 6:
            raise ValueError(f"Expected RRGGBB hex color, got {value!r}")
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class ColorSample:
    """A color and how many times it occurs.

    Used both for sampled pixel colors and for cluster centroids, where
    ``count`` is the summed occurrence count of the cluster members.
    """
    color: Color
    count: int = 0

    @property
    def hex(self) -> str:
        return self.color.hex

    def __str__(self) -> str:
        return f"#{self.hex} {self.count}"


# Centroids share the sample layout; count is the cluster weight
Centroid = ColorSample


@dataclass(frozen=True)
class BackgroundMaskSpec:
    """Rule describing a uniform background color to mask out.

    With all of ``r``, ``g``, ``b`` set the rule looks for "white": every
    channel must be >= ``threshold``. With none set it looks for "black":
    every channel must be <= ``threshold``. Any other combination compares
    channels: each unflagged channel divided by each flagged channel must
    not exceed ``ratio``.

    ``threshold`` is in 16-bit channel units (0..0xFFFF).
    """
    r: bool
    g: bool
    b: bool
    threshold: int = 0
    ratio: float = 0.0

    @property
    def uniform(self) -> bool:
        """True when all flags are equal (threshold rule)."""
        return self.r == self.g == self.b

    @property
    def flags(self) -> Tuple[bool, bool, bool]:
        return (self.r, self.g, self.b)


MASK_WHITE = BackgroundMaskSpec(r=True, g=True, b=True, threshold=0xC000)
MASK_BLACK = BackgroundMaskSpec(r=False, g=False, b=False, threshold=0x5000)
MASK_GREEN = BackgroundMaskSpec(r=False, g=True, b=False, ratio=0.9)


def default_masks() -> List[BackgroundMaskSpec]:
    """Masks used by the default configuration, in priority order."""
    return [MASK_WHITE, MASK_BLACK, MASK_GREEN]


DEFAULT_K = 3
DEFAULT_RESIZE_WIDTH = 80
DEFAULT_MAX_ROUNDS = 5000


@dataclass
class ExtractionConfig:
    """Configuration for the prominent color pipeline."""

    # Clustering
    k: int = DEFAULT_K
    seeding: SeedingStrategy = SeedingStrategy.KMEANS_PLUS_PLUS
    aggregation: CentroidAggregation = CentroidAggregation.MEDIAN
    distance: DistanceMetricKind = DistanceMetricKind.RGB
    max_rounds: int = DEFAULT_MAX_ROUNDS  # Safety net against non-terminating runs

    # Preprocessing
    cropping: Cropping = Cropping.CENTER
    resize_width: int = DEFAULT_RESIZE_WIDTH
    background_masks: List[BackgroundMaskSpec] = field(default_factory=default_masks)

    # Debug output
    debug_snapshot: bool = False

    # Random seed for the per-run generator (None = fresh entropy)
    seed: Optional[int] = None

    def __post_init__(self):
        """Coerce enum values given as strings and validate ranges."""
        self.seeding = SeedingStrategy(self.seeding)
        self.aggregation = CentroidAggregation(self.aggregation)
        self.distance = DistanceMetricKind(self.distance)
        self.cropping = Cropping(self.cropping)

        if self.k < 1:
            raise ValueError(f"k must be >= 1, got {self.k}")
        if self.resize_width < 1:
            raise ValueError(f"resize_width must be >= 1, got {self.resize_width}")
        if self.max_rounds < 1:
            raise ValueError(f"max_rounds must be >= 1, got {self.max_rounds}")
        if self.resize_width > 400:
            warnings.warn(
                f"resize_width={self.resize_width} samples a lot of pixels; "
                "clustering will be slow."
            )

    def describe(self) -> str:
        """Short human readable label, e.g. 'K=3, Kmeans++, Median, RGB, Cropping center'."""
        parts = [
            f"K={self.k}",
            "Random seed" if self.seeding is SeedingStrategy.RANDOM else "Kmeans++",
            "Mean" if self.aggregation is CentroidAggregation.MEAN else "Median",
            "LAB" if self.distance is DistanceMetricKind.LAB else "RGB",
            "No cropping" if self.cropping is Cropping.NONE else "Cropping center",
        ]
        return ", ".join(parts)


@dataclass
class SampleSet:
    """Distinct colors of an image with their occurrence counts."""
    samples: List[ColorSample]
    total: int  # Number of non-ignored pixels

    def __len__(self) -> int:
        return len(self.samples)


@dataclass
class ClusterResult:
    """Outcome of clustering, centroids ordered most dominant first."""
    centroids: List[Centroid]
    rounds: int = 0
    converged: bool = True
    shortcut: Optional[str] = None  # Set when clustering was bypassed


class ProminentColorError(Exception):
    """Base exception for prominent color extraction."""
    pass


class EmptyInputError(ProminentColorError):
    """No usable pixels remain after masking."""
    pass


class InvalidKError(ProminentColorError, ValueError):
    """Requested cluster count cannot be seeded from the samples."""
    pass


class PerceptualConversionError(ProminentColorError):
    """A color could not be converted to the perceptual color space."""
    pass


class ImageLoadError(ProminentColorError):
    """Input image could not be decoded."""
    pass
