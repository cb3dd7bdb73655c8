"""Color distance metrics used for clustering."""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from skimage.color import deltaE_cie76, rgb2lab

from apexcolor.types import (
    Color,
    DistanceMetricKind,
    PerceptualConversionError,
)

logger = logging.getLogger(__name__)


def color_array(colors: Sequence[Color]) -> np.ndarray:
    """(N, 3) int64 array of the colors' channels."""
    return np.array([color.as_tuple() for color in colors], dtype=np.int64).reshape(-1, 3)


class DistanceMetric:
    """Dissimilarity between two colors. Only relative ordering matters."""

    name = "base"

    def __call__(self, a: Color, b: Color) -> float:
        raise NotImplementedError

    def squared(self, a: Color, b: Color) -> float:
        """Squared distance, used to weight K-means++ seeding."""
        d = self(a, b)
        return d * d

    def pairwise(self, colors: Sequence[Color], centroids: Sequence[Color]) -> np.ndarray:
        """
        Distance from every color to every centroid.

        Returns:
            (len(colors), len(centroids)) float64 array
        """
        table = [[self(a, b) for b in centroids] for a in colors]
        return np.array(table, dtype=np.float64).reshape(len(colors), len(centroids))

    def pairwise_squared(self, colors: Sequence[Color], centroids: Sequence[Color]) -> np.ndarray:
        """Batch form of squared()."""
        d = self.pairwise(colors, centroids)
        return d * d


class RGBDistance(DistanceMetric):
    """Squared Euclidean distance in RGB. The square root is skipped."""

    name = "rgb"

    def __call__(self, a: Color, b: Color) -> float:
        dr = a.r - b.r
        dg = a.g - b.g
        db = a.b - b.b
        return float(dr * dr + dg * dg + db * db)

    def squared(self, a: Color, b: Color) -> float:
        # Already squared
        return self(a, b)

    def pairwise(self, colors: Sequence[Color], centroids: Sequence[Color]) -> np.ndarray:
        diff = color_array(colors)[:, None, :] - color_array(centroids)[None, :, :]
        return np.sum(diff * diff, axis=-1).astype(np.float64)

    def pairwise_squared(self, colors: Sequence[Color], centroids: Sequence[Color]) -> np.ndarray:
        return self.pairwise(colors, centroids)


class LabDistance(DistanceMetric):
    """
    CIE76 delta E between colors converted to CIELAB.

    If a color cannot be converted, comparisons involving it fall back to
    the RGB metric and a warning is logged.
    """

    name = "lab"

    def __init__(self):
        self._fallback = RGBDistance()
        self._cache: Dict[Color, np.ndarray] = {}
        self.fallbacks = 0

    def to_lab(self, color: Color) -> np.ndarray:
        """
        Convert an 8-bit color to CIELAB (D65).

        Raises:
            PerceptualConversionError: If the conversion fails or does not
                produce finite values
        """
        cached = self._cache.get(color)
        if cached is not None:
            return cached

        rgb = np.array(color.as_tuple(), dtype=np.float64)
        try:
            lab = rgb2lab((rgb / 255.0).reshape(1, 1, 3)).reshape(3)
        except ValueError as e:
            raise PerceptualConversionError(f"LAB conversion failed for #{color.hex}: {e}") from e

        if not np.all(np.isfinite(lab)):
            raise PerceptualConversionError(f"LAB conversion of #{color.hex} is not finite")

        self._cache[color] = lab
        return lab

    def _try_to_lab(self, color: Color) -> Optional[np.ndarray]:
        try:
            return self.to_lab(color)
        except PerceptualConversionError as e:
            logger.debug(f"{e}")
            return None

    def _convert_missing(self, colors: List[Color]) -> None:
        """Convert uncached colors with a single rgb2lab call."""
        rgb = color_array(colors).astype(np.float64) / 255.0
        try:
            lab = rgb2lab(rgb.reshape(1, -1, 3)).reshape(-1, 3)
        except ValueError as e:
            logger.debug(f"Bulk LAB conversion failed, converting colors one by one: {e}")
            for color in colors:
                self._try_to_lab(color)
            return

        finite = np.all(np.isfinite(lab), axis=1)
        for color, value, ok in zip(colors, lab, finite):
            if ok:
                self._cache[color] = value

    def convert(self, colors: Sequence[Color]) -> Tuple[np.ndarray, np.ndarray]:
        """
        CIELAB values for many colors.

        Returns:
            Tuple of (lab, ok):
            - lab: (N, 3) float64 array, zero on rows that failed
            - ok: (N,) bool array, False where the color could not be converted
        """
        missing = [color for color in dict.fromkeys(colors) if color not in self._cache]
        if missing:
            self._convert_missing(missing)

        lab = np.zeros((len(colors), 3), dtype=np.float64)
        ok = np.zeros(len(colors), dtype=bool)
        for i, color in enumerate(colors):
            value = self._cache.get(color)
            if value is not None:
                lab[i] = value
                ok[i] = True
        return lab, ok

    def __call__(self, a: Color, b: Color) -> float:
        try:
            lab_a = self.to_lab(a)
            lab_b = self.to_lab(b)
        except PerceptualConversionError as e:
            self.fallbacks += 1
            logger.warning(f"LAB distance failed, falling back to RGB: {e}")
            return self._fallback(a, b)

        return float(deltaE_cie76(lab_a, lab_b))

    def pairwise(self, colors: Sequence[Color], centroids: Sequence[Color]) -> np.ndarray:
        lab_colors, ok_colors = self.convert(colors)
        lab_centroids, ok_centroids = self.convert(centroids)

        distances = np.asarray(
            deltaE_cie76(lab_colors[:, None, :], lab_centroids[None, :, :]), dtype=np.float64
        )

        failed = ~(ok_colors[:, None] & ok_centroids[None, :])
        if np.any(failed):
            count = int(failed.sum())
            self.fallbacks += count
            logger.warning(f"LAB distance failed for {count} comparisons, falling back to RGB")
            distances[failed] = self._fallback.pairwise(colors, centroids)[failed]

        return distances


def make_metric(kind: DistanceMetricKind) -> DistanceMetric:
    """Build a fresh metric instance for the given kind."""
    kind = DistanceMetricKind(kind)
    if kind is DistanceMetricKind.LAB:
        return LabDistance()
    return RGBDistance()


def nearest(color: Color, centroids, metric: DistanceMetric) -> Tuple[int, float]:
    """
    Index of and distance to the closest centroid.

    Ties go to the lowest index.
    """
    row = metric.pairwise([color], [c.color for c in centroids])[0]
    idx = int(np.argmin(row))
    return idx, float(row[idx])
