"""Main pipeline orchestrator for prominent color extraction."""
from dataclasses import replace
import logging
from typing import List, Optional, Tuple

import numpy as np

from apexcolor.clustering import KMeansEngine
from apexcolor.distance import make_metric
from apexcolor.image import from_pil, to_pil_input
from apexcolor.masking import apply_mask, render_debug_snapshot
from apexcolor.preprocess import prepare_image
from apexcolor.sampling import sample_colors
from apexcolor.types import ClusterResult, ColorSample, ExtractionConfig

logger = logging.getLogger(__name__)


class ProminentColorPipeline:
    """Crop, resize, mask the background, sample and cluster an image."""

    def __init__(self, config: Optional[ExtractionConfig] = None):
        """Initialize pipeline with configuration.

        Args:
            config: Extraction configuration. Uses defaults if None.
        """
        self.config = config or ExtractionConfig()
        self.debug_stages: List[Tuple[str, np.ndarray]] = []
        self.last_result: Optional[ClusterResult] = None

    def process(
        self,
        image,
        rng: Optional[np.random.Generator] = None
    ) -> List[ColorSample]:
        """Extract the k most prominent colors of an image.

        Args:
            image: File path, PIL image, uint8 numpy array or RasterImage
            rng: Random generator for seeding. When None a new generator is
                created from ``config.seed``.

        Returns:
            Centroids sorted most dominant first

        Raises:
            FileNotFoundError: If an input path doesn't exist
            ImageLoadError: If the input cannot be decoded
            EmptyInputError: If no usable pixels remain after masking
        """
        config = self.config
        self.debug_stages = []

        img = to_pil_input(image)
        img = prepare_image(img, config.cropping, config.resize_width)
        raster = from_pil(img)
        logger.debug(f"Prepared image {raster.width}x{raster.height}")

        masked = apply_mask(raster, config.background_masks)

        if config.debug_snapshot:
            self.debug_stages.append(("masked", render_debug_snapshot(masked.image)))

        sample_set = sample_colors(masked.image)

        if rng is None:
            rng = np.random.default_rng(config.seed)

        engine = KMeansEngine(
            metric=make_metric(config.distance),
            aggregation=config.aggregation,
            seeding=config.seeding,
            max_rounds=config.max_rounds,
        )
        result = engine.run(sample_set.samples, config.k, rng)
        self.last_result = result

        logger.info(
            f"{config.describe()}: {len(sample_set)} distinct colors from "
            f"{sample_set.total} pixels -> {len(result.centroids)} centroids"
        )

        return result.centroids


def kmeans_with_all(
    k: int,
    image,
    config: Optional[ExtractionConfig] = None,
    rng: Optional[np.random.Generator] = None
) -> List[ColorSample]:
    """Extract k prominent colors using an explicit configuration.

    The ``k`` argument overrides ``config.k``.
    """
    config = config or ExtractionConfig()
    if config.k != k:
        config = replace(config, k=k)
    return ProminentColorPipeline(config).process(image, rng)


def kmeans_with_args(image, rng: Optional[np.random.Generator] = None, **overrides) -> List[ColorSample]:
    """Extract prominent colors with a few settings changed from the defaults.

    Example:
        >>> kmeans_with_args("photo.jpg", seeding="random", aggregation="mean")
    """
    return ProminentColorPipeline(ExtractionConfig(**overrides)).process(image, rng)


def kmeans(image, rng: Optional[np.random.Generator] = None) -> List[ColorSample]:
    """Extract the 3 most prominent colors with default settings.

    Defaults: K-means++, median centroids, RGB distance, center crop,
    resize to 80px and white/black/green background masks.

    Example:
        >>> colors = kmeans("photo.jpg")
        >>> [c.hex for c in colors]
    """
    return ProminentColorPipeline().process(image, rng)
