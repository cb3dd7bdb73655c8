"""Collect distinct pixel colors and their occurrence counts."""
import logging

import numpy as np

from apexcolor.image import RasterImage
from apexcolor.quantize import quantize_array
from apexcolor.types import Color, ColorSample, SampleSet

logger = logging.getLogger(__name__)


def sample_colors(image: RasterImage) -> SampleSet:
    """
    Count every distinct quantized color of the usable pixels.

    Transparent and ignored pixels are skipped. Samples come back ordered
    by color value so repeated runs see the same sample order.

    Args:
        image: Possibly masked image

    Returns:
        SampleSet with one ColorSample per distinct color and the total
        number of counted pixels
    """
    colors, opaque = quantize_array(image.pixels)
    usable = opaque & ~image.ignored

    pixels = colors[usable].astype(np.uint32)
    total = int(pixels.shape[0])

    if total == 0:
        logger.debug("No usable pixels to sample")
        return SampleSet(samples=[], total=0)

    # Pack RGB into one integer per pixel so counting is a 1D unique
    packed = (pixels[:, 0] << 16) | (pixels[:, 1] << 8) | pixels[:, 2]
    values, counts = np.unique(packed, return_counts=True)

    samples = [
        ColorSample(
            color=Color(int(value >> 16) & 0xFF, int(value >> 8) & 0xFF, int(value) & 0xFF),
            count=int(count)
        )
        for value, count in zip(values, counts)
    ]

    logger.debug(f"Sampled {total} pixels into {len(samples)} distinct colors")

    return SampleSet(samples=samples, total=total)
