"""Reduce 16-bit pixel readings to 8-bit working colors."""
from typing import Optional, Tuple

import numpy as np

from apexcolor.types import Color

# 16-bit channel -> 8-bit channel
QUANTIZE_DIVISOR = 256


def quantize_pixel(r: int, g: int, b: int, a: int) -> Optional[Color]:
    """
    Quantize a single 16-bit RGBA reading.

    Args:
        r, g, b, a: Channel values in 0..0xFFFF

    Returns:
        8-bit Color, or None if the pixel is fully transparent and should
        be ignored
    """
    if a == 0:
        return None
    return Color(r // QUANTIZE_DIVISOR, g // QUANTIZE_DIVISOR, b // QUANTIZE_DIVISOR)


def quantize_array(rgba16: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Quantize a whole (H, W, 4) uint16 buffer.

    Returns:
        Tuple of (colors, opaque):
        - colors: (H, W, 3) uint8 array of quantized RGB
        - opaque: (H, W) bool array, False where alpha is zero
    """
    colors = (rgba16[..., :3] // QUANTIZE_DIVISOR).astype(np.uint8)
    opaque = rgba16[..., 3] != 0
    return colors, opaque
