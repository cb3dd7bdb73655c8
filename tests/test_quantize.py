"""Tests for 16-bit to 8-bit color quantization."""
import numpy as np

from apexcolor.quantize import QUANTIZE_DIVISOR, quantize_array, quantize_pixel
from apexcolor.types import Color


class TestQuantizePixel:
    """Test single pixel quantization."""

    def test_transparent_is_ignored(self):
        assert quantize_pixel(0xFFFF, 0xFFFF, 0xFFFF, 0) is None

    def test_divides_channels(self):
        assert quantize_pixel(0xFFFF, 0x8000, 0x00FF, 0xFFFF) == Color(255, 128, 0)

    def test_widened_8bit_round_trips(self):
        for value in (0, 1, 127, 128, 254, 255):
            wide = value * 0x101
            assert quantize_pixel(wide, wide, wide, 0xFFFF) == Color(value, value, value)

    def test_semi_transparent_is_kept(self):
        assert quantize_pixel(0x1000, 0x2000, 0x3000, 1) == Color(0x10, 0x20, 0x30)


class TestQuantizeArray:
    """Test vectorized quantization."""

    def test_matches_scalar(self):
        rng = np.random.default_rng(5)
        rgba16 = rng.integers(0, 0x10000, (6, 7, 4), dtype=np.uint16)
        rgba16[0, 0, 3] = 0

        colors, opaque = quantize_array(rgba16)

        assert colors.shape == (6, 7, 3)
        assert colors.dtype == np.uint8
        assert not opaque[0, 0]
        for y in range(6):
            for x in range(7):
                expected = quantize_pixel(*(int(v) for v in rgba16[y, x]))
                if expected is None:
                    assert not opaque[y, x]
                else:
                    assert opaque[y, x]
                    assert Color(*(int(v) for v in colors[y, x])) == expected

    def test_divisor(self):
        assert QUANTIZE_DIVISOR == 256
