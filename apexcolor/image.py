"""Raster image ingestion into 16-bit RGBA buffers."""
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageOps

from apexcolor.types import ImageLoadError, RGBA16


class RasterImage:
    """
    Pixel-addressable image with 16-bit, alpha-premultiplied RGBA channels.

    The buffer is owned by the instance. Masking produces a new instance
    sharing nothing with the source, so callers keep the unmasked input.

    Args:
        pixels: (H, W, 4) uint16 array
        ignored: Optional (H, W) bool array of pixels excluded from analysis
    """

    def __init__(self, pixels: np.ndarray, ignored: Optional[np.ndarray] = None):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected (H, W, 4) array, got shape {pixels.shape}")
        self.pixels = pixels.astype(np.uint16, copy=False)
        if ignored is None:
            ignored = np.zeros(pixels.shape[:2], dtype=bool)
        elif ignored.shape != pixels.shape[:2]:
            raise ValueError(
                f"Ignored map shape {ignored.shape} does not match image {pixels.shape[:2]}"
            )
        self.ignored = ignored

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.pixels.shape[:2]

    def at(self, x: int, y: int) -> RGBA16:
        """RGBA reading at column x, row y. Ignored pixels read as transparent."""
        if self.ignored[y, x]:
            return (0, 0, 0, 0)
        r, g, b, a = self.pixels[y, x]
        return (int(r), int(g), int(b), int(a))

    def usable(self) -> np.ndarray:
        """Boolean map of pixels that are neither transparent nor ignored."""
        return (self.pixels[..., 3] != 0) & ~self.ignored

    def copy(self) -> "RasterImage":
        return RasterImage(self.pixels.copy(), self.ignored.copy())

    def __repr__(self) -> str:
        return (
            f"RasterImage(width={self.width}, height={self.height}, "
            f"ignored={int(self.ignored.sum())})"
        )


def from_array(image: np.ndarray) -> RasterImage:
    """
    Build a RasterImage from an 8-bit numpy image.

    Accepts (H, W) grayscale, (H, W, 3) RGB or (H, W, 4) straight-alpha RGBA
    uint8 arrays. Channels are widened to 16 bits (v * 0x101) and RGB is
    premultiplied by alpha.

    Args:
        image: uint8 image array

    Returns:
        RasterImage
    """
    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise ValueError(f"Expected 2D or 3D array, got {image.ndim}D")

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint32)
        rgb = image.astype(np.uint32)
    elif image.shape[2] == 4:
        alpha = image[..., 3:4].astype(np.uint32)
        rgb = image[..., :3].astype(np.uint32)
    else:
        raise ValueError(f"Expected 3 or 4 channels, got {image.shape[2]}")

    rgb16 = (rgb * 0x101) * alpha // 0xFF
    alpha16 = alpha * 0x101
    pixels = np.concatenate([rgb16, alpha16], axis=-1).astype(np.uint16)

    return RasterImage(pixels)


def from_pil(img: Image.Image) -> RasterImage:
    """Convert a PIL image of any mode to a RasterImage."""
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return from_array(np.array(img))


def to_pil(image: RasterImage) -> Image.Image:
    """Convert back to an 8-bit straight-alpha PIL image (ignored pixels transparent)."""
    pixels = image.pixels.astype(np.uint32)
    alpha = pixels[..., 3:4]
    safe_alpha = np.where(alpha == 0, 1, alpha)
    rgb = np.where(alpha == 0, 0, pixels[..., :3] * 0xFFFF // safe_alpha)
    rgba8 = np.concatenate([rgb, alpha], axis=-1) // 0x101
    rgba8[image.ignored] = 0
    return Image.fromarray(rgba8.astype(np.uint8))


def load_image(path: Union[str, Path]) -> Image.Image:
    """
    Load an image file with EXIF orientation applied.

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            img.load()
            return img
    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e


def to_pil_input(image) -> Image.Image:
    """Normalize a path, numpy array, RasterImage or PIL image to a PIL image."""
    if isinstance(image, Image.Image):
        return image
    if isinstance(image, RasterImage):
        return to_pil(image)
    if isinstance(image, np.ndarray):
        if image.dtype != np.uint8:
            raise ValueError(f"Expected uint8 array, got {image.dtype}")
        return to_pil(from_array(image))
    if isinstance(image, (str, Path)):
        return load_image(image)
    raise TypeError(f"Unsupported image input type: {type(image).__name__}")

