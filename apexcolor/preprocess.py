"""Cropping and resizing before color analysis."""
import logging

from PIL import Image

from apexcolor.types import Cropping

logger = logging.getLogger(__name__)


def center_crop(img: Image.Image) -> Image.Image:
    """
    Keep the central half of the image in each dimension (25% off every side).

    Raises:
        ValueError: If the image is too small to crop
    """
    width, height = img.size
    crop_w = width // 2
    crop_h = height // 2
    if crop_w < 1 or crop_h < 1:
        raise ValueError(f"Image {width}x{height} is too small to center crop")

    left = (width - crop_w) // 2
    top = (height - crop_h) // 2
    return img.crop((left, top, left + crop_w, top + crop_h))


def resize_to_width(img: Image.Image, target_width: int) -> Image.Image:
    """
    Shrink so the width is target_width, keeping the aspect ratio.

    Images whose sides both fit within target_width are returned as is.
    """
    width, height = img.size
    if width <= target_width and height <= target_width:
        return img

    target_height = max(1, round(height * target_width / width))
    return img.resize((target_width, target_height), Image.Resampling.LANCZOS)


def prepare_image(img: Image.Image, cropping: Cropping, resize_width: int) -> Image.Image:
    """
    Crop and resize an image for analysis.

    Failures here are not fatal: the step is skipped with a warning and the
    unmodified image is used.
    """
    if img.mode != 'RGBA':
        img = img.convert('RGBA')

    if Cropping(cropping) is Cropping.CENTER:
        try:
            img = center_crop(img)
        except ValueError as e:
            logger.warning(f"Failed cropping, using the full image: {e}")

    try:
        img = resize_to_width(img, resize_width)
    except (ValueError, OSError) as e:
        logger.warning(f"Failed resizing, using the image as is: {e}")

    return img
