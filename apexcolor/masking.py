"""Background detection and flood-fill masking for clipart-style images.

Images with a solid backdrop (white, black, green screen) would otherwise
have the backdrop reported as their most prominent color. The masker looks
at the four corners: if all of them match one of the configured
BackgroundMaskSpec rules, every pixel connected to a corner through matching
pixels is marked ignored. Pixels of the same color inside the foreground are
kept as long as a non-matching boundary separates them from the corners.
"""
from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from apexcolor.image import RasterImage
from apexcolor.quantize import quantize_array
from apexcolor.types import BackgroundMaskSpec, RGBA16

logger = logging.getLogger(__name__)

# Marker color for ignored pixels in the debug snapshot
DEBUG_MARKER_COLOR = (255, 0, 255)


@dataclass
class MaskResult:
    """Outcome of apply_mask."""
    image: RasterImage
    spec: Optional[BackgroundMaskSpec] = None  # None when no rule matched
    masked_pixels: int = 0

    @property
    def applied(self) -> bool:
        return self.spec is not None


def pixel_matches(pixel: RGBA16, spec: BackgroundMaskSpec) -> bool:
    """
    Check whether a single 16-bit RGBA pixel matches a background rule.

    Transparent pixels always match. When a mixed-flag rule compares
    against a zero base channel, a zero "other" channel matches and a
    positive one does not.
    """
    r, g, b, a = pixel
    if a == 0:
        return True

    channels = (r, g, b)

    if not any(spec.flags):
        # Looking for black
        return all(value <= spec.threshold for value in channels)

    if all(spec.flags):
        # Looking for white
        return all(value >= spec.threshold for value in channels)

    bases = [value for value, flag in zip(channels, spec.flags) if flag]
    others = [value for value, flag in zip(channels, spec.flags) if not flag]

    for other in others:
        for base in bases:
            if base == 0:
                if other > 0:
                    return False
                continue
            if other / base > spec.ratio:
                return False
    return True


def match_map(image: RasterImage, spec: BackgroundMaskSpec) -> np.ndarray:
    """
    Vectorized pixel_matches over the whole image.

    Returns:
        (H, W) bool array, True where the pixel matches the rule
    """
    pixels = image.pixels.astype(np.float64)
    channels = pixels[..., :3]
    transparent = image.pixels[..., 3] == 0

    if not any(spec.flags):
        matches = np.all(channels <= spec.threshold, axis=-1)
    elif all(spec.flags):
        matches = np.all(channels >= spec.threshold, axis=-1)
    else:
        flags = np.array(spec.flags)
        bases = channels[..., flags]
        others = channels[..., ~flags]
        matches = np.ones(image.shape, dtype=bool)
        for i in range(others.shape[-1]):
            other = others[..., i]
            for j in range(bases.shape[-1]):
                base = bases[..., j]
                with np.errstate(divide='ignore', invalid='ignore'):
                    ratio_ok = (other / base) <= spec.ratio
                zero_base_ok = other == 0
                matches &= np.where(base == 0, zero_base_ok, ratio_ok)

    return matches | transparent


def corner_points(image: RasterImage) -> List[Tuple[int, int]]:
    """The four corners as (x, y), top-left, bottom-left, top-right, bottom-right."""
    max_x = image.width - 1
    max_y = image.height - 1
    return [(0, 0), (0, max_y), (max_x, 0), (max_x, max_y)]


def select_mask(
    image: RasterImage,
    masks: Sequence[BackgroundMaskSpec]
) -> Optional[BackgroundMaskSpec]:
    """
    Pick the first rule that matches all four corners.

    Returns:
        Matching rule, or None if the image has no uniform backdrop
    """
    if image.width == 0 or image.height == 0:
        return None

    corners = corner_points(image)
    for spec in masks:
        if all(pixel_matches(image.at(x, y), spec) for x, y in corners):
            return spec
    return None


def flood_fill(
    matches: np.ndarray,
    blocked: np.ndarray,
    seeds: Sequence[Tuple[int, int]]
) -> np.ndarray:
    """
    Mark every pixel 4-connected to a seed through matching pixels.

    Uses an explicit stack so large images cannot exhaust the call stack.

    Args:
        matches: (H, W) bool array of pixels satisfying the rule
        blocked: (H, W) bool array of pixels already ignored; they are never
            marked and do not propagate the fill
        seeds: (x, y) start points

    Returns:
        (H, W) bool array of newly marked pixels
    """
    height, width = matches.shape
    marked = np.zeros((height, width), dtype=bool)
    done = blocked.copy()

    stack = list(seeds)
    while stack:
        x, y = stack.pop()

        if done[y, x] or not matches[y, x]:
            continue

        marked[y, x] = True
        done[y, x] = True

        if x > 0 and not done[y, x - 1]:
            stack.append((x - 1, y))
        if x < width - 1 and not done[y, x + 1]:
            stack.append((x + 1, y))
        if y > 0 and not done[y - 1, x]:
            stack.append((x, y - 1))
        if y < height - 1 and not done[y + 1, x]:
            stack.append((x, y + 1))

    return marked


def apply_mask(
    image: RasterImage,
    masks: Sequence[BackgroundMaskSpec]
) -> MaskResult:
    """
    Mask out a uniform background connected to the image corners.

    The input image is not modified; the result carries a new RasterImage
    whose ``ignored`` map includes the flood-filled background.

    Args:
        image: Source image
        masks: Background rules in priority order

    Returns:
        MaskResult with the masked image and the rule that was applied
    """
    result_image = image.copy()

    spec = select_mask(image, masks)
    if spec is None:
        logger.debug("No background mask matched the image corners")
        return MaskResult(image=result_image)

    matches = match_map(image, spec)
    blocked = image.ignored | (image.pixels[..., 3] == 0)
    marked = flood_fill(matches, blocked, corner_points(image))

    result_image.ignored |= marked
    masked_pixels = int(marked.sum())

    logger.info(
        f"Background mask {spec} matched; ignoring {masked_pixels} of "
        f"{image.width * image.height} pixels"
    )

    return MaskResult(image=result_image, spec=spec, masked_pixels=masked_pixels)


def render_debug_snapshot(image: RasterImage) -> np.ndarray:
    """
    Render the image with ignored pixels painted in the marker color.

    Returns:
        (H, W, 3) uint8 RGB array
    """
    snapshot, _ = quantize_array(image.pixels)
    snapshot[image.ignored] = DEBUG_MARKER_COLOR
    return snapshot
