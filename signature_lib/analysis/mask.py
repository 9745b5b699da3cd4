"""Ink mask building and despeckling.

The ink mask is a (height, width) uint8 grid with three cell states:

    BACKGROUND (0)  no ink
    INK (1)         ink the walker has not consumed yet
    CONSUMED (2)    ink the walker has already passed over

build_ink_mask() produces a mask holding only BACKGROUND and INK cells;
despeckle() zeroes small connected components in place. The stroke walker
later flips INK cells to CONSUMED, so one mask belongs to exactly one
tracing run.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy import ndimage

from ..config import DESPECKLE_MIN_SIZE, INK_ALPHA_THRESHOLD, INK_LUMINANCE_THRESHOLD

logger = logging.getLogger(__name__)

BACKGROUND = 0
INK = 1
CONSUMED = 2

# 4-connectivity: diagonal neighbors are separate components
FOUR_CONNECTED = ndimage.generate_binary_structure(2, 1)


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Per-pixel luma (0.299R + 0.587G + 0.114B) on the 0-255 scale."""
    rgb = rgba[..., :3].astype(np.float64)
    return 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]


def build_ink_mask(rgba: np.ndarray,
                   luminance_threshold: float = INK_LUMINANCE_THRESHOLD,
                   alpha_threshold: int = INK_ALPHA_THRESHOLD) -> np.ndarray:
    """Classify every pixel as ink or background.

    A pixel is ink when it is darker than luminance_threshold and more
    opaque than alpha_threshold.

    Args:
        rgba: uint8 array of shape (height, width, 4).
        luminance_threshold: Luma below which a pixel counts as dark.
        alpha_threshold: Alpha above which a pixel counts as opaque.

    Returns:
        uint8 mask of shape (height, width) holding INK or BACKGROUND.
    """
    ink = (luminance(rgba) < luminance_threshold) & (rgba[..., 3] > alpha_threshold)
    mask = np.where(ink, INK, BACKGROUND).astype(np.uint8)
    logger.debug("Ink mask: %d of %d pixels", int(ink.sum()), ink.size)
    return mask


def despeckle(mask: np.ndarray, min_size: int = DESPECKLE_MIN_SIZE) -> int:
    """Zero every 4-connected ink component smaller than min_size, in place.

    After this call every remaining ink pixel belongs to a component of at
    least min_size pixels; the ink count never grows.

    Args:
        mask: Ink mask, modified in place. Any non-zero cell is ink.
        min_size: Smallest component size kept.

    Returns:
        Number of pixels removed.
    """
    labeled, num_components = ndimage.label(mask > 0, structure=FOUR_CONNECTED)
    if num_components == 0:
        return 0

    sizes = np.bincount(labeled.ravel())
    too_small = sizes < min_size
    too_small[0] = False  # label 0 is background
    speckles = too_small[labeled]

    removed = int(speckles.sum())
    mask[speckles] = BACKGROUND
    logger.debug("Despeckle: %d components, removed %d pixels in %d components",
                 num_components, removed, int(too_small.sum()))
    return removed


def build_despeckled_mask(rgba: np.ndarray,
                          luminance_threshold: float = INK_LUMINANCE_THRESHOLD,
                          alpha_threshold: int = INK_ALPHA_THRESHOLD,
                          min_size: int = DESPECKLE_MIN_SIZE) -> np.ndarray:
    """Threshold then despeckle; the mask the walker starts from."""
    mask = build_ink_mask(rgba, luminance_threshold, alpha_threshold)
    despeckle(mask, min_size)
    return mask
