"""Image decoding utilities.

Turns an image file (path, bytes or file object) into the RGBA pixel
array the tracer consumes. Decoding and resizing happen here so the
tracing pipeline itself never touches Pillow.

Example usage::

    from signature_lib.utils.imaging import load_rgba

    loaded = load_rgba('signature.png', max_width=1200)
    print(loaded.pixels.shape, loaded.original_size, loaded.scale)
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..config import MAX_PROCESS_WIDTH

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, BinaryIO]


@dataclass
class LoadedImage:
    """A decoded image ready for tracing.

    Attributes:
        pixels: uint8 array of shape (height, width, 4), RGBA.
        original_size: (width, height) of the source before resizing.
        scale: Factor applied to the source dimensions (<= 1).
    """
    pixels: np.ndarray
    original_size: tuple[int, int]
    scale: float

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def load_rgba(source: ImageSource, max_width: int = MAX_PROCESS_WIDTH) -> LoadedImage:
    """Decode an image and scale it down to the processing width.

    Images are never upscaled. Palette and grayscale images are converted to
    RGBA so transparency is honored by the ink threshold.

    Args:
        source: File path, raw encoded bytes, or a binary file object.
        max_width: Widest processing width allowed.

    Returns:
        LoadedImage with the RGBA pixel array and the applied scale.

    Raises:
        ValueError: If the source cannot be opened or decoded.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        with Image.open(source) as img:
            img.load()
            original_size = img.size
            rgba = img.convert('RGBA')
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ValueError(f"Failed to load image for tracing: {e}") from e

    width, height = original_size
    if width < 1 or height < 1:
        raise ValueError(f"Image has no pixels: {width}x{height}")

    scale = min(1.0, max_width / width)
    p_width = max(1, int(width * scale))
    p_height = max(1, int(height * scale))
    if (p_width, p_height) != original_size:
        rgba = rgba.resize((p_width, p_height), Image.Resampling.BILINEAR)
        logger.debug("Resized %dx%d -> %dx%d", width, height, p_width, p_height)

    return LoadedImage(
        pixels=np.asarray(rgba, dtype=np.uint8).copy(),
        original_size=(width, height),
        scale=scale,
    )


def ensure_rgba(pixels: np.ndarray) -> np.ndarray:
    """Validate an RGBA pixel buffer.

    Args:
        pixels: Array of shape (height, width, 4).

    Returns:
        The same data as a uint8 array.

    Raises:
        ValueError: If the array is not a non-empty RGBA image.
    """
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError(f"Expected an RGBA buffer of shape (H, W, 4), got {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError("Pixel buffer is empty")
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    return arr
