"""Raster analysis: ink mask building and the centerline stroke walker.

Mask building:
    build_ink_mask: Luminance + alpha threshold into an INK/BACKGROUND grid.
    despeckle: Zero connected components below a minimum size.
    build_despeckled_mask: Both of the above in one call.

Stroke walking:
    StrokeWalker: Extracts raw strokes by consuming ink along its centerline.
    BoundedLoop: Iteration budget that reports whether it ran out.
"""

from .mask import (
    BACKGROUND,
    CONSUMED,
    INK,
    build_despeckled_mask,
    build_ink_mask,
    despeckle,
    luminance,
)
from .walker import BoundedLoop, StrokeWalker, WalkResult

__all__ = [
    'BACKGROUND', 'INK', 'CONSUMED',
    'luminance', 'build_ink_mask', 'despeckle', 'build_despeckled_mask',
    'BoundedLoop', 'StrokeWalker', 'WalkResult',
]
