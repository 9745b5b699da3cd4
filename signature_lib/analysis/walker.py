"""Centerline stroke walker.

This module turns an ink mask into raw strokes by simulating a pen dragged
along the middle of the ink. The walker:

    1. Scans the mask in raster order for the next unconsumed ink pixel.
    2. From there, repeatedly records a point (position, thickness, opacity),
       consumes the ink under a pen-sized disk, and moves to the centroid of
       the unconsumed ink still nearby.
    3. Ends the stroke when no unconsumed ink is left near the pen, then
       goes back to step 1.

Consuming ink is what makes the pen advance: the centroid of what is left
always lies ahead of the pen. The mask is mutated in place (INK becomes
CONSUMED), so each tracing run needs its own mask.

Both loops run under a BoundedLoop budget. Running out of budget is not an
error; the walk result reports it as ``truncated``.

Example usage::

    from signature_lib.analysis.mask import build_despeckled_mask
    from signature_lib.analysis.walker import StrokeWalker

    mask = build_despeckled_mask(rgba)
    result = StrokeWalker().walk(mask, rgba)
    print(len(result.strokes), result.truncated)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from ..config import (
    MAX_RAY_LENGTH,
    MAX_STEPS_PER_STROKE,
    MAX_STROKES,
    MIN_DARKNESS,
    MIN_RAW_POINTS,
    OUTPUT_SCALE,
    PEN_RADIUS,
    SEARCH_RADIUS,
    TracerConfig,
)
from ..domain.geometry import RawPoint, Stroke
from ..utils.geometry import round_half_up
from .mask import BACKGROUND, CONSUMED, INK

logger = logging.getLogger(__name__)


class BoundedLoop:
    """Iteration budget that remembers whether it ran out.

    Iterating yields at most ``cap`` times. Breaking out of the loop leaves
    ``exhausted`` False; running to the cap sets it True.

    Example:
        >>> budget = BoundedLoop(3)
        >>> for _ in budget:
        ...     pass
        >>> budget.exhausted, budget.count
        (True, 3)
    """

    def __init__(self, cap: int):
        self.cap = cap
        self.count = 0
        self.exhausted = False

    def __iter__(self) -> Iterator[int]:
        while self.count < self.cap:
            self.count += 1
            yield self.count
        self.exhausted = True


@dataclass
class WalkResult:
    """Raw strokes from one walk over a mask.

    Attributes:
        strokes: Raw strokes in seed (raster) order.
        truncated: True when an iteration cap stopped the walk early.
        dropped: Number of walks discarded for having too few points.
    """
    strokes: list[Stroke] = field(default_factory=list)
    truncated: bool = False
    dropped: int = 0


def _disk_offsets(radius: int) -> tuple[np.ndarray, np.ndarray]:
    """(dy, dx) offsets of every cell with dx^2 + dy^2 <= radius^2."""
    span = np.arange(-radius, radius + 1)
    dy, dx = np.meshgrid(span, span, indexing='ij')
    inside = dx * dx + dy * dy <= radius * radius
    return dy[inside], dx[inside]


class StrokeWalker:
    """Extract raw centerline strokes from an ink mask.

    Attributes:
        pen_radius: Radius of the disk consumed at each step.
        search_radius: Half-size of the window searched for the next
            centroid.
        max_ray_length: Longest thickness ray, in pixels.
        min_darkness: Floor on darkness when sampling opacity.
        max_strokes: Cap on seeds taken from the raster scan.
        max_steps: Cap on steps within one stroke.
        min_points: Strokes with fewer points are discarded.
        output_scale: Size of the normalized coordinate range.
    """

    def __init__(self, pen_radius: int = PEN_RADIUS, search_radius: int = SEARCH_RADIUS,
                 max_ray_length: int = MAX_RAY_LENGTH, min_darkness: float = MIN_DARKNESS,
                 max_strokes: int = MAX_STROKES, max_steps: int = MAX_STEPS_PER_STROKE,
                 min_points: int = MIN_RAW_POINTS, output_scale: int = OUTPUT_SCALE):
        self.pen_radius = pen_radius
        self.search_radius = search_radius
        self.max_ray_length = max_ray_length
        self.min_darkness = min_darkness
        self.max_strokes = max_strokes
        self.max_steps = max_steps
        self.min_points = min_points
        self.output_scale = output_scale
        self._disk_dy, self._disk_dx = _disk_offsets(pen_radius)

    @classmethod
    def from_config(cls, config: TracerConfig) -> StrokeWalker:
        return cls(
            pen_radius=config.pen_radius,
            search_radius=config.search_radius,
            max_ray_length=config.max_ray_length,
            min_darkness=config.min_darkness,
            max_strokes=config.max_strokes,
            max_steps=config.max_steps_per_stroke,
            min_points=config.min_raw_points,
            output_scale=config.output_scale,
        )

    def walk(self, mask: np.ndarray, rgba: np.ndarray | None = None) -> WalkResult:
        """Walk every ink component of the mask.

        Args:
            mask: Ink mask from the mask builder, consumed in place.
            rgba: Source pixels used to sample opacity. When None, points
                carry no opacity.

        Returns:
            WalkResult with the raw strokes in seed order.
        """
        result = WalkResult()
        height, width = mask.shape
        if height == 0 or width == 0:
            return result

        scan_pos = 0
        seeds = BoundedLoop(self.max_strokes)
        for _ in seeds:
            seed = self._next_seed(mask, scan_pos)
            if seed < 0:
                break
            scan_pos = seed

            points, stroke_truncated = self._walk_stroke(
                mask, rgba, (float(seed % width), float(seed // width))
            )
            result.truncated = result.truncated or stroke_truncated
            if len(points) >= self.min_points:
                result.strokes.append(Stroke(points))
            else:
                result.dropped += 1

        if seeds.exhausted and self._next_seed(mask, scan_pos) >= 0:
            result.truncated = True

        if result.truncated:
            logger.warning("Stroke walk hit an iteration cap; result is partial")
        logger.debug("Walker: %d raw strokes, %d dropped as noise",
                     len(result.strokes), result.dropped)
        return result

    def _next_seed(self, mask: np.ndarray, start: int) -> int:
        """Flat index of the first INK cell at or after start, or -1."""
        flat = mask.reshape(-1)
        hits = np.flatnonzero(flat[start:] == INK)
        if hits.size == 0:
            return -1
        return start + int(hits[0])

    def _walk_stroke(self, mask: np.ndarray, rgba: np.ndarray | None,
                     start: tuple[float, float]) -> tuple[list[RawPoint], bool]:
        """Trace one stroke from a seed pixel.

        Returns:
            (points, truncated) where truncated means the step cap was hit
            while ink was still ahead of the pen.
        """
        height, width = mask.shape
        x, y = start
        points: list[RawPoint] = []

        steps = BoundedLoop(self.max_steps)
        for _ in steps:
            cx = round_half_up(x)
            cy = round_half_up(y)

            radius = self._measure_radius(mask, cx, cy)
            points.append(RawPoint(
                x=round_half_up(x / width * self.output_scale),
                y=round_half_up(y / height * self.output_scale),
                z=(radius * 2 / width) * self.output_scale,
                a=self._sample_opacity(rgba, cx, cy),
            ))

            self._consume(mask, cx, cy)
            nxt = self._centroid(mask, cx, cy)
            if nxt is None:
                break
            x, y = nxt

        return points, steps.exhausted

    def _sample_opacity(self, rgba: np.ndarray | None, cx: int, cy: int) -> float | None:
        """Opacity from alpha and darkness of the pixel under the pen."""
        if rgba is None:
            return None
        if not (0 <= cy < rgba.shape[0] and 0 <= cx < rgba.shape[1]):
            return 1.0
        r, g, b, a = (float(c) for c in rgba[cy, cx])
        alpha = a / 255.0
        darkness = 1.0 - (0.299 * r + 0.587 * g + 0.114 * b) / 255.0
        return round(alpha * max(self.min_darkness, darkness), 2)

    def _measure_radius(self, mask: np.ndarray, cx: int, cy: int) -> int:
        """Shortest axis-aligned distance from the pen to background.

        Consumed ink still counts as ink here; only BACKGROUND or the image
        edge ends a ray.
        """
        height, width = mask.shape
        for r in range(1, self.max_ray_length):
            for x, y in ((cx + r, cy), (cx - r, cy), (cx, cy + r), (cx, cy - r)):
                if x < 0 or x >= width or y < 0 or y >= height:
                    return r
                if mask[y, x] == BACKGROUND:
                    return r
        # Ink in every direction up to the cap: report the cap, not a 1 px radius
        return self.max_ray_length

    def _consume(self, mask: np.ndarray, cx: int, cy: int) -> None:
        """Mark unconsumed ink under the pen disk as consumed."""
        height, width = mask.shape
        ys = cy + self._disk_dy
        xs = cx + self._disk_dx
        inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
        ys, xs = ys[inside], xs[inside]
        hit = mask[ys, xs] == INK
        mask[ys[hit], xs[hit]] = CONSUMED

    def _centroid(self, mask: np.ndarray, cx: int, cy: int) -> tuple[float, float] | None:
        """Centroid of unconsumed ink in the search window, or None.

        The window spans [c - search_radius, c + search_radius) on both axes.
        """
        height, width = mask.shape
        x0 = max(0, cx - self.search_radius)
        x1 = min(width, cx + self.search_radius)
        y0 = max(0, cy - self.search_radius)
        y1 = min(height, cy + self.search_radius)
        if x0 >= x1 or y0 >= y1:
            return None

        ys, xs = np.nonzero(mask[y0:y1, x0:x1] == INK)
        if ys.size == 0:
            return None
        return (x0 + float(xs.mean()), y0 + float(ys.mean()))
