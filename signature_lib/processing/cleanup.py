"""Stroke cleanup after ordering.

This module turns ordered raw strokes into the final, simplified strokes of
a SignatureAnalysis. Raw walker output is dense (one point every few
pixels), slightly noisy, and fragmented wherever the walker lost the ink
for a moment.

Design Patterns:
    Each cleanup operation is a CleanupStep subclass and CleanupPipeline
    runs them in sequence, the same way stroke merging is organized:
    - Steps can be tested in isolation
    - Pipelines can be rebuilt with different thresholds per run
    - Steps can be removed or reordered for experiments

Algorithm Overview:
    The default pipeline runs, in this fixed order:

    1. MergeStep: Concatenate consecutive strokes whose end/start gap is
       below MERGE_DISTANCE (walker fragmentation of one pen-down stroke).
    2. SmoothStep: 3-tap weighted average over x, y and, where present on
       all three taps, z and a. Endpoints are anchors.
    3. DedupStep: Drop points too close to their predecessor.
    4. OnInkStep: Drop interior points with no ink within ON_INK_RADIUS
       cells of the original mask.
    5. JitterStep: Remove short, sharp spikes (both segments short and a
       turn over 90 degrees), in two passes.
    6. SimplifyStep: Pointwise deviation-based polyline reduction.
    7. CoverageStep: Reject strokes whose sampled path no longer lands on
       enough ink.

    Strokes with fewer than MIN_CLEAN_POINTS points after dedup or after
    jitter removal are discarded. No step moves or drops a stroke's first
    or last point.

Typical usage:
    from signature_lib.processing.cleanup import CleanupContext, CleanupPipeline

    ctx = CleanupContext(mask=walked_mask)
    strokes = CleanupPipeline.create_default().run(ordered_strokes, ctx)
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
from scipy import ndimage

from ..config import (
    COVERAGE_RATIO,
    COVERAGE_STEP_PX,
    DEDUP_DIST_SQ,
    DEFAULT_CONFIG,
    JITTER_PASSES,
    JITTER_SEGMENT,
    MERGE_DISTANCE,
    MIN_CLEAN_POINTS,
    ON_INK_RADIUS,
    OUTPUT_SCALE,
    SIMPLIFY_DEVIATION_SQ,
    SMOOTHING_WEIGHTS,
    TracerConfig,
)
from ..domain.geometry import RawPoint, Stroke
from ..utils.geometry import deviation_squared, round_half_up

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

@dataclass
class CleanupContext:
    """Data the cleanup steps need besides the strokes.

    Attributes:
        mask: The walked ink mask; any non-zero cell is ink.
        output_scale: Size of the normalized coordinate range.
    """
    mask: np.ndarray
    output_scale: int = OUTPUT_SCALE
    _near_ink: dict = field(default_factory=dict, repr=False)

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    def near_ink(self, radius: int) -> np.ndarray:
        """Boolean grid: True where ink lies within radius cells (square window).

        Cells outside the image count as background. Cached per radius.
        """
        if radius not in self._near_ink:
            ink = self.mask > 0
            if radius > 0:
                square = np.ones((2 * radius + 1, 2 * radius + 1), dtype=bool)
                ink = ndimage.binary_dilation(ink, structure=square)
            self._near_ink[radius] = ink
        return self._near_ink[radius]

    def to_cell(self, x: float, y: float) -> tuple[int, int]:
        """Normalized coordinates to a (column, row) grid cell, floored."""
        return (int(math.floor(x / self.output_scale * self.width)),
                int(math.floor(y / self.output_scale * self.height)))


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------

class CleanupStep(ABC):
    """Base class for stroke cleanup steps.

    Subclasses must implement apply().
    """

    @abstractmethod
    def apply(self, strokes: list[Stroke], ctx: CleanupContext) -> list[Stroke]:
        """Apply the step.

        Args:
            strokes: Strokes in writing order. Not modified.
            ctx: CleanupContext with the ink mask.

        Returns:
            New list of strokes.
        """
        pass

    @property
    def name(self) -> str:
        """Return the step name for logging/debugging."""
        return self.__class__.__name__


class PointStep(CleanupStep):
    """A step that rewrites each stroke's points independently.

    Attributes:
        min_points: Strokes left with fewer points are discarded; 0 keeps
            every stroke.
    """

    min_points = 0

    @abstractmethod
    def process(self, points: list[RawPoint], ctx: CleanupContext) -> list[RawPoint]:
        """Return the new point list for one stroke."""
        pass

    def apply(self, strokes: list[Stroke], ctx: CleanupContext) -> list[Stroke]:
        result = []
        for stroke in strokes:
            points = self.process(list(stroke.points), ctx)
            if len(points) < self.min_points:
                continue
            result.append(Stroke(points))
        return result


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

class MergeStep(CleanupStep):
    """Join consecutive strokes whose end/start gap is below max_distance."""

    def __init__(self, max_distance: float = MERGE_DISTANCE):
        self.max_distance = max_distance

    def apply(self, strokes: list[Stroke], ctx: CleanupContext) -> list[Stroke]:
        if not strokes:
            return []

        threshold_sq = self.max_distance * self.max_distance
        merged = []
        current = list(strokes[0].points)
        for stroke in strokes[1:]:
            if current[-1].distance_sq_to(stroke.start) < threshold_sq:
                current.extend(stroke.points)
            else:
                merged.append(Stroke(current))
                current = list(stroke.points)
        merged.append(Stroke(current))
        return merged


class SmoothStep(PointStep):
    """Weighted 3-tap smoothing with fixed endpoints.

    x and y are rounded back onto the integer grid. z and a are smoothed
    only where the point and both neighbors carry them; otherwise the
    point's own value is kept.
    """

    def __init__(self, weights: tuple[float, float, float] = SMOOTHING_WEIGHTS):
        self.weights = weights

    def process(self, points: list[RawPoint], ctx: CleanupContext) -> list[RawPoint]:
        if len(points) < 3:
            return points

        w_prev, w_curr, w_next = self.weights
        result = [points[0]]
        for prev, curr, nxt in zip(points, points[1:], points[2:]):
            z = curr.z
            if prev.z is not None and curr.z is not None and nxt.z is not None:
                z = w_prev * prev.z + w_curr * curr.z + w_next * nxt.z
            a = curr.a
            if prev.a is not None and curr.a is not None and nxt.a is not None:
                a = w_prev * prev.a + w_curr * curr.a + w_next * nxt.a
            result.append(RawPoint(
                x=round_half_up(w_prev * prev.x + w_curr * curr.x + w_next * nxt.x),
                y=round_half_up(w_prev * prev.y + w_curr * curr.y + w_next * nxt.y),
                z=z,
                a=a,
            ))
        result.append(points[-1])
        return result


class DedupStep(PointStep):
    """Drop points within min_dist_sq of the point before them.

    Each point is compared with its predecessor in the input, not with the
    last point kept.
    """

    def __init__(self, min_dist_sq: float = DEDUP_DIST_SQ,
                 min_points: int = MIN_CLEAN_POINTS):
        self.min_dist_sq = min_dist_sq
        self.min_points = min_points

    def process(self, points: list[RawPoint], ctx: CleanupContext) -> list[RawPoint]:
        if not points:
            return points
        return [points[0]] + [
            p for prev, p in zip(points, points[1:])
            if p.distance_sq_to(prev) > self.min_dist_sq
        ]


class OnInkStep(PointStep):
    """Drop interior points with no ink nearby in the original mask."""

    def __init__(self, radius: int = ON_INK_RADIUS):
        self.radius = radius

    def process(self, points: list[RawPoint], ctx: CleanupContext) -> list[RawPoint]:
        if len(points) < 3:
            return points

        near = ctx.near_ink(self.radius)
        max_col = ctx.width - 1
        max_row = ctx.height - 1
        kept = [points[0]]
        for p in points[1:-1]:
            col, row = ctx.to_cell(p.x, p.y)
            if near[min(max(row, 0), max_row), min(max(col, 0), max_col)]:
                kept.append(p)
        kept.append(points[-1])
        return kept


class JitterStep(PointStep):
    """Remove short, sharp spikes.

    A point is dropped when both adjacent segments are shorter than
    max_segment and they turn by more than 90 degrees (negative dot
    product). Repeated passes catch alternating zig-zags.
    """

    def __init__(self, max_segment: float = JITTER_SEGMENT, passes: int = JITTER_PASSES,
                 min_points: int = MIN_CLEAN_POINTS):
        self.max_segment = max_segment
        self.passes = passes
        self.min_points = min_points

    def process(self, points: list[RawPoint], ctx: CleanupContext) -> list[RawPoint]:
        if len(points) < 3:
            return points

        short_sq = self.max_segment * self.max_segment
        current = points
        for _ in range(self.passes):
            clean = [current[0]]
            for prev, curr, nxt in zip(current, current[1:], current[2:]):
                d1 = prev.distance_sq_to(curr)
                d2 = curr.distance_sq_to(nxt)
                if d1 < short_sq and d2 < short_sq:
                    dot = ((curr.x - prev.x) * (nxt.x - curr.x)
                           + (curr.y - prev.y) * (nxt.y - curr.y))
                    if d1 * d2 > 0 and dot < 0:
                        continue
                clean.append(curr)
            clean.append(current[-1])

            if len(clean) < 3:
                return clean
            current = clean
        return current


class SimplifyStep(PointStep):
    """Pointwise deviation-based polyline reduction.

    Each interior point is measured against the chord from the last kept
    point to the next input point and kept when its squared deviation
    exceeds max_deviation_sq. Points whose chord is shorter than one unit
    are dropped. First and last points are always kept.
    """

    def __init__(self, max_deviation_sq: float = SIMPLIFY_DEVIATION_SQ):
        self.max_deviation_sq = max_deviation_sq

    def process(self, points: list[RawPoint], ctx: CleanupContext) -> list[RawPoint]:
        if len(points) < 3:
            return points

        kept = [points[0]]
        for curr, nxt in zip(points[1:-1], points[2:]):
            deviation = deviation_squared(kept[-1], curr, nxt)
            if deviation is not None and deviation > self.max_deviation_sq:
                kept.append(curr)
        kept.append(points[-1])
        return kept


class CoverageStep(CleanupStep):
    """Reject strokes whose path no longer lies on the original ink.

    Every segment is sampled every step_px processing pixels (measured
    horizontally) and each sample checks its 3x3 neighborhood in the mask.
    A stroke passes when at least min_ratio of the in-bounds samples hit
    ink; a stroke with no in-bounds samples fails.
    """

    def __init__(self, step_px: float = COVERAGE_STEP_PX, min_ratio: float = COVERAGE_RATIO):
        self.step_px = step_px
        self.min_ratio = min_ratio

    def apply(self, strokes: list[Stroke], ctx: CleanupContext) -> list[Stroke]:
        return [s for s in strokes if self.covers(s, ctx)]

    def covers(self, stroke: Stroke, ctx: CleanupContext) -> bool:
        if len(stroke) < 2:
            return True

        near = ctx.near_ink(1)
        scale_x = ctx.width / ctx.output_scale
        scale_y = ctx.height / ctx.output_scale
        step_units = max(1.0, self.step_px / scale_x)

        hits = 0
        checks = 0
        for p1, p2 in zip(stroke.points, stroke.points[1:]):
            steps = math.ceil(p1.distance_to(p2) / step_units)
            t = np.linspace(0.0, 1.0, steps + 1) if steps > 0 else np.zeros(1)
            cols = np.floor((p1.x + (p2.x - p1.x) * t) * scale_x).astype(int)
            rows = np.floor((p1.y + (p2.y - p1.y) * t) * scale_y).astype(int)
            inside = (cols >= 0) & (cols < ctx.width) & (rows >= 0) & (rows < ctx.height)
            checks += int(inside.sum())
            hits += int(near[rows[inside], cols[inside]].sum())

        if checks == 0:
            return False
        return hits / checks >= self.min_ratio


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class CleanupPipeline:
    """Run cleanup steps in sequence.

    Each step's output becomes the input to the next.

    Example:
        >>> pipeline = CleanupPipeline.create_default()
        >>> strokes = pipeline.run(ordered_strokes, CleanupContext(mask=mask))
    """

    def __init__(self, steps: list[CleanupStep]):
        """Initialize with list of steps.

        Args:
            steps: List of CleanupStep instances to run in order.
        """
        self.steps = steps

    @classmethod
    def create_default(cls, config: TracerConfig = DEFAULT_CONFIG) -> 'CleanupPipeline':
        """Create the standard seven-step pipeline from a TracerConfig."""
        return cls([
            MergeStep(max_distance=config.merge_distance),
            SmoothStep(weights=config.smoothing_weights),
            DedupStep(min_dist_sq=config.dedup_dist_sq, min_points=config.min_clean_points),
            OnInkStep(radius=config.on_ink_radius),
            JitterStep(max_segment=config.jitter_segment, passes=config.jitter_passes,
                       min_points=config.min_clean_points),
            SimplifyStep(max_deviation_sq=config.simplify_deviation_sq),
            CoverageStep(step_px=config.coverage_step_px, min_ratio=config.coverage_ratio),
        ])

    def run(self, strokes: list[Stroke], ctx: CleanupContext) -> list[Stroke]:
        """Run all steps in sequence.

        Args:
            strokes: Ordered strokes. Not modified.
            ctx: CleanupContext with the walked ink mask.

        Returns:
            Cleaned strokes in the same writing order.
        """
        initial_count = len(strokes)
        logger.debug("CleanupPipeline starting with %d strokes", initial_count)

        for step in self.steps:
            before = len(strokes)
            strokes = step.apply(strokes, ctx)
            if before != len(strokes):
                logger.debug("%s: %d -> %d strokes", step.name, before, len(strokes))

        logger.debug("CleanupPipeline complete: %d -> %d strokes",
                     initial_count, len(strokes))
        return strokes

    def add_step(self, step: CleanupStep, position: int | None = None) -> None:
        """Add a step to the pipeline.

        Args:
            step: CleanupStep instance to add.
            position: Index to insert at. If None, appends to end.
        """
        if position is None:
            self.steps.append(step)
        else:
            self.steps.insert(position, step)

    def remove_step_by_type(self, step_type: type) -> bool:
        """Remove all steps of a specific type.

        Returns:
            True if any steps were removed.
        """
        original_len = len(self.steps)
        self.steps = [s for s in self.steps if not isinstance(s, step_type)]
        return len(self.steps) < original_len
