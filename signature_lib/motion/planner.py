"""Motion planning: timed pen trajectories from traced strokes.

generate_motion_plan() is a pure function of (analysis, canvas size, style).
It keeps one clock across all strokes in writing order and emits one
StrokePath per stroke:

    - Coordinates scale linearly from the 0-10000 grid to canvas pixels.
    - Points closer than 0.1 px^2 to the last kept point are dropped, but
      the stroke's final point always survives.
    - A gap of more than PEN_LIFT_MIN_PX between strokes advances the clock
      by min(0.5 * gap, PEN_LIFT_MAX_TRAVEL_MS) + PEN_LIFT_BASE_MS.
    - Each segment takes distance * base_ms_per_px * (1 + turn * inertia)
      milliseconds, at least MIN_SEGMENT_MS.
    - Tremor displaces every point by amp * (sin, cos)(2 pi f t) using the
      point's own timestamp.

Timestamps never decrease, so rescale_paths() can stretch a plan to any
target duration by one multiplication.

Example usage::

    from signature_lib.motion.planner import generate_motion_plan, rescale_paths

    paths = generate_motion_plan(analysis, 800, 300, style='smooth_cursive')
    paths = rescale_paths(paths, target_ms=4000)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from ..config import OUTPUT_SCALE
from ..domain.geometry import SignatureAnalysis
from ..domain.motion import HandwritingStyle, PhysicsPoint, StrokePath, resolve_style
from ..utils.geometry import compute_direction_vector, point_distance, turn_angle

logger = logging.getLogger(__name__)

# Mapped points closer than this (px^2) to the last kept point are dropped
REDUNDANT_DIST_SQ = 0.1

# Pen lift: gaps above this many pixels take time
PEN_LIFT_MIN_PX = 30
# ...0.5 ms per pixel of travel, capped here...
PEN_LIFT_MAX_TRAVEL_MS = 250
# ...plus a fixed lift-and-land cost
PEN_LIFT_BASE_MS = 50

# Shortest segment duration; keeps time strictly increasing
MIN_SEGMENT_MS = 0.01

# Segments shorter than this (px) have no direction for the inertia penalty
MIN_TURN_SEGMENT_PX = 0.001


@dataclass(frozen=True)
class CanvasPoint:
    """A stroke point mapped to canvas pixels, before timing."""
    x: float
    y: float
    z: float | None = None
    a: float | None = None


def filter_redundant_points(points: Sequence[CanvasPoint],
                            min_dist_sq: float = REDUNDANT_DIST_SQ) -> list[CanvasPoint]:
    """Drop points within min_dist_sq of the last kept point.

    The final input point is appended if filtering removed it.
    """
    if len(points) < 2:
        return list(points)

    result = [points[0]]
    for curr in points[1:]:
        prev = result[-1]
        dx = curr.x - prev.x
        dy = curr.y - prev.y
        if dx * dx + dy * dy > min_dist_sq:
            result.append(curr)

    last = points[-1]
    if result[-1].x != last.x or result[-1].y != last.y:
        result.append(last)
    return result


def pen_lift_ms(distance: float) -> float:
    """Time to lift, travel and land the pen across a gap, in ms."""
    if distance <= PEN_LIFT_MIN_PX:
        return 0.0
    return min(distance * 0.5, PEN_LIFT_MAX_TRAVEL_MS) + PEN_LIFT_BASE_MS


def tremor_offset(style: HandwritingStyle, time_ms: float) -> tuple[float, float]:
    """(dx, dy) tremor displacement at a timestamp; zero when disabled."""
    if not style.has_tremor:
        return (0.0, 0.0)
    phase = 2 * math.pi * style.micro_tremor_freq_hz * (time_ms / 1000.0)
    amp = style.micro_tremor_amp_px
    return (amp * math.sin(phase), amp * math.cos(phase))


def generate_motion_plan(analysis: SignatureAnalysis, canvas_width: float,
                         canvas_height: float,
                         style: HandwritingStyle | Mapping[str, Any] | str | None = None
                         ) -> list[StrokePath]:
    """Time every stroke of an analysis on a canvas.

    Args:
        analysis: Traced strokes in writing order.
        canvas_width: Target canvas width in pixels.
        canvas_height: Target canvas height in pixels.
        style: Anything resolve_style() accepts; merged over the defaults.

    Returns:
        One StrokePath per stroke with at least two points, ids
        ``stroke-<index>`` using the stroke's index in the analysis.

    Raises:
        ValueError: If the canvas size is not positive.
    """
    if not canvas_width or not canvas_height or canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(f"Canvas size must be positive, got {canvas_width}x{canvas_height}")

    style = resolve_style(style)
    fallback_width = style.fallback_width * style.pressure_scale

    paths: list[StrokePath] = []
    clock = 0.0
    prev_end: CanvasPoint | None = None

    for index, stroke in enumerate(analysis.strokes):
        if len(stroke.points) < 2:
            continue

        points = filter_redundant_points([
            CanvasPoint(
                x=p.x / OUTPUT_SCALE * canvas_width,
                y=p.y / OUTPUT_SCALE * canvas_height,
                z=p.z,
                a=p.a,
            )
            for p in stroke.points
        ])

        if prev_end is not None:
            clock += pen_lift_ms(point_distance(points[0], prev_end))

        start_time = clock
        physics: list[PhysicsPoint] = []
        for i, p in enumerate(points):
            if i > 0:
                prev = points[i - 1]
                penalty = 1.0
                if i > 1 and style.inertia_factor > 0:
                    angle = turn_angle(
                        compute_direction_vector(points[i - 2], prev),
                        compute_direction_vector(prev, p),
                        min_length=MIN_TURN_SEGMENT_PX,
                    )
                    penalty = 1.0 + angle * style.inertia_factor
                clock += max(MIN_SEGMENT_MS,
                             point_distance(p, prev) * style.base_ms_per_px * penalty)

            tx, ty = tremor_offset(style, clock)
            width = fallback_width
            if p.z is not None:
                width = p.z / OUTPUT_SCALE * canvas_width * style.pressure_scale
            physics.append(PhysicsPoint(
                x=p.x + tx,
                y=p.y + ty,
                time=clock,
                line_width=width,
                opacity=p.a if p.a is not None else 1.0,
            ))

        paths.append(StrokePath(
            id=f"stroke-{index}",
            points=physics,
            start_time=start_time,
            end_time=clock,
        ))
        prev_end = points[-1]

    logger.debug("Motion plan: %d paths, %.1f ms (%s)",
                 len(paths), clock if paths else 0.0, style.label)
    return paths


def natural_duration(paths: Sequence[StrokePath]) -> float:
    """End time of the last path, or 0 for an empty plan."""
    return paths[-1].end_time if paths else 0.0


def rescale_paths(paths: Sequence[StrokePath], target_ms: float) -> list[StrokePath]:
    """Linearly stretch a plan so its last path ends at target_ms.

    A plan with no natural duration is returned unchanged.

    Raises:
        ValueError: If target_ms is not positive.
    """
    if target_ms <= 0:
        raise ValueError(f"Target duration must be positive, got {target_ms}")
    natural = natural_duration(paths)
    if natural <= 0:
        return list(paths)
    ratio = target_ms / natural
    return [p.scaled(ratio) for p in paths]
