"""Geometric utility functions.

Small helpers shared by the walker, the cleanup steps and the motion
planner. Points are anything with ``x`` and ``y`` attributes (RawPoint,
PhysicsPoint) unless a function says it takes plain tuples.

The module provides the following functions:
    round_half_up: Round like a canvas API rather than banker's rounding.
    point_distance_squared / point_distance: Euclidean distance.
    compute_direction_vector: Raw or normalized vector between two points.
    turn_angle: Angle in radians between two segment vectors.
    deviation_squared: Squared distance of a point from a chord.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up.

    Example:
        >>> round_half_up(2.5), round_half_up(-2.5)
        (3, -2)
    """
    return int(math.floor(value + 0.5))


def point_distance_squared(p1, p2) -> float:
    """Compute squared Euclidean distance between two points.

    Using squared distance avoids the sqrt computation, which is useful
    when comparing distances (the ordering is preserved).
    """
    dx = p1.x - p2.x
    dy = p1.y - p2.y
    return dx * dx + dy * dy


def point_distance(p1, p2) -> float:
    """Compute Euclidean distance between two points."""
    return math.sqrt(point_distance_squared(p1, p2))


def compute_direction_vector(p1, p2, normalize: bool = False) -> tuple[float, float]:
    """Compute direction vector from p1 to p2.

    Args:
        p1: Start point.
        p2: End point.
        normalize: If True, return unit vector. If False, return raw delta.

    Returns:
        Direction vector (dx, dy). If normalize=True and length is near zero,
        returns (0, 0).
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    if not normalize:
        return (dx, dy)
    length = math.sqrt(dx * dx + dy * dy)
    if length < 0.01:
        return (0.0, 0.0)
    return (dx / length, dy / length)


def turn_angle(v1: tuple[float, float], v2: tuple[float, float],
               min_length: float = 0.001) -> float:
    """Angle between two segment vectors in radians.

    The cosine is clamped to [-1, 1] before arccos to absorb floating-point
    error.

    Args:
        v1: Incoming segment vector (dx, dy), any length.
        v2: Outgoing segment vector (dx, dy), any length.
        min_length: Vectors shorter than this have no direction.

    Returns:
        Angle in [0, pi]; 0 when either vector is degenerate.

    Example:
        >>> round(turn_angle((1, 0), (0, 5)), 4)
        1.5708
    """
    mag1 = math.sqrt(v1[0] * v1[0] + v1[1] * v1[1])
    mag2 = math.sqrt(v2[0] * v2[0] + v2[1] * v2[1])
    if mag1 <= min_length or mag2 <= min_length:
        return 0.0
    cos_theta = (v1[0] * v2[0] + v1[1] * v2[1]) / (mag1 * mag2)
    return math.acos(max(-1.0, min(1.0, cos_theta)))


def deviation_squared(prev, curr, nxt) -> float | None:
    """Squared perpendicular distance of curr from the chord prev -> nxt.

    Uses the triangle-area formula: height = 2 * area / base.

    Returns:
        The squared deviation, or None when the chord is shorter than one
        unit and the deviation is undefined.
    """
    area = abs(0.5 * (prev.x * (curr.y - nxt.y)
                      + curr.x * (nxt.y - prev.y)
                      + nxt.x * (prev.y - curr.y)))
    dx = nxt.x - prev.x
    dy = nxt.y - prev.y
    base_sq = dx * dx + dy * dy
    if base_sq < 1:
        return None
    return (4 * area * area) / base_sq
