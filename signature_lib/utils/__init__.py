"""Utility functions for signature tracing.

Geometry utilities:
    round_half_up, point_distance, point_distance_squared,
    compute_direction_vector, turn_angle, deviation_squared

Imaging utilities:
    load_rgba: Decode an image into an RGBA array at processing width.
    ensure_rgba: Validate a caller-supplied pixel buffer.

Logging:
    configure_logging: Root logger setup for the CLI and web app.
"""

from .geometry import (
    compute_direction_vector,
    deviation_squared,
    point_distance,
    point_distance_squared,
    round_half_up,
    turn_angle,
)
from .imaging import LoadedImage, ensure_rgba, load_rgba
from .log_setup import configure_logging

__all__ = [
    'round_half_up', 'point_distance', 'point_distance_squared',
    'compute_direction_vector', 'turn_angle', 'deviation_squared',
    'LoadedImage', 'load_rgba', 'ensure_rgba',
    'configure_logging',
]
