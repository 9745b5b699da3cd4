"""Motion planning: timed StrokePaths from a SignatureAnalysis."""

from .planner import (
    CanvasPoint,
    filter_redundant_points,
    generate_motion_plan,
    natural_duration,
    pen_lift_ms,
    rescale_paths,
    tremor_offset,
)

__all__ = [
    'CanvasPoint', 'filter_redundant_points', 'generate_motion_plan',
    'natural_duration', 'pen_lift_ms', 'rescale_paths', 'tremor_offset',
]
