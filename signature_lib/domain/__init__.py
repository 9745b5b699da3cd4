"""Domain objects for signature tracing.

This module provides the value objects passed between the pipeline stages
and out to callers.

Geometry classes:
    RawPoint: Normalized pen position with optional thickness and opacity.
    Stroke: Ordered sequence of RawPoints.
    StrokeMeta: Bounding box, centroid and endpoints of a stroke.
    BBox: Immutable bounding box.
    SignatureAnalysis: Strokes plus metadata; the tracer's only output.

Motion classes:
    HandwritingStyle: Timing and width knobs for the motion planner.
    PhysicsPoint: Timed canvas-space pen sample.
    StrokePath: Timed trajectory of one stroke.

Example usage::

    from signature_lib.domain import RawPoint, Stroke

    stroke = Stroke([RawPoint(0, 0), RawPoint(100, 0), RawPoint(200, 50)])
    meta = stroke.meta()
    print(meta.width, meta.cy)
"""

from .geometry import AnalysisMetadata, BBox, RawPoint, SignatureAnalysis, Stroke, StrokeMeta
from .motion import (
    DEFAULT_STYLE,
    STYLE_PRESETS,
    HandwritingStyle,
    PhysicsPoint,
    StrokePath,
    resolve_style,
)

__all__ = [
    'RawPoint', 'Stroke', 'StrokeMeta', 'BBox',
    'AnalysisMetadata', 'SignatureAnalysis',
    'HandwritingStyle', 'DEFAULT_STYLE', 'STYLE_PRESETS', 'resolve_style',
    'PhysicsPoint', 'StrokePath',
]
