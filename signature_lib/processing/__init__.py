"""Stroke cleanup: merge, smooth, dedup, on-ink, jitter, simplify, coverage.

CleanupPipeline runs CleanupStep instances in order over the ordered
strokes; CleanupContext carries the walked ink mask they check against.
"""

from .cleanup import (
    CleanupContext,
    CleanupPipeline,
    CleanupStep,
    CoverageStep,
    DedupStep,
    JitterStep,
    MergeStep,
    OnInkStep,
    PointStep,
    SimplifyStep,
    SmoothStep,
)

__all__ = [
    'CleanupContext', 'CleanupPipeline', 'CleanupStep', 'PointStep',
    'MergeStep', 'SmoothStep', 'DedupStep', 'OnInkStep',
    'JitterStep', 'SimplifyStep', 'CoverageStep',
]
