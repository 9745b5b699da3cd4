"""Service layer for signature tracing and motion planning.

This module wires the pipeline stages into the two operations callers use:

    SignatureService.trace_image / trace_pixels:
        pixels -> mask -> walker -> order solver -> cleanup -> SignatureAnalysis
    SignatureService.plan_motion:
        SignatureAnalysis + canvas size + style -> list[StrokePath]

Each tracing call builds its own mask, so one service instance can be used
for any number of images, including from several threads.

Example usage:
    Tracing and planning::

        from signature_lib.api.services import SignatureService

        service = SignatureService()
        analysis = service.trace_image('signature.png')
        paths = service.plan_motion(analysis, 800, 300, style='rigid_formal',
                                    duration_ms=3000)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import numpy as np

from ..analysis.mask import build_despeckled_mask
from ..analysis.walker import StrokeWalker
from ..config import DEFAULT_CONFIG, TracerConfig
from ..domain.geometry import AnalysisMetadata, SignatureAnalysis
from ..domain.motion import HandwritingStyle, StrokePath
from ..motion.planner import generate_motion_plan, rescale_paths
from ..ordering.solver import StrokeOrderSolver
from ..processing.cleanup import CleanupContext, CleanupPipeline
from ..utils.imaging import ImageSource, ensure_rgba, load_rgba

_logger = logging.getLogger(__name__)

TRACER_NAME = 'Local Bitmask Tracer'


def build_notes(scale: float, truncated: bool = False) -> str:
    """Provenance string stored in AnalysisMetadata.notes."""
    notes = f"{TRACER_NAME} (Scale: {scale:.2f}, w/ Ink Thickness & Opacity, Geometry Refined)"
    if truncated:
        notes += " [truncated: iteration cap reached]"
    return notes


class SignatureService:
    """Trace signature images and plan their pen motion.

    Attributes:
        config: Tuning values for every pipeline stage.
        walker: StrokeWalker built from config.
        solver: StrokeOrderSolver built from config.
        cleanup: CleanupPipeline built from config.

    Example:
        >>> service = SignatureService(TracerConfig(coverage_ratio=0.6))
        >>> analysis = service.trace_pixels(rgba)
        >>> paths = service.plan_motion(analysis, 800, 300)
    """

    def __init__(self, config: TracerConfig = DEFAULT_CONFIG):
        self.config = config
        self.walker = StrokeWalker.from_config(config)
        self.solver = StrokeOrderSolver.from_config(config)
        self.cleanup = CleanupPipeline.create_default(config)

    def trace_pixels(self, rgba: np.ndarray, original_size: tuple[int, int] | None = None,
                     scale: float = 1.0) -> SignatureAnalysis:
        """Trace an RGBA pixel buffer already at processing resolution.

        Args:
            rgba: uint8 array of shape (height, width, 4). Not modified.
            original_size: (width, height) of the source image; defaults to
                the buffer's own size.
            scale: Factor the source was resized by, for the notes.

        Returns:
            SignatureAnalysis; an empty stroke list for images without ink.

        Raises:
            ValueError: If rgba is not a non-empty RGBA buffer.
        """
        pixels = ensure_rgba(rgba)
        height, width = pixels.shape[:2]
        if original_size is None:
            original_size = (width, height)

        cfg = self.config
        mask = build_despeckled_mask(
            pixels,
            luminance_threshold=cfg.luminance_threshold,
            alpha_threshold=cfg.alpha_threshold,
            min_size=cfg.despeckle_min_size,
        )
        walk = self.walker.walk(mask, pixels)
        ordered = self.solver.order(walk.strokes)
        strokes = self.cleanup.run(ordered, CleanupContext(mask=mask, output_scale=cfg.output_scale))

        analysis = SignatureAnalysis(
            strokes=strokes,
            metadata=AnalysisMetadata(
                original_size=(int(original_size[0]), int(original_size[1])),
                notes=build_notes(scale, walk.truncated),
                truncated=walk.truncated,
            ),
        )
        _logger.info("Traced %dx%d image: %d raw -> %d final strokes, %d points%s",
                     width, height, len(walk.strokes), len(strokes), analysis.point_count(),
                     " (truncated)" if walk.truncated else "")
        return analysis

    def trace_image(self, source: ImageSource, max_width: int | None = None) -> SignatureAnalysis:
        """Decode an image and trace it.

        Args:
            source: File path, encoded bytes, or a binary file object.
            max_width: Processing width cap; defaults to the config's.

        Raises:
            ValueError: If the image cannot be decoded.
        """
        loaded = load_rgba(source, max_width=max_width or self.config.max_process_width)
        return self.trace_pixels(loaded.pixels, loaded.original_size, loaded.scale)

    def plan_motion(self, analysis: SignatureAnalysis | Mapping[str, Any],
                    width: float, height: float,
                    style: HandwritingStyle | Mapping[str, Any] | str | None = None,
                    duration_ms: float | None = None) -> list[StrokePath]:
        """Time an analysis on a canvas, optionally stretched to a duration.

        Args:
            analysis: A SignatureAnalysis or its to_dict() form.
            width: Canvas width in pixels.
            height: Canvas height in pixels.
            style: Style, overrides mapping, or preset name.
            duration_ms: When given, rescale the plan to end at this time.

        Raises:
            ValueError: If the analysis is malformed, the canvas size is
                not positive, or duration_ms is not positive.
        """
        if not isinstance(analysis, SignatureAnalysis):
            analysis = SignatureAnalysis.from_dict(analysis)
        paths = generate_motion_plan(analysis, width, height, style)
        if duration_ms is not None:
            paths = rescale_paths(paths, duration_ms)
        return paths
