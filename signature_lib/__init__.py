"""Signature tracing package.

Converts a raster image of a handwritten signature into time-ordered vector
strokes, then derives a timed pen-motion plan from those strokes.

Architecture Overview:
    Tracing runs as a single synchronous pipeline per image:

    - analysis.mask builds and despeckles the ink mask
    - analysis.walker walks the mask into raw centerline strokes
    - ordering reconstructs writing order and stroke direction
    - processing cleans, simplifies and validates the ordered strokes
    - motion turns the result into timed StrokePaths for a renderer

The package is organized into the following modules:
    domain: Value objects (RawPoint, Stroke, SignatureAnalysis,
        HandwritingStyle, PhysicsPoint, StrokePath).
    analysis: Mask building and the stroke walker.
    ordering: Stroke order solving.
    processing: Stroke cleanup pipeline.
    motion: Motion planning and duration rescaling.
    utils: Geometry helpers, image decoding and logging setup.
    api: SignatureService, the entry point for the CLI and web app.
    web: Flask JSON API.
    cli: ``signature-trace`` command.

Example usage:
    Trace and plan::

        from signature_lib import SignatureService

        service = SignatureService()
        analysis = service.trace_image('signature.png')
        paths = service.plan_motion(analysis, 800, 300, style='flowing_dynamic')

    Tune the tracer::

        from signature_lib import SignatureService, TracerConfig

        service = SignatureService(TracerConfig(merge_distance=200))

Attributes:
    __version__ (str): Package version string.
    __all__ (list): List of public symbols exported by this package.
"""

from .api import SignatureService
from .config import DEFAULT_CONFIG, TracerConfig
from .domain import (
    DEFAULT_STYLE,
    STYLE_PRESETS,
    AnalysisMetadata,
    HandwritingStyle,
    PhysicsPoint,
    RawPoint,
    SignatureAnalysis,
    Stroke,
    StrokePath,
    resolve_style,
)
from .motion import generate_motion_plan, rescale_paths

__all__ = [
    # Domain objects
    'RawPoint', 'Stroke', 'AnalysisMetadata', 'SignatureAnalysis',
    'HandwritingStyle', 'PhysicsPoint', 'StrokePath',
    'DEFAULT_STYLE', 'STYLE_PRESETS', 'resolve_style',
    # Configuration
    'TracerConfig', 'DEFAULT_CONFIG',
    # Pipeline
    'generate_motion_plan', 'rescale_paths',
    # Services
    'SignatureService',
]

__version__ = '1.0.0'
