"""Tuning constants for signature tracing.

This module centralizes the thresholds used by every stage of the tracing
pipeline:
    - Mask building and despeckling
    - The centerline stroke walker
    - Stroke order solving
    - Stroke cleanup (merge, smooth, jitter, simplify, coverage)

The values were tuned by eye on scanned and photographed signatures. They
are kept as named module constants so callers can read them, and bundled
into TracerConfig so a single run can override any subset:

    from signature_lib.config import TracerConfig

    config = TracerConfig(merge_distance=200, coverage_ratio=0.6)

All distances in the "units" space are on the normalized 0-10000 scale
unless the name says px.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

# ---------------------------------------------------------------------------
# Coordinate space
# ---------------------------------------------------------------------------

# Normalized coordinate range; x/y/z of every RawPoint live in [0, OUTPUT_SCALE]
OUTPUT_SCALE = 10000

# Images wider than this are downscaled before tracing
MAX_PROCESS_WIDTH = 1200

# ---------------------------------------------------------------------------
# Mask builder
# ---------------------------------------------------------------------------

# Pixel is ink when 0.299R + 0.587G + 0.114B is below this (0-255 channels)
INK_LUMINANCE_THRESHOLD = 200

# ...and its alpha is above this
INK_ALPHA_THRESHOLD = 50

# Connected components smaller than this (4-connectivity) are noise
DESPECKLE_MIN_SIZE = 20

# ---------------------------------------------------------------------------
# Stroke walker
# ---------------------------------------------------------------------------

# Radius of the disk of ink consumed at every walker step (~7px diameter)
PEN_RADIUS = 3

# Half-size of the window searched for the next ink centroid
SEARCH_RADIUS = 5

# Longest ray cast when estimating local stroke thickness
MAX_RAY_LENGTH = 20

# Darkness floor used when sampling opacity
MIN_DARKNESS = 0.1

# Termination caps for the seed scan and for a single stroke walk
MAX_STROKES = 10000
MAX_STEPS_PER_STROKE = 10000

# Raw strokes with fewer points than this are dropped as noise
MIN_RAW_POINTS = 4

# ---------------------------------------------------------------------------
# Stroke order solver
# ---------------------------------------------------------------------------

# Underline detection: wider than this share of the drawing...
DECORATION_MIN_WIDTH_RATIO = 0.35
# ...centroid below this share of the drawing height...
DECORATION_MIN_LOW_RATIO = 0.65
# ...and wider than tall by this factor
DECORATION_MIN_FLATNESS = 2.5

# Biased cost: candidates whose centroid is this far left of the chain end
# are "backward" jumps
BACKWARD_MARGIN = 500
# Backward jumps shorter than this (units^2) are not penalized
BACKWARD_MIN_DIST_SQ = 2500
# Multiplier applied to backward jumps
BACKWARD_PENALTY = 5.0
# Cost added per unit of centroid y difference
VERTICAL_PENALTY = 5.0

# Scoring: a transition moving left by more than this is a regression...
REGRESSION_STEP = 100
# ...and costs this much on top of its distance
REGRESSION_PENALTY = 50

# The biased order is kept unless it scores this many times the neutral one
SCORE_MARGIN = 1.3

# ---------------------------------------------------------------------------
# Stroke cleanup
# ---------------------------------------------------------------------------

# Strokes whose end/start gap is below this are one pen-down stroke
MERGE_DISTANCE = 300

# 3-tap smoothing kernel (previous, current, next)
SMOOTHING_WEIGHTS = (0.1, 0.8, 0.1)

# Consecutive points closer than this (units^2) are duplicates
DEDUP_DIST_SQ = 100

# Neighborhood (cells) searched for ink when checking a point is on the mask
ON_INK_RADIUS = 2

# Jitter spikes: both adjacent segments shorter than this
JITTER_SEGMENT = 50
JITTER_PASSES = 2

# Simplifier keeps a point when its squared deviation exceeds this
SIMPLIFY_DEVIATION_SQ = 30

# Coverage validation samples every this many processing pixels...
COVERAGE_STEP_PX = 2
# ...and requires this share of samples to land on ink
COVERAGE_RATIO = 0.55

# Strokes shorter than this are dropped during cleanup
MIN_CLEAN_POINTS = 3


@dataclass(frozen=True)
class TracerConfig:
    """Resolved tuning values for one tracing run.

    Every field defaults to the module constant of the same meaning, so a
    bare ``TracerConfig()`` reproduces the reference behavior.
    """
    output_scale: int = OUTPUT_SCALE
    max_process_width: int = MAX_PROCESS_WIDTH

    luminance_threshold: float = INK_LUMINANCE_THRESHOLD
    alpha_threshold: int = INK_ALPHA_THRESHOLD
    despeckle_min_size: int = DESPECKLE_MIN_SIZE

    pen_radius: int = PEN_RADIUS
    search_radius: int = SEARCH_RADIUS
    max_ray_length: int = MAX_RAY_LENGTH
    min_darkness: float = MIN_DARKNESS
    max_strokes: int = MAX_STROKES
    max_steps_per_stroke: int = MAX_STEPS_PER_STROKE
    min_raw_points: int = MIN_RAW_POINTS

    decoration_min_width_ratio: float = DECORATION_MIN_WIDTH_RATIO
    decoration_min_low_ratio: float = DECORATION_MIN_LOW_RATIO
    decoration_min_flatness: float = DECORATION_MIN_FLATNESS
    backward_margin: float = BACKWARD_MARGIN
    backward_min_dist_sq: float = BACKWARD_MIN_DIST_SQ
    backward_penalty: float = BACKWARD_PENALTY
    vertical_penalty: float = VERTICAL_PENALTY
    regression_step: float = REGRESSION_STEP
    regression_penalty: float = REGRESSION_PENALTY
    score_margin: float = SCORE_MARGIN

    merge_distance: float = MERGE_DISTANCE
    smoothing_weights: tuple[float, float, float] = SMOOTHING_WEIGHTS
    dedup_dist_sq: float = DEDUP_DIST_SQ
    on_ink_radius: int = ON_INK_RADIUS
    jitter_segment: float = JITTER_SEGMENT
    jitter_passes: int = JITTER_PASSES
    simplify_deviation_sq: float = SIMPLIFY_DEVIATION_SQ
    coverage_step_px: float = COVERAGE_STEP_PX
    coverage_ratio: float = COVERAGE_RATIO
    min_clean_points: int = MIN_CLEAN_POINTS

    def with_overrides(self, **overrides) -> TracerConfig:
        """Return a copy with the given fields replaced.

        Raises:
            ValueError: If an override names an unknown field.
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown tracer settings: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)


DEFAULT_CONFIG = TracerConfig()
