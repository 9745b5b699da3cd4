"""Unit tests for signature_lib.motion.planner.

Most tests plan on a 10000x10000 canvas so one normalized unit is one
canvas pixel and expected timings can be written down directly.
"""

import math
import unittest

import pytest

from signature_lib.domain.geometry import AnalysisMetadata, RawPoint, SignatureAnalysis, Stroke
from signature_lib.motion.planner import (
    CanvasPoint,
    filter_redundant_points,
    generate_motion_plan,
    natural_duration,
    pen_lift_ms,
    rescale_paths,
)

CANVAS = 10000


def analysis_of(*strokes):
    """SignatureAnalysis from lists of (x, y) or RawPoint."""
    built = []
    for stroke in strokes:
        built.append(Stroke([p if isinstance(p, RawPoint) else RawPoint(*p) for p in stroke]))
    return SignatureAnalysis(strokes=built, metadata=AnalysisMetadata(original_size=(100, 100)))


class TestFilterRedundantPoints(unittest.TestCase):
    """Sub-pixel point filtering."""

    def test_drops_close_points(self):
        points = [CanvasPoint(0, 0), CanvasPoint(0.1, 0), CanvasPoint(0.2, 0), CanvasPoint(5, 0)]
        result = filter_redundant_points(points)
        self.assertEqual([(p.x, p.y) for p in result], [(0, 0), (5, 0)])

    def test_final_point_preserved(self):
        points = [CanvasPoint(0, 0), CanvasPoint(5, 0), CanvasPoint(5.1, 0)]
        result = filter_redundant_points(points)
        self.assertEqual(result[-1], points[-1])
        self.assertEqual(len(result), 3)

    def test_single_point(self):
        self.assertEqual(filter_redundant_points([CanvasPoint(1, 1)]), [CanvasPoint(1, 1)])


class TestPenLift(unittest.TestCase):
    """Pen lift timing between strokes."""

    def test_pen_lift_ms(self):
        self.assertEqual(pen_lift_ms(30), 0.0)
        self.assertAlmostEqual(pen_lift_ms(31), 65.5)
        self.assertEqual(pen_lift_ms(1000), 300.0)

    def test_gap_of_29px_adds_nothing(self):
        paths = generate_motion_plan(
            analysis_of([(0, 0), (100, 0)], [(129, 0), (229, 0)]), CANVAS, CANVAS)
        self.assertAlmostEqual(paths[0].end_time, 120.0, places=6)
        self.assertAlmostEqual(paths[1].start_time, 120.0, places=6)

    def test_gap_of_31px_adds_lift(self):
        paths = generate_motion_plan(
            analysis_of([(0, 0), (100, 0)], [(131, 0), (231, 0)]), CANVAS, CANVAS)
        self.assertAlmostEqual(paths[1].start_time - paths[0].end_time, 65.5, places=6)


class TestSegmentTiming(unittest.TestCase):
    """Segment durations and inertia."""

    def test_default_speed(self):
        paths = generate_motion_plan(analysis_of([(0, 0), (100, 0), (300, 0)]), CANVAS, CANVAS)
        times = [p.time for p in paths[0].points]
        self.assertEqual(times[0], 0.0)
        self.assertAlmostEqual(times[1], 120.0, places=6)
        self.assertAlmostEqual(times[2], 360.0, places=6)

    def test_right_angle_with_inertia(self):
        stroke = [(0, 0), (100, 0), (100, 100)]
        plain = generate_motion_plan(analysis_of(stroke), CANVAS, CANVAS)
        slowed = generate_motion_plan(analysis_of(stroke), CANVAS, CANVAS,
                                      style={'inertia_factor': 1.0})
        self.assertAlmostEqual(plain[0].end_time, 240.0, places=6)
        self.assertAlmostEqual(slowed[0].end_time, 120.0 + 120.0 * (1 + math.pi / 2), places=6)

    def test_straight_line_has_no_inertia_penalty(self):
        stroke = [(0, 0), (100, 0), (200, 0)]
        paths = generate_motion_plan(analysis_of(stroke), CANVAS, CANVAS,
                                     style={'inertia_factor': 3.0})
        self.assertAlmostEqual(paths[0].end_time, 240.0, places=6)


class TestTremor(unittest.TestCase):
    """Time-correlated tremor displacement."""

    STYLE = {'micro_tremor_amp_px': 1, 'micro_tremor_freq_hz': 1, 'base_ms_per_px': 1}

    def test_full_period_returns_to_same_offset(self):
        paths = generate_motion_plan(analysis_of([(0, 0), (1000, 0)]), CANVAS, CANVAS,
                                     style=self.STYLE)
        p0, p1 = paths[0].points
        self.assertAlmostEqual(p1.time, 1000.0, places=6)
        self.assertAlmostEqual(p1.x - 1000.0, p0.x - 0.0, places=6)
        self.assertAlmostEqual(p1.y, p0.y, places=6)
        self.assertAlmostEqual(p0.y, 1.0, places=9)

    def test_quarter_period(self):
        paths = generate_motion_plan(analysis_of([(0, 0), (250, 0)]), CANVAS, CANVAS,
                                     style=self.STYLE)
        p1 = paths[0].points[1]
        self.assertAlmostEqual(p1.x, 251.0, places=6)
        self.assertAlmostEqual(p1.y, 0.0, places=6)

    def test_disabled_by_zero_frequency(self):
        style = dict(self.STYLE, micro_tremor_freq_hz=0)
        paths = generate_motion_plan(analysis_of([(0, 0), (250, 0)]), CANVAS, CANVAS, style=style)
        self.assertEqual((paths[0].points[0].x, paths[0].points[0].y), (0.0, 0.0))


class TestWidthAndOpacity(unittest.TestCase):
    """Per-point line width and opacity."""

    def test_thickness_scales_to_canvas(self):
        stroke = [RawPoint(0, 0, z=100.0, a=0.3), RawPoint(5000, 0, z=200.0)]
        paths = generate_motion_plan(analysis_of(stroke), 500, 200)
        p0, p1 = paths[0].points
        self.assertAlmostEqual(p0.line_width, 5.0)
        self.assertAlmostEqual(p1.line_width, 10.0)
        self.assertEqual(p0.opacity, 0.3)
        self.assertEqual(p1.opacity, 1.0)

    def test_fallback_width(self):
        paths = generate_motion_plan(analysis_of([(0, 0), (5000, 0)]), 500, 200)
        self.assertEqual(paths[0].points[0].line_width, 1.5)

    def test_pressure_scale(self):
        stroke = [RawPoint(0, 0, z=100.0), RawPoint(5000, 0)]
        paths = generate_motion_plan(analysis_of(stroke), 500, 200,
                                     style={'pressure_scale': 2})
        self.assertAlmostEqual(paths[0].points[0].line_width, 10.0)
        self.assertAlmostEqual(paths[0].points[1].line_width, 3.0)


class TestGenerateMotionPlan:
    """Plan structure and invariants."""

    @pytest.fixture
    def signature(self):
        return analysis_of(
            [(500, 5000), (900, 4000), (1400, 5200), (1800, 4100)],
            [(2500, 4800), (2600, 4700), (3100, 5600)],
            [(2550, 4800), (2560, 4810)],
            [(4000, 6000), (6000, 6100), (8000, 5900)],
        )

    @pytest.mark.parametrize("style", [None, 'smooth_cursive', 'rigid_formal', 'flowing_dynamic'])
    def test_timing_is_monotonic(self, signature, style):
        paths = generate_motion_plan(signature, 800, 300, style=style)
        assert len(paths) == 4
        for path in paths:
            assert path.points
            times = [p.time for p in path.points]
            assert times == sorted(times)
            assert path.start_time == path.points[0].time
            assert path.end_time == path.points[-1].time
        for prev, nxt in zip(paths, paths[1:]):
            assert prev.end_time <= nxt.start_time

    def test_short_strokes_skipped_ids_keep_index(self):
        analysis = analysis_of([(0, 0)], [(0, 0), (100, 0)])
        paths = generate_motion_plan(analysis, 800, 300)
        assert [p.id for p in paths] == ['stroke-1']

    def test_empty_analysis(self):
        assert generate_motion_plan(analysis_of(), 800, 300) == []

    def test_malformed_style_falls_back_to_defaults(self, signature):
        default = generate_motion_plan(signature, 800, 300)
        odd = generate_motion_plan(signature, 800, 300, style={
            'base_ms_per_px': 'fast', 'inertia_factor': -3, 'pressure_scale': None,
            'unknown_knob': 12,
        })
        assert [p.to_dict() for p in odd] == [p.to_dict() for p in default]

    def test_unknown_preset_uses_defaults(self, signature):
        default = generate_motion_plan(signature, 800, 300)
        odd = generate_motion_plan(signature, 800, 300, style='no_such_style')
        assert natural_duration(odd) == natural_duration(default)

    @pytest.mark.parametrize("size", [(0, 300), (800, 0), (-5, 300)])
    def test_bad_canvas_rejected(self, signature, size):
        with pytest.raises(ValueError):
            generate_motion_plan(signature, *size)

    def test_pure_function(self, signature):
        first = generate_motion_plan(signature, 800, 300, style='smooth_cursive')
        second = generate_motion_plan(signature, 800, 300, style='smooth_cursive')
        assert [p.to_dict() for p in first] == [p.to_dict() for p in second]


class TestRescalePaths(unittest.TestCase):
    """Linear duration rescaling."""

    def setUp(self):
        self.paths = generate_motion_plan(
            analysis_of([(0, 0), (100, 0)], [(500, 0), (600, 0)]), CANVAS, CANVAS)

    def test_doubles_every_timestamp(self):
        natural = natural_duration(self.paths)
        scaled = rescale_paths(self.paths, natural * 2)
        self.assertAlmostEqual(natural_duration(scaled), natural * 2)
        for orig, new in zip(self.paths, scaled):
            self.assertAlmostEqual(new.start_time, orig.start_time * 2)
            self.assertEqual(new.start_time, new.points[0].time)
            for p, q in zip(orig.points, new.points):
                self.assertAlmostEqual(q.time, p.time * 2)
                self.assertEqual((q.x, q.y), (p.x, p.y))

    def test_original_untouched(self):
        before = [p.to_dict() for p in self.paths]
        rescale_paths(self.paths, 5000)
        self.assertEqual([p.to_dict() for p in self.paths], before)

    def test_empty_and_zero_duration(self):
        self.assertEqual(rescale_paths([], 1000), [])
        frozen = generate_motion_plan(analysis_of([(0, 0), (0, 0)]), CANVAS, CANVAS)
        self.assertEqual(natural_duration(frozen), 0.0)
        self.assertEqual(rescale_paths(frozen, 1000)[0].end_time, 0.0)

    def test_non_positive_target_rejected(self):
        with self.assertRaises(ValueError):
            rescale_paths(self.paths, 0)


if __name__ == '__main__':
    unittest.main()
