"""Unit tests for signature_lib.analysis.walker.

Tests the BoundedLoop budget and the StrokeWalker on simple synthetic
masks: a blank mask, a horizontal bar, and budget exhaustion.
"""

import statistics
import unittest

import numpy as np
import pytest

from signature_lib.analysis.mask import CONSUMED, INK, build_despeckled_mask
from signature_lib.analysis.walker import BoundedLoop, StrokeWalker


def bar_image(width=260, height=60, rect=(20, 20, 220, 26), color=(0, 0, 0, 255)):
    img = np.full((height, width, 4), 255, dtype=np.uint8)
    x0, y0, x1, y1 = rect
    img[y0:y1, x0:x1] = color
    return img


class TestBoundedLoop(unittest.TestCase):
    """Tests for the iteration budget."""

    def test_runs_to_cap(self):
        budget = BoundedLoop(3)
        seen = [i for i in budget]
        self.assertEqual(seen, [1, 2, 3])
        self.assertTrue(budget.exhausted)
        self.assertEqual(budget.count, 3)

    def test_break_is_not_exhaustion(self):
        budget = BoundedLoop(10)
        for i in budget:
            if i == 4:
                break
        self.assertFalse(budget.exhausted)
        self.assertEqual(budget.count, 4)

    def test_zero_cap(self):
        budget = BoundedLoop(0)
        self.assertEqual(list(budget), [])
        self.assertTrue(budget.exhausted)


class TestStrokeWalkerBlank(unittest.TestCase):
    """An all-background mask is a valid, empty result."""

    def test_blank_mask_yields_no_strokes(self):
        mask = np.zeros((40, 60), dtype=np.uint8)
        result = StrokeWalker().walk(mask)
        self.assertEqual(result.strokes, [])
        self.assertFalse(result.truncated)

    def test_empty_mask_shape(self):
        mask = np.zeros((0, 0), dtype=np.uint8)
        self.assertEqual(StrokeWalker().walk(mask).strokes, [])


class TestStrokeWalkerBar(unittest.TestCase):
    """Walking a 200x6 bar in a 260x60 image."""

    def setUp(self):
        self.rgba = bar_image()
        self.mask = build_despeckled_mask(self.rgba)
        self.result = StrokeWalker().walk(self.mask, self.rgba)
        self.longest = max(self.result.strokes, key=len)

    def test_produces_strokes(self):
        self.assertGreaterEqual(len(self.result.strokes), 1)
        self.assertFalse(self.result.truncated)

    def test_every_stroke_has_more_than_three_points(self):
        for stroke in self.result.strokes:
            self.assertGreater(len(stroke), 3)

    def test_coordinates_in_range(self):
        for stroke in self.result.strokes:
            for p in stroke:
                self.assertGreaterEqual(p.x, 0)
                self.assertLessEqual(p.x, 10000)
                self.assertGreaterEqual(p.y, 0)
                self.assertLessEqual(p.y, 10000)

    def test_walk_runs_along_the_bar(self):
        span = abs(self.longest.end.x - self.longest.start.x)
        bar_len = 200 / 260 * 10000
        self.assertAlmostEqual(span, bar_len, delta=bar_len * 0.1)

    def test_thickness_matches_pen_radius(self):
        expected = 2 * 3 / 260 * 10000
        median_z = statistics.median(p.z for p in self.longest)
        self.assertAlmostEqual(median_z, expected, delta=expected * 0.15)

    def test_opacity_of_black_ink(self):
        for p in self.longest:
            self.assertEqual(p.a, 1.0)

    def test_all_ink_consumed(self):
        self.assertEqual(int((self.mask == INK).sum()), 0)
        self.assertGreater(int((self.mask == CONSUMED).sum()), 0)


class TestStrokeWalkerSampling:
    """Opacity and thickness sampling."""

    def test_gray_ink_opacity(self):
        rgba = bar_image(color=(128, 128, 128, 255))
        mask = build_despeckled_mask(rgba)
        result = StrokeWalker().walk(mask, rgba)
        assert result.strokes
        # darkness 1 - 128/255 = 0.498
        assert all(p.a == 0.5 for s in result.strokes for p in s)

    def test_no_pixels_means_no_opacity(self):
        mask = build_despeckled_mask(bar_image())
        result = StrokeWalker().walk(mask)
        assert all(p.a is None for s in result.strokes for p in s)

    @pytest.mark.parametrize("cap", [5, 20])
    def test_solid_ink_reports_ray_cap_not_unit_radius(self, cap):
        """No ray reaching background within the cap measures as the cap."""
        mask = np.full((100, 100), INK, dtype=np.uint8)
        walker = StrokeWalker(max_ray_length=cap)
        assert walker._measure_radius(mask, 50, 50) == cap

    def test_consumed_ink_counts_for_thickness(self):
        mask = np.zeros((20, 20), dtype=np.uint8)
        mask[5:15, 5:15] = CONSUMED
        mask[10, 10] = INK
        assert StrokeWalker()._measure_radius(mask, 10, 10) == 5


class TestStrokeWalkerBudgets:
    """Iteration caps stop the walk and report truncation."""

    def test_step_cap_truncates(self):
        rgba = bar_image()
        mask = build_despeckled_mask(rgba)
        result = StrokeWalker(max_steps=5).walk(mask, rgba)
        assert result.truncated
        assert len(result.strokes[0]) == 5

    def test_seed_cap_truncates_when_ink_remains(self):
        rgba = np.full((50, 100, 4), 255, dtype=np.uint8)
        rgba[5:11, 5:80] = (0, 0, 0, 255)
        rgba[30:36, 5:80] = (0, 0, 0, 255)
        mask = build_despeckled_mask(rgba)
        result = StrokeWalker(max_strokes=1).walk(mask, rgba)
        assert result.truncated
        assert len(result.strokes) <= 1
        assert (mask[30:36, 5:80] == INK).all()

    @pytest.mark.parametrize("min_points", [4, 50])
    def test_short_walks_dropped(self, min_points):
        rgba = bar_image()
        mask = build_despeckled_mask(rgba)
        result = StrokeWalker(min_points=min_points).walk(mask, rgba)
        assert all(len(s) >= min_points for s in result.strokes)


if __name__ == '__main__':
    unittest.main()
