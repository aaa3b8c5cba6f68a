"""Tests for the crtkit.math.geometry closest-approach routines."""

import numpy as np
import pytest

from crtkit.math import (
    box_line_crossing,
    box_line_distance,
    point_line_distance,
    segment_line_distance,
)


def vec(*values):
    return np.array(values, dtype=np.float64)


class TestPointLineDistance:
    """Distance between a point and an infinite line."""

    def test_perpendicular(self):
        assert point_line_distance(vec(0, 5, 0), vec(0, 0, 0), vec(1, 0, 0)) == pytest.approx(5.0)

    def test_direction_norm_irrelevant(self):
        d1 = point_line_distance(vec(3, 4, 2), vec(1, 1, 1), vec(0, 0, 1))
        d2 = point_line_distance(vec(3, 4, 2), vec(1, 1, 1), vec(0, 0, -7))
        assert d1 == pytest.approx(d2)
        assert d1 == pytest.approx(np.sqrt(13.0))

    def test_point_on_line(self):
        assert point_line_distance(vec(2, 2, 2), vec(0, 0, 0), vec(1, 1, 1)) == pytest.approx(0.0, abs=1e-9)

    def test_null_direction(self):
        """A null direction falls back to the distance to the line start."""
        assert point_line_distance(vec(3, 4, 0), vec(0, 0, 0), vec(0, 0, 0)) == pytest.approx(5.0)


class TestSegmentLineDistance:
    """Distance between a segment and an infinite line."""

    def test_skew(self):
        dist = segment_line_distance(vec(0, 0, 0), vec(1, 0, 0), vec(0, 1, 0), vec(0, 1, 1))
        assert dist == pytest.approx(1.0)

    def test_parallel(self):
        dist = segment_line_distance(vec(0, 0, 0), vec(1, 0, 0), vec(0, 2, 0), vec(1, 2, 0))
        assert dist == pytest.approx(2.0)

    def test_clamped_to_segment(self):
        """The closest point of the line lies beyond the segment end."""
        dist = segment_line_distance(vec(0, 0, 0), vec(1, 0, 0), vec(4, 0, -1), vec(4, 0, 1))
        assert dist == pytest.approx(3.0)

    def test_intersecting(self):
        dist = segment_line_distance(vec(-1, 0, 0), vec(1, 0, 0), vec(0, -1, 0), vec(0, 1, 0))
        assert dist == pytest.approx(0.0, abs=1e-9)


class TestBoxLine:
    """Crossing and distance between an axis-aligned box and a line."""

    def test_crossing(self):
        lower, upper = vec(-1, -1, -1), vec(1, 1, 1)
        assert box_line_crossing(lower, upper, vec(-5, 0, 0), vec(5, 0, 0))
        assert box_line_crossing(lower, upper, vec(-5, -5, -5), vec(5, 5, 5))
        assert not box_line_crossing(lower, upper, vec(-5, 2, 0), vec(5, 2, 0))
        assert not box_line_crossing(lower, upper, vec(-5, 0, 0), vec(0, 5, 0))

    def test_crossing_outside_segment(self):
        """The line is infinite, the box may lie beyond its defining points."""
        assert box_line_crossing(vec(9, -1, -1), vec(11, 1, 1), vec(0, 0, 0), vec(1, 0, 0))

    def test_crossing_distance_is_zero(self):
        center, width = vec(0, 0, 0), vec(0.5, 10, 10)
        dist = box_line_distance(center, width, vec(-5, 3, 3), vec(5, 3, 3))
        assert dist == 0.0

    def test_outside_distance(self):
        """The hit lies in the y-z plane, the line passes 5 cm above its edge."""
        center, width = vec(0, 0, 0), vec(0.5, 10, 10)
        dist = box_line_distance(center, width, vec(-5, 0, 15), vec(5, 0, 15))
        assert dist == pytest.approx(5.0)

    def test_thin_axis(self):
        """The rectangle is taken transverse to the smallest uncertainty."""
        center, width = vec(0, 0, 0), vec(10, 0.5, 10)
        dist = box_line_distance(center, width, vec(13, -5, 0), vec(13, 5, 0))
        assert dist == pytest.approx(3.0)

    @pytest.mark.parametrize(
        "center, start, end",
        [
            ((0, 0, 0), (-5, 4, 0), (5, 4, 0)),
            ((1, 2, 3), (0, 0, 0), (0, 1, 1)),
            ((50, 150, 0), (51, 50, 0), (51, 40, 0)),
        ],
    )
    def test_zero_width_matches_point(self, center, start, end):
        """A box of null uncertainty reduces to the point distance."""
        center, start, end = vec(*center), vec(*start), vec(*end)
        box_dist = box_line_distance(center, np.zeros(3), start, end)
        point_dist = point_line_distance(center, start, end - start)
        assert box_dist == pytest.approx(point_dist, rel=1e-6)
