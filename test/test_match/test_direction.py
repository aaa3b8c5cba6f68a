"""Tests for the track end direction estimators."""

import numpy as np

from crtkit.data import Track
from crtkit.match.direction import average_directions, endpoint_directions


class TestDirections:
    """Average and endpoint interpolation estimators."""

    def test_average(self, track):
        start_dir, end_dir = average_directions(track, 0.5)
        np.testing.assert_allclose(start_dir, [0.0, -1.0, 0.0])
        np.testing.assert_allclose(end_dir, [0.0, 1.0, 0.0])

    def test_average_too_few_points(self):
        track = Track(points=np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]]))
        start_dir, end_dir = average_directions(track, 0.2)
        np.testing.assert_array_equal(start_dir, np.zeros(3))
        np.testing.assert_array_equal(end_dir, np.zeros(3))

    def test_endpoint(self):
        start, end, mid = np.zeros(3), np.array([0.0, 0.0, 10.0]), np.array([0.0, 0.0, 4.0])
        start_dir, end_dir = endpoint_directions(start, end, mid)
        np.testing.assert_allclose(start_dir, [0.0, 0.0, 1.0])
        np.testing.assert_allclose(end_dir, [0.0, 0.0, -1.0])

    def test_endpoint_degenerate(self):
        """A null direction is left untouched."""
        point = np.ones(3)
        start_dir, _ = endpoint_directions(point, point, point)
        np.testing.assert_array_equal(start_dir, np.zeros(3))
