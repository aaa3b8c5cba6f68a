"""Tests for the TPC drift volume geometry."""

import numpy as np
import pytest

from crtkit.geo import TPCChamber, TPCDetector


class TestTPCChamber:
    """Properties of a single drift volume."""

    def test_drift_limits(self):
        chamber = TPCChamber([0, -1, -1], [100, 1, 1], drift_sign=1)
        assert chamber.drift_limits == (0.0, 100.0)

        chamber = TPCChamber([-1, -100, -1], [1, 0, 1], drift_sign=-1, drift_axis=1)
        assert chamber.drift_limits == (-100.0, 0.0)

    def test_invalid_sign(self):
        with pytest.raises(AssertionError):
            TPCChamber([0, 0, 0], [1, 1, 1], drift_sign=0)


class TestTPCDetector:
    """Queries over a set of drift volumes."""

    def test_construction(self, geo):
        tpc = geo.tpc
        assert len(tpc) == 2
        assert tpc.drift_axis == 0
        np.testing.assert_allclose(tpc.lower, [-100, -100, -100])
        np.testing.assert_allclose(tpc.upper, [100, 100, 100])

    def test_bad_boundaries(self):
        with pytest.raises(AssertionError):
            TPCDetector([[0, 1], [0, 1], [0, 1]], [1], 0.1)
        with pytest.raises(AssertionError):
            TPCDetector([[[0, 1], [0, 1], [0, 1]]], [1, -1], 0.1)

    def test_chamber_id(self, geo):
        assert geo.get_chamber_id(np.array([-50.0, 0.0, 0.0])) == 0
        assert geo.get_chamber_id(np.array([50.0, 0.0, 0.0])) == 1

        # Points outside of the detector go to the closest volume
        assert geo.get_chamber_id(np.array([150.0, 0.0, 0.0])) == 1
        assert geo.get_chamber_id(np.array([-150.0, 300.0, 0.0])) == 0

    def test_drift_direction(self, geo):
        pos = np.array([[10.0, 0.0, 0.0], [90.0, 10.0, 0.0]])
        neg = np.array([[-10.0, 0.0, 0.0], [-90.0, 10.0, 0.0]])
        assert geo.drift_direction(pos) == 1
        assert geo.drift_direction(neg) == -1

        # A track crossing the cathode is ambiguous
        assert geo.drift_direction(np.vstack((pos, neg))) == 0
        assert geo.drift_direction(np.empty((0, 3))) == 0

    def test_drift_limits(self, geo):
        pos = np.array([[10.0, 0.0, 0.0], [90.0, 10.0, 0.0]])
        assert geo.drift_limits(pos) == (0.0, 100.0)

        both = np.array([[-10.0, 0.0, 0.0], [90.0, 10.0, 0.0]])
        assert geo.drift_limits(both) == (-100.0, 100.0)
