"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import numpy as np
import pytest

from crtkit.data import CRTHit, Track
from crtkit.geo import Geometry


@pytest.fixture(name="geo")
def fixture_geo():
    """Two drift volumes on either side of a cathode at x = 0.

    The negative volume drifts towards -x, the positive one towards +x. The
    drift velocity is 0.1 cm/us.
    """
    return Geometry(
        name="toy",
        tag="toy_v1",
        version="1",
        tpc={
            "boundaries": [
                [[-100.0, 0.0], [-100.0, 100.0], [-100.0, 100.0]],
                [[0.0, 100.0], [-100.0, 100.0], [-100.0, 100.0]],
            ],
            "drift_signs": [-1, 1],
            "drift_velocity": 0.1,
        },
    )


@pytest.fixture(name="track")
def fixture_track():
    """Vertical track in the positive drift volume, at x = 50 and z = 0.

    It goes from y = -50 to y = 50 and is 100 cm long.
    """
    points = np.zeros((11, 3))
    points[:, 0] = 50.0
    points[:, 1] = np.linspace(-50.0, 50.0, 11)

    return Track(id=3, points=points)


def make_hit(center, time=10.0, width=(1.0, 1.0, 1.0), total_pe=100.0, **kwargs):
    """Builds a CRT hit at a given trigger-relative time (us)."""
    return CRTHit(
        center=np.asarray(center, dtype=np.float64),
        width=np.asarray(width, dtype=np.float64),
        total_pe=total_pe,
        ts1_ns=time * 1e3,
        ts0_ns=time * 1e3,
        **kwargs,
    )


@pytest.fixture(name="hit_factory")
def fixture_hit_factory():
    """Provides the CRT hit builder to the tests."""
    return make_hit
