"""Module with a data class object which represents a reconstructed TPC track."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["Track"]


@dataclass(eq=False)
class Track(DataBase):
    """Reconstructed TPC track trajectory.

    Attributes
    ----------
    id : int
        Index of the track in the list
    points : np.ndarray
        (N, 3) Ordered trajectory points in detector coordinates (cm)
    valid : np.ndarray
        (N) Validity flag of each trajectory point
    directions : np.ndarray
        (N, 3) Direction of the trajectory at each point. If not provided,
        it is estimated from consecutive valid points.
    """

    id: int = -1
    points: np.ndarray = None
    valid: np.ndarray = None
    directions: np.ndarray = None

    # Variable-length attributes
    _var_length_attrs = (
        ("points", (3, np.float64)),
        ("valid", bool),
        ("directions", (3, np.float64)),
    )

    def __post_init__(self):
        """Gives the validity mask a default value matching the points."""
        super().__post_init__()
        if not len(self.valid) and len(self.points):
            self.valid = np.ones(len(self.points), dtype=bool)

        assert len(self.valid) == len(self.points), (
            "Must provide one validity flag per trajectory point. "
            f"Got {len(self.valid)}, but expected {len(self.points)}."
        )
        assert not len(self.directions) or len(self.directions) == len(
            self.points
        ), "Must provide one direction per trajectory point."

    @property
    def num_points(self):
        """Number of trajectory points (valid or not)."""
        return len(self.points)

    @property
    def valid_points(self):
        """Trajectory points which are flagged as valid.

        Returns
        -------
        np.ndarray
            (N_v, 3) Valid trajectory points
        """
        return self.points[self.valid]

    @property
    def start_point(self):
        """Start point of the track.

        Returns
        -------
        np.ndarray
            (3) First trajectory point
        """
        return self.points[0]

    @property
    def end_point(self):
        """End point of the track.

        Returns
        -------
        np.ndarray
            (3) Last trajectory point
        """
        return self.points[-1]

    @property
    def length(self):
        """Total length of the track, summed over consecutive valid points.

        Returns
        -------
        float
            Track length in cm
        """
        points = self.valid_points
        if len(points) < 2:
            return 0.0

        return float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))

    @property
    def valid_directions(self):
        """Unit direction of the trajectory at each valid point.

        If no directions were provided, the direction at a point is the unit
        vector pointing to the next valid point (the last point reuses the
        direction of the last segment). Zero-length segments yield a null
        direction.

        Returns
        -------
        np.ndarray
            (N_v, 3) Directions at each valid point
        """
        if len(self.directions):
            return self.directions[self.valid]

        points = self.valid_points
        if len(points) < 2:
            return np.zeros((len(points), 3), dtype=np.float64)

        steps = np.diff(points, axis=0)
        norms = np.linalg.norm(steps, axis=1)
        dirs = np.zeros_like(steps)
        nonzero = norms > 0.0
        dirs[nonzero] = steps[nonzero] / norms[nonzero, None]

        return np.vstack((dirs, dirs[-1:]))

    def point_at_fraction(self, frac):
        """Point located at a fraction of the track arc length.

        Parameters
        ----------
        frac : float
            Fraction of the arc length, measured from the start point

        Returns
        -------
        np.ndarray
            (3) Interpolated trajectory point
        """
        points = self.valid_points
        if len(points) == 0:
            return np.copy(self.start_point)
        if len(points) == 1:
            return np.copy(points[0])

        # Cumulative arc length at each valid point
        seg_lengths = np.linalg.norm(np.diff(points, axis=0), axis=1)
        cum_lengths = np.concatenate(([0.0], np.cumsum(seg_lengths)))
        total = cum_lengths[-1]
        if total <= 0.0:
            return np.copy(points[0])

        target = min(max(frac, 0.0), 1.0) * total
        idx = int(np.searchsorted(cum_lengths, target, side="right")) - 1
        idx = min(max(idx, 0), len(seg_lengths) - 1)
        if seg_lengths[idx] <= 0.0:
            return np.copy(points[idx])

        alpha = (target - cum_lengths[idx]) / seg_lengths[idx]

        return points[idx] + alpha * (points[idx + 1] - points[idx])
