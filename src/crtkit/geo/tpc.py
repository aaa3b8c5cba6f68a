"""TPC detector geometry classes.

A TPC detector is a collection of box-shaped drift volumes (chambers). Each
chamber drifts ionization electrons along a common drift axis, either towards
the positive (+1) or the negative (-1) end of that axis.
"""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

import numpy as np

from .base import Box

__all__ = ["TPCChamber", "TPCDetector"]


@dataclass
class TPCChamber(Box):
    """Class which holds all properties of an individual drift volume.

    Attributes
    ----------
    drift_sign : int
        Direction in which the electrons drift along the drift axis (+1 or -1)
    drift_axis : int
        Axis along which the electrons drift
    """

    drift_sign: int
    drift_axis: int

    def __init__(
        self,
        lower: np.ndarray,
        upper: np.ndarray,
        drift_sign: int,
        drift_axis: int = 0,
    ):
        """Initialize the drift volume.

        Parameters
        ----------
        lower : np.ndarray
            (3,) Lower bounds of the drift volume
        upper : np.ndarray
            (3,) Upper bounds of the drift volume
        drift_sign : int
            Direction of the electron drift along the drift axis (+1 or -1)
        drift_axis : int, default 0
            Axis along which the electrons drift
        """
        assert drift_sign in (-1, 1), f"Drift sign must be +1 or -1, got {drift_sign}."
        assert drift_axis in (0, 1, 2), f"Drift axis must be 0, 1 or 2, got {drift_axis}."
        super().__init__(lower, upper)
        self.drift_sign = int(drift_sign)
        self.drift_axis = int(drift_axis)

    @property
    def drift_limits(self) -> Tuple[float, float]:
        """Extent of the drift volume along the drift axis.

        Returns
        -------
        Tuple[float, float]
            Lower and upper boundaries along the drift axis
        """
        axis = self.drift_axis
        return float(self.lower[axis]), float(self.upper[axis])


@dataclass
class TPCDetector(Box):
    """Handles all geometry queries for a set of drift volumes.

    Attributes
    ----------
    chambers : List[TPCChamber]
        (N_t) List of drift volumes
    drift_velocity : float
        Electron drift velocity in cm/us
    """

    chambers: List[TPCChamber]
    drift_velocity: float

    def __init__(
        self,
        boundaries: List[List[List[float]]],
        drift_signs: List[int],
        drift_velocity: float,
        drift_axis: int = 0,
    ):
        """Parse the TPC detector configuration.

        Parameters
        ----------
        boundaries : List[List[List[float]]]
            (N_t, 3, 2) Lower/upper boundaries of each drift volume
        drift_signs : List[int]
            (N_t) Drift direction of each drift volume along the drift axis
        drift_velocity : float
            Electron drift velocity in cm/us
        drift_axis : int, default 0
            Axis along which the electrons drift
        """
        # Check the sanity of the configuration
        boundaries = np.asarray(boundaries, dtype=np.float64)
        assert boundaries.ndim == 3 and boundaries.shape[1:] == (3, 2), (
            "The drift volume boundaries must be provided as a "
            f"(N_t, 3, 2) array, got shape {boundaries.shape}."
        )
        assert len(boundaries) == len(drift_signs), (
            "Must provide the drift direction of each drift volume. "
            f"Got {len(drift_signs)}, but expected {len(boundaries)}."
        )
        assert drift_velocity > 0.0, "The drift velocity must be positive."

        # Construct the drift volumes
        self.chambers = []
        for bounds, sign in zip(boundaries, drift_signs):
            self.chambers.append(
                TPCChamber(bounds[:, 0], bounds[:, 1], sign, drift_axis)
            )

        self.drift_velocity = float(drift_velocity)

        # Initialize the underlying all-encompasing box object
        lower = np.min(np.vstack([c.lower for c in self.chambers]), axis=0)
        upper = np.max(np.vstack([c.upper for c in self.chambers]), axis=0)
        super().__init__(lower, upper)

    @property
    def num_chambers(self) -> int:
        """Returns the number of drift volumes in the detector.

        Returns
        -------
        int
            Number of drift volumes, N_t
        """
        return len(self.chambers)

    @property
    def drift_axis(self) -> int:
        """Axis along which the electrons drift."""
        return self.chambers[0].drift_axis

    def __len__(self) -> int:
        return self.num_chambers

    def __getitem__(self, idx: int) -> TPCChamber:
        return self.chambers[idx]

    def __iter__(self) -> Iterator[TPCChamber]:
        return iter(self.chambers)

    def get_chamber_id(self, point: np.ndarray) -> int:
        """Returns the index of the drift volume which contains a point.

        Points outside of all drift volumes are assigned to the closest one.

        Parameters
        ----------
        point : np.ndarray
            (3,) Point coordinates

        Returns
        -------
        int
            Index of the drift volume
        """
        for i, chamber in enumerate(self.chambers):
            if chamber.contains(point):
                return i

        distances = [chamber.distance(point) for chamber in self.chambers]

        return int(np.argmin(distances))

    def get_chamber_ids(self, points: np.ndarray) -> np.ndarray:
        """Returns the index of the drift volume which contains each point.

        Parameters
        ----------
        points : np.ndarray
            (N, 3) Point coordinates

        Returns
        -------
        np.ndarray
            (N) Index of the drift volume of each point
        """
        return np.array([self.get_chamber_id(p) for p in points], dtype=np.int64)

    def drift_direction(self, points: np.ndarray) -> int:
        """Returns the drift direction of a set of points.

        If all the points live in drift volumes which share the same drift
        direction, that direction is returned. If the points span drift
        volumes with opposite drift directions (e.g. a cathode-crossing
        track), the direction is ambiguous and 0 is returned.

        Parameters
        ----------
        points : np.ndarray
            (N, 3) Point coordinates

        Returns
        -------
        int
            Drift direction (+1, -1 or 0)
        """
        if not len(points):
            return 0

        signs = {self.chambers[i].drift_sign for i in np.unique(self.get_chamber_ids(points))}
        if len(signs) != 1:
            return 0

        return signs.pop()

    def drift_limits(self, points: np.ndarray) -> Tuple[float, float]:
        """Returns the extent along the drift axis of the drift volume(s)
        which contain a set of points.

        Parameters
        ----------
        points : np.ndarray
            (N, 3) Point coordinates

        Returns
        -------
        Tuple[float, float]
            Lower and upper boundaries along the drift axis
        """
        if not len(points):
            axis = self.drift_axis
            return float(self.lower[axis]), float(self.upper[axis])

        limits = np.array(
            [self.chambers[i].drift_limits for i in np.unique(self.get_chamber_ids(points))]
        )

        return float(np.min(limits[:, 0])), float(np.max(limits[:, 1]))
