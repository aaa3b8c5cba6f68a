"""Basic detector components shared across multiple subsystems.

This currently handles:
- :class:`Box` which corresponds to box-shaped detector volumes.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np

__all__ = ["Box"]


@dataclass
class Box:
    """Class which holds all methods associated with a box-shaped component.

    Attributes
    ----------
    boundaries : np.ndarray
        (3, 2) Box boundaries
        - 3 is the number of dimensions
        - 2 corresponds to the lower/upper boundaries along each axis
    """

    boundaries: np.ndarray

    def __init__(self, lower: np.ndarray, upper: np.ndarray):
        """Initialize the box object.

        Parameters
        ----------
        lower : np.ndarray
            (3,) Lower bounds of the box
        upper : np.ndarray
            (3,) Upper bounds of the box
        """
        self.boundaries = np.vstack(
            (np.asarray(lower, dtype=np.float64), np.asarray(upper, dtype=np.float64))
        ).T

    @property
    def center(self) -> np.ndarray:
        """Center of the box.

        Returns
        -------
        np.ndarray
            (3,) Center of the box
        """
        return np.mean(self.boundaries, axis=1)

    @property
    def lower(self) -> np.ndarray:
        """Lower bounds of the box.

        Returns
        -------
        np.ndarray
            (3,) Lower bounds of the box
        """
        return self.boundaries[:, 0]

    @property
    def upper(self) -> np.ndarray:
        """Upper bounds of the box.

        Returns
        -------
        np.ndarray
            (3,) Upper bounds of the box
        """
        return self.boundaries[:, 1]

    @property
    def dimensions(self) -> np.ndarray:
        """Dimensions of the box.

        Returns
        -------
        np.ndarray
            (3,) Box dimensions
        """
        return self.boundaries[:, 1] - self.boundaries[:, 0]

    def contains(self, points: np.ndarray) -> Union[bool, np.ndarray]:
        """Checks whether point(s) are inside the box (boundaries included).

        Parameters
        ----------
        points : np.ndarray
            (3) or (N, 3) Point coordinates

        Returns
        -------
        Union[bool, np.ndarray]
            Containment flag(s)
        """
        inside = np.all((points >= self.lower) & (points <= self.upper), axis=-1)
        if np.ndim(inside) == 0:
            return bool(inside)

        return inside

    def distance(self, points: np.ndarray) -> Union[float, np.ndarray]:
        """Computes the minimum distance from a set of points to the box.

        If the point(s) is(are) inside the box, the distance is 0.

        Parameters
        ----------
        points : np.ndarray
            (3) or (N, 3) Coordinates of the points to compute the distance to

        Returns
        -------
        Union[float, np.ndarray]
            Minimum distance from each point to the box
        """
        # For each coord, if inside the interval, contribution is 0;
        # if outside, take the amount by which it's outside.
        diff_lower = self.lower - points
        diff_upper = points - self.upper
        delta = np.maximum(0.0, np.maximum(diff_lower, diff_upper))

        if delta.ndim == 1:
            return float(np.linalg.norm(delta))

        return np.linalg.norm(delta, axis=1)
