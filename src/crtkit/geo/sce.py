"""Space-charge position correction services.

The space-charge effect distorts the apparent position of ionization in the
TPC. These services return the spatial offsets to add to an apparent position
to recover the true position, given the drift volume the point lives in.
"""

import numpy as np
from scipy.interpolate import RegularGridInterpolator

__all__ = ["NoSpaceCharge", "GridSpaceCharge"]


class SpaceChargeBase:
    """Base class of all space-charge services.

    Attributes
    ----------
    name : str
        Name of the service, used to instantiate it from a configuration
    """

    name = None
    aliases = ()

    @property
    def enabled(self):
        """Whether the service applies any correction."""
        raise NotImplementedError

    def offsets(self, point, chamber_id):
        """Spatial offsets at a given position.

        Parameters
        ----------
        point : np.ndarray
            (3) Apparent position
        chamber_id : int
            Index of the drift volume containing the point

        Returns
        -------
        np.ndarray
            (3) Offsets to add to the apparent position
        """
        raise NotImplementedError

    def correct(self, point, chamber_id):
        """Applies the spatial offsets to a position.

        Parameters
        ----------
        point : np.ndarray
            (3) Apparent position
        chamber_id : int
            Index of the drift volume containing the point

        Returns
        -------
        np.ndarray
            (3) Corrected position
        """
        if not self.enabled:
            return np.asarray(point, dtype=np.float64)

        return np.asarray(point, dtype=np.float64) + self.offsets(point, chamber_id)


class NoSpaceCharge(SpaceChargeBase):
    """Disabled space-charge service, which never moves a point."""

    name = "none"
    aliases = ("disabled",)

    @property
    def enabled(self):
        return False

    def offsets(self, point, chamber_id):
        return np.zeros(3, dtype=np.float64)


class GridSpaceCharge(SpaceChargeBase):
    """Space-charge service interpolating offset maps defined on a regular
    grid, one map per drift volume.

    Points outside of a map get no correction.
    """

    name = "grid"

    def __init__(self, maps=None, path=None):
        """Initialize the interpolators.

        Parameters
        ----------
        maps : List[dict], optional
            One map per drift volume, each with the grid coordinates along
            each axis (`x`, `y`, `z`) and the `offsets`, an (N_x, N_y, N_z, 3)
            array of spatial offsets at each grid node
        path : str, optional
            Path to a `.npz` file containing the maps. The arrays of drift
            volume `i` are stored under `x_i`, `y_i`, `z_i` and `offsets_i`.
        """
        assert (maps is None) ^ (path is None), (
            "Must provide either the offset maps or the path to a file "
            "containing them, not both."
        )
        if path is not None:
            maps = self.load(path)

        self._interpolators = []
        for m in maps:
            grid = tuple(np.asarray(m[k], dtype=np.float64) for k in ("x", "y", "z"))
            offsets = np.asarray(m["offsets"], dtype=np.float64)
            assert offsets.shape == (*[len(g) for g in grid], 3), (
                "The offset map must be of shape (N_x, N_y, N_z, 3), "
                f"got {offsets.shape}."
            )
            self._interpolators.append(
                RegularGridInterpolator(
                    grid, offsets, bounds_error=False, fill_value=0.0
                )
            )

    @staticmethod
    def load(path):
        """Loads the offset maps from a `.npz` file.

        Parameters
        ----------
        path : str
            Path to the file

        Returns
        -------
        List[dict]
            One map per drift volume
        """
        maps = []
        with np.load(path) as f:
            i = 0
            while f"offsets_{i}" in f.files:
                maps.append(
                    {k: f[f"{k}_{i}"] for k in ("x", "y", "z", "offsets")}
                )
                i += 1

        assert len(maps), f"No offset map found in {path}."

        return maps

    @property
    def enabled(self):
        return True

    @property
    def num_maps(self):
        """Number of drift volumes with an offset map."""
        return len(self._interpolators)

    def offsets(self, point, chamber_id):
        if chamber_id < 0 or chamber_id >= self.num_maps:
            return np.zeros(3, dtype=np.float64)

        point = np.asarray(point, dtype=np.float64)[None, :]

        return self._interpolators[chamber_id](point)[0]

