"""Module with a general-purpose geometry class.

This class supports the storage of:
- TPC drift volume boundaries and drift properties
- CRT module shapes and locations

It also provides the geometry queries needed by the CRT reconstruction.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .base import Box
from .crt import CRTModules
from .tpc import TPCDetector

__all__ = ["Geometry"]


@dataclass
class Geometry(Box):
    """Handles all geometry functions for a collection of box-shaped drift
    volumes and the CRT modules surrounding them.

    Attributes
    ----------
    name : str
        Name of the detector
    tag : str
        Tag or label for the geometry instance
    version : str
        Version number of the geometry
    tpc : TPCDetector
        TPC detector properties
    crt : CRTModules, optional
        CRT module properties
    gdml : str, optional
        GDML file name associated with the geometry
    """

    name: str
    tag: str
    version: str
    tpc: TPCDetector
    crt: Optional[CRTModules] = None
    gdml: Optional[str] = None

    def __init__(
        self,
        name: str,
        tag: str,
        version: str,
        tpc: Dict[str, Any],
        crt: Optional[Dict[str, Any]] = None,
        gdml: Optional[str] = None,
    ):
        """Initialize the detector geometry.

        Parameters
        ----------
        name : str
            Name of the detector
        tag : str
            Tag or label for the geometry instance
        version : str
            Version number of the geometry
        tpc : dict
            Drift volume configuration
        crt : dict, optional
            CRT module configuration
        gdml : str, optional
            GDML file name associated with the geometry
        """
        # Store basic geometry information
        self.name = name
        self.tag = tag
        self.version = str(version)
        self.gdml = gdml

        # Load the drift volumes
        self.tpc = TPCDetector(**tpc)

        # Load the CRT modules
        self.crt = CRTModules(**crt) if crt is not None else None

        # Initialize the parent Box
        super().__init__(self.tpc.lower, self.tpc.upper)

    @property
    def drift_velocity(self) -> float:
        """Electron drift velocity in cm/us."""
        return self.tpc.drift_velocity

    def get_chamber_id(self, point: np.ndarray) -> int:
        """Returns the index of the drift volume closest to a point.

        Parameters
        ----------
        point : np.ndarray
            (3) Point coordinates

        Returns
        -------
        int
            Index of the drift volume
        """
        return self.tpc.get_chamber_id(point)

    def drift_direction(self, points: np.ndarray) -> int:
        """Returns the drift direction of a set of points (0 if ambiguous).

        Parameters
        ----------
        points : np.ndarray
            (N, 3) Point coordinates

        Returns
        -------
        int
            Drift direction (+1, -1 or 0)
        """
        return self.tpc.drift_direction(points)

    def drift_limits(self, points: np.ndarray) -> Tuple[float, float]:
        """Returns the drift-axis extent of the drift volumes spanned by
        a set of points.

        Parameters
        ----------
        points : np.ndarray
            (N, 3) Point coordinates

        Returns
        -------
        Tuple[float, float]
            Lower and upper boundaries along the drift axis
        """
        return self.tpc.drift_limits(points)
