"""CRT module geometry classes.

Each CRT module is a set of scintillator strips. The module type and the CRT
region the module belongs to are encoded in the name of its volume, which
follows the `volAuxDet_<TYPE>_module_<###>_<Region>` convention, e.g.
`volAuxDet_MINOS_module_012_Left`.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import numpy as np

__all__ = ["CRTModule", "CRTModules", "module_type", "module_region"]

# Volume name tags of each module type
MODULE_TYPES = {"MINOS": "m", "CERN": "c", "DC": "d"}


def module_type(name: str) -> str:
    """Returns the type of a CRT module from the name of its volume.

    Parameters
    ----------
    name : str
        Name of the module volume

    Returns
    -------
    str
        Module type: 'm' (MINOS), 'c' (CERN), 'd' (double chooz) or
        'e' if the type could not be determined
    """
    for tag, mtype in MODULE_TYPES.items():
        if tag in name:
            return mtype

    return "e"


def module_region(name: str) -> str:
    """Returns the CRT region of a module from the name of its volume.

    Parameters
    ----------
    name : str
        Name of the module volume

    Returns
    -------
    str
        Name of the CRT region (e.g. 'Top', 'Left', 'SlopeFront', etc.)
    """
    mtype = module_type(name)
    tag = {v: k for k, v in MODULE_TYPES.items()}.get(mtype, "")
    base = f"volAuxDet_{tag}_module_###_"

    return name[len(base) :]


@dataclass
class CRTModule:
    """Class which holds all properties of an individual CRT module.

    Attributes
    ----------
    id : int
        Module index
    name : str
        Name of the module volume
    position : np.ndarray
        (3) Position of the module center in the frame of its CRT region
    strip_positions : np.ndarray
        (N_s, 3) Position of each strip center in the module frame
    strip_half_dims : np.ndarray
        (3) Half-dimensions of a strip in the strip frame (half-width,
        half-height, half-length)
    """

    id: int
    name: str
    position: np.ndarray
    strip_positions: np.ndarray
    strip_half_dims: np.ndarray

    def __init__(
        self,
        id: int,
        name: str,
        position: List[float],
        strip_positions: List[List[float]],
        strip_half_dims: List[float],
    ):
        """Initialize the CRT module object.

        Parameters
        ----------
        id : int
            Module index
        name : str
            Name of the module volume
        position : List[float]
            (3) Position of the module center in the frame of its CRT region
        strip_positions : List[List[float]]
            (N_s, 3) Position of each strip center in the module frame
        strip_half_dims : List[float]
            (3) Half-dimensions of a strip in the strip frame
        """
        self.id = int(id)
        self.name = name
        self.position = np.asarray(position, dtype=np.float64)
        self.strip_positions = np.asarray(strip_positions, dtype=np.float64)
        self.strip_half_dims = np.asarray(strip_half_dims, dtype=np.float64)

        assert self.position.shape == (3,), "Module position must be of length 3."
        assert self.strip_positions.ndim == 2 and self.strip_positions.shape[1] == 3, (
            "Strip positions must be provided as an (N_s, 3) array, "
            f"got shape {self.strip_positions.shape}."
        )
        assert self.strip_half_dims.shape == (3,), "Strip half-dimensions must be of length 3."

    @property
    def type(self) -> str:
        """Module type ('m', 'c', 'd' or 'e')."""
        return module_type(self.name)

    @property
    def region(self) -> str:
        """Name of the CRT region the module belongs to."""
        return module_region(self.name)

    @property
    def num_strips(self) -> int:
        """Number of strips in the module."""
        return len(self.strip_positions)

    @property
    def strip_half_length(self) -> float:
        """Half-length of the strips, along which the light propagates."""
        return float(self.strip_half_dims[2])

    def contains_local(self, position: np.ndarray, tolerance: float = 1e-3) -> bool:
        """Checks whether a point expressed in the strip frame is inside a strip.

        Parameters
        ----------
        position : np.ndarray
            (3) Position in the strip frame
        tolerance : float, default 1e-3
            Tolerance on each of the strip boundaries

        Returns
        -------
        bool
            `True` if the point lies within the strip
        """
        return bool(np.all(np.abs(position) <= self.strip_half_dims + tolerance))


@dataclass
class CRTModules:
    """Handles all geometry queries for a set of CRT modules.

    Attributes
    ----------
    modules : Dict[int, CRTModule]
        Mapping between module index and module
    """

    modules: Dict[int, CRTModule]

    def __init__(self, modules: List[dict]):
        """Parse the CRT module configuration.

        Parameters
        ----------
        modules : List[dict]
            List of module configurations, each passed to :class:`CRTModule`
        """
        self.modules = {}
        for cfg in modules:
            module = CRTModule(**cfg)
            assert module.id not in self.modules, f"Duplicate CRT module index: {module.id}."
            self.modules[module.id] = module

    @property
    def num_modules(self) -> int:
        """Returns the number of CRT modules.

        Returns
        -------
        int
            Number of CRT modules
        """
        return len(self.modules)

    def __len__(self) -> int:
        return self.num_modules

    def __getitem__(self, idx: int) -> CRTModule:
        return self.modules[idx]

    def __contains__(self, idx: int) -> bool:
        return idx in self.modules

    def __iter__(self) -> Iterator[CRTModule]:
        return iter(self.modules.values())

    def get(self, idx: int) -> Optional[CRTModule]:
        """Returns a module if it exists, `None` otherwise.

        Parameters
        ----------
        idx : int
            Module index

        Returns
        -------
        CRTModule, optional
            Module object
        """
        return self.modules.get(idx, None)
