"""Module with a data class object which represents true CRT energy deposits."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["CRTDeposit"]


@dataclass(eq=False)
class CRTDeposit(DataBase):
    """Energy deposited by a true particle in a CRT scintillator strip.

    Attributes
    ----------
    module_id : int
        Index of the CRT module in which the energy was deposited
    strip_id : int
        Index of the strip within the module
    position : np.ndarray
        (3) Centroid of the entry and exit points in the strip frame (cm),
        the third axis running along the strip length
    energy : float
        Deposited energy (GeV)
    time : float
        Mean of the entry and exit times (ns)
    """

    module_id: int = -1
    strip_id: int = -1
    position: np.ndarray = None
    energy: float = 0.0
    time: float = 0.0

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)
