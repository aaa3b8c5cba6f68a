"""Module with data class objects which represent CRT information.

This includes:
- :class:`CRTHit`, a reconstructed cosmic-ray tagger hit
- :class:`CRTChannelData`, the charge/time record of a single CRT channel
- :class:`CRTData`, one front-end board readout made of channel records
"""

from dataclasses import dataclass, field, replace
from typing import List, Tuple

import numpy as np

from .base import DataBase

__all__ = ["CRTHit", "CRTChannelData", "CRTData"]


@dataclass(eq=False)
class CRTHit(DataBase):
    """CRT hit information.

    Attributes
    ----------
    id : int
        Index of the CRT hit in the list
    plane : int
        Index of the CRT tagger that registered the hit
    tagger : str
        Name of the CRT tagger that registered the hit
    feb_id : np.ndarray
        Address of the FEB board stored as a list of bytes (uint8)
    ts0_s : int
        Absolute time from White Rabbit (seconds component)
    ts0_ns : float
        Absolute time from White Rabbit (nanoseconds component)
    ts0_s_corr : float
        Correction to the seconds component of the absolute time
    ts0_ns_corr : float
        Correction to the nanoseconds component of the absolute time
    ts1_ns : float
        Time relative to the trigger (nanoseconds component)
    total_pe : float
        Total number of PE in the CRT hit
    center : np.ndarray
        Barycenter of the CRT hit in detector coordinates
    width : np.ndarray
        Uncertainty on the barycenter of the CRT hit in detector coordinates
    """

    id: int = -1
    plane: int = -1
    tagger: str = ""
    feb_id: np.ndarray = None
    ts0_s: int = -1
    ts0_ns: float = -1.0
    ts0_s_corr: float = -1.0
    ts0_ns_corr: float = -1.0
    ts1_ns: float = -1.0
    total_pe: float = -1.0
    center: np.ndarray = None
    width: np.ndarray = None

    # Fixed-length attributes
    _fixed_length_attrs = (("center", 3), ("width", 3))

    # Variable-length attributes
    _var_length_attrs = (("feb_id", np.ubyte),)

    # String attributes
    _str_attrs = ("tagger",)

    @property
    def time(self):
        """Time of the hit relative to the trigger in microseconds.

        Returns
        -------
        float
            Hit time in microseconds
        """
        return self.ts1_ns * 1e-3

    @property
    def lower(self):
        """Lower corner of the hit uncertainty box.

        Returns
        -------
        np.ndarray
            (3) Lower bounds of the hit position
        """
        return self.center - self.width

    @property
    def upper(self):
        """Upper corner of the hit uncertainty box.

        Returns
        -------
        np.ndarray
            (3) Upper bounds of the hit position
        """
        return self.center + self.width


@dataclass(eq=False)
class CRTChannelData(DataBase):
    """Digitized response of a single CRT channel.

    Attributes
    ----------
    channel : int
        Channel number within the front-end board
    t0 : int
        Time of the channel trigger in trigger-clock ticks
    t1 : int
        Time of the channel trigger relative to the PPS, in clock ticks
    adc : int
        Charge in ADC counts
    """

    channel: int = -1
    t0: int = -1
    t1: int = -1
    adc: int = -1

    def with_adc(self, adc):
        """Returns a copy of the record with a different charge.

        Parameters
        ----------
        adc : int
            New charge in ADC counts

        Returns
        -------
        CRTChannelData
            Updated copy of the channel record
        """
        return replace(self, adc=adc)


@dataclass(eq=False)
class CRTData(DataBase):
    """One front-end board readout.

    Attributes
    ----------
    mac5 : int
        Address of the front-end board which was read out
    entry : int
        Readout counter for this board within the event
    ts0 : float
        Time of the triggering channel in microseconds
    channel : int
        Channel which triggered the readout
    chan_pair : Tuple[int, int]
        Pair of channels which provided the layer coincidence, (-1, -1) if
        no channel in a second layer fired within the readout window
    mac_pair : Tuple[int, int]
        Pair of boards which provided the coincidence
    data : List[CRTChannelData]
        Channel records which were read out
    """

    mac5: int = -1
    entry: int = -1
    ts0: float = -1.0
    channel: int = -1
    chan_pair: Tuple[int, int] = (-1, -1)
    mac_pair: Tuple[int, int] = (-1, -1)
    data: List[CRTChannelData] = field(default_factory=list)
