"""Module with a data class object which represents trigger information."""

from dataclasses import dataclass

from .base import DataBase

__all__ = ["Trigger"]


@dataclass(eq=False)
class Trigger(DataBase):
    """Trigger information.

    Attributes
    ----------
    id : int
        Trigger ID
    time_s : int
        Integer seconds component of the UNIX trigger time
    time_ns : int
        Integer nanoseconds component of the UNIX trigger time
    beam_time_s : int
        Integer seconds component of the UNIX beam pulse time
    beam_time_ns : int
        Integer nanoseconds component of the UNIX beam pulse time
    type : int
        DAQ-specific trigger type
    """

    id: int = -1
    time_s: int = -1
    time_ns: int = -1
    beam_time_s: int = -1
    beam_time_ns: int = -1
    type: int = -1

    @property
    def timestamp(self):
        """Absolute trigger time in nanoseconds since the UNIX epoch.

        Returns
        -------
        int
            Trigger timestamp in nanoseconds
        """
        return int(self.time_s) * 1_000_000_000 + int(self.time_ns)

    @classmethod
    def from_timestamp(cls, timestamp, **kwargs):
        """Builds a trigger object from an absolute timestamp.

        Parameters
        ----------
        timestamp : int
            Trigger timestamp in nanoseconds since the UNIX epoch
        **kwargs : dict, optional
            Additional trigger attributes

        Returns
        -------
        Trigger
            Trigger object
        """
        time_s, time_ns = divmod(int(timestamp), 1_000_000_000)

        return cls(time_s=time_s, time_ns=time_ns, **kwargs)
