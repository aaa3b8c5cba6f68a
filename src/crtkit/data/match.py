"""Module with data class objects which represent CRT/TPC match results."""

from dataclasses import dataclass
from typing import Optional

from .crt import CRTHit

__all__ = ["MatchCandidate", "CRTMatch"]


@dataclass
class MatchCandidate:
    """CRT hit compatible with a track, before best-candidate selection.

    Attributes
    ----------
    hit : CRTHit
        CRT hit under consideration
    t0 : float
        Trigger-relative time of the CRT hit in microseconds
    dca : float
        Distance of closest approach between the extrapolated track and the hit
    extrap_length : float
        Distance between the (shifted) track end point and the hit
    """

    hit: CRTHit
    t0: float
    dca: float
    extrap_length: float

    @property
    def dca_over_length(self):
        """Distance of closest approach normalized by the extrapolation length.

        A proxy for the sine of the angle between the track and the direction
        to the CRT hit. A null extrapolation length yields 0 if the DCA is
        also null, infinity otherwise.

        Returns
        -------
        float
            DCA/length ratio
        """
        if self.extrap_length > 0.0:
            return self.dca / self.extrap_length

        return 0.0 if self.dca == 0.0 else float("inf")


@dataclass
class CRTMatch:
    """Result of matching a track with a collection of CRT hits.

    When no CRT hit matches, the result is the sentinel built by
    :meth:`CRTMatch.null`: no hit and negative time/distances.

    Attributes
    ----------
    hit : CRTHit, optional
        Matched CRT hit, `None` if there is no match
    t0 : float
        Time of the matched hit in microseconds
    dca : float
        Distance of closest approach to the matched hit (-1 if no match)
    extrap_length : float
        Extrapolation length to the matched hit (-1 if no match)
    track_id : int
        Index of the track which was matched
    """

    hit: Optional[CRTHit] = None
    t0: float = -1.0
    dca: float = -1.0
    extrap_length: float = -1.0
    track_id: int = -1

    @classmethod
    def null(cls, track_id=-1):
        """Builds the sentinel returned when no CRT hit matches a track.

        Parameters
        ----------
        track_id : int, default -1
            Index of the track which was not matched

        Returns
        -------
        CRTMatch
            Sentinel match result
        """
        return cls(track_id=track_id)

    @classmethod
    def from_candidate(cls, candidate, track_id=-1, time_correction=0.0):
        """Builds a match result from a selected candidate.

        Parameters
        ----------
        candidate : MatchCandidate
            Best CRT hit candidate
        track_id : int, default -1
            Index of the track which was matched
        time_correction : float, default 0.
            Offset added to the candidate time, in microseconds

        Returns
        -------
        CRTMatch
            Match result
        """
        return cls(
            hit=candidate.hit,
            t0=candidate.t0 + time_correction,
            dca=candidate.dca,
            extrap_length=candidate.extrap_length,
            track_id=track_id,
        )

    @property
    def is_matched(self):
        """Whether a CRT hit was matched to the track."""
        return self.hit is not None
