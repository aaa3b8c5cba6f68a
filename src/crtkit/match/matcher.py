"""CRT hit to TPC track matching algorithm.

The time of a TPC track is unknown: the drift coordinate of its points is
only known up to a shift proportional to the time the track was produced at.
For each CRT hit compatible with the drift window of the track, the track is
shifted to the hit time and extrapolated from both of its ends. The hit that
lies closest to the extrapolated track provides the track time (T0).
"""

import numpy as np

from crtkit.data import CRTMatch, MatchCandidate
from crtkit.geo import Geometry, geo_factory, sce_factory
from crtkit.math import box_line_distance, point_line_distance
from crtkit.utils.logger import logger

from .direction import DIRECTION_METHODS, average_directions, endpoint_directions
from .time import TIME_MODES, crt_hit_time
from .window import drift_window

__all__ = ["CRTT0Matcher"]


class CRTT0Matcher:
    """Matches TPC tracks with CRT hits and assigns them a time.

    The algorithm proceeds as follows for each track:
    1. Compute the drift window of the track;
    2. For each CRT hit in time with the window and passing the quality cuts,
       shift the track to the hit time, compute the distance of closest
       approach (DCA) of the hit to the track extrapolated from each end and
       keep the hit as a candidate if either DCA is below the distance limit;
    3. Select the candidate with the smallest DCA (or DCA/length);
    4. Accept the best candidate if it passes the final selection.
    """

    def __init__(
        self,
        geo=None,
        detector=None,
        sce=None,
        min_track_length=20.0,
        direction_frac=0.5,
        distance_limit=100.0,
        time_mode="ts0",
        time_correction=0.0,
        sce_correction=True,
        direction_method="endpoint",
        dca_method="point",
        select_method="dca",
        dca_over_length_limit=1.0,
        min_pe=0.0,
        max_uncertainty=1000.0,
        time_margin=10.0,
        rollover_period=1e6,
    ):
        """Initialize the CRT T0 matcher.

        Parameters
        ----------
        geo : Geometry, optional
            Detector geometry
        detector : str, optional
            Name of the detector, used to load the geometry if it is not provided
        sce : Union[SpaceChargeBase, str, dict], optional
            Space-charge service, or its configuration
        min_track_length : float, default 20.
            Minimum track length (cm) to attempt a match
        direction_frac : float, default 0.5
            Fraction of the track used to estimate the end directions
        distance_limit : float, default 100.
            Maximum distance of closest approach (cm)
        time_mode : str, default 'ts0'
            CRT hit time reference, one of 'ts0' or 'ts1'
        time_correction : float, default 0.
            Offset added to the matched time (us)
        sce_correction : bool, default True
            Whether to apply the space-charge correction to the track points
        direction_method : str, default 'endpoint'
            End direction estimator, one of 'endpoint' or 'average'
        dca_method : str, default 'point'
            Distance of closest approach to the hit center ('point') or to
            its uncertainty rectangle ('box')
        select_method : str, default 'dca'
            Selects the candidate with the smallest DCA ('dca') or the
            smallest DCA/extrapolation length ratio ('dca_over_length')
        dca_over_length_limit : float, default 1.
            Maximum DCA/extrapolation length ratio of an accepted match
        min_pe : float, default 0.
            Minimum number of PE of a CRT hit
        max_uncertainty : float, default 1000.
            Maximum uncertainty on any coordinate of a CRT hit (cm)
        time_margin : float, default 10.
            Tolerance on either side of the drift window (us)
        rollover_period : float, default 1e6
            Rollover period of the CRT hit time counter (us)
        """
        # Load the geometry
        if geo is None:
            assert detector is not None, (
                "Must provide either a geometry or the name of a detector."
            )
            geo = geo_factory(detector)
        assert isinstance(geo, Geometry), "The geometry must be a `Geometry` object."
        self.geo = geo

        # Load the space-charge service
        if sce is None or isinstance(sce, (str, dict)):
            sce = sce_factory(sce)
        self.sce = sce

        # Check the enumerated options
        if time_mode not in TIME_MODES:
            raise ValueError(
                f"Time mode not recognized: {time_mode}. "
                f"Must be one of {TIME_MODES}."
            )
        if direction_method not in DIRECTION_METHODS:
            raise ValueError(
                f"Direction method not recognized: {direction_method}. "
                f"Must be one of {DIRECTION_METHODS}."
            )
        if dca_method not in ("point", "box"):
            raise ValueError(
                f"DCA method not recognized: {dca_method}. "
                "Must be one of ('point', 'box')."
            )
        if select_method not in ("dca", "dca_over_length"):
            raise ValueError(
                f"Selection method not recognized: {select_method}. "
                "Must be one of ('dca', 'dca_over_length')."
            )

        assert 0.0 <= direction_frac <= 1.0, "The direction fraction must be in [0, 1]."
        assert distance_limit > 0.0, "The distance limit must be positive."
        assert rollover_period > 0.0, "The rollover period must be positive."

        # Store the parameters
        self.min_track_length = min_track_length
        self.direction_frac = direction_frac
        self.distance_limit = distance_limit
        self.time_mode = time_mode
        self.time_correction = time_correction
        self.sce_correction = sce_correction
        self.direction_method = direction_method
        self.dca_method = dca_method
        self.select_method = select_method
        self.dca_over_length_limit = dca_over_length_limit
        self.min_pe = min_pe
        self.max_uncertainty = max_uncertainty
        self.time_margin = time_margin
        self.rollover_period = rollover_period

    def track_drift(self, track):
        """Drift direction and drift coordinate limits of a track.

        Parameters
        ----------
        track : Track
            Track trajectory

        Returns
        -------
        int
            Drift direction (+1, -1 or 0 if ambiguous)
        Tuple[float, float]
            Boundaries of the drift volume(s) spanned by the track
        """
        points = track.valid_points if len(track.valid_points) else track.points

        return self.geo.drift_direction(points), self.geo.drift_limits(points)

    def drift_window(self, track, drift_dir=None, x_limits=None):
        """Range of times the track could have been produced at.

        Parameters
        ----------
        track : Track
            Track trajectory
        drift_dir : int, optional
            Drift direction of the track. If not specified, it is obtained
            from the geometry
        x_limits : Tuple[float, float], optional
            Drift coordinate boundaries. If not specified, they are obtained
            from the geometry

        Returns
        -------
        DriftWindow
            Allowed time range
        """
        if drift_dir is None or x_limits is None:
            geo_dir, geo_limits = self.track_drift(track)
            drift_dir = geo_dir if drift_dir is None else drift_dir
            x_limits = geo_limits if x_limits is None else x_limits

        axis = self.geo.tpc.drift_axis

        return drift_window(
            track.start_point[axis],
            track.end_point[axis],
            drift_dir,
            x_limits,
            self.geo.drift_velocity,
        )

    def hit_time(self, hit, trigger_timestamp=0):
        """Time of a CRT hit relative to the trigger.

        Parameters
        ----------
        hit : CRTHit
            CRT hit
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds

        Returns
        -------
        float
            Time of the CRT hit in microseconds
        """
        return crt_hit_time(
            hit, self.time_mode, trigger_timestamp, self.rollover_period
        )

    def passes_quality(self, hit):
        """Checks that a CRT hit passes the light yield and uncertainty cuts.

        Parameters
        ----------
        hit : CRTHit
            CRT hit

        Returns
        -------
        bool
            `True` if the hit is usable
        """
        if hit.total_pe < self.min_pe:
            return False

        return not np.any(hit.width > self.max_uncertainty)

    def correct_point(self, point, time, drift_dir):
        """Shifts a point to a given time and corrects it for space charge.

        Parameters
        ----------
        point : np.ndarray
            (3) Track point, reconstructed assuming it was produced at the trigger time
        time : float
            Time the track was produced at in microseconds
        drift_dir : int
            Drift direction of the track

        Returns
        -------
        np.ndarray
            (3) Corrected point
        """
        point = np.array(point, dtype=np.float64)
        point[self.geo.tpc.drift_axis] += drift_dir * time * self.geo.drift_velocity
        if self.sce_correction and self.sce.enabled:
            point = self.sce.correct(point, self.geo.get_chamber_id(point))

        return point

    def end_directions(self, track, time, drift_dir):
        """Direction of the track at both of its ends.

        Parameters
        ----------
        track : Track
            Track trajectory
        time : float
            Time the track was produced at in microseconds
        drift_dir : int
            Drift direction of the track

        Returns
        -------
        np.ndarray
            (3) Direction at the start of the track
        np.ndarray
            (3) Direction at the end of the track
        """
        if self.direction_method == "average":
            return average_directions(track, self.direction_frac)

        start = self.correct_point(track.start_point, time, drift_dir)
        end = self.correct_point(track.end_point, time, drift_dir)
        mid = self.correct_point(
            track.point_at_fraction(self.direction_frac), time, drift_dir
        )

        return endpoint_directions(start, end, mid)

    def distance(self, hit, point, direction):
        """Distance of closest approach between a CRT hit and a track
        extrapolated from one of its ends.

        Parameters
        ----------
        hit : CRTHit
            CRT hit
        point : np.ndarray
            (3) Corrected track end point
        direction : np.ndarray
            (3) Direction of the track at that end

        Returns
        -------
        float
            Distance of closest approach
        """
        if self.dca_method == "box":
            return box_line_distance(hit.center, hit.width, point, point + direction)

        return point_line_distance(hit.center, point, direction)

    def candidate(self, track, hit, time, drift_dir):
        """Evaluates a CRT hit as a match candidate for a track.

        Parameters
        ----------
        track : Track
            Track trajectory
        hit : CRTHit
            CRT hit
        time : float
            Time of the CRT hit in microseconds
        drift_dir : int
            Drift direction of the track

        Returns
        -------
        MatchCandidate, optional
            Match candidate, `None` if the hit is too far from both track ends
        """
        # Shift the track end points to the hit time
        start = self.correct_point(track.start_point, time, drift_dir)
        end = self.correct_point(track.end_point, time, drift_dir)

        # Compute the distance of closest approach from each end
        start_dir, end_dir = self.end_directions(track, time, drift_dir)
        start_dca = self.distance(hit, start, start_dir)
        end_dca = self.distance(hit, end, end_dir)
        if start_dca >= self.distance_limit and end_dca >= self.distance_limit:
            return None

        # Only report the end point closest to the hit
        start_length = float(np.linalg.norm(hit.center - start))
        end_length = float(np.linalg.norm(hit.center - end))
        if start_length < end_length:
            return MatchCandidate(hit, time, float(start_dca), start_length)

        return MatchCandidate(hit, time, float(end_dca), end_length)

    def get_candidates(self, track, crthits, trigger_timestamp=0, drift_dir=None, x_limits=None):
        """Builds the list of CRT hits compatible with a track.

        Parameters
        ----------
        track : Track
            Track trajectory
        crthits : List[CRTHit]
            CRT hits
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds
        drift_dir : int, optional
            Drift direction of the track (obtained from the geometry if not specified)
        x_limits : Tuple[float, float], optional
            Drift coordinate boundaries (obtained from the geometry if not specified)

        Returns
        -------
        List[MatchCandidate]
            Match candidates, in the order of the input CRT hits
        """
        if not len(crthits) or not track.num_points:
            return []

        if drift_dir is None or x_limits is None:
            geo_dir, geo_limits = self.track_drift(track)
            drift_dir = geo_dir if drift_dir is None else drift_dir
            x_limits = geo_limits if x_limits is None else x_limits

        window = self.drift_window(track, drift_dir, x_limits)

        candidates = []
        for hit in crthits:
            # Check that the hit is in time with the track
            time = self.hit_time(hit, trigger_timestamp)
            if not window.contains(time, self.time_margin):
                continue

            # Check that the hit is of sufficient quality
            if not self.passes_quality(hit):
                continue

            candidate = self.candidate(track, hit, time, drift_dir)
            if candidate is not None:
                candidates.append(candidate)

        return candidates

    def select(self, candidates):
        """Selects the best candidate.

        Candidates with a negative DCA are never selected. If two candidates
        share the same score, the first one is kept.

        Parameters
        ----------
        candidates : List[MatchCandidate]
            Match candidates

        Returns
        -------
        MatchCandidate, optional
            Best candidate, `None` if there is no valid candidate
        """
        candidates = [c for c in candidates if c.dca >= 0.0]
        if not len(candidates):
            return None

        if self.select_method == "dca_over_length":
            return min(candidates, key=lambda c: c.dca_over_length)

        return min(candidates, key=lambda c: c.dca)

    def get_closest_hit(self, track, crthits, trigger_timestamp=0, drift_dir=None, x_limits=None):
        """Finds the CRT hit closest to a track, without any final selection.

        Parameters
        ----------
        track : Track
            Track trajectory
        crthits : List[CRTHit]
            CRT hits
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds
        drift_dir : int, optional
            Drift direction of the track (obtained from the geometry if not specified)
        x_limits : Tuple[float, float], optional
            Drift coordinate boundaries (obtained from the geometry if not specified)

        Returns
        -------
        CRTMatch
            Closest CRT hit, or the null match if there is no candidate
        """
        best = self.select(
            self.get_candidates(track, crthits, trigger_timestamp, drift_dir, x_limits)
        )
        if best is None:
            return CRTMatch.null(track.id)

        return CRTMatch.from_candidate(best, track.id)

    def match(self, track, crthits, trigger_timestamp=0, drift_dir=None, x_limits=None):
        """Matches a track with a collection of CRT hits.

        The closest CRT hit is accepted if the track is long enough, the DCA
        is below the distance limit and the DCA/length ratio below its limit.
        The time correction is applied to the time of an accepted match.

        Parameters
        ----------
        track : Track
            Track trajectory
        crthits : List[CRTHit]
            CRT hits
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds
        drift_dir : int, optional
            Drift direction of the track (obtained from the geometry if not specified)
        x_limits : Tuple[float, float], optional
            Drift coordinate boundaries (obtained from the geometry if not specified)

        Returns
        -------
        CRTMatch
            Accepted match, or the null match
        """
        if track.length < self.min_track_length:
            logger.debug(
                "Track %d too short to be matched (%.2f cm).", track.id, track.length
            )
            return CRTMatch.null(track.id)

        best = self.select(
            self.get_candidates(track, crthits, trigger_timestamp, drift_dir, x_limits)
        )
        if best is None:
            logger.debug("No CRT hit candidate found for track %d.", track.id)
            return CRTMatch.null(track.id)

        if (
            best.dca >= self.distance_limit
            or best.dca_over_length >= self.dca_over_length_limit
        ):
            logger.debug(
                "Best CRT hit candidate of track %d rejected (DCA: %.2f cm, "
                "DCA/length: %.3f).",
                track.id,
                best.dca,
                best.dca_over_length,
            )
            return CRTMatch.null(track.id)

        return CRTMatch.from_candidate(best, track.id, self.time_correction)

    def t0_from_crt_hits(self, track, crthits, trigger_timestamp=0):
        """Time of a track from its matched CRT hit.

        Parameters
        ----------
        track : Track
            Track trajectory
        crthits : List[CRTHit]
            CRT hits
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds

        Returns
        -------
        float, optional
            Track time in microseconds, `None` if the track is not matched
        """
        result = self.match(track, crthits, trigger_timestamp)
        if not result.is_matched:
            return None

        return result.t0

    def t0_and_dca_from_crt_hits(self, track, crthits, trigger_timestamp=0):
        """Time of a track and DCA to its matched CRT hit.

        Parameters
        ----------
        track : Track
            Track trajectory
        crthits : List[CRTHit]
            CRT hits
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds

        Returns
        -------
        float
            Track time in microseconds (-1 if the track is not matched)
        float
            Distance of closest approach (-1 if the track is not matched)
        """
        result = self.match(track, crthits, trigger_timestamp)

        return result.t0, result.dca

    def match_collections(self, track, crthits, trigger_timestamp=0):
        """Matches a track against several labeled collections of CRT hits.

        Parameters
        ----------
        track : Track
            Track trajectory
        crthits : Dict[str, List[CRTHit]]
            CRT hit collections, keyed by label
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds

        Returns
        -------
        Dict[str, CRTMatch]
            Match result for each collection
        """
        return {
            label: self.match(track, hits, trigger_timestamp)
            for label, hits in crthits.items()
        }

    def match_tracks(self, tracks, crthits, trigger_timestamp=0):
        """Matches each track of a collection with a collection of CRT hits.

        Parameters
        ----------
        tracks : List[Track]
            Track trajectories
        crthits : List[CRTHit]
            CRT hits
        trigger_timestamp : int, default 0
            Absolute trigger time in nanoseconds

        Returns
        -------
        List[CRTMatch]
            Match result for each track
        """
        return [self.match(track, crthits, trigger_timestamp) for track in tracks]
