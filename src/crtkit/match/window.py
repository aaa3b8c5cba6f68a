"""Estimation of the range of times a track could have been produced at."""

from dataclasses import dataclass

__all__ = ["DriftWindow", "drift_window"]


@dataclass(frozen=True)
class DriftWindow:
    """Range of track times allowed by the drift volume boundaries.

    A window with `t_min == t_max` is degenerate: the track time cannot be
    constrained (e.g. for tracks crossing the cathode) and any time is allowed.

    Attributes
    ----------
    t_min : float
        Earliest allowed time in microseconds
    t_max : float
        Latest allowed time in microseconds
    """

    t_min: float = 0.0
    t_max: float = 0.0

    def __post_init__(self):
        assert self.t_min <= self.t_max, (
            f"The window lower bound ({self.t_min}) must not exceed "
            f"its upper bound ({self.t_max})."
        )

    @property
    def is_degenerate(self):
        """Whether the window accepts any time."""
        return self.t_min == self.t_max

    def contains(self, time, margin=0.0):
        """Checks whether a time is compatible with the window.

        Parameters
        ----------
        time : float
            Time in microseconds
        margin : float, default 0.
            Tolerance added on either side of the window

        Returns
        -------
        bool
            `True` if the time is allowed
        """
        if self.is_degenerate:
            return True

        return self.t_min - margin <= time <= self.t_max + margin


def drift_window(start_x, end_x, drift_dir, x_limits, drift_velocity):
    """Computes the range of times a track could have been produced at.

    The most positive end point is shifted to the most positive drift volume
    boundary and the most negative end point to the most negative boundary.
    The shifts are converted to times using the signed drift velocity.

    Parameters
    ----------
    start_x : float
        Drift coordinate of the track start point
    end_x : float
        Drift coordinate of the track end point
    drift_dir : int
        Drift direction of the track (+1, -1 or 0 if ambiguous)
    x_limits : Tuple[float, float]
        Boundaries of the drift volume(s) along the drift coordinate
    drift_velocity : float
        Electron drift velocity in cm/us

    Returns
    -------
    DriftWindow
        Allowed time range
    """
    if drift_dir == 0:
        return DriftWindow(0.0, 0.0)

    velocity = drift_dir * drift_velocity

    max_shift = max(x_limits) - max(start_x, end_x)
    min_shift = min(x_limits) - min(start_x, end_x)

    t_max = max_shift / velocity
    t_min = min_shift / velocity

    return DriftWindow(min(t_min, t_max), max(t_min, t_max))
