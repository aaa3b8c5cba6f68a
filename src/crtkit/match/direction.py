"""Estimators of the direction of a track at both of its ends.

The average estimator returns directions pointing away from the track, the
endpoint estimator directions pointing into it. The sign does not matter to
the distance of closest approach, which uses infinite lines.
"""

import numpy as np

__all__ = ["DIRECTION_METHODS", "average_directions", "endpoint_directions"]

# Available direction estimators
DIRECTION_METHODS = ("endpoint", "average")


def unit(vector):
    """Normalizes a vector, leaving null vectors untouched.

    Parameters
    ----------
    vector : np.ndarray
        (3) Vector

    Returns
    -------
    np.ndarray
        (3) Unit vector
    """
    norm = np.linalg.norm(vector)
    if norm > 0.0:
        return vector / norm

    return vector


def average_directions(track, frac):
    """Averages the trajectory directions over a fraction of the valid points
    at either end of the track.

    Parameters
    ----------
    track : Track
        Track trajectory
    frac : float
        Fraction of the valid points to average over at each end

    Returns
    -------
    np.ndarray
        (3) Direction at the start of the track (pointing outwards)
    np.ndarray
        (3) Direction at the end of the track (pointing outwards)
    """
    directions = track.valid_directions
    num = int(np.floor(len(directions) * frac))
    if num < 1:
        return np.zeros(3), np.zeros(3)

    start_dir = -np.mean(directions[:num], axis=0)
    end_dir = np.mean(directions[-num:], axis=0)

    return start_dir, end_dir


def endpoint_directions(start, end, mid):
    """Computes the unit vectors from the track end points to an interior point.

    Parameters
    ----------
    start : np.ndarray
        (3) Start point of the track
    end : np.ndarray
        (3) End point of the track
    mid : np.ndarray
        (3) Interior point of the track

    Returns
    -------
    np.ndarray
        (3) Direction at the start of the track (pointing inwards)
    np.ndarray
        (3) Direction at the end of the track (pointing inwards)
    """
    return unit(mid - start), unit(mid - end)
