"""Numba JIT compiled implementation of 3D closest-approach routines.

These routines compute distances between infinite lines (extrapolated tracks)
and points, segments or axis-aligned boxes (CRT hits and their uncertainty).
"""

import numba as nb
import numpy as np

__all__ = [
    "point_line_distance",
    "segment_line_distance",
    "box_line_crossing",
    "box_line_distance",
]

# Threshold below which two lines are considered parallel
SMALL_NUM = 1e-5


@nb.njit(cache=True)
def point_line_distance(
    point: nb.float64[:], start: nb.float64[:], direction: nb.float64[:]
) -> nb.float64:
    """Compute the distance between a point and an infinite line.

    The distance is computed as :math:`|(h - p) \\times (h - (p + d))| / |d|`.
    If the direction vector is null, the line degenerates to a point and the
    distance to its start is returned.

    Parameters
    ----------
    point : np.ndarray
        (3) Coordinates of the point
    start : np.ndarray
        (3) Point on the line
    direction : np.ndarray
        (3) Direction of the line (not necessarily normalized)

    Returns
    -------
    float
        Distance of closest approach
    """
    denom = np.sqrt(direction[0] ** 2 + direction[1] ** 2 + direction[2] ** 2)
    w = point - start
    if denom == 0.0:
        return np.sqrt(w[0] ** 2 + w[1] ** 2 + w[2] ** 2)

    v = point - (start + direction)
    cross = np.cross(w, v)

    return np.sqrt(cross[0] ** 2 + cross[1] ** 2 + cross[2] ** 2) / denom


@nb.njit(cache=True)
def segment_line_distance(
    seg_start: nb.float64[:],
    seg_end: nb.float64[:],
    line_start: nb.float64[:],
    line_end: nb.float64[:],
) -> nb.float64:
    """Compute the minimum distance between a segment and an infinite line.

    The line is defined by two of its points. The closest points are found
    by minimizing the distance with respect to the segment parameter, which
    is clamped to [0, 1], and the line parameter, which is not.

    Parameters
    ----------
    seg_start : np.ndarray
        (3) Start point of the segment
    seg_end : np.ndarray
        (3) End point of the segment
    line_start : np.ndarray
        (3) First point on the line
    line_end : np.ndarray
        (3) Second point on the line

    Returns
    -------
    float
        Distance of closest approach
    """
    u = seg_end - seg_start
    v = line_end - line_start
    w = seg_start - line_start

    a = np.dot(u, u)
    b = np.dot(u, v)
    c = np.dot(v, v)
    d = np.dot(u, w)
    e = np.dot(v, w)
    D = a * c - b * b

    # Compute the parameters of the two closest points
    sD, tD = D, D
    if D < SMALL_NUM:
        # Almost parallel (or degenerate), use the segment start
        sN, sD = 0.0, 1.0
        tN, tD = e, c
    else:
        sN = b * e - c * d
        tN = a * e - b * d
        if sN < 0.0:
            sN = 0.0
            tN, tD = e, c
        elif sN > sD:
            sN = sD
            tN, tD = e + b, c

    sc = 0.0 if abs(sN) < SMALL_NUM else sN / sD
    tc = 0.0 if abs(tN) < SMALL_NUM or tD == 0.0 else tN / tD

    dp = w + sc * u - tc * v

    return np.sqrt(dp[0] ** 2 + dp[1] ** 2 + dp[2] ** 2)


@nb.njit(cache=True)
def box_line_crossing(
    lower: nb.float64[:],
    upper: nb.float64[:],
    start: nb.float64[:],
    end: nb.float64[:],
) -> nb.boolean:
    """Checks whether an infinite line crosses an axis-aligned box.

    Uses the slab method. An axis along which the line does not move only
    constrains the crossing if the line lies outside of the slab.

    Parameters
    ----------
    lower : np.ndarray
        (3) Lower bounds of the box
    upper : np.ndarray
        (3) Upper bounds of the box
    start : np.ndarray
        (3) First point on the line
    end : np.ndarray
        (3) Second point on the line

    Returns
    -------
    bool
        `True` if the line crosses the box (boundaries included)
    """
    tmin, tmax = -np.inf, np.inf
    for i in range(3):
        di = end[i] - start[i]
        if di == 0.0:
            if start[i] < lower[i] or start[i] > upper[i]:
                return False
            continue

        t1 = (lower[i] - start[i]) / di
        t2 = (upper[i] - start[i]) / di
        if t1 > t2:
            t1, t2 = t2, t1

        tmin = max(tmin, t1)
        tmax = min(tmax, t2)
        if tmin > tmax:
            return False

    return True


@nb.njit(cache=True)
def box_line_distance(
    center: nb.float64[:],
    width: nb.float64[:],
    start: nb.float64[:],
    end: nb.float64[:],
) -> nb.float64:
    """Compute the minimum distance between an infinite line and a CRT hit
    represented as a rectangle.

    If the line crosses the box of half-widths `width` centered on `center`,
    the distance is 0. Otherwise the hit is assumed to lie in the plane
    perpendicular to its smallest-uncertainty axis (the tagger plane) and
    the distance is the minimum distance to the four edges of the rectangle.

    Parameters
    ----------
    center : np.ndarray
        (3) Center of the CRT hit
    width : np.ndarray
        (3) Uncertainty on the CRT hit position along each axis
    start : np.ndarray
        (3) First point on the line
    end : np.ndarray
        (3) Second point on the line

    Returns
    -------
    float
        Distance of closest approach
    """
    # Check if the line goes through the hit
    if box_line_crossing(center - width, center + width, start, end):
        return 0.0

    # Find the axis normal to the hit plane (x, unless y or z is thinner)
    axis = 0
    if width[1] < width[0] and width[1] < width[2]:
        axis = 1
    if width[2] < width[0] and width[2] < width[1]:
        axis = 2

    b, c = (axis + 1) % 3, (axis + 2) % 3
    if b > c:
        b, c = c, b

    # Build the four corners of the rectangle
    corners = np.empty((4, 3), dtype=np.float64)
    for k in range(4):
        corners[k] = center
    corners[0, b] -= width[b]
    corners[0, c] -= width[c]
    corners[1, b] += width[b]
    corners[1, c] -= width[c]
    corners[2, b] -= width[b]
    corners[2, c] += width[c]
    corners[3, b] += width[b]
    corners[3, c] += width[c]

    # Minimum distance to each of the four edges
    dist = segment_line_distance(corners[0], corners[1], start, end)
    dist = min(dist, segment_line_distance(corners[0], corners[2], start, end))
    dist = min(dist, segment_line_distance(corners[3], corners[1], start, end))
    dist = min(dist, segment_line_distance(corners[3], corners[2], start, end))

    return dist
