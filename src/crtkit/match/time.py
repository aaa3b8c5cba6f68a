"""Reconstruction of the time of a CRT hit relative to the trigger.

Two time references are supported:
- `ts1`: the CRT hit time counter relative to the trigger, in ns;
- `ts0`: the absolute White Rabbit time within the current second, in ns,
  from which the trigger time within its second is subtracted. The result is
  wrapped into one half-period of the counter rollover on either side of
  the trigger.
"""

__all__ = ["TIME_MODES", "wrap_time", "crt_hit_time"]

# Available time references
TIME_MODES = ("ts0", "ts1")

# Number of nanoseconds in a second
NS_PER_S = 1_000_000_000


def wrap_time(time, period=1e6):
    """Wraps a time difference into [-period/2, period/2].

    Parameters
    ----------
    time : float
        Time difference in microseconds
    period : float, default 1e6
        Rollover period of the time counter in microseconds

    Returns
    -------
    float
        Wrapped time difference
    """
    if time < -0.5 * period:
        return time + period
    if time > 0.5 * period:
        return time - period

    return time


def crt_hit_time(hit, mode="ts0", trigger_timestamp=0, period=1e6):
    """Computes the time of a CRT hit relative to the trigger.

    Parameters
    ----------
    hit : CRTHit
        CRT hit
    mode : str, default 'ts0'
        Time reference to use, one of 'ts0' or 'ts1'
    trigger_timestamp : int, default 0
        Absolute trigger time in nanoseconds (only used in 'ts0' mode)
    period : float, default 1e6
        Rollover period of the time counter in microseconds

    Returns
    -------
    float
        Time of the CRT hit relative to the trigger in microseconds
    """
    if mode == "ts1":
        return float(int(hit.ts1_ns)) * 1e-3

    if mode == "ts0":
        time = (hit.ts0_ns - int(trigger_timestamp) % NS_PER_S) / 1e3
        return wrap_time(time, period)

    raise ValueError(
        f"CRT hit time mode not recognized: {mode}. Must be one of {TIME_MODES}."
    )
