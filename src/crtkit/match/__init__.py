"""CRT hit to TPC track matching.

- `time`: CRT hit time reconstruction
- `window`: drift-window estimation
- `direction`: track end direction estimators
- `matcher`: CRT T0 matching algorithm
"""

from .matcher import CRTT0Matcher
from .time import crt_hit_time, wrap_time
from .window import DriftWindow, drift_window
