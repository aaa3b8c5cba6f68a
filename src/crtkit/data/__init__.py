"""Data structures consumed and produced by the CRT reconstruction.

- `crt`: CRT hits, channel records and front-end board readouts
- `track`: reconstructed TPC track trajectories
- `match`: CRT/TPC match candidates and results
- `trigger`: trigger timing information
- `sim`: true energy deposits in the CRT strips
"""

from .crt import *
from .match import *
from .sim import *
from .track import *
from .trigger import *
