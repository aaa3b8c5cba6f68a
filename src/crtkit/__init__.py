"""Top-level module of the CRT reconstruction source code."""

from .version import __version__

# Import main algorithm entry points
from .match import CRTT0Matcher
from .post import PostManager
from .driver import Driver
from .sim import CRTDetSim

# Import commonly used data structures
from .data import CRTData, CRTDeposit, CRTHit, CRTMatch, Track, Trigger
from .geo import Geometry, geo_factory
