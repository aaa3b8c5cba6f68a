"""Simulation of the CRT front-end readout.

- `channels`: strip to front-end board channel mapping
- `response`: strip light yield, timing and charge response
- `coincidence`: front-end board trigger logic
- `detsim`: event-level simulation driver
"""

from .coincidence import CoincidenceConfig, Tagger, trigger_readouts
from .detsim import CRTDetSim
from .response import CRTResponse
