"""Detector geometry and space-charge services.

- `base`: box-shaped detector components
- `tpc`: drift volumes and their drift properties
- `crt`: CRT modules, their type and region
- `sce`: space-charge position correction
- `geometry`: detector-level geometry queries
- `factories`: geometry from packaged configuration files
"""

from .base import Box
from .crt import CRTModule, CRTModules
from .factories import geo_factory, sce_factory
from .geometry import Geometry
from .sce import GridSpaceCharge, NoSpaceCharge
from .tpc import TPCChamber, TPCDetector
