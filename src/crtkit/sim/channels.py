"""Mapping of CRT strips onto front-end boards and readout channels.

Each front-end board (FEB) is identified by its `mac5` address. The rules
depend on the module type:
- CERN ('c') modules have one FEB per module and two channels per strip;
- double chooz ('d') modules have one FEB per module and one channel per strip;
- MINOS ('m') modules share one FEB between three modules, two adjacent strips
  being ganged into one channel. MINOS strips are read out at both ends, the
  second end being read out by the FEB `mac5 + 50`.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from crtkit.utils.logger import logger

__all__ = [
    "REGION_NUMBERS",
    "NO_REGION",
    "DUAL_END_OFFSET",
    "ChannelMap",
    "region_number",
    "channel_map",
    "layer_id",
    "stack_id",
]

# Region numbers of each CRT region
REGION_NUMBERS = {
    "Top": 38,
    "SlopeLeft": 52,
    "SlopeRight": 56,
    "SlopeFront": 48,
    "SlopeBack": 46,
    "Left": 50,
    "Right": 54,
    "Front": 44,
    "Back": 42,
    "Bottom": 58,
}

# Region number of an unknown region
NO_REGION = np.iinfo(np.uint32).max

# Offset of the FEB address reading out the far end of MINOS strips
DUAL_END_OFFSET = 50

# Width of a MINOS module (cm)
MINOS_MODULE_WIDTH = 49.482


@dataclass(frozen=True)
class ChannelMap:
    """Readout address of a CRT strip.

    Attributes
    ----------
    mac5 : int
        Address of the front-end board reading out the strip
    channels : Tuple[int, ...]
        Readout channel(s) of the strip within the board
    """

    mac5: int
    channels: Tuple[int, ...]

    @property
    def dual_mac5(self):
        """Address of the board reading out the far end of the strip."""
        return self.mac5 + DUAL_END_OFFSET


def region_number(region):
    """Returns the number associated with a CRT region name.

    Parameters
    ----------
    region : str
        Name of the CRT region

    Returns
    -------
    int
        Region number (maximum 32-bit unsigned integer if unknown)
    """
    return REGION_NUMBERS.get(region, NO_REGION)


def channel_map(module_type, module_id, strip_id):
    """Returns the readout address of a CRT strip.

    Parameters
    ----------
    module_type : str
        Module type ('c', 'd' or 'm')
    module_id : int
        Module index
    strip_id : int
        Strip index within the module

    Returns
    -------
    ChannelMap
        Readout address of the strip
    """
    if module_type == "c":
        return ChannelMap(module_id, (2 * strip_id, 2 * strip_id + 1))
    if module_type == "d":
        return ChannelMap(module_id, (strip_id,))
    if module_type == "m":
        return ChannelMap(module_id // 3, (strip_id // 2 + 10 * (module_id % 3),))

    raise ValueError(f"CRT module type not recognized: {module_type}.")


def stack_id(module):
    """Returns the stack index of a module.

    Only MINOS modules of the side regions are organized in stacks, ordered
    along the beam axis (upstream stack first).

    Parameters
    ----------
    module : CRTModule
        CRT module

    Returns
    -------
    int
        Stack index, -1 if the module does not belong to a stack
    """
    if module.type != "m" or module.region not in ("Left", "Right"):
        return -1

    z = module.position[2]
    if z < 0:
        return 0
    if z == 0:
        return 1

    return 2


def layer_id(module, strip_id):
    """Returns the layer index (0 or 1) of a strip within its module.

    Parameters
    ----------
    module : CRTModule
        CRT module
    strip_id : int
        Strip index within the module

    Returns
    -------
    int
        Layer index, -1 if it cannot be determined
    """
    if module.type in ("c", "d"):
        return int(module.strip_positions[strip_id][1] > 0)

    if module.type == "m":
        if module.region in ("Left", "Right"):
            offset = abs(module.position[0])
            limit = MINOS_MODULE_WIDTH / 2 - 1
            if stack_id(module) == 1:
                return int(offset > limit)

            return int(offset < limit)

        if module.region in ("Front", "Back"):
            return int(module.position[2] > 0)

    logger.info(
        "Could not determine the layer of strip %d in module %d "
        "(type: %s, region: %s).",
        strip_id,
        module.id,
        module.type,
        module.region,
    )

    return -1
