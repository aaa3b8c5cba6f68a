"""Front-end board trigger logic of the CRT readout.

Each front-end board (tagger) holds the channel records above threshold in an
event. The records are processed in time order:
- the earliest record triggers a readout window;
- records of new channels within the coincidence window join the readout,
  records of a channel already held are merged into the last record if they
  fall within the bias time, and lost to the track-and-hold otherwise;
- records after the window, but within the dead time, are lost;
- the first record after the dead time closes the readout and triggers
  the next one.

CERN and double chooz boards with the coincidence enabled require hits in both
of their layers: a trigger which sees no second layer within its window hands
the trigger role over to the next record. MINOS boards with the coincidence
enabled require a coincident hit in a board of the same stack and region
which covers the opposite layer.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from crtkit.data import CRTChannelData, CRTData

from .channels import region_number

__all__ = ["Tagger", "CoincidenceConfig", "trigger_readouts"]


@dataclass(frozen=True)
class Tagger:
    """Channel records collected by a front-end board in an event.

    Attributes
    ----------
    mac5 : int
        Address of the front-end board
    type : str
        Type of the modules read out by the board ('c', 'd' or 'm')
    region : str
        Name of the CRT region the board belongs to
    stack : int
        Stack index of the modules read out by the board (-1 if not stacked)
    layers : FrozenSet[int]
        Layers which registered a record in the event
    chan_layers : Mapping[int, int]
        Layer of each channel which registered a record
    data : Tuple[CRTChannelData, ...]
        Channel records above threshold
    """

    mac5: int
    type: str
    region: str = ""
    stack: int = -1
    layers: FrozenSet[int] = frozenset()
    chan_layers: Mapping[int, int] = field(default_factory=dict, compare=False)
    data: Tuple[CRTChannelData, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class CoincidenceConfig:
    """Front-end trigger logic parameters.

    All durations are expressed in microseconds.

    Attributes
    ----------
    clock_frequency : float
        Frequency of the clock which counts the record ticks (MHz)
    apply_coincidence : Mapping[str, bool]
        Whether the coincidence is required, for each module type
    windows : Mapping[str, float]
        Coincidence window, for each module type
    dead_time : float
        Readout dead time
    bias_time : float
        Time within which a repeated channel record is merged into the readout
    """

    clock_frequency: float
    apply_coincidence: Mapping[str, bool]
    windows: Mapping[str, float]
    dead_time: float
    bias_time: float

    def __post_init__(self):
        assert self.clock_frequency > 0.0, "The clock frequency must be positive."
        for mtype in ("c", "d", "m"):
            assert mtype in self.apply_coincidence, (
                f"Must specify whether the coincidence applies to '{mtype}' modules."
            )
            assert mtype in self.windows, (
                f"Must specify the coincidence window of '{mtype}' modules."
            )

    def time(self, record):
        """Converts the trigger ticks of a record to microseconds."""
        return record.t0 / self.clock_frequency


def find_pair(tagger, taggers, t_trig, config) -> Optional[int]:
    """Finds a MINOS board in coincidence with a trigger.

    Parameters
    ----------
    tagger : Tagger
        Board which triggered
    taggers : Mapping[int, Tagger]
        All the boards of the event, keyed by address
    t_trig : float
        Trigger time in microseconds
    config : CoincidenceConfig
        Trigger logic parameters

    Returns
    -------
    int, optional
        Address of the coincident board, `None` if there is none
    """
    for mac5 in sorted(taggers):
        other = taggers[mac5]
        if (
            mac5 == tagger.mac5
            or other.type != "m"
            or other.stack != tagger.stack
            or other.region != tagger.region
        ):
            continue

        # The two boards must cover opposite layers
        if not (
            (1 in other.layers and 0 in tagger.layers)
            or (0 in other.layers and 1 in tagger.layers)
        ):
            continue

        for record in sorted(other.data, key=lambda r: r.t0):
            if abs(config.time(record) - t_trig) < config.windows["m"]:
                return mac5

    return None


class _Readout:
    """Readout window being assembled for one board."""

    def __init__(self, trigger, t_trig, layer):
        self.trigger = trigger
        self.t_trig = t_trig
        self.channels = {trigger.channel}
        self.layers = {layer}
        self.data = [trigger]
        self.chan_pair = (-1, -1)


def fold_tagger(tagger, taggers, config, counters) -> List[CRTData]:
    """Applies the trigger logic to the records of one board.

    Parameters
    ----------
    tagger : Tagger
        Board to process
    taggers : Mapping[int, Tagger]
        All the boards of the event, keyed by address (read-only)
    config : CoincidenceConfig
        Trigger logic parameters
    counters : Counter
        Counters of lost records, updated in place

    Returns
    -------
    List[CRTData]
        Readouts of the board
    """
    mtype = tagger.type
    if mtype not in ("c", "d", "m") or not len(tagger.data):
        return []

    coincidence = config.apply_coincidence[mtype]
    window = config.windows[mtype]
    layer_coincidence = mtype in ("c", "d") and coincidence
    board_coincidence = mtype == "m" and coincidence

    # A layer coincidence is impossible if only one layer was hit
    if layer_coincidence and len(tagger.layers) < 2:
        counters[f"lost_open_coincidence_{mtype}"] += 1
        return []

    records = sorted(tagger.data, key=lambda r: r.t0)

    def start(record):
        layer = tagger.chan_layers.get(record.channel, -1)
        return _Readout(record, config.time(record), layer)

    readouts = []
    readout = start(records[0])
    pair_found = False
    mac_pair = (-1, -1) if board_coincidence else (tagger.mac5, tagger.mac5)

    def emit():
        readouts.append(
            CRTData(
                mac5=tagger.mac5,
                entry=len(readouts),
                ts0=readout.t_trig,
                channel=readout.trigger.channel,
                chan_pair=readout.chan_pair,
                mac_pair=mac_pair,
                data=readout.data,
            )
        )
        counters[f"readouts_{mtype}"] += 1
        counters[f"readout_hits_{mtype}"] += len(readout.data)
        counters[f"region_{region_number(tagger.region)}"] += 1

    for record in records[1:]:
        t = config.time(record)

        # If the trigger saw no second layer within its window, hand off
        if (
            layer_coincidence
            and len(readout.layers) == 1
            and t - readout.t_trig > window
        ):
            readout = start(record)
            counters[f"lost_coincidence_{mtype}"] += 1
            continue

        # MINOS boards need a coincident board in the opposite layer
        if board_coincidence and not pair_found:
            other = find_pair(tagger, taggers, readout.t_trig, config)
            if other is None:
                readout = start(record)
                counters[f"lost_coincidence_{mtype}"] += 1
                continue

            pair_found = True
            mac_pair = (tagger.mac5, other)

        if t < readout.t_trig + window:
            # Record inside the readout window
            if record.channel not in readout.channels:
                readout.channels.add(record.channel)
                readout.data.append(record)
                layer = tagger.chan_layers.get(record.channel, -1)
                if layer not in readout.layers:
                    readout.layers.add(layer)
                    readout.chan_pair = (readout.trigger.channel, record.channel)
            elif t < readout.t_trig + config.bias_time:
                last = readout.data[-1]
                readout.data[-1] = last.with_adc(last.adc + record.adc)
            else:
                counters[f"lost_track_and_hold_{mtype}"] += 1

        elif t <= readout.t_trig + config.dead_time:
            # Record lost during the readout
            counters[f"lost_dead_time_{mtype}"] += 1

        else:
            # Read out, the record triggers the next readout
            emit()
            readout = start(record)
            pair_found = False

    # Read out the last window, provided it satisfies the coincidence
    if layer_coincidence and len(readout.layers) < 2:
        counters[f"lost_coincidence_{mtype}"] += 1
        return readouts

    if board_coincidence and not pair_found:
        other = find_pair(tagger, taggers, readout.t_trig, config)
        if other is None:
            counters[f"lost_coincidence_{mtype}"] += 1
            return readouts

        mac_pair = (tagger.mac5, other)

    emit()

    return readouts


def trigger_readouts(
    taggers: Dict[int, Tagger], config: CoincidenceConfig
) -> Tuple[List[CRTData], Counter]:
    """Applies the front-end trigger logic to all the boards of an event.

    Boards are processed in increasing order of address.

    Parameters
    ----------
    taggers : Dict[int, Tagger]
        Boards of the event, keyed by address
    config : CoincidenceConfig
        Trigger logic parameters

    Returns
    -------
    List[CRTData]
        Readouts of all boards
    Counter
        Counters of readouts and lost records
    """
    counters = Counter()
    readouts = []
    for mac5 in sorted(taggers):
        readouts.extend(fold_tagger(taggers[mac5], taggers, config, counters))

    return readouts, counters
