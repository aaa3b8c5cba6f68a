"""Tests for the front-end board trigger logic."""

import pytest

from crtkit.data import CRTChannelData
from crtkit.sim import CoincidenceConfig, Tagger, trigger_readouts


def config(apply_coincidence=True):
    """Trigger logic with a 1 GHz clock, so that one tick is one ns."""
    return CoincidenceConfig(
        clock_frequency=1000.0,
        apply_coincidence={"c": apply_coincidence, "d": apply_coincidence, "m": apply_coincidence},
        windows={"c": 0.15, "d": 0.15, "m": 0.15},
        dead_time=22.0,
        bias_time=0.05,
    )


def record(channel, t0, adc=100):
    return CRTChannelData(channel=channel, t0=t0, t1=0, adc=adc)


def cern_tagger(records, mac5=5, layers=(0, 1)):
    """CERN board, channels 0-1 in layer 0 and channels 2-3 in layer 1."""
    return Tagger(
        mac5=mac5,
        type="c",
        region="Top",
        layers=frozenset(layers),
        chan_layers={0: 0, 1: 0, 2: 1, 3: 1},
        data=tuple(records),
    )


def minos_tagger(mac5, records, layer, stack=0, region="Left"):
    return Tagger(
        mac5=mac5,
        type="m",
        region=region,
        stack=stack,
        layers=frozenset((layer,)),
        chan_layers={r.channel: layer for r in records},
        data=tuple(records),
    )


class TestLayerCoincidence:
    """Windowing of CERN and double chooz boards."""

    def test_windowing(self):
        records = [
            record(0, 1000),
            record(2, 1050),
            record(1, 1100),
            record(0, 1120),  # repeated channel after the bias time
            record(3, 5000),  # dead time
            record(0, 30000),  # next readout
            record(2, 30010),
        ]
        readouts, counters = trigger_readouts({5: cern_tagger(records)}, config())

        assert len(readouts) == 2
        first, second = readouts
        assert first.mac5 == 5 and first.entry == 0
        assert first.ts0 == pytest.approx(1.0)
        assert first.channel == 0
        assert [r.channel for r in first.data] == [0, 2, 1]
        assert first.chan_pair == (0, 2)
        assert first.mac_pair == (5, 5)

        assert second.entry == 1
        assert second.ts0 == pytest.approx(30.0)
        assert [r.channel for r in second.data] == [0, 2]
        assert second.chan_pair == (0, 2)

        assert counters["lost_track_and_hold_c"] == 1
        assert counters["lost_dead_time_c"] == 1
        assert counters["readouts_c"] == 2
        assert counters["readout_hits_c"] == 5
        assert counters["region_38"] == 2

    def test_bias_merge(self):
        records = [record(0, 1000, 100), record(0, 1030, 50), record(2, 1060, 70)]
        readouts, _ = trigger_readouts({5: cern_tagger(records)}, config())

        assert len(readouts) == 1
        assert [r.adc for r in readouts[0].data] == [150, 70]

    def test_hand_off(self):
        """The trigger role moves on when no second layer shows up in time."""
        records = [record(0, 1000), record(1, 1300), record(2, 1400)]
        readouts, counters = trigger_readouts({5: cern_tagger(records)}, config())

        assert len(readouts) == 1
        assert readouts[0].ts0 == pytest.approx(1.3)
        assert readouts[0].channel == 1
        assert readouts[0].chan_pair == (1, 2)
        assert counters["lost_coincidence_c"] == 1

    def test_open_coincidence(self):
        tagger = cern_tagger([record(0, 1000), record(1, 1010)], layers=(0,))
        readouts, counters = trigger_readouts({5: tagger}, config())

        assert readouts == []
        assert counters["lost_open_coincidence_c"] == 1

    def test_final_window_coincidence(self):
        """The last window is only read out if it satisfies the coincidence."""
        tagger = cern_tagger([record(0, 1000), record(1, 1050)])
        readouts, counters = trigger_readouts({5: tagger}, config())
        assert readouts == []
        assert counters["lost_coincidence_c"] == 1

        readouts, _ = trigger_readouts({5: tagger}, config(False))
        assert len(readouts) == 1
        assert readouts[0].chan_pair == (-1, -1)

    def test_determinism(self):
        """The readouts do not depend on the order of the input records."""
        records = [
            record(0, 1000),
            record(2, 1040),
            record(3, 1200),
            record(1, 40000),
            record(3, 40100),
        ]
        taggers = {5: cern_tagger(records)}
        shuffled = {5: cern_tagger(records[::-1])}

        ref, ref_counters = trigger_readouts(taggers, config())
        for _ in range(3):
            readouts, counters = trigger_readouts(shuffled, config())
            assert readouts == ref
            assert counters == ref_counters

        assert len(ref) == 2
        assert counters["lost_dead_time_c"] == 1

    @pytest.mark.parametrize(
        "window, num_hits, num_dead", [(100.0, 2, 0), (30.0, 1, 1)]
    )
    def test_window_dead_time(self, window, num_hits, num_dead):
        """Two records 50 us apart, with a 200 us dead time."""
        cfg = CoincidenceConfig(
            clock_frequency=1.0,
            apply_coincidence={"c": False, "d": False, "m": False},
            windows={"c": window, "d": window, "m": window},
            dead_time=200.0,
            bias_time=0.05,
        )
        records = [record(0, 100), record(2, 150)]
        readouts, counters = trigger_readouts({5: cern_tagger(records)}, cfg)

        assert len(readouts) == 1
        assert readouts[0].ts0 == pytest.approx(100.0)
        assert [r.channel for r in readouts[0].data] == [0, 2][:num_hits]
        assert counters["lost_dead_time_c"] == num_dead


class TestBoardCoincidence:
    """Coincidences between MINOS boards."""

    def test_pair(self):
        taggers = {
            1: minos_tagger(1, [record(0, 1000)], layer=0),
            2: minos_tagger(2, [record(0, 1100)], layer=1),
        }
        readouts, counters = trigger_readouts(taggers, config())

        assert [r.mac5 for r in readouts] == [1, 2]
        assert readouts[0].mac_pair == (1, 2)
        assert readouts[1].mac_pair == (2, 1)
        assert counters["readouts_m"] == 2

    @pytest.mark.parametrize(
        "other",
        [
            {"stack": 1},
            {"region": "Right"},
            {"layer": 0},
            {"t0": 1200},
        ],
    )
    def test_no_pair(self, other):
        other = dict(other)
        t0 = other.pop("t0", 1100)
        kwargs = dict({"layer": 1, "stack": 0, "region": "Left"}, **other)
        taggers = {
            1: minos_tagger(1, [record(0, 1000)], layer=0),
            2: minos_tagger(2, [record(0, t0)], **kwargs),
        }
        readouts, counters = trigger_readouts(taggers, config())

        assert readouts == []
        assert counters["lost_coincidence_m"] == 2

    def test_no_coincidence_required(self):
        taggers = {1: minos_tagger(1, [record(0, 1000)], layer=0)}
        readouts, _ = trigger_readouts(taggers, config(False))

        assert len(readouts) == 1
        assert readouts[0].mac_pair == (1, 1)

    def test_lost_trigger(self):
        """A trigger without a partner is dropped, the next record triggers."""
        taggers = {
            1: minos_tagger(1, [record(0, 1000), record(1, 5000)], layer=0),
            2: minos_tagger(2, [record(0, 5050)], layer=1),
        }
        readouts, counters = trigger_readouts(taggers, config())

        assert [r.mac5 for r in readouts] == [1, 2]
        assert readouts[0].ts0 == pytest.approx(5.0)
        assert readouts[0].channel == 1
        assert counters["lost_coincidence_m"] == 1


class TestConfig:
    def test_missing_type(self):
        with pytest.raises(AssertionError):
            CoincidenceConfig(1.0, {"c": True}, {"c": 0.1, "d": 0.1, "m": 0.1}, 22.0, 0.05)
