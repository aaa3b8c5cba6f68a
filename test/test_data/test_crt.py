"""Tests for the CRT data structures."""

import numpy as np
import pytest

from crtkit.data import CRTChannelData, CRTData, CRTHit


class TestCRTHit:
    """CRT hit defaults and derived quantities."""

    def test_default(self):
        hit = CRTHit()
        assert hit.plane == -1
        assert hit.tagger == ""
        assert len(hit.feb_id) == 0
        assert hit.total_pe == -1.0
        assert np.all(~np.isfinite(hit.center))

    def test_box(self):
        hit = CRTHit(center=[1.0, 2.0, 3.0], width=[0.5, 1.0, 2.0], ts1_ns=1500.0)
        np.testing.assert_allclose(hit.lower, [0.5, 1.0, 1.0])
        np.testing.assert_allclose(hit.upper, [1.5, 3.0, 5.0])
        assert hit.time == pytest.approx(1.5)

    def test_equality(self):
        assert CRTHit(center=[1, 2, 3]) == CRTHit(center=[1, 2, 3])
        assert CRTHit(center=[1, 2, 3]) != CRTHit(center=[1, 2, 4])


class TestCRTData:
    """Front-end board readouts."""

    def test_channel_with_adc(self):
        record = CRTChannelData(channel=3, t0=100, t1=5, adc=250)
        merged = record.with_adc(400)
        assert merged.adc == 400
        assert merged.channel == 3 and merged.t0 == 100
        assert record.adc == 250

    def test_readout(self):
        data = [CRTChannelData(0, 10, 1, 100), CRTChannelData(2, 12, 1, 120)]
        readout = CRTData(mac5=4, entry=0, ts0=0.01, channel=0, chan_pair=(0, 2), data=data)
        assert len(readout.data) == 2
        assert readout.mac_pair == (-1, -1)
        assert CRTData().data == []
