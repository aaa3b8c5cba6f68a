"""Tests for the event-level CRT front-end simulation."""

import logging

import numpy as np
import pytest

from crtkit.data import CRTDeposit
from crtkit.geo import geo_factory
from crtkit.sim import CRTDetSim

# Response with a 1 GHz clock and no time or charge smearing
RESPONSE = {
    "clock_frequency": 1000.0,
    "t_delay_rms_gaus_norm": 0.0,
    "t_delay_rms_exp_norm": 0.0,
    "t_res_interpolator": 0.0,
    "prop_delay_error": 0.0,
    "q_rms": 0.0,
    "seed": 12,
}


@pytest.fixture(name="modules")
def fixture_modules():
    """One CERN module (four strips per layer) and one MINOS module."""
    cern = {
        "id": 0,
        "name": "volAuxDet_CERN_module_000_Top",
        "position": [0.0, 0.0, 0.0],
        "strip_positions": [[0.0, -1.0, 0.0]] * 4 + [[0.0, 1.0, 0.0]] * 4,
        "strip_half_dims": [11.5, 0.5, 92.0],
    }
    minos = {
        "id": 4,
        "name": "volAuxDet_MINOS_module_004_Top",
        "position": [0.0, 0.0, 0.0],
        "strip_positions": [[0.0, 0.0, 0.0]] * 20,
        "strip_half_dims": [2.0, 0.5, 400.0],
    }
    return [cern, minos]


def deposit(module_id, strip_id, time=1000.0, energy=0.0034):
    return CRTDeposit(
        module_id=module_id,
        strip_id=strip_id,
        position=np.zeros(3),
        energy=energy,
        time=time,
    )


class TestCRTDetSim:
    """Deposits to front-end board readouts."""

    def test_cern_coincidence(self, modules):
        detsim = CRTDetSim(modules=modules, response=RESPONSE)
        readouts, counters = detsim.simulate([deposit(0, 0), deposit(0, 4)])

        assert len(readouts) == 1
        readout = readouts[0]
        assert readout.mac5 == 0
        assert sorted(r.channel for r in readout.data) == [0, 1, 8, 9]
        assert readout.chan_pair != (-1, -1)
        assert readout.ts0 == pytest.approx(1.0, abs=0.02)

        assert counters["sim_c"] == 2
        assert counters["above_threshold_c"] == 2
        assert counters["readouts_c"] == 1
        assert counters["readout_hits_c"] == 4
        assert counters["region_38"] == 1

    def test_single_layer(self, modules):
        detsim = CRTDetSim(modules=modules, response=RESPONSE)
        readouts, counters = detsim.simulate([deposit(0, 0), deposit(0, 1)])
        assert readouts == []
        assert counters["lost_open_coincidence_c"] == 1

        detsim = CRTDetSim(modules=modules, response=RESPONSE, apply_coincidence_c=False)
        readouts, _ = detsim.simulate([deposit(0, 0), deposit(0, 1)])
        assert len(readouts) == 1

    def test_minos_dual_end(self, modules):
        detsim = CRTDetSim(modules=modules, response=RESPONSE, apply_coincidence_m=False)
        readouts, counters = detsim.simulate([deposit(4, 2)])

        assert [r.mac5 for r in readouts] == [1, 51]
        assert [r.channel for r in readouts] == [11, 11]
        assert [r.mac_pair for r in readouts] == [(1, 1), (51, 51)]
        assert counters["above_threshold_m"] == 2

    def test_threshold(self, modules):
        detsim = CRTDetSim(modules=modules, response=RESPONSE, q_threshold_m=1e6)
        readouts, counters = detsim.simulate([deposit(4, 2)])
        assert readouts == []
        assert counters["lost_threshold_m"] == 1

    def test_invalid_deposits(self, modules):
        detsim = CRTDetSim(modules=modules, response=RESPONSE)
        readouts, counters = detsim.simulate([deposit(99, 0), deposit(0, 8), deposit(0, -1)])
        assert readouts == []
        assert counters["unknown_module"] == 1
        assert counters["unknown_strip"] == 2

    def test_seeded(self, modules):
        deposits = [deposit(0, 0), deposit(0, 4), deposit(0, 5, time=2000.0)]
        ref, _ = CRTDetSim(modules=modules, response=RESPONSE).simulate(deposits)
        other, _ = CRTDetSim(modules=modules, response=RESPONSE).simulate(deposits)
        assert ref == other

    def test_verbose(self, modules, caplog):
        detsim = CRTDetSim(modules=modules, response=RESPONSE, verbose=True)
        with caplog.at_level(logging.INFO, logger="crtkit"):
            detsim.simulate([deposit(0, 0), deposit(0, 4)])

        assert "CRT triggered readouts: 1" in caplog.text
        assert "CERN simulated hits: 2" in caplog.text

    def test_geometry(self, modules):
        geo = geo_factory("icarus", crt={"modules": modules})
        detsim = CRTDetSim(geo=geo)
        assert len(detsim.modules) == 2

        # The packaged geometry does not define the CRT modules
        with pytest.raises(AssertionError):
            CRTDetSim(detector="icarus")
