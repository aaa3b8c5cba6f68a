"""Tests for the CRT post-processors and the post-processor manager."""

import numpy as np
import pytest

from crtkit.data import CRTDeposit, Trigger
from crtkit.post import CRTMatchProcessor, CRTSimProcessor, PostManager
from crtkit.post.factories import POST_DICT, post_processor_factory

MODULES = [
    {
        "id": 0,
        "name": "volAuxDet_CERN_module_000_Top",
        "position": [0.0, 0.0, 0.0],
        "strip_positions": [[0.0, -1.0, 0.0]] * 4 + [[0.0, 1.0, 0.0]] * 4,
        "strip_half_dims": [11.5, 0.5, 92.0],
    }
]


def deposits():
    return [
        CRTDeposit(module_id=0, strip_id=s, position=np.zeros(3), energy=0.0034, time=1000.0)
        for s in (0, 4)
    ]


class TestCRTMatchProcessor:
    """CRT matching on a dictionary of data products."""

    def test_process(self, geo, track, hit_factory):
        post = CRTMatchProcessor(track_keys=["tracks", "other_tracks"], geo=geo)
        hit = hit_factory([51.0, 150.0, 0.0], time=10.0)
        data = {"tracks": [track], "other_tracks": [], "crthits": [hit]}

        result = post(data)
        assert set(result) == {"tracks_crt_matches", "other_tracks_crt_matches"}
        assert result["tracks_crt_matches"][0].hit is hit
        assert result["other_tracks_crt_matches"] == []

    def test_trigger(self, geo, track, hit_factory):
        post = CRTMatchProcessor(trigger_key="trigger", geo=geo)
        hit = hit_factory([51.0, 150.0, 0.0], time=0.0)
        hit.ts0_ns = 2_010_000.0
        data = {
            "tracks": [track],
            "crthits": [hit],
            "trigger": Trigger.from_timestamp(7_002_000_000),
        }
        match = post(data)["tracks_crt_matches"][0]
        assert match.t0 == pytest.approx(10.0)

    def test_missing_key(self, geo):
        post = CRTMatchProcessor(geo=geo)
        with pytest.raises(AssertionError):
            post({"tracks": []})


class TestCRTSimProcessor:
    """CRT simulation on a dictionary of data products."""

    def test_process(self):
        post = CRTSimProcessor(modules=MODULES, response={"seed": 1, "clock_frequency": 1000.0})
        result = post({"crt_deposits": deposits()})
        assert len(result["crt_data"]) == 1
        assert result["crt_data_counters"]["sim_c"] == 2


class TestPostManager:
    """Chains of post-processors."""

    def test_factory(self):
        assert POST_DICT["crt_t0_match"] is CRTMatchProcessor
        assert POST_DICT["crt_sim"] is CRTSimProcessor

        post = post_processor_factory("crt_sim", {"modules": MODULES})
        assert isinstance(post, CRTSimProcessor)

        with pytest.warns(DeprecationWarning):
            post_processor_factory("crt_match", {"detector": "icarus"})

        with pytest.raises(ValueError):
            post_processor_factory("not_a_processor", {})

    def test_priority(self):
        cfg = {
            "crt_t0_match": {"detector": "icarus"},
            "crt_sim": {"modules": MODULES, "priority": 1},
        }
        manager = PostManager(cfg)
        assert list(manager.modules) == ["crt_sim", "crt_t0_match"]

        # The configuration is left untouched
        assert cfg["crt_sim"]["priority"] == 1

    def test_single_entry(self, track):
        cfg = {
            "crt_sim": {"modules": MODULES, "response": {"clock_frequency": 1000.0}},
            "crt_t0_match": {"detector": "icarus"},
        }
        data = {"crt_deposits": deposits(), "tracks": [track], "crthits": []}
        PostManager(cfg)(data)

        assert len(data["crt_data"]) == 1
        assert not data["tracks_crt_matches"][0].is_matched

    def test_batch(self, track):
        data = {
            "index": [0, 1],
            "tracks": [[track], []],
            "crthits": [[], []],
        }
        PostManager({"crt_t0_match": {"detector": "icarus"}})(data)

        matches = data["tracks_crt_matches"]
        assert len(matches) == 2
        assert len(matches[0]) == 1 and matches[1] == []

    def test_upstream(self, monkeypatch):
        class Dependent(CRTSimProcessor):
            _upstream = ("crt_t0_match",)

        monkeypatch.setitem(POST_DICT, "dependent", Dependent)
        with pytest.raises(AssertionError):
            PostManager({"dependent": {"modules": MODULES}}, post_list=[])

        manager = PostManager(
            {"dependent": {"modules": MODULES}}, post_list=["crt_t0_match"]
        )
        assert list(manager.modules) == ["dependent"]
