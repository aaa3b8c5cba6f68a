"""Tests for the trigger and match data structures."""

import pytest

from crtkit.data import CRTHit, CRTMatch, MatchCandidate, Trigger


class TestTrigger:
    """Trigger timestamp."""

    def test_timestamp(self):
        trigger = Trigger.from_timestamp(5_000_000_123)
        assert trigger.time_s == 5
        assert trigger.time_ns == 123
        assert trigger.timestamp == 5_000_000_123


class TestMatch:
    """Match candidates and results."""

    def test_dca_over_length(self):
        hit = CRTHit()
        assert MatchCandidate(hit, 0.0, 5.0, 50.0).dca_over_length == pytest.approx(0.1)
        assert MatchCandidate(hit, 0.0, 0.0, 0.0).dca_over_length == 0.0
        assert MatchCandidate(hit, 0.0, 1.0, 0.0).dca_over_length == float("inf")

    def test_null(self):
        match = CRTMatch.null(4)
        assert not match.is_matched
        assert match.track_id == 4
        assert match.t0 == -1.0
        assert match.dca == -1.0

    def test_from_candidate(self):
        hit = CRTHit(id=1)
        match = CRTMatch.from_candidate(MatchCandidate(hit, 2.0, 3.0, 4.0), 7, 0.5)
        assert match.is_matched
        assert match.hit is hit
        assert match.t0 == 2.5
        assert match.dca == 3.0
        assert match.extrap_length == 4.0
        assert match.track_id == 7
