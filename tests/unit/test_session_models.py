"""Tests for session models and the sliding window."""

from __future__ import annotations

import pytest

from linkpulse.session.models import LatencyStats, NetworkType, Session
from linkpulse.session.window import WINDOW_SIZE, SlidingWindow


class TestLatencyStats:
    def test_empty(self):
        stats = LatencyStats.from_samples([])
        assert stats.count == 0
        assert stats.avg is None
        assert stats.packet_loss == 0.0

    def test_all_failed(self, sample_factory):
        stats = LatencyStats.from_samples(
            [sample_factory(None, timestamp=float(i)) for i in range(4)]
        )
        assert stats.min is None and stats.max is None and stats.avg is None
        assert stats.packet_loss == 100.0
        assert stats.current is None

    def test_current_is_latest(self, sample_factory):
        stats = LatencyStats.from_samples(
            [sample_factory(50.0, 1.0), sample_factory(20.0, 2.0)]
        )
        assert stats.current == 20.0


class TestSession:
    def test_append_in_order(self, sample_factory):
        session = Session(host="example.com", network_type=NetworkType.WIFI)
        session.append(sample_factory(10.0, 1.0))
        session.append(sample_factory(12.0, 1.0))
        assert len(session.samples) == 2

    def test_append_out_of_order_raises(self, sample_factory):
        session = Session(host="example.com", network_type=NetworkType.WIFI)
        session.append(sample_factory(10.0, 5.0))
        with pytest.raises(ValueError):
            session.append(sample_factory(10.0, 4.0))

    def test_close_sets_score(self, sample_factory):
        session = Session(host="example.com", network_type=NetworkType.WIFI, start_time=0.0)
        session.append(sample_factory(10.0, 1.0))
        assert session.is_active
        session.close(end_time=125.0)
        assert not session.is_active
        assert session.quality_score == 100
        assert session.duration == 125.0

    def test_empty_session_scores_zero(self):
        session = Session(host="example.com", network_type=NetworkType.WIFI)
        session.close()
        assert session.quality_score == 0

    @pytest.mark.parametrize(
        ("seconds", "text"),
        [(0, "0s"), (59.9, "59s"), (60, "1m 0s"), (125, "2m 5s"), (3725, "62m 5s")],
    )
    def test_formatted_duration(self, seconds, text):
        session = Session(
            host="h", network_type=NetworkType.WIFI, start_time=100.0, end_time=100.0 + seconds
        )
        assert session.formatted_duration == text


class TestSlidingWindow:
    def test_default_capacity(self):
        assert SlidingWindow().capacity == WINDOW_SIZE == 60

    def test_evicts_oldest(self, sample_factory):
        window = SlidingWindow()
        samples = [sample_factory(float(i + 1), float(i)) for i in range(61)]
        evicted = [window.append(s) for s in samples]

        assert evicted[:60] == [None] * 60
        assert evicted[60] is samples[0]
        assert len(window) == 60
        assert list(window)[0] is samples[1]
        assert list(window)[-1] is samples[60]

    def test_stats_only_cover_window(self, sample_factory):
        window = SlidingWindow(capacity=2)
        window.append(sample_factory(None, 1.0))
        window.append(sample_factory(10.0, 2.0))
        window.append(sample_factory(20.0, 3.0))
        stats = window.stats()
        assert stats.packet_loss == 0.0
        assert stats.avg == 15.0

    def test_clear(self, sample_factory):
        window = SlidingWindow()
        window.append(sample_factory(1.0))
        window.clear()
        assert len(window) == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            SlidingWindow(0)
