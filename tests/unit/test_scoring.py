"""Tests for quality scoring."""

from __future__ import annotations

import pytest

from linkpulse.quality.scoring import (
    QualityTier,
    calculate_score,
    latency_subscore,
    packet_loss_subscore,
    score_stats,
    stability_subscore,
    tier_for,
)
from linkpulse.session.models import LatencyStats


class TestSubscores:
    @pytest.mark.parametrize(
        ("latency", "expected"),
        [(0, 100), (19.9, 100), (20, 90), (49, 90), (99, 75), (149, 60),
         (199, 40), (299, 20), (300, 5), (5000, 5)],
    )
    def test_latency_steps(self, latency, expected):
        assert latency_subscore(latency) == expected

    def test_latency_absent_is_zero(self):
        assert latency_subscore(None) == 0

    @pytest.mark.parametrize(
        ("loss", "expected"),
        [(0, 100), (0.5, 95), (1, 85), (2, 70), (5, 50), (10, 30), (20, 10), (100, 10)],
    )
    def test_packet_loss_steps(self, loss, expected):
        assert packet_loss_subscore(loss) == expected

    def test_stability_absent_is_full(self):
        assert stability_subscore(None, None, None) == 100
        assert stability_subscore(10, 20, None) == 100

    def test_stability_zero_average_is_full(self):
        assert stability_subscore(0, 0, 0) == 100

    def test_stability_ratio(self):
        # (30 - 10) / 20 = 1.0 -> not < 1.0, so the 2.0 step applies
        assert stability_subscore(10, 30, 20) == 50
        assert stability_subscore(19, 21, 20) == 95
        assert stability_subscore(0, 100, 10) == 30

    def test_latency_monotonic(self):
        scores = [latency_subscore(v) for v in range(0, 400, 5)]
        assert scores == sorted(scores, reverse=True)

    def test_packet_loss_monotonic(self):
        scores = [packet_loss_subscore(v / 2) for v in range(0, 80)]
        assert scores == sorted(scores, reverse=True)


class TestCalculateScore:
    def test_perfect_connection(self):
        result = calculate_score(10, 10, 10, 0)
        assert result.score == 100
        assert result.tier is QualityTier.EXCELLENT

    def test_all_absent(self):
        result = calculate_score(None, None, None, 0)
        breakdown = result.breakdown
        assert (
            breakdown.latency_score,
            breakdown.packet_loss_score,
            breakdown.stability_score,
        ) == (0, 100, 100)
        assert result.score == 0
        assert result.tier is QualityTier.POOR

    def test_score_is_clamped(self):
        result = calculate_score(1000, 0, 1000, 100)
        assert result.score == 0

    def test_single_bad_factor_drags_total(self):
        result = calculate_score(250, 250, 250, 0)
        assert result.breakdown.latency_score == 20
        assert result.score == 20
        assert result.tier is QualityTier.POOR

    def test_known_trace(self, sample_factory):
        samples = [
            sample_factory(latency, timestamp=float(i))
            for i, latency in enumerate([10, 20, 30, None, 15])
        ]
        stats = LatencyStats.from_samples(samples)
        assert stats.avg == pytest.approx(18.75)
        assert stats.packet_loss == pytest.approx(20.0)
        assert stats.min == 10
        assert stats.max == 30

        result = stats.quality()
        assert result.breakdown.latency_score == 100
        assert result.breakdown.packet_loss_score == 10
        assert result.breakdown.stability_score == 50
        assert result.score == 0
        assert result.tier is QualityTier.POOR

    def test_score_stats_matches_calculate(self):
        stats = LatencyStats(min=10.0, max=30.0, avg=20.0, packet_loss=1.0, count=4)
        assert score_stats(stats) == calculate_score(20.0, 10.0, 30.0, 1.0)

    def test_worse_latency_never_scores_higher(self):
        previous = 101
        for latency in (5, 25, 60, 120, 170, 250, 400):
            score = calculate_score(latency, latency, latency, 0).score
            assert score <= previous
            previous = score

    def test_more_jitter_never_scores_higher(self):
        # avg and loss held fixed; only the min/max spread grows
        previous = 101
        for spread in range(0, 200, 5):
            score = calculate_score(50.0, 50.0, 50.0 + spread, 0.5).score
            assert score <= previous
            previous = score
        assert previous < calculate_score(50.0, 50.0, 50.0, 0.5).score


class TestTiers:
    @pytest.mark.parametrize(
        ("score", "tier"),
        [(100, QualityTier.EXCELLENT), (80, QualityTier.EXCELLENT),
         (79, QualityTier.GOOD), (60, QualityTier.GOOD),
         (59, QualityTier.FAIR), (40, QualityTier.FAIR),
         (39, QualityTier.POOR), (0, QualityTier.POOR)],
    )
    def test_tier_boundaries(self, score, tier):
        assert tier_for(score) is tier

    def test_tier_colors(self):
        assert QualityTier.EXCELLENT.color == "green"
        assert QualityTier.POOR.color == "red"
