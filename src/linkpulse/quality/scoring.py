"""Connection quality scoring: pure mapping from latency/loss/jitter to a score."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkpulse.session.models import LatencyStats

# (upper bound, sub-score) pairs, checked in order with a strict "<".
_LATENCY_STEPS: tuple[tuple[float, int], ...] = (
    (20, 100),
    (50, 90),
    (100, 75),
    (150, 60),
    (200, 40),
    (300, 20),
)
_LATENCY_FLOOR = 5

_LOSS_STEPS: tuple[tuple[float, int], ...] = (
    (0.5, 100),
    (1, 95),
    (2, 85),
    (5, 70),
    (10, 50),
    (20, 30),
)
_LOSS_FLOOR = 10

_JITTER_STEPS: tuple[tuple[float, int], ...] = (
    (0.1, 100),
    (0.2, 95),
    (0.5, 85),
    (1.0, 70),
    (2.0, 50),
)
_JITTER_FLOOR = 30


class QualityTier(enum.Enum):
    """Human-readable quality band for a score."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @property
    def color(self) -> str:
        return _TIER_COLORS[self]


_TIER_COLORS = {
    QualityTier.EXCELLENT: "green",
    QualityTier.GOOD: "cyan",
    QualityTier.FAIR: "dark_orange",
    QualityTier.POOR: "red",
}


@dataclass(frozen=True)
class QualityBreakdown:
    latency_score: int
    packet_loss_score: int
    stability_score: int


@dataclass(frozen=True)
class QualityResult:
    """Overall score with its tier and per-factor breakdown."""

    score: int
    tier: QualityTier
    breakdown: QualityBreakdown


def calculate_score(
    avg_latency: float | None,
    min_latency: float | None,
    max_latency: float | None,
    packet_loss: float,
) -> QualityResult:
    """Score a connection from 0 to 100.

    Starts at 100 and subtracts the shortfall of each sub-score, so a single
    bad factor can pull the total all the way to zero.
    """
    latency_score = latency_subscore(avg_latency)
    packet_loss_score = packet_loss_subscore(packet_loss)
    stability_score = stability_subscore(min_latency, max_latency, avg_latency)

    total = 100
    total -= 100 - latency_score
    total -= 100 - packet_loss_score
    total -= 100 - stability_score
    total = max(0, min(100, total))

    return QualityResult(
        score=total,
        tier=tier_for(total),
        breakdown=QualityBreakdown(
            latency_score=latency_score,
            packet_loss_score=packet_loss_score,
            stability_score=stability_score,
        ),
    )


def score_stats(stats: LatencyStats) -> QualityResult:
    """Score a set of aggregated latency statistics."""
    return calculate_score(stats.avg, stats.min, stats.max, stats.packet_loss)


def latency_subscore(avg_latency: float | None) -> int:
    if avg_latency is None:
        return 0
    return _step(avg_latency, _LATENCY_STEPS, _LATENCY_FLOOR)


def packet_loss_subscore(packet_loss: float) -> int:
    return _step(packet_loss, _LOSS_STEPS, _LOSS_FLOOR)


def stability_subscore(
    min_latency: float | None,
    max_latency: float | None,
    avg_latency: float | None,
) -> int:
    if min_latency is None or max_latency is None or avg_latency is None:
        return 100
    if avg_latency <= 0:
        return 100
    jitter_ratio = (max_latency - min_latency) / avg_latency
    return _step(jitter_ratio, _JITTER_STEPS, _JITTER_FLOOR)


def tier_for(score: int) -> QualityTier:
    if score >= 80:
        return QualityTier.EXCELLENT
    if score >= 60:
        return QualityTier.GOOD
    if score >= 40:
        return QualityTier.FAIR
    return QualityTier.POOR


def _step(value: float, steps: tuple[tuple[float, int], ...], floor: int) -> int:
    for bound, score in steps:
        if value < bound:
            return score
    return floor
