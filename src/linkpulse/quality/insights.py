"""Insights derived from stored session history."""

from __future__ import annotations

import enum
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from linkpulse.session.models import NetworkType, Session

_WEEK = 7 * 86400
_TREND_BAND = 5


class InsightColor(enum.Enum):
    GREEN = "green"
    BLUE = "blue"
    ORANGE = "orange"
    RED = "red"


@dataclass(frozen=True)
class Insight:
    icon: str
    title: str
    description: str
    color: InsightColor

    def to_dict(self) -> dict[str, str]:
        return {
            "icon": self.icon,
            "title": self.title,
            "description": self.description,
            "color": self.color.value,
        }


@dataclass(frozen=True)
class TimeOfDayBreakdown:
    period: str
    hour_range: str
    avg_latency: float | None
    avg_score: int
    session_count: int


_PERIODS: tuple[tuple[str, str, range], ...] = (
    ("Morning", "6am - 12pm", range(6, 12)),
    ("Afternoon", "12pm - 6pm", range(12, 18)),
    ("Evening", "6pm - 12am", range(18, 24)),
    ("Night", "12am - 6am", range(0, 6)),
)


def generate_insights(
    sessions: Sequence[Session],
    now: float | None = None,
) -> list[Insight]:
    """Build every insight the history supports, in display order."""
    if not sessions:
        return []
    now = now if now is not None else time.time()

    candidates = (
        score_trend(sessions, now),
        overall_average(sessions),
        best_time_of_day(sessions),
        compare_network_types(sessions),
        consistency(sessions),
    )
    return [insight for insight in candidates if insight is not None]


def time_of_day_breakdown(sessions: Sequence[Session]) -> list[TimeOfDayBreakdown]:
    """Average latency and score per period, using each session's local start hour."""
    breakdown: list[TimeOfDayBreakdown] = []
    for name, label, hours in _PERIODS:
        in_period = [
            s for s in sessions if datetime.fromtimestamp(s.start_time).hour in hours
        ]
        latencies = [s.avg_latency for s in in_period if s.avg_latency is not None]
        scores = [s.quality_score for s in in_period if s.quality_score is not None]
        breakdown.append(
            TimeOfDayBreakdown(
                period=name,
                hour_range=label,
                avg_latency=sum(latencies) / len(latencies) if latencies else None,
                avg_score=sum(scores) // len(scores) if scores else 0,
                session_count=len(in_period),
            )
        )
    return breakdown


def score_trend(sessions: Sequence[Session], now: float) -> Insight | None:
    """Compare this week's average score with last week's."""
    one_week_ago = now - _WEEK
    two_weeks_ago = now - 2 * _WEEK

    this_week = [
        s.quality_score
        for s in sessions
        if s.start_time >= one_week_ago and s.quality_score is not None
    ]
    last_week = [
        s.quality_score
        for s in sessions
        if two_weeks_ago <= s.start_time < one_week_ago and s.quality_score is not None
    ]
    if not this_week:
        return None

    this_avg = sum(this_week) // len(this_week)
    if not last_week:
        if this_avg >= 80:
            color = InsightColor.GREEN
        elif this_avg >= 60:
            color = InsightColor.BLUE
        else:
            color = InsightColor.ORANGE
        return Insight(
            icon="chart.line.uptrend",
            title=f"Average Score: {this_avg}",
            description=f"Based on {len(this_week)} sessions this week",
            color=color,
        )

    last_avg = sum(last_week) // len(last_week)
    difference = this_avg - last_avg
    if difference > _TREND_BAND:
        return Insight(
            icon="arrow.up.right",
            title=f"Improving by {difference} Points",
            description=(
                f"Your connection quality improved from {last_avg} to "
                f"{this_avg} this week"
            ),
            color=InsightColor.GREEN,
        )
    if difference < -_TREND_BAND:
        return Insight(
            icon="arrow.down.right",
            title=f"Declining by {abs(difference)} Points",
            description=(
                f"Your connection quality dropped from {last_avg} to "
                f"{this_avg} this week"
            ),
            color=InsightColor.RED,
        )
    return Insight(
        icon="equal",
        title=f"Stable at {this_avg} Points",
        description="Your connection quality has been consistent this week",
        color=InsightColor.BLUE,
    )


def overall_average(sessions: Sequence[Session]) -> Insight | None:
    latencies = [s.avg_latency for s in sessions if s.avg_latency is not None]
    if not latencies:
        return None

    avg_latency = sum(latencies) / len(latencies)
    avg_loss = sum(s.packet_loss for s in sessions) / len(sessions)

    if avg_latency < 50:
        color = InsightColor.GREEN
    elif avg_latency < 100:
        color = InsightColor.BLUE
    else:
        color = InsightColor.ORANGE
    return Insight(
        icon="gauge",
        title=f"Average Ping: {int(avg_latency)}ms",
        description=(
            f"Across {len(sessions)} sessions with {avg_loss:.1f}% "
            "average packet loss"
        ),
        color=color,
    )


def best_time_of_day(sessions: Sequence[Session]) -> Insight | None:
    with_data = [
        b for b in time_of_day_breakdown(sessions) if b.session_count > 0 and b.avg_score > 0
    ]
    if len(with_data) < 2:
        return None

    best = max(with_data, key=lambda b: b.avg_score)
    return Insight(
        icon="clock",
        title=f"Best Time: {best.period}",
        description=(
            f"Your connection performs best during {best.hour_range} "
            f"(score: {best.avg_score})"
        ),
        color=InsightColor.GREEN,
    )


def compare_network_types(sessions: Sequence[Session]) -> Insight | None:
    wifi = [
        s.avg_latency
        for s in sessions
        if s.network_type is NetworkType.WIFI and s.avg_latency is not None
    ]
    cellular = [
        s.avg_latency
        for s in sessions
        if s.network_type is NetworkType.CELLULAR and s.avg_latency is not None
    ]
    if not wifi or not cellular:
        return None

    wifi_avg = sum(wifi) / len(wifi)
    cellular_avg = sum(cellular) / len(cellular)

    if wifi_avg < cellular_avg:
        return Insight(
            icon="wifi",
            title=f"WiFi is {int(cellular_avg - wifi_avg)}ms Faster",
            description=(
                f"WiFi averages {int(wifi_avg)}ms vs Cellular at {int(cellular_avg)}ms"
            ),
            color=InsightColor.BLUE,
        )
    return Insight(
        icon="antenna",
        title=f"Cellular is {int(wifi_avg - cellular_avg)}ms Faster",
        description=(
            f"Cellular averages {int(cellular_avg)}ms vs WiFi at {int(wifi_avg)}ms"
        ),
        color=InsightColor.BLUE,
    )


def consistency(sessions: Sequence[Session]) -> Insight | None:
    """Classify how much the score swings between sessions (population std-dev)."""
    scores = [s.quality_score for s in sessions if s.quality_score is not None]
    if len(scores) < 3:
        return None

    mean = sum(scores) / len(scores)
    std_dev = math.sqrt(sum((score - mean) ** 2 for score in scores) / len(scores))

    if std_dev < 10:
        return Insight(
            icon="checkmark.seal",
            title="Very Consistent Connection",
            description=(
                f"Your quality score only varies by {int(std_dev)} points "
                "between sessions"
            ),
            color=InsightColor.GREEN,
        )
    if std_dev < 20:
        return Insight(
            icon="waveform",
            title="Moderately Consistent",
            description=(
                f"Your quality varies by about {int(std_dev)} points between sessions"
            ),
            color=InsightColor.BLUE,
        )
    return Insight(
        icon="exclamationmark.triangle",
        title="Inconsistent Connection",
        description=(
            f"Your quality varies widely ({int(std_dev)} point swings) "
            "- consider investigating"
        ),
        color=InsightColor.ORANGE,
    )
