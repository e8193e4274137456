"""Which everyday activities the current connection can support."""

from __future__ import annotations

import enum
from dataclasses import dataclass

# Within this fraction of both limits counts as comfortably inside them.
_COMFORT_MARGIN = 0.7


class ActivityCategory(enum.Enum):
    GAMING = "gaming"
    STREAMING = "streaming"
    COMMUNICATION = "communication"
    BROWSING = "browsing"


class ActivityStatus(enum.Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"


@dataclass(frozen=True)
class Activity:
    name: str
    max_latency: float
    max_packet_loss: float
    description: str
    category: ActivityCategory


@dataclass(frozen=True)
class Recommendation:
    activity: Activity
    status: ActivityStatus
    message: str


ACTIVITIES: tuple[Activity, ...] = (
    Activity("Competitive Gaming", 30, 0.5, "FPS, MOBA, fighting games", ActivityCategory.GAMING),
    Activity("Casual Gaming", 80, 2.0, "Turn-based, strategy games", ActivityCategory.GAMING),
    Activity("4K Streaming", 50, 1.0, "Ultra HD video content", ActivityCategory.STREAMING),
    Activity("HD Streaming", 100, 2.0, "1080p video content", ActivityCategory.STREAMING),
    Activity("Video Calls", 150, 3.0, "Zoom, FaceTime, Teams", ActivityCategory.COMMUNICATION),
    Activity("Voice Calls", 200, 5.0, "Phone calls, Discord", ActivityCategory.COMMUNICATION),
    Activity("Web Browsing", 300, 10.0, "General internet usage", ActivityCategory.BROWSING),
)


def recommend(avg_latency: float | None, packet_loss: float) -> list[Recommendation]:
    """Rate every known activity. Without latency data there is nothing to rate."""
    if avg_latency is None:
        return []
    return [_rate(activity, avg_latency, packet_loss) for activity in ACTIVITIES]


def suitable_activities(avg_latency: float | None, packet_loss: float) -> list[Activity]:
    return [
        r.activity
        for r in recommend(avg_latency, packet_loss)
        if r.status is not ActivityStatus.POOR
    ]


def unsuitable_activities(avg_latency: float | None, packet_loss: float) -> list[Activity]:
    return [
        r.activity
        for r in recommend(avg_latency, packet_loss)
        if r.status is ActivityStatus.POOR
    ]


def _rate(activity: Activity, latency: float, packet_loss: float) -> Recommendation:
    if (
        latency <= activity.max_latency * _COMFORT_MARGIN
        and packet_loss <= activity.max_packet_loss * _COMFORT_MARGIN
    ):
        return Recommendation(activity, ActivityStatus.EXCELLENT, "Perfect connection")
    if latency <= activity.max_latency and packet_loss <= activity.max_packet_loss:
        return Recommendation(activity, ActivityStatus.GOOD, "Should work well")
    if latency > activity.max_latency:
        return Recommendation(activity, ActivityStatus.POOR, "Latency too high")
    return Recommendation(activity, ActivityStatus.POOR, "Too much packet loss")
