"""Alert data models."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

from linkpulse.config import Settings


class AlertKind(enum.Enum):
    """Independently debounced alert categories."""

    LATENCY_HIGH = "latency_high"
    PACKET_LOSS_HIGH = "packet_loss_high"
    NETWORK_CHANGED = "network_changed"
    CONNECTION_IMPROVED = "connection_improved"


@dataclass(frozen=True)
class AlertThresholds:
    """Alert configuration, read-only to the monitor."""

    latency_threshold_ms: float = 150.0
    packet_loss_threshold_pct: float = 5.0
    enabled: bool = False
    alert_on_network_change: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> AlertThresholds:
        return cls(
            latency_threshold_ms=settings.latency_threshold_ms,
            packet_loss_threshold_pct=settings.packet_loss_threshold_pct,
            enabled=settings.alerts_enabled,
            alert_on_network_change=settings.alert_on_network_change,
        )


@dataclass(frozen=True)
class Alert:
    """A notification that passed the debounce check."""

    kind: AlertKind
    title: str
    body: str
    timestamp: float = field(default_factory=time.time)
