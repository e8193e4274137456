"""Alert manager: threshold checks with per-kind debouncing."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from linkpulse.alerts.base import Notifier
from linkpulse.alerts.models import Alert, AlertKind, AlertThresholds
from linkpulse.session.models import NetworkType

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 300.0
IMPROVEMENT_DELTA = 20


class AlertManager:
    """Decides which alerts fire and hands them to a notifier.

    Each AlertKind is debounced independently: a kind fires only if it has
    not fired within the last ``debounce`` seconds of wall-clock time. The
    last-fired map lives as long as the manager and is never persisted.
    """

    def __init__(
        self,
        notifier: Notifier,
        clock: Callable[[], float] = time.time,
        debounce: float = DEBOUNCE_SECONDS,
    ) -> None:
        self._notifier = notifier
        self._clock = clock
        self._debounce = debounce
        self._last_fired: dict[AlertKind, float] = {}
        self._previous_score: int | None = None
        self._has_permission = self._check_permission()

    @property
    def has_permission(self) -> bool:
        return self._has_permission

    @property
    def previous_score(self) -> int | None:
        return self._previous_score

    def last_fired(self, kind: AlertKind) -> float | None:
        return self._last_fired.get(kind)

    def request_permission(self) -> bool:
        """Ask the notifier for permission again; re-enables alerts if granted."""
        try:
            self._has_permission = bool(self._notifier.request_authorization())
        except Exception:
            logger.exception("Notification permission request failed")
            self._has_permission = False
        return self._has_permission

    def check_thresholds(
        self,
        avg_latency: float | None,
        packet_loss: float,
        thresholds: AlertThresholds,
    ) -> list[Alert]:
        if not thresholds.enabled or not self._has_permission:
            return []

        fired: list[Alert] = []
        if avg_latency is not None and avg_latency > thresholds.latency_threshold_ms:
            alert = self._send_if_needed(
                AlertKind.LATENCY_HIGH,
                "High Latency Detected",
                f"Your ping is {int(avg_latency)}ms "
                f"(threshold: {int(thresholds.latency_threshold_ms)}ms)",
            )
            if alert:
                fired.append(alert)

        if packet_loss > thresholds.packet_loss_threshold_pct:
            alert = self._send_if_needed(
                AlertKind.PACKET_LOSS_HIGH,
                "Packet Loss Detected",
                f"You're experiencing {packet_loss:.1f}% packet loss",
            )
            if alert:
                fired.append(alert)
        return fired

    def notify_network_change(
        self,
        old: NetworkType,
        new: NetworkType,
        thresholds: AlertThresholds,
    ) -> Alert | None:
        if not thresholds.alert_on_network_change or not self._has_permission:
            return None
        return self._send_if_needed(
            AlertKind.NETWORK_CHANGED,
            "Network Changed",
            f"Switched from {old.value} to {new.value}",
        )

    def record_score(self, score: int, thresholds: AlertThresholds) -> Alert | None:
        """Track the latest score and alert on a large jump upwards.

        The comparison is against the score from the previous call, which is
        updated every time whether or not an alert fires.
        """
        previous = self._previous_score
        self._previous_score = score

        if previous is None or score - previous <= IMPROVEMENT_DELTA:
            return None
        if not thresholds.enabled or not self._has_permission:
            return None
        return self._send_if_needed(
            AlertKind.CONNECTION_IMPROVED,
            "Connection Improved",
            f"Your quality score is now {score}",
        )

    def _check_permission(self) -> bool:
        try:
            return bool(self._notifier.authorized())
        except Exception:
            logger.exception("Could not determine notification permission")
            return False

    def _send_if_needed(self, kind: AlertKind, title: str, body: str) -> Alert | None:
        now = self._clock()
        last = self._last_fired.get(kind)
        if last is not None and now - last < self._debounce:
            logger.debug("Suppressing %s alert (debounced)", kind.value)
            return None

        alert = Alert(kind=kind, title=title, body=body, timestamp=now)
        self._last_fired[kind] = now
        self._dispatch(alert)
        return alert

    def _dispatch(self, alert: Alert) -> None:
        try:
            self._notifier.deliver(alert)
        except PermissionError:
            logger.warning("Notification permission revoked, suppressing alerts")
            self._has_permission = False
        except Exception as exc:
            logger.error("Failed to send %s notification: %s", alert.kind.value, exc)
