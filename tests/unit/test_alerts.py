"""Tests for the alert manager and notifiers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from linkpulse.alerts.manager import AlertManager
from linkpulse.alerts.models import Alert, AlertKind, AlertThresholds
from linkpulse.alerts.notifiers import DesktopNotifier, LogNotifier
from linkpulse.config import Settings
from linkpulse.session.models import NetworkType

ENABLED = AlertThresholds(
    latency_threshold_ms=150.0,
    packet_loss_threshold_pct=5.0,
    enabled=True,
    alert_on_network_change=True,
)


class TestThresholds:
    def test_from_settings(self):
        thresholds = AlertThresholds.from_settings(
            Settings(alerts_enabled=True, latency_threshold_ms=80.0)
        )
        assert thresholds.enabled
        assert thresholds.latency_threshold_ms == 80.0
        assert thresholds.packet_loss_threshold_pct == 5.0

    def test_disabled_fires_nothing(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        assert manager.check_thresholds(500.0, 50.0, AlertThresholds()) == []
        assert notifier.delivered == []

    def test_latency_and_loss_fire_separately(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        fired = manager.check_thresholds(200.0, 10.0, ENABLED)
        assert [a.kind for a in fired] == [AlertKind.LATENCY_HIGH, AlertKind.PACKET_LOSS_HIGH]
        assert fired[0].body == "Your ping is 200ms (threshold: 150ms)"
        assert fired[1].body == "You're experiencing 10.0% packet loss"

    def test_at_threshold_does_not_fire(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        assert manager.check_thresholds(150.0, 5.0, ENABLED) == []

    def test_absent_latency_skips_latency_check(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        fired = manager.check_thresholds(None, 100.0, ENABLED)
        assert [a.kind for a in fired] == [AlertKind.PACKET_LOSS_HIGH]


class TestDebounce:
    def test_suppressed_within_five_minutes(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        assert manager.check_thresholds(200.0, 0.0, ENABLED)
        clock.advance(100)
        assert manager.check_thresholds(200.0, 0.0, ENABLED) == []
        clock.advance(300)
        assert manager.check_thresholds(200.0, 0.0, ENABLED)
        assert len(notifier.delivered) == 2

    def test_kinds_debounce_independently(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        manager.check_thresholds(200.0, 0.0, ENABLED)
        clock.advance(10)
        fired = manager.check_thresholds(200.0, 20.0, ENABLED)
        assert [a.kind for a in fired] == [AlertKind.PACKET_LOSS_HIGH]

    def test_last_fired_is_recorded(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        assert manager.last_fired(AlertKind.LATENCY_HIGH) is None
        manager.check_thresholds(200.0, 0.0, ENABLED)
        assert manager.last_fired(AlertKind.LATENCY_HIGH) == clock.now


class TestPermission:
    def test_no_permission_no_alerts(self, denied_notifier, clock):
        notifier = denied_notifier
        manager = AlertManager(notifier, clock=clock)
        assert not manager.has_permission
        assert manager.check_thresholds(500.0, 50.0, ENABLED) == []
        assert manager.notify_network_change(
            NetworkType.WIFI, NetworkType.CELLULAR, ENABLED
        ) is None

    def test_request_permission_enables(self, denied_notifier, clock):
        notifier = denied_notifier
        manager = AlertManager(notifier, clock=clock)
        notifier.granted = True
        assert manager.request_permission()
        assert manager.check_thresholds(500.0, 0.0, ENABLED)

    def test_permission_error_revokes(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        notifier.raise_on_deliver = PermissionError("revoked")
        manager.check_thresholds(500.0, 0.0, ENABLED)
        assert not manager.has_permission

    def test_delivery_error_is_logged(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        notifier.raise_on_deliver = RuntimeError("dbus down")
        fired = manager.check_thresholds(500.0, 0.0, ENABLED)
        assert len(fired) == 1
        assert manager.has_permission


class TestNetworkChange:
    def test_fires_with_names(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        alert = manager.notify_network_change(
            NetworkType.WIFI, NetworkType.CELLULAR, AlertThresholds()
        )
        assert alert is not None
        assert alert.body == "Switched from WiFi to Cellular"

    def test_respects_setting(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        thresholds = AlertThresholds(alert_on_network_change=False)
        assert manager.notify_network_change(
            NetworkType.WIFI, NetworkType.CELLULAR, thresholds
        ) is None


class TestImprovement:
    def test_large_jump_fires(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        assert manager.record_score(40, ENABLED) is None
        alert = manager.record_score(61, ENABLED)
        assert alert is not None
        assert alert.kind is AlertKind.CONNECTION_IMPROVED
        assert alert.body == "Your quality score is now 61"

    def test_jump_of_exactly_twenty_does_not_fire(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        manager.record_score(40, ENABLED)
        assert manager.record_score(60, ENABLED) is None

    def test_previous_score_always_updates(self, notifier, clock):
        manager = AlertManager(notifier, clock=clock)
        manager.record_score(10, AlertThresholds())
        manager.record_score(90, AlertThresholds())
        assert manager.previous_score == 90
        assert notifier.delivered == []


class TestNotifiers:
    def test_log_notifier_callback(self):
        received = []
        notifier = LogNotifier(callback=received.append)
        alert = Alert(kind=AlertKind.LATENCY_HIGH, title="t", body="b")
        notifier.deliver(alert)
        assert received == [alert]
        assert notifier.authorized()

    @patch("linkpulse.alerts.notifiers.subprocess.Popen")
    @patch("linkpulse.alerts.notifiers.platform.system", return_value="Linux")
    def test_desktop_linux(self, mock_system: MagicMock, mock_popen: MagicMock):
        notifier = DesktopNotifier()
        notifier.deliver(Alert(kind=AlertKind.LATENCY_HIGH, title="High", body="Slow"))
        command = mock_popen.call_args[0][0]
        assert command[0] == "notify-send"
        assert command[-2:] == ["High", "Slow"]

    @patch("linkpulse.alerts.notifiers.subprocess.Popen")
    @patch("linkpulse.alerts.notifiers.platform.system", return_value="Darwin")
    def test_desktop_macos_quotes(self, mock_system: MagicMock, mock_popen: MagicMock):
        DesktopNotifier().deliver(
            Alert(kind=AlertKind.LATENCY_HIGH, title='Say "hi"', body="ok")
        )
        command = mock_popen.call_args[0][0]
        assert command[0] == "osascript"
        assert 'with title "Say \\"hi\\""' in command[2]

    @patch("linkpulse.alerts.notifiers.platform.system", return_value="Windows")
    def test_desktop_unsupported(self, mock_system: MagicMock):
        notifier = DesktopNotifier()
        assert not notifier.authorized()
        with pytest.raises(PermissionError):
            notifier.deliver(Alert(kind=AlertKind.LATENCY_HIGH, title="t", body="b"))
