"""Debounced connection alerts and their delivery channels."""

from linkpulse.alerts.manager import AlertManager
from linkpulse.alerts.models import Alert, AlertKind, AlertThresholds
from linkpulse.alerts.notifiers import DesktopNotifier, LogNotifier

__all__ = [
    "Alert",
    "AlertKind",
    "AlertManager",
    "AlertThresholds",
    "DesktopNotifier",
    "LogNotifier",
]
