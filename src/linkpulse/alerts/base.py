"""Notifier protocol: delivery channels for alerts."""

from __future__ import annotations

from typing import Protocol

from linkpulse.alerts.models import Alert


class Notifier(Protocol):
    """Protocol for alert delivery."""

    def authorized(self) -> bool:
        """Whether the channel currently allows notifications."""
        ...

    def request_authorization(self) -> bool:
        """Ask for permission to notify. Returns True if granted."""
        ...

    def deliver(self, alert: Alert) -> None:
        """Deliver an alert without blocking.

        Raises PermissionError when the channel has revoked permission.
        """
        ...
