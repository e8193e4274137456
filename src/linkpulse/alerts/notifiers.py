"""Concrete alert notifiers: log output and desktop notifications."""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
from collections.abc import Callable

from linkpulse.alerts.models import Alert

logger = logging.getLogger(__name__)


class LogNotifier:
    """Logs alerts and optionally invokes a callback."""

    def __init__(self, callback: Callable[[Alert], None] | None = None) -> None:
        self._callback = callback

    def authorized(self) -> bool:
        return True

    def request_authorization(self) -> bool:
        return True

    def deliver(self, alert: Alert) -> None:
        logger.warning("ALERT [%s]: %s: %s", alert.kind.value, alert.title, alert.body)
        if self._callback:
            self._callback(alert)


class DesktopNotifier:
    """Shows alerts as desktop notifications.

    Uses notify-send on Linux and osascript on macOS. The helper process is
    spawned and not waited on.
    """

    def __init__(self) -> None:
        self._system = platform.system()

    def _command(self, alert: Alert) -> list[str] | None:
        if self._system == "Linux":
            return ["notify-send", "--app-name=linkpulse", alert.title, alert.body]
        if self._system == "Darwin":
            script = (
                f"display notification {_applescript_quote(alert.body)} "
                f"with title {_applescript_quote(alert.title)}"
            )
            return ["osascript", "-e", script]
        return None

    def authorized(self) -> bool:
        if self._system == "Linux":
            return shutil.which("notify-send") is not None
        if self._system == "Darwin":
            return shutil.which("osascript") is not None
        return False

    def request_authorization(self) -> bool:
        granted = self.authorized()
        if not granted:
            logger.info("Desktop notifications unavailable on %s", self._system)
        return granted

    def deliver(self, alert: Alert) -> None:
        command = self._command(alert)
        if command is None:
            raise PermissionError(f"Desktop notifications not supported on {self._system}")
        subprocess.Popen(
            command,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
