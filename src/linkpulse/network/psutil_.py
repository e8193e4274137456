"""Network-type observer that polls interface state via psutil."""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Mapping, Sequence
from typing import Any

import psutil

from linkpulse.network.base import NetworkChangeCallback
from linkpulse.session.models import NetworkType

logger = logging.getLogger(__name__)

# Interface name prefixes, checked in order. Cellular first so that
# "wwan0" is not mistaken for a WiFi "w*" interface.
_PREFIXES: tuple[tuple[tuple[str, ...], NetworkType], ...] = (
    (("wwan", "rmnet", "ccmni", "pdp_ip", "usb-modem", "ppp"), NetworkType.CELLULAR),
    (("wlan", "wlp", "wlo", "wlx", "wl", "wifi", "ath", "ra"), NetworkType.WIFI),
    (
        ("eth", "eno", "ens", "enp", "enx", "en", "em", "bond", "br"),
        NetworkType.WIRED,
    ),
)

# Lower index wins when several interfaces are up at once.
_PREFERENCE = (
    NetworkType.WIRED,
    NetworkType.WIFI,
    NetworkType.CELLULAR,
    NetworkType.UNKNOWN,
)

_VIRTUAL_PREFIXES = ("lo", "docker", "veth", "virbr", "tun", "tap", "utun", "awdl")


def classify_interface(name: str) -> NetworkType:
    """Classify an interface by its OS name."""
    lowered = name.lower()
    for prefixes, network_type in _PREFIXES:
        if lowered.startswith(prefixes):
            return network_type
    return NetworkType.UNKNOWN


def detect_network(
    stats: Mapping[str, Any] | None = None,
    addrs: Mapping[str, Sequence[Any]] | None = None,
) -> tuple[NetworkType, bool]:
    """Return (network type, connected) for the best usable interface.

    An interface is usable when it is up, not loopback/virtual, and has an
    IPv4 address. ``stats``/``addrs`` default to the live psutil views.
    """
    if stats is None:
        stats = psutil.net_if_stats()
    if addrs is None:
        addrs = psutil.net_if_addrs()

    candidates: list[NetworkType] = []
    for name, stat in stats.items():
        if not stat.isup or name.lower().startswith(_VIRTUAL_PREFIXES):
            continue
        if not any(a.family == socket.AF_INET for a in addrs.get(name, ())):
            continue
        candidates.append(classify_interface(name))

    if not candidates:
        return NetworkType.UNKNOWN, False
    return min(candidates, key=_PREFERENCE.index), True


class PsutilNetworkSource:
    """Polls interface state on a daemon thread and reports changes."""

    def __init__(self, poll_interval: float = 1.0) -> None:
        self._poll_interval = poll_interval
        self._type = NetworkType.UNKNOWN
        self._connected = False
        self._callbacks: list[NetworkChangeCallback] = []
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def current_type(self) -> NetworkType:
        return self._type

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def on_change(self, callback: NetworkChangeCallback) -> None:
        self._callbacks.append(callback)

    def refresh(self) -> NetworkType:
        """Re-detect now, firing change callbacks if the type changed."""
        try:
            new_type, connected = detect_network()
        except OSError as exc:
            logger.warning("Could not read network interfaces: %s", exc)
            new_type, connected = NetworkType.UNKNOWN, False

        old_type = self._type
        self._type = new_type
        self._connected = connected

        if new_type is not old_type:
            logger.info("Network type changed: %s → %s", old_type.value, new_type.value)
            for callback in list(self._callbacks):
                try:
                    callback(old_type, new_type)
                except Exception:
                    logger.exception("Network change callback failed")
        return new_type

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self.refresh()
        self._thread = threading.Thread(
            target=self._poll_loop,
            name="linkpulse-network",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self._poll_interval + 1)
            self._thread = None

    def _poll_loop(self) -> None:
        while not self._stop_event.wait(timeout=self._poll_interval):
            self.refresh()
