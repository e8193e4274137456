"""Monitoring policy: which network types monitoring may continue on."""

from __future__ import annotations

import enum

from linkpulse.session.models import NetworkType


class MonitoringPolicy(enum.Enum):
    """Governs whether a network-type change pauses monitoring."""

    AUTO = "auto"
    WIFI_ONLY = "wifi_only"
    CELLULAR_ONLY = "cellular_only"

    def allows(self, network_type: NetworkType) -> bool:
        if self is MonitoringPolicy.WIFI_ONLY:
            return network_type is NetworkType.WIFI
        if self is MonitoringPolicy.CELLULAR_ONLY:
            return network_type is NetworkType.CELLULAR
        return True
