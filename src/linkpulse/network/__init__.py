"""Network-type observation and monitoring-continuation policy."""

from linkpulse.network.base import NetworkTypeSource
from linkpulse.network.policy import MonitoringPolicy
from linkpulse.network.psutil_ import PsutilNetworkSource, classify_interface, detect_network

__all__ = [
    "MonitoringPolicy",
    "NetworkTypeSource",
    "PsutilNetworkSource",
    "classify_interface",
    "detect_network",
]
