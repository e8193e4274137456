"""Reachability probes and target host validation."""

from linkpulse.probe.base import Prober
from linkpulse.probe.http import HttpProber, build_url, is_valid_host

__all__ = ["HttpProber", "Prober", "build_url", "is_valid_host"]
