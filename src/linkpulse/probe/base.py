"""Prober protocol: all probe implementations must satisfy this."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from linkpulse.session.models import NetworkType, Sample


@runtime_checkable
class Prober(Protocol):
    """Protocol for reachability probes."""

    async def aprobe(
        self,
        host: str,
        timeout: float,
        network_type: NetworkType,
    ) -> Sample:
        """Probe ``host`` once. Must never raise; failures become failed samples."""
        ...
