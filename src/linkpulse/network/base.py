"""NetworkTypeSource protocol: platform network observers must satisfy this."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from linkpulse.session.models import NetworkType

NetworkChangeCallback = Callable[[NetworkType, NetworkType], None]


@runtime_checkable
class NetworkTypeSource(Protocol):
    """Publishes the current interface classification and connectivity."""

    def current_type(self) -> NetworkType:
        """Return the latest observed network type."""
        ...

    @property
    def is_connected(self) -> bool:
        """Whether any usable interface is up."""
        ...

    def on_change(self, callback: NetworkChangeCallback) -> None:
        """Register ``callback(old, new)`` for classification changes."""
        ...
