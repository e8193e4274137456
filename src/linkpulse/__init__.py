"""LinkPulse: connection quality monitoring for a single endpoint."""

__version__ = "0.1.0"
