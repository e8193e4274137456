"""Bounded FIFO of recent samples used for live statistics."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from linkpulse.session.models import LatencyStats, Sample

WINDOW_SIZE = 60


class SlidingWindow:
    """Keeps the most recent ``capacity`` samples; the oldest is evicted first."""

    def __init__(self, capacity: int = WINDOW_SIZE) -> None:
        if capacity < 1:
            raise ValueError("Window capacity must be at least 1")
        self._samples: deque[Sample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or 0

    def append(self, sample: Sample) -> Sample | None:
        """Add a sample. Returns the evicted sample when the window was full."""
        evicted = None
        if len(self._samples) == self.capacity:
            evicted = self._samples[0]
        self._samples.append(sample)
        return evicted

    def clear(self) -> None:
        self._samples.clear()

    def stats(self) -> LatencyStats:
        return LatencyStats.from_samples(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)
