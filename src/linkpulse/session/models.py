"""Session data models: probe samples, latency statistics, and sessions."""

from __future__ import annotations

import enum
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from linkpulse.quality.scoring import QualityResult, score_stats


class NetworkType(enum.Enum):
    """Classification of the active network interface."""

    WIFI = "WiFi"
    CELLULAR = "Cellular"
    WIRED = "Wired"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Sample:
    """The recorded outcome of a single reachability probe."""

    host: str
    network_type: NetworkType
    succeeded: bool
    latency: float | None = None
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def is_timeout(self) -> bool:
        return self.latency is None


@dataclass(frozen=True)
class LatencyStats:
    """Aggregates over a run of samples.

    min/max/avg only consider samples that carry a latency; packet loss
    counts every failed sample against the total.
    """

    min: float | None = None
    max: float | None = None
    avg: float | None = None
    packet_loss: float = 0.0
    current: float | None = None
    count: int = 0

    @classmethod
    def from_samples(cls, samples: Iterable[Sample]) -> LatencyStats:
        samples = list(samples)
        if not samples:
            return cls()

        latencies = [s.latency for s in samples if s.latency is not None]
        failed = sum(1 for s in samples if not s.succeeded)

        return cls(
            min=min(latencies) if latencies else None,
            max=max(latencies) if latencies else None,
            avg=sum(latencies) / len(latencies) if latencies else None,
            packet_loss=failed / len(samples) * 100,
            current=samples[-1].latency,
            count=len(samples),
        )

    def quality(self) -> QualityResult:
        return score_stats(self)


@dataclass
class Session:
    """A bounded run of samples against one host, network type and cadence."""

    host: str
    network_type: NetworkType
    is_background: bool = False
    samples: list[Sample] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    quality_score: int | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    def append(self, sample: Sample) -> None:
        """Append a sample, keeping the session in chronological order."""
        if self.samples and sample.timestamp < self.samples[-1].timestamp:
            raise ValueError(
                f"Sample {sample.id} is older than the last sample in session {self.id}"
            )
        self.samples.append(sample)

    def close(self, end_time: float | None = None) -> None:
        """Stamp the end time and fix the final quality score."""
        self.end_time = end_time if end_time is not None else time.time()
        self.quality_score = self.quality.score

    @property
    def stats(self) -> LatencyStats:
        return LatencyStats.from_samples(self.samples)

    @property
    def min_latency(self) -> float | None:
        return self.stats.min

    @property
    def max_latency(self) -> float | None:
        return self.stats.max

    @property
    def avg_latency(self) -> float | None:
        return self.stats.avg

    @property
    def packet_loss(self) -> float:
        return self.stats.packet_loss

    @property
    def quality(self) -> QualityResult:
        return self.stats.quality()

    @property
    def duration(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def formatted_duration(self) -> str:
        minutes, seconds = divmod(int(self.duration), 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"
