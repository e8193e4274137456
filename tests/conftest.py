"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

import pytest

from linkpulse.config import Settings, SettingsStore
from linkpulse.session.models import NetworkType, Sample, Session


class FakeProber:
    """Returns scripted latencies; ``None`` means a timed-out probe.

    Once the script runs out it keeps returning successful 10 ms samples and
    sets ``exhausted``.
    """

    def __init__(self, latencies: Iterable[float | None] = ()) -> None:
        self._script = list(latencies)
        self.calls: list[tuple[str, float, NetworkType]] = []
        self.exhausted = asyncio.Event()

    async def aprobe(self, host: str, timeout: float, network_type: NetworkType) -> Sample:
        self.calls.append((host, timeout, network_type))
        if self._script:
            latency = self._script.pop(0)
        else:
            latency = 10.0
        if not self._script:
            self.exhausted.set()
        return Sample(
            host=host,
            network_type=network_type,
            succeeded=latency is not None,
            latency=latency,
        )


class FakeNetwork:
    """A network source whose type is set directly by the test."""

    def __init__(self, network_type: NetworkType = NetworkType.WIFI) -> None:
        self.network_type = network_type
        self.connected = True
        self._callbacks = []

    def current_type(self) -> NetworkType:
        return self.network_type

    @property
    def is_connected(self) -> bool:
        return self.connected

    def on_change(self, callback) -> None:
        self._callbacks.append(callback)

    def switch(self, network_type: NetworkType) -> None:
        old, self.network_type = self.network_type, network_type
        for callback in self._callbacks:
            callback(old, network_type)


class FakeStore:
    """In-memory session store that can be told to fail."""

    def __init__(self) -> None:
        self.saved: list[Session] = []
        self.fail = False
        self.rejected: set[str] = set()

    async def save(self, session: Session) -> None:
        if self.fail:
            raise OSError("disk full")
        if session.id in self.rejected:
            raise ValueError(f"constraint failed for {session.id}")
        self.saved.append(session)


class RecordingNotifier:
    def __init__(self, authorized: bool = True) -> None:
        self.granted = authorized
        self.delivered = []
        self.raise_on_deliver: Exception | None = None

    def authorized(self) -> bool:
        return self.granted

    def request_authorization(self) -> bool:
        return self.granted

    def deliver(self, alert) -> None:
        if self.raise_on_deliver is not None:
            raise self.raise_on_deliver
        self.delivered.append(alert)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_sample(
    latency: float | None,
    timestamp: float = 1000.0,
    host: str = "example.com",
    network_type: NetworkType = NetworkType.WIFI,
) -> Sample:
    return Sample(
        host=host,
        network_type=network_type,
        succeeded=latency is not None,
        latency=latency,
        timestamp=timestamp,
    )


@pytest.fixture
def sample_factory():
    return make_sample


@pytest.fixture
def fake_prober_cls():
    return FakeProber


@pytest.fixture
def fake_network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(target_host="example.com", probe_interval=0.5)


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "config" / "settings.yaml")


@pytest.fixture
def denied_notifier() -> RecordingNotifier:
    return RecordingNotifier(authorized=False)
