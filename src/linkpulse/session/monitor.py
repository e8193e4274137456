"""Monitor loop: orchestrates probing, live statistics, alerts, and policy."""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from linkpulse.alerts.manager import AlertManager
from linkpulse.alerts.models import AlertThresholds
from linkpulse.config import MIN_PROBE_INTERVAL, Settings
from linkpulse.network.base import NetworkTypeSource
from linkpulse.probe.base import Prober
from linkpulse.quality.scoring import QualityResult, QualityTier
from linkpulse.session.models import LatencyStats, NetworkType, Session
from linkpulse.session.window import WINDOW_SIZE, SlidingWindow
from linkpulse.storage.store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0

SnapshotListener = Callable[["MonitorSnapshot"], None]


class MonitorState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class MonitorSnapshot:
    """Read-only view of the live monitor for presentation layers."""

    is_monitoring: bool
    network_type: NetworkType
    is_connected: bool
    host: str
    session_id: str | None = None
    current_latency: float | None = None
    min_latency: float | None = None
    max_latency: float | None = None
    avg_latency: float | None = None
    packet_loss: float = 0.0
    quality_score: int | None = None
    quality_tier: QualityTier | None = None
    sample_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["network_type"] = self.network_type.value
        data["quality_tier"] = self.quality_tier.value if self.quality_tier else None
        return data


class MonitorLoop:
    """Runs the foreground probe cycle for one target host.

    Idle until :meth:`start`; then one asyncio task probes the host every
    ``probe_interval`` seconds, feeding the active session and the sliding
    window. :meth:`stop` cancels the task, closes the session and hands it
    to the store. Changing host or interval while running restarts the loop,
    so every session keeps a single host and cadence.
    """

    def __init__(
        self,
        settings: Settings,
        prober: Prober,
        network_source: NetworkTypeSource,
        store: SessionStore,
        alerts: AlertManager,
        on_update: SnapshotListener | None = None,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        window_size: int = WINDOW_SIZE,
        min_interval: float = MIN_PROBE_INTERVAL,
    ) -> None:
        self._settings = settings
        self._prober = prober
        self._network = network_source
        self._store = store
        self._alerts = alerts
        self._listeners: list[SnapshotListener] = []
        if on_update is not None:
            self._listeners.append(on_update)
        self._probe_timeout = probe_timeout
        self._min_interval = min_interval

        self._task: asyncio.Task[None] | None = None
        self._session: Session | None = None
        self._window = SlidingWindow(window_size)
        self._stats = LatencyStats()
        self._quality: QualityResult | None = None
        self._last_network_type = network_source.current_type()
        self._pending: list[Session] = []

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state(self) -> MonitorState:
        return MonitorState.RUNNING if self._task is not None else MonitorState.IDLE

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def window(self) -> SlidingWindow:
        return self._window

    @property
    def stats(self) -> LatencyStats:
        return self._stats

    @property
    def quality(self) -> QualityResult | None:
        return self._quality

    @property
    def interval(self) -> float:
        return max(self._settings.probe_interval, self._min_interval)

    @property
    def pending_sessions(self) -> list[Session]:
        """Closed sessions whose save failed and will be retried."""
        return list(self._pending)

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    async def start(self) -> Session | None:
        """Begin monitoring. Returns the active session, or None if refused.

        Calling start() while running is a no-op that returns the current
        session. Starting on a network type the monitoring policy forbids is
        refused.
        """
        if self._task is not None:
            return self._session

        network_type = self._network.current_type()
        policy = self._settings.monitoring_policy
        if not policy.allows(network_type):
            logger.warning(
                "Not starting: policy '%s' does not allow %s",
                policy.value,
                network_type.value,
            )
            return None

        self._session = Session(
            host=self._settings.target_host,
            network_type=network_type,
        )
        self._reset_live_state()
        self._last_network_type = network_type
        self._task = asyncio.create_task(self._run(), name="linkpulse-monitor")

        logger.info(
            "Monitoring %s every %.1fs on %s (session %s)",
            self._settings.target_host,
            self.interval,
            network_type.value,
            self._session.id,
        )
        self._publish()
        return self._session

    async def stop(self) -> Session | None:
        """Stop monitoring and save the closed session. No-op when idle."""
        task = self._task
        if task is None:
            return None
        # Detach first; a start() during the await opens its own session.
        session = self._session
        self._task = None
        self._session = None
        self._reset_live_state()

        if task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if session is not None:
            session.close()
            logger.info(
                "Stopped session %s: %d samples, score %s",
                session.id,
                len(session.samples),
                session.quality_score,
            )
            self._pending.append(session)
            await self.flush_pending()

        self._publish()
        return session

    async def flush_pending(self) -> int:
        """Retry saving closed sessions in order. Returns how many were saved."""
        pending, self._pending = self._pending, []
        failed: list[Session] = []
        saved = 0
        for session in pending:
            try:
                await self._store.save(session)
            except Exception as exc:
                logger.error("Failed to save session %s: %s", session.id, exc)
                failed.append(session)
                continue
            saved += 1

        # Sessions closed while saving queue up behind the failures.
        self._pending = failed + self._pending
        if self._pending:
            logger.warning("%d session(s) pending save", len(self._pending))
        return saved

    async def update_host(self, host: str) -> Session | None:
        """Change the target host; restarts the loop when running."""
        return await self.apply_settings(
            dataclasses.replace(self._settings, target_host=host.strip())
        )

    async def update_interval(self, seconds: float) -> Session | None:
        """Change the probe interval; restarts the loop when running."""
        return await self.apply_settings(
            dataclasses.replace(self._settings, probe_interval=float(seconds))
        )

    async def apply_settings(self, settings: Settings) -> Session | None:
        """Swap in new settings, restarting if host or cadence changed.

        Raises InvalidSettingError before touching the running loop.
        """
        settings.validate(min_interval=self._min_interval)
        old = self._settings
        self._settings = settings

        restart = self.is_running and (
            old.target_host != settings.target_host
            or old.probe_interval != settings.probe_interval
        )
        if restart:
            await self.stop()
            return await self.start()
        return self._session

    def snapshot(self) -> MonitorSnapshot:
        stats = self._stats
        quality = self._quality
        return MonitorSnapshot(
            is_monitoring=self.is_running,
            network_type=self._network.current_type(),
            is_connected=self._network.is_connected,
            host=self._settings.target_host,
            session_id=self._session.id if self._session else None,
            current_latency=stats.current,
            min_latency=stats.min,
            max_latency=stats.max,
            avg_latency=stats.avg,
            packet_loss=stats.packet_loss,
            quality_score=quality.score if quality else None,
            quality_tier=quality.tier if quality else None,
            sample_count=stats.count,
        )

    async def _run(self) -> None:
        while True:
            try:
                await self._cycle()
            except Exception:
                logger.exception("Probe cycle failed")

            if self._task is not asyncio.current_task():
                # stop() was called from inside the cycle
                return
            await asyncio.sleep(self.interval)

    async def _cycle(self) -> None:
        network_type = self._network.current_type()
        sample = await self._prober.aprobe(
            self._settings.target_host,
            self._probe_timeout,
            network_type,
        )

        session = self._session
        if session is None:
            return
        if session.samples and sample.timestamp < session.samples[-1].timestamp:
            # Wall clock stepped backwards; keep the sample in order.
            sample = dataclasses.replace(
                sample, timestamp=session.samples[-1].timestamp
            )
        session.append(sample)
        self._window.append(sample)

        self._stats = self._window.stats()
        self._quality = self._stats.quality()

        thresholds = AlertThresholds.from_settings(self._settings)
        self._alerts.check_thresholds(
            self._stats.avg, self._stats.packet_loss, thresholds
        )
        self._alerts.record_score(self._quality.score, thresholds)

        if await self._check_network_change(network_type, thresholds):
            return
        self._publish()

    async def _check_network_change(
        self,
        network_type: NetworkType,
        thresholds: AlertThresholds,
    ) -> bool:
        """Apply the monitoring policy to a type change. Returns True if paused."""
        previous = self._last_network_type
        paused = False

        if network_type is not previous and self._session is not None:
            logger.info(
                "Network changed during session %s: %s → %s",
                self._session.id,
                previous.value,
                network_type.value,
            )
            self._alerts.notify_network_change(previous, network_type, thresholds)

            policy = self._settings.monitoring_policy
            if not policy.allows(network_type):
                logger.warning(
                    "Pausing: policy '%s' does not allow %s",
                    policy.value,
                    network_type.value,
                )
                await self.stop()
                paused = True

        self._last_network_type = network_type
        return paused

    def _reset_live_state(self) -> None:
        self._window.clear()
        self._stats = LatencyStats()
        self._quality = None

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")
