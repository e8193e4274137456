"""Background resume cycle: a short probe burst run on an external trigger."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Callable

from linkpulse.background.scheduler import BackgroundScheduler
from linkpulse.config import Settings
from linkpulse.network.base import NetworkTypeSource
from linkpulse.probe.base import Prober
from linkpulse.session.models import NetworkType, Sample, Session
from linkpulse.storage.store import SessionStore

logger = logging.getLogger(__name__)

TASK_IDENTIFIER = "linkpulse.background-probe"
DEFAULT_INTERVAL_MINUTES = 15.0


class BackgroundCycle:
    """Performs a bounded probe burst each time the scheduler wakes it.

    Independent of the foreground monitor: it shares no state with it and
    writes its completed session straight to the store. Cancellation via
    :meth:`expire` is cooperative. It is checked between probes and never
    interrupts one in flight. Samples collected so far are kept.
    """

    TASK_IDENTIFIER = TASK_IDENTIFIER
    BURST_SIZE = 5
    PROBE_SPACING = 1.0
    PROBE_TIMEOUT = 5.0

    def __init__(
        self,
        settings_provider: Callable[[], Settings],
        prober: Prober,
        network_source: NetworkTypeSource,
        store: SessionStore,
        scheduler: BackgroundScheduler,
        clock: Callable[[], float] = time.time,
        probe_spacing: float | None = None,
    ) -> None:
        self._settings_provider = settings_provider
        self._prober = prober
        self._network = network_source
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._probe_spacing = (
            self.PROBE_SPACING if probe_spacing is None else probe_spacing
        )
        self._last_settings: Settings | None = None
        self._in_flight = False
        self._cancel_event: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def register(self) -> bool:
        """Bind to the scheduler and queue the first trigger if enabled."""
        self._scheduler.on_trigger(self.handle_background_trigger, self.expire)
        logger.debug("Registered background task '%s'", self.TASK_IDENTIFIER)
        return self.schedule_next()

    def schedule_next(self) -> bool:
        """Request the next trigger. Returns False when background mode is off."""
        settings = self._load_settings()
        if settings is None:
            minutes = DEFAULT_INTERVAL_MINUTES
        elif not settings.background_enabled:
            logger.debug("Background monitoring disabled, not scheduling")
            return False
        else:
            minutes = settings.background_interval_minutes
        if minutes <= 0:
            minutes = DEFAULT_INTERVAL_MINUTES
        try:
            self._scheduler.schedule_next(minutes * 60)
        except Exception as exc:
            logger.error("Failed to schedule background probe: %s", exc)
            return False
        return True

    def _load_settings(self) -> Settings | None:
        """Current settings, or the last good ones if the provider fails."""
        try:
            settings = self._settings_provider()
        except Exception as exc:
            logger.error("Could not load settings, using last known: %s", exc)
            return self._last_settings
        self._last_settings = settings
        return settings

    def cancel_scheduled(self) -> None:
        self._scheduler.cancel()

    def expire(self) -> None:
        """Ask a running burst to stop after the current probe. Thread-safe."""
        event, loop = self._cancel_event, self._loop
        if event is None or loop is None:
            return
        logger.info("Background probe burst expired, finishing early")
        try:
            loop.call_soon_threadsafe(event.set)
        except RuntimeError:
            logger.debug("Event loop already closed, nothing to cancel")

    async def handle_background_trigger(self) -> Session | None:
        """Entry point for the scheduler. Returns the saved session, if any."""
        if self._in_flight:
            logger.warning("Background trigger ignored: a burst is already running")
            return None

        self._in_flight = True
        self._loop = asyncio.get_running_loop()
        self._cancel_event = asyncio.Event()
        try:
            return await self._perform(self._cancel_event)
        finally:
            self._in_flight = False
            self._cancel_event = None
            self._loop = None

    async def _perform(self, cancelled: asyncio.Event) -> Session | None:
        self.schedule_next()

        settings = self._load_settings()
        if settings is None:
            logger.warning("Skipping background probes: no usable settings")
            return None

        network_type = self._network.current_type()
        if settings.background_wifi_only and network_type is not NetworkType.WIFI:
            logger.info(
                "Skipping background probes: WiFi-only and on %s", network_type.value
            )
            return None

        host = settings.target_host
        samples = await self._burst(host, network_type, cancelled)
        if not samples:
            logger.info("Background burst collected no samples")
            return None

        session = self._build_session(host, network_type, samples)
        try:
            await self._store.save(session)
        except Exception as exc:
            logger.error("Failed to save background session %s: %s", session.id, exc)
        else:
            logger.info(
                "Saved background session %s: %d samples, score %s",
                session.id,
                len(session.samples),
                session.quality_score,
            )
        return session

    async def _burst(
        self,
        host: str,
        network_type: NetworkType,
        cancelled: asyncio.Event,
    ) -> list[Sample]:
        samples: list[Sample] = []
        for index in range(self.BURST_SIZE):
            if cancelled.is_set():
                break
            samples.append(
                await self._prober.aprobe(host, self.PROBE_TIMEOUT, network_type)
            )
            if index < self.BURST_SIZE - 1 and await _wait_or_cancel(
                cancelled, self._probe_spacing
            ):
                break
        return samples

    def _build_session(
        self,
        host: str,
        network_type: NetworkType,
        samples: list[Sample],
    ) -> Session:
        """Back-date the session by one second per sample, ending now."""
        now = self._clock()
        start = now - len(samples)
        session = Session(
            host=host,
            network_type=network_type,
            is_background=True,
            start_time=start,
            samples=[
                dataclasses.replace(sample, timestamp=start + index)
                for index, sample in enumerate(samples)
            ],
        )
        session.close(end_time=now)
        return session


async def _wait_or_cancel(cancelled: asyncio.Event, delay: float) -> bool:
    """Sleep for ``delay`` seconds. Returns True early if cancelled."""
    try:
        await asyncio.wait_for(cancelled.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True
