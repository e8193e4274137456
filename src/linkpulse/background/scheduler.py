"""Background scheduler boundary and an in-process asyncio adapter."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

TriggerCallback = Callable[[], Awaitable[Any]]
ExpirationCallback = Callable[[], None]


class BackgroundScheduler(Protocol):
    """Best-effort, not-before-N-seconds trigger source.

    The scheduler may end a triggered run early by calling the expiration
    callback registered with :meth:`on_trigger`.
    """

    def schedule_next(self, delay: float) -> None:
        """Request one trigger no earlier than ``delay`` seconds from now."""
        ...

    def on_trigger(
        self,
        callback: TriggerCallback,
        expiration: ExpirationCallback | None = None,
    ) -> None:
        """Register the entry point and its expiration handler."""
        ...

    def cancel(self) -> None:
        """Drop any pending trigger."""
        ...


class AsyncioScheduler:
    """Runs triggers on the current asyncio event loop.

    Holds at most one pending trigger; scheduling again replaces it. Each
    triggered run gets ``time_budget`` seconds before the expiration
    callback is invoked.
    """

    def __init__(self, time_budget: float = 30.0) -> None:
        self._time_budget = time_budget
        self._callback: TriggerCallback | None = None
        self._expiration: ExpirationCallback | None = None
        self._pending: asyncio.TimerHandle | None = None
        self._running: set[asyncio.Task[Any]] = set()

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def on_trigger(
        self,
        callback: TriggerCallback,
        expiration: ExpirationCallback | None = None,
    ) -> None:
        self._callback = callback
        self._expiration = expiration

    def schedule_next(self, delay: float) -> None:
        if self._callback is None:
            raise RuntimeError("No trigger registered; call on_trigger() first")
        loop = asyncio.get_running_loop()
        if self._pending is not None:
            self._pending.cancel()
        self._pending = loop.call_later(delay, self._fire)
        logger.debug("Next background trigger in %.0fs", delay)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def wait_idle(self) -> None:
        """Wait for triggered runs that are still in flight."""
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    def _fire(self) -> None:
        self._pending = None
        if self._callback is None:
            return
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._callback(), name="linkpulse-background")
        self._running.add(task)

        budget = None
        if self._expiration is not None:
            budget = loop.call_later(self._time_budget, self._expiration)

        def _done(finished: asyncio.Task[Any]) -> None:
            self._running.discard(finished)
            if budget is not None:
                budget.cancel()
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(
                    "Background trigger failed: %s", finished.exception()
                )

        task.add_done_callback(_done)
