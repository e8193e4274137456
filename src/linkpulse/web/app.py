"""FastAPI application factory for the LinkPulse web API."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from linkpulse import __version__
from linkpulse.alerts.base import Notifier
from linkpulse.alerts.manager import AlertManager
from linkpulse.alerts.notifiers import LogNotifier
from linkpulse.config import LinkPulseConfig, SettingsStore
from linkpulse.network.base import NetworkTypeSource
from linkpulse.network.psutil_ import PsutilNetworkSource
from linkpulse.probe.base import Prober
from linkpulse.probe.http import HttpProber
from linkpulse.session.monitor import MonitorLoop
from linkpulse.storage.store import SqliteSessionStore

logger = logging.getLogger(__name__)


def create_app(
    config: LinkPulseConfig | None = None,
    settings_store: SettingsStore | None = None,
    prober: Prober | None = None,
    network_source: NetworkTypeSource | None = None,
    notifier: Notifier | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    The session store and monitor are created on startup, so the database
    is only opened once the server (or a test client) is running.
    """
    config = config or LinkPulseConfig.load()
    settings_store = settings_store or SettingsStore(config.settings_path)

    app = FastAPI(
        title="LinkPulse",
        version=__version__,
        docs_url="/api/docs",
    )

    app.state.config = config
    app.state.settings_store = settings_store

    from linkpulse.web.api.insights import router as insights_router
    from linkpulse.web.api.live import router as live_router
    from linkpulse.web.api.monitor import router as monitor_router
    from linkpulse.web.api.sessions import router as sessions_router
    from linkpulse.web.api.settings import router as settings_router

    app.include_router(monitor_router, prefix="/api")
    app.include_router(sessions_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(insights_router, prefix="/api")
    app.include_router(live_router, prefix="/api")

    owns_network = network_source is None

    @app.on_event("startup")
    async def startup() -> None:
        settings = settings_store.load()
        store = await SqliteSessionStore.open(config.db_path)
        await store.purge_older_than(settings.data_retention_days)

        network = network_source or PsutilNetworkSource()
        if owns_network:
            network.start()

        app.state.store = store
        app.state.network = network
        app.state.monitor = MonitorLoop(
            settings=settings,
            prober=prober or HttpProber(),
            network_source=network,
            store=store,
            alerts=AlertManager(notifier or LogNotifier()),
        )
        logger.info("Web API ready (database %s)", config.db_path)

    @app.on_event("shutdown")
    async def shutdown() -> None:
        if hasattr(app.state, "monitor"):
            await app.state.monitor.stop()
        if owns_network and hasattr(app.state, "network"):
            app.state.network.stop()
        if hasattr(app.state, "store"):
            await app.state.store.close()

    return app
