"""REST API for controlling the live monitor."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from linkpulse.config import InvalidSettingError

router = APIRouter(tags=["monitor"])


class HostUpdate(BaseModel):
    host: str


class IntervalUpdate(BaseModel):
    seconds: float


def _invalid(exc: InvalidSettingError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@router.get("/monitor")
async def monitor_status(request: Request):
    return request.app.state.monitor.snapshot().to_dict()


@router.post("/monitor/start")
async def start_monitor(request: Request):
    monitor = request.app.state.monitor
    session = await monitor.start()
    if session is None:
        return JSONResponse(
            status_code=409,
            content={"detail": "Current network is not allowed by the monitoring policy"},
        )
    return monitor.snapshot().to_dict()


@router.post("/monitor/stop")
async def stop_monitor(request: Request):
    monitor = request.app.state.monitor
    session = await monitor.stop()
    return {
        "status": "stopped",
        "session_id": session.id if session else None,
        "saved": session is not None and not monitor.pending_sessions,
    }


@router.put("/monitor/host")
async def update_host(body: HostUpdate, request: Request):
    store = request.app.state.settings_store
    monitor = request.app.state.monitor
    try:
        settings = store.update(target_host=body.host.strip())
        await monitor.apply_settings(settings)
    except InvalidSettingError as exc:
        return _invalid(exc)
    return monitor.snapshot().to_dict()


@router.put("/monitor/interval")
async def update_interval(body: IntervalUpdate, request: Request):
    store = request.app.state.settings_store
    monitor = request.app.state.monitor
    try:
        settings = store.update(probe_interval=body.seconds)
        await monitor.apply_settings(settings)
    except InvalidSettingError as exc:
        return _invalid(exc)
    return monitor.snapshot().to_dict()
