"""REST API for user settings."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from linkpulse.config import InvalidSettingError

router = APIRouter(tags=["settings"])


class SettingsUpdate(BaseModel):
    target_host: str | None = None
    probe_interval: float | None = None
    monitoring_policy: str | None = None
    data_retention_days: int | None = None
    alerts_enabled: bool | None = None
    latency_threshold_ms: float | None = None
    packet_loss_threshold_pct: float | None = None
    alert_on_network_change: bool | None = None
    background_enabled: bool | None = None
    background_interval_minutes: float | None = None
    background_wifi_only: bool | None = None


@router.get("/settings")
async def get_settings(request: Request):
    return request.app.state.settings_store.load().to_dict()


@router.put("/settings")
async def update_settings(body: SettingsUpdate, request: Request):
    changes = {k: v for k, v in body.model_dump().items() if v is not None}
    try:
        settings = request.app.state.settings_store.update(**changes)
        await request.app.state.monitor.apply_settings(settings)
    except InvalidSettingError as exc:
        return JSONResponse(status_code=422, content={"detail": str(exc)})
    return settings.to_dict()
