"""WebSocket endpoint for real-time monitor snapshots."""

from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter(tags=["live"])


@router.websocket("/ws/monitor")
async def monitor_ws(websocket: WebSocket):
    """Push a snapshot whenever the monitor's live state changes."""
    await websocket.accept()

    monitor = websocket.app.state.monitor
    last: dict | None = None

    try:
        while True:
            snapshot = monitor.snapshot().to_dict()
            if snapshot != last:
                await websocket.send_text(
                    json.dumps({"type": "snapshot", "data": snapshot})
                )
                last = snapshot
            # Waiting on receive surfaces a client disconnect promptly.
            try:
                await asyncio.wait_for(websocket.receive_text(), timeout=0.5)
            except asyncio.TimeoutError:
                pass
    except WebSocketDisconnect:
        pass
