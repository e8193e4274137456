"""REST API for stored monitoring sessions."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from linkpulse.session.models import Session

router = APIRouter(tags=["sessions"])


def session_summary(session: Session) -> dict:
    quality = session.quality
    return {
        "id": session.id,
        "host": session.host,
        "network_type": session.network_type.value,
        "is_background": session.is_background,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "duration": session.formatted_duration,
        "sample_count": len(session.samples),
        "min_latency": session.min_latency,
        "avg_latency": session.avg_latency,
        "max_latency": session.max_latency,
        "packet_loss": session.packet_loss,
        "quality_score": session.quality_score,
        "quality_tier": quality.tier.value,
    }


@router.get("/sessions")
async def list_sessions(request: Request, limit: int = 50, offset: int = 0):
    sessions = await request.app.state.store.list_sessions(limit=limit, offset=offset)
    return [session_summary(s) for s in sessions]


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request):
    session = await request.app.state.store.get(session_id)
    if session is None:
        return JSONResponse(
            status_code=404,
            content={"detail": "Session not found"},
        )

    data = session_summary(session)
    data["samples"] = [
        {
            "id": sample.id,
            "timestamp": sample.timestamp,
            "latency": sample.latency,
            "succeeded": sample.succeeded,
        }
        for sample in session.samples
    ]
    return data


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, request: Request):
    deleted = await request.app.state.store.delete(session_id)
    if not deleted:
        return JSONResponse(
            status_code=404,
            content={"detail": "Session not found"},
        )
    return {"status": "deleted", "session_id": session_id}


@router.delete("/sessions")
async def delete_all_sessions(request: Request):
    count = await request.app.state.store.delete_all()
    return {"status": "deleted", "count": count}
