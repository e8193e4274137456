"""REST API for history insights and activity suitability."""

from __future__ import annotations

from fastapi import APIRouter, Request

from linkpulse.quality.activities import recommend
from linkpulse.quality.insights import generate_insights, time_of_day_breakdown

router = APIRouter(tags=["insights"])


@router.get("/insights")
async def get_insights(request: Request, limit: int = 200):
    sessions = await request.app.state.store.list_sessions(limit=limit)
    stats = request.app.state.monitor.stats
    if stats.count == 0 and sessions:
        # Not monitoring: rate activities against the latest session.
        avg_latency, packet_loss = sessions[0].avg_latency, sessions[0].packet_loss
    else:
        avg_latency, packet_loss = stats.avg, stats.packet_loss

    return {
        "session_count": len(sessions),
        "insights": [i.to_dict() for i in generate_insights(sessions)],
        "time_of_day": [
            {
                "period": b.period,
                "hour_range": b.hour_range,
                "avg_latency": b.avg_latency,
                "avg_score": b.avg_score,
                "session_count": b.session_count,
            }
            for b in time_of_day_breakdown(sessions)
        ],
        "activities": [
            {
                "name": r.activity.name,
                "category": r.activity.category.value,
                "description": r.activity.description,
                "status": r.status.value,
                "message": r.message,
            }
            for r in recommend(avg_latency, packet_loss)
        ],
    }
