"""Repository classes for async CRUD operations on SQLite."""

from __future__ import annotations

import aiosqlite

from linkpulse.session.models import Sample, Session


class SessionRepo:
    """CRUD for monitoring sessions."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def create(self, session: Session) -> None:
        """Insert the session row. The caller commits."""
        await self._db.execute(
            "INSERT INTO sessions "
            "(id, host, network_type, is_background, start_time, "
            "end_time, quality_score) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                session.id,
                session.host,
                session.network_type.value,
                int(session.is_background),
                session.start_time,
                session.end_time,
                session.quality_score,
            ),
        )

    async def get(self, session_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM sessions WHERE id = ?", (session_id,)
        )
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def list_all(self, limit: int = 50, offset: int = 0) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM sessions ORDER BY start_time DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [dict(row) async for row in cursor]

    async def delete(self, session_id: str) -> bool:
        cursor = await self._db.execute(
            "DELETE FROM sessions WHERE id = ?", (session_id,)
        )
        return cursor.rowcount > 0

    async def delete_all(self) -> int:
        cursor = await self._db.execute("DELETE FROM sessions")
        return cursor.rowcount

    async def delete_before(self, cutoff: float) -> int:
        cursor = await self._db.execute(
            "DELETE FROM sessions WHERE start_time < ?", (cutoff,)
        )
        return cursor.rowcount


class SampleRepo:
    """CRUD for probe samples."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def create_many(self, session_id: str, samples: list[Sample]) -> None:
        """Insert samples for a session. The caller commits."""
        await self._db.executemany(
            "INSERT INTO samples "
            "(id, session_id, timestamp, latency, succeeded, host, network_type) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    sample.id,
                    session_id,
                    sample.timestamp,
                    sample.latency,
                    int(sample.succeeded),
                    sample.host,
                    sample.network_type.value,
                )
                for sample in samples
            ],
        )

    async def list_by_session(self, session_id: str) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM samples WHERE session_id = ? ORDER BY timestamp, rowid",
            (session_id,),
        )
        return [dict(row) async for row in cursor]
