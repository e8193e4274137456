"""Session store: durable append, listing, and deletion of completed sessions."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Protocol

import aiosqlite

from linkpulse.session.models import NetworkType, Sample, Session
from linkpulse.storage.db import get_db
from linkpulse.storage.repos import SampleRepo, SessionRepo

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86400


class SessionStore(Protocol):
    """What the monitor and background cycle need from storage."""

    async def save(self, session: Session) -> None:
        """Durably append a completed session and its samples."""
        ...


class SqliteSessionStore:
    """SessionStore backed by the SQLite schema in :mod:`linkpulse.storage.db`."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db
        self._sessions = SessionRepo(db)
        self._samples = SampleRepo(db)

    @classmethod
    async def open(cls, db_path: str | Path) -> SqliteSessionStore:
        return cls(await get_db(db_path))

    async def close(self) -> None:
        await self._db.close()

    async def save(self, session: Session) -> None:
        """Insert the session and its samples in a single transaction."""
        try:
            await self._sessions.create(session)
            await self._samples.create_many(session.id, session.samples)
            await self._db.commit()
        except aiosqlite.Error:
            await self._db.rollback()
            raise
        logger.debug(
            "Saved session %s (%d samples)", session.id, len(session.samples)
        )

    async def get(self, session_id: str) -> Session | None:
        row = await self._sessions.get(session_id)
        if row is None:
            return None
        return await self._hydrate(row)

    async def list_sessions(self, limit: int = 50, offset: int = 0) -> list[Session]:
        """Sessions ordered by start time, newest first."""
        rows = await self._sessions.list_all(limit=limit, offset=offset)
        return [await self._hydrate(row) for row in rows]

    async def delete(self, session_id: str) -> bool:
        deleted = await self._sessions.delete(session_id)
        await self._db.commit()
        return deleted

    async def delete_all(self) -> int:
        count = await self._sessions.delete_all()
        await self._db.commit()
        return count

    async def purge_older_than(self, days: int, now: float | None = None) -> int:
        """Delete sessions that started more than ``days`` days ago."""
        now = now if now is not None else time.time()
        count = await self._sessions.delete_before(now - days * _SECONDS_PER_DAY)
        await self._db.commit()
        if count:
            logger.info("Purged %d session(s) older than %d days", count, days)
        return count

    async def _hydrate(self, row: dict) -> Session:
        sample_rows = await self._samples.list_by_session(row["id"])
        return Session(
            id=row["id"],
            host=row["host"],
            network_type=NetworkType(row["network_type"]),
            is_background=bool(row["is_background"]),
            start_time=row["start_time"],
            end_time=row["end_time"],
            quality_score=row["quality_score"],
            samples=[_sample_from_row(r) for r in sample_rows],
        )


def _sample_from_row(row: dict) -> Sample:
    return Sample(
        id=row["id"],
        timestamp=row["timestamp"],
        latency=row["latency"],
        succeeded=bool(row["succeeded"]),
        host=row["host"],
        network_type=NetworkType(row["network_type"]),
    )
