"""SQLite persistence for completed monitoring sessions."""

from linkpulse.storage.store import SessionStore, SqliteSessionStore

__all__ = ["SessionStore", "SqliteSessionStore"]
