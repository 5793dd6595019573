"""Database package: engine, sessions and table metadata."""

from app.db.base import Base, async_session_maker, engine, init_db, session_scope

__all__ = ["Base", "async_session_maker", "engine", "init_db", "session_scope"]
