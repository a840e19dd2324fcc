"""Database helpers and SQLAlchemy session factories."""

from .engine import create_sync_engine, create_tables
from .session import get_db_session, get_sessionmaker, get_shared_sessionmaker, session_scope

__all__ = [
    "create_sync_engine",
    "create_tables",
    "get_db_session",
    "get_sessionmaker",
    "get_shared_sessionmaker",
    "session_scope",
]
