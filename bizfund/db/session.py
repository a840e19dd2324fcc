"""Opinionated SQLAlchemy session helpers."""
from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from .engine import create_sync_engine


def get_sessionmaker(url: str | None = None, **kwargs) -> sessionmaker:
    """Return a ``sessionmaker`` bound to a new engine."""

    engine = create_sync_engine(url, **kwargs)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_shared_sessionmaker() -> sessionmaker:
    """Return the process-wide session factory, creating the engine on first use."""

    return get_sessionmaker()


def get_db_session() -> Generator[Session, None, None]:
    """Yield a database session for the request lifecycle."""

    session = get_shared_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope(url: str | None = None, **kwargs) -> Iterator[Session]:
    """Provide a transactional scope for imperative scripts."""

    factory = get_sessionmaker(url, **kwargs)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
