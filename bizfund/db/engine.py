"""Database engine factories."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from bizfund.core.config import get_settings
from bizfund.core.logger import get_logger
from bizfund.models import Base

LOGGER = get_logger(__name__)


def create_sync_engine(url: str | None = None, **kwargs) -> Engine:
    """Create a synchronous SQLAlchemy engine using configured defaults."""

    settings = get_settings()
    resolved_url = url or settings.database.sqlalchemy_url

    options = dict(kwargs)
    options.setdefault("echo", settings.sqlalchemy_echo)
    if not resolved_url.startswith("sqlite"):
        options.setdefault("pool_pre_ping", True)

    LOGGER.debug(
        "Creating SQLAlchemy engine",
        extra={"url": settings.database.masked_url if url is None else url, "options": options},
    )
    return create_engine(resolved_url, future=True, **options)


def create_tables(engine: Engine) -> None:
    """Create every table known to the model metadata."""

    LOGGER.info("Creating database schema")
    Base.metadata.create_all(engine)
