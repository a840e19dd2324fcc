#!/usr/bin/env python3
"""Clear all data from the database tables."""
from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import delete, func, select  # noqa: E402

from bizfund.core import get_settings  # noqa: E402
from bizfund.core.logger import get_logger, init_logging  # noqa: E402
from bizfund.db import create_sync_engine  # noqa: E402
from bizfund.models import Base  # noqa: E402

logger = get_logger(__name__)


def is_database_empty(engine) -> bool:
    """Check if any mapped table holds rows."""

    with engine.connect() as connection:
        for table in Base.metadata.sorted_tables:
            count = connection.execute(select(func.count()).select_from(table)).scalar()
            if count:
                logger.info("Found %s rows in %s, database is not empty", count, table.name)
                return False
    logger.info("Database appears to be empty")
    return True


def clear_database() -> None:
    """Delete every row, child tables first."""

    engine = create_sync_engine()
    try:
        if is_database_empty(engine):
            logger.info("Database is empty, skipping clear operation")
            return
        with engine.begin() as connection:
            for table in reversed(Base.metadata.sorted_tables):
                result = connection.execute(delete(table))
                logger.info("Cleared %s rows from %s", result.rowcount, table.name)
    finally:
        engine.dispose()
    logger.info("Database clearing complete")


if __name__ == "__main__":
    init_logging(get_settings().logging, app_name="clear-database")
    clear_database()
