#!/usr/bin/env python3
"""Seed the database with the demo roster, projects, investments and deposits."""
from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bizfund.core import get_settings  # noqa: E402  (import after sys.path manipulation)
from bizfund.core.logger import bind, get_logger, init_logging  # noqa: E402
from bizfund.db import create_sync_engine, create_tables, session_scope  # noqa: E402
from bizfund.seeding import SeedGenerator  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables from the model metadata before seeding",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    logger.info("Seeding %s", settings.database.masked_url)

    if args.create_tables:
        engine = create_sync_engine()
        try:
            create_tables(engine)
        finally:
            engine.dispose()

    try:
        with session_scope() as session:
            report = SeedGenerator(session, rng=random.Random(args.seed)).run()
    except Exception:
        logger.exception("Seeding failed")
        return 1

    logger.info("Database seeded successfully")
    logger.info("Admin: admin@bizfundraiser.com / admin123")
    logger.info("Investors: investor1@example.com .. investor%s@example.com / investor123", report.investors)
    logger.info("Businesses: business1@example.com .. business%s@example.com / business123", report.businesses)
    return 0


if __name__ == "__main__":
    init_logging(get_settings().logging, app_name="seed")
    bind(job="seed_database")
    sys.exit(main())
