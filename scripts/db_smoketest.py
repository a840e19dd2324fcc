"""Simple database connectivity check."""
from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import inspect, text

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bizfund.core import get_settings  # noqa: E402  (import after sys.path manipulation)
from bizfund.db.engine import create_sync_engine  # noqa: E402
from bizfund.models import Base  # noqa: E402

settings = get_settings()
engine = create_sync_engine()


def main() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        print(f"✅ Connected via {settings.database.masked_url}")
        present = set(inspect(conn).get_table_names())
        missing = sorted(set(Base.metadata.tables) - present)
        if missing:
            print("Missing tables: " + ", ".join(missing))
        else:
            print("All tables present")


if __name__ == "__main__":
    main()
