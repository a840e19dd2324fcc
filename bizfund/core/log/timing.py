"""Timing helpers to log duration and throughput of operations."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Iterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session


class StatementCounter:
    """Counts SQL statements executed on an engine while attached."""

    def __init__(self) -> None:
        self.count = 0
        self._engine: Engine | None = None

    def _on_execute(self, *args, **kwargs) -> None:
        self.count += 1

    def attach(self, session: Session) -> None:
        engine = session.get_bind()
        if isinstance(engine, Engine):
            event.listen(engine, "before_cursor_execute", self._on_execute)
            self._engine = engine

    def detach(self) -> None:
        if self._engine is not None:
            event.remove(self._engine, "before_cursor_execute", self._on_execute)
            self._engine = None


@dataclass
class _Timer:
    label: str
    logger: logging.Logger
    level: int
    unit: str
    expected_total: Optional[int]
    count: int = 0
    start: float = field(default_factory=perf_counter)
    statements: Optional[StatementCounter] = None

    def add(self, amount: int = 1) -> None:
        self.count += amount

    def set_total(self, total: int) -> None:
        self.expected_total = total

    def _resolved_total(self) -> Optional[int]:
        return self.expected_total if self.expected_total is not None else self.count

    def _statement_suffix(self) -> str:
        if self.statements is None or not self.statements.count:
            return ""
        return f" ({self.statements.count:,} DB calls)"

    def finish(self, success: bool = True) -> None:
        elapsed = perf_counter() - self.start
        total = self._resolved_total()

        if success:
            message = f"{self.label} completed in {elapsed:.2f}s"
            if total:
                message += f" ({total:,} {self.unit}"
                if elapsed > 0:
                    message += f" @ {total / elapsed:,.0f} {self.unit}/s"
                message += ")"
            self.logger.log(self.level, message + self._statement_suffix())
        else:
            fail_message = f"{self.label} failed after {elapsed:.2f}s"
            if total:
                fail_message += f" ({total:,} {self.unit})"
            self.logger.error(fail_message + self._statement_suffix())


@contextmanager
def timeit(
    label: str,
    *,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    unit: str = "items",
    total: Optional[int] = None,
    track_db_calls: bool = False,
    session: Optional[Session] = None,
) -> Iterator[_Timer]:
    """Time a block and log its duration, throughput and SQL statement count.

    Args:
        label: Description of the operation being timed
        logger: Logger instance to use (defaults to "bizfund.timer")
        level: Logging level for the timing message
        unit: Unit for throughput calculation (e.g., "users", "rows")
        total: Expected total count for throughput calculation
        track_db_calls: Whether to count SQL statements issued during the block
        session: Session whose engine is observed (required if track_db_calls=True)
    """
    log = logger or logging.getLogger("bizfund.timer")
    counter: StatementCounter | None = None

    if track_db_calls:
        if session is None:
            raise ValueError("session parameter is required when track_db_calls=True")
        counter = StatementCounter()
        counter.attach(session)

    timer = _Timer(
        label=label,
        logger=log,
        level=level,
        unit=unit,
        expected_total=total,
        statements=counter,
    )

    try:
        yield timer
    except Exception:
        timer.finish(success=False)
        raise
    else:
        timer.finish(success=True)
    finally:
        if counter is not None:
            counter.detach()
