"""Request-scoped fields rendered in front of every log message."""
from __future__ import annotations

import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

# Rendering order of the known fields; anything else follows alphabetically.
FIELD_ORDER = ("request_id", "job", "user_id", "role")
REQUEST_ID_HEADER = "X-Request-ID"

_fields: contextvars.ContextVar[dict[str, object]] = contextvars.ContextVar(
    "bizfund_log_fields", default={}
)


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]


def current_fields() -> dict[str, object]:
    return dict(_fields.get())


def bind(**values: object) -> None:
    """Bind fields for the rest of the current context (scripts, workers)."""

    merged = dict(_fields.get())
    merged.update({key: value for key, value in values.items() if value is not None})
    _fields.set(merged)


@contextmanager
def log_scope(**values: object) -> Iterator[dict[str, object]]:
    """Bind fields until the block exits, then restore the previous set."""

    merged = dict(_fields.get())
    merged.update({key: value for key, value in values.items() if value is not None})
    token = _fields.set(merged)
    try:
        yield merged
    finally:
        _fields.reset(token)


def render_fields(fields: dict[str, object]) -> str:
    """Return ``"[request_id=.. user_id=..] "`` or an empty string."""

    if not fields:
        return ""
    keys = [key for key in FIELD_ORDER if key in fields]
    keys += sorted(key for key in fields if key not in FIELD_ORDER)
    return "[" + " ".join(f"{key}={fields[key]}" for key in keys) + "] "


class ContextFilter(logging.Filter):
    """Copy the bound fields onto the record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "context", None) is None:
            fields = _fields.get()
            record.context = render_fields(fields)
            record.request_id = fields.get("request_id", "-")
        return True


__all__ = [
    "ContextFilter",
    "REQUEST_ID_HEADER",
    "bind",
    "current_fields",
    "log_scope",
    "new_request_id",
    "render_fields",
]
