"""Logging setup: rich console output plus an optional rotating file.

``init_logging`` takes the :class:`~bizfund.core.config.LoggingSettings`
loaded from ``LOG_LEVEL`` / ``LOG_DIR``. Every handler carries a
:class:`ContextFilter`, so request ids and the authenticated user bound via
:func:`log_scope` prefix each message.
"""
from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from threading import RLock

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from bizfund.core.config import LoggingSettings

from .context import (
    REQUEST_ID_HEADER,
    ContextFilter,
    bind,
    current_fields,
    log_scope,
    new_request_id,
)
from .timing import timeit

__all__ = [
    "REQUEST_ID_HEADER",
    "bind",
    "current_fields",
    "get_logger",
    "init_logging",
    "log_scope",
    "new_request_id",
    "shutdown_logging",
    "timeit",
]

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(context)s%(message)s"
LOG_BACKUP_DAYS = 14

_lock = RLock()
_active: tuple[str, LoggingSettings] | None = None
_handlers: list[logging.Handler] = []


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(context)s%(message)s"))
    return handler


def _file_handler(log_dir: Path, app_name: str, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        log_dir / f"{app_name}.log",
        when="midnight",
        backupCount=LOG_BACKUP_DAYS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def init_logging(settings: LoggingSettings | None = None, *, app_name: str = "bizfund") -> None:
    """Install handlers on the root logger.

    Calling again with the same settings is a no-op; different settings
    replace the handlers installed by the previous call.
    """

    global _active
    settings = settings or LoggingSettings()
    with _lock:
        if _active == (app_name, settings):
            return
        _remove_handlers_locked()

        level = _parse_level(settings.level)
        install_rich_traceback(show_locals=False)
        handlers = [_console_handler(level)]
        if settings.log_dir is not None:
            handlers.append(_file_handler(settings.log_dir, app_name, level))

        root = logging.getLogger()
        root.setLevel(level)
        context_filter = ContextFilter()
        for handler in handlers:
            handler.addFilter(context_filter)
            root.addHandler(handler)
        _handlers.extend(handlers)
        _active = (app_name, settings)


def _remove_handlers_locked() -> None:
    global _active
    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()
    _active = None


def shutdown_logging() -> None:
    """Remove and close the installed handlers."""

    with _lock:
        _remove_handlers_locked()


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or "bizfund")
