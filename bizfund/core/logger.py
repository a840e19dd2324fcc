"""Compatibility wrapper that exposes the shared logging utilities."""
from __future__ import annotations

from .log import (
    bind,
    get_logger,
    init_logging,
    log_scope,
    shutdown_logging,
    timeit,
)

__all__ = [
    "bind",
    "get_logger",
    "init_logging",
    "log_scope",
    "shutdown_logging",
    "timeit",
]
