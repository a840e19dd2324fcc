"""Tests for the log context, handler setup and request id propagation."""
from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler

from fastapi.testclient import TestClient
from rich.logging import RichHandler

from bizfund.core.config import LoggingSettings
from bizfund.core.log import (
    REQUEST_ID_HEADER,
    bind,
    current_fields,
    init_logging,
    log_scope,
    shutdown_logging,
)
from bizfund.core.log.context import ContextFilter, render_fields
from bizfund.models import UserRole


def _record() -> logging.LogRecord:
    return logging.LogRecord("bizfund.test", logging.INFO, __file__, 1, "hello", None, None)


def test_log_scope_restores_previous_fields() -> None:
    with log_scope(request_id="abc"):
        with log_scope(user_id=7, role="ADMIN", ignored=None):
            assert current_fields() == {"request_id": "abc", "user_id": 7, "role": "ADMIN"}
        assert current_fields() == {"request_id": "abc"}
    assert "request_id" not in current_fields()


def test_context_filter_renders_known_fields_first() -> None:
    record = _record()

    with log_scope(zone="lagos", role="INVESTOR", user_id=3, request_id="r1"):
        ContextFilter().filter(record)

    assert record.context == "[request_id=r1 user_id=3 role=INVESTOR zone=lagos] "
    assert record.request_id == "r1"


def test_context_filter_without_fields() -> None:
    record = _record()

    ContextFilter().filter(record)

    assert record.context == ""
    assert record.request_id == "-"
    assert render_fields({}) == ""


def test_init_logging_installs_console_and_file_handlers(tmp_path) -> None:
    root = logging.getLogger()
    try:
        init_logging(LoggingSettings(level="DEBUG", log_dir=tmp_path), app_name="unit")
        handlers = [
            handler
            for handler in root.handlers
            if isinstance(handler, (RichHandler, TimedRotatingFileHandler))
        ]
        assert {type(handler) for handler in handlers} == {RichHandler, TimedRotatingFileHandler}
        assert root.level == logging.DEBUG

        # Same settings again is a no-op.
        init_logging(LoggingSettings(level="DEBUG", log_dir=tmp_path), app_name="unit")
        assert [handler for handler in root.handlers if handler in handlers] == handlers

        with log_scope(job="unit-test"):
            logging.getLogger("bizfund.unit").info("written to file")
        for handler in handlers:
            handler.flush()
        content = (tmp_path / "unit.log").read_text(encoding="utf-8")
        assert "[job=unit-test] written to file" in content
    finally:
        shutdown_logging()

    assert not any(isinstance(handler, TimedRotatingFileHandler) for handler in root.handlers)


def test_bind_persists_for_scripts() -> None:
    with log_scope():
        bind(job="seed_database")
        assert current_fields()["job"] == "seed_database"
    assert "job" not in current_fields()


def test_responses_carry_request_id(client: TestClient, make_user, auth_headers) -> None:
    generated = client.get("/health")
    assert len(generated.headers[REQUEST_ID_HEADER]) == 16

    echoed = client.get("/health", headers={REQUEST_ID_HEADER: "trace-42"})
    assert echoed.headers[REQUEST_ID_HEADER] == "trace-42"

    rejected = client.get("/users/all", headers=auth_headers(make_user(UserRole.INVESTOR)))
    assert rejected.status_code == 403
    assert REQUEST_ID_HEADER in rejected.headers
