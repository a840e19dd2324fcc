"""Per-request id bound into the log context and echoed to the client."""
from __future__ import annotations

from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from bizfund.core.log import REQUEST_ID_HEADER, log_scope, new_request_id

MAX_REQUEST_ID_LENGTH = 64


def _incoming_request_id(request: Request) -> str | None:
    value = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if not value or len(value) > MAX_REQUEST_ID_LENGTH or not value.isprintable():
        return None
    return value


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag every log line of a request with its id and return it as a header."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = _incoming_request_id(request) or new_request_id()
        with log_scope(request_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


__all__ = ["RequestContextMiddleware"]
