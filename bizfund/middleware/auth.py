"""Bearer token authentication and route authorisation middleware."""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bizfund.core.access import is_route_allowed
from bizfund.core.errors import AuthenticationError
from bizfund.core.logger import get_logger, log_scope
from bizfund.core.security import AuthenticatedUser, SecurityProvider

LOGGER = get_logger(__name__)

DEFAULT_EXEMPT_PATHS = frozenset(
    {"/auth/login", "/auth/register", "/health", "/openapi.json", "/docs", "/redoc"}
)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthMiddleware(BaseHTTPMiddleware):
    """Reject requests without a valid bearer token or with the wrong role."""

    def __init__(
        self,
        app,
        security_provider: SecurityProvider,
        *,
        exempt_paths: Iterable[str] | None = None,
        exempt_prefixes: Iterable[str] | None = None,
    ) -> None:
        super().__init__(app)
        self._security_provider = security_provider
        self._exempt_paths = set(exempt_paths or DEFAULT_EXEMPT_PATHS)
        self._exempt_prefixes = tuple(exempt_prefixes or ("/docs/",))

    def _is_exempt(self, path: str) -> bool:
        """Return ``True`` when the request path should bypass authentication."""

        if path in self._exempt_paths:
            return True
        return any(path.startswith(prefix) for prefix in self._exempt_prefixes)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        token = _bearer_token(request)
        user: AuthenticatedUser | None = None
        reason = "Missing bearer token"

        if token:
            try:
                user = self._security_provider.decode_token(token)
            except AuthenticationError as exc:
                LOGGER.info("Failed to decode access token: %s", exc.message)
                reason = exc.message

        request.state.user = user
        path = request.url.path

        if self._is_exempt(path):
            return await call_next(request)

        if user is None:
            return JSONResponse(status_code=401, content={"detail": reason})

        if not is_route_allowed(user.role, request.method, path):
            LOGGER.warning(
                "Role %s denied %s %s", user.role.value, request.method, path
            )
            return JSONResponse(status_code=403, content={"detail": "Forbidden resource"})

        with log_scope(user_id=user.user_id, role=user.role.value):
            return await call_next(request)


__all__ = ["AuthMiddleware"]
