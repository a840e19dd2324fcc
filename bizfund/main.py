"""FastAPI application instance."""
from __future__ import annotations

from fastapi import FastAPI

from bizfund.core import get_logger, get_settings
from bizfund.core.config import Settings
from bizfund.core.errors import register_exception_handlers
from bizfund.core.logger import init_logging
from bizfund.core.security import get_security_provider
from bizfund.middleware import AuthMiddleware, RequestContextMiddleware
from bizfund.routers import (
    admin_router,
    auth_router,
    investments_router,
    projects_router,
    users_router,
    wallets_router,
)

LOGGER = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    init_logging(settings.logging)

    app = FastAPI(title="BizFund API", version="0.1.0")
    register_exception_handlers(app)
    # The request context middleware must stay outermost (added last).
    app.add_middleware(AuthMiddleware, security_provider=get_security_provider())
    app.add_middleware(RequestContextMiddleware)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(wallets_router)
    app.include_router(projects_router)
    app.include_router(investments_router)
    app.include_router(admin_router)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    LOGGER.info("FastAPI application initialised (database=%s)", settings.database.masked_url)
    return app


app = create_app()
