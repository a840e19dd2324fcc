"""FastAPI routers for the crowdfunding API."""

from .admin import router as admin_router
from .auth import router as auth_router
from .investments import router as investments_router
from .projects import router as projects_router
from .users import router as users_router
from .wallets import router as wallets_router

__all__ = [
    "admin_router",
    "auth_router",
    "investments_router",
    "projects_router",
    "users_router",
    "wallets_router",
]
