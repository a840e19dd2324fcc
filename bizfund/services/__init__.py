"""Service layer entrypoints for domain logic."""

from .admin_service import AdminService
from .auth_service import AuthService
from .investments_service import InvestmentsService
from .projects_service import ProjectsService
from .users_service import UsersService
from .wallets_service import WalletsService

__all__ = [
    "AdminService",
    "AuthService",
    "InvestmentsService",
    "ProjectsService",
    "UsersService",
    "WalletsService",
]
