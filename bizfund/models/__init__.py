"""Database models for the crowdfunding domain."""
from __future__ import annotations

from .base import Base
from .projects import Investment, Project, ProjectStatus
from .transactions import Transaction, TransactionStatus, TransactionType
from .users import User, UserRole, Wallet

__all__ = [
    "Base",
    "Investment",
    "Project",
    "ProjectStatus",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "User",
    "UserRole",
    "Wallet",
]
