"""Pydantic schemas exposed by the API."""

from .investments import InvestmentOut, InvestmentStats
from .projects import (
    BusinessSummary,
    MessageOut,
    ProjectDetail,
    ProjectInvestment,
    ProjectOut,
    ProjectPage,
    ProjectStats,
    RepaymentOut,
    RepaymentShare,
)
from .users import AuthResponse, UserProfile, UserSummary
from .wallets import (
    BalanceOut,
    Pagination,
    TransactionOut,
    TransactionPage,
    WalletOperation,
    WalletOut,
)

__all__ = [
    "AuthResponse",
    "BalanceOut",
    "BusinessSummary",
    "InvestmentOut",
    "InvestmentStats",
    "MessageOut",
    "Pagination",
    "ProjectDetail",
    "ProjectInvestment",
    "ProjectOut",
    "ProjectPage",
    "ProjectStats",
    "RepaymentOut",
    "RepaymentShare",
    "TransactionOut",
    "TransactionPage",
    "UserProfile",
    "UserSummary",
    "WalletOperation",
    "WalletOut",
]
