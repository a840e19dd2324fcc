"""HTTP client for the BizFund API."""

from .session import SessionClient, TokenStore

__all__ = ["SessionClient", "TokenStore"]
