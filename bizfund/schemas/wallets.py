"""Schemas for wallet balances and transaction history."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import field_serializer

from bizfund.models import TransactionStatus, TransactionType

from .base import ApiModel, money


class WalletOut(ApiModel):
    id: int
    user_id: int
    balance: Decimal
    created_at: datetime
    updated_at: datetime

    @field_serializer("balance")
    def _serialize_balance(self, value: Decimal) -> str | None:
        return money(value)


class BalanceOut(ApiModel):
    balance: Decimal

    @field_serializer("balance")
    def _serialize_balance(self, value: Decimal) -> str | None:
        return money(value)


class TransactionOut(ApiModel):
    id: int
    user_id: int
    type: TransactionType
    status: TransactionStatus
    amount: Decimal
    description: str | None = None
    reference: str
    details: dict | None = None
    completed_at: datetime | None = None
    created_at: datetime

    @field_serializer("amount")
    def _serialize_amount(self, value: Decimal) -> str | None:
        return money(value)


class WalletOperation(ApiModel):
    """Result of a deposit or withdrawal."""

    transaction: TransactionOut
    wallet: WalletOut


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    pages: int


class TransactionPage(ApiModel):
    transactions: list[TransactionOut]
    pagination: Pagination
