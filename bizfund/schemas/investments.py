"""Schemas for investments and investor statistics."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import field_serializer

from bizfund.models import ProjectStatus

from .base import ApiModel, money


class InvestmentOut(ApiModel):
    id: int
    investor_id: int
    project_id: int
    project_title: str
    project_status: ProjectStatus
    amount: Decimal
    expected_return: Decimal
    actual_return: Decimal | None = None
    is_active: bool
    created_at: datetime

    @field_serializer("amount", "expected_return", "actual_return")
    def _serialize_money(self, value: Decimal | None) -> str | None:
        return money(value)


class InvestmentStats(ApiModel):
    total_investments: int
    active_investments: int
    total_invested: Decimal
    total_expected_return: Decimal
    total_actual_return: Decimal

    @field_serializer("total_invested", "total_expected_return", "total_actual_return")
    def _serialize_money(self, value: Decimal) -> str | None:
        return money(value)
