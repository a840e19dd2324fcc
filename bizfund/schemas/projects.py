"""Schemas for projects, project listings and the admin repayment flow."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import field_serializer

from bizfund.models import ProjectStatus

from .base import ApiModel, money
from .wallets import Pagination


class BusinessSummary(ApiModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    business_name: str | None = None
    kyc_completed: bool


class ProjectInvestment(ApiModel):
    """An investment as seen from the project it funds."""

    id: int
    investor_id: int
    investor_name: str
    amount: Decimal
    expected_return: Decimal
    actual_return: Decimal | None = None
    is_active: bool
    created_at: datetime

    @field_serializer("amount", "expected_return", "actual_return")
    def _serialize_money(self, value: Decimal | None) -> str | None:
        return money(value)


class ProjectOut(ApiModel):
    id: int
    title: str
    description: str
    business_id: int
    business: BusinessSummary
    amount_requested: Decimal
    amount_raised: Decimal
    duration: int
    expected_roi: int
    status: ProjectStatus
    is_active: bool
    documents: list[str]
    approved_at: datetime | None = None
    funded_at: datetime | None = None
    repaid_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("amount_requested", "amount_raised")
    def _serialize_money(self, value: Decimal) -> str | None:
        return money(value)


class ProjectDetail(ProjectOut):
    investments: list[ProjectInvestment]


class ProjectPage(ApiModel):
    projects: list[ProjectOut]
    pagination: Pagination


class ProjectStats(ApiModel):
    total_projects: int
    pending_projects: int
    approved_projects: int
    funded_projects: int
    repaid_projects: int
    total_amount_requested: Decimal
    total_amount_raised: Decimal

    @field_serializer("total_amount_requested", "total_amount_raised")
    def _serialize_money(self, value: Decimal) -> str | None:
        return money(value)


class MessageOut(ApiModel):
    message: str


class RepaymentShare(ApiModel):
    investment_id: int
    investor_id: int
    invested: Decimal
    repaid: Decimal
    actual_return: Decimal
    reference: str | None = None

    @field_serializer("invested", "repaid", "actual_return")
    def _serialize_money(self, value: Decimal) -> str | None:
        return money(value)


class RepaymentOut(ApiModel):
    """Outcome of distributing a repayment across a project's investors."""

    project: ProjectOut
    total_repayment: Decimal
    total_invested: Decimal
    shares: list[RepaymentShare]

    @field_serializer("total_repayment", "total_invested")
    def _serialize_money(self, value: Decimal) -> str | None:
        return money(value)
