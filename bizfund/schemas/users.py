"""Projections of the user entity returned by the API."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from bizfund.models import UserRole

from .base import ApiModel


class UserProfile(ApiModel):
    """Profile projection returned to the owner of the account."""

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: UserRole
    kyc_completed: bool
    id_number: str | None = None
    id_document: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    business_name: str | None = None
    cac_number: str | None = None
    tax_id: str | None = None
    business_address: str | None = None
    business_documents: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class UserSummary(ApiModel):
    """Non-sensitive projection used by the administrator listing."""

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: UserRole
    kyc_completed: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthResponse(ApiModel):
    token: str
    user: UserProfile
