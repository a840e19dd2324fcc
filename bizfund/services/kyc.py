"""KYC completeness rules."""
from __future__ import annotations

from bizfund.models import User, UserRole

from .validation import BUSINESS_PROFILE_FIELDS, GENERIC_PROFILE_FIELDS


def required_kyc_fields(role: UserRole) -> tuple[str, ...]:
    """Return the profile attributes a user with ``role`` must fill before KYC."""

    if role == UserRole.BUSINESS:
        return GENERIC_PROFILE_FIELDS + BUSINESS_PROFILE_FIELDS
    return GENERIC_PROFILE_FIELDS


def missing_kyc_fields(user: User) -> list[str]:
    """Return the required attributes of ``user`` that are absent or blank."""

    missing: list[str] = []
    for name in required_kyc_fields(user.role):
        value = getattr(user, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing
