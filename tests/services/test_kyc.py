"""Tests for the role-dependent KYC requirements."""
from __future__ import annotations

import pytest

from bizfund.models import User, UserRole
from bizfund.services.kyc import missing_kyc_fields, required_kyc_fields

GENERIC = ("first_name", "last_name", "phone", "address", "id_number", "id_document")


@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.INVESTOR])
def test_non_business_roles_require_generic_fields(role: UserRole) -> None:
    assert required_kyc_fields(role) == GENERIC


def test_business_role_adds_business_fields() -> None:
    assert required_kyc_fields(UserRole.BUSINESS) == GENERIC + (
        "business_name",
        "cac_number",
        "tax_id",
        "business_address",
    )


def test_missing_fields_follow_required_order() -> None:
    user = User(
        email="a@example.com",
        password_hash="x",
        role=UserRole.BUSINESS,
        first_name="Ada",
        phone="",
        business_name="Acme",
    )

    assert missing_kyc_fields(user) == [
        "last_name",
        "phone",
        "address",
        "id_number",
        "id_document",
        "cac_number",
        "tax_id",
        "business_address",
    ]


def test_nothing_missing_when_all_fields_present() -> None:
    user = User(
        email="a@example.com",
        password_hash="x",
        role=UserRole.INVESTOR,
        first_name="Ada",
        last_name="Obi",
        phone="+2348000000001",
        address="Lagos",
        id_number="A1",
        id_document="https://files.example.com/a1.pdf",
    )

    assert missing_kyc_fields(user) == []
