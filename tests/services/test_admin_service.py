"""Tests for distributing a funded project's repayment."""
from __future__ import annotations

import random
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from bizfund.core.errors import BadRequestError, NotFoundError, PayloadValidationError
from bizfund.models import (
    Investment,
    Project,
    ProjectStatus,
    Transaction,
    TransactionType,
    UserRole,
    Wallet,
)
from bizfund.services import AdminService, WalletsService
from bizfund.services.admin_service import repayment_shares

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def admin_service() -> AdminService:
    return AdminService(WalletsService(rng=random.Random(11)), clock=lambda: FIXED_NOW)


@pytest.fixture()
def funded_project(session: Session, make_user):
    """A FUNDED project backed by investments of 1000, 2000 and 3000."""

    owner = make_user(UserRole.BUSINESS)
    project = Project(
        title="Rice mill",
        description="Parboiling and milling for Kano growers.",
        business_id=owner.id,
        amount_requested=Decimal("6000"),
        amount_raised=Decimal("6000"),
        duration=6,
        expected_roi=20,
        status=ProjectStatus.FUNDED,
    )
    session.add(project)
    session.flush()
    investors = [make_user(UserRole.INVESTOR, balance=0) for _ in range(3)]
    for investor, amount in zip(investors, ("1000", "2000", "3000")):
        session.add(
            Investment(
                investor_id=investor.id,
                project_id=project.id,
                amount=Decimal(amount),
                expected_return=Decimal(amount) / 5,
            )
        )
    session.commit()
    return project, investors


def _balance(session: Session, user_id: int) -> Decimal:
    return session.execute(select(Wallet.balance).where(Wallet.user_id == user_id)).scalar_one()


def test_repayment_shares_add_up_exactly() -> None:
    shares = repayment_shares([Decimal("1"), Decimal("1"), Decimal("1")], Decimal("100"))

    assert shares == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(shares) == Decimal("100")


def test_process_repayment_pays_investors_pro_rata(
    session: Session, funded_project, admin_service
) -> None:
    project, investors = funded_project

    result = admin_service.process_repayment(session, {"projectId": project.id, "totalRepayment": 7200})

    assert result.project.status == ProjectStatus.REPAID
    assert result.project.repaid_at == FIXED_NOW
    assert [share.repaid for share in result.shares] == [Decimal("1200"), Decimal("2400"), Decimal("3600")]
    assert [share.actual_return for share in result.shares] == [Decimal("200"), Decimal("400"), Decimal("600")]
    assert [_balance(session, investor.id) for investor in investors] == [
        Decimal("1200"),
        Decimal("2400"),
        Decimal("3600"),
    ]

    investments = session.execute(select(Investment).order_by(Investment.id)).scalars().all()
    assert all(not investment.is_active for investment in investments)
    assert all(investment.repaid_at is not None for investment in investments)

    credits = session.execute(
        select(Transaction).where(Transaction.type == TransactionType.REPAYMENT).order_by(Transaction.id)
    ).scalars().all()
    assert [credit.amount for credit in credits] == [Decimal("1200"), Decimal("2400"), Decimal("3600")]
    assert all(credit.reference.startswith("REP_") for credit in credits)
    assert credits[0].details == {"projectId": project.id, "investmentId": investments[0].id}
    assert credits[0].description == "Repayment from Rice mill"


def test_process_repayment_records_losses(session: Session, funded_project, admin_service) -> None:
    project, _ = funded_project

    result = admin_service.process_repayment(session, {"projectId": project.id, "totalRepayment": "3000"})

    assert [share.actual_return for share in result.shares] == [
        Decimal("-500"),
        Decimal("-1000"),
        Decimal("-1500"),
    ]


def test_zero_repayment_closes_without_credits(session: Session, funded_project, admin_service) -> None:
    project, _ = funded_project

    result = admin_service.process_repayment(session, {"projectId": project.id, "totalRepayment": 0})

    assert result.project.status == ProjectStatus.REPAID
    assert all(share.reference is None for share in result.shares)
    assert session.execute(
        select(Transaction).where(Transaction.type == TransactionType.REPAYMENT)
    ).first() is None


def test_repayment_requires_funded_project(session: Session, funded_project, admin_service) -> None:
    project, _ = funded_project
    admin_service.process_repayment(session, {"projectId": project.id, "totalRepayment": 6000})

    with pytest.raises(BadRequestError, match="Project must be funded before processing repayment"):
        admin_service.process_repayment(session, {"projectId": project.id, "totalRepayment": 6000})


def test_repayment_unknown_project(session: Session, admin_service) -> None:
    with pytest.raises(NotFoundError, match="Project not found"):
        admin_service.process_repayment(session, {"projectId": 99, "totalRepayment": 10})


def test_repayment_payload_is_validated(session: Session, admin_service) -> None:
    with pytest.raises(PayloadValidationError) as excinfo:
        admin_service.process_repayment(session, {"projectId": "1", "totalRepayment": -1})

    assert {error.field for error in excinfo.value.errors} == {"projectId", "totalRepayment"}
