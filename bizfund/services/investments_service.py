"""Investing into approved projects."""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bizfund.core.errors import BadRequestError, ForbiddenError, NotFoundError
from bizfund.core.logger import get_logger
from bizfund.models import Investment, Project, ProjectStatus, User, UserRole
from bizfund.models.base import utcnow
from bizfund.schemas import InvestmentOut, InvestmentStats

from .validation import validate_investment_request
from .wallets_service import WalletsService

LOGGER = get_logger(__name__)

_CENTS = Decimal("0.01")


def expected_return(amount: Decimal, roi: int) -> Decimal:
    """Return ``amount * roi / 100`` rounded to cents."""

    return (Decimal(amount) * Decimal(roi) / Decimal(100)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def funding_status(
    amount_raised: Decimal, amount_requested: Decimal, current: ProjectStatus
) -> ProjectStatus:
    """FUNDED once the raised amount reaches the request, otherwise unchanged."""

    if amount_raised >= amount_requested:
        return ProjectStatus.FUNDED
    return current


def apply_funding(project: Project, *, now: datetime) -> None:
    """Move ``project`` to FUNDED (stamping ``funded_at``) when fully raised."""

    status = funding_status(project.amount_raised, project.amount_requested, project.status)
    if status == ProjectStatus.FUNDED and project.status != ProjectStatus.FUNDED:
        project.funded_at = now
    project.status = status


def _to_out(investment: Investment, project: Project) -> InvestmentOut:
    return InvestmentOut(
        id=investment.id,
        investor_id=investment.investor_id,
        project_id=project.id,
        project_title=project.title,
        project_status=project.status,
        amount=investment.amount,
        expected_return=investment.expected_return,
        actual_return=investment.actual_return,
        is_active=investment.is_active,
        created_at=investment.created_at,
    )


class InvestmentsService:
    """Investor-facing investment operations."""

    def __init__(
        self,
        wallets: WalletsService | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or utcnow
        self._wallets = wallets or WalletsService(clock=self._clock)

    def create_investment(self, session: Session, user_id: int, payload: Any) -> InvestmentOut:
        """Invest in an approved project and debit the investor's wallet."""

        project_id, amount = validate_investment_request(payload)

        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.role != UserRole.INVESTOR:
            raise ForbiddenError("Only investors can make investments")
        if not user.kyc_completed:
            raise ForbiddenError("KYC must be completed before making investments")

        project = session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        if project.status != ProjectStatus.APPROVED:
            raise BadRequestError("Project must be approved before investments can be made")
        if not project.is_active:
            raise BadRequestError("Project is not active")
        if project.amount_raised >= project.amount_requested:
            raise BadRequestError("Project is already fully funded")

        existing = session.execute(
            select(Investment.id).where(
                Investment.investor_id == user_id,
                Investment.project_id == project_id,
            )
        ).first()
        if existing is not None:
            raise BadRequestError("You have already invested in this project")

        try:
            self._wallets.record_investment_debit(session, user_id, amount, project)
            investment = Investment(
                investor_id=user_id,
                project_id=project.id,
                amount=amount,
                expected_return=expected_return(amount, project.expected_roi),
            )
            session.add(investment)
            project.amount_raised = project.amount_raised + amount
            apply_funding(project, now=self._clock())
            session.commit()
        except Exception:
            session.rollback()
            raise

        LOGGER.info(
            "User id=%s invested %s in project id=%s (status=%s)",
            user_id,
            amount,
            project.id,
            project.status.value,
        )
        return _to_out(investment, project)

    def list_investments(self, session: Session, user_id: int) -> list[InvestmentOut]:
        rows = session.execute(
            select(Investment, Project)
            .join(Project, Project.id == Investment.project_id)
            .where(Investment.investor_id == user_id)
            .order_by(Investment.created_at.desc(), Investment.id.desc())
        ).all()
        return [_to_out(investment, project) for investment, project in rows]

    def get_stats(self, session: Session, user_id: int) -> InvestmentStats:
        row = session.execute(
            select(
                func.count(Investment.id).label("total"),
                func.coalesce(func.sum(Investment.amount), 0).label("invested"),
                func.coalesce(func.sum(Investment.expected_return), 0).label("expected"),
                func.coalesce(func.sum(Investment.actual_return), 0).label("actual"),
            ).where(Investment.investor_id == user_id)
        ).one()
        active = session.scalar(
            select(func.count(Investment.id)).where(
                Investment.investor_id == user_id,
                Investment.is_active.is_(True),
            )
        )
        return InvestmentStats(
            total_investments=row.total,
            active_investments=active or 0,
            total_invested=Decimal(str(row.invested)),
            total_expected_return=Decimal(str(row.expected)),
            total_actual_return=Decimal(str(row.actual)),
        )
