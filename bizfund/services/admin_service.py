"""Administrator operations: distributing a funded project's repayment."""
from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import ROUND_DOWN, Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from bizfund.core.errors import BadRequestError, NotFoundError
from bizfund.core.logger import get_logger
from bizfund.models import Investment, Project, ProjectStatus
from bizfund.models.base import ZERO, utcnow
from bizfund.schemas import ProjectOut, RepaymentOut, RepaymentShare

from .validation import validate_repayment
from .wallets_service import WalletsService

LOGGER = get_logger(__name__)

_CENTS = Decimal("0.01")


def repayment_shares(amounts: Sequence[Decimal], total: Decimal) -> list[Decimal]:
    """Split ``total`` pro rata to ``amounts``.

    Shares are truncated to cents and the last one takes the remainder, so
    they always add up to ``total`` exactly.
    """

    invested = sum(amounts, ZERO)
    shares = [
        (total * amount / invested).quantize(_CENTS, rounding=ROUND_DOWN)
        for amount in amounts[:-1]
    ]
    shares.append(total - sum(shares, ZERO))
    return shares


class AdminService:
    def __init__(
        self,
        wallets: WalletsService | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or utcnow
        self._wallets = wallets or WalletsService(clock=self._clock)

    def process_repayment(self, session: Session, payload: Any) -> RepaymentOut:
        """Pay a FUNDED project's repayment out to its investors and mark it REPAID.

        Each active investment receives its pro-rata share as a REPAYMENT
        credit, records ``actual_return = share - amount`` and is closed.
        """

        project_id, total = validate_repayment(payload)
        project = session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        if project.status != ProjectStatus.FUNDED:
            raise BadRequestError("Project must be funded before processing repayment")

        investments = list(
            session.execute(
                select(Investment)
                .where(Investment.project_id == project.id, Investment.is_active.is_(True))
                .order_by(Investment.id)
            ).scalars()
        )
        if not investments:
            raise BadRequestError("Project has no active investments")

        amounts = [investment.amount for investment in investments]
        now = self._clock()
        shares: list[RepaymentShare] = []
        try:
            for investment, share in zip(investments, repayment_shares(amounts, total)):
                investment.actual_return = share - investment.amount
                investment.repaid_at = now
                investment.is_active = False
                reference = None
                if share > 0:
                    reference = self._wallets.record_repayment_credit(
                        session,
                        investment.investor_id,
                        share,
                        project,
                        investment_id=investment.id,
                    ).reference
                shares.append(
                    RepaymentShare(
                        investment_id=investment.id,
                        investor_id=investment.investor_id,
                        invested=investment.amount,
                        repaid=share,
                        actual_return=investment.actual_return,
                        reference=reference,
                    )
                )
            project.status = ProjectStatus.REPAID
            project.repaid_at = now
            session.commit()
        except Exception:
            session.rollback()
            raise

        LOGGER.info(
            "Repaid %s to %s investors of project id=%s",
            total,
            len(shares),
            project.id,
        )
        return RepaymentOut(
            project=ProjectOut.model_validate(project),
            total_repayment=total,
            total_invested=sum(amounts, ZERO),
            shares=shares,
        )
