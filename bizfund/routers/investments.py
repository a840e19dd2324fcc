"""Investor routes. Access is restricted to INVESTOR tokens by the auth middleware."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from bizfund.core.security import AuthenticatedUser, get_authenticated_user
from bizfund.db.session import get_db_session
from bizfund.schemas import InvestmentOut, InvestmentStats
from bizfund.services import InvestmentsService

router = APIRouter(prefix="/investments", tags=["investments"])


def get_investments_service() -> InvestmentsService:
    return InvestmentsService()


@router.post(
    "",
    response_model=InvestmentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Invest in an approved project",
)
def create_investment(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: InvestmentsService = Depends(get_investments_service),
) -> InvestmentOut:
    return service.create_investment(session, user.user_id, payload)


@router.get("", response_model=list[InvestmentOut], summary="Own investments")
def list_investments(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: InvestmentsService = Depends(get_investments_service),
) -> list[InvestmentOut]:
    return service.list_investments(session, user.user_id)


@router.get("/stats", response_model=InvestmentStats, summary="Own investment totals")
def read_stats(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: InvestmentsService = Depends(get_investments_service),
) -> InvestmentStats:
    return service.get_stats(session, user.user_id)
