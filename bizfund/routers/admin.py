"""Administrator routes. Every path below ``/admin`` is ADMIN-only."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from bizfund.db.session import get_db_session
from bizfund.schemas import RepaymentOut
from bizfund.services import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service() -> AdminService:
    return AdminService()


@router.post("/repayment", response_model=RepaymentOut, summary="Repay a funded project's investors")
def process_repayment(
    payload: Any = Body(None),
    session: Session = Depends(get_db_session),
    service: AdminService = Depends(get_admin_service),
) -> RepaymentOut:
    return service.process_repayment(session, payload)
