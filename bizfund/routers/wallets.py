"""Wallet routes: balance, deposits, withdrawals and history."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from bizfund.core.security import AuthenticatedUser, get_authenticated_user
from bizfund.db.session import get_db_session
from bizfund.models import TransactionStatus, TransactionType
from bizfund.schemas import BalanceOut, TransactionOut, TransactionPage, WalletOperation, WalletOut
from bizfund.services import WalletsService
from bizfund.web import extract_pagination, parse_choice

router = APIRouter(prefix="/wallets", tags=["wallets"])


def get_wallets_service() -> WalletsService:
    return WalletsService()


@router.get("", response_model=WalletOut, summary="Own wallet")
def read_wallet(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: WalletsService = Depends(get_wallets_service),
) -> WalletOut:
    return service.get_wallet(session, user.user_id)


@router.get("/balance", response_model=BalanceOut, summary="Own balance")
def read_balance(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: WalletsService = Depends(get_wallets_service),
) -> BalanceOut:
    return service.get_balance(session, user.user_id)


@router.post("/deposit", response_model=WalletOperation, summary="Deposit funds")
def deposit(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: WalletsService = Depends(get_wallets_service),
) -> WalletOperation:
    return service.deposit(session, user.user_id, payload)


@router.post("/withdraw", response_model=WalletOperation, summary="Withdraw funds")
def withdraw(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: WalletsService = Depends(get_wallets_service),
) -> WalletOperation:
    return service.withdraw(session, user.user_id, payload)


@router.get("/transactions", response_model=TransactionPage, summary="Transaction history")
def list_transactions(
    request: Request,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: WalletsService = Depends(get_wallets_service),
) -> TransactionPage:
    params = request.query_params
    pagination = extract_pagination(params)
    return service.list_transactions(
        session,
        user.user_id,
        kind=parse_choice(params, "type", TransactionType),
        status=parse_choice(params, "status", TransactionStatus),
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/transactions/{transaction_id}", response_model=TransactionOut, summary="One transaction")
def read_transaction(
    transaction_id: int,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: WalletsService = Depends(get_wallets_service),
) -> TransactionOut:
    return service.get_transaction(session, user.user_id, transaction_id)
