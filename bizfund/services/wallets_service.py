"""Wallet balances, deposits, withdrawals and transaction history."""
from __future__ import annotations

import math
import random
import string
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bizfund.core.errors import BadRequestError, NotFoundError
from bizfund.core.logger import get_logger
from bizfund.models import Project, Transaction, TransactionStatus, TransactionType, Wallet
from bizfund.models.base import utcnow
from bizfund.schemas import (
    BalanceOut,
    Pagination,
    TransactionOut,
    TransactionPage,
    WalletOperation,
    WalletOut,
)

from .validation import validate_money_movement

LOGGER = get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase
_REFERENCE_SUFFIX_LENGTH = 9
_default_rng = random.Random()


def generate_reference(
    prefix: str,
    *,
    rng: random.Random | None = None,
    clock: Callable[[], datetime] | None = None,
) -> str:
    """Return ``<prefix>_<epoch millis>_<9 base-36 chars>``."""

    source = rng or _default_rng
    moment = (clock or utcnow)()
    millis = int(moment.timestamp() * 1000)
    suffix = "".join(source.choice(_BASE36) for _ in range(_REFERENCE_SUFFIX_LENGTH))
    return f"{prefix}_{millis}_{suffix}"


class WalletsService:
    """Money movements against a user's wallet."""

    DEFAULT_PAGE_SIZE = 10

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._rng = rng
        self._clock = clock or utcnow

    def _load_wallet(self, session: Session, user_id: int) -> Wallet:
        wallet = session.execute(select(Wallet).where(Wallet.user_id == user_id)).scalar_one_or_none()
        if wallet is None:
            LOGGER.warning("Wallet for user id=%s not found", user_id)
            raise NotFoundError("Wallet not found")
        return wallet

    def _record(
        self,
        session: Session,
        user_id: int,
        *,
        kind: TransactionType,
        prefix: str,
        amount: Decimal,
        description: str,
        details: dict | None = None,
    ) -> Transaction:
        transaction = Transaction(
            user_id=user_id,
            type=kind,
            status=TransactionStatus.COMPLETED,
            amount=amount,
            description=description,
            reference=generate_reference(prefix, rng=self._rng, clock=self._clock),
            details=details,
            completed_at=self._clock(),
        )
        session.add(transaction)
        return transaction

    def get_wallet(self, session: Session, user_id: int) -> WalletOut:
        return WalletOut.model_validate(self._load_wallet(session, user_id))

    def get_balance(self, session: Session, user_id: int) -> BalanceOut:
        return BalanceOut(balance=self._load_wallet(session, user_id).balance)

    def deposit(self, session: Session, user_id: int, payload: Any) -> WalletOperation:
        """Credit the wallet and record a completed DEPOSIT."""

        amount, description = validate_money_movement(payload)
        wallet = self._load_wallet(session, user_id)
        transaction = self._record(
            session,
            user_id,
            kind=TransactionType.DEPOSIT,
            prefix="DEP",
            amount=amount,
            description=description or "Wallet deposit",
        )
        wallet.balance = wallet.balance + amount
        session.commit()
        LOGGER.info("Deposited %s for user id=%s ref=%s", amount, user_id, transaction.reference)
        return WalletOperation(
            transaction=TransactionOut.model_validate(transaction),
            wallet=WalletOut.model_validate(wallet),
        )

    def withdraw(self, session: Session, user_id: int, payload: Any) -> WalletOperation:
        """Debit the wallet when the balance covers the amount."""

        amount, description = validate_money_movement(payload)
        wallet = self._load_wallet(session, user_id)
        if wallet.balance < amount:
            raise BadRequestError("Insufficient balance")
        transaction = self._record(
            session,
            user_id,
            kind=TransactionType.WITHDRAWAL,
            prefix="WTH",
            amount=amount,
            description=description or "Wallet withdrawal",
        )
        wallet.balance = wallet.balance - amount
        session.commit()
        LOGGER.info("Withdrew %s for user id=%s ref=%s", amount, user_id, transaction.reference)
        return WalletOperation(
            transaction=TransactionOut.model_validate(transaction),
            wallet=WalletOut.model_validate(wallet),
        )

    def record_investment_debit(
        self, session: Session, user_id: int, amount: Decimal, project: Project
    ) -> Transaction:
        """Debit an investment from the wallet. The caller commits."""

        wallet = self._load_wallet(session, user_id)
        if wallet.balance < amount:
            raise BadRequestError("Insufficient balance for investment")
        wallet.balance = wallet.balance - amount
        return self._record(
            session,
            user_id,
            kind=TransactionType.INVESTMENT,
            prefix="INV",
            amount=amount,
            description=f"Investment in {project.title}",
            details={"projectId": project.id},
        )

    def record_repayment_credit(
        self,
        session: Session,
        user_id: int,
        amount: Decimal,
        project: Project,
        *,
        investment_id: int,
    ) -> Transaction:
        """Credit an investor's repayment share. The caller commits."""

        wallet = self._load_wallet(session, user_id)
        wallet.balance = wallet.balance + amount
        return self._record(
            session,
            user_id,
            kind=TransactionType.REPAYMENT,
            prefix="REP",
            amount=amount,
            description=f"Repayment from {project.title}",
            details={"projectId": project.id, "investmentId": investment_id},
        )

    def list_transactions(
        self,
        session: Session,
        user_id: int,
        *,
        kind: TransactionType | None = None,
        status: TransactionStatus | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> TransactionPage:
        """Return the user's transactions, newest first."""

        conditions = [Transaction.user_id == user_id]
        if kind is not None:
            conditions.append(Transaction.type == kind)
        if status is not None:
            conditions.append(Transaction.status == status)

        total = session.scalar(select(func.count()).select_from(Transaction).where(*conditions)) or 0
        rows = session.execute(
            select(Transaction)
            .where(*conditions)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
        return TransactionPage(
            transactions=[TransactionOut.model_validate(row) for row in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if limit else 0,
            ),
        )

    def get_transaction(self, session: Session, user_id: int, transaction_id: int) -> TransactionOut:
        transaction = session.execute(
            select(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
            )
        ).scalar_one_or_none()
        if transaction is None:
            raise NotFoundError("Transaction not found")
        return TransactionOut.model_validate(transaction)
