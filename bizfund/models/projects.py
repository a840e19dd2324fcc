"""Fundraising projects and the investments made into them."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import ID_TYPE, MONEY_TYPE, ZERO, Base, utcnow
from .users import User


class ProjectStatus(str, Enum):
    """Lifecycle of a project: PENDING -> APPROVED -> FUNDED -> REPAID."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FUNDED = "FUNDED"
    REPAID = "REPAID"


class Project(Base):
    """Funding request raised by a business user."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    business_id: Mapped[int] = mapped_column(ID_TYPE, ForeignKey("users.id"), nullable=False)
    amount_requested: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False)
    amount_raised: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False, default=ZERO)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    expected_roi: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(
        SQLEnum(ProjectStatus, native_enum=False, length=16),
        nullable=False,
        default=ProjectStatus.PENDING,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    documents: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    funded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    repaid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    business: Mapped[User] = relationship()
    investments: Mapped[list["Investment"]] = relationship(back_populates="project")


class Investment(Base):
    """An investor's stake in a project."""

    __tablename__ = "investments"
    __table_args__ = (
        UniqueConstraint("investor_id", "project_id", name="uq_investment_investor_project"),
    )

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    investor_id: Mapped[int] = mapped_column(ID_TYPE, ForeignKey("users.id"), nullable=False)
    project_id: Mapped[int] = mapped_column(ID_TYPE, ForeignKey("projects.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False)
    expected_return: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False)
    actual_return: Mapped[Decimal | None] = mapped_column(MONEY_TYPE)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    repaid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    investor: Mapped[User] = relationship()
    project: Mapped[Project] = relationship(back_populates="investments")
