"""Project lifecycle: creation by businesses, browsing, owner edits and admin review."""
from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, contains_eager

from bizfund.core.errors import BadRequestError, ForbiddenError, NotFoundError
from bizfund.core.logger import get_logger
from bizfund.models import Investment, Project, ProjectStatus, User, UserRole
from bizfund.models.base import ZERO, utcnow
from bizfund.schemas import (
    MessageOut,
    Pagination,
    ProjectDetail,
    ProjectInvestment,
    ProjectOut,
    ProjectPage,
    ProjectStats,
)

from .validation import validate_decision, validate_project

LOGGER = get_logger(__name__)


def display_name(user: User) -> str:
    name = " ".join(part for part in (user.first_name, user.last_name) if part)
    return name or user.email


def project_detail(session: Session, project: Project) -> ProjectDetail:
    """Return ``project`` together with its investments and investor names."""

    rows = session.execute(
        select(Investment, User)
        .join(User, User.id == Investment.investor_id)
        .where(Investment.project_id == project.id)
        .order_by(Investment.created_at.desc(), Investment.id.desc())
    ).all()
    investments = [
        ProjectInvestment(
            id=investment.id,
            investor_id=investor.id,
            investor_name=display_name(investor),
            amount=investment.amount,
            expected_return=investment.expected_return,
            actual_return=investment.actual_return,
            is_active=investment.is_active,
            created_at=investment.created_at,
        )
        for investment, investor in rows
    ]
    data = {name: getattr(project, name) for name in ProjectOut.model_fields}
    return ProjectDetail.model_validate({**data, "investments": investments})


class ProjectsService:
    """Business-owned funding requests and their review by administrators."""

    DEFAULT_PAGE_SIZE = 10

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or utcnow

    @staticmethod
    def _load(session: Session, project_id: int) -> Project:
        project = session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    @staticmethod
    def _load_business(session: Session, user_id: int, message: str) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.role != UserRole.BUSINESS:
            raise ForbiddenError(message)
        return user

    @staticmethod
    def _load_owned(session: Session, user_id: int, project_id: int, action: str) -> Project:
        project = ProjectsService._load(session, project_id)
        if project.business_id != user_id:
            raise ForbiddenError(f"You can only {action} your own projects")
        if project.status != ProjectStatus.PENDING:
            raise BadRequestError(f"Only pending projects can be {action}d")
        return project

    def create_project(self, session: Session, user_id: int, payload: Any) -> ProjectOut:
        """Open a PENDING funding request for a KYC-verified business."""

        user = self._load_business(session, user_id, "Only business users can create projects")
        if not user.kyc_completed:
            raise ForbiddenError("KYC must be completed before creating projects")
        values = validate_project(payload)

        project = Project(
            business_id=user.id,
            amount_raised=ZERO,
            status=ProjectStatus.PENDING,
            is_active=True,
            documents=values.pop("documents", []),
            **values,
        )
        session.add(project)
        session.commit()
        LOGGER.info(
            "Business id=%s created project id=%s requesting %s",
            user.id,
            project.id,
            project.amount_requested,
        )
        return ProjectOut.model_validate(project)

    def list_projects(
        self,
        session: Session,
        *,
        status: ProjectStatus | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ProjectPage:
        """Active projects, newest first, optionally filtered by status and text."""

        conditions = [Project.is_active.is_(True)]
        if status is not None:
            conditions.append(Project.status == status)
        term = (search or "").strip()
        if term:
            conditions.append(
                or_(
                    Project.title.icontains(term, autoescape=True),
                    Project.description.icontains(term, autoescape=True),
                    User.business_name.icontains(term, autoescape=True),
                )
            )

        base = select(Project).join(Project.business).where(*conditions)
        total = session.scalar(select(func.count()).select_from(base.subquery())) or 0
        projects = session.execute(
            base.options(contains_eager(Project.business))
            .order_by(Project.created_at.desc(), Project.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
        return ProjectPage(
            projects=[ProjectOut.model_validate(project) for project in projects],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if limit else 0,
            ),
        )

    def get_project(self, session: Session, project_id: int) -> ProjectDetail:
        return project_detail(session, self._load(session, project_id))

    def list_own_projects(self, session: Session, user_id: int) -> list[ProjectDetail]:
        """Every project of the calling business, including deleted ones."""

        self._load_business(session, user_id, "Only business users can view their projects")
        projects = session.execute(
            select(Project)
            .where(Project.business_id == user_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
        ).scalars()
        return [project_detail(session, project) for project in projects]

    def update_project(
        self, session: Session, user_id: int, project_id: int, payload: Any
    ) -> ProjectOut:
        project = self._load_owned(session, user_id, project_id, "update")
        values = validate_project(payload, partial=True)
        for attribute, value in values.items():
            setattr(project, attribute, value)
        if values:
            session.commit()
            LOGGER.info("Project id=%s updated fields %s", project.id, sorted(values))
        return ProjectOut.model_validate(project)

    def delete_project(self, session: Session, user_id: int, project_id: int) -> MessageOut:
        """Soft-delete a pending project by hiding it from listings."""

        project = self._load_owned(session, user_id, project_id, "delete")
        project.is_active = False
        session.commit()
        LOGGER.info("Project id=%s deleted by business id=%s", project.id, user_id)
        return MessageOut(message="Project deleted successfully")

    def review_project(self, session: Session, project_id: int, payload: Any) -> ProjectOut:
        """Approve or reject a pending project."""

        status, reason = validate_decision(payload)
        project = self._load(session, project_id)
        if project.status != ProjectStatus.PENDING:
            raise BadRequestError("Only pending projects can be approved or rejected")
        project.status = status
        project.approved_at = self._clock()
        session.commit()
        LOGGER.info(
            "Project id=%s %s%s",
            project.id,
            status.value.lower(),
            f" ({reason})" if reason else "",
        )
        return ProjectOut.model_validate(project)

    def list_pending(self, session: Session) -> list[ProjectOut]:
        """Active projects awaiting review, oldest first."""

        projects = session.execute(
            select(Project)
            .where(Project.status == ProjectStatus.PENDING, Project.is_active.is_(True))
            .order_by(Project.created_at.asc(), Project.id.asc())
        ).scalars()
        return [ProjectOut.model_validate(project) for project in projects]

    def get_stats(self, session: Session) -> ProjectStats:
        active = Project.is_active.is_(True)
        counts = dict(
            session.execute(
                select(Project.status, func.count(Project.id)).where(active).group_by(Project.status)
            ).all()
        )
        totals = session.execute(
            select(
                func.coalesce(func.sum(Project.amount_requested), 0).label("requested"),
                func.coalesce(func.sum(Project.amount_raised), 0).label("raised"),
            ).where(active)
        ).one()
        return ProjectStats(
            total_projects=sum(counts.values()),
            pending_projects=counts.get(ProjectStatus.PENDING, 0),
            approved_projects=counts.get(ProjectStatus.APPROVED, 0),
            funded_projects=counts.get(ProjectStatus.FUNDED, 0),
            repaid_projects=counts.get(ProjectStatus.REPAID, 0),
            total_amount_requested=Decimal(str(totals.requested)),
            total_amount_raised=Decimal(str(totals.raised)),
        )
