"""Project routes.

Any authenticated user may browse; businesses manage their own pending
projects and administrators review them (see ``bizfund.core.access``).
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from bizfund.core.security import AuthenticatedUser, get_authenticated_user
from bizfund.db.session import get_db_session
from bizfund.models import ProjectStatus
from bizfund.schemas import MessageOut, ProjectDetail, ProjectOut, ProjectPage, ProjectStats
from bizfund.services import ProjectsService
from bizfund.web import extract_pagination, parse_choice

router = APIRouter(prefix="/projects", tags=["projects"])


def get_projects_service() -> ProjectsService:
    return ProjectsService()


@router.post(
    "",
    response_model=ProjectOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
def create_project(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> ProjectOut:
    return service.create_project(session, user.user_id, payload)


@router.get("", response_model=ProjectPage, summary="Browse active projects")
def list_projects(
    request: Request,
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> ProjectPage:
    params = request.query_params
    pagination = extract_pagination(params)
    return service.list_projects(
        session,
        status=parse_choice(params, "status", ProjectStatus),
        search=params.get("search"),
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/my-projects", response_model=list[ProjectDetail], summary="Own projects")
def list_own_projects(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> list[ProjectDetail]:
    return service.list_own_projects(session, user.user_id)


@router.get("/pending", response_model=list[ProjectOut], summary="Projects awaiting review")
def list_pending(
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> list[ProjectOut]:
    return service.list_pending(session)


@router.get("/stats", response_model=ProjectStats, summary="Platform project totals")
def read_stats(
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> ProjectStats:
    return service.get_stats(session)


@router.get("/{project_id}", response_model=ProjectDetail, summary="One project with investments")
def read_project(
    project_id: int,
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> ProjectDetail:
    return service.get_project(session, project_id)


@router.put("/{project_id}", response_model=ProjectOut, summary="Update an own pending project")
def update_project(
    project_id: int,
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> ProjectOut:
    return service.update_project(session, user.user_id, project_id, payload)


@router.delete("/{project_id}", response_model=MessageOut, summary="Delete an own pending project")
def delete_project(
    project_id: int,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> MessageOut:
    return service.delete_project(session, user.user_id, project_id)


@router.put("/{project_id}/approve", response_model=ProjectOut, summary="Approve or reject a project")
def review_project(
    project_id: int,
    payload: Any = Body(None),
    session: Session = Depends(get_db_session),
    service: ProjectsService = Depends(get_projects_service),
) -> ProjectOut:
    return service.review_project(session, project_id, payload)
