"""Profile, business profile and KYC routes."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from bizfund.core.security import AuthenticatedUser, get_authenticated_user
from bizfund.db.session import get_db_session
from bizfund.schemas import UserProfile, UserSummary
from bizfund.services import UsersService

router = APIRouter(prefix="/users", tags=["users"])


def get_users_service() -> UsersService:
    """Return a service instance per request."""

    return UsersService()


@router.get("/profile", response_model=UserProfile, summary="Read own profile")
def read_profile(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: UsersService = Depends(get_users_service),
) -> UserProfile:
    return service.get_profile(session, user.user_id)


@router.put("/profile", response_model=UserProfile, summary="Update own profile")
def update_profile(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: UsersService = Depends(get_users_service),
) -> UserProfile:
    return service.update_profile(session, user.user_id, payload)


@router.put("/business-profile", response_model=UserProfile, summary="Update business profile")
def update_business_profile(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: UsersService = Depends(get_users_service),
) -> UserProfile:
    return service.update_business_profile(session, user.user_id, payload)


@router.post("/complete-kyc", response_model=UserProfile, summary="Mark KYC as completed")
def complete_kyc(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: UsersService = Depends(get_users_service),
) -> UserProfile:
    return service.complete_kyc(session, user.user_id)


@router.get("/all", response_model=list[UserSummary], summary="List every user")
def list_users(
    session: Session = Depends(get_db_session),
    service: UsersService = Depends(get_users_service),
) -> list[UserSummary]:
    return service.get_all_users(session)
