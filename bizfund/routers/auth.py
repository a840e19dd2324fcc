"""Authentication routes: registration, login and the current user."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from bizfund.core.logger import get_logger
from bizfund.core.security import AuthenticatedUser, get_authenticated_user, get_security_provider
from bizfund.db.session import get_db_session
from bizfund.schemas import AuthResponse, UserProfile
from bizfund.services import AuthService

LOGGER = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service() -> AuthService:
    return AuthService(get_security_provider())


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
def register(
    payload: Any = Body(None),
    session: Session = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return service.register(session, payload)


@router.post("/login", response_model=AuthResponse, summary="Exchange credentials for a token")
def login(
    payload: Any = Body(None),
    session: Session = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return service.login(session, payload)


@router.get("/me", response_model=UserProfile, summary="Current user")
def me(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    session: Session = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> UserProfile:
    return service.me(session, user)
