"""Registration, login and the current-user lookup."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from bizfund.core.errors import AuthenticationError, ConflictError
from bizfund.core.logger import get_logger
from bizfund.core.security import AuthenticatedUser, SecurityProvider
from bizfund.models import User, Wallet
from bizfund.models.base import ZERO
from bizfund.schemas import AuthResponse, UserProfile

from .users_service import UsersService
from .validation import validate_login, validate_registration

LOGGER = get_logger(__name__)


class AuthService:
    """Issue bearer tokens for new and returning users."""

    def __init__(self, security: SecurityProvider, users: UsersService | None = None) -> None:
        self._security = security
        self._users = users or UsersService()

    def _respond(self, user: User) -> AuthResponse:
        principal = AuthenticatedUser(user_id=user.id, email=user.email, role=user.role)
        return AuthResponse(
            token=self._security.create_access_token(principal),
            user=UserProfile.model_validate(user),
        )

    def register(self, session: Session, payload: Any) -> AuthResponse:
        """Create a user together with an empty wallet."""

        data = validate_registration(payload)
        taken = session.execute(select(User.id).where(User.email == data["email"])).first()
        if taken is not None:
            raise ConflictError("Email is already registered")

        user = User(
            email=data["email"],
            password_hash=self._security.hash_password(data["password"]),
            first_name=data["first_name"],
            last_name=data["last_name"],
            role=data["role"],
        )
        session.add(user)
        session.flush()
        session.add(Wallet(user_id=user.id, balance=ZERO))
        session.commit()
        session.refresh(user)
        LOGGER.info("Registered user id=%s role=%s", user.id, user.role.value)
        return self._respond(user)

    def login(self, session: Session, payload: Any) -> AuthResponse:
        email, password = validate_login(payload)
        user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None or not self._security.verify_password(user.password_hash, password):
            LOGGER.info("Invalid login attempt for %s", email)
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is disabled")
        LOGGER.info("User id=%s logged in", user.id)
        return self._respond(user)

    def me(self, session: Session, principal: AuthenticatedUser) -> UserProfile:
        return self._users.get_profile(session, principal.user_id)
