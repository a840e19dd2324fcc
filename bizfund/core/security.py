"""Password hashing and JWT bearer tokens."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt
from fastapi import Request
from jwt import ExpiredSignatureError, InvalidTokenError
from werkzeug.security import check_password_hash, generate_password_hash

from bizfund.models import UserRole

from .config import AuthSettings, get_settings
from .errors import AuthenticationError


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    """Representation of the authenticated principal."""

    user_id: int
    email: str
    role: UserRole


class SecurityProvider:
    """Hash passwords and issue/verify JWT access tokens."""

    def __init__(self, settings: AuthSettings) -> None:
        self._settings = settings

    @staticmethod
    def hash_password(password: str) -> str:
        return generate_password_hash(password)

    @staticmethod
    def verify_password(password_hash: str, password: str) -> bool:
        return check_password_hash(password_hash, password)

    def create_access_token(self, user: AuthenticatedUser, *, now: datetime | None = None) -> str:
        """Create a signed JWT for the authenticated user."""

        issued = now or datetime.now(tz=timezone.utc)
        expires = issued + timedelta(minutes=self._settings.access_token_expire_minutes)
        payload: dict[str, object] = {
            "sub": str(user.user_id),
            "email": user.email,
            "role": user.role.value,
            "iat": int(issued.timestamp()),
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def decode_token(self, token: str) -> AuthenticatedUser:
        """Decode a JWT and return the corresponding ``AuthenticatedUser``."""

        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        subject = payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")
        if not isinstance(subject, str) or not isinstance(email, str) or not isinstance(role, str):
            raise AuthenticationError("Token payload missing required claims")
        try:
            user_id = int(subject)
            resolved_role = UserRole(role)
        except ValueError as exc:
            raise AuthenticationError("Token claims invalid") from exc
        return AuthenticatedUser(user_id=user_id, email=email, role=resolved_role)


@lru_cache(maxsize=1)
def get_security_provider() -> SecurityProvider:
    """Return a cached security provider instance."""

    return SecurityProvider(get_settings().auth)


def get_authenticated_user(request: Request) -> AuthenticatedUser:
    """Retrieve the principal stored on the request by ``AuthMiddleware``."""

    user = getattr(request.state, "user", None)
    if user is None:
        raise AuthenticationError("Login required")
    return user


__all__ = [
    "AuthenticatedUser",
    "SecurityProvider",
    "get_authenticated_user",
    "get_security_provider",
]
