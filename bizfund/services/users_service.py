"""Profile management and KYC completion."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from bizfund.core.errors import ForbiddenError, NotFoundError
from bizfund.core.logger import get_logger
from bizfund.models import User, UserRole
from bizfund.schemas import UserProfile, UserSummary
from bizfund.schemas.base import wire_name

from .kyc import missing_kyc_fields
from .validation import validate_profile_patch

LOGGER = get_logger(__name__)


class UsersService:
    """Read and update a user's own profile."""

    def _load_user(self, session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if user is None:
            LOGGER.warning("User id=%s not found", user_id)
            raise NotFoundError("User not found")
        return user

    def _apply(self, session: Session, user: User, patch: dict[str, object]) -> UserProfile:
        for attribute, value in patch.items():
            setattr(user, attribute, value)
        session.commit()
        session.refresh(user)
        return UserProfile.model_validate(user)

    def get_profile(self, session: Session, user_id: int) -> UserProfile:
        """Return the profile projection for ``user_id``."""

        return UserProfile.model_validate(self._load_user(session, user_id))

    def update_profile(self, session: Session, user_id: int, payload: Any) -> UserProfile:
        """Apply a partial update of the generic profile fields."""

        user = self._load_user(session, user_id)
        patch = validate_profile_patch(payload, business=False)
        LOGGER.info("Updating profile of user id=%s fields=%s", user_id, sorted(patch))
        return self._apply(session, user, patch)

    def update_business_profile(self, session: Session, user_id: int, payload: Any) -> UserProfile:
        """Apply a partial update of generic and business fields.

        Only BUSINESS users may call this; the role is checked before the
        payload is looked at.
        """

        user = self._load_user(session, user_id)
        if user.role != UserRole.BUSINESS:
            LOGGER.warning("User id=%s with role %s tried to edit a business profile", user_id, user.role.value)
            raise ForbiddenError("Only business users can update business profile")
        patch = validate_profile_patch(payload, business=True)
        LOGGER.info("Updating business profile of user id=%s fields=%s", user_id, sorted(patch))
        return self._apply(session, user, patch)

    def complete_kyc(self, session: Session, user_id: int) -> UserProfile:
        """Mark KYC complete once every role-required field is filled.

        The check runs on every call, including for users already marked
        complete.
        """

        user = self._load_user(session, user_id)
        missing = [wire_name(name) for name in missing_kyc_fields(user)]
        if missing:
            LOGGER.info("KYC incomplete for user id=%s missing=%s", user_id, missing)
            raise ForbiddenError(
                f"Missing required KYC fields: {', '.join(missing)}",
                missing_fields=missing,
            )
        LOGGER.info("KYC completed for user id=%s", user_id)
        return self._apply(session, user, {"kyc_completed": True})

    def get_all_users(self, session: Session) -> list[UserSummary]:
        """Return every user, newest first."""

        users = session.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc())
        ).scalars()
        return [UserSummary.model_validate(user) for user in users]
