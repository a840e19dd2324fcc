"""Explicit payload validation returning field-level errors.

Each ``collect_*`` function is pure: it inspects a decoded JSON payload and
returns every problem it finds as a :class:`FieldError`, keyed by the wire
(camelCase) field name. The matching ``validate_*`` function raises
:class:`PayloadValidationError` when the list is non-empty and otherwise
returns the payload converted to model attribute names and Python types.

String limits follow the width of the column the value is stored in.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from bizfund.core.errors import FieldError, PayloadValidationError
from bizfund.models import Project, ProjectStatus, Transaction, User, UserRole
from bizfund.schemas.base import wire_name

MAX_TEXT_LENGTH = 255
MIN_PASSWORD_LENGTH = 6
MIN_INVESTMENT_AMOUNT = Decimal("100")
MIN_PROJECT_AMOUNT = Decimal("1000")
# Numeric(18, 2) holds at most 16 integer digits.
MAX_AMOUNT = Decimal("9999999999999999.99")
PROJECT_DURATION_MONTHS = (1, 60)
PROJECT_ROI_PERCENT = (5, 50)

GENERIC_PROFILE_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "phone",
    "address",
    "id_number",
    "id_document",
)
BUSINESS_PROFILE_FIELDS: tuple[str, ...] = (
    "business_name",
    "cac_number",
    "tax_id",
    "business_address",
)
PROJECT_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "amount_requested",
    "duration",
    "expected_roi",
    "documents",
)
REQUIRED_PROJECT_FIELDS = PROJECT_FIELDS[:-1]
SELF_REGISTRATION_ROLES = frozenset({UserRole.INVESTOR, UserRole.BUSINESS})
PROJECT_DECISIONS = {"approve": ProjectStatus.APPROVED, "reject": ProjectStatus.REJECTED}

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def column_limit(model: type, attribute: str) -> int | None:
    """Return the declared length of ``model.attribute`` (``None`` for TEXT)."""

    return getattr(model.__table__.c[attribute].type, "length", None)


def _text_error(field: str, value: Any, max_length: int | None = MAX_TEXT_LENGTH) -> FieldError | None:
    if not isinstance(value, str):
        return FieldError(field, "must be a string")
    if not value.strip():
        return FieldError(field, "must not be blank")
    if max_length is not None and len(value.strip()) > max_length:
        return FieldError(field, f"must be at most {max_length} characters")
    return None


def _user_text_error(field: str, value: Any, attribute: str) -> FieldError | None:
    return _text_error(field, value, column_limit(User, attribute))


def _parse_birth_date(value: Any) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_amount(value: Any) -> Decimal | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def _amount_error(
    field: str,
    value: Any,
    *,
    minimum: Decimal | None = None,
    allow_zero: bool = False,
) -> FieldError | None:
    amount = _parse_amount(value)
    if amount is None:
        return FieldError(field, "must be a number")
    if amount < 0 or (amount == 0 and not allow_zero):
        message = "must not be negative" if allow_zero else "must be greater than 0"
        return FieldError(field, message)
    if amount.as_tuple().exponent < -2:
        return FieldError(field, "must have at most two decimal places")
    if amount > MAX_AMOUNT:
        return FieldError(field, f"must be at most {MAX_AMOUNT}")
    if minimum is not None and amount < minimum:
        return FieldError(field, f"must be at least {minimum}")
    return None


def _int_in_range_error(field: str, value: Any, bounds: tuple[int, int]) -> FieldError | None:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        return FieldError(field, "must be an integer")
    if not low <= value <= high:
        return FieldError(field, f"must be between {low} and {high}")
    return None


def _positive_id_error(field: str, value: Any) -> FieldError | None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return FieldError(field, "must be a positive integer")
    return None


def _unknown_field_errors(payload: Mapping, allowed: set[str], message: str) -> list[FieldError]:
    return [FieldError(str(key), message) for key in payload if key not in allowed]


def collect_profile_errors(payload: Any, *, business: bool) -> list[FieldError]:
    """Return every problem with a profile patch."""

    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    text_fields = GENERIC_PROFILE_FIELDS + (BUSINESS_PROFILE_FIELDS if business else ())
    allowed = {wire_name(name) for name in text_fields} | {"dateOfBirth"}
    if business:
        allowed.add("businessDocuments")

    errors = _unknown_field_errors(payload, allowed, "is not an updatable field")

    for name in text_fields:
        key = wire_name(name)
        if key in payload:
            error = _user_text_error(key, payload[key], name)
            if error:
                errors.append(error)

    if "dateOfBirth" in payload:
        birth_date = _parse_birth_date(payload["dateOfBirth"])
        if birth_date is None:
            errors.append(FieldError("dateOfBirth", "must be an ISO-8601 date"))
        elif birth_date > datetime.now(timezone.utc).date():
            errors.append(FieldError("dateOfBirth", "must not be in the future"))

    if business and "businessDocuments" in payload:
        documents = payload["businessDocuments"]
        if not isinstance(documents, list):
            errors.append(FieldError("businessDocuments", "must be a list of strings"))
        else:
            for index, document in enumerate(documents):
                error = _text_error(f"businessDocuments[{index}]", document)
                if error:
                    errors.append(error)

    return errors


def validate_profile_patch(payload: Any, *, business: bool) -> dict[str, object]:
    """Validate a profile patch and return it keyed by model attribute."""

    errors = collect_profile_errors(payload, business=business)
    if errors:
        raise PayloadValidationError(errors)

    text_fields = GENERIC_PROFILE_FIELDS + (BUSINESS_PROFILE_FIELDS if business else ())
    patch: dict[str, object] = {}
    for name in text_fields:
        key = wire_name(name)
        if key in payload:
            patch[name] = payload[key].strip()
    if "dateOfBirth" in payload:
        patch["date_of_birth"] = _parse_birth_date(payload["dateOfBirth"])
    if business and "businessDocuments" in payload:
        patch["business_documents"] = [document.strip() for document in payload["businessDocuments"]]
    return patch


def _email_error(value: Any) -> FieldError | None:
    if not isinstance(value, str) or not _EMAIL_PATTERN.match(value.strip()):
        return FieldError("email", "must be a valid email address")
    limit = column_limit(User, "email")
    if limit is not None and len(value.strip()) > limit:
        return FieldError("email", f"must be at most {limit} characters")
    return None


def _split_name(name: str) -> tuple[str, str | None]:
    first_name, _, last_name = name.strip().partition(" ")
    return first_name, last_name.strip() or None


def collect_registration_errors(payload: Any) -> list[FieldError]:
    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    errors: list[FieldError] = []
    email_error = _email_error(payload.get("email"))
    if email_error:
        errors.append(email_error)

    password = payload.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            FieldError("password", f"must be at least {MIN_PASSWORD_LENGTH} characters")
        )

    name = payload.get("name")
    name_error = _text_error("name", name, max_length=None)
    if name_error is None:
        first_name, last_name = _split_name(name)
        first_limit = column_limit(User, "first_name")
        last_limit = column_limit(User, "last_name")
        if len(first_name) > first_limit:
            name_error = FieldError("name", f"first name must be at most {first_limit} characters")
        elif last_name is not None and len(last_name) > last_limit:
            name_error = FieldError("name", f"last name must be at most {last_limit} characters")
    if name_error:
        errors.append(name_error)

    role = payload.get("role")
    if role not in {role.value for role in SELF_REGISTRATION_ROLES}:
        errors.append(FieldError("role", "must be INVESTOR or BUSINESS"))
    return errors


def validate_registration(payload: Any) -> dict[str, object]:
    """Return ``email``, ``password``, ``first_name``, ``last_name`` and ``role``."""

    errors = collect_registration_errors(payload)
    if errors:
        raise PayloadValidationError(errors)

    first_name, last_name = _split_name(payload["name"])
    return {
        "email": payload["email"].strip().lower(),
        "password": payload["password"],
        "first_name": first_name,
        "last_name": last_name,
        "role": UserRole(payload["role"]),
    }


def collect_login_errors(payload: Any) -> list[FieldError]:
    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    errors: list[FieldError] = []
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        errors.append(FieldError("email", "is required"))
    password = payload.get("password")
    if not isinstance(password, str) or not password:
        errors.append(FieldError("password", "is required"))
    return errors


def validate_login(payload: Any) -> tuple[str, str]:
    """Return the normalised ``(email, password)`` pair."""

    errors = collect_login_errors(payload)
    if errors:
        raise PayloadValidationError(errors)
    return payload["email"].strip().lower(), payload["password"]


def collect_amount_errors(
    payload: Any,
    *,
    minimum: Decimal | None = None,
    extra_fields: tuple[str, ...] = (),
) -> list[FieldError]:
    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    errors: list[FieldError] = []
    amount_error = _amount_error("amount", payload.get("amount"), minimum=minimum)
    if amount_error:
        errors.append(amount_error)

    if "description" in payload and payload["description"] is not None:
        error = _text_error(
            "description", payload["description"], column_limit(Transaction, "description")
        )
        if error:
            errors.append(error)

    errors.extend(
        _unknown_field_errors(payload, {"amount", "description", *extra_fields}, "is not an accepted field")
    )
    return errors


def validate_money_movement(payload: Any) -> tuple[Decimal, str | None]:
    """Validate a deposit or withdrawal body into ``(amount, description)``."""

    errors = collect_amount_errors(payload)
    if errors:
        raise PayloadValidationError(errors)
    description = payload.get("description")
    return _parse_amount(payload["amount"]), description.strip() if description else None


def validate_investment_request(payload: Any) -> tuple[int, Decimal]:
    """Validate ``{"projectId", "amount"}`` into ``(project_id, amount)``."""

    errors = collect_amount_errors(
        payload, minimum=MIN_INVESTMENT_AMOUNT, extra_fields=("projectId",)
    )
    if isinstance(payload, Mapping):
        id_error = _positive_id_error("projectId", payload.get("projectId"))
        if id_error:
            errors.append(id_error)
    if errors:
        raise PayloadValidationError(errors)
    return payload["projectId"], _parse_amount(payload["amount"])


def collect_project_errors(payload: Any, *, partial: bool = False) -> list[FieldError]:
    """Return every problem with a project body.

    ``partial`` accepts any subset of the fields, as used for updates.
    """

    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    errors = _unknown_field_errors(
        payload, {wire_name(name) for name in PROJECT_FIELDS}, "is not an accepted field"
    )
    if not partial:
        for name in REQUIRED_PROJECT_FIELDS:
            if wire_name(name) not in payload:
                errors.append(FieldError(wire_name(name), "is required"))

    checks = {
        "title": lambda value: _text_error("title", value, column_limit(Project, "title")),
        "description": lambda value: _text_error("description", value, column_limit(Project, "description")),
        "amountRequested": lambda value: _amount_error(
            "amountRequested", value, minimum=MIN_PROJECT_AMOUNT
        ),
        "duration": lambda value: _int_in_range_error("duration", value, PROJECT_DURATION_MONTHS),
        "expectedRoi": lambda value: _int_in_range_error("expectedRoi", value, PROJECT_ROI_PERCENT),
    }
    for key, check in checks.items():
        if key in payload:
            error = check(payload[key])
            if error:
                errors.append(error)

    if "documents" in payload:
        documents = payload["documents"]
        if not isinstance(documents, list):
            errors.append(FieldError("documents", "must be a list of strings"))
        else:
            for index, document in enumerate(documents):
                error = _text_error(f"documents[{index}]", document)
                if error:
                    errors.append(error)
    return errors


def validate_project(payload: Any, *, partial: bool = False) -> dict[str, object]:
    """Validate a project body and return it keyed by model attribute."""

    errors = collect_project_errors(payload, partial=partial)
    if errors:
        raise PayloadValidationError(errors)

    values: dict[str, object] = {}
    for name in PROJECT_FIELDS:
        key = wire_name(name)
        if key not in payload:
            continue
        value = payload[key]
        if name in ("title", "description"):
            value = value.strip()
        elif name == "amount_requested":
            value = _parse_amount(value)
        elif name == "documents":
            value = [document.strip() for document in value]
        values[name] = value
    return values


def collect_decision_errors(payload: Any) -> list[FieldError]:
    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    errors = _unknown_field_errors(payload, {"decision", "reason"}, "is not an accepted field")
    if payload.get("decision") not in PROJECT_DECISIONS:
        errors.append(FieldError("decision", "must be approve or reject"))
    if payload.get("reason") is not None:
        error = _text_error("reason", payload["reason"])
        if error:
            errors.append(error)
    return errors


def validate_decision(payload: Any) -> tuple[ProjectStatus, str | None]:
    """Return the status an approval decision moves a project to, and its reason."""

    errors = collect_decision_errors(payload)
    if errors:
        raise PayloadValidationError(errors)
    reason = payload.get("reason")
    return PROJECT_DECISIONS[payload["decision"]], reason.strip() if reason else None


def collect_repayment_errors(payload: Any) -> list[FieldError]:
    if not isinstance(payload, Mapping):
        return [FieldError("body", "must be a JSON object")]

    errors = _unknown_field_errors(payload, {"projectId", "totalRepayment"}, "is not an accepted field")
    id_error = _positive_id_error("projectId", payload.get("projectId"))
    if id_error:
        errors.append(id_error)
    amount_error = _amount_error("totalRepayment", payload.get("totalRepayment"), allow_zero=True)
    if amount_error:
        errors.append(amount_error)
    return errors


def validate_repayment(payload: Any) -> tuple[int, Decimal]:
    """Validate ``{"projectId", "totalRepayment"}`` into ``(project_id, total)``."""

    errors = collect_repayment_errors(payload)
    if errors:
        raise PayloadValidationError(errors)
    return payload["projectId"], _parse_amount(payload["totalRepayment"])
