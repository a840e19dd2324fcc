"""Service-layer exceptions and their HTTP translation."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Sequence

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        return {"detail": self.message}


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(ServiceError):
    """Raised on a role mismatch or an unmet precondition such as KYC."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str, *, missing_fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing_fields = tuple(missing_fields)

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.missing_fields:
            payload["missingFields"] = list(self.missing_fields)
        return payload


class BadRequestError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class PayloadValidationError(ServiceError):
    """Raised with every field error found in a request payload."""

    status_code = 422

    def __init__(self, errors: Sequence[FieldError]) -> None:
        super().__init__("Invalid payload")
        self.errors = tuple(errors)

    def to_payload(self) -> dict[str, object]:
        return {"detail": self.message, "errors": [asdict(error) for error in self.errors]}


class AuthenticationError(ServiceError):
    """Raised when credentials or a bearer token cannot be verified."""

    status_code = status.HTTP_401_UNAUTHORIZED


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    LOGGER.info(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    """Translate service errors into JSON responses."""

    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]


__all__ = [
    "AuthenticationError",
    "BadRequestError",
    "ConflictError",
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "PayloadValidationError",
    "ServiceError",
    "register_exception_handlers",
]
