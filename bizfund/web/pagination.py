"""Shared helpers for pagination and query parameter parsing."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, TypeVar

from starlette.datastructures import QueryParams

from bizfund.core.errors import FieldError, PayloadValidationError

ParamsMapping = Mapping[str, str] | QueryParams
E = TypeVar("E", bound=Enum)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PaginationParams:
    page: int
    limit: int


def parse_positive_int(value: str | None, *, default: int) -> int:
    """Parse a positive integer from the provided string.

    Any invalid or non-positive values will fall back to ``default``.
    """

    try:
        parsed = int(value) if value is not None else default
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def extract_pagination(
    params: ParamsMapping,
    *,
    page_param: str = "page",
    limit_param: str = "limit",
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> PaginationParams:
    page = parse_positive_int(params.get(page_param), default=1)
    limit = min(parse_positive_int(params.get(limit_param), default=default_limit), max_limit)
    return PaginationParams(page=page, limit=limit)


def parse_choice(params: ParamsMapping, key: str, choices: type[E]) -> E | None:
    """Return the enum member named by ``params[key]`` (case-insensitive)."""

    value = params.get(key)
    if not value:
        return None
    try:
        return choices(value.strip().upper())
    except ValueError:
        allowed = ", ".join(member.value for member in choices)
        raise PayloadValidationError([FieldError(key, f"must be one of: {allowed}")]) from None
