"""Tests for the route authorisation predicate."""
from __future__ import annotations

import pytest

from bizfund.core.access import RouteRule, is_route_allowed
from bizfund.models import UserRole


@pytest.mark.parametrize(
    ("role", "method", "path", "allowed"),
    [
        (UserRole.ADMIN, "GET", "/users/all", True),
        (UserRole.INVESTOR, "GET", "/users/all", False),
        (UserRole.BUSINESS, "GET", "/users/all/", False),
        (UserRole.INVESTOR, "GET", "/users/profile", True),
        (UserRole.BUSINESS, "PUT", "/users/business-profile", True),
        (UserRole.INVESTOR, "POST", "/investments", True),
        (UserRole.INVESTOR, "GET", "/investments/stats", True),
        (UserRole.BUSINESS, "GET", "/investments", False),
        (UserRole.ADMIN, "POST", "/investments", False),
        (UserRole.BUSINESS, "GET", "/investments-report", True),
        (UserRole.BUSINESS, "GET", "/wallets/balance", True),
        (UserRole.ADMIN, "GET", "/projects/pending", True),
        (UserRole.BUSINESS, "GET", "/projects/pending", False),
        (UserRole.INVESTOR, "GET", "/projects/stats", False),
        (UserRole.BUSINESS, "GET", "/projects/7", True),
        (UserRole.BUSINESS, "PUT", "/projects/7", True),
        (UserRole.BUSINESS, "PUT", "/projects/7/approve", False),
        (UserRole.ADMIN, "PUT", "/projects/7/approve/", True),
        (UserRole.BUSINESS, "POST", "/projects", True),
        (UserRole.INVESTOR, "POST", "/admin/repayment", False),
        (UserRole.ADMIN, "POST", "/admin/repayment", True),
        (UserRole.INVESTOR, "GET", "/administrators", True),
    ],
)
def test_default_rules(role: UserRole, method: str, path: str, allowed: bool) -> None:
    assert is_route_allowed(role, method, path) is allowed


def test_method_specific_rule() -> None:
    rules = (RouteRule("DELETE", "/projects", frozenset({UserRole.ADMIN})),)

    assert is_route_allowed(UserRole.INVESTOR, "GET", "/projects/1", rules) is True
    assert is_route_allowed(UserRole.INVESTOR, "delete", "/projects/1", rules) is False
    assert is_route_allowed(UserRole.ADMIN, "DELETE", "/projects/1", rules) is True


def test_placeholder_segment_matches_one_segment() -> None:
    rule = RouteRule("PUT", "/projects/{project_id}/approve", frozenset({UserRole.ADMIN}))

    assert rule.matches("put", "/projects/12/approve")
    assert not rule.matches("PUT", "/projects/approve")
    assert not rule.matches("PUT", "/projects/12/reject")
