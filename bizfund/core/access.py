"""Route authorisation as a pure predicate over (role, method, path)."""
from __future__ import annotations

from dataclasses import dataclass

from bizfund.models import UserRole

ANY_METHOD = "*"


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


@dataclass(frozen=True)
class RouteRule:
    """Roles allowed on ``path`` (and anything below it) for ``method``.

    A ``{name}`` segment in ``path`` matches any single request segment.
    """

    method: str
    path: str
    roles: frozenset[UserRole]

    def matches(self, method: str, path: str) -> bool:
        if self.method != ANY_METHOD and self.method != method.upper():
            return False
        expected = _segments(self.path)
        actual = _segments(path)
        if len(actual) < len(expected):
            return False
        return all(
            rule.startswith("{") or rule == segment
            for rule, segment in zip(expected, actual)
        )


ADMIN_ONLY = frozenset({UserRole.ADMIN})

# First matching rule wins; unmatched routes are open to every authenticated role.
ROUTE_RULES: tuple[RouteRule, ...] = (
    RouteRule("GET", "/users/all", ADMIN_ONLY),
    RouteRule("GET", "/projects/pending", ADMIN_ONLY),
    RouteRule("GET", "/projects/stats", ADMIN_ONLY),
    RouteRule("PUT", "/projects/{project_id}/approve", ADMIN_ONLY),
    RouteRule(ANY_METHOD, "/admin", ADMIN_ONLY),
    RouteRule(ANY_METHOD, "/investments", frozenset({UserRole.INVESTOR})),
)


def is_route_allowed(
    role: UserRole,
    method: str,
    path: str,
    rules: tuple[RouteRule, ...] = ROUTE_RULES,
) -> bool:
    for rule in rules:
        if rule.matches(method, path):
            return role in rule.roles
    return True
