"""Bearer-token session client for the BizFund API.

The token is persisted through a :class:`TokenStore` so a new client picks the
session back up. On construction the client validates a stored token against
``/auth/me`` and forgets it when the server rejects it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx

from bizfund.core.logger import get_logger

LOGGER = get_logger(__name__)


class TokenStore:
    """File-backed storage for a single bearer token."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        token = self.path.read_text(encoding="utf-8").strip()
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionClient:
    """Authenticated access to the API for one user at a time."""

    def __init__(
        self,
        base_url: str,
        store: TokenStore,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._store = store
        self._http = httpx.Client(base_url=base_url, transport=transport, timeout=timeout)
        self.user: dict[str, Any] | None = None
        self.restore()

    @property
    def token(self) -> str | None:
        return self._store.load()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def _headers(self) -> dict[str, str]:
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        response = self._http.request(method, path, json=json, headers=self._headers())
        response.raise_for_status()
        return response.json()

    def restore(self) -> dict[str, Any] | None:
        """Resume a stored session, discarding the token when it no longer works."""

        if self.token is None:
            return None
        try:
            self.user = self._request("GET", "/auth/me")
        except httpx.HTTPError as exc:
            LOGGER.info("Stored session rejected, clearing token: %s", exc)
            self._store.clear()
            self.user = None
        return self.user

    def _start_session(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._store.save(payload["token"])
        self.user = payload["user"]
        return self.user

    def login(self, email: str, password: str) -> dict[str, Any]:
        payload = self._request("POST", "/auth/login", {"email": email, "password": password})
        return self._start_session(payload)

    def register(self, email: str, password: str, name: str, role: str) -> dict[str, Any]:
        payload = self._request(
            "POST",
            "/auth/register",
            {"email": email, "password": password, "name": name, "role": role},
        )
        return self._start_session(payload)

    def logout(self) -> None:
        self._store.clear()
        self.user = None

    def get(self, path: str) -> Any:
        return self._request("GET", path)

    def put(self, path: str, json: Any) -> Any:
        return self._request("PUT", path, json)

    def post(self, path: str, json: Any = None) -> Any:
        return self._request("POST", path, json)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SessionClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
