"""End-to-end tests of the HTTP API through the FastAPI test client."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from bizfund.core.security import AuthenticatedUser, get_security_provider
from bizfund.models import UserRole

from .conftest import KYC_PROFILE, PASSWORD


def test_health_is_public(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_protected_routes_require_token(client: TestClient) -> None:
    assert client.get("/users/profile").status_code == 401
    response = client.get("/users/profile", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid token"}


def test_expired_token_rejected(client: TestClient, make_user) -> None:
    user = make_user(UserRole.INVESTOR)
    principal = AuthenticatedUser(user_id=user.id, email=user.email, role=user.role)
    token = get_security_provider().create_access_token(
        principal, now=datetime.now(timezone.utc) - timedelta(days=30)
    )

    response = client.get("/users/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Token expired"}


def test_register_login_and_me(client: TestClient) -> None:
    registered = client.post(
        "/auth/register",
        json={"email": "Ada@Example.com", "password": "secret123", "name": "Ada Obi", "role": "INVESTOR"},
    )
    assert registered.status_code == 201
    body = registered.json()
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["firstName"] == "Ada"
    assert body["user"]["kycCompleted"] is False
    assert "passwordHash" not in body["user"]

    duplicate = client.post(
        "/auth/register",
        json={"email": "ada@example.com", "password": "secret123", "name": "Ada", "role": "INVESTOR"},
    )
    assert duplicate.status_code == 409

    bad_login = client.post("/auth/login", json={"email": "ada@example.com", "password": "wrong"})
    assert bad_login.status_code == 401

    login = client.post("/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["role"] == "INVESTOR"

    wallet = client.get("/wallets/balance", headers={"Authorization": f"Bearer {token}"})
    assert wallet.json() == {"balance": "0.00"}


def test_register_rejects_admin_role(client: TestClient) -> None:
    response = client.post(
        "/auth/register",
        json={"email": "root@example.com", "password": "secret123", "name": "Root", "role": "ADMIN"},
    )

    assert response.status_code == 422
    assert [error["field"] for error in response.json()["errors"]] == ["role"]


def test_login_seeded_password(client: TestClient, make_user) -> None:
    make_user(UserRole.BUSINESS, email="biz@example.com")

    response = client.post("/auth/login", json={"email": "biz@example.com", "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "BUSINESS"


def test_disabled_account_cannot_login(client: TestClient, make_user) -> None:
    make_user(UserRole.INVESTOR, email="off@example.com", is_active=False)

    response = client.post("/auth/login", json={"email": "off@example.com", "password": PASSWORD})

    assert response.status_code == 401
    assert response.json() == {"detail": "Account is disabled"}


def test_profile_round_trip(client: TestClient, make_user, auth_headers) -> None:
    user = make_user(UserRole.INVESTOR, first_name="Ada")
    headers = auth_headers(user)

    updated = client.put("/users/profile", json={"phone": "+2348011111111"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["phone"] == "+2348011111111"
    assert updated.json()["firstName"] == "Ada"

    rejected = client.put("/users/profile", json={"role": "ADMIN"}, headers=headers)
    assert rejected.status_code == 422
    assert rejected.json()["errors"] == [{"field": "role", "message": "is not an updatable field"}]


def test_business_profile_forbidden_for_investor(client: TestClient, make_user, auth_headers) -> None:
    investor = make_user(UserRole.INVESTOR)

    response = client.put(
        "/users/business-profile", json={"businessName": "Acme"}, headers=auth_headers(investor)
    )

    assert response.status_code == 403
    assert response.json() == {"detail": "Only business users can update business profile"}


def test_complete_kyc_reports_missing_fields(client: TestClient, make_user, auth_headers) -> None:
    user = make_user(UserRole.BUSINESS, **KYC_PROFILE)

    response = client.post("/users/complete-kyc", headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["missingFields"] == ["businessName", "cacNumber", "taxId", "businessAddress"]


def test_complete_kyc_success(client: TestClient, make_user, auth_headers) -> None:
    user = make_user(UserRole.INVESTOR, **KYC_PROFILE)

    response = client.post("/users/complete-kyc", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["kycCompleted"] is True


def test_all_users_is_admin_only(client: TestClient, make_user, auth_headers) -> None:
    admin = make_user(UserRole.ADMIN)
    investor = make_user(UserRole.INVESTOR)

    denied = client.get("/users/all", headers=auth_headers(investor))
    assert denied.status_code == 403
    assert denied.json() == {"detail": "Forbidden resource"}

    allowed = client.get("/users/all", headers=auth_headers(admin))
    assert allowed.status_code == 200
    assert [row["id"] for row in allowed.json()] == [investor.id, admin.id]
    assert all("passwordHash" not in row for row in allowed.json())


def test_wallet_deposit_and_history(client: TestClient, make_user, auth_headers) -> None:
    user = make_user(UserRole.INVESTOR, balance=100)
    headers = auth_headers(user)

    deposit = client.post("/wallets/deposit", json={"amount": 50.5}, headers=headers)
    assert deposit.status_code == 200
    assert deposit.json()["wallet"]["balance"] == "150.50"
    assert deposit.json()["transaction"]["amount"] == "50.50"

    overdraw = client.post("/wallets/withdraw", json={"amount": 1000}, headers=headers)
    assert overdraw.status_code == 400
    assert overdraw.json() == {"detail": "Insufficient balance"}

    history = client.get("/wallets/transactions?type=deposit&limit=5", headers=headers)
    assert history.status_code == 200
    assert history.json()["pagination"] == {"page": 1, "limit": 5, "total": 1, "pages": 1}

    bad_filter = client.get("/wallets/transactions?status=lost", headers=headers)
    assert bad_filter.status_code == 422

    transaction_id = history.json()["transactions"][0]["id"]
    single = client.get(f"/wallets/transactions/{transaction_id}", headers=headers)
    assert single.json()["reference"].startswith("DEP_")


def test_investments_are_investor_only(client: TestClient, make_user, auth_headers) -> None:
    business = make_user(UserRole.BUSINESS)
    investor = make_user(UserRole.INVESTOR)

    assert client.get("/investments", headers=auth_headers(business)).status_code == 403
    listed = client.get("/investments", headers=auth_headers(investor))
    assert listed.status_code == 200
    assert listed.json() == []

    blocked = client.post("/investments", json={"projectId": 1, "amount": 500}, headers=auth_headers(investor))
    assert blocked.status_code == 403
    assert blocked.json() == {"detail": "KYC must be completed before making investments"}


def test_business_profile_gate_ignores_body_shape(client: TestClient, make_user, auth_headers) -> None:
    investor = make_user(UserRole.INVESTOR)
    headers = auth_headers(investor)

    for body in ({"content": b""}, {"json": [1, 2]}, {"json": {}}, {"json": "text"}):
        response = client.put("/users/business-profile", headers=headers, **body)
        assert response.status_code == 403, body
        assert response.json() == {"detail": "Only business users can update business profile"}


def test_missing_or_non_object_bodies_use_payload_error_shape(
    client: TestClient, make_user, auth_headers
) -> None:
    investor = make_user(UserRole.INVESTOR)
    headers = auth_headers(investor)

    for method, path in (
        ("PUT", "/users/profile"),
        ("POST", "/wallets/deposit"),
        ("POST", "/wallets/withdraw"),
        ("POST", "/auth/register"),
        ("POST", "/auth/login"),
    ):
        missing = client.request(method, path, headers=headers)
        listed = client.request(method, path, json=[1, 2], headers=headers)
        for response in (missing, listed):
            assert response.status_code == 422, path
            assert response.json() == {
                "detail": "Invalid payload",
                "errors": [{"field": "body", "message": "must be a JSON object"}],
            }


def test_login_validation_errors(client: TestClient) -> None:
    response = client.post("/auth/login", json={"email": "ada@example.com"})

    assert response.status_code == 422
    assert response.json()["errors"] == [{"field": "password", "message": "is required"}]


def test_profile_rejects_value_wider_than_column(client: TestClient, make_user, auth_headers) -> None:
    user = make_user(UserRole.INVESTOR)

    response = client.put("/users/profile", json={"firstName": "x" * 100}, headers=auth_headers(user))

    assert response.status_code == 422
    assert response.json()["errors"] == [
        {"field": "firstName", "message": "must be at most 80 characters"}
    ]
