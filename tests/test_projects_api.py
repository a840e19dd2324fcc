"""HTTP tests for projects, project review and admin repayment."""
from __future__ import annotations

from fastapi.testclient import TestClient

from bizfund.models import UserRole

from .conftest import BUSINESS_PROFILE, KYC_PROFILE

PROJECT_BODY = {
    "title": "Poultry expansion",
    "description": "Two new layer houses in Ibadan.",
    "amountRequested": 200000,
    "duration": 9,
    "expectedRoi": 20,
}


def _verified(make_user, role: UserRole, **extra):
    profile = dict(KYC_PROFILE, **(BUSINESS_PROFILE if role == UserRole.BUSINESS else {}))
    return make_user(role, kyc_completed=True, **profile, **extra)


def test_project_lifecycle_through_funding_and_repayment(
    client: TestClient, make_user, auth_headers
) -> None:
    business = _verified(make_user, UserRole.BUSINESS)
    investor = _verified(make_user, UserRole.INVESTOR, balance=500000)
    admin = make_user(UserRole.ADMIN)

    created = client.post("/projects", json=PROJECT_BODY, headers=auth_headers(business))
    assert created.status_code == 201
    project_id = created.json()["id"]
    assert created.json()["status"] == "PENDING"
    assert created.json()["amountRequested"] == "200000.00"

    early = client.post(
        "/investments", json={"projectId": project_id, "amount": 1000}, headers=auth_headers(investor)
    )
    assert early.status_code == 400

    approved = client.put(
        f"/projects/{project_id}/approve", json={"decision": "approve"}, headers=auth_headers(admin)
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"
    assert approved.json()["approvedAt"] is not None

    invested = client.post(
        "/investments", json={"projectId": project_id, "amount": 200000}, headers=auth_headers(investor)
    )
    assert invested.status_code == 201
    assert invested.json()["projectStatus"] == "FUNDED"

    detail = client.get(f"/projects/{project_id}", headers=auth_headers(investor))
    assert detail.json()["amountRaised"] == "200000.00"
    assert [row["investorId"] for row in detail.json()["investments"]] == [investor.id]

    repaid = client.post(
        "/admin/repayment",
        json={"projectId": project_id, "totalRepayment": "240000"},
        headers=auth_headers(admin),
    )
    assert repaid.status_code == 200
    assert repaid.json()["project"]["status"] == "REPAID"
    assert repaid.json()["shares"][0]["actualReturn"] == "40000.00"

    balance = client.get("/wallets/balance", headers=auth_headers(investor))
    assert balance.json() == {"balance": "540000.00"}

    stats = client.get("/investments/stats", headers=auth_headers(investor))
    assert stats.json()["activeInvestments"] == 0
    assert stats.json()["totalActualReturn"] == "40000.00"


def test_admin_only_project_routes(client: TestClient, make_user, auth_headers) -> None:
    business = _verified(make_user, UserRole.BUSINESS)
    admin = make_user(UserRole.ADMIN)
    project_id = client.post("/projects", json=PROJECT_BODY, headers=auth_headers(business)).json()["id"]

    for method, path, body in (
        ("GET", "/projects/pending", None),
        ("GET", "/projects/stats", None),
        ("PUT", f"/projects/{project_id}/approve", {"decision": "approve"}),
        ("POST", "/admin/repayment", {"projectId": project_id, "totalRepayment": 1}),
    ):
        denied = client.request(method, path, json=body, headers=auth_headers(business))
        assert denied.status_code == 403, path
        assert denied.json() == {"detail": "Forbidden resource"}

    pending = client.get("/projects/pending", headers=auth_headers(admin))
    assert [row["id"] for row in pending.json()] == [project_id]
    stats = client.get("/projects/stats", headers=auth_headers(admin))
    assert stats.json()["pendingProjects"] == 1


def test_browse_and_owner_routes(client: TestClient, make_user, auth_headers) -> None:
    business = _verified(make_user, UserRole.BUSINESS)
    investor = make_user(UserRole.INVESTOR)
    headers = auth_headers(business)
    project_id = client.post("/projects", json=PROJECT_BODY, headers=headers).json()["id"]

    listed = client.get("/projects?status=pending&search=poultry", headers=auth_headers(investor))
    assert listed.status_code == 200
    assert listed.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    assert client.get("/projects?status=unknown", headers=headers).status_code == 422
    assert client.get("/projects/9999", headers=headers).status_code == 404

    mine = client.get("/projects/my-projects", headers=headers)
    assert [row["id"] for row in mine.json()] == [project_id]
    assert client.get("/projects/my-projects", headers=auth_headers(investor)).status_code == 403

    not_owner = client.put(f"/projects/{project_id}", json={"title": "Mine"}, headers=auth_headers(investor))
    assert not_owner.status_code == 403
    assert not_owner.json() == {"detail": "You can only update your own projects"}

    updated = client.put(f"/projects/{project_id}", json={"duration": 10}, headers=headers)
    assert updated.json()["duration"] == 10

    deleted = client.delete(f"/projects/{project_id}", headers=headers)
    assert deleted.json() == {"message": "Project deleted successfully"}
    assert client.get("/projects", headers=headers).json()["projects"] == []


def test_create_project_role_checked_before_body(client: TestClient, make_user, auth_headers) -> None:
    investor = make_user(UserRole.INVESTOR)

    response = client.post("/projects", headers=auth_headers(investor))

    assert response.status_code == 403
    assert response.json() == {"detail": "Only business users can create projects"}
