# tests/test_join_requests_api.py

"""
Tests for /join-request endpoints.
"""

from fastapi.testclient import TestClient
from sqlmodel import select

from core.config import settings
from models.enums import RequestStatus, Role
from models.family import Family
from models.join_request import JoinRequest
from models.user import User


def submit(client: TestClient, **overrides):
    body = {"name": "A B", "email": "a@b.com", "role": "TENANT"}
    body.update(overrides)
    return client.post("/join-request", json=body)


# -----------------------------------------------------
# POST /join-request (public)
# -----------------------------------------------------
def test_submit_creates_pending_request(client: TestClient, session, identity_provider):
    response = submit(client, role="tenant", message="Looking for a 3BR", familySize=3)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Join request submitted successfully"

    join_request = session.get(JoinRequest, data["requestId"])
    assert join_request.status == RequestStatus.PENDING
    assert join_request.role == Role.TENANT
    assert join_request.family_size == 3
    assert join_request.message == "Looking for a 3BR"

    assert identity_provider.sign_in_links == [
        {"email": "a@b.com", "redirect_to": None, "create_identity": True}
    ]


def test_submit_requires_name_email_and_role(client: TestClient):
    response = client.post("/join-request", json={"email": "a@b.com", "role": "TENANT"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_submit_rejects_unknown_role(client: TestClient):
    response = submit(client, role="landlord")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid role"}


def test_submit_rejects_registered_email(client: TestClient, make_user):
    make_user(email="a@b.com", role=Role.TENANT)

    response = submit(client)

    assert response.status_code == 400
    assert "already registered" in response.json()["error"]


def test_submit_rejects_duplicate_request(client: TestClient, make_join_request):
    make_join_request(email="a@b.com")

    response = submit(client)

    assert response.status_code == 400
    assert "already exists" in response.json()["error"]


def test_submit_rejects_registered_email_in_other_case(client: TestClient, make_user):
    make_user(email="tenant@b.com", role=Role.TENANT)

    response = submit(client, email="Tenant@b.com")

    assert response.status_code == 400
    assert "already registered" in response.json()["error"]


def test_submit_rejects_duplicate_request_in_other_case(client: TestClient):
    assert submit(client, email="a@b.com").status_code == 201

    response = submit(client, email="A@B.com")

    assert response.status_code == 400
    assert "already exists" in response.json()["error"]


def test_submit_stores_lowercased_email(client: TestClient, session):
    response = submit(client, email="New.Family@B.com")

    join_request = session.get(JoinRequest, response.json()["requestId"])
    assert join_request.email == "new.family@b.com"


def test_submit_succeeds_when_magic_link_fails(client: TestClient, identity_provider):
    identity_provider.fail_on.add("issue_sign_in_link")

    response = submit(client)

    assert response.status_code == 201
    assert response.json()["success"] is True


def test_submit_is_rate_limited(client: TestClient):
    for i in range(settings.JOIN_REQUEST_RATE_LIMIT):
        response = submit(client, email=f"user{i}@example.com")
        assert response.status_code == 201

    response = submit(client, email="one-too-many@example.com")

    assert response.status_code == 429
    assert "Retry-After" in response.headers


# -----------------------------------------------------
# Authorization guard
# -----------------------------------------------------
def test_get_requires_authentication(client: TestClient, make_join_request):
    join_request = make_join_request()

    response = client.get(f"/join-request/{join_request.id}")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_review_requires_authentication(client: TestClient, make_join_request):
    join_request = make_join_request()

    response = client.patch(f"/join-request/{join_request.id}", json={"status": "APPROVED"})

    assert response.status_code == 401


def test_tenant_cannot_review(client: TestClient, login_as, make_join_request, session):
    login_as(Role.TENANT)
    join_request = make_join_request()

    response = client.patch(f"/join-request/{join_request.id}", json={"status": "APPROVED"})

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Insufficient permissions"}
    session.refresh(join_request)
    assert join_request.status == RequestStatus.PENDING


def test_owner_cannot_list(client: TestClient, login_as):
    login_as(Role.OWNER)

    response = client.get("/join-request")

    assert response.status_code == 403


def test_property_manager_can_review(client: TestClient, login_as, make_join_request):
    manager = login_as(Role.PROPERTY_MANAGER)
    join_request = make_join_request()

    response = client.patch(
        f"/join-request/{join_request.id}", json={"status": "REJECTED", "reason": "Full"}
    )

    assert response.status_code == 200
    assert response.json()["joinRequest"]["reviewedBy"] == manager.id


# -----------------------------------------------------
# GET /join-request
# -----------------------------------------------------
def test_list_filters_and_paginates(client: TestClient, login_as, make_join_request):
    login_as(Role.ADMIN)
    make_join_request(email="p1@example.com")
    make_join_request(email="p2@example.com", role=Role.OWNER)
    make_join_request(email="r1@example.com", status=RequestStatus.REJECTED)

    response = client.get("/join-request", params={"status": "PENDING", "limit": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"] == {"total": 2, "limit": 1, "offset": 0}
    assert len(data["data"]) == 1
    assert data["data"][0]["status"] == "PENDING"

    response = client.get("/join-request", params={"role": "OWNER"})
    emails = [row["email"] for row in response.json()["data"]]
    assert emails == ["p2@example.com"]


def test_list_rejects_bad_limit(client: TestClient, login_as):
    login_as(Role.ADMIN)

    response = client.get("/join-request", params={"limit": 0})

    assert response.status_code == 400


# -----------------------------------------------------
# GET /join-request/{id}
# -----------------------------------------------------
def test_get_returns_raw_request(client: TestClient, login_as, make_join_request):
    login_as(Role.ADMIN)
    join_request = make_join_request(family_size=2)

    response = client.get(f"/join-request/{join_request.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == join_request.id
    assert data["status"] == "PENDING"
    assert data["familySize"] == 2
    assert data["reviewedBy"] is None


def test_get_unknown_request_is_404(client: TestClient, login_as):
    login_as(Role.ADMIN)

    response = client.get("/join-request/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Join request not found"}


# -----------------------------------------------------
# PATCH /join-request/{id}
# -----------------------------------------------------
def test_review_requires_valid_status(client: TestClient, login_as, make_join_request):
    login_as(Role.ADMIN)
    join_request = make_join_request()

    for body in ({}, {"status": "DONE"}, {"status": "PENDING"}):
        response = client.patch(f"/join-request/{join_request.id}", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Valid status (APPROVED or REJECTED) is required"}


def test_review_unknown_request_is_404(client: TestClient, login_as):
    login_as(Role.ADMIN)

    response = client.patch("/join-request/nope", json={"status": "REJECTED"})

    assert response.status_code == 404


def test_reject_response_shape(client: TestClient, login_as, make_join_request):
    login_as(Role.ADMIN)
    join_request = make_join_request(message="Please consider us")

    response = client.patch(
        f"/join-request/{join_request.id}", json={"status": "REJECTED", "reason": "No vacancy"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Join request rejected"
    assert "temporaryPassword" not in data
    assert data["joinRequest"]["status"] == "REJECTED"
    assert data["joinRequest"]["message"] == "Please consider us | Rejection Reason: No vacancy"


def test_review_already_processed_is_400(client: TestClient, login_as, make_join_request):
    login_as(Role.ADMIN)
    join_request = make_join_request(status=RequestStatus.APPROVED)

    response = client.patch(f"/join-request/{join_request.id}", json={"status": "REJECTED"})

    assert response.status_code == 400
    assert response.json() == {"error": "This request has already been approved"}


def test_approve_provisioning_failure_is_500_and_pending(
    client: TestClient, login_as, make_join_request, identity_provider
):
    login_as(Role.ADMIN)
    join_request = make_join_request()
    identity_provider.fail_on.add("create_user")

    response = client.patch(f"/join-request/{join_request.id}", json={"status": "APPROVED"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to create user account. Join request remains pending."
    }

    response = client.get(f"/join-request/{join_request.id}")
    assert response.json()["status"] == "PENDING"
    assert response.json()["reviewedAt"] is None


def test_approve_twice_second_is_conflict(client: TestClient, login_as, make_join_request, session):
    login_as(Role.ADMIN)
    join_request = make_join_request()

    first = client.patch(f"/join-request/{join_request.id}", json={"status": "APPROVED"})
    second = client.patch(f"/join-request/{join_request.id}", json={"status": "APPROVED"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert "already been approved" in second.json()["error"]
    assert len(session.exec(select(User).where(User.email == join_request.email)).all()) == 1


# -----------------------------------------------------
# End to end
# -----------------------------------------------------
def test_submit_review_and_lookup_end_to_end(client: TestClient, login_as, session, identity_provider):
    admin = login_as(Role.ADMIN)

    response = submit(client, email="a@b.com", name="A B", role="TENANT", familySize=3)
    assert response.status_code == 201
    request_id = response.json()["requestId"]

    response = client.get(f"/join-request/{request_id}")
    assert response.json()["status"] == "PENDING"

    response = client.patch(f"/join-request/{request_id}", json={"status": "APPROVED"})
    assert response.status_code == 200
    data = response.json()
    assert isinstance(data["temporaryPassword"], str)
    assert len(data["temporaryPassword"]) > 0
    assert data["joinRequest"]["status"] == "APPROVED"
    assert data["joinRequest"]["reviewedBy"] == admin.id

    response = client.get("/users", params={"email": "a@b.com"})
    assert response.status_code == 200
    users = response.json()["data"]
    assert len(users) == 1
    assert users[0]["role"] == "TENANT"
    assert "password" not in users[0]

    family = session.exec(select(Family).where(Family.name == "A B")).one()
    assert family.size == 3
    assert "a@b.com" in identity_provider.identities
