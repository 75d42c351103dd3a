from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from conftest import FakeSource, make_record
from models import User
from services.storage import MemoryStorage

EMPLOYEE_HEADERS = {"X-User-Id": "1", "X-User-Role": "employee", "X-User-Name": "Juan Carranza"}
COWORKER_HEADERS = {"X-User-Id": "3", "X-User-Role": "employee", "X-User-Name": "Alissa Pryor"}
MANAGER_HEADERS = {"X-User-Id": "2", "X-User-Role": "manager", "X-User-Name": "Ana Ramirez"}


@pytest.fixture
def remote() -> FakeSource:
    return FakeSource()


@pytest.fixture
def client(remote):
    app = create_app(Settings(), source=remote, storage=MemoryStorage())
    with TestClient(app) as client:
        yield client


def submit(client, headers=EMPLOYEE_HEADERS, **overrides):
    payload = {
        "type": "sick leave",
        "startDate": "2025-03-03",
        "endDate": "2025-03-03",
        "reason": "flu",
    }
    payload.update(overrides)
    return client.post("/requests", json=payload, headers=headers)


def test_ready(client):
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_missing_identity_is_rejected(client):
    response = client.get("/requests")

    assert response.status_code == 401
    assert response.json()["kind"] == "ForbiddenError"


def test_submit_and_list_as_owner(client):
    created = submit(client)

    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "pending"
    assert body["type"] == "sick_leave"
    assert body["employee"]["id"] == "1"
    assert body["canEdit"] is True
    assert body["canApprove"] is False

    listing = client.get("/requests", headers=EMPLOYEE_HEADERS).json()
    assert [r["id"] for r in listing["requests"]] == [body["id"]]
    assert listing["stats"]["pending"] == 1


def test_submit_missing_reason_is_400(client):
    response = submit(client, reason="")

    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"


def test_list_applies_role_visibility(client, remote):
    juan = User(id="1", name="Juan Carranza")
    alissa = User(id="3", name="Alissa Pryor")
    remote.records = [make_record("req1", juan), make_record("req2", alissa, type="sick leave")]

    own = client.get("/requests", headers=COWORKER_HEADERS).json()
    everything = client.get("/requests", headers=MANAGER_HEADERS).json()
    sick_only = client.get("/requests?type=sick_leave", headers=MANAGER_HEADERS).json()

    assert [r["id"] for r in own["requests"]] == ["req2"]
    assert [r["id"] for r in everything["requests"]] == ["req1", "req2"]
    assert [r["id"] for r in sick_only["requests"]] == ["req2"]
    assert everything["stats"]["total"] == 2


def test_other_employees_request_is_hidden(client):
    request_id = submit(client).json()["id"]

    response = client.get(f"/requests/{request_id}", headers=COWORKER_HEADERS)

    assert response.status_code == 404


def test_manager_approves_then_cannot_reject(client):
    request_id = submit(client).json()["id"]

    approved = client.patch(
        f"/requests/{request_id}/status", json={"status": "approved"}, headers=MANAGER_HEADERS
    )
    again = client.patch(
        f"/requests/{request_id}/status",
        json={"status": "rejected", "rejectionReason": "too late"},
        headers=MANAGER_HEADERS,
    )

    assert approved.status_code == 200
    assert approved.json()["approvedBy"]["id"] == "2"
    assert again.status_code == 409
    assert again.json()["kind"] == "InvalidTransitionError"


def test_self_approval_is_forbidden(client):
    request_id = submit(client, headers=MANAGER_HEADERS).json()["id"]

    response = client.patch(
        f"/requests/{request_id}/status", json={"status": "approved"}, headers=MANAGER_HEADERS
    )

    assert response.status_code == 403
    assert response.json()["kind"] == "SelfApprovalError"


def test_listing_reflects_status_change_immediately(client):
    request_id = submit(client).json()["id"]
    client.get("/requests", headers=MANAGER_HEADERS)

    client.patch(
        f"/requests/{request_id}/status",
        json={"status": "rejected", "rejectionReason": "short staffed"},
        headers=MANAGER_HEADERS,
    )
    listing = client.get("/requests", headers=EMPLOYEE_HEADERS).json()

    assert listing["requests"][0]["status"] == "rejected"
    assert listing["requests"][0]["rejectionReason"] == "short staffed"


def test_edit_pending_request(client):
    request_id = submit(client).json()["id"]

    response = client.put(
        f"/requests/{request_id}", json={"reason": "stomach bug"}, headers=EMPLOYEE_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["reason"] == "stomach bug"


def test_forced_refresh_during_outage_is_502(client, remote):
    remote.records = [make_record("req1", User(id="1", name="Juan Carranza"))]
    client.get("/requests", headers=EMPLOYEE_HEADERS)

    remote.fail = True
    refreshed = client.post("/requests/refresh", headers=EMPLOYEE_HEADERS)

    assert refreshed.status_code == 502
    assert refreshed.json()["kind"] == "FetchError"


def test_cache_debug_endpoints(client):
    client.get("/requests", headers=MANAGER_HEADERS)

    info = client.get("/cache", headers=MANAGER_HEADERS).json()
    assert info["ttl_seconds"] == 30
    assert info["entries"]["requests"]["fresh"] is True

    cleared = client.delete("/cache", headers=MANAGER_HEADERS).json()
    assert cleared == {"invalidated": "all", "size": 0}


def test_notifications_merge_session_and_remote(client, remote):
    remote.notifications = [
        {"id": "n1", "type": "info", "message": "Welcome", "read": False, "createdAt": "2025-01-11T08:00:00Z"}
    ]
    submit(client)

    body = client.get("/notifications", headers=EMPLOYEE_HEADERS).json()
    assert [n["message"] for n in body["remote"]] == ["Welcome"]
    assert len(body["session"]) == 1
    assert body["unreadCount"] == 2

    client.patch("/notifications/read-all", headers=EMPLOYEE_HEADERS)
    count = client.get("/notifications/unread-count", headers=EMPLOYEE_HEADERS).json()
    assert count == {"count": 0}


def test_health_reports_remote_error(client, remote):
    remote.fail = True

    body = client.get("/health").json()

    assert body["remote"] == "error"


def test_submitted_id_survives_reload_and_can_be_approved(client, remote):
    request_id = submit(client).json()["id"]

    listing = client.get("/requests", headers=MANAGER_HEADERS).json()
    approved = client.patch(
        f"/requests/{request_id}/status", json={"status": "approved"}, headers=MANAGER_HEADERS
    )

    assert request_id == remote.records[0]["id"]
    assert [r["id"] for r in listing["requests"]] == [request_id]
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"


def test_status_change_on_unknown_id_during_outage_is_404(client, remote):
    remote.fail = True

    response = client.patch(
        "/requests/missing/status", json={"status": "approved"}, headers=MANAGER_HEADERS
    )

    assert response.status_code == 404
    assert response.json()["kind"] == "NotFoundError"
