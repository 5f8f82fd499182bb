#!/usr/bin/env python3
"""HTTP tests for the reservation blueprints.

These tests are written to run under pytest OR as a standalone script.
"""

from datetime import timedelta
from decimal import Decimal

from reservation_fixtures import DAY1, seed_fleet, setup_in_memory_db

ALICE = {"X-User-Id": "alice", "X-User-Role": "EMPLOYEE"}
BOB = {"X-User-Id": "bob", "X-User-Role": "EMPLOYEE"}
MARIA = {"X-User-Id": "maria", "X-User-Role": "MANAGER"}


def _client():
    SessionLocal = setup_in_memory_db()
    db = SessionLocal()
    try:
        seed_fleet(db)
    finally:
        db.close()

    from motorpool.main import create_app

    app = create_app()
    return app.test_client()


def _create(client, start=DAY1, days=2, headers=ALICE):
    return client.post(
        "/api/reservations",
        json={
            "vehicle_id": "veh-1",
            "start_time": start.isoformat() + "Z",
            "end_time": (start + timedelta(days=days)).isoformat() + "Z",
            "purpose": "Client meeting",
        },
        headers=headers,
    )


def _error(res) -> dict:
    body = res.get_json() or {}
    assert body.get("request_id")
    return body.get("error") or {}


def test_health_and_authentication():
    client = _client()
    assert client.get("/health").get_json() == {"status": "healthy"}

    res = client.get("/api/reservations")
    assert res.status_code == 401
    assert _error(res)["code"] == "AUTHENTICATION_REQUIRED"

    res = client.get("/api/reservations", headers={"X-User-Id": "alice", "X-User-Role": "PIRATE"})
    assert res.status_code == 401
    print("[PASS] health and authentication")


def test_create_and_conflict():
    client = _client()
    res = _create(client)
    assert res.status_code == 201
    body = res.get_json()
    assert body["status"] == "PENDING"
    assert Decimal(body["estimated_cost"]) == Decimal("100")
    assert body["start_time"] == "2030-01-02T09:00:00"

    res = _create(client, start=DAY1 + timedelta(hours=12), headers=BOB)
    assert res.status_code == 409
    assert _error(res)["code"] == "CONFLICT"

    res = client.post("/api/reservations", json={"start_time": "tomorrow"}, headers=ALICE)
    assert res.status_code == 400
    assert _error(res)["code"] == "VALIDATION_ERROR"
    print("[PASS] create and conflict")


def test_approval_workflow():
    client = _client()
    reservation_id = _create(client).get_json()["id"]

    res = client.post(f"/api/reservations/{reservation_id}/approve", json={}, headers=ALICE)
    assert res.status_code == 403
    assert _error(res)["code"] == "FORBIDDEN"

    res = client.post(f"/api/reservations/{reservation_id}/reject", json={}, headers=MARIA)
    assert res.status_code == 400
    assert _error(res)["field"] == "reason"

    res = client.post(f"/api/reservations/{reservation_id}/approve", json={"comment": "ok"}, headers=MARIA)
    assert res.status_code == 200
    assert res.get_json()["status"] == "APPROVED"

    res = client.post(f"/api/reservations/{reservation_id}/approve", json={}, headers=MARIA)
    assert res.status_code == 409
    assert _error(res)["code"] == "INVALID_STATUS_TRANSITION"

    detail = client.get(f"/api/reservations/{reservation_id}", headers=ALICE).get_json()
    assert [h["new_status"] for h in detail["history"]] == ["PENDING", "APPROVED"]
    assert detail["history"][1]["comment"] == "ok"
    print("[PASS] approval workflow")


def test_check_in_and_check_out():
    client = _client()
    reservation_id = _create(client).get_json()["id"]
    client.post(f"/api/reservations/{reservation_id}/approve", json={}, headers=MARIA)

    res = client.post(f"/api/reservations/{reservation_id}/check-in", json={"distance": 1000}, headers=MARIA)
    assert res.status_code == 200
    assert res.get_json()["status"] == "IN_PROGRESS"

    res = client.post(f"/api/reservations/{reservation_id}/cancel", json={"reason": "Changed mind"},
                      headers=ALICE)
    assert res.status_code == 409

    res = client.post(f"/api/reservations/{reservation_id}/check-out", json={"distance": 900}, headers=MARIA)
    assert res.status_code == 400

    res = client.post(f"/api/reservations/{reservation_id}/check-out", json={"distance": 1050, "rating": 4},
                      headers=MARIA)
    body = res.get_json()
    assert res.status_code == 200
    assert body["status"] == "COMPLETED"
    assert body["actual_distance"] == 50
    print("[PASS] check-in and check-out")


def test_modify_submit_and_cancel():
    client = _client()
    res = client.post(
        "/api/reservations",
        json={
            "vehicle_id": "veh-1",
            "start_time": DAY1.isoformat(),
            "end_time": (DAY1 + timedelta(hours=5)).isoformat(),
            "save_as_draft": True,
        },
        headers=ALICE,
    )
    reservation_id = res.get_json()["id"]
    assert res.get_json()["status"] == "DRAFT"

    res = client.patch(f"/api/reservations/{reservation_id}", json={"passenger_count": 4}, headers=ALICE)
    assert res.status_code == 200
    assert res.get_json()["passenger_count"] == 4

    res = client.post(f"/api/reservations/{reservation_id}/submit", headers=ALICE)
    assert res.get_json()["status"] == "PENDING"

    res = client.post(f"/api/reservations/{reservation_id}/cancel", json={"reason": "No longer needed"},
                      headers=BOB)
    assert res.status_code == 403

    res = client.post(f"/api/reservations/{reservation_id}/cancel", json={"reason": "No longer needed"},
                      headers=ALICE)
    assert res.get_json()["status"] == "CANCELLED"
    print("[PASS] modify, submit and cancel")


def test_listing_and_availability():
    client = _client()
    _create(client)
    _create(client, start=DAY1 + timedelta(days=6), headers=BOB)

    body = client.get("/api/reservations?page_size=1", headers=MARIA).get_json()
    assert body["meta"]["total"] == 2
    assert body["meta"]["total_pages"] == 2
    assert body["meta"]["has_next"] is True
    assert len(body["items"]) == 1

    body = client.get("/api/reservations", headers=ALICE).get_json()
    assert body["meta"]["total"] == 1

    res = client.get("/api/reservations?status=NOT_A_STATUS", headers=MARIA)
    assert res.status_code == 400

    res = client.get(
        "/api/vehicles/veh-1/availability",
        query_string={"start": DAY1.isoformat(), "end": (DAY1 + timedelta(hours=1)).isoformat()},
        headers=ALICE,
    )
    assert res.status_code == 200
    assert res.get_json()["available"] is False

    free = DAY1 + timedelta(days=30)
    res = client.get(
        "/api/vehicles/veh-1/availability",
        query_string={"start": free.isoformat(), "end": (free + timedelta(hours=1)).isoformat()},
        headers=ALICE,
    )
    assert res.get_json()["available"] is True

    res = client.get("/api/vehicles/veh-1/availability", headers=ALICE)
    assert res.status_code == 400

    res = client.get(
        "/api/reservations/calendar",
        query_string={"start": DAY1.isoformat(), "end": (DAY1 + timedelta(days=10)).isoformat()},
        headers=MARIA,
    )
    assert len(res.get_json()) == 2

    res = client.get("/api/reservations/missing-id", headers=MARIA)
    assert res.status_code == 404
    assert _error(res)["code"] == "NOT_FOUND"
    print("[PASS] listing and availability")


if __name__ == "__main__":
    print("Running reservation route tests...\n")

    test_health_and_authentication()
    test_create_and_conflict()
    test_approval_workflow()
    test_check_in_and_check_out()
    test_modify_submit_and_cancel()
    test_listing_and_availability()

    print("\n[SUCCESS] All reservation route tests passed!")
