from __future__ import annotations

from fastapi.testclient import TestClient

import shiftplan.db as app_db
from shiftplan.main import app
from shiftplan.models import AvailabilityRecord, CoverageRequirementRecord, EmployeeRecord, ShiftRecord

WEEK_START = "2024-06-02"


def seed_roster(employee_ids=("emp-a", "emp-b")):
    db = app_db.SessionLocal()
    for emp_id in employee_ids:
        db.add(EmployeeRecord(id=emp_id, first_name=emp_id.upper(), last_name="Worker", weekly_hours_limit=40))
    db.add(ShiftRecord(id="gy", name="Graveyard", start_time="22:00", end_time="06:00"))
    db.add(CoverageRequirementRecord(id="req-gy", start_time="22:00", end_time="06:00", min_employees=1))
    db.commit()
    for emp_id in employee_ids:
        for d in range(7):
            db.add(AvailabilityRecord(employee_id=emp_id, day_of_week=d, shift_id="gy"))
    db.commit()
    db.close()


def generate(client: TestClient, week_start: str = WEEK_START):
    return client.post("/api/schedules/generate", json={"week_start_date": week_start, "requesting_user_id": "mgr"})


def test_health():
    client = TestClient(app)
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_generate_returns_assignments_and_coverage():
    seed_roster()
    client = TestClient(app)

    r = generate(client)

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["messages"] == []
    assert len(body["assignments"]) == 7
    assert body["coverage"]["Graveyard"] == {"required": 7, "assigned": 7, "is_met": True}
    assert body["daily_coverage"]["2024-06-02"]["Graveyard"]["assigned"] == 1
    assert body["hours_by_employee"] == {"emp-a": 32.0, "emp-b": 24.0}
    assert r.headers["cache-control"].startswith("no-store")


def test_duplicate_week_returns_conflict():
    seed_roster()
    client = TestClient(app)

    assert generate(client).status_code == 201
    second = generate(client)

    assert second.status_code == 409
    assert len(client.get("/api/schedules").json()) == 1


def test_generate_without_inputs_is_bad_request():
    client = TestClient(app)
    r = generate(client)
    assert r.status_code == 400
    assert "employees" in r.json()["detail"]


def test_generate_rejects_malformed_payload():
    client = TestClient(app)
    r = client.post("/api/schedules/generate", json={"week_start_date": "not-a-date"})
    assert r.status_code == 422


def test_publish_and_delete_flow():
    seed_roster()
    client = TestClient(app)
    schedule_id = generate(client).json()["schedule_id"]

    published = client.post(f"/api/schedules/{schedule_id}/publish")
    assert published.status_code == 200
    assert published.json()["status"] == "published"
    assert client.post(f"/api/schedules/{schedule_id}/publish").status_code == 200

    detail = client.get(f"/api/schedules/{schedule_id}").json()
    assert detail["status"] == "published"
    assert len(detail["assignments"]) == 7

    assert client.delete(f"/api/schedules/{schedule_id}").json() == {"ok": True}
    assert client.get(f"/api/schedules/{schedule_id}").status_code == 404
    assert client.delete(f"/api/schedules/{schedule_id}").status_code == 404
    assert generate(client).status_code == 201


def test_unknown_schedule_publish_is_not_found():
    client = TestClient(app)
    assert client.post("/api/schedules/missing/publish").status_code == 404


def test_manual_assignment_routes():
    seed_roster()
    client = TestClient(app)
    generated = generate(client).json()
    assert generated["success"] is True

    coverage = client.get(f"/api/schedules/{generated['schedule_id']}/coverage").json()
    assert coverage["success"] is True

    duplicate = client.post(
        f"/api/schedules/{generated['schedule_id']}/assignments",
        json={"employee_id": "emp-a", "shift_id": "gy", "date": WEEK_START},
    )
    assert duplicate.status_code == 409

    existing = client.get(f"/api/schedules/{generated['schedule_id']}").json()["assignments"][0]
    removed = client.delete(f"/api/schedules/{generated['schedule_id']}/assignments/{existing['id']}")
    assert removed.status_code == 200

    coverage = client.get(f"/api/schedules/{generated['schedule_id']}/coverage").json()
    assert coverage["success"] is False
    assert coverage["messages"] == ["Coverage not met for Graveyard on 2024-06-02: 0 of 1 assigned"]


def test_export_csv():
    seed_roster()
    client = TestClient(app)
    schedule_id = generate(client).json()["schedule_id"]

    r = client.get(f"/api/schedules/{schedule_id}/export.csv")

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    lines = r.text.strip().splitlines()
    assert lines[0] == "date,shift,start,end,employee_id,employee_name"
    assert lines[1] == "2024-06-02,Graveyard,22:00,06:00,emp-a,EMP-A Worker"
    assert len(lines) == 8
