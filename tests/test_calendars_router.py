from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from meetsync.main import app
from meetsync.db.session import engine, SessionLocal
from meetsync.models import Availability, Base, Calendar, Meeting, User
from meetsync.services.identity import issue_session_token
from meetsync.services.user_service import create_user

client = TestClient(app)


def setup_module(module):
    Base.metadata.create_all(bind=engine)


def _clean_db():
    db: Session = SessionLocal()
    try:
        db.query(Meeting).delete()
        db.query(Availability).delete()
        db.query(Calendar).delete()
        db.query(User).delete()
        db.commit()
    finally:
        db.close()


def _auth(email: str) -> dict:
    db: Session = SessionLocal()
    try:
        user = create_user(db, email=email)
        token = issue_session_token(user.id)
    finally:
        db.close()
    return {"Authorization": f"Bearer {token}"}


def test_calendar_crud_flow():
    _clean_db()
    headers = _auth("owner@example.com")

    resp = client.post(
        "/calendars",
        json={"title": "Office hours", "description": "Weekly drop-in"},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    calendar = resp.json()
    assert calendar["is_public"] is True

    listed = client.get("/calendars", headers=headers).json()
    assert [c["id"] for c in listed] == [calendar["id"]]

    patched = client.patch(
        f"/calendars/{calendar['id']}",
        json={"is_public": False},
        headers=headers,
    )
    assert patched.status_code == 200
    assert patched.json()["is_public"] is False
    assert patched.json()["title"] == "Office hours"

    deleted = client.delete(f"/calendars/{calendar['id']}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/calendars/{calendar['id']}", headers=headers).status_code == 404


def test_calendar_title_too_short():
    _clean_db()
    headers = _auth("owner@example.com")

    resp = client.post("/calendars", json={"title": "ab"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["field"] == "title"


def test_other_users_calendar_is_forbidden():
    _clean_db()
    owner = _auth("owner@example.com")
    intruder = _auth("intruder@example.com")

    calendar_id = client.post("/calendars", json={"title": "Private"}, headers=owner).json()["id"]

    assert client.get(f"/calendars/{calendar_id}", headers=intruder).status_code == 403
    assert client.delete(f"/calendars/{calendar_id}", headers=intruder).status_code == 403
    resp = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "recurring", "day_of_week": 1, "start_time": "09:00", "end_time": "10:00"},
        headers=intruder,
    )
    assert resp.status_code == 403


def test_availability_rules_crud():
    _clean_db()
    headers = _auth("owner@example.com")
    calendar_id = client.post("/calendars", json={"title": "Office hours"}, headers=headers).json()["id"]

    weekly = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "recurring", "day_of_week": 1, "start_time": "09:00", "end_time": "17:00"},
        headers=headers,
    )
    assert weekly.status_code == 201, weekly.text
    assert weekly.json()["recurring"] is True
    assert weekly.json()["date"] is None

    one_off = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "date", "date": "2024-12-25", "start_time": "10:00", "end_time": "11:00"},
        headers=headers,
    )
    assert one_off.status_code == 201, one_off.text
    assert one_off.json()["recurring"] is False
    assert one_off.json()["day_of_week"] is None
    assert one_off.json()["date"] == "2024-12-25"

    rules = client.get(f"/calendars/{calendar_id}/availabilities", headers=headers).json()
    assert len(rules) == 2

    rule_id = weekly.json()["id"]
    updated = client.patch(
        f"/calendars/{calendar_id}/availabilities/{rule_id}",
        json={"end_time": "12:00"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["end_time"] == "12:00"

    # Switching a weekly rule to a one-off clears day_of_week
    switched = client.patch(
        f"/calendars/{calendar_id}/availabilities/{rule_id}",
        json={"date": "2025-01-06"},
        headers=headers,
    )
    assert switched.status_code == 200
    assert switched.json()["recurring"] is False
    assert switched.json()["day_of_week"] is None

    removed = client.delete(f"/calendars/{calendar_id}/availabilities/{rule_id}", headers=headers)
    assert removed.status_code == 204
    assert len(client.get(f"/calendars/{calendar_id}/availabilities", headers=headers).json()) == 1


def test_availability_time_validation():
    _clean_db()
    headers = _auth("owner@example.com")
    calendar_id = client.post("/calendars", json={"title": "Office hours"}, headers=headers).json()["id"]

    backwards = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "recurring", "day_of_week": 2, "start_time": "17:00", "end_time": "09:00"},
        headers=headers,
    )
    assert backwards.status_code == 400
    assert backwards.json()["field"] == "availability"

    garbled = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "date", "date": "2024-12-25", "start_time": "ten", "end_time": "11:00"},
        headers=headers,
    )
    assert garbled.status_code == 400

    bad_day = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "recurring", "day_of_week": 7, "start_time": "09:00", "end_time": "10:00"},
        headers=headers,
    )
    assert bad_day.status_code == 422

    rule_id = client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "recurring", "day_of_week": 2, "start_time": "09:00", "end_time": "10:00"},
        headers=headers,
    ).json()["id"]
    rejected = client.patch(
        f"/calendars/{calendar_id}/availabilities/{rule_id}",
        json={"start_time": "11:00"},
        headers=headers,
    )
    assert rejected.status_code == 400

    rules = client.get(f"/calendars/{calendar_id}/availabilities", headers=headers).json()
    assert [(r["start_time"], r["end_time"]) for r in rules] == [("09:00", "10:00")]


def test_patch_can_clear_description():
    _clean_db()
    headers = _auth("owner@example.com")

    calendar_id = client.post(
        "/calendars",
        json={"title": "Office hours", "description": "Weekly drop-in"},
        headers=headers,
    ).json()["id"]

    # Fields left out of the body stay as they were
    kept = client.patch(f"/calendars/{calendar_id}", json={"title": "Drop-in"}, headers=headers)
    assert kept.status_code == 200
    assert kept.json()["description"] == "Weekly drop-in"

    cleared = client.patch(
        f"/calendars/{calendar_id}", json={"description": None}, headers=headers
    )
    assert cleared.status_code == 200
    assert cleared.json()["description"] is None
    assert cleared.json()["title"] == "Drop-in"

    client.patch(f"/calendars/{calendar_id}", json={"description": "Back again"}, headers=headers)
    blank = client.patch(f"/calendars/{calendar_id}", json={"description": "  "}, headers=headers)
    assert blank.json()["description"] is None
