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


def _calendar_with_rules(is_public=True):
    db: Session = SessionLocal()
    try:
        token = issue_session_token(create_user(db, email="owner@example.com").id)
    finally:
        db.close()
    headers = {"Authorization": f"Bearer {token}"}

    calendar_id = client.post(
        "/calendars",
        json={"title": "Consulting", "is_public": is_public},
        headers=headers,
    ).json()["id"]

    rules = [
        # Two overlapping Monday windows
        {"kind": "recurring", "day_of_week": 1, "start_time": "09:00", "end_time": "12:00"},
        {"kind": "recurring", "day_of_week": 1, "start_time": "10:00", "end_time": "14:00"},
        {"kind": "date", "date": "2024-12-25", "start_time": "10:00", "end_time": "11:00"},
    ]
    for rule in rules:
        resp = client.post(f"/calendars/{calendar_id}/availabilities", json=rule, headers=headers)
        assert resp.status_code == 201, resp.text

    return calendar_id, headers


def test_public_page_dates_and_slots():
    _clean_db()
    calendar_id, _ = _calendar_with_rules()

    page = client.get(f"/public/calendars/{calendar_id}")
    assert page.status_code == 200
    assert page.json()["title"] == "Consulting"

    # 2024-12-22 is a Sunday
    dates = client.get(
        f"/public/calendars/{calendar_id}/dates",
        params={"reference_date": "2024-12-22"},
    ).json()
    assert dates["reference_date"] == "2024-12-22"
    assert dates["dates"] == [
        "2024-12-23",
        "2024-12-25",
        "2024-12-30",
        "2025-01-06",
        "2025-01-13",
        "2025-01-20",
    ]

    monday = client.get(
        f"/public/calendars/{calendar_id}/slots",
        params={"date": "2024-12-23"},
    ).json()
    assert monday["slots"] == [
        {"start_time": "09:00", "end_time": "12:00"},
        {"start_time": "10:00", "end_time": "14:00"},
    ]

    christmas = client.get(
        f"/public/calendars/{calendar_id}/slots",
        params={"date": "2024-12-25"},
    ).json()
    assert christmas["slots"] == [{"start_time": "10:00", "end_time": "11:00"}]

    tuesday = client.get(
        f"/public/calendars/{calendar_id}/slots",
        params={"date": "2024-12-24"},
    ).json()
    assert tuesday["slots"] == []


def test_dates_default_to_today():
    _clean_db()
    calendar_id, _ = _calendar_with_rules()

    resp = client.get(f"/public/calendars/{calendar_id}/dates")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["dates"]) <= 7
    assert all(d >= data["reference_date"] for d in data["dates"])


def test_private_calendar_is_hidden_from_visitors():
    _clean_db()
    calendar_id, _ = _calendar_with_rules(is_public=False)

    assert client.get(f"/public/calendars/{calendar_id}").status_code == 403
    assert client.get(
        f"/public/calendars/{calendar_id}/slots", params={"date": "2024-12-23"}
    ).status_code == 403

    resp = client.post(
        f"/public/calendars/{calendar_id}/bookings",
        json={
            "date": "2024-12-23",
            "slot": {"start_time": "09:00", "end_time": "12:00"},
            "booker_name": "Vera",
            "booker_email": "vera@example.com",
            "title": "Kickoff",
        },
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"


def test_booking_an_offered_slot():
    _clean_db()
    calendar_id, headers = _calendar_with_rules()

    resp = client.post(
        f"/public/calendars/{calendar_id}/bookings",
        json={
            "date": "2024-12-23",
            "slot": {"start_time": "10:00", "end_time": "14:00"},
            "booker_name": "Vera",
            "booker_email": "vera@example.com",
            "title": "Kickoff",
            "description": "Scope the project",
        },
    )
    assert resp.status_code == 201, resp.text
    meeting = resp.json()
    assert meeting["status"] == "pending"
    assert meeting["start_time"] == "2024-12-23T10:00:00"
    assert meeting["end_time"] == "2024-12-23T14:00:00"

    owner_view = client.get(f"/calendars/{calendar_id}/meetings", headers=headers).json()
    assert [m["id"] for m in owner_view] == [meeting["id"]]


def test_booking_a_slot_that_is_not_offered():
    _clean_db()
    calendar_id, _ = _calendar_with_rules()

    resp = client.post(
        f"/public/calendars/{calendar_id}/bookings",
        json={
            "date": "2024-12-23",
            "slot": {"start_time": "09:00", "end_time": "14:00"},
            "booker_email": "vera@example.com",
            "title": "Kickoff",
        },
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "slot_no_longer_available"


def test_booking_with_bad_email_names_the_field():
    _clean_db()
    calendar_id, _ = _calendar_with_rules()

    resp = client.post(
        f"/public/calendars/{calendar_id}/bookings",
        json={
            "date": "2024-12-25",
            "slot": {"start_time": "10:00", "end_time": "11:00"},
            "booker_email": "vera-at-example",
            "title": "Kickoff",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["field"] == "booker_email"


def test_malformed_stored_rule_is_reported():
    _clean_db()
    calendar_id, _ = _calendar_with_rules()

    db: Session = SessionLocal()
    try:
        bad = Availability(
            calendar_id=calendar_id,
            recurring=True,
            day_of_week=4,
            start_time="25:00",
            end_time="26:00",
        )
        db.add(bad)
        db.commit()
        db.refresh(bad)
        bad_id = bad.id
    finally:
        db.close()

    resp = client.get(
        f"/public/calendars/{calendar_id}/dates",
        params={"reference_date": "2024-12-22"},
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "malformed_rule"
    assert resp.json()["rule_id"] == bad_id


def test_unique_slot_view():
    _clean_db()
    calendar_id, headers = _calendar_with_rules()

    client.post(
        f"/calendars/{calendar_id}/availabilities",
        json={"kind": "date", "date": "2024-12-23", "start_time": "09:00", "end_time": "12:00"},
        headers=headers,
    )

    raw = client.get(
        f"/public/calendars/{calendar_id}/slots", params={"date": "2024-12-23"}
    ).json()["slots"]
    assert len(raw) == 3

    unique = client.get(
        f"/public/calendars/{calendar_id}/slots",
        params={"date": "2024-12-23", "unique": "true"},
    ).json()["slots"]
    assert unique == [
        {"start_time": "09:00", "end_time": "12:00"},
        {"start_time": "10:00", "end_time": "14:00"},
    ]
