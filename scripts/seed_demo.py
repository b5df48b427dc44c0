# scripts/seed_demo.py
"""
Seed a demo owner with one public calendar and a few availability rules.

Prints the session token and the public booking URLs so the API can be
poked at with curl right away.
"""

from __future__ import annotations

import argparse
from datetime import date, timedelta

from meetsync.db.session import SessionLocal, engine
from meetsync.models import Base, User
from meetsync.services.availability_service import create_availability
from meetsync.services.calendar_service import create_calendar
from meetsync.services.identity import RequestContext, issue_session_token
from meetsync.services.user_service import create_user


def seed(email: str, base_url: str) -> None:
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user = db.query(User).filter_by(email=email.lower()).first()
        if user is None:
            user = create_user(db, email=email, full_name="Demo Owner")
        ctx = RequestContext(user=user)

        calendar = create_calendar(
            db,
            ctx,
            title="Demo office hours",
            description="Weekday mornings plus one special afternoon",
        )

        # Monday to Friday, 09:00-12:00
        for day_of_week in range(1, 6):
            create_availability(
                db, ctx, calendar.id,
                day_of_week=day_of_week, start_time="09:00", end_time="12:00",
            )

        create_availability(
            db, ctx, calendar.id,
            on_date=date.today() + timedelta(days=3), start_time="14:00", end_time="15:30",
        )

        print("[seed_demo] token:", issue_session_token(user.id))
        print("[seed_demo] dates:", f"{base_url}/public/calendars/{calendar.id}/dates")
        print("[seed_demo] slots:", f"{base_url}/public/calendars/{calendar.id}/slots?date=YYYY-MM-DD")
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed MeetSync demo data")
    parser.add_argument("--email", default="demo@example.com")
    parser.add_argument("--base-url", default="http://127.0.0.1:8000")
    args = parser.parse_args()
    seed(args.email, args.base_url)


if __name__ == "__main__":
    main()
