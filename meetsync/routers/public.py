from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from meetsync.config import get_settings
from meetsync.db.session import get_db
from meetsync.routers.serializers import meeting_to_dict
from meetsync.schemas.booking import BookingRequest
from meetsync.services.availability_resolver import (
    Slot,
    bookable_dates,
    slots_for_date,
    unique_slots,
)
from meetsync.services.booking_service import MeetingDetails, Visitor, submit_booking
from meetsync.services.calendar_service import get_public_calendar
from meetsync.services.rule_store import load_rules

router = APIRouter(prefix="/public/calendars", tags=["public"])


@router.get("/{calendar_id}")
def get_public_calendar_page(
    calendar_id: int,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    calendar = get_public_calendar(db, calendar_id)
    return {
        "id": calendar.id,
        "title": calendar.title,
        "description": calendar.description,
    }


@router.get("/{calendar_id}/dates")
def get_bookable_dates(
    calendar_id: int,
    reference_date: Optional[date] = None,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Next dates with availability, starting at `reference_date`
    (today, server local date, when omitted).
    """
    settings = get_settings()
    get_public_calendar(db, calendar_id)
    rules = load_rules(db, calendar_id)

    reference = reference_date or date.today()
    dates = bookable_dates(
        rules,
        reference,
        horizon_days=settings.BOOKING_HORIZON_DAYS,
        max_dates=settings.BOOKING_MAX_DATES,
    )
    return {
        "calendar_id": calendar_id,
        "reference_date": reference.isoformat(),
        "dates": [d.isoformat() for d in dates],
    }


@router.get("/{calendar_id}/slots")
def get_slots(
    calendar_id: int,
    day: date = Query(..., alias="date"),
    unique: bool = False,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Time slots offered on `date`, one per matching rule.
    Pass `unique=true` to drop repeated identical ranges.
    """
    get_public_calendar(db, calendar_id)
    rules = load_rules(db, calendar_id)

    slots = slots_for_date(rules, day)
    if unique:
        slots = unique_slots(slots)

    return {
        "calendar_id": calendar_id,
        "date": day.isoformat(),
        "slots": [{"start_time": s.start_time, "end_time": s.end_time} for s in slots],
    }


@router.post("/{calendar_id}/bookings", status_code=201)
def create_booking(
    calendar_id: int,
    payload: BookingRequest,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    meeting = submit_booking(
        db,
        calendar_id=calendar_id,
        day=payload.date,
        slot=Slot(start_time=payload.slot.start_time, end_time=payload.slot.end_time),
        visitor=Visitor(email=payload.booker_email, name=payload.booker_name),
        details=MeetingDetails(title=payload.title, description=payload.description),
    )
    return meeting_to_dict(meeting)
