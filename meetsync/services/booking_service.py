import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from meetsync.models.calendar import Calendar
from meetsync.models.meeting import Meeting, MeetingStatus
from meetsync.services.availability_resolver import Slot, slots_for_date
from meetsync.services.calendar_service import get_owned_calendar, get_public_calendar
from meetsync.services.errors import (
    Forbidden,
    NotFound,
    SlotNoLongerAvailable,
    ValidationError,
)
from meetsync.services.gateway import gateway
from meetsync.services.identity import RequestContext
from meetsync.services.rule_store import load_rules
from meetsync.services.user_service import normalize_email

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MIN_TITLE_LENGTH = 3

# pending -> confirmed | cancelled; both are terminal
ALLOWED_TRANSITIONS = {
    MeetingStatus.PENDING: {MeetingStatus.CONFIRMED, MeetingStatus.CANCELLED},
    MeetingStatus.CONFIRMED: set(),
    MeetingStatus.CANCELLED: set(),
}


@dataclass
class Visitor:
    email: str
    name: Optional[str] = None


@dataclass
class MeetingDetails:
    title: str
    description: Optional[str] = None


def _at(day: date, clock: str) -> datetime:
    return datetime.strptime(f"{day.isoformat()} {clock}", "%Y-%m-%d %H:%M")


def _validate_visitor(visitor: Visitor, details: MeetingDetails):
    name = (visitor.name or "").strip() or None
    if name is not None and len(name) < MIN_NAME_LENGTH:
        raise ValidationError(
            "booker_name", f"booker_name must be at least {MIN_NAME_LENGTH} characters"
        )

    email = normalize_email("booker_email", visitor.email)

    title = (details.title or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise ValidationError("title", f"title must be at least {MIN_TITLE_LENGTH} characters")

    description = (details.description or "").strip() or None
    return name, email, title, description


def submit_booking(
    db: Session,
    *,
    calendar_id: int,
    day: date,
    slot: Slot,
    visitor: Visitor,
    details: MeetingDetails,
) -> Meeting:
    """
    Book `slot` on `day` for a visitor.

    Checks run in this order:
      1. the calendar exists and is public (NotFound / Forbidden)
      2. the slot is offered on that day according to rules fetched now,
         not whatever the client saw earlier (SlotNoLongerAvailable)
      3. visitor and meeting fields are well-formed (ValidationError)

    The meeting is stored as pending. Other meetings are not consulted:
    several visitors can hold pending bookings for the same slot, only one
    of them can be confirmed.
    """
    get_public_calendar(db, calendar_id)

    rules = load_rules(db, calendar_id)
    if slot not in slots_for_date(rules, day):
        logger.warning(
            "Calendar %s: slot %s-%s on %s is not offered",
            calendar_id,
            slot.start_time,
            slot.end_time,
            day.isoformat(),
        )
        raise SlotNoLongerAvailable("The selected time slot is no longer available")

    name, email, title, description = _validate_visitor(visitor, details)

    meeting = Meeting(
        calendar_id=calendar_id,
        booker_name=name,
        booker_email=email,
        start_time=_at(day, slot.start_time),
        end_time=_at(day, slot.end_time),
        title=title,
        description=description,
        status=MeetingStatus.PENDING.value,
        google_meet_link=None,
    )

    with gateway(db, "save the booking"):
        db.add(meeting)
        db.commit()
        db.refresh(meeting)

    logger.info(
        "Calendar %s: meeting %s booked for %s",
        calendar_id,
        meeting.id,
        meeting.start_time.isoformat(),
    )
    return meeting


def get_meeting_for_owner(db: Session, ctx: RequestContext, meeting_id: int) -> Meeting:
    with gateway(db, "load meeting"):
        meeting = db.query(Meeting).filter_by(id=meeting_id).first()
        if meeting is None:
            raise NotFound(f"Meeting {meeting_id} not found")

        calendar = db.query(Calendar).filter_by(id=meeting.calendar_id).first()
    if calendar is None or calendar.user_id != ctx.user_id:
        raise Forbidden("You do not own this meeting's calendar")
    return meeting


def transition_meeting(
    db: Session,
    ctx: RequestContext,
    meeting_id: int,
    new_status: MeetingStatus,
) -> Meeting:
    """
    Move a meeting to `new_status` on behalf of the calendar owner.

    Only pending meetings can change. Confirming fails with
    SlotNoLongerAvailable when the calendar already has a confirmed meeting
    over the same time range.
    """
    meeting = get_meeting_for_owner(db, ctx, meeting_id)

    current = MeetingStatus(meeting.status)
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(
            "status",
            f"cannot move a {current.value} meeting to {new_status.value}",
        )

    if new_status == MeetingStatus.CONFIRMED:
        with gateway(db, "check confirmed meetings"):
            clash = (
                db.query(Meeting)
                .filter(
                    Meeting.calendar_id == meeting.calendar_id,
                    Meeting.start_time == meeting.start_time,
                    Meeting.end_time == meeting.end_time,
                    Meeting.status == MeetingStatus.CONFIRMED.value,
                    Meeting.id != meeting.id,
                )
                .first()
            )
        if clash is not None:
            raise SlotNoLongerAvailable(
                f"Meeting {clash.id} is already confirmed for this time slot"
            )

    meeting.status = new_status.value
    with gateway(db, "update the meeting"):
        try:
            db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent confirmation
            db.rollback()
            raise SlotNoLongerAvailable(
                "Another meeting was confirmed for this time slot"
            ) from e
        db.refresh(meeting)

    logger.info("Meeting %s is now %s", meeting.id, meeting.status)
    return meeting


def list_meetings_for_calendar(
    db: Session,
    ctx: RequestContext,
    calendar_id: int,
) -> List[Meeting]:
    get_owned_calendar(db, ctx, calendar_id)
    with gateway(db, "list meetings"):
        return (
            db.query(Meeting)
            .filter(Meeting.calendar_id == calendar_id)
            .order_by(Meeting.start_time.asc(), Meeting.id.asc())
            .all()
        )


def list_meetings_for_user(db: Session, ctx: RequestContext) -> List[Meeting]:
    """All meetings across the caller's calendars, earliest first."""
    with gateway(db, "list meetings"):
        calendar_ids = [
            cid for (cid,) in db.query(Calendar.id).filter(Calendar.user_id == ctx.user_id).all()
        ]
        if not calendar_ids:
            return []

        return (
            db.query(Meeting)
            .filter(Meeting.calendar_id.in_(calendar_ids))
            .order_by(Meeting.start_time.asc(), Meeting.id.asc())
            .all()
        )


def delete_meeting(db: Session, ctx: RequestContext, meeting_id: int) -> None:
    meeting = get_meeting_for_owner(db, ctx, meeting_id)
    with gateway(db, "delete the meeting"):
        db.delete(meeting)
        db.commit()
    logger.info("Meeting %s deleted by user %s", meeting_id, ctx.user_id)
