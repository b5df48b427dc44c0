import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from meetsync.models.calendar import Calendar
from meetsync.services.errors import Forbidden, NotFound, ValidationError
from meetsync.services.gateway import gateway
from meetsync.services.identity import RequestContext

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3

# Distinguishes "leave as is" from an explicit None in partial updates
UNSET = object()


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise ValidationError("title", f"title must be at least {MIN_TITLE_LENGTH} characters")
    return title


def get_calendar(db: Session, calendar_id: int) -> Calendar:
    with gateway(db, "load calendar"):
        calendar = db.query(Calendar).filter_by(id=calendar_id).first()
    if calendar is None:
        raise NotFound(f"Calendar {calendar_id} not found")
    return calendar


def get_owned_calendar(db: Session, ctx: RequestContext, calendar_id: int) -> Calendar:
    """Fetch a calendar and make sure the caller owns it."""
    calendar = get_calendar(db, calendar_id)
    if calendar.user_id != ctx.user_id:
        raise Forbidden("You do not own this calendar")
    return calendar


def get_public_calendar(db: Session, calendar_id: int) -> Calendar:
    """Fetch a calendar visitors are allowed to see."""
    calendar = get_calendar(db, calendar_id)
    if not calendar.is_public:
        raise Forbidden("This calendar is private")
    return calendar


def create_calendar(
    db: Session,
    ctx: RequestContext,
    *,
    title: str,
    description: Optional[str] = None,
    is_public: bool = True,
) -> Calendar:
    calendar = Calendar(
        user_id=ctx.user_id,
        title=_clean_title(title),
        description=(description or "").strip() or None,
        is_public=is_public,
    )
    with gateway(db, "create calendar"):
        db.add(calendar)
        db.commit()
        db.refresh(calendar)

    logger.info("User %s created calendar %s", ctx.user_id, calendar.id)
    return calendar


def list_calendars(db: Session, ctx: RequestContext) -> List[Calendar]:
    with gateway(db, "list calendars"):
        return (
            db.query(Calendar)
            .filter(Calendar.user_id == ctx.user_id)
            .order_by(Calendar.created_at.asc(), Calendar.id.asc())
            .all()
        )


def update_calendar(
    db: Session,
    ctx: RequestContext,
    calendar_id: int,
    *,
    title: Optional[str] = None,
    description=UNSET,
    is_public: Optional[bool] = None,
) -> Calendar:
    """
    Partially update a calendar.

    `title` and `is_public` are left alone when None. `description` is
    left alone only when not passed; None or a blank string clears it.
    """
    calendar = get_owned_calendar(db, ctx, calendar_id)

    if title is not None:
        calendar.title = _clean_title(title)
    if description is not UNSET:
        calendar.description = (description or "").strip() or None
    if is_public is not None:
        calendar.is_public = is_public

    with gateway(db, "update calendar"):
        db.commit()
        db.refresh(calendar)
    return calendar


def delete_calendar(db: Session, ctx: RequestContext, calendar_id: int) -> None:
    """Delete a calendar together with its rules and meetings."""
    calendar = get_owned_calendar(db, ctx, calendar_id)
    with gateway(db, "delete calendar"):
        db.delete(calendar)
        db.commit()
    logger.info("User %s deleted calendar %s", ctx.user_id, calendar_id)
