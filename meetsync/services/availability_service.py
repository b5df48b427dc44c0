import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from meetsync.models.availability import Availability
from meetsync.services.availability_resolver import validate_rule
from meetsync.services.calendar_service import get_owned_calendar
from meetsync.services.errors import MalformedRule, NotFound, ValidationError
from meetsync.services.gateway import gateway
from meetsync.services.identity import RequestContext
from meetsync.services.rule_store import rule_from_row

logger = logging.getLogger(__name__)


def _check_row(row: Availability) -> None:
    """
    Make sure a row about to be written is a well-formed rule.
    Shape or clock problems in caller input are reported as ValidationError.
    """
    try:
        validate_rule(rule_from_row(row))
    except MalformedRule as e:
        raise ValidationError("availability", e.message) from e


def list_availabilities(db: Session, ctx: RequestContext, calendar_id: int) -> List[Availability]:
    get_owned_calendar(db, ctx, calendar_id)
    with gateway(db, "list availabilities"):
        return (
            db.query(Availability)
            .filter(Availability.calendar_id == calendar_id)
            .order_by(Availability.id.asc())
            .all()
        )


def create_availability(
    db: Session,
    ctx: RequestContext,
    calendar_id: int,
    *,
    start_time: str,
    end_time: str,
    day_of_week: Optional[int] = None,
    on_date: Optional[date] = None,
) -> Availability:
    """
    Add one availability rule to a calendar.

    Exactly one of `day_of_week` (weekly rule) or `on_date` (one-off rule)
    must be given.
    """
    get_owned_calendar(db, ctx, calendar_id)

    if (day_of_week is None) == (on_date is None):
        raise ValidationError("availability", "give exactly one of day_of_week or date")

    row = Availability(
        calendar_id=calendar_id,
        recurring=day_of_week is not None,
        day_of_week=day_of_week,
        date=on_date,
        start_time=start_time,
        end_time=end_time,
    )
    _check_row(row)

    with gateway(db, "create availability"):
        db.add(row)
        db.commit()
        db.refresh(row)

    logger.info("Calendar %s: added availability %s", calendar_id, row.id)
    return row


def _get_rule(db: Session, calendar_id: int, availability_id: int) -> Availability:
    with gateway(db, "load availability"):
        row = (
            db.query(Availability)
            .filter_by(id=availability_id, calendar_id=calendar_id)
            .first()
        )
    if row is None:
        raise NotFound(f"Availability {availability_id} not found")
    return row


def update_availability(
    db: Session,
    ctx: RequestContext,
    calendar_id: int,
    availability_id: int,
    *,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    day_of_week: Optional[int] = None,
    on_date: Optional[date] = None,
) -> Availability:
    """
    Partially update a rule.

    Setting `day_of_week` turns the rule into a weekly one, setting
    `on_date` into a one-off; setting both is rejected.
    """
    get_owned_calendar(db, ctx, calendar_id)
    row = _get_rule(db, calendar_id, availability_id)

    if day_of_week is not None and on_date is not None:
        raise ValidationError("availability", "give at most one of day_of_week or date")

    if day_of_week is not None:
        row.recurring = True
        row.day_of_week = day_of_week
        row.date = None
    if on_date is not None:
        row.recurring = False
        row.date = on_date
        row.day_of_week = None
    if start_time is not None:
        row.start_time = start_time
    if end_time is not None:
        row.end_time = end_time

    try:
        _check_row(row)
    except ValidationError:
        db.rollback()
        raise

    with gateway(db, "update availability"):
        db.commit()
        db.refresh(row)
    return row


def delete_availability(
    db: Session,
    ctx: RequestContext,
    calendar_id: int,
    availability_id: int,
) -> None:
    get_owned_calendar(db, ctx, calendar_id)
    row = _get_rule(db, calendar_id, availability_id)

    with gateway(db, "delete availability"):
        db.delete(row)
        db.commit()

    logger.info("Calendar %s: removed availability %s", calendar_id, availability_id)
