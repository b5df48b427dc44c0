import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from meetsync.models.availability import Availability
from meetsync.models.calendar import Calendar
from meetsync.services.errors import MalformedRule, NotFound
from meetsync.services.gateway import gateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecurringRule:
    """Open every week on `day_of_week` (0 = Sunday)."""

    id: Optional[int]
    day_of_week: int
    start_time: str
    end_time: str


@dataclass(frozen=True)
class DateSpecificRule:
    """Open only on `date`."""

    id: Optional[int]
    date: date
    start_time: str
    end_time: str


AvailabilityRule = Union[RecurringRule, DateSpecificRule]


def rule_from_row(row: Availability) -> AvailabilityRule:
    """
    Turn a persisted availability row into its tagged form.

    The row stores both shapes in nullable columns; exactly one of
    `day_of_week` / `date` must be filled, as selected by `recurring`.
    """
    if row.recurring:
        if row.day_of_week is None or row.date is not None:
            raise MalformedRule(row.id, "recurring rule needs day_of_week and no date")
        if not 0 <= row.day_of_week <= 6:
            raise MalformedRule(row.id, f"day_of_week out of range: {row.day_of_week}")
        return RecurringRule(
            id=row.id,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
        )

    if row.date is None or row.day_of_week is not None:
        raise MalformedRule(row.id, "date-specific rule needs date and no day_of_week")
    return DateSpecificRule(
        id=row.id,
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
    )


def load_rules(db: Session, calendar_id: int) -> List[AvailabilityRule]:
    """
    Fetch every availability rule of a calendar.

    Order carries no meaning for resolution; rows come back in insertion
    order so slot listings stay stable between calls.
    """
    with gateway(db, "load availability rules"):
        calendar = db.query(Calendar).filter_by(id=calendar_id).first()
        if calendar is None:
            raise NotFound(f"Calendar {calendar_id} not found")

        rows = (
            db.query(Availability)
            .filter(Availability.calendar_id == calendar_id)
            .order_by(Availability.id.asc())
            .all()
        )

    logger.debug("Calendar %s: loaded %d availability rules", calendar_id, len(rows))
    return [rule_from_row(row) for row in rows]
