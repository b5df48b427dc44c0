from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Union

from meetsync.services.errors import MalformedRule
from meetsync.services.rule_store import AvailabilityRule, DateSpecificRule, RecurringRule

DEFAULT_HORIZON_DAYS = 30
DEFAULT_MAX_DATES = 7


@dataclass(frozen=True)
class Slot:
    start_time: str
    end_time: str


def calendar_weekday(day: date) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def as_calendar_date(value: Union[date, datetime]) -> date:
    """
    Reduce a date or datetime to its calendar-date component.

    A datetime keeps the date it already carries (its own offset, if any);
    it is never shifted to UTC first, so "2024-12-25T23:30+05:00" stays the
    25th.
    """
    if isinstance(value, datetime):
        return value.date()
    return value


def _check_clock(rule: AvailabilityRule, value: str) -> None:
    # strptime accepts "9:5"; rules must be zero-padded "HH:MM"
    if not isinstance(value, str) or len(value) != 5:
        raise MalformedRule(rule.id, f"invalid time {value!r}, expected HH:MM")
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError as e:
        raise MalformedRule(rule.id, f"invalid time {value!r}, expected HH:MM") from e


def validate_rule(rule: AvailabilityRule) -> None:
    """
    Raise MalformedRule unless times parse and start_time < end_time.

    With zero-padded "HH:MM" strings lexical order is clock order.
    """
    _check_clock(rule, rule.start_time)
    _check_clock(rule, rule.end_time)
    if rule.start_time >= rule.end_time:
        raise MalformedRule(
            rule.id,
            f"start_time {rule.start_time} must be before end_time {rule.end_time}",
        )


def rule_matches(rule: AvailabilityRule, day: date) -> bool:
    if isinstance(rule, RecurringRule):
        return rule.day_of_week == calendar_weekday(day)
    if isinstance(rule, DateSpecificRule):
        # Compare normalized YYYY-MM-DD values
        return as_calendar_date(rule.date).isoformat() == day.isoformat()
    return False


def bookable_dates(
    rules: Sequence[AvailabilityRule],
    reference_date: Union[date, datetime],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    max_dates: int = DEFAULT_MAX_DATES,
) -> List[date]:
    """
    Dates a visitor can pick, ascending.

    Scans day by day over [reference_date, reference_date + horizon_days)
    and stops after `max_dates` hits, so sparse availability near the end
    of the horizon may yield fewer dates.
    """
    for rule in rules:
        validate_rule(rule)

    start = as_calendar_date(reference_date)
    found: List[date] = []

    for offset in range(max(horizon_days, 0)):
        if len(found) >= max_dates:
            break
        day = start + timedelta(days=offset)
        if any(rule_matches(rule, day) for rule in rules):
            found.append(day)

    return found


def slots_for_date(
    rules: Sequence[AvailabilityRule],
    day: Union[date, datetime],
) -> List[Slot]:
    """
    One slot per rule matching `day`, in the order the rules were given.

    Overlapping or identical ranges are not merged.
    """
    for rule in rules:
        validate_rule(rule)

    target = as_calendar_date(day)
    return [
        Slot(start_time=rule.start_time, end_time=rule.end_time)
        for rule in rules
        if rule_matches(rule, target)
    ]


def unique_slots(slots: Iterable[Slot]) -> List[Slot]:
    """De-duplicated view of `slots`; first occurrence wins."""
    seen = set()
    result: List[Slot] = []
    for slot in slots:
        if slot in seen:
            continue
        seen.add(slot)
        result.append(slot)
    return result
