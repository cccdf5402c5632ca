"""
Entry normalization for a single timesheet week.

A week runs Sunday..Saturday and is identified by its Saturday
("week ending"). Every normalized week is a 7-tuple of Decimal hours where
index 0 is Sunday and index 6 is the week ending date.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Tuple, Union

from .config import MAX_DAILY_HOURS
from .errors import InvalidEntryDateError, InvalidHoursError, ValidationError

DAYS_IN_WEEK = 7
DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

DateLike = Union[date, datetime, str]
DayHours = Tuple[Decimal, Decimal, Decimal, Decimal, Decimal, Decimal, Decimal]


def parse_date(value: DateLike) -> date:
    """Accept a date, datetime or ISO string ("2024-06-15" or "2024-06-15T09:00:00")."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip().split("T")[0]
        try:
            return date.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}", fields={"date": "must be YYYY-MM-DD"})
    raise ValidationError(f"Invalid date: {value!r}", fields={"date": "must be YYYY-MM-DD"})


def to_hours(value: Any) -> Decimal:
    """Convert a raw hours value to Decimal and check it lies in [0, 24]."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise InvalidHoursError(f"Hours must be a number, got {value!r}")
    try:
        hours = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidHoursError(f"Hours must be a number, got {value!r}")
    if not hours.is_finite():
        raise InvalidHoursError(f"Hours must be a number, got {value!r}")
    if hours < 0 or hours > MAX_DAILY_HOURS:
        raise InvalidHoursError(f"Hours must be between 0 and {MAX_DAILY_HOURS}, got {hours}")
    return hours


def week_ending_for(day: DateLike) -> date:
    """Return the Saturday that closes the week containing ``day``."""
    d = parse_date(day)
    # date.weekday(): Monday=0 .. Saturday=5, Sunday=6
    return d + timedelta(days=(5 - d.weekday()) % 7)


def week_dates(week_ending: DateLike) -> List[date]:
    """The seven dates of the week, oldest first, ending on ``week_ending``."""
    end = parse_date(week_ending)
    start = end - timedelta(days=DAYS_IN_WEEK - 1)
    return [start + timedelta(days=i) for i in range(DAYS_IN_WEEK)]


def is_week_ending(day: DateLike) -> bool:
    return parse_date(day).weekday() == 5


def _is_normalized_sequence(entries: Any) -> bool:
    if isinstance(entries, (str, bytes, Mapping)) or not isinstance(entries, (list, tuple)):
        return False
    if len(entries) != DAYS_IN_WEEK:
        return False
    return all(not isinstance(v, (list, tuple, Mapping)) for v in entries)


def normalize_week(entries: Union[Mapping[DateLike, Any], Iterable[Tuple[DateLike, Any]], List[Any]],
                   week_ending: DateLike) -> DayHours:
    """
    Collapse per-day hour inputs into a 7-tuple ending on ``week_ending``.

    Args:
        entries: mapping of date -> hours, iterable of (date, hours) pairs,
            or an already-normalized 7-element sequence.
        week_ending: last day of the window (normally a Saturday).

    Returns:
        Tuple of 7 Decimals, missing days set to 0.

    Raises:
        InvalidHoursError: a value (or a day's summed value) is outside [0, 24].
        InvalidEntryDateError: a date falls outside the window.
    """
    dates = week_dates(week_ending)

    if _is_normalized_sequence(entries):
        return tuple(to_hours(v) for v in entries)

    pairs = entries.items() if isinstance(entries, Mapping) else entries
    index = {d: i for i, d in enumerate(dates)}
    days = [Decimal("0")] * DAYS_IN_WEEK

    for raw_date, raw_hours in pairs or []:
        d = parse_date(raw_date)
        if d not in index:
            raise InvalidEntryDateError(
                f"Date {d.isoformat()} is outside the week {dates[0].isoformat()}..{dates[-1].isoformat()}",
                fields={"date": d.isoformat()},
            )
        slot = index[d]
        day_total = days[slot] + to_hours(raw_hours)
        if day_total > MAX_DAILY_HOURS:
            raise InvalidHoursError(f"More than {MAX_DAILY_HOURS} hours recorded on {d.isoformat()}")
        days[slot] = day_total

    return tuple(days)


def as_date_map(day_hours: DayHours, week_ending: DateLike) -> dict:
    """Inverse of normalize_week for responses: {"YYYY-MM-DD": hours}."""
    return {d.isoformat(): h for d, h in zip(week_dates(week_ending), day_hours)}
