"""
Daily and weekly hour totals across timesheet rows.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Tuple

from .config import MAX_DAILY_HOURS
from .errors import InvalidHoursError, ValidationError
from .week import DAY_NAMES, DAYS_IN_WEEK, DateLike, normalize_week, to_hours


@dataclass(frozen=True)
class WeekTotals:
    daily_totals: Tuple[Decimal, ...]
    week_total: Decimal

    def to_dict(self) -> dict:
        return {"dailyTotals": list(self.daily_totals), "weekTotal": self.week_total}


def _row_hours(row: Any) -> Any:
    # TimesheetRow dicts carry their hours under "hours"; bare maps/sequences are accepted too
    if isinstance(row, Mapping) and "hours" in row and isinstance(row["hours"], (Mapping, list, tuple)):
        return row["hours"]
    return row


def compute_totals(rows: Iterable[Any], week_ending: Optional[DateLike] = None) -> WeekTotals:
    """
    Sum hours per day across rows, and across the whole week.

    Rows keyed by date need ``week_ending`` to place each date in the week;
    rows that are already 7-element sequences do not. A day whose hours add
    up to more than MAX_DAILY_HOURS across rows raises InvalidHoursError.
    """
    daily = [Decimal("0")] * DAYS_IN_WEEK

    for row in rows or []:
        hours = _row_hours(row)
        if isinstance(hours, (list, tuple)) and len(hours) == DAYS_IN_WEEK and week_ending is None:
            days = [to_hours(v) for v in hours]
        elif week_ending is None:
            raise ValidationError("weekEnding is required for date-keyed hours", fields={"weekEnding": "required"})
        else:
            days = normalize_week(hours, week_ending)

        for i, h in enumerate(days):
            daily[i] += h

    for i, total in enumerate(daily):
        if total > MAX_DAILY_HOURS:
            raise InvalidHoursError(
                f"Hours on {DAY_NAMES[i]} add up to {total} across projects, more than {MAX_DAILY_HOURS}"
            )

    return WeekTotals(daily_totals=tuple(daily), week_total=sum(daily, Decimal("0")))
