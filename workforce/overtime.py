"""
Overtime policy resolution.

Three outcomes:
- exempt employees never accrue overtime
- daily-threshold (California style): hours over 8 on any single day
- weekly-threshold (default): hours over 40 in the week
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence, Union

from .config import (
    DAILY_OVERTIME_THRESHOLD,
    DAILY_THRESHOLD,
    DEFAULT_OVERTIME_RULE,
    JURISDICTION_POLICIES,
    OVERTIME_PAY_MULTIPLIER,
    WEEKLY_OVERTIME_THRESHOLD,
    WEEKLY_THRESHOLD,
)
from .errors import InvalidHoursError, PolicyResolutionError, ValidationError
from .week import DAYS_IN_WEEK

RULES = (DAILY_THRESHOLD, WEEKLY_THRESHOLD)
ZERO = Decimal("0")


@dataclass(frozen=True)
class OvertimePolicy:
    is_exempt: bool = False
    rule: str = DEFAULT_OVERTIME_RULE


@dataclass(frozen=True)
class OvertimeSplit:
    regular_hours: Decimal
    overtime_hours: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours

    def to_dict(self) -> dict:
        return {
            "regularHours": self.regular_hours,
            "overtimeHours": self.overtime_hours,
            "totalHours": self.total_hours,
        }


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def policy_for_employee(employee: Mapping[str, Any]) -> OvertimePolicy:
    """Build the overtime policy from an employee record's isExempt/state fields."""
    employee = employee or {}
    state = str(employee.get("state") or "").strip().upper()
    rule = JURISDICTION_POLICIES.get(state, DEFAULT_OVERTIME_RULE)
    return OvertimePolicy(is_exempt=_as_bool(employee.get("isExempt")), rule=rule)


def _decimal(value: Any) -> Decimal:
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value or 0))
    except (InvalidOperation, ValueError):
        raise InvalidHoursError(f"Hours must be a number, got {value!r}")
    if not d.is_finite():
        raise InvalidHoursError(f"Hours must be a number, got {value!r}")
    if d < 0:
        raise InvalidHoursError(f"Hours must not be negative, got {d}")
    return d


def resolve_overtime(hours: Union[Sequence[Any], Any], policy: Union[OvertimePolicy, str]) -> OvertimeSplit:
    """
    Split hours into regular and overtime.

    ``hours`` is either the 7 daily totals of a week or the single week total.
    ``policy`` is an OvertimePolicy or a bare rule key. Values are not rounded.
    """
    if isinstance(policy, str):
        policy = OvertimePolicy(rule=policy)
    if policy.rule not in RULES:
        raise PolicyResolutionError(f"Unknown overtime rule: {policy.rule!r}")

    is_daily = isinstance(hours, (list, tuple))
    if is_daily:
        if len(hours) != DAYS_IN_WEEK:
            raise PolicyResolutionError(f"Expected {DAYS_IN_WEEK} daily totals, got {len(hours)}")
        daily = [_decimal(h) for h in hours]
        total = sum(daily, ZERO)
    else:
        daily = None
        total = _decimal(hours)

    if policy.is_exempt:
        return OvertimeSplit(regular_hours=total, overtime_hours=ZERO)

    if policy.rule == DAILY_THRESHOLD:
        if daily is None:
            raise PolicyResolutionError("daily-threshold overtime needs daily totals, not a week total")
        overtime = sum((max(ZERO, day - DAILY_OVERTIME_THRESHOLD) for day in daily), ZERO)
    else:
        overtime = max(ZERO, total - WEEKLY_OVERTIME_THRESHOLD)

    return OvertimeSplit(regular_hours=total - overtime, overtime_hours=overtime)


@dataclass(frozen=True)
class PaySplit:
    hourly_rate: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal

    @property
    def total_pay(self) -> Decimal:
        return self.regular_pay + self.overtime_pay

    def to_dict(self) -> dict:
        return {
            "hourlyRate": self.hourly_rate,
            "regularPay": self.regular_pay,
            "overtimePay": self.overtime_pay,
            "totalPay": self.total_pay,
        }


def price_split(split: OvertimeSplit, hourly_rate: Any) -> PaySplit:
    """Regular hours at the hourly rate, overtime at OVERTIME_PAY_MULTIPLIER times it. Not rounded."""
    try:
        rate = hourly_rate if isinstance(hourly_rate, Decimal) else Decimal(str(hourly_rate or 0))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"hourlyRate must be a number, got {hourly_rate!r}",
                              fields={"hourlyRate": "must be a number"})
    if not rate.is_finite() or rate < 0:
        raise ValidationError(f"hourlyRate must be a number >= 0, got {hourly_rate!r}",
                              fields={"hourlyRate": "must be a number >= 0"})
    return PaySplit(
        hourly_rate=rate,
        regular_pay=split.regular_hours * rate,
        overtime_pay=split.overtime_hours * rate * OVERTIME_PAY_MULTIPLIER,
    )
