"""Tests for overtime policy resolution."""
from decimal import Decimal

import pytest

from workforce.config import DAILY_THRESHOLD, WEEKLY_THRESHOLD
from workforce.errors import InvalidHoursError, PolicyResolutionError
from workforce.overtime import OvertimePolicy, policy_for_employee, resolve_overtime
from workforce.totals import compute_totals

from conftest import WEEK_ENDING, week_hours

WEEKLY = OvertimePolicy(rule=WEEKLY_THRESHOLD)
DAILY = OvertimePolicy(rule=DAILY_THRESHOLD)


def _daily(**days):
    return compute_totals([week_hours(**days)], WEEK_ENDING).daily_totals


class TestWeeklyThreshold:
    def test_forty_two_hour_week(self):
        split = resolve_overtime(_daily(mon=8, tue=8, wed=8, thu=8, fri=10), WEEKLY)
        assert split.regular_hours == Decimal("40")
        assert split.overtime_hours == Decimal("2")

    @pytest.mark.parametrize("total", ["0", "12.5", "39.99", "40"])
    def test_no_overtime_at_or_under_forty(self, total):
        split = resolve_overtime(Decimal(total), WEEKLY)
        assert split.overtime_hours == Decimal("0")
        assert split.regular_hours == Decimal(total)

    @pytest.mark.parametrize("total", ["40.01", "45", "62.75"])
    def test_overtime_is_exactly_the_excess(self, total):
        split = resolve_overtime(Decimal(total), WEEKLY)
        assert split.overtime_hours == Decimal(total) - 40
        assert split.regular_hours == Decimal("40")

    def test_daily_spikes_do_not_count_under_weekly_rule(self):
        split = resolve_overtime(_daily(mon=12, tue=12), WEEKLY)
        assert split.overtime_hours == Decimal("0")


class TestDailyThreshold:
    def test_california_week(self):
        split = resolve_overtime(_daily(mon=10, tue=6), DAILY)
        assert split.overtime_hours == Decimal("2")
        assert split.regular_hours == Decimal("14")

    def test_days_at_or_under_eight_contribute_nothing(self):
        split = resolve_overtime(_daily(sun=8, mon=8, tue=8, wed=8, thu=8, fri=8, sat=8), DAILY)
        assert split.overtime_hours == Decimal("0")
        assert split.regular_hours == Decimal("56")

    def test_each_day_is_independent(self):
        split = resolve_overtime(_daily(mon="9.5", wed=11, fri="8.25"), DAILY)
        assert split.overtime_hours == Decimal("4.75")
        assert split.total_hours == Decimal("28.75")

    def test_week_total_alone_is_not_enough(self):
        with pytest.raises(PolicyResolutionError):
            resolve_overtime(Decimal("45"), DAILY)


class TestExempt:
    @pytest.mark.parametrize("rule", [WEEKLY_THRESHOLD, DAILY_THRESHOLD])
    def test_exempt_never_accrues_overtime(self, rule):
        policy = OvertimePolicy(is_exempt=True, rule=rule)
        split = resolve_overtime(_daily(mon=12, tue=12, wed=12, thu=12, fri=12), policy)
        assert split.regular_hours == Decimal("60")
        assert split.overtime_hours == Decimal("0")

    def test_exempt_week_total(self):
        split = resolve_overtime(60, OvertimePolicy(is_exempt=True))
        assert split.to_dict() == {"regularHours": 60, "overtimeHours": 0, "totalHours": 60}


class TestPolicyInputs:
    def test_bare_rule_key(self):
        assert resolve_overtime(_daily(mon=10), "daily-threshold").overtime_hours == Decimal("2")

    def test_unknown_rule_fails_loudly(self):
        with pytest.raises(PolicyResolutionError):
            resolve_overtime(Decimal("45"), "monthly-threshold")

    def test_wrong_number_of_days(self):
        with pytest.raises(PolicyResolutionError):
            resolve_overtime([8, 8, 8], WEEKLY)

    def test_negative_hours(self):
        with pytest.raises(InvalidHoursError):
            resolve_overtime(Decimal("-1"), WEEKLY)
        with pytest.raises(InvalidHoursError):
            resolve_overtime([0, -2, 0, 0, 0, 0, 0], DAILY)

    @pytest.mark.parametrize("hours", ["lots", Decimal("NaN"), "Infinity", [0, "x", 0, 0, 0, 0, 0]])
    def test_non_numeric_hours(self, hours):
        with pytest.raises(InvalidHoursError):
            resolve_overtime(hours, WEEKLY)

    def test_precision_is_preserved(self):
        split = resolve_overtime(Decimal("41.333"), WEEKLY)
        assert split.overtime_hours == Decimal("1.333")


class TestPolicyForEmployee:
    def test_california_uses_daily_rule(self):
        assert policy_for_employee({"state": "ca"}) == OvertimePolicy(is_exempt=False, rule=DAILY_THRESHOLD)

    def test_everyone_else_uses_weekly_rule(self):
        assert policy_for_employee({"state": "NY"}).rule == WEEKLY_THRESHOLD
        assert policy_for_employee({}).rule == WEEKLY_THRESHOLD

    @pytest.mark.parametrize("flag,expected", [(True, True), ("true", True), ("no", False), (None, False)])
    def test_exempt_flag(self, flag, expected):
        assert policy_for_employee({"isExempt": flag}).is_exempt is expected
