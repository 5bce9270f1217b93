"""Tests for period alignment and in-period date resolution."""

import pytest
from datetime import date

from taskrecur.engine.periods import period_start, resolve, resolve_all, shift_period, weekdays_in_period
from taskrecur.models.recurrence import DayOfWeek, RecurrenceDetails, RecurrenceUnit, WeekOfPeriod


def nth(week: str, weekday: str) -> RecurrenceDetails:
    return RecurrenceDetails(week_of_period=week, weekday_of_week=weekday)


class TestPeriodAlignment:
    """Test calendar-aligned period starts."""

    @pytest.mark.parametrize(
        "unit,day,expected",
        [
            (RecurrenceUnit.WEEK, date(2025, 1, 18), date(2025, 1, 13)),
            (RecurrenceUnit.MONTH, date(2025, 2, 17), date(2025, 2, 1)),
            (RecurrenceUnit.QUARTER, date(2025, 5, 17), date(2025, 4, 1)),
            (RecurrenceUnit.HALF_YEAR, date(2025, 8, 1), date(2025, 7, 1)),
            (RecurrenceUnit.YEAR, date(2025, 8, 1), date(2025, 1, 1)),
        ],
    )
    def test_period_start(self, unit, day, expected):
        assert period_start(day, unit) == expected

    def test_shift_period(self):
        assert shift_period(date(2025, 1, 13), RecurrenceUnit.WEEK, 2) == date(2025, 1, 27)
        assert shift_period(date(2025, 1, 1), RecurrenceUnit.QUARTER, 2) == date(2025, 7, 1)
        assert shift_period(date(2025, 1, 1), RecurrenceUnit.HALF_YEAR, 1) == date(2025, 7, 1)
        assert shift_period(date(2025, 1, 1), RecurrenceUnit.YEAR, 1) == date(2026, 1, 1)

    def test_non_period_unit_rejected(self):
        with pytest.raises(ValueError):
            period_start(date(2025, 1, 1), RecurrenceUnit.DAY)

    def test_weekdays_in_period(self):
        mondays = weekdays_in_period(date(2025, 2, 1), RecurrenceUnit.MONTH, DayOfWeek.MONDAY.weekday_index)
        assert mondays == [date(2025, 2, 3), date(2025, 2, 10), date(2025, 2, 17), date(2025, 2, 24)]


class TestResolve:
    """Test resolution of a date inside one period."""

    def test_second_monday_of_month(self):
        assert resolve(date(2025, 2, 20), RecurrenceUnit.MONTH, nth("second", "monday")) == date(2025, 2, 10)

    def test_last_friday_of_month(self):
        assert resolve(date(2025, 2, 1), RecurrenceUnit.MONTH, nth("last", "friday")) == date(2025, 2, 28)

    def test_first_monday_of_quarter(self):
        assert resolve(date(2025, 5, 5), RecurrenceUnit.QUARTER, nth("first", "monday")) == date(2025, 4, 7)

    def test_last_monday_of_quarter(self):
        assert resolve(date(2025, 4, 5), RecurrenceUnit.QUARTER, nth("last", "monday")) == date(2025, 6, 30)

    def test_last_sunday_of_year(self):
        assert resolve(date(2025, 3, 1), RecurrenceUnit.YEAR, nth("last", "sunday")) == date(2025, 12, 28)

    def test_specific_date_clamped_to_month_end(self):
        details = RecurrenceDetails(specific_date=31)
        assert resolve(date(2025, 2, 1), RecurrenceUnit.MONTH, details) == date(2025, 2, 28)
        assert resolve(date(2024, 2, 1), RecurrenceUnit.MONTH, details) == date(2024, 2, 29)
        assert resolve(date(2025, 3, 1), RecurrenceUnit.MONTH, details) == date(2025, 3, 31)

    def test_specific_date_follows_anchor_month_offset(self):
        """Quarter rules place the day in the month at the anchor's offset."""
        details = RecurrenceDetails(specific_date=31)
        anchor = date(2025, 2, 15)
        assert resolve(date(2025, 1, 1), RecurrenceUnit.QUARTER, details, anchor) == date(2025, 2, 28)
        assert resolve(date(2025, 4, 1), RecurrenceUnit.QUARTER, details, anchor) == date(2025, 5, 31)

    def test_same_day_of_period_without_details(self):
        anchor = date(2025, 1, 31)
        assert resolve(date(2025, 4, 1), RecurrenceUnit.MONTH, None, anchor) == date(2025, 4, 30)
        assert resolve(date(2025, 7, 1), RecurrenceUnit.QUARTER, None, anchor) == date(2025, 7, 31)
        assert resolve(date(2026, 6, 1), RecurrenceUnit.YEAR, None, anchor) == date(2026, 1, 31)

    def test_week_specific_date_is_weekday_ordinal(self):
        assert resolve(date(2025, 1, 13), RecurrenceUnit.WEEK, RecurrenceDetails(specific_date=3)) == date(2025, 1, 15)
        assert resolve(date(2025, 1, 13), RecurrenceUnit.WEEK, RecurrenceDetails(specific_date=9)) == date(2025, 1, 19)

    def test_week_without_details_uses_anchor_weekday(self):
        assert resolve(date(2025, 1, 13), RecurrenceUnit.WEEK, None, date(2025, 1, 1)) == date(2025, 1, 15)

    def test_unresolvable_period_returns_none(self):
        """A week has only one Monday."""
        assert resolve(date(2025, 1, 13), RecurrenceUnit.WEEK, nth("second", "monday")) is None

    def test_first_and_last_of_week(self):
        assert resolve(date(2025, 1, 15), RecurrenceUnit.WEEK, nth("first", "friday")) == date(2025, 1, 17)
        assert resolve(date(2025, 1, 15), RecurrenceUnit.WEEK, nth("last", "friday")) == date(2025, 1, 17)

    def test_resolve_is_deterministic(self):
        details = nth(WeekOfPeriod.THIRD, DayOfWeek.THURSDAY)
        first = resolve(date(2025, 9, 9), RecurrenceUnit.MONTH, details)
        assert first == resolve(date(2025, 9, 9), RecurrenceUnit.MONTH, details)


class TestResolveAll:
    """Test periods with several selected dates."""

    def test_several_days_of_month(self):
        details = RecurrenceDetails(days_of_period=[1, 15, 31])
        assert resolve_all(date(2025, 2, 10), RecurrenceUnit.MONTH, details) == [
            date(2025, 2, 1),
            date(2025, 2, 15),
            date(2025, 2, 28),
        ]

    def test_clamped_days_collapse(self):
        details = RecurrenceDetails(days_of_period=[30, 31])
        assert resolve_all(date(2025, 2, 1), RecurrenceUnit.MONTH, details) == [date(2025, 2, 28)]

    def test_several_nth_weekdays(self):
        details = RecurrenceDetails(
            weeks_of_period=[{"week": "third", "weekday": "friday"}, {"week": "first", "weekday": "monday"}]
        )
        assert resolve_all(date(2025, 2, 1), RecurrenceUnit.MONTH, details) == [date(2025, 2, 3), date(2025, 2, 21)]

    def test_days_and_nth_weekdays_merge(self):
        details = RecurrenceDetails(specific_date=10, weeks_of_period=[{"week": "last", "weekday": "friday"}])
        assert resolve_all(date(2025, 3, 1), RecurrenceUnit.MONTH, details) == [date(2025, 3, 10), date(2025, 3, 28)]

    def test_offset_months_of_quarter(self):
        details = RecurrenceDetails(offset_months=[0, 2], days_of_period=[10])
        assert resolve_all(date(2025, 5, 20), RecurrenceUnit.QUARTER, details) == [
            date(2025, 4, 10),
            date(2025, 6, 10),
        ]

    def test_offset_months_without_days_use_anchor_day(self):
        details = RecurrenceDetails(offset_months=[5])
        assert resolve_all(date(2025, 1, 1), RecurrenceUnit.HALF_YEAR, details, date(2025, 1, 31)) == [
            date(2025, 6, 30)
        ]

    def test_month_patterns_of_year(self):
        details = RecurrenceDetails(
            months=[
                {"month": 11, "weekdays": [{"week": "fourth", "weekday": "thursday"}]},
                {"month": 2, "days": [31]},
            ]
        )
        assert resolve_all(date(2025, 6, 1), RecurrenceUnit.YEAR, details) == [
            date(2025, 2, 28),
            date(2025, 11, 27),
        ]

    def test_week_day_ordinals(self):
        details = RecurrenceDetails(days_of_period=[5, 1])
        assert resolve_all(date(2025, 1, 15), RecurrenceUnit.WEEK, details) == [date(2025, 1, 13), date(2025, 1, 17)]

    def test_resolve_returns_earliest(self):
        details = RecurrenceDetails(days_of_period=[20, 5])
        assert resolve(date(2025, 2, 1), RecurrenceUnit.MONTH, details) == date(2025, 2, 5)
