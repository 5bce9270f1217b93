"""Weekday classification for occurrence resolution and adjustment.

Pure predicates mapping a calendar date to weekday categories. The holiday
oracle is only consulted by categories that involve holidays.
"""

from datetime import date, datetime
from typing import Callable, Dict, Union

from taskrecur.engine.holidays import HolidayOracle
from taskrecur.models.recurrence import AdjustmentTarget, DayOfWeek, WeekdayCategory

# Python weekday: Monday=0 ... Sunday=6
WEEKEND_DAYS = frozenset({5, 6})

_Predicate = Callable[[date, HolidayOracle], bool]


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def _is_day(dow: DayOfWeek) -> _Predicate:
    idx = dow.weekday_index
    return lambda day, oracle: day.weekday() == idx


_PREDICATES: Dict[WeekdayCategory, _Predicate] = {
    WeekdayCategory.MONDAY: _is_day(DayOfWeek.MONDAY),
    WeekdayCategory.TUESDAY: _is_day(DayOfWeek.TUESDAY),
    WeekdayCategory.WEDNESDAY: _is_day(DayOfWeek.WEDNESDAY),
    WeekdayCategory.THURSDAY: _is_day(DayOfWeek.THURSDAY),
    WeekdayCategory.FRIDAY: _is_day(DayOfWeek.FRIDAY),
    WeekdayCategory.SATURDAY: _is_day(DayOfWeek.SATURDAY),
    WeekdayCategory.SUNDAY: _is_day(DayOfWeek.SUNDAY),
    WeekdayCategory.WEEKDAY: lambda day, oracle: not is_weekend(day),
    WeekdayCategory.WEEKEND: lambda day, oracle: is_weekend(day),
    WeekdayCategory.HOLIDAY: lambda day, oracle: oracle.is_holiday(day),
    WeekdayCategory.NON_HOLIDAY: lambda day, oracle: not oracle.is_holiday(day),
    WeekdayCategory.WEEKEND_ONLY: lambda day, oracle: is_weekend(day),
    WeekdayCategory.NON_WEEKEND: lambda day, oracle: not is_weekend(day),
    WeekdayCategory.WEEKEND_HOLIDAY: lambda day, oracle: is_weekend(day) or oracle.is_holiday(day),
    WeekdayCategory.NON_WEEKEND_HOLIDAY: lambda day, oracle: (
        not is_weekend(day) and not oracle.is_holiday(day)
    ),
}

# Adjustment targets that name a category (specific_weekday is resolved separately).
TARGET_CATEGORIES: Dict[AdjustmentTarget, WeekdayCategory] = {
    AdjustmentTarget.WEEKDAY: WeekdayCategory.WEEKDAY,
    AdjustmentTarget.WEEKEND: WeekdayCategory.WEEKEND,
    AdjustmentTarget.HOLIDAY: WeekdayCategory.HOLIDAY,
    AdjustmentTarget.NON_HOLIDAY: WeekdayCategory.NON_HOLIDAY,
    AdjustmentTarget.WEEKEND_ONLY: WeekdayCategory.WEEKEND_ONLY,
    AdjustmentTarget.NON_WEEKEND: WeekdayCategory.NON_WEEKEND,
    AdjustmentTarget.WEEKEND_HOLIDAY: WeekdayCategory.WEEKEND_HOLIDAY,
    AdjustmentTarget.NON_WEEKEND_HOLIDAY: WeekdayCategory.NON_WEEKEND_HOLIDAY,
}


def classify(day: date, category: Union[WeekdayCategory, str], oracle: HolidayOracle) -> bool:
    """Return True if `day` belongs to `category`.

    Args:
        day: Calendar date to classify (a datetime is classified by its date)
        category: Weekday category (enum member or its string value)
        oracle: Holiday oracle; exceptions it raises propagate to the caller

    Returns:
        Whether the date matches the category
    """
    if isinstance(day, datetime):
        day = day.date()
    return _PREDICATES[WeekdayCategory(category)](day, oracle)
