"""Data models for taskrecur."""

from taskrecur.models.recurrence import (
    AdjustmentDirection,
    AdjustmentTarget,
    DateCondition,
    DateRelation,
    DayOfWeek,
    MonthPattern,
    NthWeekday,
    RecurrenceAdjustment,
    RecurrenceDetails,
    RecurrenceRule,
    RecurrenceUnit,
    WeekdayCategory,
    WeekdayCondition,
    WeekOfPeriod,
)

__all__ = [
    "AdjustmentDirection",
    "AdjustmentTarget",
    "DateCondition",
    "DateRelation",
    "DayOfWeek",
    "MonthPattern",
    "NthWeekday",
    "RecurrenceAdjustment",
    "RecurrenceDetails",
    "RecurrenceRule",
    "RecurrenceUnit",
    "WeekdayCategory",
    "WeekdayCondition",
    "WeekOfPeriod",
]
