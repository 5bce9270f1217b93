"""Recurrence models for taskrecur.

Canonical internal representation of a recurrence rule and its adjustments.
Rules are immutable values handed to the engine on every recompute.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RecurrenceUnit(str, Enum):
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    HALF_YEAR = "half_year"
    YEAR = "year"


class DayOfWeek(str, Enum):
    """Weekday names, Monday first (member order matches `date.weekday()`)."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def weekday_index(self) -> int:
        return _DAY_ORDER.index(self)

    @classmethod
    def from_index(cls, idx: int) -> "DayOfWeek":
        return _DAY_ORDER[idx]


_DAY_ORDER: List[DayOfWeek] = list(DayOfWeek)


class WeekOfPeriod(str, Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    FOURTH = "fourth"
    LAST = "last"


class DateRelation(str, Enum):
    BEFORE = "before"
    ON_OR_BEFORE = "on_or_before"
    ON_OR_AFTER = "on_or_after"
    AFTER = "after"


class AdjustmentDirection(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


class WeekdayCategory(str, Enum):
    """Categories a calendar date can be classified into."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    NON_HOLIDAY = "non_holiday"
    WEEKEND_ONLY = "weekend_only"
    NON_WEEKEND = "non_weekend"
    WEEKEND_HOLIDAY = "weekend_holiday"
    NON_WEEKEND_HOLIDAY = "non_weekend_holiday"


class AdjustmentTarget(str, Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    NON_HOLIDAY = "non_holiday"
    WEEKEND_ONLY = "weekend_only"
    NON_WEEKEND = "non_weekend"
    WEEKEND_HOLIDAY = "weekend_holiday"
    NON_WEEKEND_HOLIDAY = "non_weekend_holiday"
    SPECIFIC_WEEKDAY = "specific_weekday"


# Units whose occurrences are resolved inside a calendar period.
PERIOD_UNITS = frozenset(
    {
        RecurrenceUnit.WEEK,
        RecurrenceUnit.MONTH,
        RecurrenceUnit.QUARTER,
        RecurrenceUnit.HALF_YEAR,
        RecurrenceUnit.YEAR,
    }
)


class DateCondition(BaseModel):
    """Keep an occurrence only if it stands in `relation` to `reference_date`."""

    model_config = ConfigDict(frozen=True)

    id: str
    relation: DateRelation
    reference_date: datetime


class WeekdayCondition(BaseModel):
    """Shift an occurrence matching `if_weekday`.

    The shift goes in `then_direction` either to the nearest date satisfying
    `then_target`, or by a fixed number of days (`then_days`).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    if_weekday: WeekdayCategory
    then_direction: AdjustmentDirection
    then_target: Optional[AdjustmentTarget] = None
    then_weekday: Optional[DayOfWeek] = None
    then_days: Optional[int] = Field(None, ge=1, description="Fixed day offset (alternative to then_target)")

    @model_validator(mode="after")
    def _validate_target(self):
        if self.then_target is None and self.then_days is None:
            raise ValueError("weekday condition needs then_target or then_days")
        if self.then_target is not None and self.then_days is not None:
            raise ValueError("then_target and then_days are mutually exclusive")
        if self.then_target == AdjustmentTarget.SPECIFIC_WEEKDAY and self.then_weekday is None:
            raise ValueError("then_weekday is required when then_target is specific_weekday")
        return self


class RecurrenceAdjustment(BaseModel):
    model_config = ConfigDict(frozen=True)

    date_conditions: List[DateCondition] = Field(default_factory=list)
    weekday_conditions: List[WeekdayCondition] = Field(default_factory=list)


def _unique_sorted(values: List[int]) -> List[int]:
    return sorted(set(values))


def _check_days(values: List[int]) -> List[int]:
    for day in values:
        if not 1 <= day <= 31:
            raise ValueError(f"day {day} is outside 1..31")
    return _unique_sorted(values)


class NthWeekday(BaseModel):
    """The `week`-th (or last) `weekday` of a period or month."""

    model_config = ConfigDict(frozen=True)

    week: WeekOfPeriod
    weekday: DayOfWeek


class MonthPattern(BaseModel):
    """Days of one calendar month, for year rules."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, le=12)
    days: List[int] = Field(default_factory=list, description="Days of month (clamped to month end)")
    weekdays: List[NthWeekday] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def _validate_days(cls, v):
        return _check_days(v)

    @model_validator(mode="after")
    def _validate_selection(self):
        if not self.days and not self.weekdays:
            raise ValueError(f"month {self.month} selects no days")
        return self


class RecurrenceDetails(BaseModel):
    """Which days inside a period occurrences fall on.

    Day selections (`specific_date`, `days_of_period`) and nth weekday
    selections (`week_of_period` + `weekday_of_week`, `weeks_of_period`) are
    merged; every selected date of a period is an occurrence. With no
    selection the anchor's own day is mapped into each period.

    `offset_months` picks the months of a quarter / half-year (0 = first)
    that day selections apply to. `months` lists per-month patterns for year
    rules and replaces every other selection.
    """

    model_config = ConfigDict(frozen=True)

    specific_date: Optional[int] = Field(None, ge=1, le=31, description="Day-of-period ordinal")
    week_of_period: Optional[WeekOfPeriod] = None
    weekday_of_week: Optional[DayOfWeek] = None
    days_of_period: List[int] = Field(default_factory=list)
    weeks_of_period: List[NthWeekday] = Field(default_factory=list)
    offset_months: List[int] = Field(default_factory=list)
    months: List[MonthPattern] = Field(default_factory=list)

    @field_validator("days_of_period")
    @classmethod
    def _validate_days(cls, v):
        return _check_days(v)

    @field_validator("offset_months")
    @classmethod
    def _validate_offsets(cls, v):
        if any(offset < 0 for offset in v):
            raise ValueError("offset_months must not be negative")
        return _unique_sorted(v)

    @model_validator(mode="after")
    def _validate_selection(self):
        if (self.week_of_period is None) != (self.weekday_of_week is None):
            raise ValueError("week_of_period and weekday_of_week must be set together")
        if self.specific_date is not None and self.week_of_period is not None:
            raise ValueError("specific_date cannot be combined with week_of_period")
        if self.months and (self.day_selections() or self.nth_selections() or self.offset_months):
            raise ValueError("months cannot be combined with other day selections")
        return self

    def day_selections(self) -> List[int]:
        """Selected day ordinals, ascending."""
        days = set(self.days_of_period)
        if self.specific_date is not None:
            days.add(self.specific_date)
        return sorted(days)

    def nth_selections(self) -> List[NthWeekday]:
        """Selected nth weekdays, single-field form first."""
        out: List[NthWeekday] = []
        if self.week_of_period is not None:
            out.append(NthWeekday(week=self.week_of_period, weekday=self.weekday_of_week))
        for entry in self.weeks_of_period:
            if entry not in out:
                out.append(entry)
        return out


# Months in one period, for units that accept offset_months.
_OFFSET_LIMITS = {
    RecurrenceUnit.QUARTER: 3,
    RecurrenceUnit.HALF_YEAR: 6,
}


class RecurrenceRule(BaseModel):
    """Recurrence rule definition.

    Notes:
    - `days_of_week` only applies to week rules; empty means the anchor's weekday.
      It cannot be combined with `details`.
    - `details` only applies to week, month, quarter, half_year and year rules.
    - A rule with neither `end_date` nor `max_occurrences` is open-ended.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    unit: RecurrenceUnit
    interval: int = Field(1, ge=1, description="Every N units")
    days_of_week: Optional[List[DayOfWeek]] = Field(
        None, description="For weekly recurrence: weekdays on which it occurs"
    )
    details: Optional[RecurrenceDetails] = None
    adjustment: Optional[RecurrenceAdjustment] = None
    end_date: Optional[datetime] = None
    max_occurrences: Optional[int] = Field(None, ge=1)

    @field_validator("days_of_week")
    @classmethod
    def _validate_days_of_week(cls, v):
        if v is None:
            return None
        # Deduplicate but preserve order
        seen = set()
        out: List[DayOfWeek] = []
        for day in v:
            if day not in seen:
                seen.add(day)
                out.append(day)
        return out

    @model_validator(mode="after")
    def _validate_details_unit(self):
        details = self.details
        if details is None:
            return self
        unit = self.unit.value
        if self.unit not in PERIOD_UNITS:
            raise ValueError(f"details are not supported for unit '{unit}'")
        if self.days_of_week:
            raise ValueError("days_of_week cannot be combined with details")
        if details.offset_months:
            limit = _OFFSET_LIMITS.get(self.unit)
            if limit is None:
                raise ValueError(f"offset_months are not supported for unit '{unit}'")
            if details.offset_months[-1] >= limit:
                raise ValueError(f"offset_months must be below {limit} for unit '{unit}'")
        if details.months and self.unit != RecurrenceUnit.YEAR:
            raise ValueError(f"months are not supported for unit '{unit}'")
        return self
