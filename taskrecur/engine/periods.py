"""Period resolution for week, month, quarter, half-year and year rules.

Periods are calendar-aligned: ISO weeks (Monday first), calendar months,
quarters starting in Jan/Apr/Jul/Oct, half-years starting in Jan/Jul and
calendar years.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from taskrecur.models.constants import MONTHS_PER_HALF_YEAR, MONTHS_PER_QUARTER, MONTHS_PER_YEAR
from taskrecur.models.recurrence import MonthPattern, NthWeekday, RecurrenceDetails, RecurrenceUnit, WeekOfPeriod

logger = logging.getLogger(__name__)


_MONTHS_PER_PERIOD: Dict[RecurrenceUnit, int] = {
    RecurrenceUnit.MONTH: 1,
    RecurrenceUnit.QUARTER: MONTHS_PER_QUARTER,
    RecurrenceUnit.HALF_YEAR: MONTHS_PER_HALF_YEAR,
    RecurrenceUnit.YEAR: MONTHS_PER_YEAR,
}

_NTH: Dict[WeekOfPeriod, int] = {
    WeekOfPeriod.FIRST: 0,
    WeekOfPeriod.SECOND: 1,
    WeekOfPeriod.THIRD: 2,
    WeekOfPeriod.FOURTH: 3,
    WeekOfPeriod.LAST: -1,
}


def _check_unit(unit: RecurrenceUnit) -> None:
    if unit != RecurrenceUnit.WEEK and unit not in _MONTHS_PER_PERIOD:
        raise ValueError(f"'{unit.value}' is not a period unit")


def period_start(day: date, unit: RecurrenceUnit) -> date:
    """First day of the period of `unit` containing `day`."""
    _check_unit(unit)
    if unit == RecurrenceUnit.WEEK:
        return day - timedelta(days=day.weekday())
    months = _MONTHS_PER_PERIOD[unit]
    first_month = ((day.month - 1) // months) * months + 1
    return date(day.year, first_month, 1)


def shift_period(start: date, unit: RecurrenceUnit, periods: int) -> date:
    """Move a period start forward by a number of periods."""
    _check_unit(unit)
    if unit == RecurrenceUnit.WEEK:
        return start + timedelta(weeks=periods)
    return start + relativedelta(months=periods * _MONTHS_PER_PERIOD[unit])


def _clamped_day(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def _month_offset(anchor: date, unit: RecurrenceUnit) -> int:
    # Position of the anchor's month inside its own period (0 for month rules).
    return (anchor.month - 1) % _MONTHS_PER_PERIOD[unit]


def weekdays_in_period(start: date, unit: RecurrenceUnit, weekday: int) -> List[date]:
    """All dates in the period beginning at `start` that fall on `weekday` (Monday=0)."""
    end = shift_period(start, unit, 1)
    current = start + timedelta(days=(weekday - start.weekday()) % 7)
    out: List[date] = []
    while current < end:
        out.append(current)
        current = current + timedelta(days=7)
    return out


def _nth_weekday(start: date, unit: RecurrenceUnit, selection: NthWeekday) -> Optional[date]:
    matches = weekdays_in_period(start, unit, selection.weekday.weekday_index)
    idx = _NTH[selection.week]
    if idx >= len(matches):
        logger.debug(
            f"No {selection.week.value} {selection.weekday.value} "
            f"in {unit.value} starting {start.isoformat()}"
        )
        return None
    return matches[idx]


def _month_pattern_dates(year_start: date, pattern: MonthPattern) -> List[date]:
    month_start = year_start + relativedelta(months=pattern.month - 1)
    out = [_clamped_day(month_start.year, month_start.month, day) for day in pattern.days]
    for selection in pattern.weekdays:
        found = _nth_weekday(month_start, RecurrenceUnit.MONTH, selection)
        if found is not None:
            out.append(found)
    return out


def resolve_all(
    period_anchor: date,
    unit: RecurrenceUnit,
    details: Optional[RecurrenceDetails],
    anchor: Optional[date] = None,
) -> List[date]:
    """Resolve every occurrence date inside one period.

    Args:
        period_anchor: Any date inside the target period
        unit: Period unit (week, month, quarter, half_year, year)
        details: Day selection; None maps the anchor's day into the period
        anchor: Rule anchor used for "same day of period" placement
            (defaults to period_anchor)

    Returns:
        Distinct dates in ascending order; empty if the period has none
        (e.g. the second Monday of a week)
    """
    start = period_start(period_anchor, unit)
    anchor = anchor or period_anchor

    if details is not None and details.months:
        found = set()
        for pattern in details.months:
            found.update(_month_pattern_dates(start, pattern))
        return sorted(found)

    days = details.day_selections() if details is not None else []
    nths = details.nth_selections() if details is not None else []

    found = set()
    for selection in nths:
        match = _nth_weekday(start, unit, selection)
        if match is not None:
            found.add(match)

    if not days and not nths:
        if unit == RecurrenceUnit.WEEK:
            days = [anchor.weekday() + 1]
        else:
            days = [anchor.day]

    if unit == RecurrenceUnit.WEEK:
        # Day ordinals of a week are ISO weekdays (1 = Monday), clamped to Sunday.
        found.update(start + timedelta(days=min(day, 7) - 1) for day in days)
        return sorted(found)

    if details is not None and details.offset_months:
        offsets = details.offset_months
    else:
        offsets = [_month_offset(anchor, unit)]
    for offset in offsets:
        month_start = start + relativedelta(months=offset)
        # Clamp to the last valid day (31st -> 30th/28th/29th)
        found.update(_clamped_day(month_start.year, month_start.month, day) for day in days)
    return sorted(found)


def resolve(
    period_anchor: date,
    unit: RecurrenceUnit,
    details: Optional[RecurrenceDetails],
    anchor: Optional[date] = None,
) -> Optional[date]:
    """Resolve the (first) occurrence date inside one period, or None if there is none."""
    dates = resolve_all(period_anchor, unit, details, anchor)
    return dates[0] if dates else None
