"""Export RecurrenceRule to iCalendar RRULE strings (export-only).

Only the base pattern is exported; adjustments (date and weekday conditions)
have no RRULE equivalent.
"""

from __future__ import annotations

from datetime import date, timezone
from typing import List

from taskrecur.models.constants import MONTHS_PER_HALF_YEAR, MONTHS_PER_QUARTER
from taskrecur.models.recurrence import DayOfWeek, RecurrenceRule, RecurrenceUnit, WeekOfPeriod


_WD_MAP: dict[DayOfWeek, str] = {
    DayOfWeek.MONDAY: "MO",
    DayOfWeek.TUESDAY: "TU",
    DayOfWeek.WEDNESDAY: "WE",
    DayOfWeek.THURSDAY: "TH",
    DayOfWeek.FRIDAY: "FR",
    DayOfWeek.SATURDAY: "SA",
    DayOfWeek.SUNDAY: "SU",
}

_NTH_MAP: dict[WeekOfPeriod, str] = {
    WeekOfPeriod.FIRST: "1",
    WeekOfPeriod.SECOND: "2",
    WeekOfPeriod.THIRD: "3",
    WeekOfPeriod.FOURTH: "4",
    WeekOfPeriod.LAST: "-1",
}

_FREQ_MAP: dict[RecurrenceUnit, str] = {
    RecurrenceUnit.MINUTE: "MINUTELY",
    RecurrenceUnit.HOUR: "HOURLY",
    RecurrenceUnit.DAY: "DAILY",
    RecurrenceUnit.WEEK: "WEEKLY",
    RecurrenceUnit.MONTH: "MONTHLY",
    RecurrenceUnit.QUARTER: "MONTHLY",
    RecurrenceUnit.HALF_YEAR: "MONTHLY",
    RecurrenceUnit.YEAR: "YEARLY",
}


def _month_day_parts(days: List[int]) -> List[str]:
    if max(days) <= 28:
        return ["BYMONTHDAY=" + ",".join(str(d) for d in days)]
    if len(days) > 1:
        raise ValueError("several days of month past the 28th cannot be expressed as RRULE")
    # Days past the 28th clamp to the month's last day: pick the last existing day of 28..N.
    return ["BYMONTHDAY=" + ",".join(str(d) for d in range(28, days[0] + 1)), "BYSETPOS=-1"]


def _detail_parts(rule: RecurrenceRule, anchor: date) -> List[str]:
    details = rule.details
    unit = rule.unit

    if details is not None and (details.offset_months or details.months):
        raise ValueError("offset months and per-month patterns cannot be expressed as RRULE")
    days = details.day_selections() if details is not None else []
    nths = details.nth_selections() if details is not None else []

    if unit == RecurrenceUnit.WEEK:
        if rule.days_of_week:
            return ["BYDAY=" + ",".join(_WD_MAP[d] for d in rule.days_of_week)]
        if nths:
            raise ValueError("nth weekday of a week cannot be expressed as RRULE")
        if not days:
            # WEEKLY without BYDAY repeats on DTSTART's weekday.
            return []
        weekdays = sorted({min(day, 7) - 1 for day in days})
        return ["BYDAY=" + ",".join(_WD_MAP[DayOfWeek.from_index(i)] for i in weekdays)]

    if unit not in (RecurrenceUnit.MONTH, RecurrenceUnit.QUARTER, RecurrenceUnit.HALF_YEAR, RecurrenceUnit.YEAR):
        return []

    if nths:
        if unit in (RecurrenceUnit.QUARTER, RecurrenceUnit.HALF_YEAR):
            raise ValueError(f"nth weekday of a {unit.value} cannot be expressed as RRULE")
        if days:
            raise ValueError("days combined with nth weekdays cannot be expressed as RRULE")
        return ["BYDAY=" + ",".join(f"{_NTH_MAP[n.week]}{_WD_MAP[n.weekday]}" for n in nths)]

    parts = _month_day_parts(days or [anchor.day])
    if unit == RecurrenceUnit.YEAR:
        parts.insert(0, f"BYMONTH={anchor.month}")
    return parts


def rule_to_rrule(rule: RecurrenceRule, anchor: date) -> str:
    """Convert a rule to an RRULE (without the leading 'RRULE:' prefix).

    Args:
        rule: Recurrence rule
        anchor: Anchor the rule is expanded from (the DTSTART of the exported series)

    Raises:
        ValueError: If the rule cannot be expressed as RRULE
    """
    if rule.max_occurrences is not None and rule.end_date is not None:
        raise ValueError("RRULE cannot carry both COUNT and UNTIL")

    parts: List[str] = [f"FREQ={_FREQ_MAP[rule.unit]}"]
    interval = int(rule.interval)
    if rule.unit == RecurrenceUnit.QUARTER:
        interval *= MONTHS_PER_QUARTER
    elif rule.unit == RecurrenceUnit.HALF_YEAR:
        interval *= MONTHS_PER_HALF_YEAR
    if interval != 1:
        parts.append(f"INTERVAL={interval}")

    parts.extend(_detail_parts(rule, anchor))

    if rule.max_occurrences is not None:
        parts.append(f"COUNT={int(rule.max_occurrences)}")
    if rule.end_date is not None:
        if rule.end_date.tzinfo is not None:
            until = rule.end_date.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        else:
            until = rule.end_date.strftime("%Y%m%dT%H%M%S")
        parts.append(f"UNTIL={until}")
    return ";".join(parts)
