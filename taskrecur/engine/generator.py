"""Raw occurrence generation for recurrence rules.

Expands a rule from an anchor into its unadjusted, strictly ascending
occurrence sequence. Adjustments are applied by the caller.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional

from taskrecur.engine.periods import period_start, resolve_all, shift_period
from taskrecur.models.constants import DEFAULT_HARD_CAP, MAX_EMPTY_PERIODS
from taskrecur.models.recurrence import DayOfWeek, RecurrenceDetails, RecurrenceRule, RecurrenceUnit

logger = logging.getLogger(__name__)


def _at(day: date, anchor: datetime) -> datetime:
    # Keep the anchor's time of day (and tzinfo) on a new date.
    return datetime.combine(day, anchor.timetz())


def align_to(moment: datetime, anchor: datetime) -> datetime:
    """Make `moment` comparable with `anchor`.

    A naive moment is read in the anchor's tzinfo; against a naive anchor an
    aware moment keeps its wall-clock time and drops its tzinfo.
    """
    if anchor.tzinfo is None:
        return moment.replace(tzinfo=None)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=anchor.tzinfo)
    return moment


def _fixed_step(anchor: datetime, unit: RecurrenceUnit, interval: int) -> Iterator[datetime]:
    step = {
        RecurrenceUnit.MINUTE: timedelta(minutes=interval),
        RecurrenceUnit.HOUR: timedelta(hours=interval),
        RecurrenceUnit.DAY: timedelta(days=interval),
    }[unit]
    k = 0
    while True:
        yield anchor + step * k
        k += 1


def _weekly(anchor: datetime, days: List[DayOfWeek], interval: int) -> Iterator[datetime]:
    offsets = sorted({d.weekday_index for d in days})
    week_start = period_start(anchor.date(), RecurrenceUnit.WEEK)
    k = 0
    while True:
        start = shift_period(week_start, RecurrenceUnit.WEEK, k * interval)
        for offset in offsets:
            candidate = _at(start + timedelta(days=offset), anchor)
            if candidate >= anchor:
                yield candidate
        k += 1


def _periodic(
    anchor: datetime,
    unit: RecurrenceUnit,
    interval: int,
    details: Optional[RecurrenceDetails],
) -> Iterator[datetime]:
    base = period_start(anchor.date(), unit)
    k = 0
    empty = 0
    while True:
        start = shift_period(base, unit, k * interval)
        k += 1
        days = resolve_all(start, unit, details, anchor.date())
        if not days:
            empty += 1
            if empty >= MAX_EMPTY_PERIODS:
                logger.debug(f"Giving up after {empty} {unit.value} periods without a resolvable date")
                return
            continue
        empty = 0
        for day in days:
            candidate = _at(day, anchor)
            if candidate >= anchor:
                yield candidate


def _candidates(anchor: datetime, rule: RecurrenceRule) -> Iterator[datetime]:
    if rule.unit in (RecurrenceUnit.MINUTE, RecurrenceUnit.HOUR, RecurrenceUnit.DAY):
        return _fixed_step(anchor, rule.unit, rule.interval)
    if rule.unit == RecurrenceUnit.WEEK:
        if rule.days_of_week:
            return _weekly(anchor, rule.days_of_week, rule.interval)
        if rule.details is None:
            return _weekly(anchor, [DayOfWeek.from_index(anchor.weekday())], rule.interval)
    return _periodic(anchor, rule.unit, rule.interval, rule.details)


def generate_occurrences(
    anchor: datetime,
    rule: RecurrenceRule,
    hard_cap: int = DEFAULT_HARD_CAP,
) -> Iterator[datetime]:
    """Lazily generate raw occurrences of a rule.

    The sequence is strictly ascending, never earlier than the anchor, and stops
    when `max_occurrences` or `hard_cap` occurrences were produced, or when the
    next candidate falls after `end_date`. It is not restartable: call again
    with the same inputs to start over.

    Args:
        anchor: Reference date-time the rule is expanded from
        rule: Recurrence rule
        hard_cap: Ceiling on produced occurrences, independent of the rule

    Yields:
        Raw (unadjusted) occurrence date-times
    """
    limit = hard_cap
    if rule.max_occurrences is not None:
        limit = min(limit, rule.max_occurrences)
    if limit <= 0:
        return

    end_date = align_to(rule.end_date, anchor) if rule.end_date is not None else None
    count = 0
    for candidate in _candidates(anchor, rule):
        if end_date is not None and candidate > end_date:
            return
        yield candidate
        count += 1
        if count >= limit:
            return
