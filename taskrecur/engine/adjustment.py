"""Post-generation adjustment of raw occurrences.

Date conditions filter occurrences; weekday conditions shift them. Only the
first weekday condition (in list order) matching an occurrence is applied.
Every day-by-day search is bounded, so an unsatisfiable target (e.g. "next
holiday" with no holidays on the calendar) excludes the occurrence instead of
looping forever.
"""

import logging
import operator
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, Optional

from taskrecur.engine.classifier import TARGET_CATEGORIES, classify
from taskrecur.engine.generator import align_to
from taskrecur.engine.holidays import HolidayOracle
from taskrecur.models.constants import MAX_ADJUSTMENT_STEPS, MAX_SPECIFIC_WEEKDAY_STEPS
from taskrecur.models.recurrence import (
    AdjustmentDirection,
    AdjustmentTarget,
    DateCondition,
    DateRelation,
    RecurrenceAdjustment,
    WeekdayCondition,
)

logger = logging.getLogger(__name__)


_RELATIONS: Dict[DateRelation, Callable[[date, date], bool]] = {
    DateRelation.BEFORE: operator.lt,
    DateRelation.ON_OR_BEFORE: operator.le,
    DateRelation.ON_OR_AFTER: operator.ge,
    DateRelation.AFTER: operator.gt,
}


def satisfies_date_condition(candidate: datetime, condition: DateCondition) -> bool:
    """Compare calendar dates: `candidate <relation> reference_date`.

    The reference date is read in the candidate's time zone.
    """
    reference = align_to(condition.reference_date, candidate)
    if candidate.tzinfo is not None:
        reference = reference.astimezone(candidate.tzinfo)
    return _RELATIONS[condition.relation](candidate.date(), reference.date())


def matching_weekday_condition(
    candidate: datetime,
    conditions: Iterable[WeekdayCondition],
    oracle: HolidayOracle,
) -> Optional[WeekdayCondition]:
    """First condition (in list order) whose `if_weekday` matches the candidate."""
    for condition in conditions:
        if classify(candidate.date(), condition.if_weekday, oracle):
            return condition
    return None


def _search(
    start: datetime,
    step: int,
    predicate: Callable[[date], bool],
    max_steps: int,
) -> Optional[datetime]:
    for n in range(1, max_steps + 1):
        candidate = start + timedelta(days=step * n)
        if predicate(candidate.date()):
            return candidate
    return None


def shift(candidate: datetime, condition: WeekdayCondition, oracle: HolidayOracle) -> Optional[datetime]:
    """Apply one weekday condition to a candidate.

    Returns:
        The shifted date-time, or None if the search cap was exhausted
    """
    step = 1 if condition.then_direction == AdjustmentDirection.NEXT else -1

    if condition.then_target is None:
        return candidate + timedelta(days=step * condition.then_days)

    if condition.then_target == AdjustmentTarget.SPECIFIC_WEEKDAY:
        idx = condition.then_weekday.weekday_index
        shifted = _search(candidate, step, lambda d: d.weekday() == idx, MAX_SPECIFIC_WEEKDAY_STEPS)
        max_steps = MAX_SPECIFIC_WEEKDAY_STEPS
    else:
        category = TARGET_CATEGORIES[condition.then_target]
        shifted = _search(candidate, step, lambda d: classify(d, category, oracle), MAX_ADJUSTMENT_STEPS)
        max_steps = MAX_ADJUSTMENT_STEPS

    if shifted is None:
        logger.debug(
            f"Condition {condition.id}: no {condition.then_target.value} within {max_steps} days "
            f"{condition.then_direction.value} of {candidate.isoformat()}"
        )
    return shifted


def adjust(
    raw: datetime,
    adjustment: Optional[RecurrenceAdjustment],
    oracle: HolidayOracle,
) -> Optional[datetime]:
    """Adjust one raw occurrence.

    Args:
        raw: Raw occurrence from the generator
        adjustment: Date and weekday conditions (None leaves the occurrence as is)
        oracle: Holiday oracle used by holiday categories

    Returns:
        The final occurrence, or None if it is excluded
    """
    if adjustment is None:
        return raw

    for condition in adjustment.date_conditions:
        if not satisfies_date_condition(raw, condition):
            logger.debug(f"Occurrence {raw.isoformat()} excluded by date condition {condition.id}")
            return None

    condition = matching_weekday_condition(raw, adjustment.weekday_conditions, oracle)
    if condition is None:
        return raw
    return shift(raw, condition, oracle)
