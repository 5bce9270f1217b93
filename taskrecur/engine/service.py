"""Recurrence service: the single entry point for expanding rules.

Composes generation and adjustment. Holds no state between calls beyond its
configuration (holiday oracle and hard cap), so the same inputs always give the
same output.
"""

import logging
from datetime import datetime
from itertools import islice
from typing import Iterator, List, Optional

from taskrecur.engine.adjustment import adjust
from taskrecur.engine.generator import generate_occurrences
from taskrecur.engine.holidays import HolidayOracle, NoHolidays
from taskrecur.models.constants import DEFAULT_HARD_CAP, DEFAULT_PREVIEW_LIMIT
from taskrecur.models.recurrence import RecurrenceRule

logger = logging.getLogger(__name__)


class RecurrenceService:
    """Expands recurrence rules into adjusted occurrence lists."""

    def __init__(self, oracle: Optional[HolidayOracle] = None, hard_cap: int = DEFAULT_HARD_CAP):
        self.oracle = oracle if oracle is not None else NoHolidays()
        self.hard_cap = hard_cap

    def iter_occurrences(self, anchor: datetime, rule: RecurrenceRule) -> Iterator[datetime]:
        """Adjusted occurrences in strictly ascending order.

        Raw occurrences excluded by the adjustment are skipped and the next raw
        occurrence is pulled instead. A shifted occurrence that does not land
        after the previous one (e.g. Saturday and Sunday both moved to Monday)
        is dropped.
        """
        last: Optional[datetime] = None
        for raw in generate_occurrences(anchor, rule, self.hard_cap):
            try:
                occurrence = adjust(raw, rule.adjustment, self.oracle)
            except Exception as e:
                logger.error(f"Failed to adjust occurrence {raw.isoformat()}: {type(e).__name__}: {str(e)}")
                raise
            if occurrence is None:
                continue
            if last is not None and occurrence <= last:
                logger.debug(f"Dropping {occurrence.isoformat()}: not after {last.isoformat()}")
                continue
            last = occurrence
            yield occurrence

    def generate_recurrence_dates(
        self,
        anchor: datetime,
        rule: Optional[RecurrenceRule],
        limit: int = DEFAULT_PREVIEW_LIMIT,
    ) -> List[datetime]:
        """Generate up to `limit` adjusted occurrences of a rule.

        Args:
            anchor: Reference date-time (e.g. the task's start date)
            rule: Recurrence rule; None (recurrence disabled) yields no dates
            limit: Maximum number of occurrences to return

        Returns:
            Ordered list of occurrence date-times
        """
        if rule is None or limit <= 0:
            return []
        return list(islice(self.iter_occurrences(anchor, rule), limit))

    def calculate_next_date(self, base: datetime, rule: Optional[RecurrenceRule]) -> Optional[datetime]:
        """First adjusted occurrence strictly after `base` (e.g. when a recurring task is completed)."""
        if rule is None:
            return None
        for occurrence in self.iter_occurrences(base, rule):
            if occurrence > base:
                return occurrence
        return None


def generate_recurrence_dates(
    anchor: datetime,
    rule: Optional[RecurrenceRule],
    limit: int = DEFAULT_PREVIEW_LIMIT,
    *,
    oracle: Optional[HolidayOracle] = None,
    hard_cap: int = DEFAULT_HARD_CAP,
) -> List[datetime]:
    """Convenience wrapper around `RecurrenceService.generate_recurrence_dates`."""
    return RecurrenceService(oracle=oracle, hard_cap=hard_cap).generate_recurrence_dates(anchor, rule, limit)
