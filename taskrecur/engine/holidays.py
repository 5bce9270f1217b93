"""Holiday oracles consumed by the weekday classifier.

The engine only needs a boolean "is this date a holiday" capability. Any object
with an `is_holiday(day) -> bool` method qualifies; a few ready-made oracles are
provided here.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, FrozenSet, Iterable, Optional, Protocol

import holidays as hlib

logger = logging.getLogger(__name__)


class HolidayOracle(Protocol):
    def is_holiday(self, day: date) -> bool:
        ...


class NoHolidays:
    """Oracle for calendars without holidays."""

    def is_holiday(self, day: date) -> bool:
        return False


class FixedHolidayOracle:
    """Oracle backed by an explicit set of dates."""

    def __init__(self, days: Iterable[date]):
        self._days: FrozenSet[date] = frozenset(days)

    def is_holiday(self, day: date) -> bool:
        return day in self._days


class CountryHolidayOracle:
    """Public holidays of a country (and optional subdivision) from the `holidays` library.

    Holiday tables are built lazily per year and cached on the instance.
    """

    def __init__(self, country: str, subdiv: Optional[str] = None):
        self.country = country
        self.subdiv = subdiv
        self._cache: Dict[int, FrozenSet[date]] = {}

    def _year(self, year: int) -> FrozenSet[date]:
        if year not in self._cache:
            table = hlib.country_holidays(self.country, subdiv=self.subdiv, years=year)
            self._cache[year] = frozenset(table.keys())
            logger.debug(f"Loaded {len(self._cache[year])} holidays for {self.country} {year}")
        return self._cache[year]

    def is_holiday(self, day: date) -> bool:
        return day in self._year(day.year)
