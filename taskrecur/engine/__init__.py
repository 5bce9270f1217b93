"""Recurrence engine for taskrecur."""

from taskrecur.engine.holidays import HolidayOracle, NoHolidays, FixedHolidayOracle, CountryHolidayOracle
from taskrecur.engine.classifier import classify
from taskrecur.engine.periods import resolve, resolve_all
from taskrecur.engine.generator import generate_occurrences
from taskrecur.engine.adjustment import adjust
from taskrecur.engine.service import RecurrenceService, generate_recurrence_dates

__all__ = [
    "HolidayOracle",
    "NoHolidays",
    "FixedHolidayOracle",
    "CountryHolidayOracle",
    "classify",
    "resolve",
    "resolve_all",
    "generate_occurrences",
    "adjust",
    "RecurrenceService",
    "generate_recurrence_dates",
]
