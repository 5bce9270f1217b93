"""Constants for taskrecur.

This module centralizes all magic numbers and default values used by the recurrence engine.
"""


# Facade defaults
DEFAULT_PREVIEW_LIMIT = 20  # occurrences shown in a rule preview
DEFAULT_HARD_CAP = 1000  # raw occurrences pulled from the generator at most

# Generator
MAX_EMPTY_PERIODS = 48  # consecutive periods without a resolvable date before giving up

# Adjustment search bounds
MAX_ADJUSTMENT_STEPS = 366
MAX_SPECIFIC_WEEKDAY_STEPS = 7

# Months per period for period units
MONTHS_PER_QUARTER = 3
MONTHS_PER_HALF_YEAR = 6
MONTHS_PER_YEAR = 12
