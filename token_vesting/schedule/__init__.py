"""
Vesting schedule module.

Piecewise-linear unlock curves: the single tranche primitive, the bounded
schedule that aggregates tranches, and the validating builder used to
compose schedules.
"""

from .builder import ScheduleBuilder
from .models import (
    MAX_TIME,
    MAX_UNLOCK_COUNT,
    MIN_TIME,
    LinearVesting,
    RelativeVesting,
    VestingSchedule,
)

__all__ = [
    "LinearVesting",
    "RelativeVesting",
    "VestingSchedule",
    "ScheduleBuilder",
    "MIN_TIME",
    "MAX_TIME",
    "MAX_UNLOCK_COUNT",
]
