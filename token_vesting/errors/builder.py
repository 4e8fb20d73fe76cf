"""
Schedule builder error classifications.

These are raised by ScheduleBuilder while a schedule is being composed or
validated. They have no side effects: when one is raised no schedule is
produced.
"""

from typing import Optional, Dict, Any


class ScheduleBuilderError(Exception):
    """Base class for schedule composition and validation failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class EmptyBuilderError(ScheduleBuilderError):
    """Operation needs a preceding vesting but the builder has none."""

    def __init__(self, message: str = "Builder has no vestings added", **kwargs):
        super().__init__(message, **kwargs)


class InvalidTokenAmountUsedError(ScheduleBuilderError):
    """Tokens attached to vestings differ from the schedule's token count."""

    def __init__(self, expected: int, actual: int, **kwargs):
        super().__init__(
            f"Schedule expects {expected} tokens but vestings use {actual}", **kwargs
        )
        self.expected = expected
        self.actual = actual

    @property
    def amounts(self) -> tuple[int, int]:
        """The (expected, actual) token amounts."""
        return self.expected, self.actual


class VestingsNotSortedError(ScheduleBuilderError):
    """Vestings were added out of order or overlap."""

    def __init__(self, message: str = "Vestings were added not sequentially",
                 index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.index = index


class ZeroTokensError(ScheduleBuilderError):
    """A vesting is associated with zero or a negative number of tokens."""

    def __init__(self, message: str = "Every vesting needs a positive token amount",
                 index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.index = index


class TooManyVestingsError(ScheduleBuilderError):
    """More vestings than a schedule can hold."""

    def __init__(self, count: int, limit: int, **kwargs):
        super().__init__(f"{count} vestings exceed the maximum of {limit}", **kwargs)
        self.count = count
        self.limit = limit


class InitialUnlockTooBigError(ScheduleBuilderError):
    """Legacy initial unlock is not smaller than the tokens provided."""

    def __init__(self, initial_unlock: int, tokens: int, **kwargs):
        super().__init__(
            f"Initial unlock {initial_unlock} must be smaller than {tokens} tokens", **kwargs
        )
        self.initial_unlock = initial_unlock
        self.tokens = tokens


class InvalidTimeIntervalError(ScheduleBuilderError):
    """Start time is not before end time, or a point lies outside the interval."""

    def __init__(self, message: str = "Start time must be before end time",
                 start_time: Optional[int] = None, end_time: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.start_time = start_time
        self.end_time = end_time
