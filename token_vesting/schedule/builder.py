"""
Incremental, validating construction of vesting schedules.

Append-style calls return the builder so that schedules read as chains::

    schedule = (
        ScheduleBuilder.with_tokens(1_000_000)
        .cliff(listing, 60_000)
        .cliff(listing + 6 * MONTH, 90_000)
        .offseted_by(6 * MONTH, LinearVesting.without_start(2 * MONTH, 6))
        .build()
    )

Any amount left as ``None`` takes whatever tokens have not been attached
yet. ``build`` raises a ScheduleBuilderError subclass on the first violated
rule and never returns a partial schedule.
"""

from typing import Optional

from ..errors import (
    EmptyBuilderError,
    InitialUnlockTooBigError,
    InvalidTimeIntervalError,
    InvalidTokenAmountUsedError,
    ScheduleBuilderError,
    TooManyVestingsError,
    VestingsNotSortedError,
    ZeroTokensError,
)
from .models import MAX_UNLOCK_COUNT, LinearVesting, RelativeVesting, VestingPair, VestingSchedule


class ScheduleBuilder:
    """Composes a VestingSchedule that accounts for exactly ``token_count`` tokens."""

    def __init__(self, token_count: int):
        self.token_count = token_count
        self.used_tokens = 0
        self._vestings: list[VestingPair] = []

    @classmethod
    def with_tokens(cls, token_count: int) -> "ScheduleBuilder":
        return cls(token_count)

    def __len__(self) -> int:
        return len(self._vestings)

    def __repr__(self) -> str:
        return (f"ScheduleBuilder(token_count={self.token_count}, "
                f"used_tokens={self.used_tokens}, vestings={self._vestings!r})")

    @property
    def vestings(self) -> tuple[VestingPair, ...]:
        return tuple(self._vestings)

    def available_tokens(self) -> int:
        """Tokens not yet attached to any vesting."""
        return max(self.token_count - self.used_tokens, 0)

    def _remove_last(self) -> VestingPair:
        amount, vesting = self._vestings.pop()
        self.used_tokens -= amount
        return amount, vesting

    def _last_vesting(self) -> LinearVesting:
        if not self._vestings:
            raise EmptyBuilderError()
        return self._vestings[-1][1]

    def add(self, vesting: LinearVesting, tokens: Optional[int] = None) -> "ScheduleBuilder":
        """Append ``vesting`` releasing ``tokens`` (default: all remaining tokens)."""
        if not isinstance(vesting, LinearVesting):
            raise TypeError("Only anchored vestings can be added; anchor templates with offseted_by")
        if tokens is None:
            tokens = self.available_tokens()
        self.used_tokens += tokens
        self._vestings.append((tokens, vesting))
        return self

    def cliff(self, time: int, tokens: Optional[int] = None) -> "ScheduleBuilder":
        """Append a single unlock at ``time``."""
        return self.add(LinearVesting.cliff(time), tokens)

    def offseted_by(
        self,
        offset: int,
        vesting: RelativeVesting,
        tokens: Optional[int] = None,
    ) -> "ScheduleBuilder":
        """Append ``vesting`` starting ``offset`` after the previous vesting's last unlock."""
        previous = self._last_vesting()
        return self.add(vesting.anchored_at(previous.last() + offset), tokens)

    def offseted(self, vesting: RelativeVesting, tokens: Optional[int] = None) -> "ScheduleBuilder":
        """Append ``vesting`` starting one of its own periods after the previous vesting."""
        return self.offseted_by(vesting.unlock_period, vesting, tokens)

    def ending_at(self, end_time: int) -> "ScheduleBuilder":
        """
        Clip the last vesting so that nothing unlocks after ``end_time``.

        The last vesting keeps the steps completed by ``end_time`` with a
        proportional share of its tokens, and the rest unlocks as a cliff at
        exactly ``end_time``. Does nothing if the schedule already ends by then.
        """
        last = self._last_vesting()
        if end_time >= last.last():
            return self
        if end_time < last.start_time:
            raise InvalidTimeIntervalError(
                "End time precedes the start of the last vesting",
                start_time=last.start_time,
                end_time=end_time,
            )

        unlock_count = 1 + (end_time - last.start_time) // last.unlock_period
        if unlock_count >= last.unlock_count:
            raise ScheduleBuilderError(
                "Truncated vesting does not lose any unlock",
                context={"unlock_count": unlock_count, "original": last.unlock_count},
            )

        amount, _ = self._remove_last()
        linear_tokens = amount * unlock_count // last.unlock_count
        return (
            self.add(LinearVesting(last.start_time, last.unlock_period, unlock_count), linear_tokens)
            .cliff(end_time, amount - linear_tokens)
        )

    def legacy(
        self,
        start_time: int,
        end_time: int,
        unlock_period: int,
        cliff: int,
        initial_unlock_tokens: int,
        tokens: Optional[int] = None,
    ) -> "ScheduleBuilder":
        """
        Append the vestings equivalent to a single-cliff linear schedule.

        The legacy description unlocks ``initial_unlock_tokens`` at
        ``start_time`` and the rest linearly, one step every ``unlock_period``
        from ``start_time`` to ``end_time``; steps that fall before ``cliff``
        are withheld and released together at ``cliff``.

        Args:
            start_time: First linear step and initial unlock time
            end_time: Time by which every token is unlocked
            unlock_period: Time between linear steps
            cliff: Time at which the withheld steps unlock
            initial_unlock_tokens: Tokens released at ``start_time``
            tokens: Tokens covered by the schedule (default: all remaining)
        """
        if start_time >= end_time:
            raise InvalidTimeIntervalError(start_time=start_time, end_time=end_time)
        if tokens is None:
            tokens = self.available_tokens()
        if initial_unlock_tokens >= tokens:
            raise InitialUnlockTooBigError(initial_unlock_tokens, tokens)
        if cliff < start_time or cliff > end_time:
            raise InvalidTimeIntervalError(
                "Cliff must lie between start and end time",
                start_time=start_time,
                end_time=end_time,
            )
        if unlock_period <= 0:
            raise InvalidTimeIntervalError(
                "Unlock period must be positive", start_time=start_time, end_time=end_time
            )

        span = end_time - start_time
        total_linear_unlocks = 1 + span // unlock_period
        if span % unlock_period != 0:
            total_linear_unlocks += 1
        unlocks_before_cliff = 1 + (cliff - start_time) // unlock_period
        linear_unlocks = total_linear_unlocks - unlocks_before_cliff
        if linear_unlocks > MAX_UNLOCK_COUNT:
            raise InvalidTimeIntervalError(
                f"Legacy schedule needs more than {MAX_UNLOCK_COUNT} unlocks",
                start_time=start_time,
                end_time=end_time,
            )

        if initial_unlock_tokens > 0:
            self.cliff(start_time, initial_unlock_tokens)
        remaining_tokens = tokens - initial_unlock_tokens

        if linear_unlocks <= 0 or cliff >= end_time:
            return self.cliff(cliff, remaining_tokens)

        tokens_at_cliff = remaining_tokens * unlocks_before_cliff // total_linear_unlocks
        if tokens_at_cliff > 0:
            remaining_tokens -= tokens_at_cliff
            self.cliff(cliff, tokens_at_cliff)

        first_linear_unlock = start_time + unlocks_before_cliff * unlock_period
        if first_linear_unlock >= end_time:
            return self.cliff(end_time, remaining_tokens)

        return (
            self.add(LinearVesting(first_linear_unlock, unlock_period, linear_unlocks), remaining_tokens)
            .ending_at(end_time)
        )

    def build(self) -> VestingSchedule:
        """Validate the composed vestings and produce the schedule."""
        if self.token_count != self.used_tokens:
            raise InvalidTokenAmountUsedError(self.token_count, self.used_tokens)

        if len(self._vestings) > VestingSchedule.MAX_VESTINGS:
            raise TooManyVestingsError(len(self._vestings), VestingSchedule.MAX_VESTINGS)

        for index in range(1, len(self._vestings)):
            if self._vestings[index - 1][1].last() > self._vestings[index][1].start_time:
                raise VestingsNotSortedError(index=index)

        for index, (amount, _) in enumerate(self._vestings):
            if amount <= 0:
                raise ZeroTokensError(index=index)

        return VestingSchedule(self.token_count, tuple(self._vestings))
