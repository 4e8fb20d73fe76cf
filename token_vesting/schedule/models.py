"""
Vesting schedule data models.

This module defines the immutable tranche types and the schedule that pairs
tranches with token amounts. A tranche releases its tokens in equal steps,
one every unlock period, starting at its start time. A cliff is a tranche
with a single step and no period.

Token amounts are computed with integer arithmetic: a tranche that has
completed ``k`` of its ``n`` steps releases ``floor(amount * k / n)`` tokens.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, Iterator

from ..errors import TooManyVestingsError

MIN_TIME = 0
MAX_TIME = 2**64 - 1
MAX_UNLOCK_COUNT = 255                               # unlock_count is stored as one byte


def _check_steps(unlock_period: int, unlock_count: int) -> None:
    if not 1 <= unlock_count <= MAX_UNLOCK_COUNT:
        raise ValueError(f"unlock_count {unlock_count} must be from 1 to {MAX_UNLOCK_COUNT}")
    if unlock_period < 0:
        raise ValueError(f"unlock_period {unlock_period} must not be negative")
    if unlock_period == 0 and unlock_count > 1:
        raise ValueError("A vesting with several unlocks needs a positive unlock_period")


@dataclass(frozen=True)
class RelativeVesting:
    """Tranche template without a start time, anchored later by the builder."""

    unlock_period: int
    unlock_count: int = 1

    def __post_init__(self) -> None:
        _check_steps(self.unlock_period, self.unlock_count)

    def anchored_at(self, start_time: int) -> "LinearVesting":
        """Create the anchored tranche starting at ``start_time``."""
        return LinearVesting(start_time, self.unlock_period, self.unlock_count)

    @property
    def duration(self) -> int:
        """Time between the first and the last unlock."""
        return self.unlock_period * (self.unlock_count - 1)


@dataclass(frozen=True)
class LinearVesting:
    """Linear unlock curve anchored at an absolute start time."""

    start_time: int
    unlock_period: int = 0
    unlock_count: int = 1

    def __post_init__(self) -> None:
        if self.start_time < MIN_TIME:
            raise ValueError(f"start_time {self.start_time} must not be negative")
        _check_steps(self.unlock_period, self.unlock_count)

    @classmethod
    def cliff(cls, start_time: int) -> "LinearVesting":
        """Single instantaneous unlock at ``start_time``."""
        return cls(start_time, 0, 1)

    @staticmethod
    def without_start(unlock_period: int, unlock_count: int) -> RelativeVesting:
        return RelativeVesting(unlock_period, unlock_count)

    def remove_start(self) -> RelativeVesting:
        return RelativeVesting(self.unlock_period, self.unlock_count)

    @property
    def is_cliff(self) -> bool:
        return self.unlock_count == 1

    @property
    def part(self) -> float:
        """Fraction of the tranche released by a single step."""
        return 1.0 / self.unlock_count

    def last(self) -> int:
        """Time of the final unlock."""
        return self.start_time + self.unlock_period * (self.unlock_count - 1)

    def unlocked_steps(self, time: int) -> int:
        """Number of steps completed at ``time``."""
        if time < self.start_time:
            return 0
        if time >= self.last():
            return self.unlock_count
        return (time - self.start_time) // self.unlock_period + 1

    def available(self, time: int) -> float:
        """Unlocked fraction of the tranche at ``time``, in [0.0, 1.0]."""
        steps = self.unlocked_steps(time)
        if steps == self.unlock_count:
            return 1.0
        return steps / self.unlock_count

    def unlocked_tokens(self, amount: int, time: int) -> int:
        """Tokens of ``amount`` released at ``time``, rounded down."""
        return amount * self.unlocked_steps(time) // self.unlock_count


VestingPair = tuple[int, LinearVesting]


@dataclass(frozen=True)
class VestingSchedule:
    """
    Ordered, capacity-bounded list of (token amount, tranche) pairs.

    Direct construction only enforces the capacity. Sortedness and positive
    amounts are checked by ``is_valid``, and the token sum by the builder.
    """

    MAX_VESTINGS: ClassVar[int] = 16

    token_count: int
    vestings: tuple[VestingPair, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        vestings = tuple((int(amount), vesting) for amount, vesting in self.vestings)
        if len(vestings) > self.MAX_VESTINGS:
            raise TooManyVestingsError(len(vestings), self.MAX_VESTINGS)
        object.__setattr__(self, "vestings", vestings)

    @classmethod
    def new(cls, token_count: int, vestings: Iterable[VestingPair]) -> "VestingSchedule":
        return cls(token_count, tuple(vestings))

    def __iter__(self) -> Iterator[VestingPair]:
        return iter(self.vestings)

    def __len__(self) -> int:
        return len(self.vestings)

    @property
    def vesting_count(self) -> int:
        return len(self.vestings)

    def total_tokens(self) -> int:
        return self.token_count

    def allocated_tokens(self) -> int:
        """Sum of the token amounts paired with tranches."""
        return sum(amount for amount, _ in self.vestings)

    def available(self, time: int) -> int:
        """Tokens unlocked at ``time`` across all tranches."""
        tokens = 0
        for amount, vesting in self.vestings:
            if vesting.start_time > time:
                break
            tokens += vesting.unlocked_tokens(amount, time)
        return tokens

    def is_valid(self) -> bool:
        """Check capacity, ordering and positive amounts."""
        if len(self.vestings) > self.MAX_VESTINGS:
            return False

        for (_, previous), (_, current) in zip(self.vestings, self.vestings[1:]):
            if previous.last() > current.start_time:
                return False

        return all(amount > 0 for amount, _ in self.vestings)

    def start_time(self) -> int:
        return self.vestings[0][1].start_time

    def last(self) -> int:
        return self.vestings[-1][1].last()
