"""Tests for schedule composition."""

import pytest

from token_vesting.errors import (
    EmptyBuilderError,
    InitialUnlockTooBigError,
    InvalidTimeIntervalError,
    InvalidTokenAmountUsedError,
    ScheduleBuilderError,
    TooManyVestingsError,
    VestingsNotSortedError,
    ZeroTokensError,
)
from token_vesting.schedule import LinearVesting, ScheduleBuilder, VestingSchedule
from token_vesting.state.records import VestingAccount


def build_truncated_schedule() -> VestingSchedule:
    """Two 200,000 cliffs and a three step tranche cut off at t=2,000,000."""
    return (
        ScheduleBuilder.with_tokens(1_000_000)
        .cliff(1_000_000, 200_000)
        .cliff(1_100_000, 200_000)
        .add(LinearVesting(1_400_000, 400_000, 3))
        .ending_at(2_000_000)
        .build()
    )


class TestScheduleBuilder:
    """Test suite for successful schedule composition."""

    def test_builder_success(self):
        """Test chaining cliffs, offset tranches and standalone tranches."""
        cliff = 20_000
        offset = 30_000
        standalone = 200_000

        schedule = (
            ScheduleBuilder.with_tokens(1_000_000)
            .cliff(cliff, 100_000)
            .offseted_by(offset, LinearVesting.without_start(10_000, 3), 100_000)
            .offseted(LinearVesting.without_start(20_000, 5), 100_000)
            .add(LinearVesting(standalone, 10_000, 2))
            .build()
        )

        assert schedule.total_tokens() == 1_000_000
        assert schedule.vestings == (
            (100_000, LinearVesting.cliff(cliff)),
            (100_000, LinearVesting(cliff + offset, 10_000, 3)),
            (100_000, LinearVesting(cliff + offset + 10_000 * 2 + 20_000, 20_000, 5)),
            (700_000, LinearVesting(standalone, 10_000, 2)),
        )

    def test_default_amount_takes_remaining_tokens(self):
        """Test that an omitted amount uses every unattached token."""
        builder = ScheduleBuilder.with_tokens(500).cliff(10, 120)

        assert builder.available_tokens() == 380
        builder.cliff(20)
        assert builder.available_tokens() == 0
        assert builder.vestings[-1] == (380, LinearVesting.cliff(20))

    def test_add_rejects_relative_template(self):
        """Test that only anchored tranches can be appended directly."""
        with pytest.raises(TypeError):
            ScheduleBuilder.with_tokens(100).add(LinearVesting.without_start(10, 2))

    def test_ending_at_truncates_last_tranche(self):
        """Test that truncation keeps completed steps and adds a closing cliff."""
        schedule = build_truncated_schedule()

        assert [amount for amount, _ in schedule] == [200_000, 200_000, 400_000, 200_000]
        assert schedule.vestings[2][1] == LinearVesting(1_400_000, 400_000, 2)
        assert schedule.vestings[3][1] == LinearVesting.cliff(2_000_000)
        assert schedule.last() == 2_000_000
        assert schedule.is_valid()

    def test_ending_at_after_last_unlock_is_noop(self):
        """Test that an end time past the last unlock changes nothing."""
        builder = ScheduleBuilder.with_tokens(300).add(LinearVesting(0, 10, 3))

        builder.ending_at(20)
        builder.ending_at(1_000)

        assert builder.vestings == ((300, LinearVesting(0, 10, 3)),)

    def test_ending_at_conserves_tokens(self):
        """Test that truncation neither creates nor loses tokens."""
        builder = ScheduleBuilder.with_tokens(1_000).add(LinearVesting(0, 7, 9))
        builder.ending_at(30)

        amounts = [amount for amount, _ in builder.vestings]
        assert sum(amounts) == 1_000
        assert builder.vestings[0][1].unlock_count == 5
        assert amounts == [1_000 * 5 // 9, 1_000 - 1_000 * 5 // 9]

    def test_legacy_schedule(self):
        """Test conversion of a start/end/cliff description into tranches."""
        schedule = (
            ScheduleBuilder.with_tokens(1_000)
            .legacy(
                start_time=0,
                end_time=100,
                unlock_period=10,
                cliff=30,
                initial_unlock_tokens=100,
            )
            .build()
        )

        # 11 linear steps at 0..100, the four up to t=30 withheld until the cliff
        assert schedule.vestings == (
            (100, LinearVesting.cliff(0)),
            (327, LinearVesting.cliff(30)),
            (573, LinearVesting(40, 10, 7)),
        )
        assert schedule.available(29) == 100
        assert schedule.available(30) == 427
        assert schedule.available(100) == 1_000

    def test_legacy_cliff_at_end_time(self):
        """Test that a cliff at the end time releases all non-initial tokens there."""
        schedule = (
            ScheduleBuilder.with_tokens(1_000)
            .legacy(0, 100, 10, 100, 0)
            .build()
        )

        assert schedule.vestings == ((1_000, LinearVesting.cliff(100)),)

    def test_legacy_uneven_period_ends_at_end_time(self):
        """Test that a period not dividing the interval still ends at the end time."""
        schedule = (
            ScheduleBuilder.with_tokens(900)
            .legacy(0, 25, 10, 0, 0)
            .build()
        )

        assert schedule.last() == 25
        assert schedule.available(25) == 900
        assert schedule.is_valid()


class TestScheduleBuilderFailures:
    """Test suite for rejected schedules."""

    def test_offset_on_empty_builder(self):
        """Test that an offset tranche needs a preceding tranche."""
        with pytest.raises(EmptyBuilderError):
            ScheduleBuilder.with_tokens(1_000_000).offseted_by(
                10_000, LinearVesting.without_start(10_000, 3)
            )

    def test_ending_at_on_empty_builder(self):
        """Test that truncation needs a tranche."""
        with pytest.raises(EmptyBuilderError):
            ScheduleBuilder.with_tokens(100).ending_at(10)

    def test_remaining_tokens(self):
        """Test that unattached tokens fail the build."""
        with pytest.raises(InvalidTokenAmountUsedError) as exc_info:
            ScheduleBuilder.with_tokens(1_000_000).cliff(10_000, 100_000).build()

        assert exc_info.value.amounts == (1_000_000, 100_000)

    def test_unsorted_vestings(self):
        """Test that a tranche starting before the previous one ends fails the build."""
        builder = (
            ScheduleBuilder.with_tokens(1_000_000)
            .add(LinearVesting(10_000, 10_000, 3), 100_000)
            .add(LinearVesting(20_000, 10_000, 3))
        )

        with pytest.raises(VestingsNotSortedError) as exc_info:
            builder.build()

        assert exc_info.value.index == 1

    def test_zero_token_vesting(self):
        """Test that a tranche left without tokens fails the build."""
        builder = (
            ScheduleBuilder.with_tokens(1_000_000)
            .add(LinearVesting(10_000, 10_000, 3))
            .add(LinearVesting(50_000, 10_000, 3))
        )

        with pytest.raises(ZeroTokensError) as exc_info:
            builder.build()

        assert exc_info.value.index == 1

    def test_negative_token_vesting(self):
        """Test that a negative amount cannot be balanced by a larger one."""
        builder = ScheduleBuilder.with_tokens(100).cliff(10, -5).cliff(20, 105)

        with pytest.raises(ZeroTokensError) as exc_info:
            builder.build()

        assert exc_info.value.index == 0

    def test_too_many_vestings(self):
        """Test that a seventeenth tranche fails the build."""
        builder = ScheduleBuilder.with_tokens(1_000_000)
        for i in range(VestingSchedule.MAX_VESTINGS):
            builder.cliff(i * 100, 100)
        builder.offseted_by(100, LinearVesting.without_start(0, 1))

        with pytest.raises(TooManyVestingsError):
            builder.build()

    def test_seventeen_cliffs(self):
        """Test seventeen single-step cliffs with fully attached tokens."""
        builder = ScheduleBuilder.with_tokens(1_700)
        for i in range(17):
            builder.cliff(i * 10, 100)

        with pytest.raises(TooManyVestingsError):
            builder.build()

    def test_legacy_initial_unlock_too_big(self):
        """Test that the initial unlock must leave tokens for the linear part."""
        with pytest.raises(InitialUnlockTooBigError):
            ScheduleBuilder.with_tokens(1_000_000).legacy(10_000, 12_000, 100, 11_000, 10_000, 10_000)

    def test_legacy_invalid_end_time(self):
        """Test that the start time must precede the end time."""
        with pytest.raises(InvalidTimeIntervalError):
            ScheduleBuilder.with_tokens(1_000_000).legacy(10_000, 1_000, 10_000, 10_000, 100_000, 10_000)

    def test_legacy_cliff_outside_interval(self):
        """Test that the cliff must lie within the vesting interval."""
        with pytest.raises(InvalidTimeIntervalError):
            ScheduleBuilder.with_tokens(1_000).legacy(0, 100, 10, 150, 0)

    def test_ending_at_before_last_start(self):
        """Test that truncation cannot end before the last tranche starts."""
        builder = ScheduleBuilder.with_tokens(300).add(LinearVesting(100, 10, 3))

        with pytest.raises(InvalidTimeIntervalError):
            builder.ending_at(50)

    def test_builder_errors_share_base(self):
        """Test that every builder failure is a ScheduleBuilderError."""
        with pytest.raises(ScheduleBuilderError):
            ScheduleBuilder.with_tokens(1).build()


class TestWithdrawableAmount:
    """Test suite for a grant's withdrawable amount over a truncated schedule."""

    @pytest.fixture
    def vesting(self) -> VestingAccount:
        return VestingAccount(is_initialized=True, total_tokens=1_000_000, withdrawn_tokens=100_000)

    @pytest.mark.parametrize("now,expected", [
        (900_000, 0),
        (1_050_000, 100_000),
        (1_150_000, 300_000),
        (1_550_000, 500_000),
        (1_950_000, 700_000),
        (2_100_000, 900_000),
    ])
    def test_available_to_withdraw(self, vesting, now, expected):
        """Test the withdrawable amount before, during and after vesting."""
        schedule = build_truncated_schedule()

        assert vesting.calculate_available_to_withdraw_amount(schedule, now) == expected

    def test_capped_by_grant_total(self):
        """Test that a grant never unlocks more than its total."""
        vesting = VestingAccount(is_initialized=True, total_tokens=300_000)

        assert vesting.calculate_available_to_withdraw_amount(build_truncated_schedule(), 2_100_000) == 300_000
