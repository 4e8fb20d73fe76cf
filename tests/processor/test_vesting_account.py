"""Tests for grant creation and beneficiary withdrawals."""

import pytest

from token_vesting.errors import (
    AlreadyInitializedError,
    IncorrectAccountError,
    InvalidAccountDataError,
    NotAdministratorError,
    NotEnoughTokensInPoolError,
    NotEnoughUnlockedTokensError,
    UninitializedAccountError,
)
from token_vesting.state.records import VestingAccount, VestingTypeAccount
from token_vesting.utils.keys import new_key

POOL_TOKENS = 1_000_000
GRANT_TOKENS = 1_000


class TestCreateVestingAccount:
    """Test suite for grant creation."""

    def test_create_vesting_account(self, store, vesting_type_key, vesting_key, beneficiary_account):
        """Test that the grant is recorded and its tokens locked in the pool."""
        vesting = store.load_record(vesting_key, VestingAccount)
        vesting_type = store.load_record(vesting_type_key, VestingTypeAccount)

        assert vesting.is_initialized
        assert vesting.total_tokens == GRANT_TOKENS
        assert vesting.withdrawn_tokens == 0
        assert vesting.token_account == beneficiary_account
        assert vesting.vesting_type_account == vesting_type_key
        assert vesting_type.locked_tokens_amount == GRANT_TOKENS

    def test_already_initialized(self, processor, administrator, vesting_type_key, vesting_key,
                                 beneficiary_account):
        """Test that a grant record cannot be reused."""
        with pytest.raises(AlreadyInitializedError):
            processor.create_vesting_account(
                administrator, vesting_type_key, vesting_key, beneficiary_account, 1
            )

    def test_pool_exhausted(self, processor, store, make_record, administrator, vesting_type_key,
                            beneficiary_account):
        """Test that grants cannot lock more tokens than the pool holds."""
        processor.create_vesting_account(
            administrator, vesting_type_key, make_record(VestingAccount), beneficiary_account,
            POOL_TOKENS - 10,
        )
        key = make_record(VestingAccount)

        with pytest.raises(NotEnoughTokensInPoolError) as exc_info:
            processor.create_vesting_account(administrator, vesting_type_key, key, beneficiary_account, 11)

        assert exc_info.value.available == 10
        assert not store.load_record(key, VestingAccount).is_initialized
        assert store.load_record(vesting_type_key, VestingTypeAccount).locked_tokens_amount == POOL_TOKENS - 10

    def test_whole_pool_can_be_granted(self, processor, make_record, administrator, vesting_type_key,
                                       beneficiary_account):
        """Test that grants may lock exactly the pool balance."""
        vesting = processor.create_vesting_account(
            administrator, vesting_type_key, make_record(VestingAccount), beneficiary_account, POOL_TOKENS
        )

        assert vesting.total_tokens == POOL_TOKENS

    def test_negative_grant(self, processor, store, make_record, administrator, vesting_type_key,
                            beneficiary_account, vesting_key):
        """Test that a grant cannot reduce the locked token counter."""
        key = make_record(VestingAccount)

        with pytest.raises(InvalidAccountDataError):
            processor.create_vesting_account(administrator, vesting_type_key, key,
                                             beneficiary_account, -GRANT_TOKENS)

        assert not store.load_record(key, VestingAccount).is_initialized
        assert store.load_record(vesting_type_key, VestingTypeAccount).locked_tokens_amount == GRANT_TOKENS

    def test_not_administrator(self, processor, authenticator, make_record, vesting_type_key,
                               beneficiary_account):
        """Test that only the administrator may create grants."""
        intruder = new_key()
        authenticator.grant(intruder)

        with pytest.raises(NotAdministratorError):
            processor.create_vesting_account(
                intruder, vesting_type_key, make_record(VestingAccount), beneficiary_account, 1
            )

    def test_uninitialized_vesting_type(self, processor, make_record, administrator, beneficiary_account):
        """Test that grants need an initialized vesting type."""
        with pytest.raises(UninitializedAccountError):
            processor.create_vesting_account(
                administrator, make_record(VestingTypeAccount), make_record(VestingAccount),
                beneficiary_account, 1,
            )

    def test_other_mint(self, processor, custody, make_record, administrator, vesting_type_key):
        """Test that the beneficiary account must hold the pool's mint."""
        other = custody.open_account(new_key(), new_key(), new_key()).key

        with pytest.raises(InvalidAccountDataError):
            processor.create_vesting_account(
                administrator, vesting_type_key, make_record(VestingAccount), other, 1
            )

    def test_missing_beneficiary_account(self, processor, make_record, administrator, vesting_type_key):
        """Test that the beneficiary account must exist."""
        with pytest.raises(IncorrectAccountError):
            processor.create_vesting_account(
                administrator, vesting_type_key, make_record(VestingAccount), new_key(), 1
            )


class TestWithdrawFromVesting:
    """Test suite for beneficiary withdrawals."""

    def test_nothing_before_start(self, processor, clock, vesting_type_key, vesting_key):
        """Test that no tokens can be withdrawn before the first unlock."""
        clock.now = 999

        assert processor.available_to_withdraw(vesting_type_key, vesting_key) == 0
        with pytest.raises(NotEnoughUnlockedTokensError):
            processor.withdraw_from_vesting(vesting_type_key, vesting_key, 1)

    def test_withdraw_unlocked(self, processor, store, custody, clock, token_pool, beneficiary_account,
                               vesting_type_key, vesting_key):
        """Test that unlocked tokens move to the beneficiary and unlock in the pool."""
        clock.now = 2_500

        vesting = processor.withdraw_from_vesting(vesting_type_key, vesting_key, 500)

        assert vesting.withdrawn_tokens == 500
        assert custody.balance(beneficiary_account) == 500
        assert custody.balance(token_pool) == POOL_TOKENS - 500
        assert store.load_record(vesting_type_key, VestingTypeAccount).locked_tokens_amount == 500
        assert processor.available_to_withdraw(vesting_type_key, vesting_key) == 100

    def test_withdraw_more_than_unlocked(self, processor, store, custody, clock, beneficiary_account,
                                         vesting_type_key, vesting_key):
        """Test that withdrawals are limited to unlocked, unwithdrawn tokens."""
        clock.now = 1_000
        processor.withdraw_from_vesting(vesting_type_key, vesting_key, 300)

        with pytest.raises(NotEnoughUnlockedTokensError) as exc_info:
            processor.withdraw_from_vesting(vesting_type_key, vesting_key, 101)

        assert exc_info.value.available == 100
        assert custody.balance(beneficiary_account) == 300
        assert store.load_record(vesting_key, VestingAccount).withdrawn_tokens == 300

    def test_withdraw_everything_after_end(self, processor, custody, clock, beneficiary_account,
                                           vesting_type_key, vesting_key):
        """Test that the whole grant is withdrawable after the last unlock."""
        clock.now = 10_000

        processor.withdraw_from_vesting(vesting_type_key, vesting_key, GRANT_TOKENS)

        assert custody.balance(beneficiary_account) == GRANT_TOKENS
        assert processor.available_to_withdraw(vesting_type_key, vesting_key) == 0

    def test_negative_withdrawal(self, processor, store, custody, clock, beneficiary_account,
                                 vesting_type_key, vesting_key):
        """Test that a negative amount cannot return withdrawn tokens to the pool."""
        clock.now = 1_000
        processor.withdraw_from_vesting(vesting_type_key, vesting_key, 400)

        with pytest.raises(InvalidAccountDataError):
            processor.withdraw_from_vesting(vesting_type_key, vesting_key, -300)

        assert store.load_record(vesting_key, VestingAccount).withdrawn_tokens == 400
        assert store.load_record(vesting_type_key, VestingTypeAccount).locked_tokens_amount == GRANT_TOKENS - 400
        assert custody.balance(beneficiary_account) == 400

    def test_grant_of_other_vesting_type(self, processor, make_record, administrator, custody, mint,
                                         schedule, clock, vesting_key):
        """Test that a grant cannot be withdrawn through another vesting type."""
        other_pool = custody.open_account(new_key(), mint, administrator, 10).key
        other_type = make_record(VestingTypeAccount)
        processor.create_vesting_type(administrator, other_type, other_pool, schedule)
        clock.now = 10_000

        with pytest.raises(InvalidAccountDataError):
            processor.withdraw_from_vesting(other_type, vesting_key, 1)

    def test_failed_transfer_rolls_back(self, processor, store, custody, clock, mint, token_pool,
                                        vesting_type_key, vesting_key):
        """Test that records stay unchanged when the token transfer fails."""
        drain = custody.open_account(new_key(), mint, new_key()).key
        custody.transfer(token_pool, drain, processor.pool_authority(vesting_type_key), POOL_TOKENS - 10)
        clock.now = 10_000

        with pytest.raises(NotEnoughTokensInPoolError):
            processor.withdraw_from_vesting(vesting_type_key, vesting_key, 100)

        assert store.load_record(vesting_key, VestingAccount).withdrawn_tokens == 0
        assert store.load_record(vesting_type_key, VestingTypeAccount).locked_tokens_amount == GRANT_TOKENS
        assert custody.balance(token_pool) == 10
