"""Pytest configuration and shared fixtures."""

from typing import Any, Callable, Optional

import pytest

from token_vesting.config.defaults import DefaultConfig, get_default_config
from token_vesting.custody import InMemoryTokenCustody
from token_vesting.processor import StaticAuthenticator, VestingProcessor
from token_vesting.schedule import LinearVesting, ScheduleBuilder, VestingSchedule
from token_vesting.state.records import VestingAccount, VestingTypeAccount
from token_vesting.storage import InMemoryRecordStore
from token_vesting.utils.keys import Pubkey, new_key
from token_vesting.utils.time import FixedClock

POOL_TOKENS = 1_000_000
GRANT_TOKENS = 1_000


@pytest.fixture
def config() -> DefaultConfig:
    """Default runtime configuration."""
    return get_default_config()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def custody() -> InMemoryTokenCustody:
    return InMemoryTokenCustody()


@pytest.fixture
def administrator() -> Pubkey:
    return new_key()


@pytest.fixture
def mint() -> Pubkey:
    return new_key()


@pytest.fixture
def authenticator(administrator: Pubkey) -> StaticAuthenticator:
    """Authenticator where only the administrator has signed."""
    return StaticAuthenticator([administrator])


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(0)


@pytest.fixture
def processor(store, custody, authenticator, clock, config) -> VestingProcessor:
    return VestingProcessor(store, custody, authenticator, clock=clock, config=config)


@pytest.fixture
def make_record(store, config) -> Callable[..., Pubkey]:
    """
    Factory allocating a zero-filled record buffer.

    The buffer is owned by the vesting program and carries a rent-exempt
    deposit unless ``deposit`` says otherwise.
    """
    def _make(record_type: Any, deposit: Optional[int] = None, record: Any = None) -> Pubkey:
        key = new_key()
        if deposit is None:
            deposit = config.rent.minimum_balance(record_type.SIZE)
        store.create(key, record_type.SIZE, deposit, config.program_id)
        if record is not None:
            store.store_record(key, record)
        return key

    return _make


@pytest.fixture
def schedule() -> VestingSchedule:
    """400 tokens at t=1000, then 600 tokens in three steps at t=2000, 3000, 4000."""
    return (
        ScheduleBuilder.with_tokens(GRANT_TOKENS)
        .cliff(1_000, 400)
        .add(LinearVesting(2_000, 1_000, 3))
        .build()
    )


@pytest.fixture
def token_pool(custody, mint, administrator) -> Pubkey:
    """Administrator-owned token pool holding POOL_TOKENS."""
    return custody.open_account(new_key(), mint, administrator, POOL_TOKENS).key


@pytest.fixture
def vesting_type_key(processor, make_record, administrator, token_pool, schedule) -> Pubkey:
    """Initialized vesting type over ``token_pool``."""
    key = make_record(VestingTypeAccount)
    processor.create_vesting_type(administrator, key, token_pool, schedule)
    return key


@pytest.fixture
def beneficiary_account(custody, mint) -> Pubkey:
    return custody.open_account(new_key(), mint, new_key()).key


@pytest.fixture
def vesting_key(processor, make_record, administrator, vesting_type_key, beneficiary_account) -> Pubkey:
    """Grant of GRANT_TOKENS against ``vesting_type_key``."""
    key = make_record(VestingAccount)
    processor.create_vesting_account(
        administrator, vesting_type_key, key, beneficiary_account, GRANT_TOKENS
    )
    return key
