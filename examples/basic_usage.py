#!/usr/bin/env python3
"""
Basic Usage Example - Token Vesting Engine

This script walks one vesting type through its lifecycle with in-memory
storage and a fixed clock. It shows how to:
- Compose a schedule with the builder
- Create a vesting type and grants against its token pool
- Withdraw unlocked tokens as time advances
- Devest a grant with an M-of-N approver quorum

Run: python examples/basic_usage.py
"""

from token_vesting.custody import InMemoryTokenCustody
from token_vesting.logging import configure_logging
from token_vesting.processor import StaticAuthenticator, VestingProcessor
from token_vesting.schedule import LinearVesting, ScheduleBuilder
from token_vesting.state.records import (
    MAX_SIGNERS,
    CurrentSigners,
    MultisigConfig,
    RequiredSigners,
    VestingAccount,
    VestingTypeAccount,
)
from token_vesting.storage import InMemoryRecordStore
from token_vesting.utils.keys import ZERO_KEY, new_key, short_key
from token_vesting.utils.time import MONTH, FixedClock, format_timestamp

LISTING = 1_646_092_800


def allocate(store, processor, record_type, record=None):
    """Allocate a rent-exempt record buffer owned by the vesting program."""
    key = new_key()
    deposit = processor.config.rent.minimum_balance(record_type.SIZE)
    store.create(key, record_type.SIZE, deposit, processor.program_id)
    if record is not None:
        store.store_record(key, record)
    return key


def main():
    configure_logging(level="INFO")

    store = InMemoryRecordStore()
    custody = InMemoryTokenCustody()
    administrator = new_key()
    approvers = [new_key() for _ in range(3)]
    authenticator = StaticAuthenticator([administrator, *approvers])
    clock = FixedClock(LISTING - MONTH)
    processor = VestingProcessor(store, custody, authenticator, clock=clock)

    print("🏗️ SETUP")
    print("=" * 50)
    schedule = (
        ScheduleBuilder.with_tokens(1_000_000)
        .cliff(LISTING, 60_000)
        .cliff(LISTING + 6 * MONTH, 90_000)
        .offseted_by(6 * MONTH, LinearVesting.without_start(2 * MONTH, 6))
        .build()
    )
    for amount, vesting in schedule:
        print(f"   {amount:>9} tokens from {format_timestamp(vesting.start_time)} "
              f"in {vesting.unlock_count} unlocks")

    mint = new_key()
    pool = custody.open_account(new_key(), mint, administrator, 3_000_000).key
    vesting_type = allocate(store, processor, VestingTypeAccount)
    processor.create_vesting_type(administrator, vesting_type, pool, schedule)

    beneficiaries = {}
    for name in ("alice", "bob"):
        token_account = custody.open_account(new_key(), mint, new_key()).key
        vesting = allocate(store, processor, VestingAccount)
        processor.create_vesting_account(administrator, vesting_type, vesting, token_account, 1_000_000)
        beneficiaries[name] = (vesting, token_account)
        print(f"   Granted 1000000 tokens to {name} ({short_key(vesting)})")

    print("\n⏱️ WITHDRAWALS")
    print("=" * 50)
    alice_vesting, alice_account = beneficiaries["alice"]
    for months in (1, 7, 13, 23):
        clock.now = LISTING + (months - 1) * MONTH
        available = processor.available_to_withdraw(vesting_type, alice_vesting)
        if available:
            processor.withdraw_from_vesting(vesting_type, alice_vesting, available)
        print(f"   {format_timestamp(clock.now)}: withdrew {available}, "
              f"balance {custody.balance(alice_account)}")

    print("\n🗳️ DEVESTING")
    print("=" * 50)
    multisig = allocate(store, processor, MultisigConfig, MultisigConfig(
        m=2, n=3, is_initialized=True,
        signers=tuple(approvers) + (ZERO_KEY,) * (MAX_SIGNERS - len(approvers)),
    ))
    required_signers = allocate(store, processor, RequiredSigners)
    processor.create_multisig(administrator, vesting_type, multisig, required_signers)

    bob_vesting, _ = beneficiaries["bob"]
    current_signers = allocate(store, processor, CurrentSigners)
    for approver in approvers[:2]:
        outcome = processor.sign_devesting(
            approver, current_signers, required_signers, bob_vesting, vesting_type
        )
        print(f"   Approver {outcome.signer_index} signed: "
              f"{outcome.signed_count}/{outcome.required} ({outcome.state.value})")
    print(f"   Released {outcome.released_tokens} tokens back to the pool")

    record = store.load_record(vesting_type, VestingTypeAccount)
    print(f"\n   Pool balance {custody.balance(pool)}, locked {record.locked_tokens_amount}")


if __name__ == "__main__":
    main()
