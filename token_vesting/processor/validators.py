"""
Precondition checks shared by vesting instructions.

Each check raises on failure and returns nothing, so an instruction is a
sequence of checks followed by writes.
"""

from typing import Optional

from ..config.defaults import RentParams
from ..custody.base import TokenAccount, TokenCustody
from ..errors import (
    AlreadyInitializedError,
    IncorrectAccountError,
    InvalidAccountDataError,
    MissingRequiredSignatureError,
    NotAdministratorError,
    NotRentExemptError,
    UninitializedAccountError,
)
from ..state.records import VestingAccount, VestingTypeAccount
from ..storage.base import RecordStore
from ..utils.keys import Pubkey, short_key
from .context import Authenticator

U64_MAX = 2**64 - 1


def validate_signer(authenticator: Authenticator, signer: Pubkey) -> None:
    if not authenticator.is_authenticated(signer):
        raise MissingRequiredSignatureError("Instruction is not signed by the caller",
                                            account=short_key(signer))


def validate_token_amount(amount: int) -> None:
    """Token amounts are unsigned 64-bit integers."""
    if not 0 <= amount <= U64_MAX:
        raise InvalidAccountDataError("Token amount is outside the unsigned 64-bit range",
                                      context={"amount": amount})


def validate_rent_exempt(store: RecordStore, key: Pubkey, rent: RentParams) -> None:
    deposit = store.deposit(key)
    required = rent.minimum_balance(store.size(key))
    if deposit < required:
        raise NotRentExemptError(deposit=deposit, required=required)


def validate_owner(store: RecordStore, key: Pubkey, program_id: Pubkey) -> None:
    if store.owner(key) != program_id:
        raise IncorrectAccountError("Record is not owned by the vesting program",
                                    account=short_key(key))


def validate_vesting_type(
    vesting_type: VestingTypeAccount,
    administrator: Optional[Pubkey] = None,
) -> None:
    """Vesting type must be initialized and, if given, administered by ``administrator``."""
    if not vesting_type.is_initialized:
        raise UninitializedAccountError("Vesting type is not initialized")
    if administrator is not None and vesting_type.administrator != administrator:
        raise NotAdministratorError()


def validate_uninitialized_vesting(vesting: VestingAccount) -> None:
    if vesting.is_initialized:
        raise AlreadyInitializedError()


def validate_vesting(vesting: VestingAccount, vesting_type_key: Pubkey) -> None:
    if not vesting.is_initialized:
        raise UninitializedAccountError("Vesting is not initialized")
    if vesting.vesting_type_account != vesting_type_key:
        raise InvalidAccountDataError("Vesting belongs to another vesting type")


def require_token_account(custody: TokenCustody, key: Pubkey) -> TokenAccount:
    account = custody.get_account(key)
    if account is None or not account.is_initialized:
        raise IncorrectAccountError("Not an initialized token account", account=short_key(key))
    return account


def validate_same_mint(token_account: TokenAccount, token_pool: TokenAccount) -> None:
    if token_account.mint != token_pool.mint:
        raise InvalidAccountDataError("Token account holds a different mint than the pool",
                                      account=short_key(token_account.key))
