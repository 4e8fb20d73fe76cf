"""
Quorum-gated devesting state machine.

A vesting type's devesting policy (RequiredSigners) is copied once from an
external M-of-N multisig configuration. Approvers then sign the devesting
of a grant one at a time; their signatures accumulate in the grant's
CurrentSigners bitmap. The approval that brings the count to M closes the
grant: its unvested tokens are released from the vesting type's locked
counter and the grant and bitmap are reset to their zero values.

Every function here validates all preconditions before computing new
records and never mutates its inputs, so a raised error leaves the caller's
records untouched.
"""

from dataclasses import dataclass
from enum import Enum

from ..errors import (
    AlreadyInitializedError,
    ArithmeticOverflowError,
    DevestingAlreadySignedError,
    InvalidAccountDataError,
    MissingRequiredSignatureError,
    NotAdministratorError,
    UninitializedAccountError,
)
from ..logging.config import get_quorum_logger, log_state_transition
from ..utils.keys import Pubkey, short_key
from .records import (
    MAX_SIGNERS,
    CurrentSigners,
    MultisigConfig,
    RequiredSigners,
    VestingAccount,
    VestingTypeAccount,
)

quorum_logger = get_quorum_logger(__name__)


class DevestingState(str, Enum):
    """Lifecycle of a grant's devesting."""
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(frozen=True)
class DevestingOutcome:
    """Records produced by one accepted devesting approval."""

    current_signers: CurrentSigners
    vesting_type: VestingTypeAccount
    vesting: VestingAccount
    signer_index: int
    signed_count: int
    required: int
    released_tokens: int = 0

    @property
    def closed(self) -> bool:
        return self.signed_count >= self.required

    @property
    def state(self) -> DevestingState:
        return DevestingState.CLOSED if self.closed else DevestingState.ACTIVE


def create_required_signers(
    required_signers: RequiredSigners,
    vesting_type: VestingTypeAccount,
    vesting_type_key: Pubkey,
    administrator: Pubkey,
    multisig: MultisigConfig,
) -> RequiredSigners:
    """Derive the devesting policy of a vesting type from a multisig configuration."""
    if required_signers.is_initialized:
        raise AlreadyInitializedError()
    if not vesting_type.is_initialized:
        raise UninitializedAccountError("Vesting type is not initialized",
                                        account=short_key(vesting_type_key))
    if vesting_type.administrator != administrator:
        raise NotAdministratorError()
    if not multisig.is_initialized:
        raise UninitializedAccountError("Multisig configuration is not initialized")
    if not 1 <= multisig.m <= multisig.n <= MAX_SIGNERS:
        raise InvalidAccountDataError(
            f"Multisig requires {multisig.m} of {multisig.n} signers",
            context={"m": multisig.m, "n": multisig.n},
        )

    return RequiredSigners(
        is_initialized=True,
        require_signers=tuple(multisig.signers),
        require_number=multisig.m,
        all_number=multisig.n,
        vesting_type_account=vesting_type_key,
    )


def _validate_grant(
    vesting_type: VestingTypeAccount,
    vesting: VestingAccount,
    vesting_type_key: Pubkey,
) -> None:
    if not vesting_type.is_initialized:
        raise UninitializedAccountError("Vesting type is not initialized",
                                        account=short_key(vesting_type_key))
    if not vesting.is_initialized:
        raise UninitializedAccountError("Vesting is not initialized")
    if vesting.vesting_type_account != vesting_type_key:
        raise InvalidAccountDataError("Vesting belongs to another vesting type")


def close_vesting(
    vesting_type: VestingTypeAccount,
    vesting: VestingAccount,
    vesting_type_key: Pubkey,
) -> tuple[VestingTypeAccount, VestingAccount]:
    """Release a grant's unvested tokens and reset it to its zero value."""
    _validate_grant(vesting_type, vesting, vesting_type_key)

    locked = vesting_type.locked_tokens_amount - vesting.unvested_tokens
    if locked < 0 or vesting.unvested_tokens < 0:
        raise ArithmeticOverflowError(
            "Closing the vesting would underflow the locked token counter",
            context={"locked": vesting_type.locked_tokens_amount,
                     "unvested": vesting.unvested_tokens},
        )

    return vesting_type.with_locked_tokens(locked), VestingAccount()


def sign_devesting(
    signer: Pubkey,
    required_signers: RequiredSigners,
    current_signers: CurrentSigners,
    vesting_type: VestingTypeAccount,
    vesting: VestingAccount,
    vesting_type_key: Pubkey,
    vesting_key: Pubkey,
) -> DevestingOutcome:
    """
    Record ``signer``'s approval and close the grant once the quorum is met.

    ``signer`` must already be authenticated by the caller. An uninitialized
    bitmap is bound to ``vesting_key`` by the first approval.

    Raises:
        MissingRequiredSignatureError: signer is not one of the approvers
        UninitializedAccountError: policy, vesting type or grant records are
            not initialized; checked before any approval is recorded
        InvalidAccountDataError: records are bound to other records
        DevestingAlreadySignedError: signer already approved this grant
    """
    index = required_signers.signer_index(signer)
    if index is None:
        raise MissingRequiredSignatureError("Signer is not a devesting approver",
                                            account=short_key(signer))

    if not required_signers.is_initialized:
        raise UninitializedAccountError("Devesting policy is not initialized")
    if required_signers.vesting_type_account != vesting_type_key:
        raise InvalidAccountDataError("Devesting policy belongs to another vesting type")
    _validate_grant(vesting_type, vesting, vesting_type_key)

    from_state = DevestingState.ACTIVE
    if not current_signers.is_initialized:
        from_state = DevestingState.UNINITIALIZED
        current_signers = CurrentSigners(is_initialized=True, vesting_account=vesting_key)
    elif current_signers.vesting_account != vesting_key:
        raise InvalidAccountDataError("Signatures belong to another vesting")

    if current_signers.has_signed(index):
        raise DevestingAlreadySignedError(signer_index=index)

    updated_signers = current_signers.with_signature(index)
    signed_count = updated_signers.signed_count()
    required = required_signers.require_number

    if signed_count < required:
        log_state_transition(
            quorum_logger,
            record_id=short_key(vesting_key),
            from_state=from_state.value,
            to_state=DevestingState.ACTIVE.value,
            trigger="devesting_signed",
            context={"signer_index": index, "signed": signed_count, "required": required},
        )
        return DevestingOutcome(
            current_signers=updated_signers,
            vesting_type=vesting_type,
            vesting=vesting,
            signer_index=index,
            signed_count=signed_count,
            required=required,
        )

    closed_type, closed_vesting = close_vesting(vesting_type, vesting, vesting_type_key)
    released = vesting_type.locked_tokens_amount - closed_type.locked_tokens_amount

    log_state_transition(
        quorum_logger,
        record_id=short_key(vesting_key),
        from_state=from_state.value,
        to_state=DevestingState.CLOSED.value,
        trigger="quorum_reached",
        context={
            "signer_index": index,
            "signed": signed_count,
            "required": required,
            "released_tokens": released,
        },
    )
    return DevestingOutcome(
        current_signers=CurrentSigners(),
        vesting_type=closed_type,
        vesting=closed_vesting,
        signer_index=index,
        signed_count=signed_count,
        required=required,
        released_tokens=released,
    )
