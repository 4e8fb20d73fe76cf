"""
Persistent record data models.

Records are immutable; every state change produces a new record which the
caller stores. A record whose ``is_initialized`` flag is false is the zero
value read from freshly allocated storage.
"""

from dataclasses import dataclass, field, replace
from typing import ClassVar, Optional

from ..schedule.models import VestingSchedule
from ..utils.keys import ZERO_KEY, Pubkey

MAX_SIGNERS = 11


def _empty_schedule() -> VestingSchedule:
    return VestingSchedule(0)


@dataclass(frozen=True)
class VestingTypeAccount:
    """Pool-level record owning a schedule and the locked-token counter."""

    SIZE: ClassVar[int] = 482

    is_initialized: bool = False
    vesting_schedule: VestingSchedule = field(default_factory=_empty_schedule)
    locked_tokens_amount: int = 0
    administrator: Pubkey = ZERO_KEY
    token_pool: Pubkey = ZERO_KEY

    def with_locked_tokens(self, locked_tokens_amount: int) -> "VestingTypeAccount":
        return replace(self, locked_tokens_amount=locked_tokens_amount)


@dataclass(frozen=True)
class VestingAccount:
    """One beneficiary's grant against a vesting type."""

    SIZE: ClassVar[int] = 81

    is_initialized: bool = False
    total_tokens: int = 0
    withdrawn_tokens: int = 0
    token_account: Pubkey = ZERO_KEY
    vesting_type_account: Pubkey = ZERO_KEY

    @property
    def unvested_tokens(self) -> int:
        """Tokens of the grant that were never withdrawn."""
        return self.total_tokens - self.withdrawn_tokens

    def calculate_available_to_withdraw_amount(self, schedule: VestingSchedule, now: int) -> int:
        """Tokens unlocked by ``now`` and not withdrawn yet, never negative."""
        unlocked_amount = min(schedule.available(now), self.total_tokens)
        return max(unlocked_amount - self.withdrawn_tokens, 0)

    def with_withdrawal(self, amount: int) -> "VestingAccount":
        return replace(self, withdrawn_tokens=self.withdrawn_tokens + amount)


@dataclass(frozen=True)
class MultisigConfig:
    """External M-of-N multisig configuration the quorum policy is copied from."""

    SIZE: ClassVar[int] = 355

    m: int = 0
    n: int = 0
    is_initialized: bool = False
    signers: tuple[Pubkey, ...] = (ZERO_KEY,) * MAX_SIGNERS


@dataclass(frozen=True)
class RequiredSigners:
    """Static M-of-N devesting policy bound to one vesting type."""

    SIZE: ClassVar[int] = 387

    is_initialized: bool = False
    require_signers: tuple[Pubkey, ...] = (ZERO_KEY,) * MAX_SIGNERS
    require_number: int = 0
    all_number: int = 0
    vesting_type_account: Pubkey = ZERO_KEY

    def signer_index(self, signer: Pubkey) -> Optional[int]:
        """Slot of ``signer`` among the approvers, None if it is not one."""
        if signer == ZERO_KEY:
            return None
        try:
            return self.require_signers.index(signer)
        except ValueError:
            return None


@dataclass(frozen=True)
class CurrentSigners:
    """Per-grant bitmap of approvers that have signed its devesting."""

    SIZE: ClassVar[int] = 44

    is_initialized: bool = False
    current_signers: tuple[bool, ...] = (False,) * MAX_SIGNERS
    vesting_account: Pubkey = ZERO_KEY

    def has_signed(self, index: int) -> bool:
        return self.current_signers[index]

    def signed_count(self) -> int:
        return sum(1 for signed in self.current_signers if signed)

    def with_signature(self, index: int) -> "CurrentSigners":
        signers = list(self.current_signers)
        signers[index] = True
        return replace(self, current_signers=tuple(signers))


RECORD_TYPES = (VestingTypeAccount, VestingAccount, MultisigConfig, RequiredSigners, CurrentSigners)
