"""
Vesting instruction processor.

One method per instruction. Each runs inside a store and custody
transaction: all preconditions are checked before the first write, and any
error raised afterwards rolls every write back, so an instruction either
fully commits or leaves all records unchanged.
"""

from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Iterator, Optional

from ..config.defaults import DefaultConfig, get_default_config
from ..custody.base import TokenCustody
from ..errors import (
    AccountError,
    AlreadyInitializedError,
    ArithmeticOverflowError,
    NotAdministratorError,
    NotEnoughTokensInPoolError,
    NotEnoughUnlockedTokensError,
    NotEnoughUnlockedTokensInPoolError,
    NotInitializedError,
    ScheduleChangeForbiddenError,
    ScheduleIsNotValidError,
    VestingError,
)
from ..logging.config import get_instruction_logger, log_instruction_failure
from ..schedule.models import VestingSchedule
from ..state import quorum
from ..state.quorum import DevestingOutcome
from ..state.records import (
    CurrentSigners,
    MultisigConfig,
    RequiredSigners,
    VestingAccount,
    VestingTypeAccount,
)
from ..storage.base import RecordStore
from ..utils.keys import Pubkey, derive_key, short_key
from ..utils.time import Clock, SystemClock
from .context import Authenticator
from .validators import (
    U64_MAX,
    require_token_account,
    validate_owner,
    validate_rent_exempt,
    validate_same_mint,
    validate_signer,
    validate_token_amount,
    validate_uninitialized_vesting,
    validate_vesting,
    validate_vesting_type,
)

logger = get_instruction_logger(__name__)


class VestingProcessor:
    """Applies vesting instructions to stored records."""

    def __init__(
        self,
        store: RecordStore,
        custody: TokenCustody,
        authenticator: Authenticator,
        clock: Optional[Clock] = None,
        config: Optional[DefaultConfig] = None,
    ):
        self.store = store
        self.custody = custody
        self.authenticator = authenticator
        self.clock = clock or SystemClock()
        self.config = config or get_default_config()
        self.program_id = self.config.program_id
        self.logger = logger

    def pool_authority(self, vesting_type_key: Pubkey) -> Pubkey:
        """Identity that owns a vesting type's token pool once it is created."""
        return derive_key(self.program_id, vesting_type_key)

    @contextmanager
    def _instruction(self, name: str, **context: Any) -> Iterator[None]:
        self.logger.info("Processing instruction", instruction=name, **context)
        try:
            with self.store.transaction(), self.custody.transaction():
                yield
        except (VestingError, AccountError) as exc:
            log_instruction_failure(self.logger, name, exc, context)
            raise
        self.logger.info("Instruction committed", instruction=name)

    def create_vesting_type(
        self,
        administrator: Pubkey,
        vesting_type_key: Pubkey,
        token_pool_key: Pubkey,
        schedule: VestingSchedule,
    ) -> VestingTypeAccount:
        """
        Initialize a vesting type and take custody of its token pool.

        Raises:
            AlreadyInitializedError: The vesting type record is in use
            NotRentExemptError: Its storage deposit is too small
            ScheduleIsNotValidError: The schedule is unsorted or has empty vestings
        """
        with self._instruction("create_vesting_type", vesting_type=short_key(vesting_type_key)):
            validate_signer(self.authenticator, administrator)

            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
            if vesting_type.is_initialized:
                raise AlreadyInitializedError()
            validate_rent_exempt(self.store, vesting_type_key, self.config.rent)
            if not schedule.is_valid():
                raise ScheduleIsNotValidError()
            require_token_account(self.custody, token_pool_key)

            vesting_type = VestingTypeAccount(
                is_initialized=True,
                vesting_schedule=schedule,
                locked_tokens_amount=0,
                administrator=administrator,
                token_pool=token_pool_key,
            )
            self.store.store_record(vesting_type_key, vesting_type)
            self.custody.set_owner(token_pool_key, self.pool_authority(vesting_type_key), administrator)

        return vesting_type

    def create_vesting_account(
        self,
        administrator: Pubkey,
        vesting_type_key: Pubkey,
        vesting_key: Pubkey,
        token_account_key: Pubkey,
        total_tokens: int,
    ) -> VestingAccount:
        """
        Grant ``total_tokens`` of a vesting type's pool to a beneficiary.

        Raises:
            AlreadyInitializedError: The vesting record is in use
            NotAdministratorError: Caller does not administer the vesting type
            NotEnoughTokensInPoolError: The pool cannot cover the grant
        """
        with self._instruction("create_vesting_account", vesting=short_key(vesting_key),
                               total_tokens=total_tokens):
            validate_signer(self.authenticator, administrator)
            validate_token_amount(total_tokens)

            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
            vesting = self.store.load_record(vesting_key, VestingAccount)

            validate_uninitialized_vesting(vesting)
            validate_rent_exempt(self.store, vesting_key, self.config.rent)
            validate_vesting_type(vesting_type, administrator)
            token_pool = require_token_account(self.custody, vesting_type.token_pool)
            token_account = require_token_account(self.custody, token_account_key)
            validate_same_mint(token_account, token_pool)

            locked = vesting_type.locked_tokens_amount + total_tokens
            if locked > token_pool.amount:
                raise NotEnoughTokensInPoolError(
                    requested=total_tokens,
                    available=max(token_pool.amount - vesting_type.locked_tokens_amount, 0),
                )

            vesting = VestingAccount(
                is_initialized=True,
                total_tokens=total_tokens,
                withdrawn_tokens=0,
                token_account=token_account_key,
                vesting_type_account=vesting_type_key,
            )
            self.store.store_record(vesting_key, vesting)
            self.store.store_record(vesting_type_key, vesting_type.with_locked_tokens(locked))

        return vesting

    def available_to_withdraw(self, vesting_type_key: Pubkey, vesting_key: Pubkey) -> int:
        """Tokens the beneficiary of ``vesting_key`` could withdraw now."""
        vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
        vesting = self.store.load_record(vesting_key, VestingAccount)
        validate_vesting_type(vesting_type)
        validate_vesting(vesting, vesting_type_key)
        return vesting.calculate_available_to_withdraw_amount(vesting_type.vesting_schedule, self.clock())

    def withdraw_from_vesting(
        self,
        vesting_type_key: Pubkey,
        vesting_key: Pubkey,
        amount: int,
    ) -> VestingAccount:
        """
        Transfer ``amount`` unlocked tokens from the pool to the beneficiary.

        Raises:
            InvalidAccountDataError: ``amount`` is not a valid token amount
            NotEnoughUnlockedTokensError: Fewer tokens are unlocked and unwithdrawn
        """
        now = self.clock()
        with self._instruction("withdraw_from_vesting", vesting=short_key(vesting_key),
                               amount=amount, now=now):
            validate_token_amount(amount)
            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
            vesting = self.store.load_record(vesting_key, VestingAccount)

            validate_vesting_type(vesting_type)
            validate_vesting(vesting, vesting_type_key)

            available = vesting.calculate_available_to_withdraw_amount(vesting_type.vesting_schedule, now)
            if amount > available:
                raise NotEnoughUnlockedTokensError(requested=amount, available=available)
            if amount > vesting_type.locked_tokens_amount:
                raise ArithmeticOverflowError("Withdrawal exceeds the locked token counter")

            vesting = vesting.with_withdrawal(amount)
            self.store.store_record(vesting_key, vesting)
            self.store.store_record(
                vesting_type_key,
                vesting_type.with_locked_tokens(vesting_type.locked_tokens_amount - amount),
            )
            self.custody.transfer(
                vesting_type.token_pool,
                vesting.token_account,
                self.pool_authority(vesting_type_key),
                amount,
            )

        return vesting

    def withdraw_excessive_from_pool(
        self,
        administrator: Pubkey,
        vesting_type_key: Pubkey,
        destination_key: Pubkey,
        amount: int,
    ) -> int:
        """
        Transfer pool tokens not locked by any grant to ``destination_key``.

        Returns:
            Unlocked pool tokens remaining after the transfer

        Raises:
            NotEnoughUnlockedTokensInPoolError: The pool holds fewer unlocked tokens
        """
        with self._instruction("withdraw_excessive_from_pool",
                               vesting_type=short_key(vesting_type_key), amount=amount):
            validate_signer(self.authenticator, administrator)
            validate_token_amount(amount)
            validate_owner(self.store, vesting_type_key, self.program_id)

            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
            validate_vesting_type(vesting_type, administrator)
            token_pool = require_token_account(self.custody, vesting_type.token_pool)

            unlocked = max(token_pool.amount - vesting_type.locked_tokens_amount, 0)
            if amount > unlocked:
                raise NotEnoughUnlockedTokensInPoolError(requested=amount, available=unlocked)

            self.custody.transfer(
                vesting_type.token_pool,
                destination_key,
                self.pool_authority(vesting_type_key),
                amount,
            )

        return unlocked - amount

    def change_vesting_type_schedule(
        self,
        administrator: Pubkey,
        vesting_type_key: Pubkey,
        schedule: VestingSchedule,
    ) -> VestingTypeAccount:
        """
        Replace a vesting type's schedule, when schedule changes are enabled.

        Raises:
            ScheduleChangeForbiddenError: Schedule changes are disabled
            NotInitializedError: The vesting type is not initialized
        """
        with self._instruction("change_vesting_type_schedule",
                               vesting_type=short_key(vesting_type_key)):
            if not self.config.processor.allow_schedule_change:
                raise ScheduleChangeForbiddenError()
            validate_signer(self.authenticator, administrator)

            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
            if not vesting_type.is_initialized:
                raise NotInitializedError()
            if vesting_type.administrator != administrator:
                raise NotAdministratorError()
            if not schedule.is_valid():
                raise ScheduleIsNotValidError()

            vesting_type = replace(vesting_type, vesting_schedule=schedule)
            self.store.store_record(vesting_type_key, vesting_type)

        return vesting_type

    def create_multisig(
        self,
        administrator: Pubkey,
        vesting_type_key: Pubkey,
        multisig_key: Pubkey,
        required_signers_key: Pubkey,
    ) -> RequiredSigners:
        """Bind a devesting policy, copied from a multisig configuration, to a vesting type."""
        with self._instruction("create_multisig", vesting_type=short_key(vesting_type_key)):
            validate_signer(self.authenticator, administrator)

            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)
            required_signers = self.store.load_record(required_signers_key, RequiredSigners)
            multisig = self.store.load_record(multisig_key, MultisigConfig)

            required_signers = quorum.create_required_signers(
                required_signers, vesting_type, vesting_type_key, administrator, multisig
            )
            validate_rent_exempt(self.store, required_signers_key, self.config.rent)
            self.store.store_record(required_signers_key, required_signers)

        return required_signers

    def sign_devesting(
        self,
        signer: Pubkey,
        current_signers_key: Pubkey,
        required_signers_key: Pubkey,
        vesting_key: Pubkey,
        vesting_type_key: Pubkey,
    ) -> DevestingOutcome:
        """
        Record an approver's signature on a grant's devesting.

        The approval that reaches the policy's threshold closes the grant:
        its unvested tokens are released from the locked counter, the grant
        and signature records are reset, and their storage deposits move to
        the vesting type record.

        Raises:
            MissingRequiredSignatureError: Caller did not sign or is not an approver
            DevestingAlreadySignedError: Caller already approved this grant
        """
        with self._instruction("sign_devesting", vesting=short_key(vesting_key),
                               signer=short_key(signer)):
            validate_signer(self.authenticator, signer)

            required_signers = self.store.load_record(required_signers_key, RequiredSigners)
            current_signers = self.store.load_record(current_signers_key, CurrentSigners)
            vesting = self.store.load_record(vesting_key, VestingAccount)
            vesting_type = self.store.load_record(vesting_type_key, VestingTypeAccount)

            outcome = quorum.sign_devesting(
                signer,
                required_signers,
                current_signers,
                vesting_type,
                vesting,
                vesting_type_key,
                vesting_key,
            )

            self.store.store_record(current_signers_key, outcome.current_signers)
            if outcome.closed:
                self.store.store_record(vesting_type_key, outcome.vesting_type)
                self.store.store_record(vesting_key, outcome.vesting)
                self._reclaim_deposit(vesting_key, vesting_type_key)
                self._reclaim_deposit(current_signers_key, vesting_type_key)

        return outcome

    def _reclaim_deposit(self, closed_key: Pubkey, into_key: Pubkey) -> None:
        """Move the whole storage deposit of a closed record to ``into_key``."""
        amount = self.store.deposit(closed_key)
        total = self.store.deposit(into_key) + amount
        if total > U64_MAX:
            raise ArithmeticOverflowError("Storage deposit overflow", account=short_key(into_key))
        self.store.set_deposit(into_key, total)
        self.store.set_deposit(closed_key, 0)
