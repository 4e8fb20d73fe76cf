"""
Error classification for schedule construction and vesting instructions.

Builder errors are pure validation failures raised while composing a
schedule. Vesting errors carry a stable numeric code and abort the current
instruction. Account errors are the generic authentication and ownership
failures reported on the records an instruction receives.
"""

from .accounts import (
    AccountError,
    ArithmeticOverflowError,
    IncorrectAccountError,
    InvalidAccountDataError,
    MissingRequiredSignatureError,
    RecordCodecError,
    UninitializedAccountError,
)
from .builder import (
    EmptyBuilderError,
    InitialUnlockTooBigError,
    InvalidTimeIntervalError,
    InvalidTokenAmountUsedError,
    ScheduleBuilderError,
    TooManyVestingsError,
    VestingsNotSortedError,
    ZeroTokensError,
)
from .configuration import ConfigurationError
from .vesting import (
    AlreadyInitializedError,
    DevestingAlreadySignedError,
    NotAdministratorError,
    NotEnoughTokensInPoolError,
    NotEnoughUnlockedTokensError,
    NotEnoughUnlockedTokensInPoolError,
    NotInitializedError,
    NotRentExemptError,
    ScheduleChangeForbiddenError,
    ScheduleIsNotValidError,
    VestingError,
    error_from_code,
)

__all__ = [
    # Schedule Builder Errors
    "ScheduleBuilderError",
    "EmptyBuilderError",
    "InvalidTokenAmountUsedError",
    "VestingsNotSortedError",
    "ZeroTokensError",
    "TooManyVestingsError",
    "InitialUnlockTooBigError",
    "InvalidTimeIntervalError",
    # Vesting Instruction Errors
    "VestingError",
    "AlreadyInitializedError",
    "NotRentExemptError",
    "ScheduleIsNotValidError",
    "NotEnoughTokensInPoolError",
    "NotAdministratorError",
    "NotInitializedError",
    "NotEnoughUnlockedTokensInPoolError",
    "NotEnoughUnlockedTokensError",
    "DevestingAlreadySignedError",
    "ScheduleChangeForbiddenError",
    "ConfigurationError",
    "error_from_code",
    # Account Errors
    "AccountError",
    "MissingRequiredSignatureError",
    "UninitializedAccountError",
    "InvalidAccountDataError",
    "IncorrectAccountError",
    "ArithmeticOverflowError",
    "RecordCodecError",
]
