"""
Vesting instruction error classifications.

Each error aborts the instruction that raised it and leaves every record
unchanged. The numeric codes are stable and match the custom error codes
stored by existing clients, so they must never be renumbered.
"""

from typing import Optional, Dict, Any


class VestingError(Exception):
    """Base class for failures surfaced as an instruction's result."""

    code: int = -1
    default_message: str = "Vesting instruction failed"

    def __init__(self, message: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.default_message)
        self.context = context or {}
        self.recoverable = False


class AlreadyInitializedError(VestingError):
    code = 0
    default_message = "Initialized account is already initialized!"


class NotRentExemptError(VestingError):
    code = 1
    default_message = "Account isn't rent exempt!"

    def __init__(self, message: Optional[str] = None, deposit: Optional[int] = None,
                 required: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.deposit = deposit
        self.required = required


class ScheduleIsNotValidError(VestingError):
    code = 2
    default_message = "Passed vesting schedule is not valid!"


class NotEnoughTokensInPoolError(VestingError):
    code = 3
    default_message = "Not enough tokens in pool to create vesting!"

    def __init__(self, message: Optional[str] = None, requested: Optional[int] = None,
                 available: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.requested = requested
        self.available = available


class NotAdministratorError(VestingError):
    code = 4
    default_message = "Not an administrator of a given Vesting Type!"


class NotInitializedError(VestingError):
    code = 5
    default_message = "Initialized account has not been initialized yet!"


class NotEnoughUnlockedTokensInPoolError(VestingError):
    code = 6
    default_message = "Not enough unlocked tokens in pool!"

    def __init__(self, message: Optional[str] = None, requested: Optional[int] = None,
                 available: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.requested = requested
        self.available = available


class NotEnoughUnlockedTokensError(VestingError):
    code = 7
    default_message = "Not enough unlocked tokens to withdraw!"

    def __init__(self, message: Optional[str] = None, requested: Optional[int] = None,
                 available: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.requested = requested
        self.available = available


class DevestingAlreadySignedError(VestingError):
    code = 8
    default_message = "Devesting has already signed by account !"

    def __init__(self, message: Optional[str] = None, signer_index: Optional[int] = None,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.signer_index = signer_index


class ScheduleChangeForbiddenError(VestingError):
    code = 9
    default_message = "Changing vesting type is forbidden"


_ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        AlreadyInitializedError,
        NotRentExemptError,
        ScheduleIsNotValidError,
        NotEnoughTokensInPoolError,
        NotAdministratorError,
        NotInitializedError,
        NotEnoughUnlockedTokensInPoolError,
        NotEnoughUnlockedTokensError,
        DevestingAlreadySignedError,
        ScheduleChangeForbiddenError,
    )
}


def error_from_code(code: int) -> VestingError:
    """Rebuild the error instance reported under a custom error code."""
    try:
        return _ERRORS_BY_CODE[code]()
    except KeyError:
        raise ValueError(f"Unknown vesting error code: {code}") from None
