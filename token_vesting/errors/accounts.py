"""
Account error classifications.

Generic authentication, ownership and record-format failures reported on
the records an instruction receives. Like vesting errors they abort the
instruction without any write.
"""

from typing import Optional, Dict, Any


class AccountError(Exception):
    """Base class for record and caller validation failures."""

    def __init__(self, message: str, account: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.account = account
        self.context = context or {}
        self.recoverable = False


class MissingRequiredSignatureError(AccountError):
    """Caller did not authorize the instruction or is not an allowed signer."""


class UninitializedAccountError(AccountError):
    """Record was expected to be initialized."""


class InvalidAccountDataError(AccountError):
    """Record contents do not reference the expected counterpart."""


class IncorrectAccountError(AccountError):
    """Record key or owner is not the one required by the instruction."""


class ArithmeticOverflowError(AccountError):
    """Counter update would leave the unsigned 64-bit range."""


class RecordCodecError(AccountError):
    """Stored bytes cannot be decoded into, or encoded from, a record."""

    def __init__(self, message: str, record_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record_type = record_type
