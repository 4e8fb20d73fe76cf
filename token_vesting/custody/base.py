"""Base classes for token custody backends."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Optional

from ..utils.keys import Pubkey


@dataclass(frozen=True)
class TokenAccount:
    """Token holding account as reported by the custody backend."""
    key: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int
    is_initialized: bool = True


class TokenCustody(ABC):
    """Base class for token custody backends."""

    @abstractmethod
    def get_account(self, key: Pubkey) -> Optional[TokenAccount]:
        """
        Look up a token account.

        Returns:
            The account, or None if ``key`` is not a token account
        """
        pass

    @abstractmethod
    def transfer(self, source: Pubkey, destination: Pubkey, authority: Pubkey, amount: int) -> None:
        """
        Move ``amount`` tokens from ``source`` to ``destination``.

        Raises:
            IncorrectAccountError: If ``authority`` does not own ``source``
                or the accounts hold different mints
            InvalidAccountDataError: If ``amount`` is negative
            NotEnoughTokensInPoolError: If ``source`` holds fewer tokens
        """
        pass

    @abstractmethod
    def set_owner(self, account: Pubkey, new_owner: Pubkey, current_owner: Pubkey) -> None:
        """Hand ownership of ``account`` from ``current_owner`` to ``new_owner``."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Any]:
        """Context manager discarding every movement made inside it on error."""
        pass

    def balance(self, key: Pubkey) -> int:
        account = self.get_account(key)
        return account.amount if account else 0
