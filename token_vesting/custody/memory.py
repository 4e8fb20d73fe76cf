"""In-memory token ledger."""

from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, Optional

import structlog

from ..errors import IncorrectAccountError, InvalidAccountDataError, NotEnoughTokensInPoolError
from ..utils.keys import Pubkey, short_key
from .base import TokenAccount, TokenCustody

logger = structlog.get_logger(__name__)


class InMemoryTokenCustody(TokenCustody):
    """Dictionary-backed token ledger for local runs and tests."""

    def __init__(self):
        self._accounts: dict[Pubkey, TokenAccount] = {}
        self._depth = 0

    def open_account(self, key: Pubkey, mint: Pubkey, owner: Pubkey, amount: int = 0) -> TokenAccount:
        account = TokenAccount(key=key, mint=mint, owner=owner, amount=amount)
        self._accounts[key] = account
        return account

    def mint_to(self, key: Pubkey, amount: int) -> None:
        account = self._require(key)
        self._accounts[key] = replace(account, amount=account.amount + amount)

    def get_account(self, key: Pubkey) -> Optional[TokenAccount]:
        return self._accounts.get(key)

    def _require(self, key: Pubkey) -> TokenAccount:
        account = self._accounts.get(key)
        if account is None:
            raise IncorrectAccountError("Not a token account", account=short_key(key))
        return account

    def transfer(self, source: Pubkey, destination: Pubkey, authority: Pubkey, amount: int) -> None:
        if amount < 0:
            raise InvalidAccountDataError("Transfer amount must not be negative",
                                          context={"amount": amount})
        src = self._require(source)
        dst = self._require(destination)
        if src.owner != authority:
            raise IncorrectAccountError("Authority does not own the source account",
                                        account=short_key(source))
        if src.mint != dst.mint:
            raise IncorrectAccountError("Accounts hold different mints", account=short_key(destination))
        if src.amount < amount:
            raise NotEnoughTokensInPoolError(requested=amount, available=src.amount)

        self._accounts[source] = replace(src, amount=src.amount - amount)
        dst = self._accounts[destination]
        self._accounts[destination] = replace(dst, amount=dst.amount + amount)
        logger.debug("Tokens transferred", source=short_key(source),
                     destination=short_key(destination), amount=amount)

    def set_owner(self, account: Pubkey, new_owner: Pubkey, current_owner: Pubkey) -> None:
        token_account = self._require(account)
        if token_account.owner != current_owner:
            raise IncorrectAccountError("Caller does not own the token account",
                                        account=short_key(account))
        self._accounts[account] = replace(token_account, owner=new_owner)

    @contextmanager
    def transaction(self) -> Iterator["InMemoryTokenCustody"]:
        snapshot = dict(self._accounts) if self._depth == 0 else None
        self._depth += 1
        try:
            yield self
        except BaseException:
            if snapshot is not None:
                self._accounts = snapshot
            raise
        finally:
            self._depth -= 1
