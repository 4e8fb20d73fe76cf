"""Caller authentication collaborators."""

from abc import ABC, abstractmethod
from typing import Iterable

from ..utils.keys import Pubkey


class Authenticator(ABC):
    """Reports which parties authorized the current instruction."""

    @abstractmethod
    def is_authenticated(self, identity: Pubkey) -> bool:
        pass


class StaticAuthenticator(Authenticator):
    """Authenticator over an explicit set of signing identities."""

    def __init__(self, identities: Iterable[Pubkey] = ()):
        self._identities = set(identities)

    def grant(self, identity: Pubkey) -> None:
        self._identities.add(identity)

    def revoke(self, identity: Pubkey) -> None:
        self._identities.discard(identity)

    def is_authenticated(self, identity: Pubkey) -> bool:
        return identity in self._identities
