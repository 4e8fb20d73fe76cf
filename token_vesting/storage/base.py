"""Base classes for record storage backends."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from ..errors import IncorrectAccountError, RecordCodecError
from ..state.codec import decode, encode
from ..utils.keys import Pubkey, short_key

R = TypeVar("R")


@dataclass(frozen=True)
class StoredRecord:
    """Raw record buffer with its bookkeeping."""
    key: Pubkey
    owner: Pubkey
    deposit: int
    data: bytes


class RecordStore(ABC):
    """
    Base class for record storage.

    Backends implement raw get/put and transactions; encoding records and
    deposit bookkeeping are shared here.
    """

    @abstractmethod
    def get(self, key: Pubkey) -> StoredRecord:
        """
        Fetch a stored record.

        Raises:
            IncorrectAccountError: If no record exists under ``key``
        """
        pass

    @abstractmethod
    def put(self, record: StoredRecord) -> None:
        """Insert or replace a stored record."""
        pass

    @abstractmethod
    def exists(self, key: Pubkey) -> bool:
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Any]:
        """
        Context manager making every write inside it all-or-nothing.

        An exception leaving the block discards all writes made within it.
        Nested transactions join the outermost one.
        """
        pass

    def create(self, key: Pubkey, size: int, deposit: int, owner: Pubkey) -> StoredRecord:
        """Allocate a zero-filled record buffer."""
        if self.exists(key):
            raise IncorrectAccountError("Record already exists", account=short_key(key))
        record = StoredRecord(key=key, owner=owner, deposit=deposit, data=bytes(size))
        self.put(record)
        return record

    def load(self, key: Pubkey) -> bytes:
        return self.get(key).data

    def store(self, key: Pubkey, data: bytes) -> None:
        """Overwrite the buffer of ``key``; its capacity is fixed."""
        record = self.get(key)
        if len(data) != len(record.data):
            raise RecordCodecError(
                f"Buffer holds {len(record.data)} bytes, got {len(data)}",
                account=short_key(key),
            )
        self.put(replace(record, data=bytes(data)))

    def deposit(self, key: Pubkey) -> int:
        return self.get(key).deposit

    def set_deposit(self, key: Pubkey, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Deposit must not be negative: {amount}")
        self.put(replace(self.get(key), deposit=amount))

    def owner(self, key: Pubkey) -> Pubkey:
        return self.get(key).owner

    def size(self, key: Pubkey) -> int:
        return len(self.get(key).data)

    def load_record(self, key: Pubkey, record_type: type[R]) -> R:
        return decode(record_type, self.load(key))

    def store_record(self, key: Pubkey, record: Any) -> None:
        self.store(key, encode(record))
