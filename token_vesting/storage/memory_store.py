"""In-memory record storage."""

from contextlib import contextmanager
from typing import Iterator

from ..errors import IncorrectAccountError
from ..utils.keys import Pubkey, short_key
from .base import RecordStore, StoredRecord


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed store; transactions snapshot the dictionary."""

    def __init__(self):
        self._records: dict[Pubkey, StoredRecord] = {}
        self._depth = 0

    def get(self, key: Pubkey) -> StoredRecord:
        try:
            return self._records[key]
        except KeyError:
            raise IncorrectAccountError("Record does not exist", account=short_key(key)) from None

    def put(self, record: StoredRecord) -> None:
        self._records[record.key] = record

    def exists(self, key: Pubkey) -> bool:
        return key in self._records

    @contextmanager
    def transaction(self) -> Iterator["InMemoryRecordStore"]:
        snapshot = dict(self._records) if self._depth == 0 else None
        self._depth += 1
        try:
            yield self
        except BaseException:
            if snapshot is not None:
                self._records = snapshot
            raise
        finally:
            self._depth -= 1
