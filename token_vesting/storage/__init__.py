"""
Record storage module.

Fixed-capacity byte buffers per record identifier, with the storage
deposit and owning program of each record, and all-or-nothing transactions.
"""

from .base import RecordStore, StoredRecord
from .memory_store import InMemoryRecordStore
from .sqlite_store import SqliteRecordStore

__all__ = ["RecordStore", "StoredRecord", "InMemoryRecordStore", "SqliteRecordStore"]
