"""SQLite-backed record storage."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..errors import IncorrectAccountError
from ..logging.config import get_logger
from ..utils.keys import Pubkey, short_key
from .base import RecordStore, StoredRecord


class SqliteRecordStore(RecordStore):
    """
    SQLite-based record store.

    Outside a transaction each write commits on its own. Inside one, all
    reads and writes go through a single connection that commits when the
    outermost block exits and rolls back if it raises.
    """

    def __init__(self, db_path: str = "records.db"):
        self.db_path = Path(db_path)
        self.logger = get_logger("record.store")
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    key BLOB PRIMARY KEY,
                    owner BLOB NOT NULL,
                    deposit INTEGER NOT NULL DEFAULT 0,
                    data BLOB NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_records_owner ON records(owner)
            """)

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get the transaction connection, or a short-lived committing one."""
        if self._conn is not None:
            yield self._conn
            return

        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e))
            raise
        finally:
            if conn:
                conn.close()

    def get(self, key: Pubkey) -> StoredRecord:
        with self._lock, self._get_connection() as conn:
            row = conn.execute(
                "SELECT key, owner, deposit, data FROM records WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            raise IncorrectAccountError("Record does not exist", account=short_key(key))
        return StoredRecord(key=bytes(row[0]), owner=bytes(row[1]), deposit=row[2], data=bytes(row[3]))

    def put(self, record: StoredRecord) -> None:
        with self._lock, self._get_connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO records (key, owner, deposit, data)
                VALUES (?, ?, ?, ?)
            """, (record.key, record.owner, record.deposit, record.data))

    def exists(self, key: Pubkey) -> bool:
        with self._lock, self._get_connection() as conn:
            row = conn.execute("SELECT 1 FROM records WHERE key = ?", (key,)).fetchone()
        return row is not None

    def count(self) -> int:
        with self._lock, self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM records").fetchone()[0]

    @contextmanager
    def transaction(self) -> Iterator["SqliteRecordStore"]:
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._conn = sqlite3.connect(self.db_path, timeout=30.0)
            self._depth = 1
            try:
                yield self
                self._conn.commit()
            except BaseException:
                self._conn.rollback()
                self.logger.warning("Transaction rolled back", db_path=str(self.db_path))
                raise
            finally:
                self._conn.close()
                self._conn = None
                self._depth = 0
