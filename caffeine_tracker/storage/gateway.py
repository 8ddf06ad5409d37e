"""
Storage gateways.

Key-value slots the ledger, favorites and profile are persisted into.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from .db import get_connection, initialize_schema


class StorageGateway(ABC):
    """Minimal key-value contract required by the repositories."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes for key, or None if the slot is empty."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Replace the stored bytes for key."""


class InMemoryGateway(StorageGateway):
    """Dictionary-backed gateway, used in tests and for throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._slots: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._slots.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._slots[key] = value


class SqliteGateway(StorageGateway):
    """Gateway writing slots to the kv_store table of a SQLite file.

    A connection is opened per call and closed afterwards, so every write
    is committed before set() returns.
    """

    def __init__(self, db_path: str = "caffeine_tracker.db"):
        """Initialize the gateway and make sure the schema exists.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        initialize_schema(db_path)

    def get(self, key: str) -> Optional[bytes]:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
            if row is None:
                return None
            return bytes(row[0])
        finally:
            conn.close()

    def set(self, key: str, value: bytes) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                (key, value)
            )
            conn.commit()
        finally:
            conn.close()
