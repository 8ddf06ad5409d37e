"""
Database connection management.

Provides the SQLite connection and key-value schema backing persistence.
"""

import sqlite3
from pathlib import Path


def get_connection(db_path: str = "caffeine_tracker.db") -> sqlite3.Connection:
    """Create and return a SQLite database connection.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection
    """
    path = Path(db_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(path))


def initialize_schema(db_path: str = "caffeine_tracker.db") -> None:
    """Create the kv_store table if it doesn't exist.

    Each persisted collection (dose history, favorites, profile) lives in
    its own row, keyed by slot name, and is always rewritten whole.

    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()
