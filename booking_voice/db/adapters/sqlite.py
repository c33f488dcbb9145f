"""
SQLite Database Adapter

Implementation of the DatabaseAdapter interface on the standard library
sqlite3 module. Used for local development and tests (``:memory:``).
"""

import logging
import sqlite3
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from booking_voice.db.base import DatabaseAdapter
from booking_voice.db.models import SQLITE_SCHEMA

logger = logging.getLogger(__name__)


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Keeps a single autocommit connection for the lifetime of the adapter;
    statements are short, so they run inline on the event loop.
    """

    def __init__(self, db_path: str = "booking_voice.db"):
        """
        Initialize SQLite adapter.

        Args:
            db_path: Path to the database file, or ``:memory:``
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    async def connect(self) -> bool:
        """Open the SQLite connection."""
        try:
            self._conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                isolation_level=None,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            logger.info(f"Connected to SQLite database: {self.db_path}")
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to SQLite: {e}")
            self._conn = None
            return False

    async def disconnect(self) -> None:
        """Close the SQLite connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("Disconnected from SQLite database")

    async def initialize_schema(self) -> bool:
        """Create necessary tables if they don't exist."""
        if not self._conn:
            logger.error("Cannot initialize schema: Not connected")
            return False

        try:
            self._conn.executescript(SQLITE_SCHEMA)
            logger.info("SQLite schema initialized successfully")
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize SQLite schema: {e}")
            return False

    async def execute(self, query: str, params: tuple = ()) -> Any:
        """Execute a raw SQL query and return the affected row count."""
        cursor = self._cursor(query, params)
        return cursor.rowcount

    async def fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute query and return single row as dict."""
        row = self._cursor(query, params).fetchone()
        return dict(row) if row else None

    async def fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Execute query and return all rows as list of dicts."""
        rows = self._cursor(query, params).fetchall()
        return [dict(row) for row in rows]

    def is_connected(self) -> bool:
        """Check if database connection is active."""
        return self._conn is not None

    def _cursor(self, query: str, params: tuple) -> sqlite3.Cursor:
        if not self._conn:
            raise ConnectionError("Not connected to database")

        try:
            return self._conn.execute(query, tuple(self._to_sqlite(p) for p in params))
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {e}\nQuery: {query}")
            raise

    @staticmethod
    def _to_sqlite(value: Any) -> Any:
        """Convert Python values to SQLite storage types."""
        if isinstance(value, datetime):
            return value.isoformat(timespec="microseconds")
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, bool):
            return int(value)
        return value
