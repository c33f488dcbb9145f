"""
Database Adapters

This module contains concrete implementations of the DatabaseAdapter
interface for different database backends.
"""

from booking_voice.db.adapters.sqlite import SQLiteAdapter
from booking_voice.db.adapters.postgres import PostgresAdapter

__all__ = ["SQLiteAdapter", "PostgresAdapter"]
