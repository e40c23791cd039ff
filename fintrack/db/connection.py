"""
Database connection management.
Provides context manager for SQLite connections.
"""
import sqlite3
import os
from contextlib import contextmanager

import pandas as pd

from fintrack.exceptions import DatabaseError
from fintrack.logger import logger


# Get absolute path to the database
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DB_PATH = os.path.join(PROJECT_ROOT, "Data", "fintrack.db")


def get_db_path() -> str:
    """Database file in use; the DB_PATH environment variable wins (used in tests)."""
    return os.environ.get("DB_PATH", DB_PATH)


@contextmanager
def get_db_connection():
    """
    Context manager for database connections.

    Ensures proper connection handling with automatic cleanup.

    Yields:
        sqlite3.Connection: Database connection object

    Raises:
        DatabaseError: if the connection or a statement fails, including
            queries run through pd.read_sql

    Example:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM expenses")
    """
    conn = None
    try:
        conn = sqlite3.connect(get_db_path(), timeout=10.0)
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
    except (sqlite3.Error, pd.errors.DatabaseError) as e:
        logger.error(f"Database error: {e}")
        raise DatabaseError(str(e)) from e
    finally:
        if conn:
            conn.close()
