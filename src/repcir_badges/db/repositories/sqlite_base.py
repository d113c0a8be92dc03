"""Shared SQLite plumbing for the repository implementations."""

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

from ..schema import SCHEMA


def resolve_db_path(db_path: Optional[Union[str, Path]] = None) -> Path:
    """Use the given path, else the configured badges database."""
    if db_path:
        return Path(db_path)
    from ...config import get_settings
    return Path(get_settings().badges_db_path)


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO date/datetime column value."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class SQLiteRepository:
    """
    Base class for SQLite-backed repositories.

    Opens one connection per operation and makes sure the schema exists.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None, timeout: float = 30.0):
        """
        Initialize the repository.

        Args:
            db_path: Path to SQLite database file. If None, uses the
                    configured badges database.
            timeout: Seconds to wait on a locked database
        """
        self.db_path = resolve_db_path(db_path)
        self.timeout = timeout
        self._ensure_schema()

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
