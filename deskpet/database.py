"""Shared key-value store backed by SQLite

The main app and the widget process open the same file. Values are stored as
JSON text, grouped into suites: ``standard`` for app-private settings and
``group`` for the snapshot the widget reads.
"""

import json
import logging
import sqlite3
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional
from contextlib import contextmanager

from .config import config
from . import keys

logger = logging.getLogger(__name__)


class SharedStore:
    """SQLite key-value store with retry logic for cross-process access"""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else config.db_path
        self._ensure_initialized()

    def _ensure_initialized(self):
        """Ensure data directory exists and schema is created"""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._create_schema()

    @contextmanager
    def get_connection(self):
        """
        Open a connection to the shared store

        Yields:
            sqlite3.Connection: Database connection in autocommit mode
        """
        conn = sqlite3.connect(
            self.db_path,
            timeout=10.0,
            isolation_level=None  # Autocommit mode
        )
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _with_retry(self, operation: Callable[[sqlite3.Connection], Any], max_retries: int = 3):
        """
        Run an operation, retrying while the other process holds the lock

        Args:
            operation: Callable receiving an open connection
            max_retries: Maximum number of attempts

        Returns:
            Whatever the operation returns
        """
        last_error = None

        for attempt in range(max_retries):
            try:
                with self.get_connection() as conn:
                    return operation(conn)
            except sqlite3.OperationalError as e:
                if "locked" not in str(e).lower():
                    raise
                last_error = e
                if attempt < max_retries - 1:
                    # Exponential backoff
                    wait_time = (2 ** attempt) * 0.1
                    logger.debug("Shared store locked, retrying in %.1fs", wait_time)
                    time.sleep(wait_time)

        raise sqlite3.OperationalError(
            f"Shared store locked after {max_retries} attempts. "
            "The widget process may be holding it. Try again in a moment."
        ) from last_error

    def _create_schema(self):
        """Create the defaults table if it doesn't exist"""
        schema = """
        CREATE TABLE IF NOT EXISTS defaults (
            suite TEXT NOT NULL CHECK(suite IN ('standard', 'group')),
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            PRIMARY KEY (suite, key)
        );
        """
        self._with_retry(lambda conn: conn.executescript(schema))

    # Raw access

    def get(self, key: str, default: Any = None, suite: str = keys.GROUP) -> Any:
        """Get a decoded value, or default when missing or unreadable"""
        row = self._with_retry(lambda conn: conn.execute(
            "SELECT value FROM defaults WHERE suite = ? AND key = ?",
            (suite, key)
        ).fetchone())

        if row is None:
            return default

        try:
            return json.loads(row['value'])
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable value for %s/%s", suite, key)
            return default

    def set(self, key: str, value: Any, suite: str = keys.GROUP):
        """Store a JSON-serialisable value"""
        encoded = json.dumps(value, ensure_ascii=False)
        now = datetime.now().isoformat()

        self._with_retry(lambda conn: conn.execute("""
            INSERT INTO defaults (suite, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(suite, key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (suite, key, encoded, now)))

    def remove(self, key: str, suite: str = keys.GROUP):
        """Delete a key"""
        self._with_retry(lambda conn: conn.execute(
            "DELETE FROM defaults WHERE suite = ? AND key = ?",
            (suite, key)
        ))

    def contains(self, key: str, suite: str = keys.GROUP) -> bool:
        """Check whether a key has been stored"""
        row = self._with_retry(lambda conn: conn.execute(
            "SELECT 1 FROM defaults WHERE suite = ? AND key = ?",
            (suite, key)
        ).fetchone())
        return row is not None

    def list_keys(self, suite: str = keys.GROUP) -> List[str]:
        """List stored keys in a suite"""
        rows = self._with_retry(lambda conn: conn.execute(
            "SELECT key FROM defaults WHERE suite = ? ORDER BY key",
            (suite,)
        ).fetchall())
        return [row['key'] for row in rows]

    def clear(self, suite: Optional[str] = None):
        """Delete every key, or every key of one suite"""
        if suite is None:
            self._with_retry(lambda conn: conn.execute("DELETE FROM defaults"))
        else:
            self._with_retry(lambda conn: conn.execute("DELETE FROM defaults WHERE suite = ?", (suite,)))

    # Typed helpers

    def get_bool(self, key: str, suite: str = keys.GROUP) -> bool:
        """Get a boolean (missing is False)"""
        return bool(self.get(key, False, suite))

    def get_float(self, key: str, suite: str = keys.GROUP) -> float:
        """Get a float (missing or non-numeric is 0.0)"""
        value = self.get(key, 0.0, suite)
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    def get_int(self, key: str, suite: str = keys.GROUP) -> int:
        """Get an int (missing or non-numeric is 0)"""
        value = self.get(key, 0, suite)
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    def get_datetime(self, key: str, suite: str = keys.GROUP) -> Optional[datetime]:
        """Get a datetime stored as ISO-8601 text"""
        value = self.get(key, None, suite)
        if value is None:
            return None

        try:
            return datetime.fromisoformat(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable timestamp for %s/%s: %r", suite, key, value)
            return None

    def set_datetime(self, key: str, value: datetime, suite: str = keys.GROUP):
        """Store a datetime as ISO-8601 text"""
        self.set(key, value.isoformat(), suite)


# Global store instance
store = SharedStore()
