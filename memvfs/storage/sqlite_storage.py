"""
SQLite storage for memvfs disk images.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from memvfs.errors import PersistenceError
from memvfs.storage.base import BaseStorage

logger = logging.getLogger(__name__)

# Only one image is ever kept; it lives under this key.
IMAGE_KEY = "current"


class SQLiteStorage(BaseStorage):
    """Stores the disk image as a JSON payload in a single-row SQLite table."""

    def __init__(self, path: str | Path):
        """
        Initialize SQLite storage.

        Args:
            path: Path to the SQLite database file.
        """
        self.path = Path(path)

    @property
    def location(self) -> Path:
        return self.path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        return conn

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS disk_image (
                key TEXT PRIMARY KEY,
                payload TEXT NOT NULL
            )
        """)

    def save(self, data: dict[str, Any]) -> None:
        try:
            payload = json.dumps(data)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self._connect()) as conn:
                with conn:
                    self._create_tables(conn)
                    conn.execute(
                        "INSERT OR REPLACE INTO disk_image (key, payload) VALUES (?, ?)",
                        (IMAGE_KEY, payload),
                    )
        except (OSError, TypeError, ValueError, RecursionError, sqlite3.Error) as e:
            raise PersistenceError(f"Failed to write disk image to {self.path}: {e}") from e

        logger.debug("Stored disk image in %s", self.path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            raise PersistenceError(f"No stored disk image at {self.path}")

        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT payload FROM disk_image WHERE key = ?", (IMAGE_KEY,)
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read disk image from {self.path}: {e}") from e

        if row is None:
            raise PersistenceError(f"No stored disk image in {self.path}")

        try:
            data = json.loads(row["payload"])
        except (TypeError, json.JSONDecodeError, RecursionError) as e:
            raise PersistenceError(f"Corrupt disk image in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Corrupt disk image in {self.path}")

        logger.debug("Loaded disk image from %s", self.path)
        return data

    def exists(self) -> bool:
        if not self.path.is_file():
            return False
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT 1 FROM disk_image WHERE key = ?", (IMAGE_KEY,)
                ).fetchone()
        except sqlite3.Error:
            return False
        return row is not None

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
