"""
JSON file storage for memvfs disk images.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from memvfs.errors import PersistenceError
from memvfs.storage.base import BaseStorage

logger = logging.getLogger(__name__)


class JSONFileStorage(BaseStorage):
    """Stores the disk image as one UTF-8 JSON file."""

    def __init__(self, path: str | Path):
        """
        Initialize JSON file storage.

        Args:
            path: File the disk image is written to and read from.
        """
        self.path = Path(path)

    @property
    def location(self) -> Path:
        return self.path

    def save(self, data: dict[str, Any]) -> None:
        """Write the image atomically (temp file in the same directory, then replace)."""
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError, RecursionError) as e:
            raise PersistenceError(f"Failed to write disk image to {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)

        logger.debug("Stored disk image at %s", self.path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            raise PersistenceError(f"No stored disk image at {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise PersistenceError(f"Failed to read disk image from {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Corrupt disk image at {self.path}")

        logger.debug("Loaded disk image from %s", self.path)
        return data

    def exists(self) -> bool:
        return self.path.is_file()

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
