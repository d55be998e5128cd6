"""Disk image storage implementations for memvfs."""

from memvfs.storage.base import BaseStorage
from memvfs.storage.json_storage import JSONFileStorage
from memvfs.storage.sqlite_storage import SQLiteStorage

__all__ = ["BaseStorage", "JSONFileStorage", "SQLiteStorage"]
