"""
Abstract base class for memvfs disk image storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class BaseStorage(ABC):
    """Abstract base class for the single external disk image location."""

    @property
    @abstractmethod
    def location(self) -> Path:
        """Return the path of the external resource."""
        pass

    @abstractmethod
    def save(self, data: dict[str, Any]) -> None:
        """
        Write an encoded disk image, replacing any previous one.

        Args:
            data: Disk image as produced by Disk.to_dict().

        Raises:
            PersistenceError: If the image cannot be written.
        """
        pass

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """
        Read the encoded disk image.

        Returns:
            Disk image suitable for Disk.from_dict().

        Raises:
            PersistenceError: If the image is missing, unreadable, or corrupt.
        """
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check whether a stored image is present."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored image, if any."""
        pass
