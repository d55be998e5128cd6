"""
Configuration management for memvfs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# Provider type definitions
StorageProvider = Literal["json", "sqlite"]

# Default paths
DEFAULT_MEMVFS_HOME = Path.home() / ".memvfs"

DEFAULT_CAPACITY = 255

_STORE_FILENAMES = {
    "json": "stored.vfs.json",
    "sqlite": "stored.vfs.sqlite",
}


@dataclass
class DiskConfig:
    """Configuration for newly created disks."""

    default_capacity: int = DEFAULT_CAPACITY


@dataclass
class StorageConfig:
    """Configuration for the single external disk image."""

    provider: StorageProvider = "json"
    # None means ~/.memvfs/<provider default filename>
    path: str | None = None

    def get_store_path(self) -> Path:
        """Get the store path, using the provider default if not set."""
        if self.path:
            return Path(self.path)
        return DEFAULT_MEMVFS_HOME / _STORE_FILENAMES[self.provider]


@dataclass
class ShellConfig:
    """Configuration for the interactive shell."""

    prompt: str = "$ "
    # None means ~/.memvfs/shell_history
    history_file: str | None = None

    def get_history_path(self) -> Path:
        if self.history_file:
            return Path(self.history_file)
        return DEFAULT_MEMVFS_HOME / "shell_history"


@dataclass
class VFSConfig:
    """Main configuration for memvfs."""

    disk: DiskConfig = field(default_factory=DiskConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)

    # Record every command in HistoryManager.logs
    auto_log: bool = True

    # Debug mode - enables verbose logging for diagnosing issues
    debug: bool = False

    def get_memvfs_home(self) -> Path:
        """Get the memvfs home directory."""
        return DEFAULT_MEMVFS_HOME

    @classmethod
    def from_env(cls) -> "VFSConfig":
        """Create configuration from environment variables."""
        config = cls()

        capacity = os.getenv("MEMVFS_CAPACITY")
        if capacity:
            try:
                config.disk.default_capacity = int(capacity)
            except ValueError as e:
                raise ValueError(f"MEMVFS_CAPACITY must be an integer, got {capacity!r}") from e

        provider = os.getenv("MEMVFS_STORAGE")
        if provider:
            if provider not in _STORE_FILENAMES:
                raise ValueError(f"Unknown MEMVFS_STORAGE provider: {provider!r}")
            config.storage.provider = provider  # type: ignore[assignment]

        config.storage.path = os.getenv("MEMVFS_STORE_PATH") or None
        config.debug = os.getenv("MEMVFS_DEBUG", "").lower() in ("1", "true", "yes")

        return config

    @classmethod
    def default_local(cls, store_path: str | Path | None = None) -> "VFSConfig":
        """Create a default configuration, optionally storing at a given path."""
        return cls(
            disk=DiskConfig(default_capacity=DEFAULT_CAPACITY),
            storage=StorageConfig(
                provider="json",
                path=str(store_path) if store_path else None,
            ),
        )
