"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from memvfs.config import VFSConfig
from memvfs.disk import Disk
from memvfs.errors import PersistenceError
from memvfs.history import HistoryManager
from memvfs.shell import CommandShell
from memvfs.storage import BaseStorage


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the memvfs home directory at a temporary location."""
    home = tmp_path / ".memvfs"
    monkeypatch.setattr("memvfs.config.DEFAULT_MEMVFS_HOME", home)
    return home


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "stored.vfs.json"


@pytest.fixture
def config(store_path: Path) -> VFSConfig:
    return VFSConfig.default_local(store_path)


@pytest.fixture
def manager(config: VFSConfig) -> HistoryManager:
    return HistoryManager(config)


@pytest.fixture
def shell(manager: HistoryManager) -> CommandShell:
    return CommandShell(manager)


@pytest.fixture
def disk() -> Disk:
    return Disk(255)


@pytest.fixture
def populated_disk() -> Disk:
    """Disk laid out as:

    /a            (txt, "hello")
    /d/
    /d/b          (txt, "world")
    /d/e/
    /d/e/c        (md, "deep")
    """
    disk = Disk(255)
    disk.make_document("a", "txt", "hello")
    disk.make_dir("d")
    disk.change_dir("d")
    disk.make_document("b", "txt", "world")
    disk.make_dir("e")
    disk.change_dir("e")
    disk.make_document("c", "md", "deep")
    disk.change_dir("..")
    disk.change_dir("..")
    return disk


class MemoryStorage(BaseStorage):
    """Keeps the image in a dict, so images too deep for JSON can be loaded."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data = data

    @property
    def location(self) -> Path:
        return Path("<memory>")

    def save(self, data: dict[str, Any]) -> None:
        self.data = data

    def load(self) -> dict[str, Any]:
        if self.data is None:
            raise PersistenceError("No stored disk image in memory")
        return self.data

    def exists(self) -> bool:
        return self.data is not None

    def clear(self) -> None:
        self.data = None


DEEP_NESTING = 2000


@pytest.fixture
def deep_manager(config: VFSConfig) -> HistoryManager:
    """Manager whose live disk is nested DEEP_NESTING directories deep, cursor at the bottom."""
    disk = Disk(255)
    for _ in range(DEEP_NESTING):
        disk.make_dir("d")
        disk.change_dir("d")
    manager = HistoryManager(config, storage=MemoryStorage(disk.to_dict()))
    manager.load()
    return manager
