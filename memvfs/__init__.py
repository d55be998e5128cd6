"""
memvfs - An in-memory virtual file system with undo/redo history.

memvfs keeps a hierarchical namespace of directories and documents on a
capacity-limited Disk, and routes every change through a HistoryManager that
snapshots the whole disk so any command can be undone and redone.

Usage:
    from memvfs import HistoryManager, VFSConfig

    vfs = HistoryManager(VFSConfig.default_local("disk.json"))
    vfs.new_doc("a", "txt", "hello")
    vfs.new_dir("d")
    vfs.change_dir("d")
    vfs.undo()          # back at the root
    vfs.store()         # write the disk image to disk.json

Shell Usage:
    from memvfs import CommandShell, create_history_manager

    shell = CommandShell(create_history_manager())
    result = shell.execute('newDoc notes txt "remember this"')
"""

from memvfs.config import VFSConfig
from memvfs.disk import Disk
from memvfs.errors import (
    AtRootError,
    CapacityExceededError,
    DuplicateNameError,
    EmptyHistoryError,
    InvalidNameError,
    NotADirectoryError,
    NotFoundError,
    PersistenceError,
    VFSError,
)
from memvfs.history import HistoryManager, create_history_manager
from memvfs.navigator import PARENT_TOKEN
from memvfs.shell import CommandShell
from memvfs.storage import BaseStorage, JSONFileStorage, SQLiteStorage
from memvfs.types import (
    Directory,
    Document,
    Entry,
    EntryKind,
    OperationLog,
    ToolResult,
)

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "HistoryManager",
    "Disk",
    "VFSConfig",
    "CommandShell",
    # Factory functions
    "create_history_manager",
    # Entries
    "Entry",
    "EntryKind",
    "Document",
    "Directory",
    "PARENT_TOKEN",
    # Storage
    "BaseStorage",
    "JSONFileStorage",
    "SQLiteStorage",
    # Results and logs
    "ToolResult",
    "OperationLog",
    # Errors
    "VFSError",
    "DuplicateNameError",
    "InvalidNameError",
    "NotFoundError",
    "NotADirectoryError",
    "AtRootError",
    "CapacityExceededError",
    "EmptyHistoryError",
    "PersistenceError",
]
