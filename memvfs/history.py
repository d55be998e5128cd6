"""
HistoryManager - the orchestrator giving every mutating command undo/redo.

The manager owns exactly one live Disk plus two stacks of independent Disk
snapshots. Each mutating command pushes a snapshot of the live disk before it
runs, so any command can be reversed by swapping the snapshot back in.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from memvfs.config import VFSConfig
from memvfs.disk import Disk
from memvfs.errors import EmptyHistoryError, VFSError
from memvfs.navigator import list_recursive
from memvfs.storage.base import BaseStorage
from memvfs.storage.json_storage import JSONFileStorage
from memvfs.storage.sqlite_storage import SQLiteStorage
from memvfs.types import Entry, OperationLog

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryManager:
    """
    Command surface of the virtual file system.

    Mutating commands (new_disk, new_doc, new_dir, delete, rename, change_dir,
    load) snapshot the live disk first. A command that fails still leaves its
    snapshot on the undo stack, because the snapshot is taken before the
    command validates its arguments. Queries never touch history and hand out
    copies, never the live entries.
    """

    def __init__(
        self,
        config: VFSConfig | None = None,
        storage: BaseStorage | None = None,
    ):
        """
        Initialize the manager with a fresh disk of the default capacity.

        Args:
            config: memvfs configuration. Uses defaults if not provided.
            storage: Custom storage for store()/load(). Built from config if not provided.
        """
        self.config = config or VFSConfig()
        self.storage = storage or self._create_storage()

        self._disk = Disk(self.config.disk.default_capacity)
        self._undo_stack: list[Disk] = []
        self._redo_stack: list[Disk] = []
        self.logs: list[OperationLog] = []

    def _create_storage(self) -> BaseStorage:
        """Create storage based on config."""
        path = self.config.storage.get_store_path()
        if self.config.storage.provider == "sqlite":
            return SQLiteStorage(path)
        return JSONFileStorage(path)

    def __repr__(self) -> str:
        return (
            f"HistoryManager(disk={self._disk!r}, undo={self.undo_depth}, "
            f"redo={self.redo_depth})"
        )

    # =========================================================================
    # Snapshot Protocol
    # =========================================================================

    def _push_undo_snapshot(self) -> None:
        """Snapshot the live disk before a fresh command; invalidates redo history."""
        self._undo_stack.append(self._disk.clone())
        logger.debug("Pushed undo snapshot (depth %d)", len(self._undo_stack))
        if self._redo_stack:
            logger.debug("Discarding %d redo snapshot(s)", len(self._redo_stack))
            self._redo_stack.clear()

    def _run(
        self,
        operation: str,
        args: dict[str, Any],
        action: Callable[[], T],
        record: bool = True,
    ) -> T:
        """Run a command, optionally snapshotting first, and log the outcome."""
        if record:
            self._push_undo_snapshot()

        logger.debug("%s %s", operation, args)
        try:
            result = action()
        except (VFSError, ValueError) as e:
            logger.warning("%s failed: %s", operation, e)
            self._log_operation(operation, args, success=False, error_message=str(e))
            raise

        self._log_operation(operation, args)
        return result

    def _log_operation(
        self,
        operation: str,
        args: dict[str, Any],
        success: bool = True,
        error_message: str | None = None,
    ) -> None:
        if not self.config.auto_log:
            return
        self.logs.append(
            OperationLog.create(
                operation=operation,
                args=args,
                success=success,
                error_message=error_message,
            )
        )

    # =========================================================================
    # Mutating Commands
    # =========================================================================

    def new_disk(self, capacity: int) -> None:
        """Replace the live disk with an empty one of the given capacity."""

        def action() -> None:
            self._disk = Disk(capacity)

        self._run("new_disk", {"capacity": capacity}, action)

    def new_doc(self, name: str, type: str, content: str) -> None:
        """Create a document in the working directory."""
        self._run(
            "new_doc",
            {"name": name, "type": type, "size": len(content.encode("utf-8"))},
            lambda: self._disk.make_document(name, type, content),
        )

    def new_dir(self, name: str) -> None:
        """Create a directory in the working directory."""
        self._run("new_dir", {"name": name}, lambda: self._disk.make_dir(name))

    def delete(self, name: str) -> None:
        """Delete an entry from the working directory (recursively for directories)."""
        self._run("delete", {"name": name}, lambda: self._disk.delete_file(name))

    def rename(self, old_name: str, new_name: str) -> None:
        """Rename an entry in the working directory."""
        self._run(
            "rename",
            {"old_name": old_name, "new_name": new_name},
            lambda: self._disk.rename(old_name, new_name),
        )

    def change_dir(self, name: str) -> None:
        """Move the working directory into a child, or up with ".."."""
        self._run("change_dir", {"name": name}, lambda: self._disk.change_dir(name))

    def load(self) -> None:
        """
        Replace the live disk with the stored image.

        The pre-load snapshot is pushed first, so a successful load can be
        undone. On PersistenceError the live disk is untouched.
        """

        def action() -> None:
            self._disk = Disk.from_dict(self.storage.load())

        self._run("load", {"location": str(self.storage.location)}, action)

    # =========================================================================
    # History Commands
    # =========================================================================

    def undo(self) -> None:
        """
        Revert the most recent command.

        Raises:
            EmptyHistoryError: If there is nothing to undo.
        """

        def action() -> None:
            if not self._undo_stack:
                raise EmptyHistoryError("undo")
            self._redo_stack.append(self._disk.clone())
            self._disk = self._undo_stack.pop()
            logger.debug(
                "Popped undo snapshot (undo depth %d, redo depth %d)",
                len(self._undo_stack),
                len(self._redo_stack),
            )

        self._run("undo", {}, action, record=False)

    def redo(self) -> None:
        """
        Re-apply the most recently undone command.

        Raises:
            EmptyHistoryError: If there is nothing to redo.
        """

        def action() -> None:
            if not self._redo_stack:
                raise EmptyHistoryError("redo")
            self._undo_stack.append(self._disk.clone())
            self._disk = self._redo_stack.pop()
            logger.debug(
                "Popped redo snapshot (undo depth %d, redo depth %d)",
                len(self._undo_stack),
                len(self._redo_stack),
            )

        self._run("redo", {}, action, record=False)

    # =========================================================================
    # Persistence
    # =========================================================================

    def store(self) -> None:
        """Write the live disk (tree, capacity, cursor) to the storage location."""
        self._run(
            "store",
            {"location": str(self.storage.location)},
            lambda: self.storage.save(self._disk.to_dict()),
            record=False,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def list(self) -> list[Entry]:
        """Entries of the working directory, in insertion order."""
        return [entry.clone() for entry in self._disk.list()]

    def recursive_list(self) -> list[Entry]:
        """Every entry beneath the working directory, pre-order.

        The entries come from one copy of the working directory, so they are
        detached from the live disk (a listed directory still holds its listed
        descendants).
        """
        return list_recursive(self._disk.get_working_dir().clone())

    rlist = recursive_list

    def find_file(self, name: str) -> Entry:
        """Resolve a name in the working directory. Raises NotFoundError."""
        return self._disk.find_file(name).clone()

    def is_document(self, name: str) -> bool:
        """Whether the named entry is a document. Raises NotFoundError."""
        return self._disk.is_document(name)

    def working_path(self) -> str:
        return self._disk.working_path()

    def snapshot(self) -> Disk:
        """Return an independent copy of the live disk."""
        return self._disk.clone()

    @property
    def capacity(self) -> int:
        return self._disk.capacity

    @property
    def used_size(self) -> int:
        return self._disk.used_size

    @property
    def free_size(self) -> int:
        return self._disk.free_size

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)


# =========================================================================
# Factory Functions
# =========================================================================


def create_history_manager(
    config: VFSConfig | None = None,
    storage: BaseStorage | None = None,
) -> HistoryManager:
    """
    Create a HistoryManager with a fresh default disk.

    Args:
        config: Optional configuration. Read from the environment if not provided.
        storage: Optional storage override.

    Returns:
        HistoryManager instance.
    """
    if config is None:
        config = VFSConfig.from_env()
    return HistoryManager(config=config, storage=storage)
