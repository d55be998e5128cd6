"""
Disk - one namespace tree with a capacity limit and a working directory cursor.
"""

from __future__ import annotations

import logging
from typing import Any, cast

from memvfs.errors import (
    AtRootError,
    CapacityExceededError,
    DuplicateNameError,
    InvalidNameError,
    NotADirectoryError,
    PersistenceError,
)
from memvfs.navigator import (
    PARENT_TOKEN,
    PATH_SEPARATOR,
    create_child,
    delete_child,
    list_recursive,
    list_shallow,
    rename_child,
    resolve,
    validate_name,
)
from memvfs.types import Directory, Document, Entry, EntryKind, entry_from_dict

logger = logging.getLogger(__name__)

DISK_FORMAT = "memvfs-disk"
DISK_FORMAT_VERSION = 1


class Disk:
    """
    A disk owns a root directory and tracks the working directory.

    The cursor is kept as a path stack of directories from the root down to
    the working directory. The stack holds references only; ownership stays
    with the parent directories, so moving up is a pop rather than a parent
    link.
    """

    def __init__(self, capacity: int):
        """
        Create an empty disk.

        Args:
            capacity: Maximum number of content bytes the disk may hold.

        Raises:
            ValueError: If capacity is not a positive integer.
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"Disk capacity must be a positive integer, got {capacity!r}")

        self.capacity = capacity
        self.root = Directory(name="")
        self._path: list[Directory] = [self.root]

    def __repr__(self) -> str:
        return (
            f"Disk(capacity={self.capacity}, used={self.used_size}, "
            f"cwd={self.working_path()!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Disk):
            return NotImplemented
        return (
            self.capacity == other.capacity
            and self.root == other.root
            and self.working_path_names() == other.working_path_names()
        )

    # =========================================================================
    # Size Queries
    # =========================================================================

    @property
    def used_size(self) -> int:
        return self.root.size

    @property
    def free_size(self) -> int:
        return self.capacity - self.used_size

    # =========================================================================
    # Working Directory
    # =========================================================================

    def get_working_dir(self) -> Directory:
        return self._path[-1]

    @property
    def working_directory(self) -> Directory:
        return self._path[-1]

    def at_root(self) -> bool:
        return len(self._path) == 1

    def working_path_names(self) -> list[str]:
        """Names of the directories from just below the root to the cwd."""
        return [d.name for d in self._path[1:]]

    def working_path(self) -> str:
        """Render the working directory as an absolute path."""
        return PATH_SEPARATOR + PATH_SEPARATOR.join(self.working_path_names())

    def change_dir(self, name: str) -> None:
        """
        Move the cursor into a child directory, or to the parent with "..".

        The cursor either moves completely or not at all.

        Raises:
            AtRootError: If name is ".." and the cursor is at the root.
            NotFoundError: If there is no such child.
            NotADirectoryError: If the child is a document.
        """
        if name == PARENT_TOKEN:
            if self.at_root():
                raise AtRootError()
            self._path.pop()
            return

        entry = resolve(self.working_directory, name)
        if not isinstance(entry, Directory):
            raise NotADirectoryError(name)
        self._path.append(entry)

    # =========================================================================
    # Namespace Operations (relative to the working directory)
    # =========================================================================

    def make_document(self, name: str, type: str, content: str) -> Document:
        """
        Create a document in the working directory.

        Raises:
            InvalidNameError: If the name is not legal.
            DuplicateNameError: If the name is taken.
            CapacityExceededError: If the content does not fit.
        """
        validate_name(name)
        if any(child.name == name for child in self.working_directory.children):
            raise DuplicateNameError(name)

        required = len(content.encode("utf-8"))
        if required > self.free_size:
            raise CapacityExceededError(required, self.free_size)

        entry = create_child(
            self.working_directory, name, EntryKind.DOCUMENT, type, content
        )
        return cast(Document, entry)

    def make_dir(self, name: str) -> Directory:
        """Create a directory in the working directory."""
        entry = create_child(self.working_directory, name, EntryKind.DIRECTORY)
        return cast(Directory, entry)

    def delete_file(self, name: str) -> Entry:
        """Delete an entry (recursively for directories) from the working directory."""
        return delete_child(self.working_directory, name)

    def rename(self, old_name: str, new_name: str) -> None:
        rename_child(self.working_directory, old_name, new_name)

    def list(self) -> list[Entry]:
        return list_shallow(self.working_directory)

    def rlist(self) -> list[Entry]:
        return list_recursive(self.working_directory)

    def find_file(self, name: str) -> Entry:
        return resolve(self.working_directory, name)

    def is_document(self, name: str) -> bool:
        return not self.find_file(name).is_directory()

    # =========================================================================
    # Snapshot and Serialization
    # =========================================================================

    def clone(self) -> "Disk":
        """
        Return a structurally disjoint copy of this disk, cursor included.

        The copy's cursor is re-resolved by name inside the copied tree, so it
        never points into the original.
        """
        copy = Disk(self.capacity)
        copy.root = self.root.clone()
        copy._path = copy._resolve_path(self.working_path_names())
        return copy

    def _resolve_path(self, names: list[str]) -> list[Directory]:
        path = [self.root]
        for name in names:
            current = path[-1]
            match = next((c for c in current.children if c.name == name), None)
            if not isinstance(match, Directory):
                raise PersistenceError(
                    f"Working directory path does not resolve: /{PATH_SEPARATOR.join(names)}"
                )
            path.append(match)
        return path

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "format": DISK_FORMAT,
            "version": DISK_FORMAT_VERSION,
            "capacity": self.capacity,
            "cwd": self.working_path_names(),
            "root": self.root.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Disk":
        """
        Rebuild a disk from its dictionary form.

        Raises:
            PersistenceError: If the data is malformed or violates a disk invariant.
        """
        if not isinstance(data, dict):
            raise PersistenceError("Malformed disk image: expected an object")
        if data.get("format") != DISK_FORMAT:
            raise PersistenceError(f"Unknown disk image format: {data.get('format')!r}")
        if data.get("version") != DISK_FORMAT_VERSION:
            raise PersistenceError(
                f"Unsupported disk image version: {data.get('version')!r}"
            )

        try:
            disk = cls(data["capacity"])
        except (KeyError, ValueError) as e:
            raise PersistenceError(f"Malformed disk capacity: {e}") from e

        root = entry_from_dict(data.get("root", {}))
        if not isinstance(root, Directory):
            raise PersistenceError("Malformed disk image: root is not a directory")
        _check_tree(root)
        root.name = ""
        disk.root = root

        if disk.used_size > disk.capacity:
            raise PersistenceError(
                f"Disk image holds {disk.used_size} bytes, over capacity {disk.capacity}"
            )

        cwd = data.get("cwd", [])
        if not isinstance(cwd, list) or not all(isinstance(n, str) for n in cwd):
            raise PersistenceError("Malformed working directory path")
        disk._path = disk._resolve_path(cwd)
        logger.debug("Decoded disk image: %s", disk)
        return disk


def _check_tree(root: Directory) -> None:
    """Validate names and sibling uniqueness throughout a decoded tree."""
    pending = [root]
    while pending:
        directory = pending.pop()
        seen: set[str] = set()
        for child in directory.children:
            try:
                validate_name(child.name)
            except InvalidNameError as e:
                raise PersistenceError(f"Malformed disk image: {e}") from e
            if child.name in seen:
                raise PersistenceError(
                    f"Malformed disk image: duplicate name {child.name!r}"
                )
            seen.add(child.name)
            if isinstance(child, Directory):
                pending.append(child)
