"""
Exception taxonomy for memvfs.

Every failure surfaced by the namespace, the disk, the history manager and the
storage layer derives from VFSError, so callers (and the command shell) can
catch one type.
"""

from __future__ import annotations

import builtins


class VFSError(Exception):
    """Base class for all memvfs errors."""


class DuplicateNameError(VFSError):
    """A sibling with the requested name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Name already exists: {name}")
        self.name = name


class InvalidNameError(VFSError):
    """The name is empty, reserved, or contains a path separator."""

    def __init__(self, name: str, reason: str = "invalid name"):
        super().__init__(f"Invalid name {name!r}: {reason}")
        self.name = name
        self.reason = reason


class NotFoundError(VFSError):
    """No entry with the given name in the directory."""

    def __init__(self, name: str):
        super().__init__(f"Not found: {name}")
        self.name = name


class NotADirectoryError(VFSError, builtins.NotADirectoryError):
    """The named entry is a document where a directory was required."""

    def __init__(self, name: str):
        super().__init__(f"Not a directory: {name}")
        self.name = name


class AtRootError(VFSError):
    """Attempted to move above the root directory."""

    def __init__(self) -> None:
        super().__init__("Already at root directory")


class CapacityExceededError(VFSError):
    """Creating the document would exceed the disk capacity."""

    def __init__(self, required: int, free: int):
        super().__init__(
            f"Capacity exceeded: need {required} bytes, {free} bytes free"
        )
        self.required = required
        self.free = free


class EmptyHistoryError(VFSError):
    """Nothing to undo or redo."""

    def __init__(self, which: str):
        super().__init__(f"Nothing to {which}")
        self.which = which


class PersistenceError(VFSError):
    """The stored disk image is missing, unreadable, corrupt, or unwritable."""
