"""
Core types for memvfs - the in-memory virtual file system.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Literal, Union, cast

from memvfs.errors import PersistenceError


class EntryKind(str, Enum):
    """Variant tag of an entry in the namespace."""

    DOCUMENT = "document"
    DIRECTORY = "directory"


DEFAULT_DOCUMENT_TYPE = "txt"


# =============================================================================
# Namespace Entries
# =============================================================================


@dataclass
class Document:
    """A leaf entry holding a small text payload."""

    name: str
    type: str = DEFAULT_DOCUMENT_TYPE
    content: str = ""

    @property
    def kind(self) -> EntryKind:
        return EntryKind.DOCUMENT

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))

    def is_directory(self) -> bool:
        return False

    def clone(self) -> "Document":
        """Return an independent copy of this document."""
        return Document(name=self.name, type=self.type, content=self.content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "name": self.name,
            "type": self.type,
            "content": self.content,
        }


@dataclass(eq=False, repr=False)
class Directory:
    """
    An entry owning an ordered list of child entries.

    Subtree traversals below run on an explicit stack, not recursion.
    """

    name: str
    children: list["Entry"] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Directory(name={self.name!r}, children={len(self.children)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Directory):
            return NotImplemented

        pending: list[tuple[Directory, Directory]] = [(self, other)]
        while pending:
            left, right = pending.pop()
            if left.name != right.name or len(left.children) != len(right.children):
                return False
            for a, b in zip(left.children, right.children):
                if isinstance(a, Directory) and isinstance(b, Directory):
                    pending.append((a, b))
                elif a != b:
                    return False
        return True

    @property
    def kind(self) -> EntryKind:
        return EntryKind.DIRECTORY

    @property
    def size(self) -> int:
        # Directories have no intrinsic size; they weigh what they hold.
        return sum(entry.size for entry in self.walk() if isinstance(entry, Document))

    def is_directory(self) -> bool:
        return True

    def walk(self) -> Iterator["Entry"]:
        """Yield every entry beneath this directory, pre-order, in stored order."""
        stack: list[Entry] = list(reversed(self.children))
        while stack:
            entry = stack.pop()
            yield entry
            if isinstance(entry, Directory):
                stack.extend(reversed(entry.children))

    def clone(self) -> "Directory":
        """Return a structurally disjoint deep copy of this subtree."""
        copy = Directory(name=self.name)
        pending: list[tuple[Directory, Directory]] = [(self, copy)]
        while pending:
            src, dst = pending.pop()
            for child in src.children:
                if isinstance(child, Directory):
                    child_copy = Directory(name=child.name)
                    pending.append((child, child_copy))
                    dst.children.append(child_copy)
                else:
                    dst.children.append(child.clone())
        return copy

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"kind": self.kind.value, "name": self.name, "children": []}
        pending: list[tuple[Directory, list[dict[str, Any]]]] = [(self, result["children"])]
        while pending:
            src, out = pending.pop()
            for child in src.children:
                if isinstance(child, Directory):
                    child_dict: dict[str, Any] = {
                        "kind": child.kind.value,
                        "name": child.name,
                        "children": [],
                    }
                    pending.append((child, child_dict["children"]))
                    out.append(child_dict)
                else:
                    out.append(child.to_dict())
        return result


Entry = Union[Document, Directory]


def _leaf_from_dict(data: Any) -> tuple[Entry, list[Any] | None]:
    """Decode one entry; directories come back empty with their raw children."""
    if not isinstance(data, dict):
        raise PersistenceError(f"Malformed entry: expected object, got {type(data).__name__}")

    try:
        kind = EntryKind(data["kind"])
        name = data["name"]
    except (KeyError, ValueError) as e:
        raise PersistenceError(f"Malformed entry: {e}") from e

    if not isinstance(name, str):
        raise PersistenceError(f"Malformed entry name: {name!r}")

    if kind == EntryKind.DOCUMENT:
        doc_type = data.get("type", DEFAULT_DOCUMENT_TYPE)
        content = data.get("content", "")
        if not isinstance(doc_type, str) or not isinstance(content, str):
            raise PersistenceError(f"Malformed document: {name}")
        return Document(name=name, type=doc_type, content=content), None

    children = data.get("children", [])
    if not isinstance(children, list):
        raise PersistenceError(f"Malformed directory: {name}")
    return Directory(name=name), children


def entry_from_dict(data: dict[str, Any]) -> Entry:
    """Rebuild an entry (and, for a directory, its whole subtree) from its dict form.

    Raises:
        PersistenceError: If the data is not a well-formed entry.
    """
    entry, raw_children = _leaf_from_dict(data)
    if raw_children is None:
        return entry

    pending: list[tuple[Directory, list[Any]]] = [(cast(Directory, entry), raw_children)]
    while pending:
        parent, raw = pending.pop()
        for item in raw:
            child, grandchildren = _leaf_from_dict(item)
            parent.children.append(child)
            if grandchildren is not None:
                pending.append((cast(Directory, child), grandchildren))
    return entry


# =============================================================================
# Operation Log and Tool Results
# =============================================================================


@dataclass
class OperationLog:
    """Log entry for a command executed through the history manager."""

    timestamp: float
    operation: str
    args: dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: str | None = None

    @classmethod
    def create(
        cls,
        operation: str,
        args: dict[str, Any] | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> "OperationLog":
        return cls(
            timestamp=time.time(),
            operation=operation,
            args=args or {},
            success=success,
            error_message=error_message,
        )


ToolResultStatus = Literal["success", "error"]


@dataclass
class ToolResult:
    """Standard result format for shell commands."""

    status: ToolResultStatus
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        result = {"status": self.status, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result
