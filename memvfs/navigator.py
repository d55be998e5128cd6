"""
Tree navigation primitives over a Directory-rooted namespace.

Entries only own their children; nothing here keeps a parent link; upward
movement is the Disk's job (see memvfs.disk).
"""

from __future__ import annotations

from memvfs.errors import DuplicateNameError, InvalidNameError, NotFoundError
from memvfs.types import DEFAULT_DOCUMENT_TYPE, Directory, Document, Entry, EntryKind

# Reserved token for "parent directory"; never a legal entry name.
PARENT_TOKEN = ".."

PATH_SEPARATOR = "/"


def validate_name(name: str) -> None:
    """
    Check that a name may be used for an entry.

    Raises:
        InvalidNameError: If the name is empty, reserved, or contains "/".
    """
    if not isinstance(name, str) or not name:
        raise InvalidNameError(str(name), "name must be a non-empty string")
    if name == PARENT_TOKEN:
        raise InvalidNameError(name, f"'{PARENT_TOKEN}' is reserved")
    if PATH_SEPARATOR in name:
        raise InvalidNameError(name, f"name may not contain '{PATH_SEPARATOR}'")


def _index_of(directory: Directory, name: str) -> int:
    for i, child in enumerate(directory.children):
        if child.name == name:
            return i
    return -1


def create_child(
    parent: Directory,
    name: str,
    kind: EntryKind,
    type: str | None = None,
    content: str | None = None,
) -> Entry:
    """
    Create a new entry and append it to a directory.

    Args:
        parent: Directory receiving the entry.
        name: Name of the new entry.
        kind: Document or directory.
        type: Document type tag, "txt" when omitted (ignored for directories).
        content: Document content (ignored for directories).

    Returns:
        The newly created entry.

    Raises:
        InvalidNameError: If the name is not legal.
        DuplicateNameError: If a sibling already uses the name.
    """
    validate_name(name)
    if _index_of(parent, name) >= 0:
        raise DuplicateNameError(name)

    entry: Entry
    if kind == EntryKind.DIRECTORY:
        entry = Directory(name=name)
    else:
        entry = Document(
            name=name,
            type=DEFAULT_DOCUMENT_TYPE if type is None else type,
            content=content or "",
        )

    parent.children.append(entry)
    return entry


def delete_child(parent: Directory, name: str) -> Entry:
    """
    Detach a child (and, for a directory, its whole subtree).

    Returns:
        The removed entry. Nothing left in the tree refers to it.

    Raises:
        NotFoundError: If no child has the name.
    """
    index = _index_of(parent, name)
    if index < 0:
        raise NotFoundError(name)
    return parent.children.pop(index)


def rename_child(parent: Directory, old_name: str, new_name: str) -> None:
    """
    Rename a child in place, keeping its content and children.

    Raises:
        NotFoundError: If old_name is absent.
        InvalidNameError: If new_name is not legal.
        DuplicateNameError: If another sibling already uses new_name.
    """
    index = _index_of(parent, old_name)
    if index < 0:
        raise NotFoundError(old_name)
    if old_name == new_name:
        return

    validate_name(new_name)
    if _index_of(parent, new_name) >= 0:
        raise DuplicateNameError(new_name)

    parent.children[index].name = new_name


def resolve(directory: Directory, name: str) -> Entry:
    """Find a direct child by exact name. Raises NotFoundError if absent."""
    index = _index_of(directory, name)
    if index < 0:
        raise NotFoundError(name)
    return directory.children[index]


def is_directory(entry: Entry) -> bool:
    return entry.is_directory()


def list_shallow(directory: Directory) -> list[Entry]:
    """Direct children, in insertion order."""
    return list(directory.children)


def list_recursive(directory: Directory) -> list[Entry]:
    """Every entry beneath a directory, pre-order, depth-first."""
    return list(directory.walk())
