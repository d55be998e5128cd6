"""
Command shell - parses command lines into calls on a HistoryManager.
"""

from __future__ import annotations

import shlex
from typing import Any, Callable

from memvfs.errors import VFSError
from memvfs.history import HistoryManager
from memvfs.types import Directory, Entry, ToolResult

HELP_TEXT = """Commands:
  newDisk <capacity>               create a new empty disk
  newDoc <name> <type> <content>   create a document in the working directory
  newDir <name>                    create a directory in the working directory
  delete <name>                    delete a document or directory (recursive)
  rename <old> <new>               rename an entry
  changeDir <name|..>              enter a directory, or go up with ..
  list                             list the working directory
  rList                            list everything beneath the working directory
  pwd                              show the working directory
  store                            save the disk to the store file
  load                             load the disk from the store file
  undo / redo                      step through history
  help                             show this message
  quit                             leave the shell

Unquoted content words are joined with single spaces; quote the content
(newDoc a txt "hello   world") to keep its spacing exactly."""


def format_size(size_bytes: int) -> str:
    """Format byte size to human readable."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def entry_row(entry: Entry) -> dict[str, Any]:
    """Describe an entry for ToolResult data."""
    if isinstance(entry, Directory):
        return {
            "name": entry.name,
            "kind": entry.kind.value,
            "size": entry.size,
            "child_count": len(entry.children),
        }
    return {
        "name": entry.name,
        "kind": entry.kind.value,
        "type": entry.type,
        "size": entry.size,
    }


def format_listing(entries: list[Entry]) -> str:
    """Render entries one per line: name, type (or <dir>), size."""
    if not entries:
        return "(empty)"

    width = max(len(e.name) for e in entries)
    lines = []
    for entry in entries:
        tag = "<dir>" if isinstance(entry, Directory) else entry.type
        lines.append(f"{entry.name.ljust(width)}  {tag:<6} {format_size(entry.size)}")
    return "\n".join(lines)


class UsageError(Exception):
    """A command line had the wrong shape."""


class CommandShell:
    """Text front-end over a HistoryManager; every command yields a ToolResult."""

    def __init__(self, manager: HistoryManager):
        """
        Initialize the shell.

        Args:
            manager: The HistoryManager to drive.
        """
        self.manager = manager
        self.should_exit = False

    def _command_map(self) -> dict[str, Callable[[list[str]], ToolResult]]:
        return {
            "newDisk": self._execute_new_disk,
            "newDoc": self._execute_new_doc,
            "newDir": self._execute_new_dir,
            "delete": self._execute_delete,
            "rename": self._execute_rename,
            "changeDir": self._execute_change_dir,
            "list": self._execute_list,
            "rList": self._execute_rlist,
            "pwd": self._execute_pwd,
            "store": self._execute_store,
            "load": self._execute_load,
            "undo": self._execute_undo,
            "redo": self._execute_redo,
            "help": self._execute_help,
            "quit": self._execute_quit,
        }

    def execute(self, line: str) -> ToolResult:
        """
        Parse and run one command line.

        Args:
            line: Raw command text, e.g. 'newDoc notes txt "hello world"'.

        Returns:
            ToolResult describing the outcome. Errors never escape as exceptions.
        """
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            return ToolResult(status="error", message=f"Could not parse command: {e}")

        if not tokens:
            return ToolResult(status="success", message="")

        command, args = tokens[0], tokens[1:]
        handler = self._command_map().get(command)
        if handler is None:
            return ToolResult(
                status="error",
                message=f"Unknown command: {command}. Type 'help' for a list of commands.",
            )

        try:
            return handler(args)
        except UsageError as e:
            return ToolResult(status="error", message=f"Usage: {e}")
        except VFSError as e:
            return ToolResult(status="error", message=str(e))
        except ValueError as e:
            return ToolResult(status="error", message=f"Invalid argument: {e}")

    # =========================================================================
    # Command Handlers
    # =========================================================================

    @staticmethod
    def _expect(args: list[str], count: int, usage: str) -> None:
        if len(args) != count:
            raise UsageError(usage)

    def _execute_new_disk(self, args: list[str]) -> ToolResult:
        self._expect(args, 1, "newDisk <capacity>")
        try:
            capacity = int(args[0])
        except ValueError:
            raise UsageError("newDisk <capacity>  (capacity must be an integer)") from None
        self.manager.new_disk(capacity)
        return ToolResult(
            status="success",
            message=f"Created new disk with capacity {capacity}",
            data={"capacity": capacity},
        )

    def _execute_new_doc(self, args: list[str]) -> ToolResult:
        if len(args) < 3:
            raise UsageError("newDoc <name> <type> <content>")
        name, doc_type = args[0], args[1]
        content = " ".join(args[2:])
        self.manager.new_doc(name, doc_type, content)
        return ToolResult(
            status="success",
            message=f"Created document: {name}",
            data={"name": name, "type": doc_type, "size": len(content.encode("utf-8"))},
        )

    def _execute_new_dir(self, args: list[str]) -> ToolResult:
        self._expect(args, 1, "newDir <name>")
        self.manager.new_dir(args[0])
        return ToolResult(status="success", message=f"Created directory: {args[0]}")

    def _execute_delete(self, args: list[str]) -> ToolResult:
        self._expect(args, 1, "delete <name>")
        self.manager.delete(args[0])
        return ToolResult(status="success", message=f"Deleted: {args[0]}")

    def _execute_rename(self, args: list[str]) -> ToolResult:
        self._expect(args, 2, "rename <old> <new>")
        self.manager.rename(args[0], args[1])
        return ToolResult(status="success", message=f"Renamed {args[0]} to {args[1]}")

    def _execute_change_dir(self, args: list[str]) -> ToolResult:
        self._expect(args, 1, "changeDir <name|..>")
        self.manager.change_dir(args[0])
        path = self.manager.working_path()
        return ToolResult(status="success", message=path, data={"path": path})

    def _execute_list(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "list")
        entries = self.manager.list()
        return ToolResult(
            status="success",
            message=format_listing(entries),
            data={"entries": [entry_row(e) for e in entries]},
        )

    def _execute_rlist(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "rList")
        entries = self.manager.recursive_list()
        return ToolResult(
            status="success",
            message=format_listing(entries),
            data={"entries": [entry_row(e) for e in entries]},
        )

    def _execute_pwd(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "pwd")
        path = self.manager.working_path()
        return ToolResult(
            status="success",
            message=path,
            data={
                "path": path,
                "used": self.manager.used_size,
                "capacity": self.manager.capacity,
            },
        )

    def _execute_store(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "store")
        self.manager.store()
        return ToolResult(
            status="success",
            message=f"Stored disk to {self.manager.storage.location}",
        )

    def _execute_load(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "load")
        self.manager.load()
        return ToolResult(
            status="success",
            message=f"Loaded disk from {self.manager.storage.location}",
        )

    def _execute_undo(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "undo")
        self.manager.undo()
        return ToolResult(
            status="success",
            message="Undone",
            data={
                "undo_depth": self.manager.undo_depth,
                "redo_depth": self.manager.redo_depth,
            },
        )

    def _execute_redo(self, args: list[str]) -> ToolResult:
        self._expect(args, 0, "redo")
        self.manager.redo()
        return ToolResult(
            status="success",
            message="Redone",
            data={
                "undo_depth": self.manager.undo_depth,
                "redo_depth": self.manager.redo_depth,
            },
        )

    def _execute_help(self, args: list[str]) -> ToolResult:
        return ToolResult(status="success", message=HELP_TEXT)

    def _execute_quit(self, args: list[str]) -> ToolResult:
        self.should_exit = True
        return ToolResult(status="success", message="Bye")
