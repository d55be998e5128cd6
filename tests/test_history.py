"""Tests for the HistoryManager snapshot protocol."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from memvfs.config import VFSConfig
from memvfs.errors import (
    AtRootError,
    CapacityExceededError,
    DuplicateNameError,
    EmptyHistoryError,
    NotFoundError,
    PersistenceError,
)
from memvfs.history import HistoryManager, create_history_manager
from memvfs.storage.sqlite_storage import SQLiteStorage
from memvfs.types import Directory, Document


def names(entries: list) -> list[str]:
    return [e.name for e in entries]


class TestInitialState:
    """Tests for a freshly created manager."""

    def test_starts_with_default_disk(self, manager: HistoryManager) -> None:
        """The manager starts with an empty disk of the default capacity."""
        assert manager.capacity == 255
        assert manager.list() == []
        assert manager.working_path() == "/"
        assert manager.can_undo is False
        assert manager.can_redo is False

    def test_capacity_from_config(self, config: VFSConfig) -> None:
        """The initial disk capacity comes from the configuration."""
        config.disk.default_capacity = 1024

        assert HistoryManager(config).capacity == 1024

    def test_undo_on_empty_history_fails(self, manager: HistoryManager) -> None:
        """Undo with nothing recorded raises EmptyHistoryError."""
        with pytest.raises(EmptyHistoryError):
            manager.undo()

    def test_redo_on_empty_history_fails(self, manager: HistoryManager) -> None:
        """Redo with nothing undone raises EmptyHistoryError."""
        with pytest.raises(EmptyHistoryError):
            manager.redo()


class TestScenario:
    """End-to-end walk through the command set."""

    def test_full_scenario(self, manager: HistoryManager) -> None:
        """Create, navigate, delete, then undo and redo the delete."""
        manager.new_disk(255)
        manager.new_doc("a", "txt", "hello")
        manager.new_dir("d")
        manager.change_dir("d")
        manager.new_doc("b", "txt", "world")
        assert names(manager.list()) == ["b"]

        manager.change_dir("..")
        manager.delete("d")
        assert names(manager.list()) == ["a"]

        manager.undo()
        assert names(manager.list()) == ["a", "d"]
        manager.change_dir("d")
        assert names(manager.list()) == ["b"]
        manager.change_dir("..")

        # The two change_dir calls above were fresh commands; step back over them.
        manager.undo()
        manager.undo()
        manager.redo()
        manager.redo()
        assert manager.working_path() == "/"

    def test_undo_then_redo_delete(self, manager: HistoryManager) -> None:
        """Redo re-applies the delete that undo reverted."""
        manager.new_doc("a", "txt", "hello")
        manager.new_dir("d")
        manager.change_dir("d")
        manager.new_doc("b", "txt", "world")
        manager.change_dir("..")
        manager.delete("d")

        manager.undo()
        assert names(manager.recursive_list()) == ["a", "d", "b"]

        manager.redo()
        assert names(manager.recursive_list()) == ["a"]


class TestSnapshotProtocol:
    """Tests for snapshot capture, isolation and restore."""

    def test_each_command_pushes_one_snapshot(self, manager: HistoryManager) -> None:
        """Every mutating command grows the undo stack by one."""
        manager.new_doc("a", "txt", "x")
        manager.new_dir("d")
        manager.change_dir("d")
        manager.change_dir("..")
        manager.rename("a", "b")
        manager.delete("b")
        manager.new_disk(100)

        assert manager.undo_depth == 7

    def test_queries_do_not_push(self, manager: HistoryManager) -> None:
        """Listing and classification leave history alone."""
        manager.new_doc("a", "txt", "x")

        manager.list()
        manager.recursive_list()
        manager.is_document("a")
        manager.working_path()

        assert manager.undo_depth == 1

    def test_undone_document_is_really_gone(self, manager: HistoryManager) -> None:
        """After undoing a creation, the same name can be created again."""
        manager.new_doc("a", "txt", "first")
        manager.undo()

        manager.new_doc("a", "md", "second")

        doc = manager.find_file("a")
        assert isinstance(doc, Document)
        assert doc.type == "md"
        assert doc.content == "second"

    def test_undo_restores_cursor(self, manager: HistoryManager) -> None:
        """Undoing a change_dir moves the cursor back."""
        manager.new_dir("d")
        manager.change_dir("d")
        assert manager.working_path() == "/d"

        manager.undo()

        assert manager.working_path() == "/"

    def test_undo_restores_cursor_inside_subtree(self, manager: HistoryManager) -> None:
        """A snapshot taken inside a directory restores that position."""
        manager.new_dir("d")
        manager.change_dir("d")
        manager.new_doc("b", "txt", "x")

        manager.undo()

        assert manager.working_path() == "/d"
        assert manager.list() == []

    def test_returned_entries_are_copies(self, manager: HistoryManager) -> None:
        """Mutating a listed entry does not alter the live disk."""
        manager.new_doc("a", "txt", "hello")

        listed = manager.list()[0]
        assert isinstance(listed, Document)
        listed.content = "tampered"
        listed.name = "zzz"

        doc = manager.find_file("a")
        assert isinstance(doc, Document)
        assert doc.content == "hello"

    def test_history_is_isolated_from_live_disk(self, manager: HistoryManager) -> None:
        """Later mutations never leak into stored snapshots."""
        manager.new_dir("d")
        manager.change_dir("d")
        manager.new_doc("b", "txt", "x")
        manager.rename("b", "c")
        manager.change_dir("..")
        manager.rename("d", "dd")

        manager.undo()  # before rename d -> dd
        manager.undo()  # before change_dir ..
        manager.undo()  # before rename b -> c

        assert manager.working_path() == "/d"
        assert names(manager.list()) == ["b"]

    def test_n_undos_then_n_redos_round_trip(self, manager: HistoryManager) -> None:
        """Undoing and redoing N commands reproduces the final state."""
        manager.new_doc("a", "txt", "hello")
        manager.new_dir("d")
        manager.change_dir("d")
        manager.new_doc("b", "txt", "world")
        manager.new_dir("e")
        manager.change_dir("e")
        manager.change_dir("..")
        manager.rename("b", "bee")
        expected = manager.snapshot()
        n = manager.undo_depth

        for _ in range(n):
            manager.undo()
        assert manager.list() == []
        assert manager.working_path() == "/"

        for _ in range(n):
            manager.redo()

        assert manager.snapshot() == expected
        assert manager.working_path() == "/d"

    def test_fresh_command_clears_redo(self, manager: HistoryManager) -> None:
        """A new command after undo discards the redo history."""
        manager.new_doc("a", "txt", "x")
        manager.undo()
        assert manager.can_redo is True

        manager.new_doc("b", "txt", "y")

        assert manager.can_redo is False
        with pytest.raises(EmptyHistoryError):
            manager.redo()

    def test_undo_and_redo_keep_each_other(self, manager: HistoryManager) -> None:
        """Undo and redo move snapshots between stacks without loss."""
        manager.new_doc("a", "txt", "x")
        manager.new_doc("b", "txt", "y")

        manager.undo()
        manager.undo()
        assert (manager.undo_depth, manager.redo_depth) == (0, 2)

        manager.redo()
        assert (manager.undo_depth, manager.redo_depth) == (1, 1)
        assert names(manager.list()) == ["a"]

    def test_new_disk_is_undoable(self, manager: HistoryManager) -> None:
        """Replacing the disk can be undone."""
        manager.new_doc("a", "txt", "x")
        manager.new_disk(1000)
        assert manager.capacity == 1000
        assert manager.list() == []

        manager.undo()

        assert manager.capacity == 255
        assert names(manager.list()) == ["a"]


class TestFailedCommands:
    """Failed commands keep their speculative snapshot."""

    def test_failed_create_still_pushes_snapshot(self, manager: HistoryManager) -> None:
        """A duplicate name error leaves one extra snapshot on the undo stack."""
        manager.new_doc("a", "txt", "x")

        with pytest.raises(DuplicateNameError):
            manager.new_doc("a", "txt", "y")

        assert manager.undo_depth == 2
        manager.undo()
        assert names(manager.list()) == ["a"]

    def test_capacity_failure_leaves_tree_unchanged(self, manager: HistoryManager) -> None:
        """An oversized document is refused and the tree is untouched."""
        manager.new_disk(10)
        manager.new_doc("a", "txt", "12345")
        before = manager.snapshot()

        with pytest.raises(CapacityExceededError):
            manager.new_doc("b", "txt", "123456")

        assert manager.snapshot() == before
        assert manager.undo_depth == 3

    def test_navigation_failure_does_not_move_cursor(self, manager: HistoryManager) -> None:
        """Failed change_dir calls leave the cursor where it was."""
        manager.new_doc("a", "txt", "x")

        with pytest.raises(AtRootError):
            manager.change_dir("..")
        with pytest.raises(NotFoundError):
            manager.change_dir("ghost")

        assert manager.working_path() == "/"

    def test_invalid_capacity_keeps_live_disk(self, manager: HistoryManager) -> None:
        """new_disk with a bad capacity raises and keeps the current disk."""
        manager.new_doc("a", "txt", "x")

        with pytest.raises(ValueError):
            manager.new_disk(0)

        assert names(manager.list()) == ["a"]

    def test_failures_are_logged(self, manager: HistoryManager) -> None:
        """The operation log records both outcomes."""
        manager.new_dir("d")
        with pytest.raises(DuplicateNameError):
            manager.new_dir("d")

        assert [(log.operation, log.success) for log in manager.logs] == [
            ("new_dir", True),
            ("new_dir", False),
        ]
        assert "d" in (manager.logs[-1].error_message or "")

    def test_auto_log_disabled(self, config: VFSConfig) -> None:
        """No operation log is kept when auto_log is off."""
        config.auto_log = False
        manager = HistoryManager(config)

        manager.new_dir("d")

        assert manager.logs == []


class TestPersistence:
    """Tests for store and load through the manager."""

    def test_store_and_load_round_trip(self, manager: HistoryManager) -> None:
        """A stored disk loads back with its tree and cursor."""
        manager.new_doc("a", "txt", "hello")
        manager.new_dir("d")
        manager.change_dir("d")
        manager.new_doc("b", "txt", "world")
        stored = manager.snapshot()
        manager.store()

        manager.new_disk(50)
        manager.load()

        assert manager.snapshot() == stored
        assert manager.working_path() == "/d"

    def test_store_does_not_touch_history(self, manager: HistoryManager) -> None:
        """store() neither pushes nor clears snapshots."""
        manager.new_doc("a", "txt", "x")
        manager.undo()
        manager.redo()
        depths = (manager.undo_depth, manager.redo_depth)

        manager.store()

        assert (manager.undo_depth, manager.redo_depth) == depths

    def test_load_is_undoable(self, manager: HistoryManager) -> None:
        """Undo after load returns the pre-load disk."""
        manager.new_doc("stored", "txt", "x")
        manager.store()
        manager.new_disk(255)
        manager.new_doc("live", "txt", "y")

        manager.load()
        assert names(manager.list()) == ["stored"]

        manager.undo()
        assert names(manager.list()) == ["live"]

    def test_load_missing_file(self, manager: HistoryManager) -> None:
        """Loading without a stored image fails and keeps the live disk."""
        manager.new_dir("d")
        manager.change_dir("d")
        before = manager.snapshot()

        with pytest.raises(PersistenceError):
            manager.load()

        assert manager.snapshot() == before
        assert manager.working_path() == "/d"
        assert manager.undo_depth == 3

    def test_load_corrupt_file(self, manager: HistoryManager, store_path: Path) -> None:
        """A corrupt image raises PersistenceError."""
        store_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError):
            manager.load()

    def test_sqlite_storage_provider(self, tmp_path: Path) -> None:
        """The sqlite provider is selected from configuration."""
        config = VFSConfig()
        config.storage.provider = "sqlite"
        config.storage.path = str(tmp_path / "disk.sqlite")
        manager = HistoryManager(config)

        assert isinstance(manager.storage, SQLiteStorage)

        manager.new_dir("d")
        manager.store()
        manager.new_disk(255)
        manager.load()

        d = manager.find_file("d")
        assert isinstance(d, Directory)


class TestFactory:
    """Tests for create_history_manager."""

    def test_reads_environment(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Without a config, settings come from the environment."""
        monkeypatch.setenv("MEMVFS_CAPACITY", "512")
        monkeypatch.setenv("MEMVFS_STORE_PATH", str(tmp_path / "env.json"))

        manager = create_history_manager()

        assert manager.capacity == 512
        assert manager.storage.location == tmp_path / "env.json"


class TestDeepTrees:
    """History over trees nested far past the interpreter's recursion limit."""

    def test_mutate_undo_redo_at_depth(self, deep_manager: HistoryManager) -> None:
        """Commands keep snapshotting, undoing and redoing at the bottom of a deep tree."""
        deep_path = deep_manager.working_path()
        assert deep_path.count("/d") > 1000

        deep_manager.new_dir("x")
        deep_manager.change_dir("x")
        deep_manager.new_doc("leaf", "txt", "abc")
        assert deep_manager.working_path() == deep_path + "/x"

        deep_manager.undo()
        deep_manager.undo()
        assert deep_manager.working_path() == deep_path
        assert names(deep_manager.list()) == ["x"]

        deep_manager.redo()
        deep_manager.redo()
        assert deep_manager.working_path() == deep_path + "/x"
        assert names(deep_manager.list()) == ["leaf"]
        assert deep_manager.used_size == 3

    def test_queries_at_depth(self, deep_manager: HistoryManager) -> None:
        """Recursive listing and snapshots work from the root of a deep tree."""
        depth = len(deep_manager.snapshot().working_path_names())
        deep_manager.storage.load()["cwd"] = []
        deep_manager.load()

        assert len(deep_manager.recursive_list()) == depth
        assert deep_manager.snapshot().working_path() == "/"

    def test_load_deep_image_file(self, manager: HistoryManager, store_path: Path) -> None:
        """A deeply nested image file either loads or fails with PersistenceError."""
        depth = 3000
        tree = '{"kind": "directory", "name": "d", "children": [' * depth + "]}" * depth
        store_path.write_text(
            '{"format": "memvfs-disk", "version": 1, "capacity": 255, "cwd": [], '
            '"root": {"kind": "directory", "name": "", "children": [' + tree + "]}}",
            encoding="utf-8",
        )
        manager.new_doc("live", "txt", "x")

        try:
            manager.load()
        except PersistenceError:
            assert names(manager.list()) == ["live"]
        else:
            assert len(manager.recursive_list()) == depth


class TestSnapshotLogging:
    """Debug records for snapshot pushes and pops."""

    def test_push_and_pop_are_logged(
        self, manager: HistoryManager, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Fresh commands log a push; undo and redo log their pops."""
        caplog.set_level(logging.DEBUG, logger="memvfs.history")

        manager.new_dir("d")
        manager.undo()
        manager.redo()

        messages = [r.getMessage() for r in caplog.records if r.name == "memvfs.history"]
        assert "Pushed undo snapshot (depth 1)" in messages
        assert "Popped undo snapshot (undo depth 0, redo depth 1)" in messages
        assert "Popped redo snapshot (undo depth 1, redo depth 0)" in messages
