"""
Tests for the FileManager facade.

Tests cover:
- Instantiation and lazy initialization
- Create / move / update / rename / delete actions
- Persistence across sessions
- Search, export and restore
- Absorbed failures and stats
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from vfiles.api.file_manager import FileManager
from vfiles.config import VFilesConfig
from vfiles.storage import PartialWriteError
from vfiles.types import ExportPayload, FileNode


class TestInstantiation:
    """Tests for FileManager instantiation."""

    def test_instantiation_does_not_initialize(self, tmp_path: Path):
        manager = FileManager(tmp_path / "store")
        assert manager.is_initialized is False
        assert manager.storage is None
        assert manager.path == (tmp_path / "store").resolve()
        assert not (tmp_path / "store").exists()

    def test_custom_config(self, tmp_path: Path):
        config = VFilesConfig(default_file_name="new.txt")
        manager = FileManager(tmp_path, config=config)
        assert manager.config.default_file_name == "new.txt"

    @pytest.mark.asyncio
    async def test_missing_store_without_create(self, tmp_path: Path):
        manager = FileManager(tmp_path / "missing", create=False)
        with pytest.raises(FileNotFoundError, match="File store not found"):
            await manager.load_files()

    @pytest.mark.asyncio
    async def test_context_manager_creates_store(self, tmp_path: Path):
        store = tmp_path / "store"
        async with FileManager(store) as manager:
            assert manager.is_initialized
            assert await manager.load_files() is True
            assert manager.files == {}

        assert (store / "files.duckdb").exists()
        assert manager.is_initialized is False


class TestCreate:
    """Tests for create_file / create_directory."""

    @pytest.mark.asyncio
    async def test_create_file_defaults(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            node = await manager.create_file()

            assert manager.files[node.id] == node
            assert node.name == "Untitled"
            assert node.type == "file"
            assert node.parent is None
            assert manager.ui.active_panel == "explorer"

    @pytest.mark.asyncio
    async def test_create_directory_with_details(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            docs = await manager.create_directory({"name": "docs"})
            note = await manager.create_file(name="todo.md", parent=docs.id, contents="- a")

            assert docs.is_directory
            assert [n.id for n in manager.registry.children(docs.id)] == [note.id]
            assert note.contents == "- a"

    @pytest.mark.asyncio
    async def test_create_ignores_id_and_type(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            first = await manager.create_file(id="fixed", type="directory", name="a")
            second = await manager.create_file(id="fixed", name="b")

            assert first.id != "fixed"
            assert first.id != second.id
            assert first.type == "file"
            assert len(manager.files) == 2

    @pytest.mark.asyncio
    async def test_create_persists(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            await manager.create_file(name="a")
            await manager.create_directory(name="b")
            await manager.flush()

            stats = await manager.stats()
            assert stats["stored"] == 2
            assert stats["files"] == 1
            assert stats["directories"] == 1
            assert stats["pending_writes"] == 0
            assert stats["failures"] == 0

    @pytest.mark.asyncio
    async def test_ui_failure_absorbed(self, tmp_path: Path):
        ui = MagicMock()
        ui.show_explorer_panel.side_effect = RuntimeError("no window")

        async with FileManager(tmp_path, ui=ui) as manager:
            node = await manager.create_file(name="a")

            assert node.id in manager.files
            assert manager.failures[0].operation == "show_explorer_panel"


class TestUpdates:
    """Tests for move / contents / rename."""

    @pytest.mark.asyncio
    async def test_update_contents(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            node = await manager.create_file(name="a")
            updated = await manager.update_file_contents(node.id, "hello")

            assert updated.contents == "hello"
            assert manager.files[node.id].contents == "hello"

    @pytest.mark.asyncio
    async def test_rename_mode(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            node = await manager.create_file(name="a")

            await manager.open_rename_mode(node.id)
            assert manager.files[node.id].editable is True

            renamed = await manager.rename_file(node.id, "b")
            assert renamed.name == "b"
            assert renamed.editable is False

    @pytest.mark.asyncio
    async def test_move_is_parent_only(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            src = await manager.create_directory(name="src")
            dst = await manager.create_directory(name="dst")
            note = await manager.create_file(name="a", parent=src.id, contents="x")

            moved = await manager.move_file(note.id, dst.id)

            assert moved.parent == dst.id
            assert moved.name == "a"
            assert moved.contents == "x"
            assert manager.files[src.id] == src

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_id", ["", None, "ghost"])
    async def test_unknown_ids_are_noops(self, tmp_path: Path, file_id):
        async with FileManager(tmp_path) as manager:
            await manager.create_file(name="a")
            await manager.flush()
            before = dict(manager.files)

            assert await manager.move_file(file_id, None) is None
            assert await manager.update_file_contents(file_id, "x") is None
            assert await manager.rename_file(file_id, "x") is None
            assert await manager.open_rename_mode(file_id) is None
            assert await manager.delete_file(file_id) is False
            assert await manager.delete_directory(file_id) is False
            await manager.flush()

            assert dict(manager.files) == before
            assert manager.failures == []

    @pytest.mark.asyncio
    async def test_store_failure_keeps_registry(self, tmp_path: Path):
        storage = AsyncMock()
        storage.modify_file.side_effect = PartialWriteError("missing", failures=["x"])

        async with FileManager(tmp_path, storage=storage) as manager:
            node = await manager.create_file(name="a")
            await manager.update_file_contents(node.id, "kept")
            await manager.flush()

            assert manager.files[node.id].contents == "kept"
            assert manager.failures[0].operation == "update_contents"
            assert manager.failures[0].failed_count == 1


class TestDelete:
    """Tests for delete_file / delete_directory."""

    @pytest.mark.asyncio
    async def test_delete_directory_removes_subtree(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            d1 = await manager.create_directory(name="d1")
            await manager.create_file(name="f1", parent=d1.id)
            d2 = await manager.create_directory(name="d2", parent=d1.id)
            await manager.create_file(name="f2", parent=d2.id)
            keep = await manager.create_file(name="keep")

            assert await manager.delete_directory(d1.id) is True
            await manager.flush()

            assert set(manager.files) == {keep.id}
            assert (await manager.stats())["stored"] == 1

    @pytest.mark.asyncio
    async def test_delete_closes_open_file(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            note = await manager.create_file(name="a")
            manager.editor.open_file(note.id)

            assert await manager.delete_file(note.id) is True
            assert manager.editor.open_files == {}
            assert note.id not in manager.files


class TestPersistence:
    """Tests for reloading a store in a new session."""

    @pytest.mark.asyncio
    async def test_state_survives_sessions(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            await manager.load_files()
            docs = await manager.create_directory(name="docs")
            note = await manager.create_file(name="todo.md", parent=docs.id)
            await manager.update_file_contents(note.id, "ship it")
            await manager.rename_file(note.id, "done.md")
            await manager.open_rename_mode(docs.id)
            manager.editor.open_file(note.id)

        async with FileManager(tmp_path, create=False) as manager:
            assert await manager.load_files() is True

            assert set(manager.files) == {docs.id, note.id}
            loaded = manager.files[note.id]
            assert loaded.name == "done.md"
            assert loaded.contents == "ship it"
            assert loaded.parent == docs.id
            assert manager.files[docs.id].editable is False
            assert manager.editor.open_files == {"main": [note.id]}
            assert manager.editor.active_files == {"main": note.id}

    @pytest.mark.asyncio
    async def test_moved_and_deleted_survive(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            a = await manager.create_directory(name="a")
            b = await manager.create_file(name="b")
            c = await manager.create_file(name="c")
            await manager.move_file(b.id, a.id)
            await manager.delete_file(c.id)

        async with FileManager(tmp_path) as manager:
            await manager.load_files()
            assert set(manager.files) == {a.id, b.id}
            assert manager.files[b.id].parent == a.id


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_populates_filtered(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            todo = await manager.create_file(name="todo.md")
            await manager.create_file(name="readme.md")

            results = await manager.search_files("todo")

            assert [n.id for n in results] == [todo.id]
            assert [n.id for n in manager.filtered_files] == [todo.id]
            assert len(manager.files) == 2

            assert await manager.search_files("") == []
            assert manager.filtered_files == []


class TestExportRestore:
    @pytest.mark.asyncio
    async def test_payload_round_trip_between_stores(self, tmp_path: Path):
        async with FileManager(tmp_path / "one") as source:
            docs = await source.create_directory(name="docs")
            await source.create_file(name="a", parent=docs.id)
            payload = await source.create_export_payload()

        async with FileManager(tmp_path / "two") as target:
            existing = await target.create_file(name="local")
            assert await target.restore_files(payload) is True
            await target.flush()

            assert set(target.files) == set(payload.files) | {existing.id}
            assert (await target.stats())["stored"] == 3

    @pytest.mark.asyncio
    async def test_restore_raw_dict(self, tmp_path: Path):
        async with FileManager(tmp_path) as manager:
            ok = await manager.restore_files({"files": {"f1": {"name": "x.txt"}}})

            assert ok is True
            assert isinstance(manager.files["f1"], FileNode)

    @pytest.mark.asyncio
    async def test_backup_files(self, tmp_path: Path):
        backup = tmp_path / "backup.json"

        async with FileManager(tmp_path / "one") as source:
            await source.create_file(name="a", contents="body")
            path = await source.export_to_file(backup)
            assert path == backup

        async with FileManager(tmp_path / "two") as target:
            assert await target.restore_from_file(backup) is True
            (node,) = target.files.values()
            assert node.contents == "body"

        payload = ExportPayload.model_validate_json(backup.read_text())
        assert node.id in payload.files
