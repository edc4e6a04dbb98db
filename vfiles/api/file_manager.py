"""
FileManager - Primary Entry Point

The FileManager class owns a store directory and exposes the action surface
of the file tree: load, create, move, update, rename, delete, search, export
and restore.

A store is a self-contained directory containing:
    - files.duckdb: files, open_files and active_files tables

Every mutating action commits to the in-memory registry before returning and
schedules the matching durable write in the background. Store failures are
logged and recorded in `failures`; they never surface as exceptions.

Example:
    >>> async with FileManager("./my_store") as manager:
    ...     await manager.load_files()
    ...     docs = await manager.create_directory(name="docs")
    ...     note = await manager.create_file(name="todo.md", parent=docs.id)
    ...     await manager.search_files("todo")
    ...     payload = await manager.create_export_payload()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from vfiles.registry import FileRegistry
from vfiles.sync import ErrorReporter, PersistenceCoordinator, StartupReconciler
from vfiles.types import ExportPayload, FileNode, FileType, PersistenceFailure

if TYPE_CHECKING:
    from vfiles.config.settings import VFilesConfig
    from vfiles.editor.collaborators import EditorCollaborator, UICollaborator
    from vfiles.search import FileSearch
    from vfiles.storage.base import StorageBackend
    from vfiles.transfer import RestoreInput, TreeSerializer
    from vfiles.tree import TreeOperations

logger = logging.getLogger(__name__)


class FileManager:
    """
    A hierarchical file tree mirrored to a local DuckDB store.

    Args:
        path: Store directory. Created if it doesn't exist.
        config: Optional configuration. Uses defaults if not provided.
        create: If True, create directory if missing. Default True.
        storage: Optional backend, replacing the DuckDB file in `path`.
        editor: Optional editor collaborator. Defaults to EditorState.
        ui: Optional UI collaborator. Defaults to UIState.
    """

    def __init__(
        self,
        path: str | Path,
        config: VFilesConfig | None = None,
        create: bool = True,
        storage: StorageBackend | None = None,
        editor: EditorCollaborator | None = None,
        ui: UICollaborator | None = None,
    ) -> None:
        self._path = Path(path).resolve()
        self._create = create

        if config is None:
            from vfiles.config import VFilesConfig
            config = VFilesConfig()
        self._config = config

        self.registry = FileRegistry()
        self.reporter = ErrorReporter(history_size=config.failure_history_size)
        self.coordinator = PersistenceCoordinator(self.reporter)

        self._storage = storage
        self._editor = editor
        self._ui = ui

        # Lazy-initialized components
        self._tree: TreeOperations | None = None
        self._search: FileSearch | None = None
        self._serializer: TreeSerializer | None = None
        self._reconciler: StartupReconciler | None = None
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        """Lazy initialization of storage and components on first use."""
        if self._initialized:
            return

        if self._create:
            self._path.mkdir(parents=True, exist_ok=True)
        elif not self._path.exists():
            raise FileNotFoundError(f"File store not found: {self._path}")

        if self._storage is None:
            from vfiles.storage.duckdb import DuckDBBackend
            self._storage = DuckDBBackend(self._path / self._config.database_filename)
        await self._storage.initialize()

        if self._editor is None:
            from vfiles.editor import EditorState
            self._editor = EditorState(self.registry, self._storage, self.coordinator)
        if self._ui is None:
            from vfiles.editor import UIState
            self._ui = UIState()

        from vfiles.search import FileSearch
        from vfiles.transfer import TreeSerializer
        from vfiles.tree import TreeOperations

        self._tree = TreeOperations(self.registry, self._storage, self.coordinator, self._editor)
        self._search = FileSearch(
            self.registry,
            keys=self._config.search_keys,
            threshold=self._config.search_threshold,
        )
        self._serializer = TreeSerializer(
            self.registry,
            self._storage,
            self.coordinator,
            indent=self._config.backup_indent,
            lock_timeout=self._config.lock_timeout,
        )
        self._reconciler = StartupReconciler(
            self._storage, self.registry, self._editor, self.reporter
        )
        self._initialized = True

    # === Lifecycle ===

    async def __aenter__(self) -> FileManager:
        """Async context manager entry."""
        await self._ensure_initialized()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def flush(self) -> None:
        """Wait for every scheduled store write to settle."""
        await self.coordinator.flush()

    async def close(self) -> None:
        """Flush pending writes and release the store."""
        await self.coordinator.flush()
        if self._storage is not None and self._initialized:
            await self._storage.close()
        self._tree = None
        self._search = None
        self._serializer = None
        self._reconciler = None
        self._initialized = False

    # === Properties ===

    @property
    def path(self) -> Path:
        """Path to the store directory."""
        return self._path

    @property
    def config(self) -> VFilesConfig:
        """Current configuration."""
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def storage(self) -> StorageBackend | None:
        return self._storage

    @property
    def editor(self) -> EditorCollaborator | None:
        return self._editor

    @property
    def ui(self) -> UICollaborator | None:
        return self._ui

    @property
    def files(self) -> Mapping[str, FileNode]:
        """Live read-only id -> node mapping."""
        return self.registry.files

    @property
    def filtered_files(self) -> list[FileNode]:
        """Results of the last search."""
        return self.registry.filtered

    @property
    def failures(self) -> list[PersistenceFailure]:
        """Absorbed store and collaborator failures, oldest first."""
        return self.reporter.failures

    # === Startup ===

    async def load_files(self) -> bool:
        """Rebuild the registry from the store. Returns False if the load failed."""
        await self._ensure_initialized()
        assert self._reconciler is not None
        return await self._reconciler.load()

    # === Creation ===

    async def create_file(
        self, details: Mapping[str, Any] | None = None, **fields: Any
    ) -> FileNode:
        """Create a FILE node and return it."""
        return await self._create_node(FileType.FILE, details, fields)

    async def create_directory(
        self, details: Mapping[str, Any] | None = None, **fields: Any
    ) -> FileNode:
        """Create a DIRECTORY node and return it."""
        return await self._create_node(FileType.DIRECTORY, details, fields)

    async def _create_node(
        self,
        file_type: FileType,
        details: Mapping[str, Any] | None,
        fields: dict[str, Any],
    ) -> FileNode:
        await self._ensure_initialized()
        assert self._storage is not None
        self._show_explorer_panel()

        data = {**(details or {}), **fields}
        # id and type are always assigned here
        data.pop("id", None)
        data["type"] = file_type
        if not data.get("name"):
            data["name"] = (
                self._config.default_directory_name
                if file_type == FileType.DIRECTORY
                else self._config.default_file_name
            )

        node = FileNode.model_validate(data)
        self.registry.upsert(node)

        storage = self._storage
        self.coordinator.emit("create", lambda: storage.add_file(node), file_ids=[node.id])
        return node

    def _show_explorer_panel(self) -> None:
        assert self._ui is not None
        try:
            self._ui.show_explorer_panel()
        except Exception as e:
            self.reporter.report("show_explorer_panel", e)

    # === Updates ===

    async def move_file(self, file_id: str | None, directory_id: str | None) -> FileNode | None:
        """Reparent a node. No-op for falsy or unknown ids."""
        await self._ensure_initialized()
        assert self._tree is not None
        return await self._tree.move(file_id, directory_id)

    async def update_file_contents(self, file_id: str | None, contents: str) -> FileNode | None:
        """Replace a file's contents. No-op for falsy or unknown ids."""
        return await self._modify("update_contents", file_id, {"contents": contents})

    async def rename_file(self, file_id: str | None, name: str) -> FileNode | None:
        """Rename a node and leave rename mode. No-op for falsy or unknown ids."""
        return await self._modify("rename", file_id, {"name": name}, editable=False)

    async def open_rename_mode(self, file_id: str | None) -> FileNode | None:
        """Mark a node as being renamed. Registry only; never persisted."""
        await self._ensure_initialized()
        if not file_id or file_id not in self.registry:
            return None
        return self.registry.update(file_id, editable=True)

    async def _modify(
        self,
        operation: str,
        file_id: str | None,
        changes: dict[str, Any],
        **transient: Any,
    ) -> FileNode | None:
        await self._ensure_initialized()
        assert self._storage is not None
        if not file_id or file_id not in self.registry:
            logger.debug(f"{operation}: skipping unknown file {file_id!r}")
            return None

        node = self.registry.update(file_id, **changes, **transient)
        storage = self._storage
        self.coordinator.emit(
            operation,
            lambda: storage.modify_file(file_id, changes),
            file_ids=[file_id],
        )
        return node

    # === Deletion ===

    async def delete_file(self, file_id: str | None) -> bool:
        """Delete a single node. Returns False for falsy or unknown ids."""
        await self._ensure_initialized()
        assert self._tree is not None
        return await self._tree.delete(file_id)

    async def delete_directory(self, file_id: str | None) -> bool:
        """Delete a directory and all of its descendants, post-order."""
        await self._ensure_initialized()
        assert self._tree is not None
        return await self._tree.delete_directory(file_id)

    # === Search ===

    async def search_files(self, value: str) -> list[FileNode]:
        """Fuzzy search names and contents into the filtered projection."""
        await self._ensure_initialized()
        assert self._search is not None
        return self._search.search(value)

    # === Import / Export ===

    async def create_export_payload(self) -> ExportPayload:
        """Snapshot of the whole tree, `{files: {id: node}}`."""
        await self._ensure_initialized()
        assert self._serializer is not None
        return self._serializer.export()

    async def restore_files(self, payload: RestoreInput) -> bool:
        """Merge a payload into the tree and bulk-persist the incoming nodes."""
        await self._ensure_initialized()
        assert self._serializer is not None
        return self._serializer.restore(payload)

    async def export_to_file(self, path: str | Path) -> Path:
        """Write the export payload as a JSON backup."""
        await self._ensure_initialized()
        assert self._serializer is not None
        return self._serializer.write_backup(path)

    async def restore_from_file(self, path: str | Path) -> bool:
        """Restore from a JSON backup written by export_to_file."""
        await self._ensure_initialized()
        assert self._serializer is not None
        return self._serializer.restore(self._serializer.read_backup(path))

    # === Statistics ===

    async def stats(self) -> dict[str, int]:
        """
        Counts of registered and stored nodes.

        Returns:
            Dict with keys: files, directories, stored, pending_writes, failures
        """
        await self._ensure_initialized()
        assert self._storage is not None
        nodes = self.registry.values()
        directories = sum(1 for node in nodes if node.is_directory)
        return {
            "files": len(nodes) - directories,
            "directories": directories,
            "stored": await self._storage.count_files(),
            "pending_writes": self.coordinator.pending,
            "failures": len(self.reporter.failures),
        }
