"""
Default Collaborators

Minimal in-memory editor and UI state so the file subsystem can run without a
host application. Hosts with their own editor replace these through the
EditorCollaborator / UICollaborator protocols.
"""

import logging

from vfiles.registry import FileRegistry
from vfiles.storage.base import StorageBackend
from vfiles.sync.coordinator import PersistenceCoordinator
from vfiles.types import ActiveFileRecord, FileNode, OpenFileRecord

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "main"
EXPLORER_PANEL = "explorer"


class EditorState:
    """
    Open and active files per editor.

    Children lookups are answered from the registry's parent index. Changes to
    open/active files are persisted through the coordinator when a storage
    backend is attached.
    """

    def __init__(
        self,
        registry: FileRegistry,
        storage: StorageBackend | None = None,
        coordinator: PersistenceCoordinator | None = None,
    ):
        self.registry = registry
        self.storage = storage
        self.coordinator = coordinator
        self.open_files: dict[str, list[str]] = {}
        self.active_files: dict[str, str] = {}

    def get_children(self, file_id: str) -> list[FileNode]:
        return self.registry.children(file_id)

    async def re_open_files(
        self,
        open_files: list[OpenFileRecord],
        active_files: list[ActiveFileRecord],
    ) -> None:
        opened: dict[str, list[str]] = {}
        for record in sorted(open_files, key=lambda r: (r.editor, r.position)):
            opened.setdefault(record.editor, []).append(record.file_id)
        self.open_files = opened
        self.active_files = {record.editor: record.file_id for record in active_files}

    def open_file(self, file_id: str, editor: str = DEFAULT_EDITOR) -> None:
        """Open a file in an editor and make it active."""
        files = self.open_files.setdefault(editor, [])
        if file_id not in files:
            files.append(file_id)
        self.active_files[editor] = file_id
        self._persist("open_file", [file_id])

    async def close_file_from_all_editor(self, file_id: str) -> None:
        changed = False
        for editor, files in list(self.open_files.items()):
            if file_id not in files:
                continue
            files.remove(file_id)
            changed = True
            if self.active_files.get(editor) == file_id:
                if files:
                    self.active_files[editor] = files[-1]
                else:
                    del self.active_files[editor]
            if not files:
                del self.open_files[editor]
        if changed:
            self._persist("close_file", [file_id])

    def open_records(self) -> list[OpenFileRecord]:
        return [
            OpenFileRecord(editor=editor, file_id=file_id, position=position)
            for editor, files in self.open_files.items()
            for position, file_id in enumerate(files)
        ]

    def active_records(self) -> list[ActiveFileRecord]:
        return [
            ActiveFileRecord(editor=editor, file_id=file_id)
            for editor, file_id in self.active_files.items()
        ]

    def _persist(self, operation: str, file_ids: list[str]) -> None:
        if self.storage is None or self.coordinator is None:
            return
        storage = self.storage
        open_records = self.open_records()
        active_records = self.active_records()

        async def _write() -> None:
            await storage.write_open_files(open_records)
            await storage.write_active_files(active_records)

        self.coordinator.emit(operation, _write, file_ids=file_ids)


class UIState:
    """Tracks which side panel is visible."""

    def __init__(self) -> None:
        self.active_panel: str | None = None

    def show_explorer_panel(self) -> None:
        self.active_panel = EXPLORER_PANEL
