"""
Collaborator Protocols

The file subsystem depends on two external modules only at their boundary:
an editor that tracks open/active files and answers children lookups, and a
UI that controls panel visibility.
"""

from typing import Protocol, runtime_checkable

from vfiles.types import ActiveFileRecord, FileNode, OpenFileRecord


@runtime_checkable
class EditorCollaborator(Protocol):
    """Editor state consumed by tree operations and startup."""

    async def re_open_files(
        self,
        open_files: list[OpenFileRecord],
        active_files: list[ActiveFileRecord],
    ) -> None:
        """Recompute open/active files from the persisted partitions."""
        ...

    async def close_file_from_all_editor(self, file_id: str) -> None:
        """Close a file in every editor view."""
        ...

    def get_children(self, file_id: str) -> list[FileNode]:
        """Direct children of a directory."""
        ...


@runtime_checkable
class UICollaborator(Protocol):
    """UI visibility consumed by create operations."""

    def show_explorer_panel(self) -> None:
        ...
