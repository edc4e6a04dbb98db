"""
Tree Operations Engine

Reparenting and deletion over the file registry.

Move:
    Only the target's `parent` changes. Children store just their immediate
    parent id, so the whole subtree follows without further writes. Target
    existence, target type and cycles are not validated.

Recursive Delete (post-order):
    deleteDirectory(d):
        for child in children(d):            # sequential
            directory -> deleteDirectory(child), stop if it failed
            file      -> delete(child), wait for its store write to settle
        remove d from registry, delete d from store

    A directory is therefore never removed while any descendant is still
    registered.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vfiles.editor.collaborators import EditorCollaborator
    from vfiles.registry import FileRegistry
    from vfiles.storage.base import StorageBackend
    from vfiles.sync.coordinator import PersistenceCoordinator
    from vfiles.types import FileNode

logger = logging.getLogger(__name__)


class TreeOperations:
    """
    Move and delete nodes, registry first, store second.

    Usage:
        tree = TreeOperations(registry, storage, coordinator, editor)
        await tree.move(file_id, directory_id)
        await tree.delete_directory(directory_id)
    """

    def __init__(
        self,
        registry: FileRegistry,
        storage: StorageBackend,
        coordinator: PersistenceCoordinator,
        editor: EditorCollaborator,
    ):
        self.registry = registry
        self.storage = storage
        self.coordinator = coordinator
        self.editor = editor

    def _is_known(self, file_id: str | None, operation: str) -> bool:
        if not file_id or file_id not in self.registry:
            logger.debug(f"{operation}: skipping unknown file {file_id!r}")
            return False
        return True

    async def move(self, file_id: str | None, new_parent_id: str | None) -> FileNode | None:
        """
        Reparent a node.

        Returns:
            The updated node, or None if file_id is falsy or unknown
        """
        if not self._is_known(file_id, "move"):
            return None
        assert file_id is not None

        node = self.registry.update(file_id, parent=new_parent_id, editable=False)
        self.coordinator.emit(
            "move",
            lambda: self.storage.modify_file(file_id, {"parent": new_parent_id}),
            file_ids=[file_id],
        )
        return node

    async def delete(self, file_id: str | None) -> bool:
        """Delete a single node. Returns False if it was falsy or unknown."""
        return await self._delete_file(file_id) is not None

    async def _delete_file(self, file_id: str | None) -> asyncio.Task[None] | None:
        if not self._is_known(file_id, "delete"):
            return None
        assert file_id is not None

        try:
            await self.editor.close_file_from_all_editor(file_id)
        except Exception as e:
            self.coordinator.reporter.report(
                "close_file_from_all_editor", e, file_ids=[file_id]
            )

        self.registry.remove(file_id)
        return self._emit_delete(file_id)

    def _emit_delete(self, file_id: str) -> asyncio.Task[None]:
        return self.coordinator.emit(
            "delete",
            lambda: self.storage.delete_file(file_id),
            file_ids=[file_id],
        )

    async def delete_directory(self, file_id: str | None) -> bool:
        """
        Delete a directory and everything below it, post-order.

        Each child is fully deleted (registry and store write settled) before
        the next one starts.

        Returns:
            False if file_id was falsy or unknown, or if a children lookup
            failed. A failed lookup stops the walk: the failing directory and
            every ancestor up to file_id stay registered, while siblings
            already deleted stay deleted.
        """
        if not self._is_known(file_id, "delete_directory"):
            return False
        assert file_id is not None

        try:
            children = list(self.editor.get_children(file_id))
        except Exception as e:
            self.coordinator.reporter.report("get_children", e, file_ids=[file_id])
            return False

        for child in children:
            if child.is_directory:
                # A subtree that could not be emptied keeps this directory too
                if not await self.delete_directory(child.id):
                    return False
            else:
                task = await self._delete_file(child.id)
                if task is not None:
                    await task

        self.registry.remove(file_id)
        await self._emit_delete(file_id)
        logger.debug(f"Directory {file_id} deleted with {len(children)} children")
        return True
