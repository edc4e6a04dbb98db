"""
File Registry - In-Memory Source of Truth

Holds the id -> FileNode mapping that every read is served from.

Commit model:
    - replace(): swaps in a fresh copy of a whole mapping (load, restore)
    - upsert() / remove() / update(): change exactly one entry

All commits are synchronous, so a caller that awaits nothing between a
commit and a read always sees its own write, and no other task can observe
a half-applied change.

A parent -> children index is maintained alongside every commit so that
directory traversal never scans the whole mapping.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from vfiles.types import FileNode

logger = logging.getLogger(__name__)

CommitListener = Callable[[str, "FileRegistry"], None]
"""Called after each commit with the commit kind ("replace", "upsert", "remove")."""


class FileRegistry:
    """
    Authoritative id -> FileNode mapping.

    Usage:
        registry = FileRegistry()
        registry.upsert(node)
        registry.children(directory_id)   # direct children, insertion order
        registry.remove(node.id)
    """

    def __init__(self, files: Mapping[str, FileNode] | None = None):
        self._files: dict[str, FileNode] = {}
        # parent id (None = root) -> ordered set of child ids
        self._children: dict[str | None, dict[str, None]] = {}
        self._filtered: list[FileNode] = []
        self._listeners: list[CommitListener] = []
        if files:
            self.replace(files)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def files(self) -> Mapping[str, FileNode]:
        """Read-only view of the live mapping."""
        return MappingProxyType(self._files)

    def get(self, file_id: str | None) -> FileNode | None:
        if not file_id:
            return None
        return self._files.get(file_id)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._files

    def __len__(self) -> int:
        return len(self._files)

    def values(self) -> list[FileNode]:
        return list(self._files.values())

    def snapshot(self) -> dict[str, FileNode]:
        """Point-in-time copy of the mapping."""
        return dict(self._files)

    def children(self, parent_id: str | None) -> list[FileNode]:
        """Direct children of a directory, or root-level nodes for None."""
        child_ids = self._children.get(parent_id, {})
        return [self._files[child_id] for child_id in child_ids]

    # -------------------------------------------------------------------------
    # Commits
    # -------------------------------------------------------------------------

    def replace(self, files: Mapping[str, FileNode]) -> None:
        """Swap the whole mapping."""
        new_files = dict(files)
        children: dict[str | None, dict[str, None]] = {}
        for file_id, node in new_files.items():
            children.setdefault(node.parent, {})[file_id] = None
        self._files = new_files
        self._children = children
        self._notify("replace")

    def upsert(self, node: FileNode) -> None:
        """Insert or replace one entry."""
        previous = self._files.get(node.id)
        if previous is not None and previous.parent != node.parent:
            self._unlink(previous)
        self._files[node.id] = node
        self._children.setdefault(node.parent, {})[node.id] = None
        self._notify("upsert")

    def update(self, file_id: str, **changes: Any) -> FileNode | None:
        """
        Copy-on-write update of one existing entry.

        Returns:
            The new node, or None if file_id is not registered (nothing is created)
        """
        current = self._files.get(file_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self.upsert(updated)
        return updated

    def remove(self, file_id: str) -> FileNode | None:
        """Remove one entry, returning it (or None if absent)."""
        node = self._files.pop(file_id, None)
        if node is None:
            return None
        self._unlink(node)
        self._notify("remove")
        return node

    def _unlink(self, node: FileNode) -> None:
        siblings = self._children.get(node.parent)
        if siblings is None:
            return
        siblings.pop(node.id, None)
        if not siblings:
            del self._children[node.parent]

    # -------------------------------------------------------------------------
    # Filtered Projection
    # -------------------------------------------------------------------------

    @property
    def filtered(self) -> list[FileNode]:
        """Result of the last search; never aliases the primary mapping."""
        return list(self._filtered)

    def set_filtered(self, nodes: Iterable[FileNode]) -> None:
        self._filtered = list(nodes)

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def subscribe(self, listener: CommitListener) -> Callable[[], None]:
        """Register a commit listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, kind: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(kind, self)
            except Exception as e:
                logger.warning(f"Registry listener failed on {kind}: {e}")
