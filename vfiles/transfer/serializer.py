"""
Tree Serializer - Export and Restore

Export:
    Snapshot of the whole registry as ExportPayload(files={id: node}).

Restore:
    1. Rebuild every incoming entry as a canonical FileNode (defaults
       recomputed, the mapping key is the id)
    2. Merge over the current registry: incoming wins on id conflicts,
       everything else is kept
    3. Commit the merged mapping with a single replace()
    4. Bulk-write only the incoming nodes to the store

Backups:
    Payloads can be written to / read from JSON files. Writes hold a file
    lock next to the target so concurrent exports never interleave.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

from filelock import FileLock
from pydantic import ValidationError

from vfiles.types import ExportPayload, FileNode

if TYPE_CHECKING:
    from vfiles.registry import FileRegistry
    from vfiles.storage.base import StorageBackend
    from vfiles.sync.coordinator import PersistenceCoordinator

logger = logging.getLogger(__name__)

RestoreInput = Union[ExportPayload, Mapping[str, Any]]


class TreeSerializer:
    """
    Snapshots and merges the registry.

    Usage:
        serializer = TreeSerializer(registry, storage, coordinator)
        payload = serializer.export()
        ok = serializer.restore(payload)
    """

    def __init__(
        self,
        registry: FileRegistry,
        storage: StorageBackend,
        coordinator: PersistenceCoordinator,
        indent: int = 2,
        lock_timeout: float = 30.0,
    ):
        self.registry = registry
        self.storage = storage
        self.coordinator = coordinator
        self.indent = indent
        self.lock_timeout = lock_timeout

    def export(self) -> ExportPayload:
        """Snapshot of the full registry, keyed by id."""
        return ExportPayload(files=self.registry.snapshot())

    def restore(self, incoming: RestoreInput) -> bool:
        """
        Merge incoming nodes into the registry and bulk-persist them.

        Args:
            incoming: ExportPayload, {"files": {...}}, or a bare id -> entry mapping

        Returns:
            True if every entry was restored, False if some were skipped as
            invalid or the payload itself was not a mapping of files
        """
        try:
            entries = self._entries(incoming)
        except TypeError as e:
            self.coordinator.reporter.report("restore", e)
            return False

        restored: dict[str, FileNode] = {}
        skipped: list[str] = []
        for file_id, entry in entries.items():
            try:
                restored[file_id] = self._canonical_node(file_id, entry)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping invalid restore entry {file_id}: {e}")
                skipped.append(file_id)

        merged = {**self.registry.snapshot(), **restored}
        self.registry.replace(merged)

        nodes = list(restored.values())
        self.coordinator.emit(
            "restore",
            lambda: self.storage.bulk_put_files(nodes),
            file_ids=list(restored),
        )
        logger.info(f"Restored {len(restored)} files ({len(skipped)} skipped)")
        return not skipped

    @staticmethod
    def _entries(incoming: RestoreInput) -> Mapping[str, Any]:
        if isinstance(incoming, ExportPayload):
            return incoming.files
        if not isinstance(incoming, Mapping):
            raise TypeError(f"Expected a payload mapping, got {type(incoming).__name__}")
        files = incoming.get("files", incoming)
        if not isinstance(files, Mapping):
            raise TypeError(f"Expected a mapping of files, got {type(files).__name__}")
        return files

    @staticmethod
    def _canonical_node(file_id: str, entry: Any) -> FileNode:
        if isinstance(entry, FileNode):
            data = entry.model_dump()
        elif isinstance(entry, Mapping):
            data = dict(entry)
        else:
            raise TypeError(f"Unsupported entry type: {type(entry).__name__}")
        data["id"] = file_id
        return FileNode.model_validate(data)

    # -------------------------------------------------------------------------
    # Backup Files
    # -------------------------------------------------------------------------

    def write_backup(self, path: str | Path) -> Path:
        """Write the current export payload to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.export()
        with FileLock(f"{path}.lock", timeout=self.lock_timeout):
            path.write_text(payload.model_dump_json(indent=self.indent))
        logger.info(f"Exported {len(payload.files)} files to {path}")
        return path

    @staticmethod
    def read_backup(path: str | Path) -> ExportPayload:
        """
        Parse a JSON backup.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file is not a valid payload
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Backup file not found: {path}")
        return ExportPayload.model_validate_json(path.read_text())
