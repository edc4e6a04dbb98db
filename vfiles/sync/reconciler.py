"""
Startup Reconciler

Rebuilds the registry from the durable store when a session starts:

    1. Read open_files, active_files and files in one transaction
    2. Hand the editor partitions to the editor collaborator
    3. Rebuild the id -> node mapping with editable forced off
    4. Replace the registry wholesale

A failed load is reported and leaves the registry as it was; startup
continues either way.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vfiles.sync.reporting import ErrorReporter

if TYPE_CHECKING:
    from vfiles.editor.collaborators import EditorCollaborator
    from vfiles.registry import FileRegistry
    from vfiles.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class StartupReconciler:
    """
    Loads durable state into the registry.

    Usage:
        reconciler = StartupReconciler(storage, registry, editor, reporter)
        loaded = await reconciler.load()
    """

    def __init__(
        self,
        storage: StorageBackend,
        registry: FileRegistry,
        editor: EditorCollaborator,
        reporter: ErrorReporter,
    ):
        self.storage = storage
        self.registry = registry
        self.editor = editor
        self.reporter = reporter

    async def load(self) -> bool:
        """
        Reconcile the registry from the store.

        Returns:
            True if the registry was replaced, False if the load failed
        """
        try:
            snapshot = await self.storage.load_snapshot()
            await self.editor.re_open_files(snapshot.open_files, snapshot.active_files)
            files = {
                node.id: node.model_copy(update={"editable": False})
                for node in snapshot.files
            }
            self.registry.replace(files)
        except Exception as e:
            self.reporter.report("load_files", e)
            return False

        logger.info(f"Loaded {len(files)} existing files successfully")
        return True
