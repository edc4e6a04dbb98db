"""
File Registry

In-memory authoritative id -> FileNode mapping with a parent -> children
index and a separate filtered-results projection.

Modules:
    registry: FileRegistry class
"""

from vfiles.registry.registry import CommitListener, FileRegistry

__all__ = ["FileRegistry", "CommitListener"]
