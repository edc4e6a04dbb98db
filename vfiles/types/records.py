"""
Store and Reporting Records

Rows of the editor partitions, the startup snapshot, and entries of the
persistence error channel.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from vfiles.types.files import FileNode


class OpenFileRecord(BaseModel):
    """One open file in one editor, ordered by position."""

    editor: str = "main"
    file_id: str
    position: int = 0


class ActiveFileRecord(BaseModel):
    """The file currently focused in one editor."""

    editor: str = "main"
    file_id: str


class StoreSnapshot(BaseModel):
    """The three durable partitions, read within one transaction."""

    open_files: list[OpenFileRecord] = Field(default_factory=list)
    active_files: list[ActiveFileRecord] = Field(default_factory=list)
    files: list[FileNode] = Field(default_factory=list)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PersistenceFailure(BaseModel):
    """
    A logged-and-absorbed failure.

    Attributes:
        operation: Logical operation that failed (e.g. "move", "show_explorer_panel")
        file_ids: Node ids the operation was writing
        error: Rendered exception message
        failed_count: Number of items the store reported as failed (0 if unknown)
        occurred_at: ISO timestamp
    """

    operation: str
    file_ids: list[str] = Field(default_factory=list)
    error: str
    failed_count: int = 0
    occurred_at: str = Field(default_factory=_now)
