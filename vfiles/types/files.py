"""
File Types

FileNode is the sole entity of the tree. Files and directories share the same
shape; hierarchy is expressed only through each node's immediate `parent` id.

Storage Models:
    - FileNode: A file or directory, keyed by its generated id
    - FileType: Node classification enum

Transport Models:
    - ExportPayload: Point-in-time snapshot of the registry for backup/restore
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class FileType(str, Enum):
    """Node classification."""

    FILE = "file"
    DIRECTORY = "directory"


def generate_file_id() -> str:
    """Return a fresh opaque identifier for a new node."""
    return str(uuid4())


class FileNode(BaseModel):
    """
    A file or directory in the tree.

    Nodes are frozen: every mutation goes through the registry, which swaps in
    a copy produced by `model_copy(update=...)`.

    Attributes:
        id: Unique identifier, generated at creation and never changed
        name: Display name
        type: FILE or DIRECTORY
        parent: Id of the containing directory, None for root-level nodes
        contents: Text payload (ignored for directories)
        editable: True only while a rename is in progress
    """

    id: str = Field(default_factory=generate_file_id)
    name: str = ""
    type: FileType = FileType.FILE
    parent: str | None = None
    contents: str = ""
    editable: bool = False

    model_config = ConfigDict(use_enum_values=True, frozen=True, validate_default=True)

    @property
    def is_directory(self) -> bool:
        return self.type == FileType.DIRECTORY


PERSISTED_FIELDS = ("id", "name", "type", "parent", "contents", "editable")
"""Column order of the persisted file record."""


class ExportPayload(BaseModel):
    """
    Snapshot of the whole registry, keyed by id.

    Serializes to `{"files": {<id>: {<node>}, ...}}`, the same shape accepted
    back by restore.
    """

    files: dict[str, FileNode] = Field(default_factory=dict)
