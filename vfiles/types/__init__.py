"""
Type Definitions

Pydantic models for all data structures.

Storage Models (persisted to DuckDB):
    - FileNode, FileType - Files and directories
    - OpenFileRecord, ActiveFileRecord - Editor partitions

Transport Models:
    - ExportPayload - Registry snapshot for backup and restore
    - StoreSnapshot - All partitions read at startup

Reporting Models:
    - PersistenceFailure - Entry of the persistence error channel

All types are:
    - Pydantic BaseModel subclasses
    - Serializable to/from JSON
"""

from vfiles.types.files import (
    PERSISTED_FIELDS,
    ExportPayload,
    FileNode,
    FileType,
    generate_file_id,
)
from vfiles.types.records import (
    ActiveFileRecord,
    OpenFileRecord,
    PersistenceFailure,
    StoreSnapshot,
)

__all__ = [
    # Storage Models
    "FileNode",
    "FileType",
    "OpenFileRecord",
    "ActiveFileRecord",
    "PERSISTED_FIELDS",
    "generate_file_id",
    # Transport Models
    "ExportPayload",
    "StoreSnapshot",
    # Reporting Models
    "PersistenceFailure",
]
