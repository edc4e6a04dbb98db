"""
Storage Backends

Embedded durable store using DuckDB.

Modules:
    base: Abstract storage interface
    errors: StorageError hierarchy
    duckdb/: Primary storage implementation

Store Directory Structure:
    my_store/
    ├── files.duckdb            # files, open_files, active_files tables
    └── backups/                # JSON exports (optional)

Design Principles:
    - Zero infrastructure (embedded database)
    - Passive mirror: written after the in-memory registry, read only at startup
    - One transaction per logical operation
"""

from vfiles.storage.base import StorageBackend
from vfiles.storage.duckdb.backend import DuckDBBackend
from vfiles.storage.errors import PartialWriteError, StorageError, TransactionError

__all__ = [
    "StorageBackend",
    "DuckDBBackend",
    "StorageError",
    "TransactionError",
    "PartialWriteError",
]
