"""
DuckDB Storage Backend

Transactional local persistence for the file tree.

Modules:
    backend: DuckDBBackend class

Table Schemas:
    files:
        id, name, type, parent, contents, editable

    open_files:
        editor, file_id, position

    active_files:
        editor, file_id
"""

from vfiles.storage.duckdb.backend import MEMORY_DATABASE, DuckDBBackend

__all__ = ["DuckDBBackend", "MEMORY_DATABASE"]
