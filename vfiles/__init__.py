"""
vfiles - Embedded Hierarchical File Tree

An in-memory file/directory tree mirrored, best-effort, into a local DuckDB
store. Supports recursive directory deletion, reparenting, fuzzy search and
whole-tree export/restore.

Example:
    >>> from vfiles import FileManager
    >>> async with FileManager("./my_store") as manager:
    ...     await manager.load_files()
    ...     note = await manager.create_file(name="todo.md")
    ...     await manager.search_files("todo")

Main Classes:
    FileManager: Primary entry point for all operations
    VFilesConfig: Configuration management
"""

__version__ = "0.1.0"


# Public API - lazy imports to keep `import vfiles` cheap
def __getattr__(name: str):
    """Lazy import public API components."""

    if name == "FileManager":
        from vfiles.api.file_manager import FileManager
        return FileManager

    if name == "VFilesConfig":
        from vfiles.config.settings import VFilesConfig
        return VFilesConfig

    # Types
    if name in ("FileNode", "FileType", "ExportPayload", "PersistenceFailure"):
        from vfiles import types
        return getattr(types, name)

    raise AttributeError(f"module 'vfiles' has no attribute {name!r}")


__all__ = [
    # Main classes
    "FileManager",
    "VFilesConfig",

    # Types
    "FileNode",
    "FileType",
    "ExportPayload",
    "PersistenceFailure",

    # Version
    "__version__",
]
