"""
Abstract Storage Backend Interface

Defines the contract for durable stores mirroring the file registry.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vfiles.types import (
        ActiveFileRecord,
        FileNode,
        OpenFileRecord,
        StoreSnapshot,
    )


class StorageBackend(ABC):
    """
    Abstract interface for durable stores.

    A store holds three partitions: file nodes, open-file references and
    active-file references. Every method runs in its own transaction scope.

    The store is a passive mirror: it is written after the registry has
    already changed and is only read back at startup (`load_snapshot`).

    Lifecycle:
        backend = DuckDBBackend(path)
        await backend.initialize()
        # ... operations ...
        await backend.close()

    Or using context manager:
        async with DuckDBBackend(path) as backend:
            await backend.add_file(node)

    Errors:
        Implementations raise StorageError subclasses (TransactionError,
        PartialWriteError). Callers decide whether to absorb them.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize storage (create tables)."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close storage and release resources."""
        ...

    async def __aenter__(self) -> "StorageBackend":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # File Partition
    # -------------------------------------------------------------------------

    @abstractmethod
    async def add_file(self, node: "FileNode") -> None:
        """Insert a new node. Fails if the id already exists."""
        ...

    @abstractmethod
    async def modify_file(self, file_id: str, changes: dict[str, Any]) -> None:
        """Update fields of one node. Raises PartialWriteError if it is missing."""
        ...

    @abstractmethod
    async def delete_file(self, file_id: str) -> None:
        """Delete one node. Deleting a missing node is not an error."""
        ...

    @abstractmethod
    async def bulk_put_files(self, nodes: list["FileNode"]) -> None:
        """Insert or replace many nodes in one transaction."""
        ...

    @abstractmethod
    async def count_files(self) -> int:
        """Return total number of stored nodes."""
        ...

    # -------------------------------------------------------------------------
    # Editor Partitions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def write_open_files(self, records: list["OpenFileRecord"]) -> None:
        """Replace the open-file partition."""
        ...

    @abstractmethod
    async def write_active_files(self, records: list["ActiveFileRecord"]) -> None:
        """Replace the active-file partition."""
        ...

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    @abstractmethod
    async def load_snapshot(self) -> "StoreSnapshot":
        """Read all three partitions within one transaction."""
        ...
