"""
DuckDB Storage Backend

Durable, transactional mirror of the file registry in a single DuckDB file.
"""

import asyncio
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import duckdb

from vfiles.storage.base import StorageBackend
from vfiles.storage.errors import PartialWriteError, TransactionError
from vfiles.types import (
    PERSISTED_FIELDS,
    ActiveFileRecord,
    FileNode,
    OpenFileRecord,
    StoreSnapshot,
)

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

_MODIFIABLE_COLUMNS = frozenset(PERSISTED_FIELDS) - {"id"}


class DuckDBBackend(StorageBackend):
    """
    DuckDB-based durable store.

    Tables:
        files:
            id (PK), name, type, parent, contents, editable
        open_files:
            editor, file_id, position
        active_files:
            editor (PK), file_id

    Thread safety:
        Blocking DuckDB calls run in asyncio.to_thread(). DuckDB connections
        are not thread-safe, so each worker thread gets its own cursor on the
        shared database, and transactions are serialized by a lock.
    """

    def __init__(self, db_path: Path | str = MEMORY_DATABASE):
        self._db_path = db_path if db_path == MEMORY_DATABASE else Path(db_path)
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._local = threading.local()
        self._cursors: list[duckdb.DuckDBPyConnection] = []
        self._lock = threading.Lock()
        self._initialized = False

    @property
    def db_path(self) -> Path | str:
        """Database file path, or ":memory:"."""
        return self._db_path

    async def initialize(self) -> None:
        """Open the database and create tables."""
        if self._initialized:
            return

        def _init() -> None:
            if isinstance(self._db_path, Path):
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = duckdb.connect(str(self._db_path))
            self._create_tables(self._conn)

        await asyncio.to_thread(_init)
        self._initialized = True

    async def close(self) -> None:
        """Close all cursors and the database connection."""
        def _close() -> None:
            with self._lock:
                for cursor in self._cursors:
                    cursor.close()
                self._cursors.clear()
                if self._conn is not None:
                    self._conn.close()
                    self._conn = None

        await asyncio.to_thread(_close)
        self._local = threading.local()
        self._initialized = False

    @staticmethod
    def _create_tables(conn: duckdb.DuckDBPyConnection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS files (
                id VARCHAR PRIMARY KEY,
                name VARCHAR NOT NULL,
                type VARCHAR NOT NULL,
                parent VARCHAR,
                contents VARCHAR NOT NULL DEFAULT '',
                editable BOOLEAN NOT NULL DEFAULT FALSE
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS open_files (
                editor VARCHAR NOT NULL,
                file_id VARCHAR NOT NULL,
                position INTEGER NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS active_files (
                editor VARCHAR PRIMARY KEY,
                file_id VARCHAR NOT NULL
            )
        """)

    def _get_conn(self) -> duckdb.DuckDBPyConnection:
        """Get thread-local cursor, creating if needed."""
        if not self._initialized or self._conn is None:
            raise RuntimeError("DuckDB not initialized. Call initialize() first.")

        cursor = getattr(self._local, "cursor", None)
        if cursor is None:
            cursor = self._conn.cursor()
            self._local.cursor = cursor
            self._cursors.append(cursor)
        return cursor

    @contextmanager
    def _transaction(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """Run the enclosed statements in one transaction, rolling back on error."""
        conn = self._get_conn()
        with self._lock:
            conn.execute("BEGIN TRANSACTION")
            try:
                yield conn
            except BaseException as e:
                conn.execute("ROLLBACK")
                if isinstance(e, duckdb.Error):
                    raise TransactionError(f"Transaction rolled back: {e}") from e
                raise
            else:
                try:
                    conn.execute("COMMIT")
                except duckdb.Error as e:
                    raise TransactionError(f"Commit failed: {e}") from e

    @staticmethod
    def _node_params(node: FileNode) -> list[Any]:
        return [node.id, node.name, node.type, node.parent, node.contents, node.editable]

    @staticmethod
    def _row_to_node(row: tuple[Any, ...]) -> FileNode:
        row_dict = dict(zip(PERSISTED_FIELDS, row))
        row_dict["contents"] = row_dict["contents"] or ""
        row_dict["editable"] = bool(row_dict["editable"])
        return FileNode(**row_dict)

    # -------------------------------------------------------------------------
    # File Partition
    # -------------------------------------------------------------------------

    async def add_file(self, node: FileNode) -> None:
        """Insert a new node."""
        def _write() -> None:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO files VALUES (?, ?, ?, ?, ?, ?)",
                    self._node_params(node),
                )

        await asyncio.to_thread(_write)

    async def modify_file(self, file_id: str, changes: dict[str, Any]) -> None:
        """Update fields of one node."""
        unknown = set(changes) - _MODIFIABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot modify columns: {sorted(unknown)}")
        if not changes:
            return

        columns = list(changes)
        assignments = ", ".join(f"{column} = ?" for column in columns)

        def _write() -> None:
            with self._transaction() as conn:
                found = conn.execute(
                    "SELECT COUNT(*) FROM files WHERE id = ?", [file_id]
                ).fetchone()
                if not found or found[0] == 0:
                    raise PartialWriteError(
                        f"File {file_id} not found in store", failures=[file_id]
                    )
                conn.execute(
                    f"UPDATE files SET {assignments} WHERE id = ?",
                    [*(changes[c] for c in columns), file_id],
                )

        await asyncio.to_thread(_write)

    async def delete_file(self, file_id: str) -> None:
        """Delete one node."""
        def _write() -> None:
            with self._transaction() as conn:
                conn.execute("DELETE FROM files WHERE id = ?", [file_id])

        await asyncio.to_thread(_write)

    async def bulk_put_files(self, nodes: list[FileNode]) -> None:
        """Insert or replace many nodes."""
        if not nodes:
            return

        def _write() -> None:
            with self._transaction() as conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO files VALUES (?, ?, ?, ?, ?, ?)",
                    [self._node_params(node) for node in nodes],
                )

        await asyncio.to_thread(_write)

    async def count_files(self) -> int:
        """Return total number of stored nodes."""
        def _query() -> int:
            with self._transaction() as conn:
                result = conn.execute("SELECT COUNT(*) FROM files").fetchone()
            return int(result[0]) if result else 0

        return await asyncio.to_thread(_query)

    # -------------------------------------------------------------------------
    # Editor Partitions
    # -------------------------------------------------------------------------

    async def write_open_files(self, records: list[OpenFileRecord]) -> None:
        """Replace the open-file partition."""
        def _write() -> None:
            with self._transaction() as conn:
                conn.execute("DELETE FROM open_files")
                if records:
                    conn.executemany(
                        "INSERT INTO open_files VALUES (?, ?, ?)",
                        [[r.editor, r.file_id, r.position] for r in records],
                    )

        await asyncio.to_thread(_write)

    async def write_active_files(self, records: list[ActiveFileRecord]) -> None:
        """Replace the active-file partition."""
        def _write() -> None:
            with self._transaction() as conn:
                conn.execute("DELETE FROM active_files")
                if records:
                    conn.executemany(
                        "INSERT INTO active_files VALUES (?, ?)",
                        [[r.editor, r.file_id] for r in records],
                    )

        await asyncio.to_thread(_write)

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def load_snapshot(self) -> StoreSnapshot:
        """Read all three partitions within one transaction."""
        def _query() -> StoreSnapshot:
            with self._transaction() as conn:
                open_rows = conn.execute(
                    "SELECT editor, file_id, position FROM open_files "
                    "ORDER BY editor, position"
                ).fetchall()
                active_rows = conn.execute(
                    "SELECT editor, file_id FROM active_files ORDER BY editor"
                ).fetchall()
                file_rows = conn.execute(
                    f"SELECT {', '.join(PERSISTED_FIELDS)} FROM files"
                ).fetchall()

            return StoreSnapshot(
                open_files=[
                    OpenFileRecord(editor=e, file_id=f, position=p)
                    for e, f, p in open_rows
                ],
                active_files=[
                    ActiveFileRecord(editor=e, file_id=f) for e, f in active_rows
                ],
                files=[self._row_to_node(row) for row in file_rows],
            )

        snapshot = await asyncio.to_thread(_query)
        logger.debug(
            f"Loaded snapshot: {len(snapshot.files)} files, "
            f"{len(snapshot.open_files)} open, {len(snapshot.active_files)} active"
        )
        return snapshot


__all__ = ["DuckDBBackend", "MEMORY_DATABASE"]
