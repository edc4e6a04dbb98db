"""
Persistence Coordinator - Apply-Then-Emit

Mutating operations commit to the FileRegistry first, then hand the matching
durable write to the coordinator. The coordinator runs the write as a
background task and absorbs its outcome: failures go to the ErrorReporter and
are never rolled back into the registry.

Ordering:
    Writes are serialized by an asyncio.Lock. Tasks are started in the order
    they are emitted and the lock wakes waiters first-in first-out, so writes
    reach the store in the order the registry saw them (an add always lands
    before a later modify of the same node).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from vfiles.sync.reporting import ErrorReporter

logger = logging.getLogger(__name__)

WriteFactory = Callable[[], Awaitable[None]]


class PersistenceCoordinator:
    """
    Schedules fire-and-forget durable writes.

    Usage:
        coordinator = PersistenceCoordinator(reporter)
        registry.upsert(node)
        coordinator.emit("create", lambda: storage.add_file(node), file_ids=[node.id])

        await coordinator.flush()  # wait for every pending write
    """

    def __init__(self, reporter: ErrorReporter):
        self.reporter = reporter
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of writes not yet settled."""
        return len(self._pending)

    def emit(
        self,
        operation: str,
        write: WriteFactory,
        file_ids: list[str] | None = None,
    ) -> asyncio.Task[None]:
        """
        Schedule a durable write and return its task.

        The returned task never raises; awaiting it only waits for the write
        to settle.
        """
        task = asyncio.create_task(self._run(operation, write, list(file_ids or [])))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, operation: str, write: WriteFactory, file_ids: list[str]) -> None:
        async with self._lock:
            try:
                await write()
            except Exception as e:
                self.reporter.report(operation, e, file_ids=file_ids)
            else:
                logger.debug(f"{operation} persisted: {', '.join(file_ids)}")

    async def flush(self) -> None:
        """Wait until every write emitted so far has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
