"""
Error Reporter - Single Channel for Absorbed Failures

Every failure that the subsystem logs and swallows (durable writes, startup
load, collaborator dispatches) is funnelled through one ErrorReporter, which
logs it once, keeps a bounded history and notifies listeners.
"""

import logging
from collections import deque
from collections.abc import Callable

from vfiles.storage.errors import PartialWriteError
from vfiles.types import PersistenceFailure

logger = logging.getLogger(__name__)

FailureListener = Callable[[PersistenceFailure], None]


class ErrorReporter:
    """
    Logs and records absorbed failures.

    Usage:
        reporter = ErrorReporter(history_size=100)
        try:
            await storage.delete_file(file_id)
        except Exception as e:
            reporter.report("delete", e, file_ids=[file_id])

        reporter.failures  # most recent last
    """

    def __init__(self, history_size: int = 100):
        self._failures: deque[PersistenceFailure] = deque(maxlen=history_size)
        self._listeners: list[FailureListener] = []

    @property
    def failures(self) -> list[PersistenceFailure]:
        return list(self._failures)

    def clear(self) -> None:
        self._failures.clear()

    def subscribe(self, listener: FailureListener) -> None:
        self._listeners.append(listener)

    def report(
        self,
        operation: str,
        error: BaseException,
        file_ids: list[str] | None = None,
    ) -> PersistenceFailure:
        """Log and record one absorbed failure."""
        if isinstance(error, PartialWriteError):
            failed_count = len(error.failures)
            logger.error(f"{operation}: {failed_count} items failed to modify")
        else:
            failed_count = 0
            logger.error(f"{operation}: Generic error: {error}")

        failure = PersistenceFailure(
            operation=operation,
            file_ids=list(file_ids or []),
            error=str(error),
            failed_count=failed_count,
        )
        self._failures.append(failure)

        for listener in list(self._listeners):
            try:
                listener(failure)
            except Exception as e:
                logger.warning(f"Failure listener raised: {e}")

        return failure
