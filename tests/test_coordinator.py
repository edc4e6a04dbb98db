"""Tests for the persistence coordinator and error reporter."""

import asyncio
import logging

import pytest

from vfiles.storage import PartialWriteError, TransactionError
from vfiles.sync import ErrorReporter, PersistenceCoordinator


class TestErrorReporter:
    def test_partial_write_logs_count(self, caplog):
        reporter = ErrorReporter()
        with caplog.at_level(logging.ERROR):
            failure = reporter.report(
                "move", PartialWriteError("missing", failures=["a", "b"]), file_ids=["a"]
            )

        assert failure.failed_count == 2
        assert failure.file_ids == ["a"]
        assert "move: 2 items failed to modify" in caplog.text

    def test_generic_error_logged(self, caplog):
        reporter = ErrorReporter()
        with caplog.at_level(logging.ERROR):
            reporter.report("create", RuntimeError("disk full"))

        assert "create: Generic error: disk full" in caplog.text
        assert reporter.failures[0].error == "disk full"

    def test_history_is_bounded(self):
        reporter = ErrorReporter(history_size=3)
        for i in range(5):
            reporter.report(f"op{i}", RuntimeError("x"))

        assert [f.operation for f in reporter.failures] == ["op2", "op3", "op4"]
        reporter.clear()
        assert reporter.failures == []

    def test_listeners_notified(self):
        reporter = ErrorReporter()
        seen = []
        reporter.subscribe(seen.append)

        def _broken(failure):
            raise RuntimeError("listener")

        reporter.subscribe(_broken)
        reporter.report("delete", RuntimeError("x"), file_ids=["f1"])

        assert len(seen) == 1
        assert seen[0].operation == "delete"


class TestPersistenceCoordinator:
    @pytest.mark.asyncio
    async def test_flush_waits_for_writes(self):
        coordinator = PersistenceCoordinator(ErrorReporter())
        written = []

        async def _write():
            await asyncio.sleep(0.01)
            written.append("done")

        coordinator.emit("create", _write, file_ids=["f1"])
        assert coordinator.pending == 1

        await coordinator.flush()

        assert written == ["done"]
        assert coordinator.pending == 0

    @pytest.mark.asyncio
    async def test_failure_reported_not_raised(self):
        reporter = ErrorReporter()
        coordinator = PersistenceCoordinator(reporter)

        async def _write():
            raise TransactionError("rolled back")

        task = coordinator.emit("create", _write, file_ids=["f1"])
        await task  # must not raise

        assert len(reporter.failures) == 1
        failure = reporter.failures[0]
        assert failure.operation == "create"
        assert failure.file_ids == ["f1"]
        assert "rolled back" in failure.error

    @pytest.mark.asyncio
    async def test_writes_run_in_emit_order(self):
        coordinator = PersistenceCoordinator(ErrorReporter())
        order = []

        def _factory(label, delay):
            async def _write():
                await asyncio.sleep(delay)
                order.append(label)
            return _write

        coordinator.emit("create", _factory("add", 0.03))
        coordinator.emit("update_contents", _factory("modify", 0.0))
        coordinator.emit("delete", _factory("delete", 0.01))

        await coordinator.flush()

        assert order == ["add", "modify", "delete"]

    @pytest.mark.asyncio
    async def test_failure_does_not_block_later_writes(self):
        reporter = ErrorReporter()
        coordinator = PersistenceCoordinator(reporter)
        written = []

        async def _fail():
            raise PartialWriteError("missing", failures=["ghost"])

        async def _ok():
            written.append("ok")

        coordinator.emit("move", _fail, file_ids=["ghost"])
        coordinator.emit("create", _ok)
        await coordinator.flush()

        assert written == ["ok"]
        assert reporter.failures[0].failed_count == 1
