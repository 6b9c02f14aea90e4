"""
Tests for keel.core.concurrency.timeout module.

Tests cover:
- Result and error pass-through when the operation wins
- OperationTimeoutError when the deadline wins
- Single settlement and late outcomes
- Optional cancellation of the losing operation
- delay()
"""

import asyncio
from unittest.mock import MagicMock

import pytest

import keel.core.concurrency.timeout as timeout_module
from keel.core.concurrency.timeout import (
    DEFAULT_TIMEOUT_MESSAGE,
    GuardedOperation,
    delay,
    with_timeout,
)
from keel.core.errors import OperationTimeoutError


@pytest.fixture
def mock_logger(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(timeout_module, "logger", logger)
    return logger


def never_settles():
    return asyncio.get_running_loop().create_future()


class TestOperationWins:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        result = await with_timeout(asyncio.sleep(0.01, result="ok"), 1.0)
        assert result == "ok"

    @pytest.mark.asyncio
    async def test_error_propagates_unchanged(self):
        boom = ValueError("boom")

        async def fail():
            raise boom

        with pytest.raises(ValueError) as exc_info:
            await with_timeout(fail(), 1.0)

        assert exc_info.value is boom

    @pytest.mark.asyncio
    async def test_deadline_released_after_result(self):
        guard = with_timeout(asyncio.sleep(0, result=1), 0.05)
        assert await guard == 1

        await asyncio.sleep(0.1)

        assert guard.settled is True
        assert guard.timed_out is False

    @pytest.mark.asyncio
    async def test_accepts_future(self):
        future = asyncio.get_running_loop().create_future()
        guard = with_timeout(future, 1.0)
        future.set_result(42)

        assert await guard == 42


class TestDeadlineWins:
    @pytest.mark.asyncio
    async def test_raises_timeout_quickly(self):
        loop = asyncio.get_running_loop()
        started = loop.time()

        with pytest.raises(OperationTimeoutError) as exc_info:
            await with_timeout(never_settles(), 0.01)

        assert loop.time() - started < 0.5
        assert str(exc_info.value) == DEFAULT_TIMEOUT_MESSAGE
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_custom_message(self):
        with pytest.raises(OperationTimeoutError, match="profile lookup timed out"):
            await with_timeout(never_settles(), 0.01, "profile lookup timed out")

    @pytest.mark.asyncio
    async def test_error_context(self):
        with pytest.raises(OperationTimeoutError) as exc_info:
            await with_timeout(never_settles(), 0.01)

        context = exc_info.value.context
        assert context.operation == "with_timeout"
        assert context.metadata == {"timeout": 0.01}

    @pytest.mark.asyncio
    async def test_flags_after_timeout(self):
        guard = with_timeout(never_settles(), 0.01)
        assert guard.settled is False
        assert "state=pending" in repr(guard)

        with pytest.raises(OperationTimeoutError):
            await guard

        assert guard.settled is True
        assert guard.timed_out is True
        assert guard.timeout == 0.01
        assert "state=timed_out" in repr(guard)

    @pytest.mark.asyncio
    async def test_operation_left_running_by_default(self):
        task = asyncio.create_task(asyncio.sleep(10))

        with pytest.raises(OperationTimeoutError):
            await with_timeout(task, 0.01)
        await asyncio.sleep(0.01)

        assert not task.done()
        task.cancel()

    @pytest.mark.asyncio
    async def test_cancel_on_timeout(self):
        task = asyncio.create_task(asyncio.sleep(10))

        with pytest.raises(OperationTimeoutError):
            await with_timeout(task, 0.01, cancel_on_timeout=True)
        await asyncio.sleep(0.01)

        assert task.cancelled()


class TestLateOutcomes:
    @pytest.mark.asyncio
    async def test_late_result_discarded(self, mock_logger):
        future = never_settles()
        guard = with_timeout(future, 0.01)

        with pytest.raises(OperationTimeoutError):
            await guard

        future.set_result("too late")
        await asyncio.sleep(0)

        assert guard.timed_out is True
        mock_logger.debug.assert_called_once_with("guarded_operation_late_result", timeout=0.01)

    @pytest.mark.asyncio
    async def test_late_error_retrieved_and_logged(self, mock_logger):
        future = never_settles()
        guard = with_timeout(future, 0.01)

        with pytest.raises(OperationTimeoutError):
            await guard

        future.set_exception(RuntimeError("late"))
        await asyncio.sleep(0)

        mock_logger.debug.assert_called_once()
        assert mock_logger.debug.call_args.args == ("guarded_operation_late_error",)


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_operation_cancels_guard(self):
        task = asyncio.create_task(asyncio.sleep(10))
        guard = with_timeout(task, 1.0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await guard

        assert guard.settled is True
        assert guard.timed_out is False

    @pytest.mark.asyncio
    async def test_cancelled_caller_settles_guard(self):
        guard = GuardedOperation(never_settles(), 0.05)

        async def caller():
            return await guard

        waiter = asyncio.create_task(caller())
        await asyncio.sleep(0)
        waiter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter

        await asyncio.sleep(0.1)
        assert guard.settled is True
        assert guard.timed_out is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("outcome", ["result", "error"])
    async def test_caller_cancelled_in_same_tick_as_outcome(self, outcome):
        loop = asyncio.get_running_loop()
        errors = []
        previous_handler = loop.get_exception_handler()
        loop.set_exception_handler(lambda _loop, context: errors.append(context))
        try:
            future = never_settles()
            guard = GuardedOperation(future, 1.0)

            async def caller():
                return await guard

            waiter = asyncio.create_task(caller())
            await asyncio.sleep(0)

            if outcome == "result":
                future.set_result(1)
            else:
                future.set_exception(RuntimeError("boom"))
            waiter.cancel()

            with pytest.raises(asyncio.CancelledError):
                await waiter
            await asyncio.sleep(0.02)
        finally:
            loop.set_exception_handler(previous_handler)

        assert errors == []
        assert guard.settled is True


class TestDelay:
    @pytest.mark.asyncio
    async def test_delay_waits(self):
        loop = asyncio.get_running_loop()
        started = loop.time()
        await delay(0.02)
        assert loop.time() - started >= 0.015

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seconds", [0, -1])
    async def test_non_positive_delay_returns(self, seconds):
        assert await delay(seconds) is None


class TestConfiguredDefault:
    @pytest.mark.asyncio
    async def test_timeout_defaults_to_settings(self, monkeypatch):
        monkeypatch.setenv("KEEL_DEFAULT_TIMEOUT_SECONDS", "0.01")

        guard = with_timeout(never_settles())

        assert guard.timeout == 0.01
        with pytest.raises(OperationTimeoutError):
            await guard
