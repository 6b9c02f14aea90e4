"""
End-to-end composition of the keel primitives.

A poller built from set_interval + with_timeout + run_sequentially, and a
server start-up guarded by a deadline.
"""

import asyncio

import pytest

from keel import clear_interval, promisify_listen, run_sequentially, set_interval, with_timeout
from keel.core.errors import OperationTimeoutError, is_retryable


class TestPoller:
    @pytest.mark.asyncio
    async def test_poller_with_deadline_and_ordered_steps(self):
        log = []
        outcomes = []

        async def step(name, seconds):
            await asyncio.sleep(seconds)
            log.append(name)
            return name

        async def poll():
            try:
                outcomes.append(
                    await with_timeout(
                        run_sequentially([lambda: step("fetch", 0.005), lambda: step("store", 0.005)]),
                        0.5,
                    )
                )
            except OperationTimeoutError as e:
                outcomes.append(e)

        task = set_interval(poll, 0.01, name="poller")
        await asyncio.sleep(0.15)
        clear_interval(task)
        await task.wait()

        assert len(outcomes) >= 2
        assert all(outcome == ["fetch", "store"] for outcome in outcomes)
        assert log[:4] == ["fetch", "store", "fetch", "store"]

    @pytest.mark.asyncio
    async def test_slow_poll_times_out_and_loop_continues(self):
        errors = []

        async def poll():
            try:
                await with_timeout(asyncio.sleep(1), 0.01, cancel_on_timeout=True)
            except OperationTimeoutError as e:
                errors.append(e)

        task = set_interval(poll, 0.01)
        await asyncio.sleep(0.12)
        task.cancel()
        await task.wait()

        assert len(errors) >= 2
        assert all(is_retryable(e) for e in errors)


class TestServerStartup:
    @pytest.mark.asyncio
    async def test_listen_within_deadline(self, make_server):
        server = make_server(None)
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, server.emit, "listening")

        await with_timeout(promisify_listen(server)(8080), 1.0)

        assert server.listener_count() == 0

    @pytest.mark.asyncio
    async def test_listen_deadline_exceeded(self, make_server):
        server = make_server(None)

        with pytest.raises(OperationTimeoutError, match="server did not start"):
            await with_timeout(
                promisify_listen(server)(8080),
                0.01,
                "server did not start",
                cancel_on_timeout=True,
            )
        await asyncio.sleep(0.01)

        assert server.listener_count() == 0
