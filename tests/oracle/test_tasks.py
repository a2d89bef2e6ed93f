"""Tests for fire-and-forget background tasks."""

import asyncio

import pytest

from observability import metrics
from oracle.tasks import drain_background, spawn_background


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


class TestSpawnBackground:
    @pytest.mark.asyncio
    async def test_result_available(self):
        async def work():
            return 42

        task = spawn_background(work(), name="work")
        assert await task == 42

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self):
        async def boom():
            raise RuntimeError("boom")

        spawn_background(boom(), name="boom")
        await drain_background(timeout=1.0)
        await asyncio.sleep(0)
        assert metrics.get("background_failures") == 1

    @pytest.mark.asyncio
    async def test_caller_continues_while_pending(self):
        gate = asyncio.Event()

        async def wait():
            await gate.wait()
            return "done"

        task = spawn_background(wait(), name="wait")
        assert not task.done()
        gate.set()
        await drain_background(timeout=1.0)
        assert task.result() == "done"
