"""Fire-and-forget background tasks."""

import asyncio
from typing import Coroutine

import structlog

from observability import metrics

logger = structlog.get_logger()

# Strong references so pending tasks are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        metrics.counter("background_failures")
        logger.warning("background_task_failed", task=task.get_name(), error=str(exc))


def spawn_background(coro: Coroutine, name: str) -> asyncio.Task:
    """Schedule ``coro`` detached from the caller. Its failure is logged, never raised."""
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_on_done)
    return task


async def drain_background(timeout: float | None = None) -> None:
    """Wait for pending background work (shutdown and tests)."""
    pending = list(_background_tasks)
    if pending:
        await asyncio.wait(pending, timeout=timeout)
