"""
Detached background tasks.

Fire-and-forget work (customer notifications) runs as asyncio tasks that
outlive the request that spawned them. The event loop only keeps weak
references to tasks, so they are tracked here until done; failures are
logged, never raised into the caller.
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

logger = logging.getLogger(__name__)

_tasks: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _tasks.discard(task)

    if task.cancelled():
        logger.info(f"Background task {task.get_name()} cancelled")
        return

    exc = task.exception()
    if exc is not None:
        logger.error(
            f"Background task {task.get_name()} failed: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )


def spawn(coro: Awaitable, name: Optional[str] = None) -> asyncio.Task:
    """Schedule a coroutine on the running loop without awaiting it."""
    task = asyncio.create_task(coro, name=name)
    _tasks.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_tasks() -> Set[asyncio.Task]:
    return set(_tasks)


async def wait_for_background_tasks(timeout: Optional[float] = None) -> None:
    """
    Wait for in-flight background tasks.

    Called on application shutdown, and by tests that assert on the side
    effects of a notification.
    """
    tasks = pending_tasks()
    if not tasks:
        return

    logger.info(f"Waiting for {len(tasks)} background task(s)...")
    done, still_pending = await asyncio.wait(tasks, timeout=timeout)

    for task in still_pending:
        logger.warning(f"Cancelling background task {task.get_name()} after timeout")
        task.cancel()
