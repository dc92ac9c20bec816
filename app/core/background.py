import asyncio
import logging
from typing import Any, Coroutine, Optional, Set

logger = logging.getLogger(__name__)

# The event loop only keeps weak references to tasks.
_pending: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.info("Detached task '%s' was cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Detached task '%s' failed", task.get_name(), exc_info=exc)


def spawn_detached(
    coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None
) -> asyncio.Task:
    """Run ``coro`` in the background without awaiting it.

    Failures are logged here and never reach the caller, which makes this
    the single place fire-and-forget work (article refreshes, chat
    persistence) is started from.
    """
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_tasks() -> Set[asyncio.Task]:
    return set(_pending)


async def drain_detached(timeout: Optional[float] = None) -> None:
    """Wait for in-flight detached tasks, used on shutdown and in tests."""
    tasks = pending_tasks()
    if not tasks:
        return
    await asyncio.wait(tasks, timeout=timeout)
