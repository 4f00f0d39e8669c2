"""
Best-effort dispatch.

Engagement tracking is advisory: a failure to record an event must never
reach the code path that produced it. Every side-effecting tracking call
goes through one of these helpers instead of its own try/except.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Set, Tuple

from core.logger import get_logger

logger = get_logger(__name__)

# Strong references to in-flight tasks so they are not garbage collected.
_background_tasks: Set[asyncio.Task] = set()


def run_best_effort(
    operation: str,
    func: Callable[..., Any],
    *args: Any,
    **kwargs: Any
) -> Tuple[bool, Any]:
    """
    Call ``func`` and swallow any exception.

    Args:
        operation: Name used in the failure log line
        func: Callable to run

    Returns:
        Tuple of (succeeded, result_or_None)
    """
    try:
        return True, func(*args, **kwargs)
    except Exception as e:
        logger.warning(
            "Best-effort operation failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__
        )
        return False, None


async def run_best_effort_async(operation: str, awaitable: Awaitable[Any]) -> Tuple[bool, Any]:
    """Await ``awaitable`` and swallow any exception."""
    try:
        return True, await awaitable
    except Exception as e:
        logger.warning(
            "Best-effort operation failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__
        )
        return False, None


def fire_and_forget(operation: str, awaitable: Awaitable[Any]) -> Optional[asyncio.Task]:
    """
    Schedule ``awaitable`` on the running loop and return immediately.

    Returns None (and closes the coroutine) when no event loop is running.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning("No running event loop, dropping tracking call", operation=operation)
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        return None

    task = loop.create_task(run_best_effort_async(operation, awaitable))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def drain_background_tasks() -> None:
    """Wait for all scheduled fire-and-forget tasks (used on shutdown)."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
