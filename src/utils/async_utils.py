"""
AutoMod - Async Utilities
=========================

Helpers for async operations that must never fail silently.

Usage:
    from src.utils.async_utils import run_captured, create_safe_task

    ok, error = await run_captured("delete_messages", sink.delete_messages(...), default=False)
    create_safe_task(self._cleanup_loop(), "AntiSpam Cleanup Loop")
"""

import asyncio
from typing import Any, Coroutine, Optional, Tuple

from src.core.logger import logger


async def run_captured(
    name: str,
    coro: Coroutine[Any, Any, Any],
    default: Any = None,
    log_level: str = "warning",
) -> Tuple[Any, Optional[Exception]]:
    """
    Run a single async operation, logging and capturing any exception.

    Args:
        name: Name of the operation for logging.
        coro: The coroutine to run.
        default: Value to return if the operation fails.
        log_level: Log level for errors ("debug", "warning", "error").

    Returns:
        (result, None) on success, (default, exception) on failure.
    """
    try:
        return await coro, None
    except asyncio.CancelledError:
        raise
    except Exception as e:
        error_details = [
            ("Operation", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:100]),
        ]

        if log_level == "debug":
            logger.debug("Async Operation Failed", error_details)
        elif log_level == "error":
            logger.error("Async Operation Failed", error_details)
        else:
            logger.warning("Async Operation Failed", error_details)

        return default, e


# =============================================================================
# Safe Background Tasks
# =============================================================================

def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Unlike raw asyncio.create_task(), exceptions are logged instead of
    disappearing with the task.
    """
    async def wrapped():
        try:
            await coro
        except asyncio.CancelledError:
            # Expected on shutdown or when a timer is replaced
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(wrapped(), name=name)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "run_captured",
    "create_safe_task",
]
