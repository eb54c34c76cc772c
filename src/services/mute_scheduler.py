"""
AutoMod - Mute Scheduler Service
================================

In-memory timers that lift automatic mutes when they expire.

DESIGN:
    One asyncio task per (guild_id, user_id). Scheduling a new mute for a
    user who already has a pending unmute cancels the old timer and starts
    a new one, so the most recent mute decides when the user is released.
    cancel() is the hook for a moderator lifting a mute early.

    Timers live only in memory; a restart drops them together with the
    detection state.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Tuple

from src.core.logger import logger
from src.utils.async_utils import create_safe_task

MuteKey = Tuple[int, int]
UnmuteCallback = Callable[[], Awaitable[Any]]


class MuteScheduler:
    """
    Cancellable unmute timers keyed by (guild_id, user_id).

    Attributes:
        pending: Number of timers not yet fired.
    """

    def __init__(self) -> None:
        self._timers: Dict[MuteKey, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._timers)

    def is_scheduled(self, guild_id: int, user_id: int) -> bool:
        return (guild_id, user_id) in self._timers

    def schedule(
        self,
        guild_id: int,
        user_id: int,
        delay_seconds: float,
        unmute: UnmuteCallback,
    ) -> asyncio.Task:
        """
        Run unmute() after delay_seconds, replacing any pending timer.

        Returns:
            The timer task; cancelling it prevents the unmute.
        """
        key = (guild_id, user_id)
        replaced = self.cancel(guild_id, user_id)

        task = create_safe_task(
            self._run(key, delay_seconds, unmute),
            f"Unmute {guild_id}/{user_id}",
        )
        self._timers[key] = task

        logger.debug("Unmute Scheduled", [
            ("User ID", str(user_id)),
            ("Delay", f"{delay_seconds:.0f}s"),
            ("Replaced", "Yes" if replaced else "No"),
        ])
        return task

    def cancel(self, guild_id: int, user_id: int) -> bool:
        """Cancel the pending unmute for a user. Returns True if one existed."""
        task = self._timers.pop((guild_id, user_id), None)
        if task is None:
            return False
        task.cancel()
        return True

    async def _run(self, key: MuteKey, delay_seconds: float, unmute: UnmuteCallback) -> None:
        try:
            await asyncio.sleep(delay_seconds)
            await unmute()
        finally:
            if self._timers.get(key) is asyncio.current_task():
                del self._timers[key]

    async def stop(self) -> None:
        """Cancel every pending timer and wait for them to finish."""
        tasks = list(self._timers.values())
        self._timers.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Mute Scheduler Stopped ({len(tasks)} pending unmutes dropped)")
