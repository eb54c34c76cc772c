"""
Anti-Spam Sink Interfaces
=========================

What the dispatcher needs from the outside world to apply a directive.
Implementations return False (or raise) on failure; the dispatcher treats
both the same way.
"""

from typing import Any, Dict, Protocol, Sequence


class ModerationSink(Protocol):
    """Deletes messages and sanctions users."""

    async def delete_messages(
        self,
        guild_id: int,
        channel_id: int,
        message_ids: Sequence[int],
    ) -> bool: ...

    async def apply_timed_mute(
        self,
        guild_id: int,
        user_id: int,
        duration_minutes: int,
        reason: str,
    ) -> bool: ...

    async def ban_user(self, guild_id: int, user_id: int, reason: str) -> bool: ...


class NotificationSink(Protocol):
    """Posts short-lived channel notices and persistent moderation records."""

    async def post_ephemeral(
        self,
        guild_id: int,
        channel_id: int,
        text: str,
        ttl_seconds: int,
    ) -> bool: ...

    async def post_persistent_record(self, guild_id: int, payload: Dict[str, Any]) -> bool: ...
