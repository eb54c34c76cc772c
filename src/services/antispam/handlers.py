"""
AutoMod - Anti-Spam Discord Handlers
====================================

discord.py implementations of the moderation and notification sinks.

DESIGN:
    Every method returns True on success and False on failure, logging the
    reason. discord.HTTPException (and its Forbidden/NotFound subclasses)
    is handled here; anything else propagates to the dispatcher, which
    records it as a sink failure.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

import discord

from src.core.config import EmbedColors
from src.core.logger import logger
from src.services.mute_scheduler import MuteScheduler

from .models import WarningLevel

if TYPE_CHECKING:
    from discord.ext import commands


WARNING_COLORS: Dict[int, int] = {
    WarningLevel.NONE: EmbedColors.LOG_INFO,
    WarningLevel.LEVEL_1: EmbedColors.YELLOW,
    WarningLevel.LEVEL_2: EmbedColors.ORANGE,
    WarningLevel.LEVEL_3: EmbedColors.RED,
    WarningLevel.ZERO_TOLERANCE: EmbedColors.DARK_RED,
}


# =============================================================================
# Moderation Sink
# =============================================================================

class DiscordModerationSink:
    """Deletes messages, applies the muted role, and bans through discord.py."""

    def __init__(
        self,
        bot: "commands.Bot",
        muted_role_id: int,
        scheduler: MuteScheduler,
    ) -> None:
        self.bot = bot
        self.muted_role_id = muted_role_id
        self.scheduler = scheduler

    def _get_guild(self, guild_id: int, operation: str) -> Optional[discord.Guild]:
        guild = self.bot.get_guild(guild_id)
        if guild is None:
            logger.warning(f"{operation} Skipped", [
                ("Guild ID", str(guild_id)),
                ("Reason", "Guild not in cache"),
            ])
        return guild

    async def _get_member(self, guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException:
            return None

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete_messages(
        self,
        guild_id: int,
        channel_id: int,
        message_ids: Sequence[int],
    ) -> bool:
        """
        Bulk delete, falling back to one-by-one deletes if the bulk call fails
        (for example when a message is already gone).
        """
        guild = self._get_guild(guild_id, "Spam Delete")
        if guild is None:
            return False

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.TextChannel):
            logger.warning("Spam Delete Skipped", [
                ("Channel ID", str(channel_id)),
                ("Reason", "Not a text channel"),
            ])
            return False

        try:
            await channel.delete_messages(
                [discord.Object(id=mid) for mid in message_ids],
                reason="AutoMod: spam cleanup",
            )
            return True
        except (discord.ClientException, discord.HTTPException) as e:
            logger.debug("Bulk Delete Failed, Deleting Individually", [
                ("Channel", f"#{channel.name}"),
                ("Count", str(len(message_ids))),
                ("Error", str(e)[:50]),
            ])

        deleted = 0
        for mid in message_ids:
            try:
                await channel.get_partial_message(mid).delete()
                deleted += 1
            except discord.NotFound:
                deleted += 1  # Already gone
            except discord.HTTPException as e:
                logger.debug(f"Spam message {mid} delete failed: {e}")

        if deleted < len(message_ids):
            logger.warning("Spam Delete Incomplete", [
                ("Channel", f"#{channel.name}"),
                ("Deleted", f"{deleted}/{len(message_ids)}"),
            ])
            return False
        return True

    # -------------------------------------------------------------------------
    # Mute
    # -------------------------------------------------------------------------

    async def apply_timed_mute(
        self,
        guild_id: int,
        user_id: int,
        duration_minutes: int,
        reason: str,
    ) -> bool:
        """Add the muted role and schedule its removal."""
        guild = self._get_guild(guild_id, "Auto-Mute")
        if guild is None:
            return False

        role = guild.get_role(self.muted_role_id)
        if role is None:
            logger.warning("Auto-Mute Failed", [
                ("Reason", "Muted role not found"),
                ("Role ID", str(self.muted_role_id)),
            ])
            return False

        member = await self._get_member(guild, user_id)
        if member is None:
            logger.warning("Auto-Mute Failed", [
                ("User ID", str(user_id)),
                ("Reason", "Member not found"),
            ])
            return False

        try:
            await member.add_roles(role, reason=reason)
        except discord.HTTPException as e:
            logger.warning("Auto-Mute Failed", [
                ("User", member.name),
                ("User ID", str(user_id)),
                ("Error", str(e)[:50]),
            ])
            return False

        self.scheduler.schedule(
            guild_id,
            user_id,
            max(1, duration_minutes) * 60,
            lambda: self._unmute(guild_id, user_id),
        )

        logger.tree("AUTO-MUTE APPLIED", [
            ("User", member.name),
            ("User ID", str(user_id)),
            ("Duration", f"{duration_minutes}m"),
            ("Reason", reason),
        ], emoji="🔇")
        return True

    async def _unmute(self, guild_id: int, user_id: int) -> None:
        guild = self.bot.get_guild(guild_id)
        if guild is None:
            return
        role = guild.get_role(self.muted_role_id)
        member = await self._get_member(guild, user_id)
        if role is None or member is None or role not in member.roles:
            return

        try:
            await member.remove_roles(role, reason="AutoMod auto-unmute")
            logger.tree("AUTO-UNMUTE", [
                ("User", member.name),
                ("User ID", str(user_id)),
            ], emoji="🔓")
        except discord.HTTPException as e:
            logger.warning("Auto-Unmute Failed", [
                ("User ID", str(user_id)),
                ("Error", str(e)[:50]),
            ])

    # -------------------------------------------------------------------------
    # Ban
    # -------------------------------------------------------------------------

    async def ban_user(self, guild_id: int, user_id: int, reason: str) -> bool:
        guild = self._get_guild(guild_id, "Auto-Ban")
        if guild is None:
            return False

        try:
            await guild.ban(discord.Object(id=user_id), reason=reason, delete_message_seconds=0)
        except discord.HTTPException as e:
            logger.warning("Auto-Ban Failed", [
                ("User ID", str(user_id)),
                ("Error", str(e)[:50]),
            ])
            return False

        # A banned user has no mute left to lift
        self.scheduler.cancel(guild_id, user_id)

        logger.tree("AUTO-BAN APPLIED", [
            ("User ID", str(user_id)),
            ("Reason", reason),
        ], emoji="🚫")
        return True


# =============================================================================
# Notification Sink
# =============================================================================

class DiscordNotificationSink:
    """Posts self-deleting channel notices and embeds in the logs channel."""

    def __init__(self, bot: "commands.Bot", logs_channel_id: int) -> None:
        self.bot = bot
        self.logs_channel_id = logs_channel_id

    async def post_ephemeral(
        self,
        guild_id: int,
        channel_id: int,
        text: str,
        ttl_seconds: int,
    ) -> bool:
        channel = self.bot.get_channel(channel_id)
        if not isinstance(channel, discord.TextChannel):
            return False

        try:
            await channel.send(text, delete_after=ttl_seconds)
            return True
        except discord.HTTPException as e:
            logger.warning("Spam Notice Failed", [
                ("Channel", f"#{channel.name}"),
                ("Error", str(e)[:50]),
            ])
            return False

    async def post_persistent_record(self, guild_id: int, payload: Dict[str, Any]) -> bool:
        channel = self.bot.get_channel(self.logs_channel_id)
        if not isinstance(channel, discord.TextChannel):
            logger.warning("Spam Log Skipped", [
                ("Channel ID", str(self.logs_channel_id)),
                ("Reason", "Logs channel not found"),
            ])
            return False

        try:
            await channel.send(embed=build_record_embed(payload))
            return True
        except discord.HTTPException as e:
            logger.warning("Server Log Failed", [
                ("Action", "Spam Detection"),
                ("Type", payload.get("kind", "unknown")),
                ("Error", str(e)[:50]),
            ])
            return False


def build_record_embed(payload: Dict[str, Any]) -> discord.Embed:
    """Render a persistent moderation record as an embed."""
    user = f"<@{payload['user_id']}>"
    if payload.get("user_name"):
        user += f" ({payload['user_name']})"

    channels = ", ".join(f"<#{cid}>" for cid in payload.get("channel_ids", []))
    label = "Channels" if len(payload.get("channel_ids", [])) > 1 else "Channel"

    embed = discord.Embed(
        title=payload["title"],
        description=f"User: {user}\n{label}: {channels}",
        color=WARNING_COLORS.get(payload.get("warning_level", 0), EmbedColors.LOG_INFO),
        timestamp=datetime.fromtimestamp(payload["timestamp"] / 1000, tz=timezone.utc),
    )

    if payload.get("content"):
        embed.add_field(name="Content", value=payload["content"], inline=False)
    else:
        embed.add_field(name="Messages", value=str(payload.get("message_count", 0)), inline=True)
    embed.add_field(name="Action", value=payload.get("action", "None"), inline=True)
    return embed
