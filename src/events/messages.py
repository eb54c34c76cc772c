"""
AutoMod - Message Events
========================

Feeds every guild message into the anti-spam service.

DESIGN:
    The cog only adapts discord.Message into IncomingMessage and applies
    the deployment's exemptions (exempt channels, moderators, admins).
    All detection and escalation happens in AntiSpamService.
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from src.core.config import get_config
from src.core.logger import logger
from src.services.antispam import IncomingMessage

if TYPE_CHECKING:
    from src.bot import AutoModBot


def incoming_from_discord(message: discord.Message) -> Optional[IncomingMessage]:
    """
    Convert a discord.Message into the engine's input type.

    Returns:
        None for messages outside a guild or from non-members (webhooks).
    """
    if message.guild is None or not isinstance(message.author, discord.Member):
        return None

    return IncomingMessage(
        author_id=message.author.id,
        guild_id=message.guild.id,
        channel_id=message.channel.id,
        message_id=message.id,
        content=message.content or "",
        timestamp=int(message.created_at.timestamp() * 1000),
        is_bot_author=message.author.bot,
        author_name=message.author.name,
    )


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "AutoModBot") -> None:
        self.bot = bot
        self.config = get_config()

    def _is_exempt(self, message: discord.Message) -> bool:
        if message.channel.id in self.config.exempt_channel_ids:
            return True

        author = message.author
        if not isinstance(author, discord.Member):
            return False
        if self.config.moderation_role_id and author.get_role(self.config.moderation_role_id):
            return True
        return author.guild_permissions.administrator

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or self.bot.antispam_service is None:
            return

        incoming = incoming_from_discord(message)
        if incoming is None or self._is_exempt(message):
            return

        await self.bot.antispam_service.handle(incoming)


async def setup(bot: "AutoModBot") -> None:
    """Add the message events cog to the bot."""
    await bot.add_cog(MessageEvents(bot))
    logger.debug("Message Events Loaded")
