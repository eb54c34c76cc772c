"""
AutoMod - Main Bot Class
========================

Discord client that wires the anti-spam engine to a guild.

DESIGN:
    setup_hook (before on_ready):
        - Mute Scheduler
        - Discord sinks and AntiSpamService (cleanup loop started)
        - Event cog loading

    close():
        - Cleanup loop stopped, pending unmute timers cancelled
"""

from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands

from src.core.config import get_config
from src.core.logger import logger
from src.services.antispam import AntiSpamService, HandleOutcome, OutcomeStatus
from src.services.antispam.handlers import DiscordModerationSink, DiscordNotificationSink
from src.services.mute_scheduler import MuteScheduler


# =============================================================================
# AutoModBot Class
# =============================================================================

class AutoModBot(commands.Bot):
    """
    Main Discord bot class for the anti-spam AutoMod.

    Attributes:
        antispam_service: Dispatcher fed by the message events cog.
        mute_scheduler: Lifts automatic mutes when they expire.
    """

    def __init__(self) -> None:
        self.config = get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(
            command_prefix="!",
            intents=intents,
            help_command=None,
        )

        self.start_time: datetime = datetime.now()
        self.antispam_service: Optional[AntiSpamService] = None
        self.mute_scheduler: Optional[MuteScheduler] = None
        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Create services and load event cogs before on_ready."""
        self.mute_scheduler = MuteScheduler()

        self.antispam_service = AntiSpamService(
            moderation=DiscordModerationSink(self, self.config.muted_role_id, self.mute_scheduler),
            notifications=DiscordNotificationSink(self, self.config.logs_channel_id),
            settings=self.config.detection_settings(),
            observer=self._on_spam_outcome,
        )
        self.antispam_service.start()

        from src.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except Exception as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

    def _on_spam_outcome(self, outcome: HandleOutcome) -> None:
        if outcome.status is OutcomeStatus.FAILED:
            logger.warning("Spam Handling Failed", [
                ("User", str(outcome.user_key)),
                ("Error", (outcome.error or "unknown")[:100]),
            ])
        elif outcome.status is OutcomeStatus.ACTIONED and not outcome.fully_applied:
            logger.warning("Spam Directive Partially Applied", [
                ("User", str(outcome.user_key)),
                ("Failed", ", ".join(f.operation for f in outcome.failures)),
            ])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return
        self._ready_initialized = True

        if not self.user:
            return

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        logger.tree("AUTOMOD READY", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
            ("Anti-Spam", "Running" if self.antispam_service else "Stopped"),
            ("Exempt Channels", str(len(self.config.exempt_channel_ids))),
        ], emoji="🛡️")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self) -> None:
        """Stop background work, then close the Discord connection."""
        logger.info("Shutting Down")

        if self.antispam_service:
            await self.antispam_service.stop()
        if self.mute_scheduler:
            await self.mute_scheduler.stop()

        await super().close()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["AutoModBot"]
