#!/usr/bin/env python3
"""
AutoMod - Entry Point
=====================

Loads .env, validates configuration, and runs the bot until interrupted.
"""

import asyncio
import sys

import discord
from dotenv import load_dotenv

from src.core.logger import logger


async def main() -> None:
    """
    Main entry point.

    Raises:
        SystemExit: If configuration is invalid or the bot fails to log in.
    """
    load_dotenv()

    from src.core.config import ConfigValidationError, get_config, validate_and_log_config

    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        sys.exit(1)

    config = get_config()
    if config.error_webhook_url:
        logger.set_webhook(config.error_webhook_url)

    from src.bot import AutoModBot

    bot = AutoModBot()
    try:
        async with bot:
            await bot.start(config.discord_token)
    except (discord.LoginFailure, discord.PrivilegedIntentsRequired) as e:
        logger.error("Discord Login Failed", [("Error", str(e))])
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
