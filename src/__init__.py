"""
AutoMod - Source Package
========================

Anti-spam AutoMod for a single Discord guild.

Package Structure:
- bot.py: Discord bot class and service wiring
- core/: Configuration and logging
- events/: Event cogs (message intake)
- services/: Anti-spam engine and mute scheduler
- utils/: Async and duration helpers
"""
