"""
AutoMod - Services Package
==========================

Long-lived services owned by the bot.

    - antispam/: Spam detection and escalation engine
    - mute_scheduler.py: Timers that lift automatic mutes
"""
