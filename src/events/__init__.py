"""
AutoMod - Events Package
========================

Event handler Cogs, loaded by the bot with load_extension().
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "src.events.messages",
]


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EVENT_COGS",
]
