"""
Anti-Spam Constants
===================

Default thresholds, windows, patterns, and escalation tiers.
"""

import re
from typing import Dict, Pattern


# =============================================================================
# Detection Windows (milliseconds)
# =============================================================================

IDENTICAL_WINDOW_MS = 2000  # same text, single channel
BURST_WINDOW_MS = 2000  # any text, single channel
MULTI_CHANNEL_WINDOW_MS = 3500  # same text, across channels


# =============================================================================
# Thresholds
# =============================================================================

IDENTICAL_COUNT = 3  # 3x the same message in 2s
BURST_COUNT = 5  # 5+ messages in 2s in one channel
MULTI_CHANNEL_COUNT = 3  # same text in 3+ distinct channels


# =============================================================================
# Cooldown
# =============================================================================

ACTION_COOLDOWN_MS = 6000


# =============================================================================
# Memory Bounds
# =============================================================================

PRUNE_SLACK_MS = 1000
MAX_EVENTS_PER_USER = 200
MAX_TRACKED_USERS = 10_000
IDLE_EVICTION_MS = 60_000
CLEANUP_INTERVAL_SECONDS = 60


# =============================================================================
# Link Detection
# =============================================================================

# Applied to content with all whitespace removed
LINK_PATTERN: Pattern = re.compile(
    r'(?:https?://\S+|www\.\S+|\S+\.(?:com|org|net|pl|eu|xyz|me|io|gg)(?:/\S*)?)',
    re.IGNORECASE,
)


# =============================================================================
# Escalation Tiers (minutes)
# =============================================================================

MULTI_CHANNEL_MUTE_MINUTES = 24 * 60
IDENTICAL_LINK_MUTE_MINUTES = 60
IDENTICAL_MUTE_MINUTES = 15
BURST_LINK_MUTE_MINUTES = 3 * 60
BURST_MUTE_MINUTES = 30


# =============================================================================
# Notifications
# =============================================================================

NOTICE_TTL_SECONDS = 10
LOG_CONTENT_MAX_LENGTH = 1024
BAN_LOG_CONTENT_MAX_LENGTH = 256


# =============================================================================
# Display Names
# =============================================================================

SPAM_DISPLAY_NAMES: Dict[str, str] = {
    "identical": "Identical Messages",
    "burst": "Message Burst",
    "multi_channel": "Multi-Channel Duplication",
}
