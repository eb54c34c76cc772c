"""
AutoMod - Configuration Module
==============================

Centralized configuration management with environment variable validation.

DESIGN:
    A single source of truth for all configuration, loaded from environment
    variables at startup. Detection thresholds are process-wide and
    read-only once loaded; there is no runtime reconfiguration.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Out-of-range thresholds are clamped with a warning
"""

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Set

from src.services.antispam import constants as c

if TYPE_CHECKING:
    from src.services.antispam.models import DetectionSettings


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        logs_channel_id: Channel ID receiving persistent moderation records.
        muted_role_id: Role ID assigned to muted users.
        moderation_role_id: Members with this role skip spam detection.
        exempt_channel_ids: Channels where spam detection is disabled.
        error_webhook_url: Optional webhook for error alerts.
    """

    # -------------------------------------------------------------------------
    # Required
    # -------------------------------------------------------------------------

    discord_token: str
    logs_channel_id: int
    muted_role_id: int

    # -------------------------------------------------------------------------
    # Optional: Exemptions
    # -------------------------------------------------------------------------

    moderation_role_id: Optional[int] = None
    exempt_channel_ids: Set[int] = field(default_factory=set)

    # -------------------------------------------------------------------------
    # Optional: Detection Windows (ms)
    # -------------------------------------------------------------------------

    identical_window_ms: int = c.IDENTICAL_WINDOW_MS
    burst_window_ms: int = c.BURST_WINDOW_MS
    multi_channel_window_ms: int = c.MULTI_CHANNEL_WINDOW_MS

    # -------------------------------------------------------------------------
    # Optional: Detection Thresholds
    # -------------------------------------------------------------------------

    identical_count: int = c.IDENTICAL_COUNT
    burst_count: int = c.BURST_COUNT
    multi_channel_count: int = c.MULTI_CHANNEL_COUNT

    # -------------------------------------------------------------------------
    # Optional: Escalation
    # -------------------------------------------------------------------------

    action_cooldown_ms: int = c.ACTION_COOLDOWN_MS
    notice_ttl_seconds: int = c.NOTICE_TTL_SECONDS

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None

    def detection_settings(self) -> "DetectionSettings":
        """Build the immutable detection settings used by the anti-spam engine."""
        from src.services.antispam.models import DetectionSettings

        return DetectionSettings(
            identical_window_ms=self.identical_window_ms,
            burst_window_ms=self.burst_window_ms,
            multi_channel_window_ms=self.multi_channel_window_ms,
            identical_count=self.identical_count,
            burst_count=self.burst_count,
            multi_channel_count=self.multi_channel_count,
            action_cooldown_ms=self.action_cooldown_ms,
            notice_ttl_seconds=self.notice_ttl_seconds,
        )


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Color palette for moderation embeds, ordered by severity."""

    YELLOW = 0xF39C12   # Level 1 warnings
    ORANGE = 0xE67E22   # Level 2 warnings
    RED = 0xD11A2A      # Level 3 warnings
    DARK_RED = 0xB00020  # Zero tolerance (bans)
    BLUE = 0x3498DB     # Informational

    LOG_INFO = BLUE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int(value: Optional[str], name: str) -> int:
    """
    Parse string to integer with descriptive error handling.

    Raises:
        ConfigValidationError: If value is missing or not a valid integer.
    """
    if not value:
        raise ConfigValidationError(f"Missing required: {name}")
    try:
        return int(value)
    except ValueError:
        raise ConfigValidationError(f"Invalid integer for {name}: {value}")


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """Parse optional string to integer, returning None on failure."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_set(value: Optional[str]) -> Set[int]:
    """Parse comma-separated string (e.g. "123,456") to a set of integers."""
    if not value:
        return set()
    result = set()
    for part in value.split(","):
        part = part.strip()
        if part:
            try:
                result.add(int(part))
            except ValueError:
                pass  # Skip invalid entries silently
    return result


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL if it looks like http(s), None otherwise."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    missing = []

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        missing.append("DISCORD_TOKEN")

    logs_channel_id_str = os.getenv("LOGS_CHANNEL_ID")
    if not logs_channel_id_str:
        missing.append("LOGS_CHANNEL_ID")

    muted_role_id_str = os.getenv("MUTED_ROLE_ID")
    if not muted_role_id_str:
        missing.append("MUTED_ROLE_ID")

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Config(
        discord_token=discord_token,
        logs_channel_id=_parse_int(logs_channel_id_str, "LOGS_CHANNEL_ID"),
        muted_role_id=_parse_int(muted_role_id_str, "MUTED_ROLE_ID"),
        moderation_role_id=_parse_int_optional(os.getenv("MODERATION_ROLE_ID")),
        exempt_channel_ids=_parse_int_set(os.getenv("EXEMPT_CHANNEL_IDS")),
        identical_window_ms=_parse_int_with_default(
            os.getenv("AUTOMOD_IDENTICAL_WINDOW_MS"), c.IDENTICAL_WINDOW_MS,
            "AUTOMOD_IDENTICAL_WINDOW_MS", min_val=100, max_val=60_000,
        ),
        burst_window_ms=_parse_int_with_default(
            os.getenv("AUTOMOD_BURST_WINDOW_MS"), c.BURST_WINDOW_MS,
            "AUTOMOD_BURST_WINDOW_MS", min_val=100, max_val=60_000,
        ),
        multi_channel_window_ms=_parse_int_with_default(
            os.getenv("AUTOMOD_MULTI_CHANNEL_WINDOW_MS"), c.MULTI_CHANNEL_WINDOW_MS,
            "AUTOMOD_MULTI_CHANNEL_WINDOW_MS", min_val=100, max_val=60_000,
        ),
        identical_count=_parse_int_with_default(
            os.getenv("AUTOMOD_IDENTICAL_COUNT"), c.IDENTICAL_COUNT,
            "AUTOMOD_IDENTICAL_COUNT", min_val=2, max_val=50,
        ),
        burst_count=_parse_int_with_default(
            os.getenv("AUTOMOD_BURST_COUNT"), c.BURST_COUNT,
            "AUTOMOD_BURST_COUNT", min_val=2, max_val=100,
        ),
        multi_channel_count=_parse_int_with_default(
            os.getenv("AUTOMOD_MULTI_CHANNEL_COUNT"), c.MULTI_CHANNEL_COUNT,
            "AUTOMOD_MULTI_CHANNEL_COUNT", min_val=2, max_val=50,
        ),
        action_cooldown_ms=_parse_int_with_default(
            os.getenv("AUTOMOD_ACTION_COOLDOWN_MS"), c.ACTION_COOLDOWN_MS,
            "AUTOMOD_ACTION_COOLDOWN_MS", min_val=0, max_val=600_000,
        ),
        notice_ttl_seconds=_parse_int_with_default(
            os.getenv("AUTOMOD_NOTICE_TTL_SECONDS"), c.NOTICE_TTL_SECONDS,
            "AUTOMOD_NOTICE_TTL_SECONDS", min_val=1, max_val=600,
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> None:
    """
    Validate configuration and log a summary at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    logger.tree("Configuration Validated", [
        ("Logs Channel", str(config.logs_channel_id)),
        ("Muted Role", str(config.muted_role_id)),
        ("Exempt Channels", str(len(config.exempt_channel_ids))),
        ("Identical", f"{config.identical_count}x / {config.identical_window_ms}ms"),
        ("Burst", f"{config.burst_count} msgs / {config.burst_window_ms}ms"),
        ("Multi-Channel", f"{config.multi_channel_count} channels / {config.multi_channel_window_ms}ms"),
        ("Cooldown", f"{config.action_cooldown_ms}ms"),
    ], emoji="⚙️")


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    "load_config",
    "validate_and_log_config",
]
