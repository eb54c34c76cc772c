"""
Duration Utilities
==================

Formatting of mute durations for notices and moderation records.

Usage:
    from src.utils.duration import format_duration, format_duration_from_minutes

    display = format_duration(131400)  # "1d 12h 30m"
    display = format_duration_from_minutes(90)  # "1h 30m"
"""

from typing import Optional


# =============================================================================
# Time Constants
# =============================================================================

SECONDS_PER_WEEK = 604800
SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


# =============================================================================
# Formatting Functions
# =============================================================================

def format_duration(
    seconds: Optional[int],
    max_units: int = 3,
    show_seconds: bool = False,
) -> str:
    """
    Format seconds into a human-readable duration string.

    Args:
        seconds: Duration in seconds, or None for permanent.
        max_units: Maximum number of time units to show (default 3).
        show_seconds: Whether to show seconds in output (default False).

    Returns:
        Formatted string like "1d 12h 30m" or "Permanent".

    Examples:
        >>> format_duration(None)
        "Permanent"
        >>> format_duration(3661)
        "1h 1m"
        >>> format_duration(45)
        "< 1m"
    """
    if seconds is None:
        return "Permanent"

    if seconds <= 0:
        return "0m" if not show_seconds else "0s"

    if seconds < SECONDS_PER_MINUTE and not show_seconds:
        return "< 1m"

    parts = []

    for unit_seconds, suffix in (
        (SECONDS_PER_WEEK, "w"),
        (SECONDS_PER_DAY, "d"),
        (SECONDS_PER_HOUR, "h"),
        (SECONDS_PER_MINUTE, "m"),
    ):
        if seconds >= unit_seconds and len(parts) < max_units:
            value, seconds = divmod(seconds, unit_seconds)
            parts.append(f"{value}{suffix}")

    if show_seconds and seconds > 0 and len(parts) < max_units:
        parts.append(f"{seconds}s")

    return " ".join(parts) if parts else ("0s" if show_seconds else "< 1m")


def format_duration_from_minutes(minutes: int) -> str:
    """
    Format minutes into a human-readable duration string.

    Examples:
        >>> format_duration_from_minutes(90)
        "1h 30m"
        >>> format_duration_from_minutes(1440)
        "1d"
    """
    if not minutes:
        return "0m"
    return format_duration(minutes * SECONDS_PER_MINUTE)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "format_duration",
    "format_duration_from_minutes",
    "SECONDS_PER_MINUTE",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_DAY",
    "SECONDS_PER_WEEK",
]
