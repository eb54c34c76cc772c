"""
Anti-Spam Detection Helpers
===========================

Link tagging and the three window detectors.

All functions are pure: they read a snapshot of a user's window and the
current timestamp, and return a Classification or None.
"""

import re
from typing import Dict, List, Optional, Sequence

from .constants import LINK_PATTERN
from .models import (
    DEFAULT_SETTINGS,
    Classification,
    DetectionSettings,
    SpamEvent,
    SpamKind,
)

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Basic Content Analysis
# =============================================================================

def normalize_content(content: Optional[str]) -> str:
    """Trim surrounding whitespace. Case and inner spacing are preserved."""
    return (content or "").strip()


def has_link(content: Optional[str]) -> bool:
    """Check if content looks like it carries a link (whitespace removed first)."""
    return bool(LINK_PATTERN.search(_WHITESPACE.sub("", content or "")))


def _windowed(
    window: Sequence[SpamEvent],
    now: int,
    duration_ms: int,
    channel_id: Optional[int] = None,
) -> List[SpamEvent]:
    """Events no older than duration_ms, optionally restricted to one channel."""
    return [
        e for e in window
        if now - e.timestamp <= duration_ms
        and (channel_id is None or e.channel_id == channel_id)
    ]


def _group_by_content(events: Sequence[SpamEvent]) -> Dict[str, List[SpamEvent]]:
    """Group events by exact content, first-seen order, skipping empty text."""
    groups: Dict[str, List[SpamEvent]] = {}
    for e in events:
        if not e.content:
            continue
        groups.setdefault(e.content, []).append(e)
    return groups


# =============================================================================
# Detectors
# =============================================================================

def detect_identical(
    window: Sequence[SpamEvent],
    now: int,
    channel_id: int,
    settings: DetectionSettings = DEFAULT_SETTINGS,
) -> Optional[Classification]:
    """
    Same text repeated in one channel.

    The first group (in first-seen order) reaching the threshold wins, even
    if a later group is larger.
    """
    windowed = _windowed(window, now, settings.identical_window_ms, channel_id)
    if len(windowed) < settings.identical_count:
        return None

    for content, events in _group_by_content(windowed).items():
        if len(events) >= settings.identical_count:
            return Classification(
                kind=SpamKind.IDENTICAL,
                events=tuple(events),
                any_link=any(e.has_link for e in events),
                channel_ids=(channel_id,),
                content=content,
            )
    return None


def detect_burst(
    window: Sequence[SpamEvent],
    now: int,
    channel_id: int,
    settings: DetectionSettings = DEFAULT_SETTINGS,
) -> Optional[Classification]:
    """High message rate in one channel, regardless of text."""
    windowed = _windowed(window, now, settings.burst_window_ms, channel_id)
    if len(windowed) < settings.burst_count:
        return None

    return Classification(
        kind=SpamKind.BURST,
        events=tuple(windowed),
        any_link=any(e.has_link for e in windowed),
        channel_ids=(channel_id,),
    )


def detect_multi_channel(
    window: Sequence[SpamEvent],
    now: int,
    settings: DetectionSettings = DEFAULT_SETTINGS,
) -> Optional[Classification]:
    """Same text posted across several distinct channels."""
    windowed = _windowed(window, now, settings.multi_channel_window_ms)

    for content, events in _group_by_content(windowed).items():
        channels = list(dict.fromkeys(e.channel_id for e in events))
        if len(channels) >= settings.multi_channel_count:
            return Classification(
                kind=SpamKind.MULTI_CHANNEL,
                events=tuple(events),
                any_link=any(e.has_link for e in events),
                channel_ids=tuple(channels),
                content=content,
            )
    return None


# =============================================================================
# Priority
# =============================================================================

def classify(
    window: Sequence[SpamEvent],
    now: int,
    channel_id: int,
    settings: DetectionSettings = DEFAULT_SETTINGS,
) -> Optional[Classification]:
    """
    Run the detectors in priority order and return the first match.

    Multi-channel beats identical, which beats burst. Lower-priority matches
    are dropped for this evaluation.
    """
    return (
        detect_multi_channel(window, now, settings)
        or detect_identical(window, now, channel_id, settings)
        or detect_burst(window, now, channel_id, settings)
    )
