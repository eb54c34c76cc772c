"""
Anti-Spam Event Recorder
========================

Bounded, time-ordered per-user event windows.

DESIGN:
    Each user key gets a UserWindow on its first event. Every append prunes
    entries older than the longest detection window plus a slack margin,
    measured from the newest timestamp seen for that user, then caps the
    window to the most recent N events. Idle users are evicted by the
    service's cleanup loop.
"""

from typing import Dict, Hashable, List, Optional

from .detectors import has_link, normalize_content
from .models import DEFAULT_SETTINGS, DetectionSettings, SpamEvent, UserWindow


class EventRecorder:
    """Owns every user's window. Not shared outside the service that created it."""

    def __init__(self, settings: DetectionSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._windows: Dict[Hashable, UserWindow] = {}

    def __len__(self) -> int:
        return len(self._windows)

    def get(self, user_key: Hashable) -> Optional[UserWindow]:
        return self._windows.get(user_key)

    def record(
        self,
        user_key: Hashable,
        channel_id: int,
        content: Optional[str],
        timestamp: int,
        message_id: int,
    ) -> List[SpamEvent]:
        """
        Append one message to the user's window and prune it.

        Args:
            user_key: Identifies the user (the service uses (guild_id, user_id)).
            channel_id: Channel the message was posted in.
            content: Raw message text.
            timestamp: Message time in ms.
            message_id: Message identifier, kept for deletion.

        Returns:
            A snapshot of the pruned window, oldest first.
        """
        window = self._windows.get(user_key)
        if window is None:
            window = UserWindow()
            self._windows[user_key] = window

        normalized = normalize_content(content)
        event = SpamEvent(
            timestamp=timestamp,
            channel_id=channel_id,
            content=normalized,
            has_link=has_link(normalized),
            message_id=message_id,
        )

        window.latest_timestamp = max(window.latest_timestamp, timestamp)
        cutoff = window.latest_timestamp - self.settings.retention_ms

        events = window.events
        events.append(event)
        # Out-of-order arrivals are rare, keep the list sorted for detectors
        if len(events) > 1 and events[-2].timestamp > timestamp:
            events.sort(key=lambda e: e.timestamp)

        kept = [e for e in events if e.timestamp >= cutoff]
        window.events = kept[-self.settings.max_events_per_user:]

        return list(window.events)

    def evict_idle(self, now: int) -> int:
        """
        Drop windows with no event within idle_eviction_ms of now, then
        enforce max_tracked_users by dropping the least recently active.

        Returns:
            Number of windows removed.
        """
        idle_cutoff = now - self.settings.idle_eviction_ms
        stale = [
            key for key, window in self._windows.items()
            if window.latest_timestamp < idle_cutoff
        ]
        for key in stale:
            del self._windows[key]

        removed = len(stale)
        excess = len(self._windows) - self.settings.max_tracked_users
        if excess > 0:
            by_activity = sorted(
                self._windows.items(),
                key=lambda item: item[1].latest_timestamp,
            )
            for key, _ in by_activity[:excess]:
                del self._windows[key]
            removed += excess

        return removed

    def clear(self) -> None:
        self._windows.clear()
