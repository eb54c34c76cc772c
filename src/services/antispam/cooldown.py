"""
Anti-Spam Cooldown Gate
=======================

Suppresses a second directive for the same user while the previous one
is still within the cooldown, whatever its kind.
"""

from typing import Dict, Hashable, Optional

from .constants import ACTION_COOLDOWN_MS
from .models import CooldownRecord, SpamKind


class CooldownGate:
    """Per-user record of the last directive issued."""

    def __init__(self, cooldown_ms: int = ACTION_COOLDOWN_MS) -> None:
        self.cooldown_ms = cooldown_ms
        self._records: Dict[Hashable, CooldownRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def get(self, user_key: Hashable) -> Optional[CooldownRecord]:
        return self._records.get(user_key)

    def allow(self, user_key: Hashable, now: int) -> bool:
        """True unless the user's last directive is younger than the cooldown."""
        last = self._records.get(user_key)
        if last is None:
            return True
        return now - last.timestamp >= self.cooldown_ms

    def record(self, user_key: Hashable, now: int, kind: SpamKind) -> None:
        self._records[user_key] = CooldownRecord(timestamp=now, kind=kind)

    def evict_expired(self, now: int) -> int:
        """Forget records whose cooldown has elapsed. Returns how many."""
        expired = [
            key for key, rec in self._records.items()
            if now - rec.timestamp >= self.cooldown_ms
        ]
        for key in expired:
            del self._records[key]
        return len(expired)
