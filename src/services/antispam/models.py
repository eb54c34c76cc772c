"""
Anti-Spam Data Models
=====================

Dataclasses for recorded events, classifications, directives, and outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Hashable, List, Optional, Tuple

from .constants import (
    ACTION_COOLDOWN_MS,
    BURST_COUNT,
    BURST_WINDOW_MS,
    IDENTICAL_COUNT,
    IDENTICAL_WINDOW_MS,
    IDLE_EVICTION_MS,
    MAX_EVENTS_PER_USER,
    MAX_TRACKED_USERS,
    MULTI_CHANNEL_COUNT,
    MULTI_CHANNEL_WINDOW_MS,
    NOTICE_TTL_SECONDS,
    PRUNE_SLACK_MS,
)


# =============================================================================
# Enums
# =============================================================================

class SpamKind(str, Enum):
    """Pattern that triggered a classification."""
    IDENTICAL = "identical"
    BURST = "burst"
    MULTI_CHANNEL = "multi_channel"


class ModAction(str, Enum):
    """Moderation action carried by a directive."""
    NONE = "none"
    MUTE = "mute"
    BAN = "ban"


class WarningLevel(IntEnum):
    """Warning severity attached to a directive."""
    NONE = 0
    LEVEL_1 = 1
    LEVEL_2 = 2
    LEVEL_3 = 3
    ZERO_TOLERANCE = 4


class OutcomeStatus(str, Enum):
    """How the dispatcher finished with one incoming message."""
    IGNORED = "ignored"
    STALE = "stale"
    NO_MATCH = "no_match"
    SUPPRESSED = "suppressed"
    ACTIONED = "actioned"
    FAILED = "failed"


# =============================================================================
# Settings
# =============================================================================

@dataclass(frozen=True)
class DetectionSettings:
    """Process-wide detection thresholds. Read-only after construction."""
    identical_window_ms: int = IDENTICAL_WINDOW_MS
    burst_window_ms: int = BURST_WINDOW_MS
    multi_channel_window_ms: int = MULTI_CHANNEL_WINDOW_MS
    identical_count: int = IDENTICAL_COUNT
    burst_count: int = BURST_COUNT
    multi_channel_count: int = MULTI_CHANNEL_COUNT
    action_cooldown_ms: int = ACTION_COOLDOWN_MS
    prune_slack_ms: int = PRUNE_SLACK_MS
    max_events_per_user: int = MAX_EVENTS_PER_USER
    max_tracked_users: int = MAX_TRACKED_USERS
    idle_eviction_ms: int = IDLE_EVICTION_MS
    notice_ttl_seconds: int = NOTICE_TTL_SECONDS

    @property
    def retention_ms(self) -> int:
        """How far behind the newest event an entry may be and still be kept."""
        return max(
            self.identical_window_ms,
            self.burst_window_ms,
            self.multi_channel_window_ms,
        ) + self.prune_slack_ms


DEFAULT_SETTINGS = DetectionSettings()


# =============================================================================
# Input
# =============================================================================

@dataclass(frozen=True)
class IncomingMessage:
    """The fields of a chat message the engine needs, nothing more."""
    author_id: int
    guild_id: Optional[int]
    channel_id: int
    message_id: int
    content: str
    timestamp: int  # ms since epoch
    is_bot_author: bool = False
    author_name: str = ""


# =============================================================================
# Window State
# =============================================================================

@dataclass(frozen=True)
class SpamEvent:
    """One observed message in a user's window."""
    timestamp: int
    channel_id: int
    content: str
    has_link: bool
    message_id: int


@dataclass
class UserWindow:
    """Time-ordered recent events for one user."""
    events: List[SpamEvent] = field(default_factory=list)
    latest_timestamp: int = 0


@dataclass
class CooldownRecord:
    """Last directive issued for a user."""
    timestamp: int
    kind: SpamKind


# =============================================================================
# Classification & Directive
# =============================================================================

@dataclass(frozen=True)
class Classification:
    """Winning detector result for one incoming message."""
    kind: SpamKind
    events: Tuple[SpamEvent, ...]
    any_link: bool
    channel_ids: Tuple[int, ...]
    content: Optional[str] = None

    @property
    def message_ids(self) -> Tuple[int, ...]:
        return tuple(e.message_id for e in self.events if e.message_id)


@dataclass(frozen=True)
class Directive:
    """Resolved moderation response for a classification."""
    action: ModAction
    warning: WarningLevel = WarningLevel.NONE
    mute_minutes: int = 0
    delete_message_ids: Tuple[int, ...] = ()
    delete_channel_id: Optional[int] = None
    kind: Optional[SpamKind] = None
    any_link: bool = False

    @property
    def is_none(self) -> bool:
        return self.action is ModAction.NONE


NO_ACTION = Directive(action=ModAction.NONE)


# =============================================================================
# Outcome
# =============================================================================

@dataclass(frozen=True)
class SinkFailure:
    """A sink call that returned failure or raised."""
    operation: str
    error: str


@dataclass
class HandleOutcome:
    """Structured result of handling one incoming message."""
    status: OutcomeStatus
    user_key: Optional[Hashable] = None
    classification: Optional[Classification] = None
    directive: Directive = NO_ACTION
    failures: List[SinkFailure] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def fully_applied(self) -> bool:
        return self.status is OutcomeStatus.ACTIONED and not self.failures
