"""
AutoMod - Anti-Spam Package
===========================

Spam detection and escalation engine.

Structure:
    - models.py: Data types (events, classifications, directives, outcomes)
    - recorder.py: Per-user sliding windows
    - detectors.py: Identical, burst, and multi-channel detectors
    - policy.py: Escalation table
    - cooldown.py: Per-user action cooldown
    - notices.py: Notice text and persistent record payloads
    - sinks.py: Moderation and notification interfaces
    - service.py: Dispatcher
    - handlers.py: discord.py sink implementations (import directly)
"""

from .cooldown import CooldownGate
from .detectors import classify, detect_burst, detect_identical, detect_multi_channel, has_link
from .models import (
    DEFAULT_SETTINGS,
    NO_ACTION,
    Classification,
    CooldownRecord,
    DetectionSettings,
    Directive,
    HandleOutcome,
    IncomingMessage,
    ModAction,
    OutcomeStatus,
    SinkFailure,
    SpamEvent,
    SpamKind,
    UserWindow,
    WarningLevel,
)
from .policy import ESCALATION_TABLE, resolve
from .recorder import EventRecorder
from .service import AntiSpamService
from .sinks import ModerationSink, NotificationSink

__all__ = [
    "AntiSpamService",
    "CooldownGate",
    "EventRecorder",
    "ESCALATION_TABLE",
    "resolve",
    "classify",
    "detect_burst",
    "detect_identical",
    "detect_multi_channel",
    "has_link",
    "DEFAULT_SETTINGS",
    "NO_ACTION",
    "Classification",
    "CooldownRecord",
    "DetectionSettings",
    "Directive",
    "HandleOutcome",
    "IncomingMessage",
    "ModAction",
    "OutcomeStatus",
    "SinkFailure",
    "SpamEvent",
    "SpamKind",
    "UserWindow",
    "WarningLevel",
    "ModerationSink",
    "NotificationSink",
]
