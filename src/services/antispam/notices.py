"""
Anti-Spam Notices
=================

Text for the short-lived channel notices and the payload of the persistent
moderation record, derived from a classification and its directive.
"""

from typing import Any, Dict, Optional

from src.utils.duration import format_duration_from_minutes

from .constants import (
    BAN_LOG_CONTENT_MAX_LENGTH,
    LOG_CONTENT_MAX_LENGTH,
    SPAM_DISPLAY_NAMES,
)
from .models import (
    Classification,
    Directive,
    DetectionSettings,
    IncomingMessage,
    ModAction,
    SpamKind,
    WarningLevel,
)


def _level_tag(warning: WarningLevel) -> str:
    if warning in (WarningLevel.LEVEL_1, WarningLevel.LEVEL_2, WarningLevel.LEVEL_3):
        return f"(L{int(warning)}) "
    return ""


def mod_reason(directive: Directive) -> str:
    """Audit-log reason passed to the moderation sink."""
    display = SPAM_DISPLAY_NAMES.get(directive.kind.value, directive.kind.value)
    suffix = " with links" if directive.any_link else ""
    return f"AutoMod: {display}{suffix}"


def build_notice(
    user_id: int,
    classification: Classification,
    directive: Directive,
    settings: DetectionSettings,
) -> str:
    """Channel notice shown for a few seconds where the spam happened."""
    mention = f"<@{user_id}>"

    if directive.action is ModAction.BAN:
        return f"🚫 **ANTI-SPAM** {mention} has been banned for posting links across multiple channels."

    duration = format_duration_from_minutes(directive.mute_minutes)

    if classification.kind is SpamKind.MULTI_CHANNEL:
        return f"🚫 **ANTI-SPAM** {mention} muted for {duration} (same text posted in multiple channels)."

    tag = _level_tag(directive.warning)
    if classification.kind is SpamKind.IDENTICAL:
        if directive.any_link:
            return f"⚠️ {tag}{mention} muted for {duration} for repeating the same message with a link."
        window_s = settings.identical_window_ms / 1000
        return (
            f"⚠️ {tag}{mention} muted for {duration} for sending the same message "
            f"{settings.identical_count}x in under {window_s:g}s."
        )

    window_s = settings.burst_window_ms / 1000
    rate = f"{settings.burst_count}+ messages in {window_s:g}s"
    if directive.any_link:
        return f"⚠️ {tag}{mention} muted for {duration} for spamming links ({rate})."
    return f"⚠️ {tag}{mention} muted for {duration} for spamming ({rate})."


def build_title(classification: Classification, directive: Directive) -> str:
    """Headline of the persistent record."""
    if directive.action is ModAction.BAN:
        return "🚫 BAN: Link spam across multiple channels"

    duration = format_duration_from_minutes(directive.mute_minutes)
    tag = _level_tag(directive.warning)

    if classification.kind is SpamKind.MULTI_CHANNEL:
        return f"🚫 ANTI-SPAM: Same text in multiple channels (mute {duration}, level 3 warning)"
    if classification.kind is SpamKind.IDENTICAL:
        label = "Identical spam + link" if directive.any_link else "Identical spam"
    else:
        label = "Burst spam + link" if directive.any_link else "Burst spam"
    return f"⚠️ {tag}{label} ({duration} mute)"


def describe_action(directive: Directive, applied: bool) -> str:
    if directive.action is ModAction.BAN:
        return "Ban" if applied else "Ban failed"
    if directive.action is ModAction.MUTE:
        duration = format_duration_from_minutes(directive.mute_minutes)
        return f"Mute {duration}" if applied else "Mute failed"
    return "None"


def _truncate(content: Optional[str], limit: int) -> Optional[str]:
    if content is None:
        return None
    return content[:limit]


def build_record(
    message: IncomingMessage,
    classification: Classification,
    directive: Directive,
    applied: bool,
) -> Dict[str, Any]:
    """Structured payload for the persistent moderation record."""
    limit = (
        BAN_LOG_CONTENT_MAX_LENGTH
        if directive.action is ModAction.BAN
        else LOG_CONTENT_MAX_LENGTH
    )
    return {
        "kind": classification.kind.value,
        "title": build_title(classification, directive),
        "user_id": message.author_id,
        "user_name": message.author_name,
        "channel_ids": list(classification.channel_ids),
        "content": _truncate(classification.content, limit),
        "message_count": len(classification.events),
        "any_link": classification.any_link,
        "action": describe_action(directive, applied),
        "warning_level": int(directive.warning),
        "applied": applied,
        "timestamp": message.timestamp,
    }
