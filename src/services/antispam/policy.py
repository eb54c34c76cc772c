"""
Anti-Spam Escalation Policy
===========================

Maps a classification to a moderation directive.

    multi_channel + link  ->  ban, zero tolerance
    multi_channel         ->  mute 24h, level 3
    identical + link      ->  mute 1h, level 2, delete matched
    identical             ->  mute 15m, level 1, delete matched
    burst + link          ->  mute 3h, level 2, delete matched
    burst                 ->  mute 30m, level 1, delete matched
"""

from typing import Dict, Optional, Tuple

from .constants import (
    BURST_LINK_MUTE_MINUTES,
    BURST_MUTE_MINUTES,
    IDENTICAL_LINK_MUTE_MINUTES,
    IDENTICAL_MUTE_MINUTES,
    MULTI_CHANNEL_MUTE_MINUTES,
)
from .models import (
    NO_ACTION,
    Classification,
    Directive,
    ModAction,
    SpamKind,
    WarningLevel,
)


# (kind, any_link) -> (action, mute minutes, warning, delete matched)
ESCALATION_TABLE: Dict[Tuple[SpamKind, bool], Tuple[ModAction, int, WarningLevel, bool]] = {
    (SpamKind.MULTI_CHANNEL, True): (ModAction.BAN, 0, WarningLevel.ZERO_TOLERANCE, False),
    (SpamKind.MULTI_CHANNEL, False): (ModAction.MUTE, MULTI_CHANNEL_MUTE_MINUTES, WarningLevel.LEVEL_3, False),
    (SpamKind.IDENTICAL, True): (ModAction.MUTE, IDENTICAL_LINK_MUTE_MINUTES, WarningLevel.LEVEL_2, True),
    (SpamKind.IDENTICAL, False): (ModAction.MUTE, IDENTICAL_MUTE_MINUTES, WarningLevel.LEVEL_1, True),
    (SpamKind.BURST, True): (ModAction.MUTE, BURST_LINK_MUTE_MINUTES, WarningLevel.LEVEL_2, True),
    (SpamKind.BURST, False): (ModAction.MUTE, BURST_MUTE_MINUTES, WarningLevel.LEVEL_1, True),
}


def resolve(classification: Optional[Classification]) -> Directive:
    """Resolve the directive for a classification. None yields NO_ACTION."""
    if classification is None:
        return NO_ACTION

    action, minutes, warning, delete = ESCALATION_TABLE[
        (classification.kind, classification.any_link)
    ]

    return Directive(
        action=action,
        warning=warning,
        mute_minutes=minutes,
        delete_message_ids=classification.message_ids if delete else (),
        delete_channel_id=classification.channel_ids[0] if delete else None,
        kind=classification.kind,
        any_link=classification.any_link,
    )
