"""
Tests for src/services/antispam/policy.py and notices.py

Covers the escalation table and the text derived from its directives.
"""

import pytest

from src.services.antispam import (
    DEFAULT_SETTINGS,
    NO_ACTION,
    Classification,
    IncomingMessage,
    ModAction,
    SpamEvent,
    SpamKind,
    WarningLevel,
    resolve,
)
from src.services.antispam.notices import (
    build_notice,
    build_record,
    build_title,
    describe_action,
    mod_reason,
)


def make_classification(kind, any_link=False, channels=(7,), count=3, content="spam"):
    events = tuple(
        SpamEvent(
            timestamp=1000 + i,
            channel_id=channels[i % len(channels)],
            content=content,
            has_link=any_link,
            message_id=100 + i,
        )
        for i in range(count)
    )
    return Classification(
        kind=kind,
        events=events,
        any_link=any_link,
        channel_ids=tuple(channels),
        content=None if kind is SpamKind.BURST else content,
    )


# =============================================================================
# resolve() Tests
# =============================================================================

class TestResolve:
    """Tests for the escalation table."""

    def test_none_is_no_action(self):
        assert resolve(None) is NO_ACTION
        assert NO_ACTION.is_none

    @pytest.mark.parametrize("kind,link,action,minutes,warning", [
        (SpamKind.IDENTICAL, False, ModAction.MUTE, 15, WarningLevel.LEVEL_1),
        (SpamKind.IDENTICAL, True, ModAction.MUTE, 60, WarningLevel.LEVEL_2),
        (SpamKind.BURST, False, ModAction.MUTE, 30, WarningLevel.LEVEL_1),
        (SpamKind.BURST, True, ModAction.MUTE, 180, WarningLevel.LEVEL_2),
        (SpamKind.MULTI_CHANNEL, False, ModAction.MUTE, 1440, WarningLevel.LEVEL_3),
    ])
    def test_mute_tiers(self, kind, link, action, minutes, warning):
        channels = (1, 2, 3) if kind is SpamKind.MULTI_CHANNEL else (7,)
        directive = resolve(make_classification(kind, link, channels))

        assert directive.action is action
        assert directive.mute_minutes == minutes
        assert directive.warning is warning
        assert directive.kind is kind
        assert directive.any_link is link

    def test_multi_channel_link_is_ban(self):
        directive = resolve(make_classification(SpamKind.MULTI_CHANNEL, True, (1, 2, 3)))

        assert directive.action is ModAction.BAN
        assert directive.warning is WarningLevel.ZERO_TOLERANCE
        assert directive.mute_minutes == 0
        assert directive.delete_message_ids == ()

    def test_single_channel_kinds_delete_matched(self):
        directive = resolve(make_classification(SpamKind.IDENTICAL))
        assert directive.delete_message_ids == (100, 101, 102)
        assert directive.delete_channel_id == 7

    def test_multi_channel_does_not_delete(self):
        directive = resolve(make_classification(SpamKind.MULTI_CHANNEL, False, (1, 2, 3)))
        assert directive.delete_message_ids == ()
        assert directive.delete_channel_id is None


# =============================================================================
# Notice Tests
# =============================================================================

class TestNotices:
    """Tests for notice text and moderation records."""

    def test_identical_notice(self):
        c = make_classification(SpamKind.IDENTICAL)
        text = build_notice(42, c, resolve(c), DEFAULT_SETTINGS)
        assert text == "⚠️ (L1) <@42> muted for 15m for sending the same message 3x in under 2s."

    def test_burst_link_notice(self):
        c = make_classification(SpamKind.BURST, any_link=True, count=5)
        text = build_notice(42, c, resolve(c), DEFAULT_SETTINGS)
        assert text == "⚠️ (L2) <@42> muted for 3h for spamming links (5+ messages in 2s)."

    def test_multi_channel_notice(self):
        c = make_classification(SpamKind.MULTI_CHANNEL, channels=(1, 2, 3))
        text = build_notice(42, c, resolve(c), DEFAULT_SETTINGS)
        assert "1d" in text and "multiple channels" in text

    def test_ban_notice(self):
        c = make_classification(SpamKind.MULTI_CHANNEL, True, (1, 2, 3))
        text = build_notice(42, c, resolve(c), DEFAULT_SETTINGS)
        assert text.startswith("🚫 **ANTI-SPAM** <@42> has been banned")

    def test_titles(self):
        c = make_classification(SpamKind.IDENTICAL, any_link=True)
        assert build_title(c, resolve(c)) == "⚠️ (L2) Identical spam + link (1h mute)"

        ban = make_classification(SpamKind.MULTI_CHANNEL, True, (1, 2, 3))
        assert build_title(ban, resolve(ban)).startswith("🚫 BAN")

    def test_mod_reason(self):
        c = make_classification(SpamKind.BURST, any_link=True)
        assert mod_reason(resolve(c)) == "AutoMod: Message Burst with links"

    def test_describe_action(self):
        mute = resolve(make_classification(SpamKind.BURST))
        assert describe_action(mute, True) == "Mute 30m"
        assert describe_action(mute, False) == "Mute failed"
        assert describe_action(NO_ACTION, False) == "None"

    def test_ban_record_truncates_content(self):
        c = make_classification(SpamKind.MULTI_CHANNEL, True, (1, 2, 3), content="x" * 500)
        message = IncomingMessage(
            author_id=42, guild_id=1, channel_id=3, message_id=9,
            content="x" * 500, timestamp=5000, author_name="bob",
        )
        record = build_record(message, c, resolve(c), applied=True)

        assert len(record["content"]) == 256
        assert record["action"] == "Ban"
        assert record["warning_level"] == int(WarningLevel.ZERO_TOLERANCE)
        assert record["channel_ids"] == [1, 2, 3]
        assert record["user_name"] == "bob"
