"""
Tests for src/services/antispam/detectors.py

Covers link tagging, the three window detectors, and their priority.
"""

import pytest

from src.services.antispam import (
    DetectionSettings,
    SpamEvent,
    SpamKind,
    classify,
    detect_burst,
    detect_identical,
    detect_multi_channel,
    has_link,
)
from src.services.antispam.detectors import normalize_content

NOW = 10_000
CH_A, CH_B, CH_C = 1, 2, 3


def ev(content, ts, channel=CH_A, mid=None, link=None):
    return SpamEvent(
        timestamp=ts,
        channel_id=channel,
        content=content,
        has_link=has_link(content) if link is None else link,
        message_id=mid if mid is not None else ts,
    )


# =============================================================================
# has_link() Tests
# =============================================================================

class TestHasLink:
    """Tests for the link heuristic."""

    @pytest.mark.parametrize("text", [
        "check https://example.org/x",
        "http://foo",
        "go to www.spam",
        "free nitro at nitro.gg",
        "EXAMPLE.COM/path",
        "site.io",
    ])
    def test_detects_links(self, text):
        assert has_link(text) is True

    def test_whitespace_is_removed_before_matching(self):
        """Spaced-out links still count."""
        assert has_link("example . com") is True
        assert has_link("h t t p s : / / x") is True

    @pytest.mark.parametrize("text", ["hello world", "", None, "version 1.2.3", "e.g. this"])
    def test_plain_text(self, text):
        assert has_link(text) is False


class TestNormalizeContent:
    """Tests for normalize_content."""

    def test_strips_outer_whitespace_only(self):
        assert normalize_content("  Hello   World \n") == "Hello   World"

    def test_none_is_empty(self):
        assert normalize_content(None) == ""


# =============================================================================
# detect_identical() Tests
# =============================================================================

class TestDetectIdentical:
    """Tests for same-text repetition in one channel."""

    def test_below_threshold(self):
        window = [ev("spam", NOW - 100), ev("spam", NOW)]
        assert detect_identical(window, NOW, CH_A) is None

    def test_exactly_threshold(self):
        window = [ev("spam", NOW - 200), ev("spam", NOW - 100), ev("spam", NOW)]
        result = detect_identical(window, NOW, CH_A)

        assert result is not None
        assert result.kind is SpamKind.IDENTICAL
        assert result.content == "spam"
        assert result.channel_ids == (CH_A,)
        assert result.message_ids == (NOW - 200, NOW - 100, NOW)
        assert result.any_link is False

    def test_window_edge_is_inclusive(self):
        window = [ev("spam", NOW - 2000), ev("spam", NOW - 1000), ev("spam", NOW)]
        assert detect_identical(window, NOW, CH_A) is not None

    def test_outside_window_ignored(self):
        window = [ev("spam", NOW - 2001), ev("spam", NOW - 1000), ev("spam", NOW)]
        assert detect_identical(window, NOW, CH_A) is None

    def test_other_channels_ignored(self):
        window = [ev("spam", NOW - 200, CH_B), ev("spam", NOW - 100), ev("spam", NOW)]
        assert detect_identical(window, NOW, CH_A) is None

    def test_empty_content_never_groups(self):
        window = [ev("", NOW - 200), ev("", NOW - 100), ev("", NOW)]
        assert detect_identical(window, NOW, CH_A) is None

    def test_any_link_from_group(self):
        window = [
            ev("buy at shop.com", NOW - 200),
            ev("buy at shop.com", NOW - 100),
            ev("buy at shop.com", NOW),
        ]
        assert detect_identical(window, NOW, CH_A).any_link is True

    def test_first_seen_group_wins(self):
        """The earliest group reaching the threshold wins over a larger one."""
        window = [
            ev("a", NOW - 900),
            ev("b", NOW - 800),
            ev("b", NOW - 700),
            ev("a", NOW - 600),
            ev("b", NOW - 500),
            ev("a", NOW - 400),
            ev("b", NOW - 300),
        ]
        assert detect_identical(window, NOW, CH_A).content == "a"

    def test_custom_threshold(self):
        settings = DetectionSettings(identical_count=2)
        window = [ev("spam", NOW - 100), ev("spam", NOW)]
        assert detect_identical(window, NOW, CH_A, settings) is not None


# =============================================================================
# detect_burst() Tests
# =============================================================================

class TestDetectBurst:
    """Tests for message rate in one channel."""

    def test_four_messages_not_burst(self):
        window = [ev(f"m{i}", NOW - i * 100) for i in range(4)]
        assert detect_burst(window, NOW, CH_A) is None

    def test_five_messages_is_burst(self):
        window = [ev(f"m{i}", NOW - (4 - i) * 100) for i in range(5)]
        result = detect_burst(window, NOW, CH_A)

        assert result.kind is SpamKind.BURST
        assert len(result.events) == 5
        assert result.content is None
        assert result.channel_ids == (CH_A,)

    def test_link_in_any_message(self):
        window = [ev(f"m{i}", NOW - (4 - i) * 100) for i in range(4)]
        window.append(ev("see www.x", NOW))
        assert detect_burst(window, NOW, CH_A).any_link is True

    def test_spread_across_channels_not_burst(self):
        window = [ev(f"m{i}", NOW - i * 100, CH_A if i % 2 else CH_B) for i in range(6)]
        assert detect_burst(window, NOW, CH_A) is None


# =============================================================================
# detect_multi_channel() Tests
# =============================================================================

class TestDetectMultiChannel:
    """Tests for the same text across channels."""

    def test_three_channels(self):
        window = [ev("hi", NOW - 2000, CH_A), ev("hi", NOW - 1000, CH_B), ev("hi", NOW, CH_C)]
        result = detect_multi_channel(window, NOW)

        assert result.kind is SpamKind.MULTI_CHANNEL
        assert result.channel_ids == (CH_A, CH_B, CH_C)
        assert result.content == "hi"

    def test_two_channels_not_enough(self):
        window = [ev("hi", NOW - 100, CH_A), ev("hi", NOW - 50, CH_A), ev("hi", NOW, CH_B)]
        assert detect_multi_channel(window, NOW) is None

    def test_uses_longer_window(self):
        window = [ev("hi", NOW - 3500, CH_A), ev("hi", NOW - 1000, CH_B), ev("hi", NOW, CH_C)]
        assert detect_multi_channel(window, NOW) is not None

    def test_outside_window(self):
        window = [ev("hi", NOW - 3501, CH_A), ev("hi", NOW - 1000, CH_B), ev("hi", NOW, CH_C)]
        assert detect_multi_channel(window, NOW) is None

    def test_different_texts(self):
        window = [ev("a", NOW - 200, CH_A), ev("b", NOW - 100, CH_B), ev("c", NOW, CH_C)]
        assert detect_multi_channel(window, NOW) is None


# =============================================================================
# classify() Tests
# =============================================================================

class TestClassifyPriority:
    """Tests for detector priority."""

    def test_nothing(self):
        assert classify([ev("hello", NOW)], NOW, CH_A) is None

    def test_identical_beats_burst(self):
        window = [ev("spam", NOW - (4 - i) * 100) for i in range(5)]
        assert classify(window, NOW, CH_A).kind is SpamKind.IDENTICAL

    def test_burst_when_texts_differ(self):
        window = [ev(f"m{i}", NOW - (4 - i) * 100) for i in range(5)]
        assert classify(window, NOW, CH_A).kind is SpamKind.BURST

    def test_multi_channel_beats_identical_and_burst(self):
        window = [ev("spam", NOW - 1000 + i * 100, CH_A) for i in range(5)]
        window += [ev("spam", NOW - 200, CH_B), ev("spam", NOW, CH_C)]
        window.sort(key=lambda e: e.timestamp)

        result = classify(window, NOW, CH_C)
        assert result.kind is SpamKind.MULTI_CHANNEL
