"""
AutoMod - Test Fixtures
=======================

Shared fixtures for all tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="automod-logs-"))

from src.services.antispam import DetectionSettings, IncomingMessage  # noqa: E402


GUILD_ID = 987654321
USER_ID = 123456789
CHANNEL_A = 555000001
CHANNEL_B = 555000002
CHANNEL_C = 555000003
BASE_TS = 1_700_000_000_000


# =============================================================================
# Fake Sinks
# =============================================================================

class FakeModerationSink:
    """Records every moderation call. Results are configurable per operation."""

    def __init__(self) -> None:
        self.calls = []
        self.results = {"delete_messages": True, "apply_timed_mute": True, "ban_user": True}
        self.raises = {}

    async def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.raises:
            raise self.raises[name]
        return self.results[name]

    async def delete_messages(self, guild_id, channel_id, message_ids):
        return await self._call("delete_messages", guild_id, channel_id, tuple(message_ids))

    async def apply_timed_mute(self, guild_id, user_id, duration_minutes, reason):
        return await self._call("apply_timed_mute", guild_id, user_id, duration_minutes, reason)

    async def ban_user(self, guild_id, user_id, reason):
        return await self._call("ban_user", guild_id, user_id, reason)

    def named(self, name):
        return [c for c in self.calls if c[0] == name]


class FakeNotificationSink:
    """Records channel notices and persistent records."""

    def __init__(self) -> None:
        self.ephemeral = []
        self.records = []
        self.fail_records = False

    async def post_ephemeral(self, guild_id, channel_id, text, ttl_seconds):
        self.ephemeral.append((channel_id, text, ttl_seconds))
        return True

    async def post_persistent_record(self, guild_id, payload):
        self.records.append(payload)
        return not self.fail_records


# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Default thresholds: 3 identical / 5 burst in 2s, 3 channels in 3.5s."""
    return DetectionSettings()


@pytest.fixture
def moderation():
    return FakeModerationSink()


@pytest.fixture
def notifications():
    return FakeNotificationSink()


@pytest.fixture
def make_message():
    """Factory for IncomingMessage with sequential message ids."""
    counter = {"id": 1000}

    def _make(
        content="hello",
        offset_ms=0,
        channel_id=CHANNEL_A,
        author_id=USER_ID,
        guild_id=GUILD_ID,
        is_bot_author=False,
        message_id=None,
    ):
        counter["id"] += 1
        return IncomingMessage(
            author_id=author_id,
            guild_id=guild_id,
            channel_id=channel_id,
            message_id=message_id if message_id is not None else counter["id"],
            content=content,
            timestamp=BASE_TS + offset_ms,
            is_bot_author=is_bot_author,
            author_name="spammer",
        )

    return _make


# =============================================================================
# Mock Discord Objects
# =============================================================================

@pytest.fixture
def mock_discord_member():
    """Create a mock Discord member."""
    member = MagicMock()
    member.id = USER_ID
    member.name = "testuser"
    member.bot = False
    member.roles = []
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    return member


@pytest.fixture
def mock_discord_guild(mock_discord_member):
    """Create a mock Discord guild."""
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.get_member = MagicMock(return_value=mock_discord_member)
    guild.fetch_member = AsyncMock(return_value=mock_discord_member)
    guild.get_role = MagicMock(return_value=None)
    guild.get_channel = MagicMock(return_value=None)
    guild.ban = AsyncMock()
    return guild


@pytest.fixture
def mock_bot(mock_discord_guild):
    """Create a mock bot instance."""
    bot = MagicMock()
    bot.get_guild = MagicMock(return_value=mock_discord_guild)
    bot.get_channel = MagicMock(return_value=None)
    return bot
