"""
AutoMod - Anti-Spam Service
===========================

Dispatcher that turns each incoming message into at most one moderation
directive and applies it through the sinks.

DESIGN:
    Per message: record -> stale check -> cooldown gate -> classify ->
    resolve -> reserve cooldown -> apply. Everything up to and including the
    cooldown reservation is synchronous, so no other handler can run between
    the gate check and the gate update. A per-user lock additionally keeps
    one user's messages applied in arrival order.

    Applying a directive is best-effort: each sink call is isolated, a
    failure is logged and recorded in the outcome, and the remaining calls
    still run. handle() never raises.
"""

import asyncio
import time
from typing import Any, Callable, Dict, Hashable, List, Optional

from src.core.logger import logger
from src.utils.async_utils import create_safe_task, run_captured

from .constants import CLEANUP_INTERVAL_SECONDS, SPAM_DISPLAY_NAMES
from .cooldown import CooldownGate
from .detectors import classify
from .models import (
    DEFAULT_SETTINGS,
    DetectionSettings,
    HandleOutcome,
    IncomingMessage,
    ModAction,
    OutcomeStatus,
    SinkFailure,
)
from .notices import build_notice, build_record, describe_action, mod_reason
from .policy import resolve
from .recorder import EventRecorder
from .sinks import ModerationSink, NotificationSink

OutcomeObserver = Callable[[HandleOutcome], Any]


def _now_ms() -> int:
    return int(time.time() * 1000)


class AntiSpamService:
    """
    Owns the window store, the cooldown gate, and the per-user locks.

    Attributes:
        recorder: Per-user event windows.
        cooldowns: Per-user last-directive records.
        settings: Detection thresholds shared by all components.
    """

    def __init__(
        self,
        moderation: ModerationSink,
        notifications: NotificationSink,
        settings: DetectionSettings = DEFAULT_SETTINGS,
        observer: Optional[OutcomeObserver] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """
        Args:
            moderation: Applies deletes, mutes, and bans.
            notifications: Posts channel notices and persistent records.
            settings: Detection thresholds.
            observer: Optional callback receiving every HandleOutcome.
            clock: Current time in ms, used by the cleanup loop.
        """
        self.moderation = moderation
        self.notifications = notifications
        self.settings = settings
        self.observer = observer
        self._clock = clock

        self.recorder = EventRecorder(settings)
        self.cooldowns = CooldownGate(settings.action_cooldown_ms)
        self._user_locks: Dict[Hashable, asyncio.Lock] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    # =========================================================================
    # Entry Point
    # =========================================================================

    async def handle(self, message: IncomingMessage) -> HandleOutcome:
        """Process one incoming message. Never raises."""
        if message.guild_id is None or message.is_bot_author:
            outcome = HandleOutcome(status=OutcomeStatus.IGNORED)
            self._notify(outcome)
            return outcome

        user_key = (message.guild_id, message.author_id)

        try:
            lock = self._user_locks.setdefault(user_key, asyncio.Lock())
            async with lock:
                outcome = self._decide(message, user_key)
                if outcome.status is OutcomeStatus.ACTIONED:
                    await self._apply(message, outcome)
        except Exception as e:
            logger.error("Anti-Spam Handler Failed", [
                ("User ID", str(message.author_id)),
                ("Channel", str(message.channel_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])
            outcome = HandleOutcome(
                status=OutcomeStatus.FAILED,
                user_key=user_key,
                error=f"{type(e).__name__}: {e}",
            )

        self._notify(outcome)
        return outcome

    # =========================================================================
    # Decision (synchronous)
    # =========================================================================

    def _decide(self, message: IncomingMessage, user_key: Hashable) -> HandleOutcome:
        """Record, gate, classify, resolve, and reserve the cooldown."""
        now = message.timestamp
        window = self.recorder.record(
            user_key,
            message.channel_id,
            message.content,
            now,
            message.message_id,
        )

        # Arrived already older than the retention horizon, it was pruned on append
        if not any(
            e.message_id == message.message_id and e.timestamp == now
            for e in window
        ):
            return HandleOutcome(status=OutcomeStatus.STALE, user_key=user_key)

        if not self.cooldowns.allow(user_key, now):
            return HandleOutcome(status=OutcomeStatus.SUPPRESSED, user_key=user_key)

        classification = classify(window, now, message.channel_id, self.settings)
        if classification is None:
            return HandleOutcome(status=OutcomeStatus.NO_MATCH, user_key=user_key)

        directive = resolve(classification)
        self.cooldowns.record(user_key, now, classification.kind)

        return HandleOutcome(
            status=OutcomeStatus.ACTIONED,
            user_key=user_key,
            classification=classification,
            directive=directive,
        )

    # =========================================================================
    # Application (best-effort)
    # =========================================================================

    async def _apply(self, message: IncomingMessage, outcome: HandleOutcome) -> None:
        """Run the sink calls for a resolved directive, in order."""
        classification = outcome.classification
        directive = outcome.directive
        failures = outcome.failures
        guild_id = message.guild_id
        reason = mod_reason(directive)

        if directive.delete_message_ids:
            await self._step(
                failures,
                "delete_messages",
                self.moderation.delete_messages(
                    guild_id,
                    directive.delete_channel_id,
                    directive.delete_message_ids,
                ),
            )

        applied = False
        if directive.action is ModAction.MUTE:
            applied = await self._step(
                failures,
                "apply_timed_mute",
                self.moderation.apply_timed_mute(
                    guild_id,
                    message.author_id,
                    directive.mute_minutes,
                    reason,
                ),
            )
        elif directive.action is ModAction.BAN:
            applied = await self._step(
                failures,
                "ban_user",
                self.moderation.ban_user(guild_id, message.author_id, reason),
            )

        notice = build_notice(message.author_id, classification, directive, self.settings)
        for channel_id in classification.channel_ids:
            await self._step(
                failures,
                "post_ephemeral",
                self.notifications.post_ephemeral(
                    guild_id,
                    channel_id,
                    notice,
                    self.settings.notice_ttl_seconds,
                ),
            )

        await self._step(
            failures,
            "post_persistent_record",
            self.notifications.post_persistent_record(
                guild_id,
                build_record(message, classification, directive, applied),
            ),
        )

        logger.tree("SPAM DETECTED", [
            ("User", message.author_name or str(message.author_id)),
            ("User ID", str(message.author_id)),
            ("Type", SPAM_DISPLAY_NAMES.get(classification.kind.value, classification.kind.value)),
            ("Link", "Yes" if classification.any_link else "No"),
            ("Messages", str(len(classification.events))),
            ("Channels", ", ".join(str(c) for c in classification.channel_ids)),
            ("Action", describe_action(directive, applied)),
            ("Failures", ", ".join(f.operation for f in failures) if failures else "None"),
        ], emoji="🛡️")

    async def _step(self, failures: List[SinkFailure], operation: str, coro) -> bool:
        """Await one sink call; record a failure when it returns False or raises."""
        result, error = await run_captured(operation, coro, default=False)
        if error is not None:
            failures.append(SinkFailure(operation, f"{type(error).__name__}: {error}"))
            return False
        if not result:
            failures.append(SinkFailure(operation, "sink reported failure"))
            logger.warning("Sink Reported Failure", [("Operation", operation)])
            return False
        return True

    def _notify(self, outcome: HandleOutcome) -> None:
        if self.observer is None:
            return
        try:
            self.observer(outcome)
        except Exception as e:
            logger.warning("Outcome Observer Failed", [
                ("Status", outcome.status.value),
                ("Error", str(e)[:100]),
            ])

    # =========================================================================
    # Background Cleanup
    # =========================================================================

    def start(self) -> None:
        """Start the periodic cleanup of idle windows and expired cooldowns."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = create_safe_task(self._cleanup_loop(), "AntiSpam Cleanup Loop")

    async def stop(self) -> None:
        if self._cleanup_task is None:
            return
        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            try:
                self.cleanup()
            except Exception as e:
                logger.warning("Anti-Spam Cleanup Error", [
                    ("Error", str(e)[:50]),
                ])

    def cleanup(self, now: Optional[int] = None) -> Dict[str, int]:
        """
        Evict idle windows, expired cooldowns, and unused locks.

        Returns:
            Counts of removed entries by kind.
        """
        now = self._clock() if now is None else now
        windows = self.recorder.evict_idle(now)
        cooldowns = self.cooldowns.evict_expired(now)

        unused = [
            key for key, lock in self._user_locks.items()
            if not lock.locked() and self.recorder.get(key) is None
        ]
        for key in unused:
            del self._user_locks[key]

        if windows or cooldowns:
            logger.debug("Anti-Spam Cache Eviction", [
                ("Windows", str(windows)),
                ("Cooldowns", str(cooldowns)),
                ("Locks", str(len(unused))),
            ])

        return {"windows": windows, "cooldowns": cooldowns, "locks": len(unused)}
