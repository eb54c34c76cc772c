"""
Tests for src/services/mute_scheduler.py
"""

import asyncio

import pytest

from src.services.mute_scheduler import MuteScheduler


class Recorder:
    def __init__(self):
        self.calls = []

    def callback(self, tag):
        async def _unmute():
            self.calls.append(tag)
        return _unmute


class TestMuteScheduler:
    """Tests for cancellable unmute timers."""

    @pytest.mark.asyncio
    async def test_fires_after_delay(self):
        scheduler = MuteScheduler()
        rec = Recorder()

        task = scheduler.schedule(1, 2, 0.01, rec.callback("first"))
        assert scheduler.is_scheduled(1, 2)

        await task
        assert rec.calls == ["first"]
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_new_mute_replaces_pending_timer(self):
        scheduler = MuteScheduler()
        rec = Recorder()

        old = scheduler.schedule(1, 2, 10, rec.callback("old"))
        new = scheduler.schedule(1, 2, 0.01, rec.callback("new"))
        await new
        await asyncio.sleep(0)

        assert old.done()
        assert rec.calls == ["new"]
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_cancel(self):
        scheduler = MuteScheduler()
        rec = Recorder()

        task = scheduler.schedule(1, 2, 10, rec.callback("x"))
        assert scheduler.cancel(1, 2) is True
        assert scheduler.cancel(1, 2) is False

        await asyncio.gather(task, return_exceptions=True)
        assert rec.calls == []

    @pytest.mark.asyncio
    async def test_timers_are_per_user(self):
        scheduler = MuteScheduler()
        rec = Recorder()

        scheduler.schedule(1, 2, 10, rec.callback("a"))
        scheduler.schedule(1, 3, 10, rec.callback("b"))
        assert scheduler.pending == 2

        await scheduler.stop()
        assert scheduler.pending == 0
        assert rec.calls == []

    @pytest.mark.asyncio
    async def test_failing_unmute_is_contained(self):
        scheduler = MuteScheduler()

        async def broken():
            raise RuntimeError("role gone")

        await scheduler.schedule(1, 2, 0, broken)
        assert scheduler.pending == 0
