"""
Tests for src/services/antispam/recorder.py

Covers appending, pruning, ordering, capping, and idle eviction.
"""

from src.services.antispam import DetectionSettings, EventRecorder

KEY = (1, 42)


class TestRecord:
    """Tests for EventRecorder.record."""

    def test_first_event_creates_window(self):
        recorder = EventRecorder()
        events = recorder.record(KEY, 10, "  hello  ", 1000, 501)

        assert len(recorder) == 1
        assert len(events) == 1
        assert events[0].content == "hello"
        assert events[0].message_id == 501
        assert events[0].has_link is False
        assert recorder.get(KEY).latest_timestamp == 1000

    def test_link_tagged_on_record(self):
        recorder = EventRecorder()
        events = recorder.record(KEY, 10, "visit spam.xyz", 1000, 1)
        assert events[0].has_link is True

    def test_prunes_beyond_retention(self):
        """Retention is the longest window (3500ms) plus 1000ms slack."""
        recorder = EventRecorder()
        recorder.record(KEY, 10, "old", 0, 1)
        recorder.record(KEY, 10, "edge", 500, 2)

        events = recorder.record(KEY, 10, "new", 5000, 3)
        assert [e.content for e in events] == ["edge", "new"]

    def test_out_of_order_kept_sorted(self):
        recorder = EventRecorder()
        recorder.record(KEY, 10, "a", 1000, 1)
        recorder.record(KEY, 10, "c", 3000, 3)

        events = recorder.record(KEY, 10, "b", 2000, 2)
        assert [e.timestamp for e in events] == [1000, 2000, 3000]
        assert recorder.get(KEY).latest_timestamp == 3000

    def test_late_event_behind_horizon_is_dropped(self):
        recorder = EventRecorder()
        recorder.record(KEY, 10, "now", 10_000, 1)

        events = recorder.record(KEY, 10, "late", 1_000, 2)
        assert [e.message_id for e in events] == [1]

    def test_capped_to_most_recent(self):
        recorder = EventRecorder(DetectionSettings(max_events_per_user=3))
        for i in range(5):
            events = recorder.record(KEY, 10, f"m{i}", 1000 + i, i)
        assert [e.message_id for e in events] == [2, 3, 4]

    def test_returned_list_is_a_snapshot(self):
        recorder = EventRecorder()
        events = recorder.record(KEY, 10, "a", 1000, 1)
        events.clear()
        assert len(recorder.get(KEY).events) == 1

    def test_users_are_isolated(self):
        recorder = EventRecorder()
        recorder.record((1, 1), 10, "a", 1000, 1)
        events = recorder.record((1, 2), 10, "a", 1000, 2)
        assert len(events) == 1
        assert len(recorder) == 2


class TestEvictIdle:
    """Tests for EventRecorder.evict_idle."""

    def test_removes_idle_windows(self):
        recorder = EventRecorder(DetectionSettings(idle_eviction_ms=1000))
        recorder.record((1, 1), 10, "a", 0, 1)
        recorder.record((1, 2), 10, "a", 5000, 2)

        assert recorder.evict_idle(5500) == 1
        assert recorder.get((1, 1)) is None
        assert recorder.get((1, 2)) is not None

    def test_enforces_max_tracked_users(self):
        recorder = EventRecorder(DetectionSettings(max_tracked_users=2))
        for user in range(4):
            recorder.record((1, user), 10, "a", 1000 + user, user)

        assert recorder.evict_idle(1010) == 2
        assert recorder.get((1, 0)) is None
        assert recorder.get((1, 1)) is None
        assert recorder.get((1, 3)) is not None

    def test_clear(self):
        recorder = EventRecorder()
        recorder.record(KEY, 10, "a", 0, 1)
        recorder.clear()
        assert len(recorder) == 0
