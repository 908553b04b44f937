"""Tests for the idle/active mode tracker."""

import pytest
from attune.core.mode_tracker import Mode, ModeTracker
from attune.runtime.scheduler import ManualScheduler
from attune.signals.events import EventBus


@pytest.fixture
def scheduler():
    return ManualScheduler(frame_ms=16)


@pytest.fixture
def tracker(scheduler):
    return ModeTracker(scheduler, idle_timeout_ms=3000)


class TestModeTracker:
    def test_starts_idle(self, tracker):
        assert tracker.mode == Mode.IDLE
        assert tracker.idle_deadline is None

    def test_activity_is_immediately_active(self, tracker):
        tracker.handle_activity()
        assert tracker.mode == Mode.ACTIVE
        assert tracker.idle_deadline == 3000

    def test_reverts_to_idle_after_quiet_period(self, scheduler, tracker):
        tracker.handle_activity()
        scheduler.advance(2999)
        assert tracker.mode == Mode.ACTIVE
        scheduler.advance(2)
        assert tracker.mode == Mode.IDLE

    def test_activity_extends_deadline(self, scheduler, tracker):
        tracker.handle_activity()
        scheduler.advance_to(2000)
        tracker.handle_activity()
        scheduler.advance_to(3001)
        assert tracker.mode == Mode.ACTIVE
        assert tracker.idle_deadline == 5000
        scheduler.advance_to(5100)
        assert tracker.mode == Mode.IDLE

    def test_burst_rearms_once_per_frame(self, scheduler, tracker):
        tracker.handle_activity()
        for _ in range(20):
            tracker.handle_activity()
        # idle timer plus a single frame callback
        assert scheduler.pending_count == 2
        scheduler.advance(16)
        assert tracker.idle_deadline == 3000
        tracker.handle_activity()
        assert scheduler.pending_count == 2

    def test_activity_just_before_deadline_stays_active(self, scheduler, tracker):
        seen = []
        tracker.subscribe(seen.append)
        tracker.handle_activity()
        scheduler.advance_to(2990)
        tracker.handle_activity()
        scheduler.advance_to(3010)
        assert tracker.mode == Mode.ACTIVE
        scheduler.advance_to(5989)
        assert seen == [Mode.ACTIVE]
        assert tracker.idle_deadline == 5990
        scheduler.advance_to(5990)
        assert seen == [Mode.ACTIVE, Mode.IDLE]

    def test_listeners_notified_on_transitions_only(self, scheduler, tracker):
        seen = []
        tracker.subscribe(seen.append)
        tracker.handle_activity()
        tracker.handle_activity()
        scheduler.advance(100)
        tracker.handle_activity()
        scheduler.advance(5000)
        assert seen == [Mode.ACTIVE, Mode.IDLE]

    def test_publishes_mode_attribute(self, scheduler):
        attributes = {}
        tracker = ModeTracker(scheduler, attributes=attributes)
        assert attributes["mode"] == "idle"
        tracker.handle_activity()
        assert attributes["mode"] == "active"

    def test_failing_listener_does_not_block_transition(self, tracker):
        def broken(mode):
            raise RuntimeError("consumer bug")
        tracker.subscribe(broken)
        tracker.handle_activity()
        assert tracker.mode == Mode.ACTIVE

    def test_attach_listens_to_activity_events(self, scheduler, tracker):
        bus = EventBus(clock=scheduler.now)
        tracker.attach(bus)
        bus.emit("click")
        assert tracker.mode == Mode.IDLE
        bus.emit("keydown")
        assert tracker.mode == Mode.ACTIVE

    def test_resize_counts_as_activity(self, scheduler, tracker):
        bus = EventBus(clock=scheduler.now)
        tracker.attach(bus)
        bus.emit("resize", data={"viewport_height": 900})
        assert tracker.mode == Mode.ACTIVE
