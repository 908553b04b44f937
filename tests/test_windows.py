"""Tests for sliding windows and the profile state snapshot."""

import pytest
from attune.core.windows import SlidingWindow
from attune.core.state import ProfileState
from attune.core.classifier import Profile


class TestSlidingWindow:
    def test_never_exceeds_capacity(self):
        window = SlidingWindow(capacity=50, min_samples=3)
        for i in range(120):
            window.push(float(i))
            assert len(window) <= 50
        assert window.values() == tuple(float(i) for i in range(70, 120))

    def test_oldest_evicted_first(self):
        window = SlidingWindow(capacity=3)
        for v in (1.0, 2.0, 3.0, 4.0):
            window.push(v)
        assert window.values() == (2.0, 3.0, 4.0)

    def test_average_is_zero_when_starved(self):
        window = SlidingWindow(capacity=50, min_samples=3)
        window.push(4.0)
        window.push(6.0)
        assert window.average() == 0.0
        window.push(8.0)
        assert window.average() == pytest.approx(6.0)

    def test_hover_minimum_is_two(self):
        window = SlidingWindow(capacity=30, min_samples=2)
        window.push(1000.0)
        assert window.average() == 0.0
        window.push(2000.0)
        assert window.average() == pytest.approx(1500.0)

    def test_empty_average(self):
        assert SlidingWindow(capacity=5).average() == 0.0


class TestProfileState:
    @pytest.fixture
    def state(self):
        return ProfileState(session_start=1000.0)

    def test_default_capacities(self, state):
        assert state.scroll_speeds.capacity == 50
        assert state.hover_durations.capacity == 30

    def test_snapshot_is_independent(self, state):
        state.push_scroll_speed(1.0)
        state.add_dwell("projects", 500.0)
        snap = state.snapshot(now=4000.0)

        state.push_scroll_speed(2.0)
        state.add_dwell("projects", 500.0)

        assert snap.scroll_speeds == (1.0,)
        assert snap.section_dwell_ms["projects"] == 500.0
        with pytest.raises(TypeError):
            snap.section_dwell_ms["projects"] = 0.0

    def test_snapshot_cannot_be_reassigned(self, state):
        snap = state.snapshot(now=1000.0)
        with pytest.raises(AttributeError):
            snap.click_count = 10

    def test_time_on_page(self, state):
        assert state.snapshot(now=6000.0).time_on_page_s == pytest.approx(5.0)

    def test_counters_never_decrease(self, state):
        state.add_interactions(3)
        state.add_interactions(-10)
        state.add_interactions(0)
        assert state.interaction_count == 3

    def test_dwell_only_grows(self, state):
        state.add_dwell("hero", 100.0)
        state.add_dwell("hero", -50.0)
        assert state.section_dwell_ms["hero"] == 100.0

    def test_to_dict(self, state):
        state.click_count = 2
        data = state.snapshot(now=1000.0).to_dict()
        assert data["click_count"] == 2
        assert data["applied_profile"] == Profile.NEUTRAL.value
        assert data["scroll_speeds"] == []
