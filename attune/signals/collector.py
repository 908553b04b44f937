import logging

from ..core.classifier import ProfileSignals
from ..core.state import ProfileState
from ..runtime.scheduler import Scheduler, TaskSlot
from .dwell import DwellAccountant
from .events import InputEvent

logger = logging.getLogger(__name__)

DEFAULT_INTERACTIVE = (".btn-internals", ".project", ".arch-graph", "[data-interactive]")
DEFAULT_TRACKABLE = (".project", ".status-panel", ".sec-card", ".timeline__item")


class SignalCollector:
    """Turns raw input events into window samples and counters on a ProfileState.

    Best effort: events that cannot be interpreted are dropped, never raised.
    """

    INTERACTIVE_BONUS = 2  # on top of the plain +1 per click

    def __init__(self, state: ProfileState, scheduler: Scheduler, dwell: DwellAccountant,
                 interactive=DEFAULT_INTERACTIVE, trackable=DEFAULT_TRACKABLE,
                 dwell_debounce_ms: float = 100.0, max_scroll_gap_ms: float = 1000.0):
        self._state = state
        self._scheduler = scheduler
        self._dwell = dwell
        self._interactive = frozenset(interactive)
        self._trackable = frozenset(trackable)
        self._dwell_debounce_ms = dwell_debounce_ms
        self._max_scroll_gap_ms = max_scroll_gap_ms
        self._dwell_check = TaskSlot(scheduler)
        self._hover_start: float | None = None

    def attach(self, source) -> None:
        source.subscribe(self.on_scroll, "scroll")
        source.subscribe(self.on_click, "click")
        source.subscribe(self.on_pointer_enter, "pointerenter")
        source.subscribe(self.on_pointer_leave, "pointerleave")

    # ── Handlers ─────────────────────────────────────────────────────────

    def on_scroll(self, event: InputEvent) -> None:
        if event.scroll_y is None:
            logger.debug("Scroll event without position dropped")
            return

        state = self._state
        dt = event.timestamp - state.last_scroll_ts
        # Stale gaps (e.g. after the tab was hidden) say nothing about speed
        if 0 < dt < self._max_scroll_gap_ms:
            state.push_scroll_speed(abs(event.scroll_y - state.last_scroll_y) / dt)
        state.last_scroll_y = event.scroll_y
        state.last_scroll_ts = event.timestamp

        self._dwell_check.arm(self._dwell_debounce_ms, self._check_dwell)

    def on_click(self, event: InputEvent) -> None:
        self._state.click_count += 1
        self._state.add_interactions(1)
        if event.within(self._interactive):
            self._state.add_interactions(self.INTERACTIVE_BONUS)

    def on_pointer_enter(self, event: InputEvent) -> None:
        if event.within(self._trackable):
            self._hover_start = event.timestamp

    def on_pointer_leave(self, event: InputEvent) -> None:
        if self._hover_start is None or not event.within(self._trackable):
            return
        duration = event.timestamp - self._hover_start
        self._hover_start = None
        if duration < 0:
            logger.debug("Out-of-order pointer leave dropped (%.0fms)", duration)
            return
        self._state.push_hover_duration(duration)

    def _check_dwell(self) -> None:
        self._dwell.check(self._scheduler.now())

    # ── Aggregation ──────────────────────────────────────────────────────

    def aggregate(self, now: float, primary_section: str) -> ProfileSignals:
        """Build a ProfileSignals view of the collected state."""
        state = self._state
        return ProfileSignals(
            elapsed_s=state.elapsed_s(now),
            avg_scroll_speed=state.scroll_speeds.average(),
            scroll_samples=len(state.scroll_speeds),
            avg_hover_ms=state.hover_durations.average(),
            click_count=state.click_count,
            interaction_count=state.interaction_count,
            primary_dwell_ms=state.section_dwell_ms.get(primary_section, 0.0),
        )
