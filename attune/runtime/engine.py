"""Profiler engine: owns the session state and wires collectors, tracker and classifier together."""

import logging
from dataclasses import dataclass, field

from ..core.classifier import Profile, ProfileClassifier
from ..core.mode_tracker import Mode, ModeTracker, ModeListener
from ..core.notifier import ProfileNotifier, ProfileListener
from ..core.state import HOVER_WINDOW, SCROLL_WINDOW, ProfileSnapshot, ProfileState
from ..signals.collector import DEFAULT_INTERACTIVE, DEFAULT_TRACKABLE, SignalCollector
from ..signals.dwell import DwellAccountant, SectionLayout, Viewport
from ..signals.events import EventBus
from .scheduler import Scheduler, TaskHandle

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS = ("hero", "projects", "experience", "status", "security", "contact")


@dataclass
class EngineConfig:
    classify_interval_ms: float = 3000.0
    dwell_debounce_ms: float = 100.0
    scroll_window: int = SCROLL_WINDOW
    hover_window: int = HOVER_WINDOW
    max_scroll_gap_ms: float = 1000.0
    primary_section: str = "projects"
    idle_timeout_ms: float = 3000.0
    frame_ms: float = 16.0
    sections: list[str] = field(default_factory=lambda: list(DEFAULT_SECTIONS))
    interactive: list[str] = field(default_factory=lambda: list(DEFAULT_INTERACTIVE))
    trackable: list[str] = field(default_factory=lambda: list(DEFAULT_TRACKABLE))
    panels: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, config: dict) -> "EngineConfig":
        """Build from the loaded config.yaml mapping; missing keys keep their defaults."""
        profiler = config.get("profiler", {}) or {}
        mode = config.get("mode", {}) or {}
        defaults = cls()
        return cls(
            classify_interval_ms=float(profiler.get("classify_interval_ms", defaults.classify_interval_ms)),
            dwell_debounce_ms=float(profiler.get("dwell_debounce_ms", defaults.dwell_debounce_ms)),
            scroll_window=int(profiler.get("scroll_window", defaults.scroll_window)),
            hover_window=int(profiler.get("hover_window", defaults.hover_window)),
            max_scroll_gap_ms=float(profiler.get("max_scroll_gap_ms", defaults.max_scroll_gap_ms)),
            primary_section=str(profiler.get("primary_section", defaults.primary_section)),
            idle_timeout_ms=float(mode.get("idle_timeout_ms", defaults.idle_timeout_ms)),
            frame_ms=float(mode.get("frame_ms", defaults.frame_ms)),
            sections=list(config.get("sections") or defaults.sections),
            interactive=list(config.get("interactive") or defaults.interactive),
            trackable=list(config.get("trackable") or defaults.trackable),
            panels=list(config.get("panels") or defaults.panels),
        )


class ProfilerEngine:
    """One session's profiling engine.

    Created once at session start. start() subscribes to the event source and
    begins the periodic classification; nothing is torn down afterwards.
    """

    def __init__(self, scheduler: Scheduler, config: EngineConfig | None = None,
                 source: EventBus | None = None, viewport: Viewport | None = None):
        self.config = config or EngineConfig()
        self._scheduler = scheduler
        self.source = source or EventBus(clock=scheduler.now)
        self.viewport = viewport or SectionLayout()

        self.state = ProfileState(
            session_start=scheduler.now(),
            scroll_capacity=self.config.scroll_window,
            hover_capacity=self.config.hover_window,
        )
        self._attributes: dict[str, str] = {}
        self.notifier = ProfileNotifier(self.state, self._attributes)
        self.mode_tracker = ModeTracker(scheduler, self.config.idle_timeout_ms, self._attributes)
        self.dwell = DwellAccountant(self.state, self.viewport, self.config.sections)
        self.collector = SignalCollector(
            self.state, scheduler, self.dwell,
            interactive=self.config.interactive,
            trackable=self.config.trackable,
            dwell_debounce_ms=self.config.dwell_debounce_ms,
            max_scroll_gap_ms=self.config.max_scroll_gap_ms,
        )
        self.classifier = ProfileClassifier()
        self._ticker: TaskHandle | None = None

    @property
    def started(self) -> bool:
        return self._ticker is not None

    def start(self) -> None:
        if self.started:
            return
        self.viewport.attach(self.source)
        self.collector.attach(self.source)
        self.mode_tracker.attach(self.source)
        self._ticker = self._scheduler.call_every(self.config.classify_interval_ms, self.tick)
        logger.info(
            "Profiler started: %d sections, classify every %.0fms",
            len(self.config.sections), self.config.classify_interval_ms,
        )

    def tick(self) -> Profile:
        """Run one classification cycle and publish the result if it changed."""
        signals = self.collector.aggregate(self._scheduler.now(), self.config.primary_section)
        profile = self.classifier.classify(signals)
        self.state.computed_profile = profile
        self.notifier.publish(profile)
        return profile

    # ── Exposed to collaborators ─────────────────────────────────────────

    def get_state(self) -> ProfileSnapshot:
        return self.state.snapshot(self._scheduler.now())

    def get_profile(self) -> Profile:
        return self.notifier.applied

    @property
    def mode(self) -> Mode:
        return self.mode_tracker.mode

    def attributes(self) -> dict[str, str]:
        """Published values, keyed the way the page exposes them (profile, mode)."""
        return dict(self._attributes)

    def on_profile_change(self, listener: ProfileListener) -> None:
        self.notifier.subscribe(listener)

    def on_mode_change(self, listener: ModeListener) -> None:
        self.mode_tracker.subscribe(listener)

    def boost(self, amount: int) -> None:
        """Count an external action as deliberate engagement."""
        if amount <= 0:
            logger.warning("Ignoring non-positive boost: %s", amount)
            return
        self.state.add_interactions(amount)
