"""Session-scoped profiling state and its immutable snapshot."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .classifier import Profile
from .windows import SlidingWindow

SCROLL_WINDOW = 50
HOVER_WINDOW = 30
SCROLL_MIN_SAMPLES = 3
HOVER_MIN_SAMPLES = 2


@dataclass(frozen=True)
class ProfileSnapshot:
    """Independent, read-only copy of a ProfileState at one instant."""
    scroll_speeds: tuple[float, ...]
    hover_durations: tuple[float, ...]
    click_count: int
    interaction_count: int
    section_dwell_ms: Mapping[str, float]
    current_section: str | None
    section_entry_ts: float | None
    session_start: float
    time_on_page_s: float
    computed_profile: Profile
    applied_profile: Profile

    def to_dict(self) -> dict:
        return {
            "scroll_speeds": list(self.scroll_speeds),
            "hover_durations": list(self.hover_durations),
            "click_count": self.click_count,
            "interaction_count": self.interaction_count,
            "section_dwell_ms": dict(self.section_dwell_ms),
            "current_section": self.current_section,
            "section_entry_ts": self.section_entry_ts,
            "session_start": self.session_start,
            "time_on_page_s": self.time_on_page_s,
            "computed_profile": self.computed_profile.value,
            "applied_profile": self.applied_profile.value,
        }


@dataclass
class ProfileState:
    """Mutable profiling state owned by one engine for the lifetime of a session."""
    session_start: float
    scroll_capacity: int = SCROLL_WINDOW
    hover_capacity: int = HOVER_WINDOW
    click_count: int = 0
    interaction_count: int = 0
    section_dwell_ms: dict[str, float] = field(default_factory=dict)
    current_section: str | None = None
    section_entry_ts: float | None = None
    computed_profile: Profile = Profile.NEUTRAL
    applied_profile: Profile = Profile.NEUTRAL
    last_scroll_y: float = 0.0
    last_scroll_ts: float = 0.0

    def __post_init__(self):
        self.scroll_speeds = SlidingWindow(self.scroll_capacity, SCROLL_MIN_SAMPLES)
        self.hover_durations = SlidingWindow(self.hover_capacity, HOVER_MIN_SAMPLES)
        self.last_scroll_ts = self.session_start

    def push_scroll_speed(self, value: float) -> None:
        self.scroll_speeds.push(value)

    def push_hover_duration(self, value: float) -> None:
        self.hover_durations.push(value)

    def add_interactions(self, amount: int) -> None:
        if amount > 0:
            self.interaction_count += amount

    def add_dwell(self, section: str, elapsed_ms: float) -> None:
        if elapsed_ms > 0:
            self.section_dwell_ms[section] = self.section_dwell_ms.get(section, 0.0) + elapsed_ms

    def elapsed_s(self, now: float) -> float:
        return (now - self.session_start) / 1000.0

    def snapshot(self, now: float) -> ProfileSnapshot:
        return ProfileSnapshot(
            scroll_speeds=self.scroll_speeds.values(),
            hover_durations=self.hover_durations.values(),
            click_count=self.click_count,
            interaction_count=self.interaction_count,
            section_dwell_ms=MappingProxyType(dict(self.section_dwell_ms)),
            current_section=self.current_section,
            section_entry_ts=self.section_entry_ts,
            session_start=self.session_start,
            time_on_page_s=self.elapsed_s(now),
            computed_profile=self.computed_profile,
            applied_profile=self.applied_profile,
        )
