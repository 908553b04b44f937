"""Section dwell accounting and the viewport geometry it relies on."""

import logging
from abc import ABC, abstractmethod

from ..core.state import ProfileState
from .events import InputEvent

logger = logging.getLogger(__name__)


class Viewport(ABC):
    """Answers whether a section currently straddles the viewport's vertical midpoint."""

    @abstractmethod
    def is_centered(self, section_id: str) -> bool:
        ...

    def attach(self, source) -> None:
        """Hook for viewports that follow the event stream. Default: nothing to follow."""


class SectionLayout(Viewport):
    """Viewport model built from section offsets reported by the page plus the scroll offset."""

    def __init__(self, viewport_height: float = 0.0, sections: dict[str, tuple[float, float]] | None = None):
        self.viewport_height = viewport_height
        self.scroll_y = 0.0
        self._boxes: dict[str, tuple[float, float]] = dict(sections or {})

    def update(self, viewport_height: float | None = None,
               sections: dict[str, tuple[float, float]] | None = None) -> None:
        """Replace the layout. sections maps id -> (top, bottom) in document coordinates."""
        if viewport_height is not None:
            self.viewport_height = viewport_height
        if sections is not None:
            self._boxes = dict(sections)

    def is_centered(self, section_id: str) -> bool:
        box = self._boxes.get(section_id)
        if box is None or self.viewport_height <= 0:
            return False
        top, bottom = box
        mid = self.viewport_height / 2
        return top - self.scroll_y < mid < bottom - self.scroll_y

    def attach(self, source) -> None:
        source.subscribe(self._on_scroll, "scroll")
        source.subscribe(self._on_resize, "resize")

    def _on_scroll(self, event: InputEvent) -> None:
        if event.scroll_y is not None:
            self.scroll_y = event.scroll_y

    def _on_resize(self, event: InputEvent) -> None:
        height = event.data.get("viewport_height")
        if isinstance(height, (int, float)) and height > 0:
            self.viewport_height = float(height)


class DwellAccountant:
    """Accumulates time per section, committed when the centered section changes."""

    def __init__(self, state: ProfileState, viewport: Viewport, sections: list[str]):
        self._state = state
        self._viewport = viewport
        self._sections = list(sections)

    def check(self, now: float) -> str | None:
        """Re-evaluate the centered section. Returns the new section on a transition, else None."""
        section = next((s for s in self._sections if self._viewport.is_centered(s)), None)
        if section is None or section == self._state.current_section:
            return None

        previous = self._state.current_section
        if previous is not None and self._state.section_entry_ts is not None:
            self._state.add_dwell(previous, now - self._state.section_entry_ts)

        self._state.current_section = section
        self._state.section_entry_ts = now
        logger.debug("Section %s -> %s", previous, section)
        return section
