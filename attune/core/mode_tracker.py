from enum import Enum
import logging
from typing import Callable

from ..runtime.scheduler import Scheduler, TaskSlot

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


ModeListener = Callable[[Mode], None]


class ModeTracker:
    """Idle/active debounce: activity switches to active at once, quiet for idle_timeout_ms reverts to idle."""

    ACTIVITY_EVENTS = ("mousemove", "scroll", "keydown", "touchstart", "resize")

    def __init__(self, scheduler: Scheduler, idle_timeout_ms: float = 3000.0,
                 attributes: dict[str, str] | None = None):
        self._scheduler = scheduler
        self._idle_timeout_ms = idle_timeout_ms
        self._attributes = attributes if attributes is not None else {}
        self._mode = Mode.IDLE
        self._attributes["mode"] = self._mode.value
        self._idle_deadline: float | None = None
        self._idle_timer = TaskSlot(scheduler)
        self._ticking = False
        self._listeners: list[ModeListener] = []

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def idle_deadline(self) -> float | None:
        return self._idle_deadline

    def subscribe(self, listener: ModeListener) -> None:
        self._listeners.append(listener)

    def attach(self, source) -> None:
        source.subscribe(self.handle_activity, *self.ACTIVITY_EVENTS)

    def handle_activity(self, event=None) -> None:
        if self._mode == Mode.IDLE:
            self._reset_idle_timer()
            return
        self._idle_deadline = self._scheduler.now() + self._idle_timeout_ms
        # Coalesce bursts: one timer re-arm per frame
        if not self._ticking:
            self._ticking = True
            self._scheduler.next_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._ticking = False
        remaining = self._idle_deadline - self._scheduler.now()
        self._idle_timer.arm(max(0.0, remaining), self._on_idle)

    def _reset_idle_timer(self) -> None:
        self._set_mode(Mode.ACTIVE)
        self._idle_deadline = self._scheduler.now() + self._idle_timeout_ms
        self._idle_timer.arm(self._idle_timeout_ms, self._on_idle)

    def _on_idle(self) -> None:
        # Activity arrived after this timer was armed; the pending frame re-arms it
        if self._ticking:
            return
        self._idle_deadline = None
        self._set_mode(Mode.IDLE)

    def _set_mode(self, mode: Mode) -> None:
        if mode == self._mode:
            return
        self._mode = mode
        self._attributes["mode"] = mode.value
        logger.debug("Mode -> %s", mode.value)
        for listener in list(self._listeners):
            try:
                listener(mode)
            except Exception as e:
                logger.error("Mode listener failed: %s", e)
