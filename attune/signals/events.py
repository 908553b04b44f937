import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    SCROLL = "scroll"
    CLICK = "click"
    POINTER_ENTER = "pointerenter"
    POINTER_LEAVE = "pointerleave"
    RESIZE = "resize"
    MOUSE_MOVE = "mousemove"
    KEY_DOWN = "keydown"
    TOUCH_START = "touchstart"


@dataclass
class InputEvent:
    event_type: str
    timestamp: float                      # ms on the engine clock
    scroll_y: float | None = None         # scroll
    target: tuple[str, ...] = ()          # selector tokens, innermost first
    data: dict = field(default_factory=dict)

    def within(self, selectors) -> bool:
        """True if any element on the target path matches one of selectors."""
        return any(token in selectors for token in self.target)


Handler = Callable[[InputEvent], None]


class EventBus:
    """Publish/subscribe source of raw input events, stamped with the engine clock."""

    def __init__(self, clock: Callable[[], float]):
        self._clock = clock
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._catch_all: list[Handler] = []

    def subscribe(self, fn: Handler, *event_types: str) -> None:
        """Subscribe fn to the given event types, or to every event when none are given."""
        if not event_types:
            self._catch_all.append(fn)
            return
        for event_type in event_types:
            self._handlers[EventType(event_type).value].append(fn)

    def emit(self, event_type: str, *, scroll_y: float | None = None,
             target=(), data: dict | None = None, timestamp: float | None = None) -> InputEvent:
        """Build and dispatch an event. Without timestamp, the engine clock stamps it."""
        event = InputEvent(
            event_type=EventType(event_type).value,
            timestamp=self._clock() if timestamp is None else timestamp,
            scroll_y=scroll_y,
            target=tuple(target),
            data=dict(data or {}),
        )
        self.dispatch(event)
        return event

    def dispatch(self, event: InputEvent) -> None:
        handlers = self._handlers.get(event.event_type, [])
        if not handlers and not self._catch_all:
            logger.debug("No subscribers for %s", event.event_type)
        for fn in [*handlers, *self._catch_all]:
            try:
                fn(event)
            except Exception as e:
                logger.error("Subscriber failed on %s event: %s", event.event_type, e)


class ClientClock:
    """Maps page timestamps onto the engine clock.

    The offset is anchored on the first stamped event and tightened whenever an
    event would otherwise land in the future, so it tracks the lowest observed
    delivery latency. Between re-anchors, intervals between page timestamps
    are preserved.
    """

    def __init__(self, clock: Callable[[], float]):
        self._clock = clock
        self._offset: float | None = None

    def to_engine(self, client_ts: float) -> float:
        now = self._clock()
        if self._offset is None or client_ts + self._offset > now:
            self._offset = now - client_ts
        return client_ts + self._offset
