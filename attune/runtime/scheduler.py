"""Scheduled-task abstraction: one-shot, periodic and per-frame callbacks with cancellable handles."""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TaskHandle(ABC):
    """A scheduled callback that can be cancelled before it runs."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """Clock plus timer facility. All times are milliseconds."""

    def __init__(self, frame_ms: float = 16.0):
        self.frame_ms = frame_ms

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""
        ...

    @abstractmethod
    def call_later(self, delay_ms: float, fn: Callback) -> TaskHandle:
        """Run fn once after delay_ms."""
        ...

    def call_every(self, period_ms: float, fn: Callback) -> TaskHandle:
        """Run fn every period_ms until the returned handle is cancelled."""
        return _Repeating(self, period_ms, fn)

    def next_frame(self, fn: Callback) -> TaskHandle:
        """Run fn on the next rendering frame."""
        return self.call_later(self.frame_ms, fn)


class _Repeating(TaskHandle):
    def __init__(self, scheduler: Scheduler, period_ms: float, fn: Callback):
        self._scheduler = scheduler
        self._period_ms = period_ms
        self._fn = fn
        self._cancelled = False
        self._current = scheduler.call_later(period_ms, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        # Re-arm first so a raising callback does not stop the series
        self._current = self._scheduler.call_later(self._period_ms, self._run)
        self._fn()

    def cancel(self) -> None:
        self._cancelled = True
        self._current.cancel()

    def cancelled(self) -> bool:
        return self._cancelled


class TaskSlot:
    """Holds at most one pending task; arming it again replaces the pending one."""

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._handle: TaskHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()

    def arm(self, delay_ms: float, fn: Callback) -> None:
        self.cancel()

        def fire() -> None:
            self._handle = None
            fn()

        self._handle = self._scheduler.call_later(delay_ms, fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


# ── Virtual clock ────────────────────────────────────────────────────────────

class _ManualTask(TaskHandle):
    def __init__(self, due: float, fn: Callback):
        self.due = due
        self.fn = fn
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by advance(); used for tests and replays."""

    def __init__(self, start_ms: float = 0.0, frame_ms: float = 16.0):
        super().__init__(frame_ms=frame_ms)
        self._now = start_ms
        self._queue: list[tuple[float, int, _ManualTask]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, fn: Callback) -> TaskHandle:
        task = _ManualTask(self._now + max(0.0, delay_ms), fn)
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task

    def advance(self, ms: float) -> None:
        """Move the clock forward, running every task that falls due on the way."""
        self.advance_to(self._now + ms)

    def advance_to(self, target_ms: float) -> None:
        while self._queue and self._queue[0][0] <= target_ms:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled():
                continue
            self._now = max(self._now, due)
            task.fn()
        self._now = max(self._now, target_ms)

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled())


# ── Event loop ───────────────────────────────────────────────────────────────

class _LoopTask(TaskHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Scheduler on top of an asyncio event loop (the running one by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, frame_ms: float = 16.0):
        super().__init__(frame_ms=frame_ms)
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, fn: Callback) -> TaskHandle:
        return _LoopTask(self._loop.call_later(max(0.0, delay_ms) / 1000.0, self._guarded(fn)))

    @staticmethod
    def _guarded(fn: Callback) -> Callback:
        def run() -> None:
            try:
                fn()
            except Exception:
                logger.exception("Scheduled task failed")
        return run
