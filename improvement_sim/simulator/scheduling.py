"""Cancellable one-shot schedulers used to pace simulation ticks.

`TimerScheduler` runs callbacks on `threading.Timer` threads in wall-clock time.
`ManualScheduler` keeps a virtual clock that only moves when told to, which
makes stepping through a run deterministic.
"""
from __future__ import annotations

import heapq
import itertools
import threading
from typing import Callable, List, Optional, Protocol, Tuple

__all__ = [
    "Scheduler",
    "TimerScheduler",
    "ManualScheduler",
    "ScheduledCall",
]


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., None], *args) -> object: ...

    def cancel(self, handle: object) -> None: ...


class TimerScheduler:
    """Wall-clock scheduler backed by daemon timer threads."""

    def call_later(self, delay: float, callback: Callable[..., None], *args) -> threading.Timer:
        timer = threading.Timer(max(delay, 0.0), callback, args=args)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: object) -> None:
        if isinstance(handle, threading.Timer):
            handle.cancel()


class ScheduledCall:
    """Handle returned by `ManualScheduler.call_later`."""

    def __init__(self, due: float, callback: Callable[..., None], args: tuple):
        self.due = due
        self.callback = callback
        self.args = args
        self.cancelled = False

    def fire(self) -> None:
        """Invoke the callback, whether or not the call was cancelled."""
        self.callback(*self.args)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"ScheduledCall(due={self.due:.3f}, {state})"


class ManualScheduler:
    """Virtual-time scheduler; nothing runs until `advance` or `run_until_idle`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., None], *args) -> ScheduledCall:
        call = ScheduledCall(self.now + max(delay, 0.0), callback, args)
        heapq.heappush(self._queue, (call.due, next(self._seq), call))
        return call

    def cancel(self, handle: object) -> None:
        if isinstance(handle, ScheduledCall):
            handle.cancelled = True

    @property
    def pending(self) -> List[ScheduledCall]:
        return [call for _, _, call in sorted(self._queue) if not call.cancelled]

    def _pop_due(self, until: float) -> Optional[ScheduledCall]:
        while self._queue and self._queue[0][0] <= until:
            _, _, call = heapq.heappop(self._queue)
            if not call.cancelled:
                return call
        return None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every call that falls due.  Returns the count run."""
        target = self.now + seconds
        ran = 0
        while True:
            call = self._pop_due(target)
            if call is None:
                break
            self.now = max(self.now, call.due)
            call.fire()
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, max_calls: int = 100_000) -> int:
        """Run queued calls in due order, including ones they schedule."""
        ran = 0
        while ran < max_calls:
            call = self._pop_due(float("inf"))
            if call is None:
                break
            self.now = max(self.now, call.due)
            call.fire()
            ran += 1
        return ran
