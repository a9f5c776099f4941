from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable

from .clock import Clock


class TimerHandle:
    """Handle for a one-shot or periodic timer owned by an EventLoop."""

    __slots__ = ("_callback", "_interval_ms", "_fire_at_ms", "_cancelled", "_done")

    def __init__(self, callback: Callable[[], None], fire_at_ms: float, interval_ms: float | None) -> None:
        self._callback = callback
        self._fire_at_ms = float(fire_at_ms)
        self._interval_ms = interval_ms
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    @property
    def fire_at_ms(self) -> float:
        return self._fire_at_ms

    @property
    def periodic(self) -> bool:
        return self._interval_ms is not None

    def cancel(self) -> None:
        self._cancelled = True


class EventLoop:
    """Cooperative scheduler on a logical millisecond timeline.

    Nothing runs on its own: the owner calls run_pending() (once per frame,
    or after advancing a fake clock) and every due callback fires in
    (fire time, scheduling order). Callbacks scheduled while dispatching that
    are already due fire in the same call. During a callback, now() reports
    the nominal fire time so that timestamps do not depend on frame jitter.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._dispatch_time_ms: float | None = None

    def now(self) -> float:
        if self._dispatch_time_ms is not None:
            return self._dispatch_time_ms
        return float(self._clock.now())

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        fire_at = self.now() + max(0.0, float(delay_ms))
        handle = TimerHandle(callback, fire_at, None)
        self._push(handle)
        return handle

    def call_every(
        self,
        interval_ms: float,
        callback: Callable[[], None],
        *,
        first_delay_ms: float | None = None,
    ) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        first = float(interval_ms) if first_delay_ms is None else max(0.0, float(first_delay_ms))
        handle = TimerHandle(callback, self.now() + first, float(interval_ms))
        self._push(handle)
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if h.active)

    def cancel_all(self) -> None:
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    def run_pending(self) -> int:
        """Fire every timer due at the clock's current time. Returns the count fired."""

        horizon = float(self._clock.now())
        fired = 0
        while self._queue and self._queue[0][0] <= horizon:
            fire_at, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue

            self._dispatch_time_ms = fire_at
            try:
                handle._callback()
            finally:
                self._dispatch_time_ms = None
            fired += 1

            if handle.periodic and not handle.cancelled:
                assert handle._interval_ms is not None
                handle._fire_at_ms = fire_at + handle._interval_ms
                self._push(handle)
            else:
                handle._done = True
        return fired

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (handle.fire_at_ms, next(self._seq), handle))
