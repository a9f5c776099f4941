from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic millisecond clock.

    Timing, scheduling and scoring depend on this interface rather than
    reading wall time, so sessions can be driven by a fake clock in tests.
    """

    def now(self) -> float:
        """Return monotonic milliseconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic() * 1000.0
