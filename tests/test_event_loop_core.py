from __future__ import annotations

from dataclasses import dataclass

import pytest

from attention_screen.event_loop import EventLoop


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def test_one_shot_fires_once_when_due() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    fired: list[float] = []

    loop.call_later(500, lambda: fired.append(loop.now()))

    clock.advance(499)
    assert loop.run_pending() == 0
    clock.advance(1)
    assert loop.run_pending() == 1
    clock.advance(1000)
    assert loop.run_pending() == 0
    assert fired == [500.0]


def test_same_time_callbacks_fire_in_scheduling_order() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    order: list[str] = []

    loop.call_later(100, lambda: order.append("a"))
    loop.call_later(100, lambda: order.append("b"))
    loop.call_later(50, lambda: order.append("early"))
    loop.call_later(100, lambda: order.append("c"))

    clock.advance(100)
    loop.run_pending()
    assert order == ["early", "a", "b", "c"]


def test_periodic_timer_uses_nominal_fire_times_without_drift() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    ticks: list[float] = []

    loop.call_every(100, lambda: ticks.append(loop.now()))

    # A late frame still fires each missed tick at its own nominal time.
    clock.advance(350)
    assert loop.run_pending() == 3
    assert ticks == [100.0, 200.0, 300.0]

    clock.advance(50)
    loop.run_pending()
    assert ticks[-1] == 400.0


def test_first_delay_zero_fires_immediately() -> None:
    clock = FakeClock(t=1000.0)
    loop = EventLoop(clock)
    ticks: list[float] = []

    loop.call_every(250, lambda: ticks.append(loop.now()), first_delay_ms=0)
    loop.run_pending()
    assert ticks == [1000.0]


def test_cancel_stops_periodic_and_one_shot_timers() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    hits: list[str] = []

    periodic = loop.call_every(100, lambda: hits.append("tick"))
    one_shot = loop.call_later(150, lambda: hits.append("once"))

    clock.advance(100)
    loop.run_pending()
    periodic.cancel()
    one_shot.cancel()

    clock.advance(500)
    loop.run_pending()
    assert hits == ["tick"]
    assert periodic.cancelled
    assert loop.pending() == 0


def test_callback_can_cancel_its_own_periodic_timer() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    count = 0

    def tick() -> None:
        nonlocal count
        count += 1
        if count == 3:
            handle.cancel()

    handle = loop.call_every(10, tick)
    clock.advance(1000)
    loop.run_pending()
    assert count == 3
    assert not handle.active


def test_callbacks_scheduled_during_dispatch_that_are_due_fire_in_same_pass() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    seen: list[tuple[str, float]] = []

    def first() -> None:
        seen.append(("first", loop.now()))
        loop.call_later(20, lambda: seen.append(("chained", loop.now())))

    loop.call_later(10, first)
    clock.advance(100)
    assert loop.run_pending() == 2
    assert seen == [("first", 10.0), ("chained", 30.0)]


def test_cancel_all_discards_everything() -> None:
    clock = FakeClock()
    loop = EventLoop(clock)
    hits: list[int] = []
    loop.call_later(10, lambda: hits.append(1))
    loop.call_every(10, lambda: hits.append(2))

    loop.cancel_all()
    clock.advance(100)
    assert loop.run_pending() == 0
    assert hits == []


def test_now_outside_dispatch_is_clock_time() -> None:
    clock = FakeClock(t=42.0)
    loop = EventLoop(clock)
    assert loop.now() == 42.0


def test_non_positive_interval_rejected() -> None:
    loop = EventLoop(FakeClock())
    with pytest.raises(ValueError):
        loop.call_every(0, lambda: None)
