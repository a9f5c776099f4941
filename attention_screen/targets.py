from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .event_loop import EventLoop, TimerHandle
from .screening_core import CanvasBounds, ClickOutcome, ScreeningConfig, SeededRng, Target

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _LiveTarget:
    target_id: str
    x: float
    y: float
    spawn_time_ms: float
    clicked: bool = False
    reaction_time_ms: float | None = None

    def view(self) -> Target:
        return Target(
            target_id=self.target_id,
            x=self.x,
            y=self.y,
            spawn_time_ms=self.spawn_time_ms,
            clicked=self.clicked,
            reaction_time_ms=self.reaction_time_ms,
        )


@dataclass(frozen=True, slots=True)
class ClickResolution:
    outcome: ClickOutcome
    target: Target | None = None
    reaction_time_ms: float | None = None


def find_hit_target(
    x: float,
    y: float,
    targets: Iterable[Target | _LiveTarget],
    *,
    hit_radius_px: float,
) -> Target | _LiveTarget | None:
    """First unclicked target whose centre is within the hit radius (inclusive)."""

    r2 = float(hit_radius_px) * float(hit_radius_px)
    for t in targets:
        if t.clicked:
            continue
        dx, dy = x - t.x, y - t.y
        if dx * dx + dy * dy <= r2:
            return t
    return None


def resolve_click(
    x: float,
    y: float,
    timestamp_ms: float,
    targets: Iterable[Target | _LiveTarget],
    config: ScreeningConfig,
) -> ClickResolution:
    """Classify a click against the active targets without mutating them."""

    hit = find_hit_target(x, y, targets, hit_radius_px=config.hit_radius_px)
    if hit is None:
        return ClickResolution(outcome=ClickOutcome.FALSE_CLICK)

    view = hit.view() if isinstance(hit, _LiveTarget) else hit
    reaction_time_ms = float(timestamp_ms) - float(hit.spawn_time_ms)
    if reaction_time_ms < config.min_reaction_time_ms:
        outcome = ClickOutcome.PREMATURE
    else:
        outcome = ClickOutcome.HIT
    return ClickResolution(outcome=outcome, target=view, reaction_time_ms=reaction_time_ms)


class TargetScheduler:
    """Spawns targets at a fixed cadence and expires the ones nobody clicks.

    All timing runs through the shared EventLoop; the active set and the
    full spawn history are owned here and only mutated from loop callbacks
    or from mark_clicked().
    """

    def __init__(
        self,
        *,
        loop: EventLoop,
        config: ScreeningConfig,
        rng: SeededRng,
        on_miss: Callable[[Target], None] | None = None,
    ) -> None:
        self._loop = loop
        self._cfg = config
        self._rng = rng
        self._on_miss = on_miss

        self._bounds: CanvasBounds | None = None
        self._active: list[_LiveTarget] = []
        self._spawned: list[_LiveTarget] = []
        self._next_id = 1

        self._running = False
        self._started_at_ms: float | None = None
        self._spawn_timer: TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._running

    def set_bounds(self, bounds: CanvasBounds | None) -> None:
        self._bounds = bounds

    def start(self, bounds: CanvasBounds | None) -> None:
        if self._running:
            return
        self._bounds = bounds
        if bounds is None or not bounds.usable:
            logger.warning(
                "Canvas bounds unusable (%s); spawning at default position (%.0f, %.0f)",
                bounds,
                self._cfg.default_spawn_x,
                self._cfg.default_spawn_y,
            )
        self._running = True
        self._started_at_ms = self._loop.now()
        self._spawn()
        self._spawn_timer = self._loop.call_every(self._cfg.spawn_interval_ms, self._spawn)

    def stop(self) -> None:
        self._running = False
        if self._spawn_timer is not None:
            self._spawn_timer.cancel()
            self._spawn_timer = None

    def active_targets(self) -> tuple[Target, ...]:
        return tuple(t.view() for t in self._active)

    def all_targets(self) -> tuple[Target, ...]:
        return tuple(t.view() for t in self._spawned)

    def live_active(self) -> tuple[_LiveTarget, ...]:
        return tuple(self._active)

    def mark_clicked(self, target_id: str, reaction_time_ms: float) -> bool:
        """Mark an active target as clicked and schedule its removal after the linger delay."""

        live = self._find_active(target_id)
        if live is None or live.clicked:
            return False
        live.clicked = True
        live.reaction_time_ms = float(reaction_time_ms)
        self._loop.call_later(self._cfg.hit_linger_ms, lambda: self._remove(target_id))
        return True

    def spawn_position(self) -> tuple[float, float]:
        b = self._bounds
        if b is None or not b.usable:
            return (self._cfg.default_spawn_x, self._cfg.default_spawn_y)
        pad = self._cfg.spawn_padding_px
        return (self._axis_position(b.width, pad), self._axis_position(b.height, pad))

    def _axis_position(self, extent: float, pad: float) -> float:
        span = float(extent) - pad * 2.0
        if span <= 0.0:
            return float(extent) / 2.0
        return self._rng.random() * span + pad

    def _spawn(self) -> None:
        if not self._running:
            return
        assert self._started_at_ms is not None
        now = self._loop.now()
        if now - self._started_at_ms >= self._cfg.session_duration_ms:
            return

        x, y = self.spawn_position()
        target = _LiveTarget(
            target_id=f"target-{self._next_id}",
            x=float(x),
            y=float(y),
            spawn_time_ms=now,
        )
        self._next_id += 1
        self._active.append(target)
        self._spawned.append(target)
        logger.debug("Spawned %s at (%.1f, %.1f) t=%.0f", target.target_id, x, y, now)

        target_id = target.target_id
        self._loop.call_later(self._cfg.target_lifetime_ms, lambda: self._expire(target_id))

    def _expire(self, target_id: str) -> None:
        if not self._running:
            # Session already stopped; the record is frozen.
            return
        live = self._find_active(target_id)
        if live is None:
            return
        self._active.remove(live)
        if live.clicked:
            return
        logger.debug("Target %s expired unclicked", target_id)
        if self._on_miss is not None:
            self._on_miss(live.view())

    def _remove(self, target_id: str) -> None:
        if not self._running:
            return
        live = self._find_active(target_id)
        if live is not None:
            self._active.remove(live)

    def _find_active(self, target_id: str) -> _LiveTarget | None:
        for t in self._active:
            if t.target_id == target_id:
                return t
        return None
