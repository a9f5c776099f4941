from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class ScreeningConfig:
    session_duration_ms: float = 60_000.0
    target_lifetime_ms: float = 1_500.0
    spawn_interval_ms: float = 1_200.0
    min_reaction_time_ms: float = 100.0
    hit_radius_px: float = 30.0
    spawn_padding_px: float = 60.0
    countdown_ticks: int = 3
    countdown_tick_ms: float = 1_000.0
    progress_tick_ms: float = 100.0
    hit_linger_ms: float = 200.0
    # Used when the canvas has no usable size.
    default_spawn_x: float = 50.0
    default_spawn_y: float = 50.0

    def __post_init__(self) -> None:
        if self.session_duration_ms <= 0:
            raise ValueError("session_duration_ms must be > 0")
        if self.target_lifetime_ms <= 0:
            raise ValueError("target_lifetime_ms must be > 0")
        if self.spawn_interval_ms <= 0:
            raise ValueError("spawn_interval_ms must be > 0")
        if self.min_reaction_time_ms < 0:
            raise ValueError("min_reaction_time_ms must be >= 0")
        if self.hit_radius_px <= 0:
            raise ValueError("hit_radius_px must be > 0")
        if self.spawn_padding_px < 0:
            raise ValueError("spawn_padding_px must be >= 0")
        if self.countdown_ticks < 0:
            raise ValueError("countdown_ticks must be >= 0")
        if self.countdown_tick_ms <= 0:
            raise ValueError("countdown_tick_ms must be > 0")
        if self.progress_tick_ms <= 0:
            raise ValueError("progress_tick_ms must be > 0")
        if self.hit_linger_ms < 0:
            raise ValueError("hit_linger_ms must be >= 0")

    @property
    def expected_target_count(self) -> int:
        return int(self.session_duration_ms // self.spawn_interval_ms)


class Phase(str, Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    RUNNING = "running"
    COMPLETE = "complete"


class ClickOutcome(str, Enum):
    HIT = "hit"
    PREMATURE = "premature"
    FALSE_CLICK = "false_click"


@dataclass(frozen=True, slots=True)
class CanvasBounds:
    width: float
    height: float

    @property
    def usable(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True, slots=True)
class Target:
    target_id: str
    x: float
    y: float
    spawn_time_ms: float
    clicked: bool = False
    reaction_time_ms: float | None = None


@dataclass(frozen=True, slots=True)
class ClickEvent:
    index: int
    x: float
    y: float
    timestamp_ms: float
    outcome: ClickOutcome
    target_id: str | None = None
    reaction_time_ms: float | None = None

    @property
    def is_false_click(self) -> bool:
        return self.outcome is not ClickOutcome.HIT

    @property
    def is_valid_hit(self) -> bool:
        return self.target_id is not None and not self.is_false_click


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """Frozen result of one completed run, handed to the analysis engine."""

    targets: tuple[Target, ...]
    clicks: tuple[ClickEvent, ...]
    missed_targets: int
    false_clicks: int
    start_time_ms: float
    end_time_ms: float

    @property
    def duration_ms(self) -> float:
        return max(0.0, self.end_time_ms - self.start_time_ms)


@dataclass(frozen=True, slots=True)
class ScreeningSnapshot:
    """View model for the UI (pure data)."""

    phase: Phase
    countdown_remaining: int
    progress_pct: float
    hits: int
    missed_targets: int
    false_clicks: int
    targets: tuple[Target, ...]


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x <= lo else hi if x >= hi else float(x)


def round_half_up(x: float) -> int:
    # Matches JavaScript-style Math.round for the scores shown to the user.
    return int(math.floor(x + 0.5))
