from __future__ import annotations

import logging
from collections.abc import Callable

from .analysis import AnalysisResult, analyze_session
from .clock import Clock
from .event_loop import EventLoop, TimerHandle
from .screening_core import (
    CanvasBounds,
    ClickEvent,
    ClickOutcome,
    Phase,
    ScreeningConfig,
    ScreeningSnapshot,
    SeededRng,
    SessionRecord,
    Target,
    clamp,
)
from .targets import ClickResolution, TargetScheduler, resolve_click

logger = logging.getLogger(__name__)

CompletionHook = Callable[[SessionRecord, AnalysisResult], None]


class ScreeningSession:
    """Session flow: idle -> countdown -> running -> complete.

    - Single-threaded: every state change happens inside an EventLoop
      callback or a direct call from the UI (click/start/reset).
    - Time is entirely via the injected Clock.
    - The SessionRecord is assembled once, at the running -> complete edge,
      and never touched again.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        seed: int,
        config: ScreeningConfig | None = None,
        on_complete: CompletionHook | None = None,
    ) -> None:
        self._clock = clock
        self._seed = int(seed)
        self._cfg = config or ScreeningConfig()
        self._on_complete = on_complete
        self._loop = EventLoop(clock)
        self._init_run_state()

    def _init_run_state(self) -> None:
        self._phase = Phase.IDLE
        self._bounds: CanvasBounds | None = None
        self._countdown_remaining = self._cfg.countdown_ticks
        self._countdown_timer: TimerHandle | None = None
        self._progress_timer: TimerHandle | None = None

        self._scheduler = TargetScheduler(
            loop=self._loop,
            config=self._cfg,
            rng=SeededRng(self._seed),
            on_miss=self._on_target_missed,
        )

        self._clicks: list[ClickEvent] = []
        self._hits = 0
        self._missed_targets = 0
        self._false_clicks = 0

        self._start_time_ms: float | None = None
        self._progress_pct = 0.0

        self._record: SessionRecord | None = None
        self._analysis: AnalysisResult | None = None

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def config(self) -> ScreeningConfig:
        return self._cfg

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def countdown_remaining(self) -> int:
        return self._countdown_remaining

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def missed_targets(self) -> int:
        return self._missed_targets

    @property
    def false_clicks(self) -> int:
        return self._false_clicks

    @property
    def progress_pct(self) -> float:
        """Raw elapsed/duration percentage; may briefly exceed 100."""
        return self._progress_pct

    def display_progress_pct(self) -> float:
        return clamp(self._progress_pct, 0.0, 100.0)

    @property
    def record(self) -> SessionRecord | None:
        return self._record

    @property
    def analysis(self) -> AnalysisResult | None:
        return self._analysis

    def clicks(self) -> list[ClickEvent]:
        return list(self._clicks)

    def active_targets(self) -> tuple[Target, ...]:
        if self._phase is not Phase.RUNNING:
            return ()
        return self._scheduler.active_targets()

    def set_bounds(self, bounds: CanvasBounds | None) -> None:
        self._bounds = bounds
        self._scheduler.set_bounds(bounds)

    def start(self, bounds: CanvasBounds | None = None) -> None:
        if self._phase is not Phase.IDLE:
            return
        if bounds is not None:
            self._bounds = bounds
        self._phase = Phase.COUNTDOWN
        self._countdown_remaining = self._cfg.countdown_ticks
        logger.info("Countdown started (%d ticks)", self._countdown_remaining)
        if self._countdown_remaining <= 0:
            self._begin_running()
            return
        self._countdown_timer = self._loop.call_every(self._cfg.countdown_tick_ms, self._countdown_tick)

    def update(self) -> None:
        """Fire every due timer. Called once per frame by the UI."""
        self._loop.run_pending()

    def click(self, x: float, y: float) -> ClickResolution | None:
        """Record a click in canvas-local coordinates at the current clock time."""

        # Expiries that precede this click must be applied first.
        self._loop.run_pending()
        if self._phase is not Phase.RUNNING:
            return None

        now = self._loop.now()
        resolution = resolve_click(x, y, now, self._scheduler.live_active(), self._cfg)
        target_id = None if resolution.target is None else resolution.target.target_id

        if resolution.outcome is ClickOutcome.HIT:
            self._hits += 1
        else:
            self._false_clicks += 1
        if target_id is not None:
            assert resolution.reaction_time_ms is not None
            self._scheduler.mark_clicked(target_id, resolution.reaction_time_ms)

        self._clicks.append(
            ClickEvent(
                index=len(self._clicks),
                x=float(x),
                y=float(y),
                timestamp_ms=now,
                outcome=resolution.outcome,
                target_id=target_id,
                reaction_time_ms=resolution.reaction_time_ms,
            )
        )
        logger.debug("Click (%.1f, %.1f) -> %s", x, y, resolution.outcome.value)
        return resolution

    def reset(self) -> None:
        """Abandon the current run (if any) and go back to idle."""

        self._scheduler.stop()
        self._loop.cancel_all()
        logger.info("Session reset from %s", self._phase.value)
        self._init_run_state()

    def snapshot(self) -> ScreeningSnapshot:
        return ScreeningSnapshot(
            phase=self._phase,
            countdown_remaining=self._countdown_remaining,
            progress_pct=self.display_progress_pct(),
            hits=self._hits,
            missed_targets=self._missed_targets,
            false_clicks=self._false_clicks,
            targets=self.active_targets(),
        )

    def _countdown_tick(self) -> None:
        if self._phase is not Phase.COUNTDOWN:
            return
        self._countdown_remaining -= 1
        if self._countdown_remaining > 0:
            return
        if self._countdown_timer is not None:
            self._countdown_timer.cancel()
            self._countdown_timer = None
        self._begin_running()

    def _begin_running(self) -> None:
        self._countdown_remaining = 0
        self._phase = Phase.RUNNING
        self._start_time_ms = self._loop.now()
        self._progress_pct = 0.0
        logger.info("Session running (duration %.0f ms, seed %d)", self._cfg.session_duration_ms, self._seed)
        self._scheduler.start(self._bounds)
        self._progress_timer = self._loop.call_every(self._cfg.progress_tick_ms, self._progress_tick)

    def _progress_tick(self) -> None:
        if self._phase is not Phase.RUNNING:
            return
        assert self._start_time_ms is not None
        now = self._loop.now()
        elapsed = now - self._start_time_ms
        self._progress_pct = elapsed / self._cfg.session_duration_ms * 100.0
        if elapsed >= self._cfg.session_duration_ms:
            self._complete(now)

    def _complete(self, end_time_ms: float) -> None:
        assert self._start_time_ms is not None
        self._scheduler.stop()
        if self._progress_timer is not None:
            self._progress_timer.cancel()
            self._progress_timer = None

        self._record = SessionRecord(
            targets=self._scheduler.all_targets(),
            clicks=tuple(self._clicks),
            missed_targets=self._missed_targets,
            false_clicks=self._false_clicks,
            start_time_ms=self._start_time_ms,
            end_time_ms=end_time_ms,
        )
        self._phase = Phase.COMPLETE
        self._analysis = analyze_session(self._record)
        logger.info(
            "Session complete: %d targets, %d hits, %d missed, %d false clicks, score %d (%s)",
            len(self._record.targets),
            self._hits,
            self._missed_targets,
            self._false_clicks,
            self._analysis.overall_score,
            self._analysis.likelihood.value,
        )
        if self._on_complete is not None:
            self._on_complete(self._record, self._analysis)

    def _on_target_missed(self, target: Target) -> None:
        if self._phase is not Phase.RUNNING:
            return
        self._missed_targets += 1


def build_screening_session(
    *,
    clock: Clock,
    seed: int,
    config: ScreeningConfig | None = None,
    on_complete: CompletionHook | None = None,
) -> ScreeningSession:
    return ScreeningSession(clock=clock, seed=seed, config=config, on_complete=on_complete)
