from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import pytest

from attention_screen.analysis import Category, ConsistencyLabel, Likelihood, ResponsePattern
from attention_screen.screening_core import CanvasBounds, Phase, Target
from attention_screen.session import ScreeningSession, build_screening_session


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def _target_index(target: Target) -> int:
    return int(target.target_id.split("-")[1]) - 1


def _play(
    clock: FakeClock,
    session: ScreeningSession,
    *,
    click_at_age_ms: Callable[[Target], float | None],
    stray_click_every_ms: float | None = None,
) -> None:
    """Drive a full session in 100 ms frames with a scripted player."""

    session.start(CanvasBounds(800.0, 600.0))
    while session.phase is not Phase.RUNNING:
        clock.advance(100)
        session.update()
    start = clock.t

    while session.phase is Phase.RUNNING:
        for target in session.active_targets():
            if target.clicked:
                continue
            age = click_at_age_ms(target)
            if age is not None and clock.t - target.spawn_time_ms == age:
                session.click(target.x, target.y)

        rel = clock.t - start
        if stray_click_every_ms is not None and rel % stray_click_every_ms == stray_click_every_ms / 2:
            # Canvas corner sits inside the spawn padding, so this never hits.
            session.click(0.0, 0.0)

        clock.advance(100)
        session.update()


def test_headless_attentive_player_scores_unlikely() -> None:
    clock = FakeClock()
    session = build_screening_session(clock=clock, seed=2024)

    _play(clock, session, click_at_age_ms=lambda t: 300.0)

    assert session.phase is Phase.COMPLETE
    record = session.record
    assert record is not None
    assert len(record.targets) == 50
    assert record.missed_targets == 0
    assert record.false_clicks == 0
    assert all(t.clicked for t in record.targets)
    assert all(t.reaction_time_ms == pytest.approx(300.0) for t in record.targets)

    analysis = session.analysis
    assert analysis is not None
    assert analysis.accuracy.hit_rate == 100
    assert analysis.accuracy.miss_rate == 0
    assert analysis.accuracy.false_positive_rate == 0
    assert analysis.overall_score == 0
    assert analysis.likelihood is Likelihood.UNLIKELY
    assert analysis.reaction_time.average_ms == 300
    assert analysis.reaction_time.consistency is ConsistencyLabel.EXCELLENT
    assert analysis.reaction_time.pattern is ResponsePattern.FAST
    for kind in Category:
        assert analysis.category(kind).indicators == (kind.default_indicator,)
    assert analysis.recommendations == (
        "Results suggest no significant ADHD patterns",
        "Continue maintaining healthy attention practices",
    )
    assert "Assessment completed over 60 seconds with 50 target presentations." in analysis.clinical_notes


def test_headless_distracted_player_scores_low_with_impulsivity_flags() -> None:
    clock = FakeClock()
    session = build_screening_session(clock=clock, seed=77)

    def every_other(target: Target) -> float | None:
        return 700.0 if _target_index(target) % 2 == 0 else None

    _play(clock, session, click_at_age_ms=every_other, stray_click_every_ms=1200.0)

    record = session.record
    assert record is not None
    assert len(record.targets) == 50
    # Odd targets expire unclicked, except the last one which is still live at the end.
    assert record.missed_targets == 24
    assert record.false_clicks == 50
    assert sum(1 for c in record.clicks if c.is_valid_hit) == 25

    analysis = session.analysis
    assert analysis is not None
    assert analysis.accuracy.hit_rate == 50
    assert analysis.accuracy.miss_rate == 48
    assert analysis.accuracy.false_positive_rate == 67

    scores = {kind: analysis.category(kind).score for kind in Category}
    assert scores == {
        Category.INATTENTION: 49,
        Category.IMPULSIVITY: 54,
        Category.HYPERACTIVITY: 34,
        Category.SUSTAINED_ATTENTION: 39,
    }
    assert analysis.overall_score == 45
    assert analysis.likelihood is Likelihood.LOW
    assert analysis.reaction_time.pattern is ResponsePattern.DELIBERATE

    assert "High frequency of missed targets" in analysis.category(Category.INATTENTION).indicators
    assert "High rate of impulsive responses" in analysis.category(Category.IMPULSIVITY).indicators
    assert analysis.recommendations == (
        "Practice mindfulness and pause techniques before responding",
        "Consider cognitive behavioral therapy for impulse control",
    )


def test_headless_idle_player_has_defaults_for_rt_based_rules() -> None:
    clock = FakeClock()
    session = build_screening_session(clock=clock, seed=5)

    _play(clock, session, click_at_age_ms=lambda t: None)

    analysis = session.analysis
    assert analysis is not None
    assert analysis.accuracy.hit_rate == 0
    assert analysis.accuracy.miss_rate == 98
    assert analysis.reaction_time.average_ms == 0
    # No valid hits: no speed-based impulsivity.
    assert analysis.category(Category.IMPULSIVITY).score == 0
    assert analysis.category(Category.IMPULSIVITY).indicators == (Category.IMPULSIVITY.default_indicator,)
    assert analysis.likelihood in (Likelihood.LOW, Likelihood.MODERATE)
