"""Behavioural-pattern scoring for a completed screening session.

analyze_session() is a pure function of a SessionRecord. Rates and scores
are carried at full precision and rounded (half-up) only where they are
reported, so two calls on the same record always agree.

The output is an illustrative heuristic, not a clinical instrument.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .screening_core import SessionRecord, clamp, round_half_up


class Likelihood(str, Enum):
    UNLIKELY = "Unlikely"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _LIKELIHOOD_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Likelihood):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Likelihood):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Likelihood):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Likelihood):
            return NotImplemented
        return self.rank >= other.rank

    @property
    def warrants_follow_up(self) -> bool:
        return self in (Likelihood.MODERATE, Likelihood.HIGH)

    @classmethod
    def from_score(cls, score: int) -> "Likelihood":
        for floor, tier in _LIKELIHOOD_FLOORS:
            if score >= floor:
                return tier
        return cls.UNLIKELY


_LIKELIHOOD_ORDER = (Likelihood.UNLIKELY, Likelihood.LOW, Likelihood.MODERATE, Likelihood.HIGH)
# Checked top-down; first floor reached wins.
_LIKELIHOOD_FLOORS = ((70, Likelihood.HIGH), (50, Likelihood.MODERATE), (30, Likelihood.LOW))


class Category(str, Enum):
    INATTENTION = "inattention"
    IMPULSIVITY = "impulsivity"
    HYPERACTIVITY = "hyperactivity"
    SUSTAINED_ATTENTION = "sustained_attention"

    @property
    def display_name(self) -> str:
        return _CATEGORY_TEXT[self].display_name

    @property
    def subtitle(self) -> str:
        return _CATEGORY_TEXT[self].subtitle

    def describe(self, score: int) -> str:
        text = _CATEGORY_TEXT[self]
        if score > 60:
            return text.high
        if score > 40:
            return text.moderate
        return text.normal

    @property
    def default_indicator(self) -> str:
        return _CATEGORY_TEXT[self].no_pattern


@dataclass(frozen=True, slots=True)
class _CategoryText:
    display_name: str
    subtitle: str
    high: str
    moderate: str
    normal: str
    no_pattern: str


_CATEGORY_TEXT: dict[Category, _CategoryText] = {
    Category.INATTENTION: _CategoryText(
        display_name="Inattention",
        subtitle="Focus and concentration patterns",
        high="Significant patterns of inattention observed",
        moderate="Moderate inattention indicators present",
        normal="Attention levels within normal range",
        no_pattern="No significant inattention patterns detected",
    ),
    Category.IMPULSIVITY: _CategoryText(
        display_name="Impulsivity",
        subtitle="Response control analysis",
        high="Notable impulsive response patterns detected",
        moderate="Some impulsivity indicators observed",
        normal="Good impulse control maintained",
        no_pattern="Good impulse control demonstrated",
    ),
    Category.HYPERACTIVITY: _CategoryText(
        display_name="Hyperactivity",
        subtitle="Movement and response patterns",
        high="Hyperactive response patterns identified",
        moderate="Mild hyperactivity indicators present",
        normal="Motor control within expected range",
        no_pattern="No hyperactivity patterns detected",
    ),
    Category.SUSTAINED_ATTENTION: _CategoryText(
        display_name="Sustained Attention",
        subtitle="Long-term focus capability",
        high="Challenges with sustained attention observed",
        moderate="Moderate sustained attention concerns",
        normal="Good sustained attention capacity",
        no_pattern="Good sustained attention throughout task",
    ),
}

# Composite weights, in Category order.
CATEGORY_WEIGHTS: dict[Category, float] = {
    Category.INATTENTION: 0.35,
    Category.IMPULSIVITY: 0.25,
    Category.HYPERACTIVITY: 0.2,
    Category.SUSTAINED_ATTENTION: 0.2,
}


class ConsistencyLabel(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    VARIABLE = "Variable"

    @classmethod
    def from_std_dev(cls, std_dev_ms: float) -> "ConsistencyLabel":
        if std_dev_ms < 100:
            return cls.EXCELLENT
        if std_dev_ms < 150:
            return cls.GOOD
        if std_dev_ms < 200:
            return cls.FAIR
        return cls.VARIABLE


class ResponsePattern(str, Enum):
    FAST = "Fast responder"
    AVERAGE = "Average responder"
    DELIBERATE = "Deliberate responder"

    @classmethod
    def from_average(cls, avg_ms: float) -> "ResponsePattern":
        if avg_ms < 350:
            return cls.FAST
        if avg_ms < 450:
            return cls.AVERAGE
        return cls.DELIBERATE


@dataclass(frozen=True, slots=True)
class CategoryScore:
    score: int
    description: str
    indicators: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ReactionTimeAnalysis:
    average_ms: int
    std_dev_ms: int
    consistency: ConsistencyLabel
    pattern: ResponsePattern


@dataclass(frozen=True, slots=True)
class AccuracyMetrics:
    hit_rate: int
    miss_rate: int
    false_positive_rate: int


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    overall_score: int
    likelihood: Likelihood
    categories: dict[Category, CategoryScore]
    reaction_time: ReactionTimeAnalysis
    accuracy: AccuracyMetrics
    recommendations: tuple[str, ...]
    clinical_notes: str

    def category(self, kind: Category) -> CategoryScore:
        return self.categories[kind]


@dataclass(frozen=True, slots=True)
class SessionMetrics:
    """Raw full-precision figures the scores are derived from."""

    total_targets: int
    total_clicks: int
    hits: int
    misses: int
    false_clicks: int
    reaction_times_ms: tuple[float, ...]
    avg_reaction_time_ms: float
    std_dev_ms: float
    hit_rate: int
    miss_rate: int
    false_positive_rate: int
    duration_ms: float


def _rate(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        return 0
    return round_half_up(clamp(numerator / denominator * 100.0, 0.0, 100.0))


def _mean(values: tuple[float, ...] | list[float]) -> float:
    return 0.0 if not values else sum(values) / len(values)


def _population_std_dev(values: tuple[float, ...], mean: float) -> float:
    if len(values) < 2:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def session_metrics(record: SessionRecord) -> SessionMetrics:
    valid = [c for c in record.clicks if c.is_valid_hit]
    rts = tuple(float(c.reaction_time_ms) for c in valid if c.reaction_time_ms is not None)
    avg = _mean(rts)
    std_dev = _population_std_dev(rts, avg)

    total_targets = len(record.targets)
    hits = len(valid)
    misses = int(record.missed_targets)
    false_clicks = int(record.false_clicks)

    return SessionMetrics(
        total_targets=total_targets,
        total_clicks=len(record.clicks),
        hits=hits,
        misses=misses,
        false_clicks=false_clicks,
        reaction_times_ms=rts,
        avg_reaction_time_ms=avg,
        std_dev_ms=std_dev,
        hit_rate=_rate(hits, total_targets),
        miss_rate=_rate(misses, total_targets),
        false_positive_rate=_rate(false_clicks, hits + false_clicks),
        duration_ms=record.duration_ms,
    )


def _score(raw: float) -> int:
    return round_half_up(clamp(raw, 0.0, 100.0))


def category_scores(m: SessionMetrics) -> dict[Category, int]:
    avg, sd = m.avg_reaction_time_ms, m.std_dev_ms
    # Reaction-time terms need at least one valid hit; the hit shortfall needs at least one target.
    slow = max(0.0, (avg - 500) / 10) if m.reaction_times_ms else 0.0
    fast = max(0.0, (300 - avg) / 5) if m.reaction_times_ms else 0.0
    shortfall = (100 - m.hit_rate) * 0.3 if m.total_targets > 0 else 0.0

    inattention = m.miss_rate * 0.6 + sd / 10 + slow
    impulsivity = m.false_positive_rate * 0.8 + fast
    hyperactivity = m.false_positive_rate * 0.5 + sd / 8
    sustained = m.miss_rate * 0.5 + sd / 12 + shortfall
    return {
        Category.INATTENTION: _score(inattention),
        Category.IMPULSIVITY: _score(impulsivity),
        Category.HYPERACTIVITY: _score(hyperactivity),
        Category.SUSTAINED_ATTENTION: _score(sustained),
    }


def overall_score(scores: dict[Category, int]) -> int:
    return round_half_up(sum(scores[c] * w for c, w in CATEGORY_WEIGHTS.items()))


def _second_half_slowdown(rts: tuple[float, ...]) -> bool:
    if len(rts) < 2:
        return False
    mid = len(rts) // 2
    first = _mean(rts[:mid])
    second = _mean(rts[mid:])
    return second > first * 1.2


def category_indicators(m: SessionMetrics) -> dict[Category, tuple[str, ...]]:
    avg, sd = m.avg_reaction_time_ms, m.std_dev_ms
    has_rts = len(m.reaction_times_ms) > 0

    inattention: list[str] = []
    if m.miss_rate > 30:
        inattention.append("High frequency of missed targets")
    if avg > 500:
        inattention.append("Slower than average reaction time")
    if sd > 150:
        inattention.append("Inconsistent response patterns")
    if m.total_targets > 0 and m.hit_rate < 60:
        inattention.append("Difficulty maintaining focus on target")

    impulsivity: list[str] = []
    if m.false_positive_rate > 20:
        impulsivity.append("High rate of impulsive responses")
    if has_rts and avg < 300:
        impulsivity.append("Unusually fast reaction times suggesting premature responses")
    if sum(1 for rt in m.reaction_times_ms if rt < 200) > 3:
        impulsivity.append("Multiple instances of anticipatory clicking")

    hyperactivity: list[str] = []
    if m.false_positive_rate > 25:
        hyperactivity.append("Excessive motor activity indicated by false clicks")
    if sd > 200:
        hyperactivity.append("Highly variable response patterns")
    if m.total_clicks > m.total_targets * 1.5:
        hyperactivity.append("Restless clicking behavior observed")

    sustained: list[str] = []
    if m.miss_rate > 25:
        sustained.append("Difficulty sustaining attention over time")
    if sd > 180:
        sustained.append("Declining consistency throughout task")
    if _second_half_slowdown(m.reaction_times_ms):
        sustained.append("Performance decline noted in second half of assessment")

    found = {
        Category.INATTENTION: inattention,
        Category.IMPULSIVITY: impulsivity,
        Category.HYPERACTIVITY: hyperactivity,
        Category.SUSTAINED_ATTENTION: sustained,
    }
    return {c: tuple(items) if items else (c.default_indicator,) for c, items in found.items()}


def recommendations(overall: int, scores: dict[Category, int]) -> tuple[str, ...]:
    out: list[str] = []
    if overall >= 50:
        out.append(
            "Consider consulting with a healthcare professional specializing in ADHD "
            "for comprehensive evaluation"
        )
        out.append("Keep a journal tracking attention difficulties and their impact on daily activities")
    if scores[Category.INATTENTION] > 50:
        out.append("Implement organizational strategies such as checklists and reminders")
        out.append("Break tasks into smaller, manageable segments")
    if scores[Category.IMPULSIVITY] > 50:
        out.append("Practice mindfulness and pause techniques before responding")
        out.append("Consider cognitive behavioral therapy for impulse control")
    if scores[Category.SUSTAINED_ATTENTION] > 50:
        out.append("Use timers and structured breaks to maintain focus")
        out.append("Minimize distractions in work/study environments")
    if overall < 30:
        out.append("Results suggest no significant ADHD patterns")
        out.append("Continue maintaining healthy attention practices")
    return tuple(out)


def clinical_notes(
    m: SessionMetrics,
    *,
    likelihood: Likelihood,
    reaction_time: ReactionTimeAnalysis,
) -> str:
    consistency = reaction_time.consistency.value.lower()
    pattern = reaction_time.pattern.value.lower()
    if likelihood.warrants_follow_up:
        outlook = "further professional evaluation may be beneficial"
    else:
        outlook = "no immediate concerns regarding ADHD symptoms"

    summary = (
        f"Assessment completed over {round_half_up(m.duration_ms / 1000.0)} seconds with "
        f"{m.total_targets} target presentations. Performance analysis reveals "
        f"{likelihood.value.lower()} likelihood of ADHD-related attention patterns based on "
        f"reaction time consistency ({consistency}), accuracy metrics ({m.hit_rate}% hit rate), "
        f"and response control ({m.false_positive_rate}% false positive rate)."
    )
    observations = (
        f"Key observations: {reaction_time.average_ms}ms average reaction time with "
        f"{reaction_time.std_dev_ms}ms standard deviation indicates {consistency} response "
        f"consistency. The {pattern} profile combined with behavioral patterns suggests {outlook}."
    )
    caveat = (
        "This screening tool measures sustained attention, impulse control, and response "
        "variability which are core components in ADHD assessment. However, clinical diagnosis "
        "requires comprehensive evaluation including developmental history, symptom duration, "
        "and functional impairment across multiple settings."
    )
    return "\n\n".join((summary, observations, caveat))


def analyze_session(record: SessionRecord) -> AnalysisResult:
    m = session_metrics(record)

    scores = category_scores(m)
    overall = overall_score(scores)
    likelihood = Likelihood.from_score(overall)

    indicators = category_indicators(m)
    categories = {
        c: CategoryScore(score=scores[c], description=c.describe(scores[c]), indicators=indicators[c])
        for c in Category
    }

    reaction_time = ReactionTimeAnalysis(
        average_ms=round_half_up(m.avg_reaction_time_ms),
        std_dev_ms=round_half_up(m.std_dev_ms),
        consistency=ConsistencyLabel.from_std_dev(m.std_dev_ms),
        pattern=ResponsePattern.from_average(m.avg_reaction_time_ms),
    )

    return AnalysisResult(
        overall_score=overall,
        likelihood=likelihood,
        categories=categories,
        reaction_time=reaction_time,
        accuracy=AccuracyMetrics(
            hit_rate=m.hit_rate,
            miss_rate=m.miss_rate,
            false_positive_rate=m.false_positive_rate,
        ),
        recommendations=recommendations(overall, scores),
        clinical_notes=clinical_notes(m, likelihood=likelihood, reaction_time=reaction_time),
    )
