from __future__ import annotations

from collections.abc import Callable

from .analysis import AnalysisResult, Category
from .screening_core import SessionRecord

DISCLAIMER = (
    "This is a screening exercise, not a diagnostic test. "
    "Discuss any concerns with a qualified healthcare professional."
)

TOP_RECOMMENDATIONS = 3
TEXT_WRAP_CHARS = 88

LineFits = Callable[[str], bool]


def _fits_chars(line: str) -> bool:
    return len(line) <= TEXT_WRAP_CHARS


def wrap_words(text: str, fits: LineFits | None = None, *, indent: str = "") -> list[str]:
    """Greedy word wrap.

    Leading spaces of ``text`` are kept on the first line and continuation
    lines start with ``indent``. ``fits`` decides whether a candidate line is
    short enough (character count by default; the UI passes a pixel check).
    A single word that never fits still gets a line of its own.
    """

    fits = fits or _fits_chars
    raw = str(text)
    stripped = raw.lstrip(" ")
    lines: list[str] = []
    cur = raw[: len(raw) - len(stripped)]
    fresh = True
    for word in stripped.split():
        trial = f"{cur}{word}" if fresh else f"{cur} {word}"
        if fresh or fits(trial):
            cur, fresh = trial, False
            continue
        lines.append(cur)
        cur = f"{indent}{word}"
    if not fresh:
        lines.append(cur)
    return lines


def summary_line(record: SessionRecord) -> str:
    """One-line hit/miss/false-click tally for a finished record."""

    hits = sum(1 for c in record.clicks if c.is_valid_hit)
    return (
        f"Targets: {len(record.targets)}  Hits: {hits}  "
        f"Missed: {record.missed_targets}  False clicks: {record.false_clicks}"
    )


def category_lines(analysis: AnalysisResult, kind: Category, fits: LineFits | None = None) -> list[str]:
    cat = analysis.category(kind)
    lines = [f"{kind.display_name}: {cat.score}%  ({kind.subtitle})"]
    lines.extend(wrap_words(f"  {cat.description}", fits, indent="  "))
    for text in cat.indicators:
        lines.extend(wrap_words(f"  - {text}", fits, indent="    "))
    return lines


def _numbered(items: tuple[str, ...], fits: LineFits | None) -> list[str]:
    lines: list[str] = []
    for i, text in enumerate(items, start=1):
        lines.extend(wrap_words(f"  {i}. {text}", fits, indent="     "))
    return lines


def disclaimer_lines(fits: LineFits | None = None) -> list[str]:
    return wrap_words(DISCLAIMER, fits)


def result_lines(
    analysis: AnalysisResult,
    *,
    fits: LineFits | None = None,
    include_disclaimer: bool = True,
) -> list[str]:
    """Plain-text lines for the results screen.

    Every section of the analysis is present: overall score, categories,
    reaction time, accuracy, the top recommendations (plus the full list
    when there are more), and the clinical notes. Long text is wrapped
    with ``fits``.
    """

    rt = analysis.reaction_time
    acc = analysis.accuracy
    lines = [
        "Assessment Results",
        "",
        f"Overall score: {analysis.overall_score}%  ({analysis.likelihood.value} likelihood)",
        "",
    ]
    for kind in Category:
        lines.extend(category_lines(analysis, kind, fits))
    lines.extend(
        [
            "",
            f"Reaction time: {rt.average_ms}ms average, {rt.std_dev_ms}ms std dev",
            f"  Consistency: {rt.consistency.value}   Pattern: {rt.pattern.value}",
            f"Hit rate: {acc.hit_rate}%   Miss rate: {acc.miss_rate}%   "
            f"False positive rate: {acc.false_positive_rate}%",
        ]
    )

    lines.extend(["", "Top recommendations:"])
    lines.extend(_numbered(analysis.recommendations[:TOP_RECOMMENDATIONS], fits))
    if len(analysis.recommendations) > TOP_RECOMMENDATIONS:
        lines.extend(["", "All recommendations:"])
        lines.extend(_numbered(analysis.recommendations, fits))

    lines.extend(["", "Clinical notes:"])
    for i, paragraph in enumerate(analysis.clinical_notes.split("\n\n")):
        if i:
            lines.append("")
        lines.extend(wrap_words(f"  {paragraph}", fits, indent="  "))

    if include_disclaimer:
        lines.append("")
        lines.extend(disclaimer_lines(fits))
    return lines
