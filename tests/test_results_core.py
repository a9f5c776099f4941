from __future__ import annotations

from attention_screen.analysis import Category, analyze_session
from attention_screen.results import (
    DISCLAIMER,
    TEXT_WRAP_CHARS,
    disclaimer_lines,
    result_lines,
    summary_line,
    wrap_words,
)
from attention_screen.screening_core import ClickEvent, ClickOutcome, SessionRecord, Target


def _record() -> SessionRecord:
    targets = (
        Target(target_id="target-1", x=80.0, y=90.0, spawn_time_ms=0.0, clicked=True, reaction_time_ms=420.0),
        Target(target_id="target-2", x=200.0, y=150.0, spawn_time_ms=1200.0),
        Target(target_id="target-3", x=300.0, y=250.0, spawn_time_ms=2400.0),
    )
    clicks = (
        ClickEvent(
            index=0,
            x=82.0,
            y=91.0,
            timestamp_ms=420.0,
            outcome=ClickOutcome.HIT,
            target_id="target-1",
            reaction_time_ms=420.0,
        ),
        ClickEvent(index=1, x=5.0, y=5.0, timestamp_ms=1800.0, outcome=ClickOutcome.FALSE_CLICK),
        ClickEvent(index=2, x=6.0, y=5.0, timestamp_ms=1900.0, outcome=ClickOutcome.FALSE_CLICK),
        ClickEvent(index=3, x=7.0, y=5.0, timestamp_ms=2000.0, outcome=ClickOutcome.FALSE_CLICK),
    )
    return SessionRecord(
        targets=targets,
        clicks=clicks,
        missed_targets=2,
        false_clicks=3,
        start_time_ms=0.0,
        end_time_ms=3600.0,
    )


def test_summary_line_counts_valid_hits() -> None:
    assert summary_line(_record()) == "Targets: 3  Hits: 1  Missed: 2  False clicks: 3"


def _no_wrap(line: str) -> bool:
    return True


def _section(lines: list[str], title: str) -> list[str]:
    start = lines.index(title) + 1
    end = lines.index("", start) if "" in lines[start:] else len(lines)
    return lines[start:end]


def test_result_lines_cover_every_section() -> None:
    analysis = analyze_session(_record())
    lines = result_lines(analysis)

    assert lines[0] == "Assessment Results"
    assert lines[2] == f"Overall score: {analysis.overall_score}%  ({analysis.likelihood.value} likelihood)"
    for kind in Category:
        assert any(line.startswith(f"{kind.display_name}: ") for line in lines)
        for indicator in analysis.category(kind).indicators:
            assert f"  - {indicator}" in lines
    assert "Reaction time: 420ms average, 0ms std dev" in lines
    assert any(line.startswith("Hit rate: 33%") for line in lines)
    assert "Clinical notes:" in lines

    footer = disclaimer_lines()
    assert " ".join(footer) == DISCLAIMER
    assert lines[-len(footer) :] == footer


def test_result_lines_show_top_three_then_all_recommendations() -> None:
    analysis = analyze_session(_record())
    assert len(analysis.recommendations) > 3

    lines = result_lines(analysis, fits=_no_wrap)
    top = _section(lines, "Top recommendations:")
    full = _section(lines, "All recommendations:")

    assert top == [f"  {i}. {text}" for i, text in enumerate(analysis.recommendations[:3], start=1)]
    assert full == [f"  {i}. {text}" for i, text in enumerate(analysis.recommendations, start=1)]


def test_result_lines_skip_full_list_when_three_or_fewer() -> None:
    rec = _record()
    attentive = SessionRecord(
        targets=rec.targets[:1],
        clicks=rec.clicks[:1],
        missed_targets=0,
        false_clicks=0,
        start_time_ms=0.0,
        end_time_ms=3600.0,
    )
    analysis = analyze_session(attentive)
    assert len(analysis.recommendations) <= 3

    lines = result_lines(analysis, fits=_no_wrap)
    assert "All recommendations:" not in lines
    assert len(_section(lines, "Top recommendations:")) == len(analysis.recommendations)


def test_clinical_notes_are_wrapped_without_losing_text() -> None:
    analysis = analyze_session(_record())
    lines = result_lines(analysis, include_disclaimer=False)

    notes = lines[lines.index("Clinical notes:") + 1 :]
    assert all(len(line) <= TEXT_WRAP_CHARS for line in notes)
    assert " ".join(" ".join(notes).split()) == " ".join(analysis.clinical_notes.split())
    # Paragraphs stay separated by a blank line.
    assert notes.count("") == analysis.clinical_notes.count("\n\n")
    assert disclaimer_lines()[-1] not in lines


def test_wrap_words_keeps_lead_and_indents_continuations() -> None:
    def short(line: str) -> bool:
        return len(line) <= 12

    assert wrap_words("  1. alpha beta gamma", short, indent="     ") == ["  1. alpha", "     beta", "     gamma"]
    assert wrap_words("supercalifragilistic yes", short) == ["supercalifragilistic", "yes"]
    assert wrap_words("", short) == []
    assert wrap_words("   ", short) == []
