"""Pygame UI shell for the attention screening mini-game.

Screens: instructions -> 3-2-1 countdown -> timed target canvas -> results.
Deterministic timing/scoring/RNG/state lives in attention_screen/* (core
modules); this module only draws snapshots and forwards input.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Protocol

import pygame

from .analysis import Likelihood
from .clock import RealClock
from .results import DISCLAIMER, disclaimer_lines, result_lines, summary_line, wrap_words
from .screening_core import CanvasBounds, Phase, ScreeningSnapshot, Target
from .session import ScreeningSession, build_screening_session

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 640)
TARGET_FPS = 60
HUD_HEIGHT = 80
TARGET_DRAW_RADIUS = 28

BG = (12, 16, 32)
PANEL_BG = (22, 28, 56)
BORDER = (90, 110, 170)
TEXT_MAIN = (236, 242, 255)
TEXT_MUTED = (170, 182, 210)
HIT_COLOR = (72, 200, 120)
MISS_COLOR = (230, 84, 84)
FALSE_COLOR = (240, 180, 60)
TARGET_COLOR = (96, 140, 255)
TARGET_CORE = (240, 244, 255)

LIKELIHOOD_COLORS: dict[Likelihood, tuple[int, int, int]] = {
    Likelihood.HIGH: MISS_COLOR,
    Likelihood.MODERATE: FALSE_COLOR,
    Likelihood.LOW: (110, 180, 240),
    Likelihood.UNLIKELY: HIT_COLOR,
}

INSTRUCTIONS = [
    "Attention Screening",
    "",
    "How it works:",
    "Circular targets appear at random for 1.5 seconds.",
    "Click them as quickly and accurately as possible.",
    "",
    "What is measured:",
    "- Reaction time and consistency",
    "- Accuracy and impulse control",
    "- Sustained attention over 60 seconds",
    "",
    *wrap_words(DISCLAIMER, lambda line: len(line) <= 60),
    "",
    "Press Enter or click to start. Esc quits.",
]

# Line deltas for the scrolling results view; Home/End are clamped in render.
RESULTS_SCROLL_KEYS: dict[int, int] = {
    pygame.K_UP: -1,
    pygame.K_DOWN: 1,
    pygame.K_PAGEUP: -10,
    pygame.K_PAGEDOWN: 10,
    pygame.K_HOME: -1_000_000,
    pygame.K_END: 1_000_000,
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class ScreeningScreen:
    def __init__(self, app: App, *, session_factory: Callable[[], ScreeningSession]) -> None:
        self._app = app
        self._session_factory = session_factory
        self._session = session_factory()

        self._small_font = pygame.font.Font(None, 22)
        self._stat_font = pygame.font.Font(None, 40)
        self._title_font = pygame.font.Font(None, 44)
        self._big_font = pygame.font.Font(None, 200)

        self._results_scroll = 0
        self._rendered_text: list[str] = []

    @property
    def session(self) -> ScreeningSession:
        return self._session

    @property
    def results_scroll(self) -> int:
        return self._results_scroll

    @property
    def rendered_text(self) -> tuple[str, ...]:
        """Text lines drawn by the last results render, top to bottom."""
        return tuple(self._rendered_text)

    def handle_event(self, event: pygame.event.Event) -> None:
        phase = self._session.phase

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._app.quit()
            elif phase is Phase.IDLE and event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._start()
            elif phase is Phase.COMPLETE and event.key in (pygame.K_r, pygame.K_RETURN, pygame.K_KP_ENTER):
                self._restart()
            elif phase is Phase.COMPLETE and event.key in RESULTS_SCROLL_KEYS:
                self._scroll_results(RESULTS_SCROLL_KEYS[event.key])
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if phase is Phase.IDLE:
                self._start()
            elif phase is Phase.RUNNING:
                x, y = event.pos
                if y >= HUD_HEIGHT:
                    self._session.click(float(x), float(y - HUD_HEIGHT))
            return

        if event.type == pygame.MOUSEWHEEL and phase is Phase.COMPLETE:
            self._scroll_results(-3 * int(event.y))
            return

        if event.type == pygame.VIDEORESIZE:
            self._session.set_bounds(self._canvas_bounds(pygame.display.get_surface()))

    def render(self, surface: pygame.Surface) -> None:
        self._session.update()
        snap = self._session.snapshot()

        surface.fill(BG)
        if snap.phase is Phase.IDLE:
            self._render_lines(surface, INSTRUCTIONS, top=40)
        elif snap.phase is Phase.COUNTDOWN:
            self._render_countdown(surface, snap)
        elif snap.phase is Phase.RUNNING:
            self._render_hud(surface, snap)
            for target in snap.targets:
                self._render_target(surface, target)
        else:
            self._render_results(surface)

    def _start(self) -> None:
        self._session.start(self._canvas_bounds(pygame.display.get_surface()))

    def _restart(self) -> None:
        logger.info("Restarting screening session")
        self._session.reset()
        self._session = self._session_factory()
        self._results_scroll = 0

    @staticmethod
    def _canvas_bounds(surface: pygame.Surface | None) -> CanvasBounds | None:
        if surface is None:
            return None
        w, h = surface.get_size()
        return CanvasBounds(width=float(w), height=float(h - HUD_HEIGHT))

    def _render_lines(self, surface: pygame.Surface, lines: list[str], *, top: int) -> None:
        w, _ = surface.get_size()
        y = top
        for idx, line in enumerate(lines):
            font = self._title_font if idx == 0 else self._app.font
            color = TEXT_MAIN if idx == 0 else TEXT_MUTED
            text = font.render(line, True, color)
            surface.blit(text, text.get_rect(midtop=(w // 2, y)))
            y += text.get_height() + 6

    def _render_countdown(self, surface: pygame.Surface, snap: ScreeningSnapshot) -> None:
        w, h = surface.get_size()
        digit = self._big_font.render(str(snap.countdown_remaining), True, TARGET_COLOR)
        surface.blit(digit, digit.get_rect(center=(w // 2, h // 2 - 30)))
        ready = self._app.font.render("Get ready...", True, TEXT_MUTED)
        surface.blit(ready, ready.get_rect(center=(w // 2, h // 2 + 80)))

    def _render_hud(self, surface: pygame.Surface, snap: ScreeningSnapshot) -> None:
        w, _ = surface.get_size()
        hud = pygame.Rect(0, 0, w, HUD_HEIGHT)
        pygame.draw.rect(surface, PANEL_BG, hud)
        pygame.draw.line(surface, BORDER, (0, HUD_HEIGHT - 1), (w, HUD_HEIGHT - 1), 1)

        stats = (
            (str(snap.hits), "Hits", HIT_COLOR),
            (str(snap.missed_targets), "Missed", MISS_COLOR),
            (str(snap.false_clicks), "False Clicks", FALSE_COLOR),
        )
        x = 24
        for value, label, color in stats:
            v = self._stat_font.render(value, True, color)
            lab = self._small_font.render(label, True, TEXT_MUTED)
            surface.blit(v, (x, 8))
            surface.blit(lab, (x, 8 + v.get_height()))
            x += max(v.get_width(), lab.get_width()) + 36

        bar = pygame.Rect(24, HUD_HEIGHT - 16, w - 48, 8)
        pygame.draw.rect(surface, (40, 48, 84), bar)
        fill = bar.copy()
        fill.w = int(bar.w * snap.progress_pct / 100.0)
        pygame.draw.rect(surface, TARGET_COLOR, fill)

    def _render_target(self, surface: pygame.Surface, target: Target) -> None:
        center = (int(target.x), int(target.y) + HUD_HEIGHT)
        if target.clicked:
            # Shrinks away during the post-hit linger.
            pygame.draw.circle(surface, HIT_COLOR, center, TARGET_DRAW_RADIUS // 3)
            return
        pygame.draw.circle(surface, TARGET_COLOR, center, TARGET_DRAW_RADIUS)
        pygame.draw.circle(surface, TARGET_CORE, center, 6)

    def _scroll_results(self, delta: int) -> None:
        self._results_scroll = max(0, self._results_scroll + int(delta))

    def _blit_line(self, surface: pygame.Surface, line: str, pos: tuple[int, int], color: tuple[int, int, int]) -> None:
        surface.blit(self._small_font.render(line, True, color), pos)
        self._rendered_text.append(line)

    def _render_results(self, surface: pygame.Surface) -> None:
        self._rendered_text = []
        analysis = self._session.analysis
        record = self._session.record
        if analysis is None or record is None:
            return
        w, h = surface.get_size()
        header_text = f"{analysis.overall_score}%  {analysis.likelihood.value} likelihood"
        header = self._title_font.render(header_text, True, LIKELIHOOD_COLORS[analysis.likelihood])
        surface.blit(header, header.get_rect(midtop=(w // 2, 16)))
        self._rendered_text.append(header_text)

        tally_text = summary_line(record)
        tally = self._app.font.render(tally_text, True, TEXT_MAIN)
        surface.blit(tally, tally.get_rect(midtop=(w // 2, 16 + header.get_height() + 6)))
        self._rendered_text.append(tally_text)

        text_w = w - 64
        line_h = self._small_font.get_linesize() + 2

        def fits(line: str) -> bool:
            return self._small_font.size(line)[0] <= text_w

        # Footer (disclaimer + key hints) is pinned to the bottom of the window.
        hint_text = "Up/Down: Scroll  |  R/Enter: Restart  |  Esc: Quit"
        footer = disclaimer_lines(fits)
        hint_top = h - 10 - line_h
        footer_top = hint_top - len(footer) * line_h - 6
        pygame.draw.line(surface, BORDER, (24, footer_top - 6), (w - 24, footer_top - 6), 1)
        y = footer_top
        for line in footer:
            self._blit_line(surface, line, (32, y), TEXT_MAIN)
            y += line_h

        body = result_lines(analysis, fits=fits, include_disclaimer=False)[3:]
        top = 16 + header.get_height() + tally.get_height() + 18
        visible = max(1, (footer_top - 12 - top) // line_h)
        max_scroll = max(0, len(body) - visible)
        self._results_scroll = min(self._results_scroll, max_scroll)

        y = top
        for line in body[self._results_scroll : self._results_scroll + visible]:
            self._blit_line(surface, line, (32, y), TEXT_MUTED)
            y += line_h

        if self._results_scroll < max_scroll:
            more = self._small_font.render("More below", True, TARGET_COLOR)
            surface.blit(more, more.get_rect(bottomright=(w - 24, footer_top - 10)))

        hint = self._small_font.render(hint_text, True, TEXT_MAIN)
        surface.blit(hint, hint.get_rect(midbottom=(w // 2, h - 10)))
        self._rendered_text.append(hint_text)


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()

    pygame.display.set_caption("Attention Screening")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 28)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    real_clock = RealClock()

    def new_session() -> ScreeningSession:
        return build_screening_session(clock=real_clock, seed=_new_seed())

    app.push(ScreeningScreen(app, session_factory=new_session))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
