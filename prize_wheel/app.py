"""Pygame UI shell for the Prize Wheel.

Screens:
- Play (register -> wheel -> result, one visitor at a time)
- Leads (captured leads, newest first, with random winner draw)

Deterministic resolution/timing/RNG/state lives in prize_wheel/* (core modules).
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pygame

from .clock import RealClock
from .config import WheelSettings, default_db_path, load_settings
from .persistence import Lead, list_leads, pick_random_winner, record_lead
from .results import SpinOutcome
from .spin_engine import SeededRng, SpinEngine, WheelPhase, WheelSnapshot

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
HEADER_BG = (18, 30, 118)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
ACTIVE_BG = (244, 248, 255)
ACTIVE_TEXT = (14, 26, 74)
POINTER = (255, 215, 0)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

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


def _draw_frame(
    surface: pygame.Surface,
    title: str,
    tag: str,
    title_font: pygame.font.Font,
    tag_font: pygame.font.Font,
) -> pygame.Rect:
    """Panel + header chrome shared by all screens. Returns the content rect."""

    w, h = surface.get_size()
    surface.fill(BG)

    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, PANEL_BG, frame)
    pygame.draw.rect(surface, BORDER, frame, 2)

    header_h = max(34, min(52, h // 8))
    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
    pygame.draw.rect(surface, HEADER_BG, header)
    pygame.draw.line(surface, BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)

    tag_surf = tag_font.render(tag, True, TEXT_MUTED)
    surface.blit(tag_surf, (header.x + 12, header.y + (header.h - tag_surf.get_height()) // 2))
    title_surf = title_font.render(title, True, TEXT_MAIN)
    surface.blit(title_surf, title_surf.get_rect(center=(frame.centerx, header.centery)))

    return pygame.Rect(frame.x + 2, header.bottom + 1, frame.w - 4, frame.bottom - header.bottom - 3)


def _fit_label(font: pygame.font.Font, label: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if font.size(label)[0] <= max_width:
        return label
    clipped = label
    while clipped and font.size(f"{clipped}...")[0] > max_width:
        clipped = clipped[:-1]
    return f"{clipped}..." if clipped else "..."


def _wheel_point(cx: int, cy: int, radius: float, angle_deg: float) -> tuple[int, int]:
    # Wheel frame: 0 deg at 12 o'clock, increasing clockwise on screen.
    rad = math.radians(angle_deg)
    return int(round(cx + math.sin(rad) * radius)), int(round(cy - math.cos(rad) * radius))


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, self._title, "MENU", self._title_font, self._hint_font)
        w, h = surface.get_size()

        list_rect = pygame.Rect(
            content.x + max(14, w // 44),
            content.y + max(16, h // 30),
            content.w - max(28, w // 22),
            max(120, content.h - max(16, h // 30) - max(44, h // 12)),
        )
        pygame.draw.rect(surface, (6, 13, 92), list_rect)
        pygame.draw.rect(surface, (78, 102, 170), list_rect, 1)

        item_count = max(1, len(self._items))
        gap = max(4, min(10, list_rect.h // max(10, item_count * 3)))
        row_h = max(30, min(44, (list_rect.h - gap * (item_count + 1)) // item_count))
        total_h = row_h * item_count + gap * (item_count - 1)
        y = list_rect.y + max(8, (list_rect.h - total_h) // 2)

        for idx, item in enumerate(self._items):
            row = pygame.Rect(list_rect.x + 12, y, list_rect.w - 24, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, ACTIVE_BG, row)
                pygame.draw.rect(surface, (120, 142, 196), row, 2)
            else:
                pygame.draw.rect(surface, (9, 20, 106), row)
                pygame.draw.rect(surface, (62, 84, 152), row, 1)

            color = ACTIVE_TEXT if selected else TEXT_MAIN
            label = _fit_label(self._item_font, item.label, row.w - 20)
            text = self._item_font.render(label, True, color)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += row_h + gap

        foot = self._hint_font.render("Enter/Space: Select  |  Esc/Backspace: Back", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(content.centerx, content.bottom - 8)))


class WheelGameScreen:
    """One visitor: registration form, the wheel itself, then the result panel."""

    _max_field_len = 32

    def __init__(self, app: App, *, engine_factory: Callable[[], SpinEngine]) -> None:
        self._app = app
        self._engine = engine_factory()
        self._fields = ["", ""]
        self._active_field = 0
        self._message = ""

        self._title_font = pygame.font.Font(None, 42)
        self._small_font = pygame.font.Font(None, 28)
        self._tiny_font = pygame.font.Font(None, 20)
        self._big_font = pygame.font.Font(None, 52)

    @property
    def engine(self) -> SpinEngine:
        return self._engine

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = int(event.key)
        phase = self._engine.phase

        if phase is WheelPhase.REGISTER:
            self._handle_register_key(key, event.unicode)
            return

        if key == pygame.K_ESCAPE and phase is not WheelPhase.SPINNING:
            self._app.pop()
            return

        if phase is WheelPhase.READY and key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_KP_ENTER):
            self._engine.spin()
            return

        if phase is WheelPhase.RESULT and key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._engine.reset()
            self._fields = ["", ""]
            self._active_field = 0
            self._message = ""

    def _handle_register_key(self, key: int, ch: str) -> None:
        if key == pygame.K_ESCAPE:
            self._app.pop()
            return
        if key in (pygame.K_TAB, pygame.K_UP, pygame.K_DOWN):
            self._active_field = 1 - self._active_field
            return
        if key == pygame.K_BACKSPACE:
            self._fields[self._active_field] = self._fields[self._active_field][:-1]
            return
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if self._engine.register(self._fields[0], self._fields[1]):
                self._message = ""
            else:
                self._message = "Please fill in both your name and your handle."
            return
        if ch and ch.isprintable() and len(self._fields[self._active_field]) < self._max_field_len:
            self._fields[self._active_field] += ch

    def render(self, surface: pygame.Surface) -> None:
        self._engine.update()
        snap = self._engine.snapshot()

        tag = {
            WheelPhase.REGISTER: "Register",
            WheelPhase.READY: "Ready",
            WheelPhase.SPINNING: "Spinning",
            WheelPhase.REVEAL: "Winner",
            WheelPhase.RESULT: "Result",
        }.get(snap.phase, "Wheel")
        content = _draw_frame(surface, snap.title, tag, self._title_font, self._tiny_font)

        if snap.phase is WheelPhase.REGISTER:
            self._render_register(surface, content, snap)
        elif snap.phase is WheelPhase.RESULT:
            self._render_result(surface, content, snap)
        else:
            self._render_wheel_phase(surface, content, snap)

        if snap.input_hint:
            hint = self._tiny_font.render(snap.input_hint, True, TEXT_MUTED)
            surface.blit(hint, hint.get_rect(midbottom=(content.centerx, content.bottom - 8)))

    def _render_register(self, surface: pygame.Surface, content: pygame.Rect, snap: WheelSnapshot) -> None:
        prompt = self._small_font.render(snap.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(midtop=(content.centerx, content.y + 28)))

        box_w = min(520, content.w - 80)
        labels = ("Name", "Handle")
        y = content.y + 90
        for idx, label in enumerate(labels):
            lbl = self._tiny_font.render(label, True, TEXT_MUTED)
            box = pygame.Rect(content.centerx - box_w // 2, y + 20, box_w, 40)
            surface.blit(lbl, (box.x, y))
            active = idx == self._active_field
            pygame.draw.rect(surface, (9, 20, 106), box)
            pygame.draw.rect(surface, (120, 144, 198) if active else (62, 84, 152), box, 2)
            caret = "|" if active and (pygame.time.get_ticks() // 500) % 2 == 0 else ""
            text = _fit_label(self._small_font, self._fields[idx] + caret, box.w - 20)
            entry = self._small_font.render(text, True, TEXT_MAIN)
            surface.blit(entry, (box.x + 10, box.y + (box.h - entry.get_height()) // 2))
            y += 90

        if self._message:
            msg = self._tiny_font.render(self._message, True, (255, 160, 160))
            surface.blit(msg, msg.get_rect(midtop=(content.centerx, y + 10)))

    def _render_wheel_phase(self, surface: pygame.Surface, content: pygame.Rect, snap: WheelSnapshot) -> None:
        radius = max(60, min(content.w, content.h) // 2 - 56)
        cx = content.centerx
        cy = content.y + 24 + radius
        self._draw_wheel(surface, cx, cy, radius, snap)

        font = self._big_font if snap.won_prize else self._small_font
        prompt = font.render(snap.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(midtop=(cx, cy + radius + 12)))

    def _draw_wheel(self, surface: pygame.Surface, cx: int, cy: int, radius: int, snap: WheelSnapshot) -> None:
        prizes = snap.prizes
        count = len(prizes)
        segment = 360.0 / count
        rotation = snap.rotation_deg

        for i, prize in enumerate(prizes):
            start = i * segment + rotation
            steps = max(2, int(segment // 4))
            points = [(cx, cy)]
            points.extend(_wheel_point(cx, cy, radius, start + segment * s / steps) for s in range(steps + 1))
            pygame.draw.polygon(surface, prize.color, points)

        for i in range(count):
            pygame.draw.line(surface, BORDER, (cx, cy), _wheel_point(cx, cy, radius, i * segment + rotation), 1)
        pygame.draw.circle(surface, BORDER, (cx, cy), radius, 3)

        for i, prize in enumerate(prizes):
            center = i * segment + segment / 2.0 + rotation
            text = self._tiny_font.render(_fit_label(self._tiny_font, prize.label, radius - 40), True, (255, 255, 255))
            # Labels run outward along the segment's centre line.
            text = pygame.transform.rotate(text, 90.0 - center)
            surface.blit(text, text.get_rect(center=_wheel_point(cx, cy, radius * 0.62, center)))

        pygame.draw.circle(surface, ACTIVE_BG, (cx, cy), max(14, radius // 7))
        go = self._tiny_font.render("GO", True, ACTIVE_TEXT)
        surface.blit(go, go.get_rect(center=(cx, cy)))

        pointer = snap.pointer_offset_deg
        tip = _wheel_point(cx, cy, radius - 10, pointer)
        left = _wheel_point(cx, cy, radius + 22, pointer - 5)
        right = _wheel_point(cx, cy, radius + 22, pointer + 5)
        pygame.draw.polygon(surface, POINTER, [tip, left, right])

    def _render_result(self, surface: pygame.Surface, content: pygame.Rect, snap: WheelSnapshot) -> None:
        lines = snap.prompt.split("\n")
        y = content.y + content.h // 3
        for idx, line in enumerate(lines):
            font = self._title_font if idx == 0 else self._big_font
            text = font.render(line, True, TEXT_MAIN if idx == 0 else POINTER)
            surface.blit(text, text.get_rect(midtop=(content.centerx, y)))
            y += text.get_height() + 18


class LeadsScreen:
    """Captured leads, newest first. R draws a random winner."""

    def __init__(self, app: App, *, db_path: Path, rng: SeededRng | None = None) -> None:
        self._app = app
        self._db_path = db_path
        self._rng = rng or SeededRng(_new_seed())
        self._leads: list[Lead] = []
        self._winner: Lead | None = None
        self._scroll = 0
        self._message = ""
        self._title_font = pygame.font.Font(None, 40)
        self._small_font = pygame.font.Font(None, 26)
        self._tiny_font = pygame.font.Font(None, 20)
        self.refresh()

    @property
    def leads(self) -> list[Lead]:
        return list(self._leads)

    @property
    def winner(self) -> Lead | None:
        return self._winner

    def refresh(self) -> None:
        try:
            self._leads = list_leads(db_path=self._db_path)
            self._message = ""
        except Exception:
            logger.exception("Could not load leads from %s", self._db_path)
            self._leads = []
            self._message = "Could not load leads."
        self._scroll = min(self._scroll, max(0, len(self._leads) - 1))

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = int(event.key)
        if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
        elif key == pygame.K_r:
            self._winner = pick_random_winner(self._leads, self._rng)
            if self._winner is None:
                self._message = "No leads yet."
        elif key == pygame.K_F5:
            self.refresh()
        elif key == pygame.K_UP:
            self._scroll = max(0, self._scroll - 1)
        elif key == pygame.K_DOWN:
            self._scroll = min(max(0, len(self._leads) - 1), self._scroll + 1)

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, "Leads", f"{len(self._leads)} TOTAL", self._title_font, self._tiny_font)

        list_rect = pygame.Rect(content.x + 18, content.y + 16, content.w - 36, content.h - 110)
        pygame.draw.rect(surface, (6, 13, 92), list_rect)
        pygame.draw.rect(surface, (78, 102, 170), list_rect, 1)

        if not self._leads:
            note = self._small_font.render("No leads captured yet.", True, TEXT_MAIN)
            surface.blit(note, (list_rect.x + 12, list_rect.y + 12))

        y = list_rect.y + 8
        row_h = 30
        for lead in self._leads[self._scroll :]:
            if y + row_h > list_rect.bottom:
                break
            is_winner = self._winner is not None and lead.id == self._winner.id
            row = pygame.Rect(list_rect.x + 8, y, list_rect.w - 16, row_h)
            pygame.draw.rect(surface, ACTIVE_BG if is_winner else (9, 20, 106), row)
            color = ACTIVE_TEXT if is_winner else TEXT_MAIN
            label = f"{lead.created_at_utc}   {lead.name} ({lead.handle})   {lead.prize_won}"
            text = self._small_font.render(_fit_label(self._small_font, label, row.w - 16), True, color)
            surface.blit(text, (row.x + 8, row.y + (row.h - text.get_height()) // 2))
            y += row_h + 4

        if self._winner is not None:
            banner = self._small_font.render(
                f"Winner: {self._winner.name} ({self._winner.handle})", True, POINTER
            )
            surface.blit(banner, (list_rect.x, list_rect.bottom + 12))
        elif self._message:
            msg = self._small_font.render(self._message, True, TEXT_MUTED)
            surface.blit(msg, (list_rect.x, list_rect.bottom + 12))

        hint = self._tiny_font.render("R: Random winner  F5: Refresh  Up/Down: Scroll  Esc: Back", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(content.centerx, content.bottom - 8)))


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    settings: WheelSettings | None = None,
    db_path: Path | None = None,
) -> int:
    cfg = settings or load_settings()
    store_path = db_path or default_db_path()

    pygame.init()
    pygame.display.set_caption("Prize Wheel")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    app = App(surface=surface)
    real_clock = RealClock()

    def store_outcome(outcome: SpinOutcome) -> None:
        record_lead(db_path=store_path, outcome=outcome)

    def open_game() -> None:
        seed = _new_seed()
        app.push(
            WheelGameScreen(
                app,
                engine_factory=lambda: SpinEngine(
                    clock=real_clock,
                    seed=seed,
                    settings=cfg,
                    on_outcome=store_outcome,
                ),
            )
        )

    def open_leads() -> None:
        app.push(LeadsScreen(app, db_path=store_path))

    main_items = [
        MenuItem("Play", open_game),
        MenuItem("Leads", open_leads),
        MenuItem("Quit", app.quit),
    ]
    app.push(MenuScreen(app, "Prize Wheel", main_items, is_root=True))

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
