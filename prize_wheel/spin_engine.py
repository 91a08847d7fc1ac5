from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from .clock import Clock
from .config import WheelSettings
from .prizes import Prize, prize_for_index
from .results import SpinOutcome, spin_outcome_from_engine
from .wheel_core import ResolutionResult, final_rotation_for, resolve

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WheelPhase(str, Enum):
    REGISTER = "register"
    READY = "ready"
    SPINNING = "spinning"
    REVEAL = "reveal"
    RESULT = "result"


@dataclass(frozen=True, slots=True)
class SpinPlan:
    start_rotation_deg: float
    extra_degrees: int
    base_rotation_deg: float
    correction_deg: float
    final_rotation_deg: float
    resolution: ResolutionResult
    started_at_s: float


@dataclass(frozen=True, slots=True)
class WheelSnapshot:
    """View model for the UI (pure data)."""

    title: str
    phase: WheelPhase
    prompt: str
    input_hint: str
    rotation_deg: float
    pointer_offset_deg: float
    prizes: tuple[Prize, ...]
    first_name: str
    won_prize: str | None = None


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)


def ease_out_quart(t: float) -> float:
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    return 1.0 - (1.0 - t) ** 4


class SpinEngine:
    """Drives one visitor through register -> spin -> reveal -> result.

    - Deterministic: spin offsets come from an RNG seeded at construction.
    - Time is entirely via injected Clock; the UI calls update() every frame.
    - The winner is whatever the resolver returns for the drawn rotation; the
      correction only makes the wheel come to rest centred on it.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        seed: int,
        settings: WheelSettings | None = None,
        on_outcome: Callable[[SpinOutcome], None] | None = None,
    ) -> None:
        cfg = settings or WheelSettings()
        if not cfg.prizes:
            raise ValueError("settings.prizes must not be empty")
        if cfg.full_turns < 0:
            raise ValueError("full_turns must be >= 0")
        if cfg.spin_duration_s <= 0:
            raise ValueError("spin_duration_s must be > 0")
        if cfg.reveal_delay_s < 0:
            raise ValueError("reveal_delay_s must be >= 0")

        self._settings = cfg
        self._clock = clock
        self._seed = int(seed)
        self._rng = SeededRng(self._seed)
        self._on_outcome = on_outcome

        self._phase = WheelPhase.REGISTER
        self._name = ""
        self._handle = ""
        self._rotation_deg = 0.0
        self._plan: SpinPlan | None = None
        self._won_prize: Prize | None = None
        self._settled_at_s: float | None = None
        self._last_outcome: SpinOutcome | None = None

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def phase(self) -> WheelPhase:
        return self._phase

    @property
    def settings(self) -> WheelSettings:
        return self._settings

    @property
    def prizes(self) -> tuple[Prize, ...]:
        return self._settings.prizes

    @property
    def name(self) -> str:
        return self._name

    @property
    def handle(self) -> str:
        return self._handle

    @property
    def first_name(self) -> str:
        return self._name.split(" ")[0] if self._name else ""

    @property
    def plan(self) -> SpinPlan | None:
        return self._plan

    @property
    def won_prize(self) -> Prize | None:
        return self._won_prize

    @property
    def last_outcome(self) -> SpinOutcome | None:
        return self._last_outcome

    def is_spinning(self) -> bool:
        return self._phase is WheelPhase.SPINNING

    def register(self, name: str, handle: str) -> bool:
        """Accept a visitor. Returns True if both fields are filled in."""

        if self._phase is not WheelPhase.REGISTER:
            return False
        name = name.strip()
        handle = handle.strip()
        if name == "" or handle == "":
            return False
        self._name = name
        self._handle = handle
        self._phase = WheelPhase.READY
        return True

    def spin(self) -> SpinPlan | None:
        if self._phase is not WheelPhase.READY:
            return None

        cfg = self._settings
        extra = self._rng.randint(0, 359)
        base = float(cfg.full_turns * 360 + extra)
        resolution = resolve(base, len(cfg.prizes), cfg.pointer_offset_deg)
        correction, final = final_rotation_for(
            base,
            resolution,
            pointer_offset=cfg.pointer_offset_deg,
            deadband_deg=cfg.deadband_deg,
        )

        self._plan = SpinPlan(
            start_rotation_deg=self._rotation_deg,
            extra_degrees=extra,
            base_rotation_deg=base,
            correction_deg=correction,
            final_rotation_deg=final,
            resolution=resolution,
            started_at_s=self._clock.now(),
        )
        self._phase = WheelPhase.SPINNING
        logger.debug(
            "spin planned: base=%.1f target=%.1f index=%d correction=%.3f final=%.3f",
            base,
            resolution.target_angle,
            resolution.index,
            correction,
            final,
        )
        return self._plan

    def update(self) -> None:
        if self._phase is WheelPhase.SPINNING:
            assert self._plan is not None
            if self._clock.now() - self._plan.started_at_s >= self._settings.spin_duration_s:
                self._settle()
        if self._phase is WheelPhase.REVEAL:
            assert self._settled_at_s is not None
            if self._clock.now() - self._settled_at_s >= self._settings.reveal_delay_s:
                self._phase = WheelPhase.RESULT

    def rotation_deg(self) -> float:
        if self._phase is not WheelPhase.SPINNING:
            return self._rotation_deg
        assert self._plan is not None
        elapsed = self._clock.now() - self._plan.started_at_s
        progress = ease_out_quart(elapsed / self._settings.spin_duration_s)
        start = self._plan.start_rotation_deg
        return start + (self._plan.final_rotation_deg - start) * progress

    def reset(self) -> None:
        self._phase = WheelPhase.REGISTER
        self._name = ""
        self._handle = ""
        self._rotation_deg = 0.0
        self._plan = None
        self._won_prize = None
        self._settled_at_s = None

    def current_prompt(self) -> str:
        if self._phase is WheelPhase.REGISTER:
            return "Enter your name and handle to play."
        if self._phase is WheelPhase.READY:
            return f"Good luck, {self.first_name}! Press Space to spin."
        if self._phase is WheelPhase.SPINNING:
            return "Spinning..."
        assert self._won_prize is not None
        if self._phase is WheelPhase.REVEAL:
            return f"You won: {self._won_prize.label}"
        return f"Congratulations {self.first_name}!\nYour prize: {self._won_prize.label}"

    def snapshot(self) -> WheelSnapshot:
        return WheelSnapshot(
            title="Prize Wheel",
            phase=self._phase,
            prompt=self.current_prompt(),
            input_hint=_INPUT_HINTS[self._phase],
            rotation_deg=self.rotation_deg(),
            pointer_offset_deg=float(self._settings.pointer_offset_deg),
            prizes=self._settings.prizes,
            first_name=self.first_name,
            won_prize=None if self._won_prize is None else self._won_prize.label,
        )

    def _settle(self) -> None:
        assert self._plan is not None
        self._rotation_deg = self._plan.final_rotation_deg
        self._won_prize = prize_for_index(self._settings.prizes, self._plan.resolution.index)
        self._settled_at_s = self._plan.started_at_s + self._settings.spin_duration_s
        self._phase = WheelPhase.REVEAL

        outcome = spin_outcome_from_engine(self)
        self._last_outcome = outcome
        logger.info("%s (%s) won %s", outcome.name, outcome.handle, outcome.prize_label)

        if self._on_outcome is None:
            return
        try:
            self._on_outcome(outcome)
        except Exception:
            # The visitor still sees their prize when the lead cannot be stored.
            logger.exception("Error saving lead for %s", outcome.handle)


_INPUT_HINTS: dict[WheelPhase, str] = {
    WheelPhase.REGISTER: "Tab: switch field  |  Enter: continue",
    WheelPhase.READY: "Space/Enter: spin  |  Esc: back",
    WheelPhase.SPINNING: "",
    WheelPhase.REVEAL: "",
    WheelPhase.RESULT: "Enter: play again  |  Esc: back",
}
