from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .spin_engine import SpinEngine


@dataclass(frozen=True, slots=True)
class SpinOutcome:
    """Persistable summary of one settled spin."""

    name: str
    handle: str
    prize_index: int
    prize_label: str
    final_rotation_deg: float
    seed: int


def spin_outcome_from_engine(engine: SpinEngine) -> SpinOutcome:
    """Build a SpinOutcome from an engine whose wheel has stopped."""

    plan = engine.plan
    prize = engine.won_prize
    if plan is None or prize is None:
        raise ValueError("engine has not settled a spin yet")

    return SpinOutcome(
        name=engine.name,
        handle=engine.handle,
        prize_index=int(plan.resolution.index),
        prize_label=str(prize.label),
        final_rotation_deg=float(plan.final_rotation_deg),
        seed=int(engine.seed),
    )
