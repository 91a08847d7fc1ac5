from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .prizes import DEFAULT_PRIZES, Prize
from .wheel_core import DEFAULT_DEADBAND_DEG, DEFAULT_POINTER_OFFSET_DEG, normalize_deg

logger = logging.getLogger(__name__)

SETTINGS_PATH_ENV = "PRIZE_WHEEL_SETTINGS_PATH"
DB_PATH_ENV = "PRIZE_WHEEL_DB_PATH"


@dataclass(frozen=True, slots=True)
class WheelSettings:
    # Measured in the same frame as segment centres (clockwise from 12 o'clock on screen).
    pointer_offset_deg: float = DEFAULT_POINTER_OFFSET_DEG
    deadband_deg: float = DEFAULT_DEADBAND_DEG
    full_turns: int = 5
    spin_duration_s: float = 3.0
    # Prize stays on the wheel this long before the result panel replaces it.
    reveal_delay_s: float = 2.7
    prizes: tuple[Prize, ...] = DEFAULT_PRIZES

    def to_dict(self) -> dict[str, Any]:
        return {
            "pointer_offset_deg": float(self.pointer_offset_deg),
            "deadband_deg": float(self.deadband_deg),
            "full_turns": int(self.full_turns),
            "spin_duration_s": float(self.spin_duration_s),
            "reveal_delay_s": float(self.reveal_delay_s),
            "prizes": [p.to_dict() for p in self.prizes],
        }

    @classmethod
    def from_dict(cls, data: object) -> "WheelSettings":
        if not isinstance(data, dict):
            return cls()

        prizes: tuple[Prize, ...] = DEFAULT_PRIZES
        raw_prizes = data.get("prizes")
        if isinstance(raw_prizes, list):
            parsed = tuple(p for p in (Prize.from_dict(item) for item in raw_prizes) if p is not None)
            if parsed:
                prizes = parsed

        return cls(
            pointer_offset_deg=normalize_deg(
                _as_float(data.get("pointer_offset_deg"), DEFAULT_POINTER_OFFSET_DEG)
            ),
            deadband_deg=_clamp(_as_float(data.get("deadband_deg"), DEFAULT_DEADBAND_DEG), 0.0, 5.0),
            full_turns=int(_clamp(_as_float(data.get("full_turns"), 5.0), 1.0, 20.0)),
            spin_duration_s=_positive(_as_float(data.get("spin_duration_s"), 3.0), 3.0),
            reveal_delay_s=_clamp(_as_float(data.get("reveal_delay_s"), 2.7), 0.0, 30.0),
            prizes=prizes,
        )


def default_settings_path() -> Path:
    explicit = os.environ.get(SETTINGS_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".prize_wheel_settings.json"


def default_db_path() -> Path:
    explicit = os.environ.get(DB_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".prize_wheel_leads.sqlite3"


def load_settings(path: Path | None = None) -> WheelSettings:
    """Load settings from JSON; a missing or malformed file yields defaults."""

    settings_path = default_settings_path() if path is None else path
    if not settings_path.exists():
        return WheelSettings()
    try:
        payload = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Could not read settings from %s; using defaults", settings_path, exc_info=True)
        return WheelSettings()
    return WheelSettings.from_dict(payload)


def save_settings(settings: WheelSettings, path: Path | None = None) -> None:
    settings_path = default_settings_path() if path is None else path
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = settings_path.with_suffix(f"{settings_path.suffix}.tmp")
    tmp_path.write_text(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    tmp_path.replace(settings_path)


def _as_float(value: object, fallback: float) -> float:
    if isinstance(value, bool):
        return fallback
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(out):
        return fallback
    return out


def _clamp(value: float, lo: float, hi: float) -> float:
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def _positive(value: float, fallback: float) -> float:
    return value if value > 0 else fallback
