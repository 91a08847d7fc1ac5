from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_POINTER_OFFSET_DEG = 270.0
DEFAULT_DEADBAND_DEG = 0.5


class InvalidConfiguration(ValueError):
    """Raised when the wheel cannot be resolved for the given inputs."""


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Winning index plus the intermediates needed to compute a stop correction."""

    index: int
    centers: tuple[float, ...]
    target_angle: float
    base_modulo: float
    segment_angle: float


def normalize_deg(angle: float) -> float:
    """Fold any finite angle into [0, 360)."""

    value = ((float(angle) % 360.0) + 360.0) % 360.0
    # Float remainder of a tiny negative angle can round up to the modulus.
    if value >= 360.0:
        return 0.0
    return value


def circular_distance_deg(a: float, b: float) -> float:
    """Shortest separation of two angles on the circle, in [0, 180]."""

    return abs(((a - b + 540.0) % 360.0) - 180.0)


def signed_delta_deg(from_deg: float, to_deg: float) -> float:
    """Signed shortest rotation taking ``from_deg`` onto ``to_deg``, in [-180, 180)."""

    return ((to_deg - from_deg + 540.0) % 360.0) - 180.0


def segment_centers(prize_count: int) -> tuple[float, ...]:
    _check_prize_count(prize_count)
    segment_angle = 360.0 / prize_count
    return tuple((i * segment_angle + segment_angle / 2.0) % 360.0 for i in range(prize_count))


def resolve(
    rotation_deg: float,
    prize_count: int,
    pointer_offset: float = DEFAULT_POINTER_OFFSET_DEG,
) -> ResolutionResult:
    """Return the segment that sits under the pointer after ``rotation_deg``.

    Rotating the wheel by ``r`` moves every point of the wheel forward by
    ``r``, so the segment under the pointer is the one whose un-rotated centre
    is closest to ``pointer_offset - r``. Ties go to the lowest index.
    """

    _check_prize_count(prize_count)
    _check_finite("rotation_deg", rotation_deg)
    _check_finite("pointer_offset", pointer_offset)

    base_modulo = normalize_deg(rotation_deg)
    segment_angle = 360.0 / prize_count
    centers = segment_centers(prize_count)
    target_angle = normalize_deg(float(pointer_offset) - base_modulo)

    closest_index = 0
    closest_dist = math.inf
    for i, center in enumerate(centers):
        diff = circular_distance_deg(center, target_angle)
        if diff < closest_dist:
            closest_dist = diff
            closest_index = i

    return ResolutionResult(
        index=closest_index,
        centers=centers,
        target_angle=target_angle,
        base_modulo=base_modulo,
        segment_angle=segment_angle,
    )


def correction_for(
    rotation_deg: float,
    winning_index: int,
    centers: tuple[float, ...] | list[float],
    pointer_offset: float = DEFAULT_POINTER_OFFSET_DEG,
    deadband_deg: float = DEFAULT_DEADBAND_DEG,
) -> float:
    """Smallest signed adjustment that centres ``winning_index`` under the pointer.

    Adjustments smaller than ``deadband_deg`` are dropped (returns 0.0).
    """

    _check_finite("rotation_deg", rotation_deg)
    _check_finite("pointer_offset", pointer_offset)
    _check_finite("deadband_deg", deadband_deg)
    if deadband_deg < 0:
        raise InvalidConfiguration("deadband_deg must be >= 0")
    if not centers:
        raise InvalidConfiguration("centers must not be empty")
    if isinstance(winning_index, bool) or not isinstance(winning_index, int):
        raise InvalidConfiguration(f"winning_index must be an int, got {winning_index!r}")
    if not (0 <= winning_index < len(centers)):
        raise InvalidConfiguration(
            f"winning_index {winning_index} out of range for {len(centers)} segments"
        )

    chosen_center = float(centers[winning_index])
    current_center_after = (chosen_center + (float(rotation_deg) % 360.0) + 360.0) % 360.0
    signed_raw = signed_delta_deg(current_center_after, float(pointer_offset))
    if abs(signed_raw) < deadband_deg:
        return 0.0
    return signed_raw


def final_rotation_for(
    rotation_deg: float,
    resolution: ResolutionResult,
    *,
    pointer_offset: float = DEFAULT_POINTER_OFFSET_DEG,
    deadband_deg: float = DEFAULT_DEADBAND_DEG,
) -> tuple[float, float]:
    """Return ``(correction, final_rotation)`` for a resolved spin."""

    correction = correction_for(
        rotation_deg,
        resolution.index,
        resolution.centers,
        pointer_offset,
        deadband_deg,
    )
    return correction, float(rotation_deg) + correction


def _check_prize_count(prize_count: int) -> None:
    if isinstance(prize_count, bool) or not isinstance(prize_count, int):
        raise InvalidConfiguration(f"prize_count must be an int, got {prize_count!r}")
    if prize_count < 1:
        raise InvalidConfiguration(f"prize_count must be >= 1, got {prize_count}")


def _check_finite(name: str, value: float) -> None:
    try:
        ok = math.isfinite(value)
    except TypeError:
        raise InvalidConfiguration(f"{name} must be a real number, got {value!r}") from None
    if not ok:
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")
