from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Prize:
    label: str
    color: tuple[int, int, int]

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "color": "#%02X%02X%02X" % self.color}

    @classmethod
    def from_dict(cls, data: object) -> "Prize | None":
        if not isinstance(data, dict):
            return None
        label = str(data.get("label", "")).strip()
        if label == "":
            return None
        color = parse_hex_color(data.get("color"))
        if color is None:
            color = (107, 114, 128)
        return cls(label=label, color=color)


# Segment order: index 0 starts at angle 0 and indices increase with angle.
DEFAULT_PRIZES: tuple[Prize, ...] = (
    Prize("Descuento 10%", (0xEF, 0x44, 0x44)),
    Prize("Ebook Gratis", (0x3B, 0x82, 0xF6)),
    Prize("Voucher $500", (0x10, 0xB9, 0x81)),
    Prize("Consultoría", (0xF5, 0x9E, 0x0B)),
    Prize("Intenta de nuevo", (0x6B, 0x72, 0x80)),
    Prize("Sorpresa", (0x8B, 0x5C, 0xF6)),
)


def prize_for_index(prizes: tuple[Prize, ...] | list[Prize], index: int) -> Prize:
    if not prizes:
        raise ValueError("prizes must not be empty")
    return prizes[int(index) % len(prizes)]


def parse_hex_color(value: object) -> tuple[int, int, int] | None:
    """Parse ``#RRGGBB`` (or ``RRGGBB``) into an RGB tuple."""

    if not isinstance(value, str):
        return None
    text = value.strip().lstrip("#")
    if len(text) != 6:
        return None
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        return None
