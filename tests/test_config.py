from __future__ import annotations

from pathlib import Path

import pytest

from prize_wheel.config import (
    DB_PATH_ENV,
    SETTINGS_PATH_ENV,
    WheelSettings,
    default_db_path,
    default_settings_path,
    load_settings,
    save_settings,
)
from prize_wheel.prizes import DEFAULT_PRIZES, Prize, parse_hex_color, prize_for_index


def test_defaults_match_the_reference_wheel() -> None:
    s = WheelSettings()
    assert s.pointer_offset_deg == 270.0
    assert s.deadband_deg == 0.5
    assert s.full_turns == 5
    assert s.spin_duration_s == pytest.approx(3.0)
    assert len(s.prizes) == 6
    assert s.prizes[0].label == "Descuento 10%"


def test_from_dict_falls_back_and_clamps() -> None:
    s = WheelSettings.from_dict(
        {
            "pointer_offset_deg": -90,
            "deadband_deg": 99,
            "full_turns": "lots",
            "spin_duration_s": -1,
            "prizes": [{"label": "A", "color": "#FF0000"}, {"label": ""}, "junk", {"label": "B"}],
        }
    )
    assert s.pointer_offset_deg == 270.0
    assert s.deadband_deg == 5.0
    assert s.full_turns == 5
    assert s.spin_duration_s == pytest.approx(3.0)
    assert s.prizes == (Prize("A", (255, 0, 0)), Prize("B", (107, 114, 128)))


def test_from_dict_non_mapping_and_empty_prizes_use_defaults() -> None:
    assert WheelSettings.from_dict(["nope"]) == WheelSettings()
    assert WheelSettings.from_dict({"prizes": []}).prizes == DEFAULT_PRIZES


def test_round_trip_through_json_file(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    original = WheelSettings(
        pointer_offset_deg=90.0,
        deadband_deg=0.25,
        full_turns=3,
        prizes=(Prize("Mug", (1, 2, 3)), Prize("Pen", (250, 251, 252))),
    )
    save_settings(original, path)
    assert load_settings(path) == original
    assert WheelSettings.from_dict(WheelSettings().to_dict()) == WheelSettings()


def test_load_missing_or_corrupt_file_returns_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "absent.json") == WheelSettings()
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert load_settings(bad) == WheelSettings()


def test_paths_honour_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "leads.db"))
    monkeypatch.setenv(SETTINGS_PATH_ENV, str(tmp_path / "wheel.json"))
    assert default_db_path() == tmp_path / "leads.db"
    assert default_settings_path() == tmp_path / "wheel.json"

    monkeypatch.delenv(DB_PATH_ENV)
    assert default_db_path().name == ".prize_wheel_leads.sqlite3"


def test_prize_helpers() -> None:
    assert parse_hex_color("#3B82F6") == (0x3B, 0x82, 0xF6)
    assert parse_hex_color("3b82f6") == (0x3B, 0x82, 0xF6)
    assert parse_hex_color("#12345") is None
    assert parse_hex_color("#GGGGGG") is None
    assert parse_hex_color(123) is None

    assert prize_for_index(DEFAULT_PRIZES, 2).label == "Voucher $500"
    assert prize_for_index(DEFAULT_PRIZES, 8).label == "Voucher $500"
    with pytest.raises(ValueError):
        prize_for_index((), 0)
