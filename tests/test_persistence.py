from __future__ import annotations

import random
import sqlite3
from pathlib import Path

from prize_wheel.persistence import (
    SCHEMA_VERSION,
    list_leads,
    open_db,
    pick_random_winner,
    record_lead,
)
from prize_wheel.results import SpinOutcome
from prize_wheel.spin_engine import SeededRng


def _outcome(name: str, handle: str, prize: str = "Sorpresa", index: int = 5) -> SpinOutcome:
    return SpinOutcome(
        name=name,
        handle=handle,
        prize_index=index,
        prize_label=prize,
        final_rotation_deg=1830.0,
        seed=11,
    )


def test_record_and_list_newest_first(tmp_path: Path) -> None:
    db = tmp_path / "leads.sqlite3"
    first = record_lead(db_path=db, outcome=_outcome("Ana", "@ana"), created_at_utc="2026-01-01T10:00:00Z")
    second = record_lead(
        db_path=db,
        outcome=_outcome("Bo", "@bo", "Ebook Gratis", 1),
        created_at_utc="2026-01-02T09:00:00Z",
    )
    third = record_lead(db_path=db, outcome=_outcome("Cy", "@cy"), created_at_utc="2026-01-02T09:00:00Z")

    leads = list_leads(db_path=db)
    assert [lead.id for lead in leads] == [third, second, first]
    assert leads[1].name == "Bo"
    assert leads[1].handle == "@bo"
    assert leads[1].prize_won == "Ebook Gratis"
    assert leads[2].created_at_utc == "2026-01-01T10:00:00Z"


def test_default_timestamp_is_iso_utc(tmp_path: Path) -> None:
    db = tmp_path / "leads.sqlite3"
    record_lead(db_path=db, outcome=_outcome("Ana", "@ana"))
    (lead,) = list_leads(db_path=db)
    assert len(lead.created_at_utc) == 20
    assert lead.created_at_utc.endswith("Z")
    assert lead.created_at_utc[10] == "T"


def test_list_on_missing_store_is_empty(tmp_path: Path) -> None:
    db = tmp_path / "nope" / "leads.sqlite3"
    assert list_leads(db_path=db) == []
    assert not db.exists()


def test_migration_is_idempotent(tmp_path: Path) -> None:
    db = tmp_path / "leads.sqlite3"
    open_db(db).close()
    conn = open_db(db)
    try:
        assert conn.execute("PRAGMA user_version;").fetchone()[0] == SCHEMA_VERSION
        cols = [row[1] for row in conn.execute("PRAGMA table_info(lead);")]
    finally:
        conn.close()
    assert cols[:5] == ["id", "name", "handle", "prize_won", "prize_index"]


def test_spin_details_are_stored(tmp_path: Path) -> None:
    db = tmp_path / "leads.sqlite3"
    record_lead(db_path=db, outcome=_outcome("Ana", "@ana"))
    conn = sqlite3.connect(db)
    try:
        row = conn.execute("SELECT prize_index, final_rotation_deg, rng_seed FROM lead").fetchone()
    finally:
        conn.close()
    assert row == (5, 1830.0, 11)


def test_pick_random_winner(tmp_path: Path) -> None:
    assert pick_random_winner([], random.Random(1)) is None

    db = tmp_path / "leads.sqlite3"
    for i in range(5):
        record_lead(db_path=db, outcome=_outcome(f"P{i}", f"@p{i}"))
    leads = list_leads(db_path=db)

    w1 = pick_random_winner(leads, random.Random(3))
    w2 = pick_random_winner(leads, random.Random(3))
    assert w1 is not None
    assert w1 == w2
    assert w1 in leads


def test_random_winner_draw_is_reproducible_with_seeded_rng(tmp_path: Path) -> None:
    db = tmp_path / "leads.sqlite3"
    for i in range(8):
        record_lead(db_path=db, outcome=_outcome(f"P{i}", f"@p{i}"))
    leads = list_leads(db_path=db)

    draws = [pick_random_winner(leads, SeededRng(99)) for _ in range(3)]
    assert draws[0] is not None
    assert draws[0] in leads
    assert draws.count(draws[0]) == 3
    assert pick_random_winner([], SeededRng(99)) is None
