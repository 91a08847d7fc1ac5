from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .results import SpinOutcome

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class _Chooser(Protocol):
    def choice(self, seq: Sequence["Lead"]) -> "Lead": ...


@dataclass(frozen=True, slots=True)
class Lead:
    id: int
    name: str
    handle: str
    prize_won: str
    created_at_utc: str


def open_db(path: Path) -> sqlite3.Connection:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS lead (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                handle TEXT NOT NULL,
                prize_won TEXT NOT NULL,
                prize_index INTEGER NOT NULL,
                final_rotation_deg REAL NOT NULL,
                rng_seed INTEGER NOT NULL,
                created_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_lead_created_at ON lead(created_at_utc);")
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")
    logger.debug("lead store migrated to schema v%d", SCHEMA_VERSION)


def record_lead(*, db_path: Path, outcome: SpinOutcome, created_at_utc: str | None = None) -> int:
    """Append one lead (visitor + prize) and return its row id."""

    conn = open_db(db_path)
    try:
        with conn:
            cur = conn.execute(
                """
                INSERT INTO lead(
                    name, handle, prize_won, prize_index,
                    final_rotation_deg, rng_seed, created_at_utc
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(outcome.name),
                    str(outcome.handle),
                    str(outcome.prize_label),
                    int(outcome.prize_index),
                    float(outcome.final_rotation_deg),
                    int(outcome.seed),
                    created_at_utc or _utc_now_iso(),
                ),
            )
            lead_id = int(cur.lastrowid)
    finally:
        conn.close()
    logger.info("stored lead %d for %s", lead_id, outcome.handle)
    return lead_id


def list_leads(*, db_path: Path) -> list[Lead]:
    """All leads, newest first."""

    if not db_path.exists():
        return []
    conn = open_db(db_path)
    try:
        rows = conn.execute(
            """
            SELECT id, name, handle, prize_won, created_at_utc
            FROM lead
            ORDER BY created_at_utc DESC, id DESC
            """
        ).fetchall()
    finally:
        conn.close()
    return [
        Lead(
            id=int(r[0]),
            name=str(r[1]),
            handle=str(r[2]),
            prize_won=str(r[3]),
            created_at_utc=str(r[4]),
        )
        for r in rows
    ]


def pick_random_winner(leads: Sequence[Lead], rng: _Chooser) -> Lead | None:
    if not leads:
        return None
    return rng.choice(leads)
