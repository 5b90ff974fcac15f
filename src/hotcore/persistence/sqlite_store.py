from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Iterable

from hotcore.contracts import (
    EMPTY_IDENTITY,
    GameEvent,
    GenerationRecord,
    LedgerReceipt,
    OwnershipLedger,
    Settlement,
    TransferKind,
    TransferRecord,
)
from hotcore.persistence.migrations import MigrationRunner


class AuthoritativeStore(OwnershipLedger):
    """SQLite-backed token ownership plus the durable game log.

    Doubles as the ``OwnershipLedger`` collaborator: each mint or transfer is a
    single committed statement, so a refusal leaves the table untouched.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize_schema(self) -> None:
        with self.connect() as conn:
            MigrationRunner(conn).apply()

    # === OwnershipLedger ===

    def mint(self, owner: str, generation_id: int) -> LedgerReceipt:
        if owner == EMPTY_IDENTITY:
            return LedgerReceipt(False, "cannot mint to the empty identity")
        with self.connect() as conn:
            try:
                conn.execute("INSERT INTO tokens(generation_id, owner) VALUES (?, ?)", (generation_id, owner))
            except sqlite3.IntegrityError:
                return LedgerReceipt(False, f"token {generation_id} already minted")
        return LedgerReceipt(True)

    def transfer_ownership(self, from_owner: str, to_owner: str, generation_id: int) -> LedgerReceipt:
        if to_owner == EMPTY_IDENTITY:
            return LedgerReceipt(False, "cannot transfer to the empty identity")
        with self.connect() as conn:
            cur = conn.execute(
                """
                UPDATE tokens SET owner = ?, updated_at = CURRENT_TIMESTAMP
                WHERE generation_id = ? AND owner = ?
                """,
                (to_owner, generation_id, from_owner),
            )
            if cur.rowcount != 1:
                return LedgerReceipt(False, f"{from_owner} does not own token {generation_id}")
        return LedgerReceipt(True)

    def owner_of(self, generation_id: int) -> str:
        with self.connect() as conn:
            row = conn.execute("SELECT owner FROM tokens WHERE generation_id = ?", (generation_id,)).fetchone()
        return str(row[0]) if row else EMPTY_IDENTITY

    # === Game log ===

    def save_transfer(self, record: TransferRecord) -> None:
        s = record.settlement
        with self.connect() as conn:
            seq = conn.execute("SELECT COALESCE(MAX(seq), 0) + 1 FROM transfers").fetchone()[0]
            conn.execute(
                """
                INSERT OR REPLACE INTO transfers(
                    transfer_id, seq, tick, generation_id, kind, from_holder, to_holder,
                    held_ticks, balance_before, balance_after, earned, penalty, penalty_periods
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.transfer_id,
                    seq,
                    record.tick,
                    record.generation_id,
                    record.kind.value,
                    record.from_holder,
                    record.to_holder,
                    s.held_ticks if s else None,
                    s.balance_before if s else None,
                    s.balance_after if s else None,
                    s.earned if s else None,
                    s.penalty if s else None,
                    s.penalty_periods if s else None,
                ),
            )

    def save_event(self, event: GameEvent) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO game_events(event_id, time, tick, scope, event_type, actors_json, claims_json, severity)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.event_id,
                    event.time.isoformat(),
                    event.tick,
                    event.scope,
                    event.event_type,
                    json.dumps(event.actors),
                    json.dumps(event.claims),
                    event.severity,
                ),
            )

    def save_points(self, balances: dict[str, int]) -> None:
        with self.connect() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO points(participant, balance) VALUES (?, ?)",
                sorted(balances.items()),
            )

    def save_generations(self, records: Iterable[GenerationRecord]) -> None:
        with self.connect() as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO generations(generation_id, last_holder, retired_tick, cause) VALUES (?, ?, ?, ?)",
                [(r.generation_id, r.last_holder, r.retired_tick, r.cause.value) for r in records],
            )

    def save_identities(self, handles: dict[str, int]) -> None:
        with self.connect() as conn:
            conn.execute("DELETE FROM identities")
            conn.executemany(
                "INSERT INTO identities(participant, handle) VALUES (?, ?)",
                sorted(handles.items()),
            )

    def save_game_state(self, snapshot: dict[str, Any], tick: int = 0) -> None:
        with self.connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO game_state(state_id, state_json, tick, saved_at) VALUES (1, ?, ?, CURRENT_TIMESTAMP)",
                (json.dumps(snapshot, sort_keys=True), tick),
            )

    def load_game_state(self) -> dict[str, Any] | None:
        with self.connect() as conn:
            row = conn.execute("SELECT state_json FROM game_state WHERE state_id = 1").fetchone()
        return json.loads(row[0]) if row else None

    def load_saved_tick(self) -> int:
        with self.connect() as conn:
            row = conn.execute("SELECT tick FROM game_state WHERE state_id = 1").fetchone()
        return int(row[0]) if row else 0

    def load_transfers(self) -> list[TransferRecord]:
        with self.connect() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("SELECT * FROM transfers ORDER BY seq").fetchall()
        records = []
        for r in rows:
            settlement = None
            if r["held_ticks"] is not None:
                settlement = Settlement(
                    holder=r["from_holder"],
                    held_ticks=r["held_ticks"],
                    balance_before=r["balance_before"],
                    balance_after=r["balance_after"],
                    earned=r["earned"],
                    penalty=r["penalty"],
                    penalty_periods=r["penalty_periods"] or 0,
                )
            records.append(
                TransferRecord(
                    transfer_id=r["transfer_id"],
                    tick=r["tick"],
                    generation_id=r["generation_id"],
                    kind=TransferKind(r["kind"]),
                    from_holder=r["from_holder"],
                    to_holder=r["to_holder"],
                    settlement=settlement,
                )
            )
        return records

    def load_points(self) -> dict[str, int]:
        with self.connect() as conn:
            rows = conn.execute("SELECT participant, balance FROM points ORDER BY participant").fetchall()
        return {str(p): int(b) for p, b in rows}

    def load_identities(self) -> dict[str, int]:
        with self.connect() as conn:
            rows = conn.execute("SELECT participant, handle FROM identities ORDER BY participant").fetchall()
        return {str(p): int(h) for p, h in rows}

    def load_generations(self) -> list[GenerationRecord]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT generation_id, last_holder, retired_tick, cause FROM generations ORDER BY generation_id"
            ).fetchall()
        return [GenerationRecord(int(g), str(h), int(t), TransferKind(c)) for g, h, t, c in rows]

    def event_count(self, scope: str | None = None) -> int:
        with self.connect() as conn:
            if scope is None:
                return int(conn.execute("SELECT COUNT(*) FROM game_events").fetchone()[0])
            return int(conn.execute("SELECT COUNT(*) FROM game_events WHERE scope = ?", (scope,)).fetchone()[0])
