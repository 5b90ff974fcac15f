from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

import duckdb

from hotcore.contracts import LeaderboardEntry


class AnalyticsStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> Any:
        return duckdb.connect(str(self.db_path))

    def initialize_schema(self) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS mart_transfers (
                    transfer_id VARCHAR PRIMARY KEY,
                    seq INTEGER,
                    tick BIGINT,
                    generation_id INTEGER,
                    kind VARCHAR,
                    from_holder VARCHAR,
                    to_holder VARCHAR,
                    held_ticks BIGINT,
                    balance_before BIGINT,
                    balance_after BIGINT,
                    earned BIGINT,
                    penalty BIGINT
                );

                CREATE TABLE IF NOT EXISTS mart_holder_stats (
                    participant VARCHAR PRIMARY KEY,
                    holds INTEGER,
                    grabs_made INTEGER,
                    times_grabbed INTEGER,
                    points BIGINT,
                    last_active_tick BIGINT
                );

                CREATE TABLE IF NOT EXISTS mart_meltdowns (
                    transfer_id VARCHAR PRIMARY KEY,
                    tick BIGINT,
                    generation_id INTEGER,
                    defaulter VARCHAR,
                    hero VARCHAR
                );

                CREATE TABLE IF NOT EXISTS mart_generations (
                    generation_id INTEGER PRIMARY KEY,
                    last_holder VARCHAR,
                    retired_tick BIGINT,
                    cause VARCHAR
                );
                """
            )

    def refresh_from_sqlite(self, sqlite_path: Path) -> None:
        self.initialize_schema()
        with sqlite3.connect(sqlite_path) as sconn, self.connect() as dconn:
            transfer_rows = sconn.execute(
                """
                SELECT transfer_id, seq, tick, generation_id, kind, from_holder, to_holder,
                       held_ticks, balance_before, balance_after, earned, penalty
                FROM transfers ORDER BY seq
                """
            ).fetchall()
            self._replace_rows(dconn, "mart_transfers", transfer_rows)

            meltdown_rows = [
                (r[0], r[2], r[3], r[5], r[6])
                for r in transfer_rows
                if r[4] == "grab"
            ]
            self._replace_rows(dconn, "mart_meltdowns", meltdown_rows)

            generation_rows = sconn.execute(
                "SELECT generation_id, last_holder, retired_tick, cause FROM generations ORDER BY generation_id"
            ).fetchall()
            self._replace_rows(dconn, "mart_generations", generation_rows)

            points = dict(sconn.execute("SELECT participant, balance FROM points").fetchall())
            self._refresh_holder_stats(dconn, transfer_rows, points)

    def leaderboard(self, limit: int = 10, current_holder: str = "") -> list[LeaderboardEntry]:
        with self.connect() as conn:
            rows = conn.execute(
                f"""
                SELECT participant, points, holds, last_active_tick
                FROM mart_holder_stats
                ORDER BY points DESC, holds DESC, participant ASC
                LIMIT {int(limit)}
                """
            ).fetchall()
        return [
            LeaderboardEntry(
                rank=idx + 1,
                participant=str(participant),
                points=int(points),
                holds=int(holds),
                is_active=participant == current_holder,
                last_active_tick=int(last_tick),
            )
            for idx, (participant, points, holds, last_tick) in enumerate(rows)
        ]

    def meltdown_count(self, participant: str | None = None) -> int:
        with self.connect() as conn:
            if participant is None:
                return int(conn.execute("SELECT COUNT(*) FROM mart_meltdowns").fetchone()[0])
            return int(conn.execute("SELECT COUNT(*) FROM mart_meltdowns WHERE defaulter = ?", [participant]).fetchone()[0])

    def _refresh_holder_stats(self, conn: Any, transfer_rows: list[tuple], points: dict[str, int]) -> None:
        stats: dict[str, list[int]] = {}
        for row in transfer_rows:
            tick, kind, from_holder, to_holder = row[2], row[4], row[5], row[6]
            entry = stats.setdefault(to_holder, [0, 0, 0, tick])
            entry[0] += 1
            entry[3] = max(entry[3], tick)
            if kind == "grab":
                entry[1] += 1
                if from_holder:
                    stats.setdefault(from_holder, [0, 0, 0, tick])[2] += 1
        self._replace_rows(
            conn,
            "mart_holder_stats",
            [(p, v[0], v[1], v[2], int(points.get(p, 0)), v[3]) for p, v in sorted(stats.items())],
        )

    def _replace_rows(self, conn: Any, table: str, rows: list[tuple]) -> None:
        conn.execute(f"DELETE FROM {table}")
        if not rows:
            return
        values_placeholder = ",".join(["?"] * len(rows[0]))
        conn.executemany(f"INSERT INTO {table} VALUES ({values_placeholder})", rows)
