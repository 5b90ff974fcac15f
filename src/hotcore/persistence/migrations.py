from __future__ import annotations

import sqlite3

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            applied_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS tokens (
            generation_id INTEGER PRIMARY KEY,
            owner TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS transfers (
            transfer_id TEXT PRIMARY KEY,
            seq INTEGER NOT NULL,
            tick INTEGER NOT NULL,
            generation_id INTEGER NOT NULL,
            kind TEXT NOT NULL,
            from_holder TEXT NOT NULL,
            to_holder TEXT NOT NULL,
            held_ticks INTEGER,
            balance_before INTEGER,
            balance_after INTEGER,
            earned INTEGER,
            penalty INTEGER,
            FOREIGN KEY (generation_id) REFERENCES tokens(generation_id)
        );

        CREATE TABLE IF NOT EXISTS points (
            participant TEXT PRIMARY KEY,
            balance INTEGER NOT NULL CHECK (balance >= 0)
        );

        CREATE TABLE IF NOT EXISTS generations (
            generation_id INTEGER PRIMARY KEY,
            last_holder TEXT NOT NULL,
            retired_tick INTEGER NOT NULL,
            cause TEXT NOT NULL
        );
        """,
    ),
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS game_events (
            event_id TEXT PRIMARY KEY,
            time TEXT NOT NULL,
            tick INTEGER NOT NULL,
            scope TEXT NOT NULL,
            event_type TEXT NOT NULL,
            actors_json TEXT NOT NULL,
            claims_json TEXT NOT NULL,
            severity TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS game_state (
            state_id INTEGER PRIMARY KEY CHECK (state_id = 1),
            state_json TEXT NOT NULL,
            saved_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_transfers_seq ON transfers(seq);
        """,
    ),
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS identities (
            participant TEXT PRIMARY KEY,
            handle INTEGER NOT NULL CHECK (handle > 0)
        );

        ALTER TABLE transfers ADD COLUMN penalty_periods INTEGER;
        ALTER TABLE game_state ADD COLUMN tick INTEGER NOT NULL DEFAULT 0;
        """,
    ),
]


class MigrationRunner:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def apply(self) -> None:
        self.conn.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT DEFAULT CURRENT_TIMESTAMP)")
        applied = {
            row[0]
            for row in self.conn.execute("SELECT version FROM schema_migrations").fetchall()
        }
        for version, sql in MIGRATIONS:
            if version in applied:
                continue
            self.conn.executescript(sql)
            self.conn.execute("INSERT INTO schema_migrations(version) VALUES (?)", (version,))
        self.conn.commit()