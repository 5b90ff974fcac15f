from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from hotcore.contracts import ActionRequest, ActionType, GameConfig, GenerationRecord, TransferKind
from hotcore.simulation import GameRuntime, ReplayHarness
from tests.helpers import ADMIN, act


def _count(conn: sqlite3.Connection, query: str, params: tuple = ()) -> int:
    return int(conn.execute(query, params).fetchone()[0])


def test_action_flow_reports_state_and_error_codes(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    minted = act(runtime, ActionType.INITIALIZE)
    assert minted.success
    assert minted.data["current_holder"] == ADMIN
    assert minted.data["generation_counter"] == 1

    act(runtime, ActionType.ADVANCE_TICKS, ticks=10)
    passed = act(runtime, ActionType.PASS_CORE, to="bob")
    assert passed.success
    assert passed.data["previous_holder"] == ADMIN

    back = act(runtime, ActionType.PASS_CORE, "bob", to=ADMIN)
    assert not back.success
    assert back.error_code == "PREVIOUS_HOLDER"
    assert not runtime.halted

    grab = act(runtime, ActionType.GRAB_CORE, "carol")
    assert grab.error_code == "STILL_STABLE"

    missing = act(runtime, ActionType.PASS_CORE, "bob")
    assert missing.error_code == "INVALID_PAYLOAD"

    unknown = runtime.handle_action(ActionRequest("r1", "launch_rocket", {}, ADMIN))
    assert unknown.error_code == "UNSUPPORTED_ACTION"


def test_committed_actions_are_persisted(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    act(runtime, ActionType.INITIALIZE)
    act(runtime, ActionType.ADVANCE_TICKS, ticks=250)
    act(runtime, ActionType.PASS_CORE, to="bob")
    act(runtime, ActionType.PASS_CORE, "bob", to=ADMIN)

    with sqlite3.connect(runtime.paths.sqlite_path) as conn:
        assert _count(conn, "SELECT COUNT(*) FROM transfers") == 2
        assert _count(conn, "SELECT COUNT(*) FROM tokens WHERE generation_id = 1 AND owner = 'bob'") == 1
        assert _count(conn, "SELECT balance FROM points WHERE participant = ?", (ADMIN,)) == 20
        assert _count(conn, "SELECT COUNT(*) FROM game_events WHERE scope = 'possession'") == 1
    assert runtime.event_bus.emitted_count("possession") == 1
    assert runtime.store.load_game_state()["current_holder"] == "bob"


def test_phoenix_flow_through_runtime(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    act(runtime, ActionType.INITIALIZE)
    act(runtime, ActionType.PASS_CORE, to="holder")
    act(runtime, ActionType.ADVANCE_TICKS, ticks=1000)

    stability = act(runtime, ActionType.GET_STABILITY)
    assert stability.data["level"] == "meltdown"
    assert stability.data["phase"] == "melting"
    assert act(runtime, ActionType.SPAWN_GENERATION, "phoenix").error_code == "COOLDOWN_ACTIVE"

    act(runtime, ActionType.ADVANCE_TICKS, ticks=1701)
    spawned = act(runtime, ActionType.SPAWN_GENERATION, "phoenix")
    assert spawned.success
    assert spawned.data["active_generation_id"] == 2

    dead = act(runtime, ActionType.GET_DEAD_GENERATION, generation_id=1)
    assert dead.data["holder"] == "holder"
    assert runtime.store.owner_of(2) == "phoenix"
    assert [r.last_holder for r in runtime.store.load_generations()] == ["holder"]


def test_integrity_failure_halts_and_writes_forensics(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    act(runtime, ActionType.INITIALIZE)
    runtime.game.deaths.put(GenerationRecord(1, "ghost", 0, TransferKind.PHOENIX))
    act(runtime, ActionType.ADVANCE_TICKS, ticks=5000)

    result = act(runtime, ActionType.SPAWN_GENERATION, "phoenix")
    assert not result.success
    assert result.error_code == "DEATH_RECORD_REWRITE"
    assert runtime.halted
    forensic = Path(result.data["forensic_path"])
    assert json.loads(forensic.read_text(encoding="utf-8"))["engine_scope"] == "phoenix"

    after = act(runtime, ActionType.GET_GAME_STATE)
    assert after.error_code == "RUNTIME_HALTED"


def test_identity_and_achievement_queries(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    act(runtime, ActionType.INITIALIZE)
    assert act(runtime, ActionType.REGISTER_IDENTITY, "bob", participant="bob", handle=1).error_code == "NOT_ADMIN"
    act(runtime, ActionType.REGISTER_IDENTITY, participant="bob", handle=7)
    act(runtime, ActionType.REGISTER_IDENTITY, participant="carol", handle=7)
    act(runtime, ActionType.PASS_CORE, to="bob")
    assert act(runtime, ActionType.PASS_CORE, "bob", to="carol").error_code == "DUPLICATE_IDENTITY"

    act(runtime, ActionType.ADVANCE_TICKS, ticks=900)
    act(runtime, ActionType.PASS_CORE, "bob", to="dave")
    achievements = act(runtime, ActionType.GET_ACHIEVEMENTS, "bob")
    assert achievements.data["achievements"] == ["first_hold"]
    points = act(runtime, ActionType.GET_POINTS, participant="BOB")
    assert points.data == {"participant": "bob", "points": 90}


def test_analytics_refresh_and_export(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    act(runtime, ActionType.INITIALIZE)
    act(runtime, ActionType.ADVANCE_TICKS, ticks=300)
    act(runtime, ActionType.PASS_CORE, to="bob")
    act(runtime, ActionType.ADVANCE_TICKS, ticks=1000)
    act(runtime, ActionType.GRAB_CORE, "carol")

    analytics = runtime.refresh_analytics()
    board = analytics.leaderboard(current_holder="carol")
    assert board[0].participant == ADMIN
    assert board[0].points == 30
    assert {e.participant for e in board} == {ADMIN, "bob", "carol"}
    assert analytics.meltdown_count("bob") == 1

    outputs = runtime.export()
    assert all(p.exists() for p in outputs)
    assert (runtime.paths.export_dir / "meltdowns.csv") in outputs


def test_replay_harness_determinism(tmp_path: Path):
    harness = ReplayHarness(config=GameConfig(safe_limit_ticks=60, interval_ticks=10, phoenix_cooldown_ticks=30))
    harness.record(ActionType.INITIALIZE, actor_id=ADMIN)
    harness.record(ActionType.ADVANCE_TICKS, {"ticks": 45}, ADMIN)
    harness.record(ActionType.PASS_CORE, {"to": "bob"}, ADMIN)
    harness.record(ActionType.ADVANCE_TICKS, {"ticks": 200}, ADMIN)
    harness.record(ActionType.SPAWN_GENERATION, {}, "carol")
    harness.record(ActionType.PASS_CORE, {"to": "bob"}, "carol")

    path = tmp_path / "replay.json"
    harness.save(path)
    loaded = ReplayHarness.load(path)
    a, b = loaded.replay(tmp_path)
    assert a == b
    assert a["state"]["active_generation_id"] == 2
    assert a["deaths"] == {1: "bob"}


def test_runtime_resumes_saved_game_on_restart(tmp_path: Path):
    first = GameRuntime(root=tmp_path)
    act(first, ActionType.INITIALIZE)
    act(first, ActionType.REGISTER_IDENTITY, participant="carol", handle=7)
    act(first, ActionType.ADVANCE_TICKS, ticks=250)
    act(first, ActionType.PASS_CORE, to="bob")
    act(first, ActionType.ADVANCE_TICKS, ticks=40)

    second = GameRuntime(root=tmp_path)
    state = act(second, ActionType.GET_GAME_STATE)
    assert state.data["current_holder"] == "bob"
    assert state.data["previous_holder"] == ADMIN
    assert state.data["active_generation_id"] == 1
    assert state.data["tick"] == 290
    assert second.game.points_of(ADMIN) == 20
    assert second.game.identity_of("carol") == 7
    assert [r.to_holder for r in second.game.history] == [ADMIN, "bob"]
    assert second.game.history.latest().settlement.balance_after == 20

    assert act(second, ActionType.INITIALIZE).error_code == "ALREADY_INITIALIZED"
    assert act(second, ActionType.PASS_CORE, "bob", to=ADMIN).error_code == "PREVIOUS_HOLDER"

    act(second, ActionType.ADVANCE_TICKS, ticks=210)
    passed = act(second, ActionType.PASS_CORE, "bob", to="carol")
    assert passed.success
    assert second.game.points_of("bob") == 20
    with sqlite3.connect(second.paths.sqlite_path) as conn:
        assert _count(conn, "SELECT COUNT(*) FROM transfers") == 3
        assert _count(conn, "SELECT handle FROM identities WHERE participant = 'carol'") == 7


def test_runtime_restart_keeps_death_records(tmp_path: Path):
    first = GameRuntime(root=tmp_path)
    act(first, ActionType.INITIALIZE)
    act(first, ActionType.PASS_CORE, to="holder")
    act(first, ActionType.ADVANCE_TICKS, ticks=2701)
    act(first, ActionType.SPAWN_GENERATION, "phoenix")

    second = GameRuntime(root=tmp_path)
    assert second.game.dead_generation_holder(1) == "holder"
    assert second.game.state.generation_counter == 2
    assert act(second, ActionType.PASS_CORE, "phoenix", to="bob").success
    assert second.store.owner_of(2) == "bob"
