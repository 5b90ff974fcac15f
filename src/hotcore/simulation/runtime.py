from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any

from hotcore.adapters import ManualTickSource
from hotcore.contracts import ActionRequest, ActionResult, ActionType, GameConfig
from hotcore.core import (
    DEFAULT_PROFILE_ID,
    EngineIntegrityError,
    EventBus,
    GameRuleError,
    build_forensic_artifact,
    load_game_config,
    normalize_identity,
    persist_forensic_artifact,
)
from hotcore.engine import CoreGame, build_leaderboard, meltdown_history, unlocked_achievements
from hotcore.export import ExportService
from hotcore.persistence import AnalyticsStore, AuthoritativeStore, run_analytics_refresh

MUTATING_ACTIONS = {
    ActionType.INITIALIZE,
    ActionType.PASS_CORE,
    ActionType.GRAB_CORE,
    ActionType.SPAWN_GENERATION,
    ActionType.ADMIN_RESET,
    ActionType.REGISTER_IDENTITY,
    ActionType.SET_ACTIVE,
}

PERSISTED_ACTIONS = MUTATING_ACTIONS | {ActionType.ADVANCE_TICKS}


class RuntimePaths:
    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def sqlite_path(self) -> Path:
        return self.root / "data" / "authoritative.sqlite3"

    @property
    def duckdb_path(self) -> Path:
        return self.root / "data" / "analytics.duckdb"

    @property
    def export_dir(self) -> Path:
        return self.root / "exports"

    @property
    def forensic_dir(self) -> Path:
        return self.root / "forensics"


class GameRuntime:
    """Host for one game: tick source, durable ledger, event log and action dispatch."""

    def __init__(
        self,
        root: Path,
        config: GameConfig | None = None,
        profile_id: str = DEFAULT_PROFILE_ID,
        start_tick: int = 0,
    ) -> None:
        self.paths = RuntimePaths(root)
        self.paths.sqlite_path.parent.mkdir(parents=True, exist_ok=True)

        self.config = config or load_game_config(profile_id)
        self.clock = ManualTickSource(start_tick)
        self.event_bus = EventBus()
        self.store = AuthoritativeStore(self.paths.sqlite_path)
        self.store.initialize_schema()
        self.event_bus.subscribe(self.store.save_event)
        self.game = CoreGame(self.config, ledger=self.store, clock=self.clock, event_bus=self.event_bus)

        self.halted = False
        self.last_forensic_path: str | None = None
        self._persisted_transfers = 0
        self._resume()

    def handle_action(self, request: ActionRequest) -> ActionResult:
        if self.halted:
            return ActionResult(
                request.request_id,
                False,
                f"runtime halted after integrity failure; forensic={self.last_forensic_path}",
                {"forensic_path": self.last_forensic_path},
                error_code="RUNTIME_HALTED",
            )

        try:
            return self._handle_action_core(request)
        except GameRuleError as exc:
            return ActionResult(request.request_id, False, str(exc), error_code=exc.code)
        except EngineIntegrityError as exc:
            self.last_forensic_path = str(persist_forensic_artifact(exc.artifact, self.paths.forensic_dir))
            self.halted = True
            return ActionResult(
                request.request_id,
                False,
                f"integrity failure: {exc.artifact.error_code}",
                {"forensic_path": self.last_forensic_path},
                error_code=exc.artifact.error_code,
            )
        except Exception as exc:
            artifact = build_forensic_artifact(
                engine_scope="runtime",
                error_code="UNHANDLED_RUNTIME_EXCEPTION",
                message=str(exc),
                state_snapshot=self.game.state.snapshot(),
                context={"action_type": str(request.action_type), "payload": request.payload, "tick": self.clock.current_tick()},
                identifiers={"request_id": request.request_id, "actor_id": request.actor_id},
                causal_fragment=["runtime_dispatch"],
            )
            self.last_forensic_path = str(persist_forensic_artifact(artifact, self.paths.forensic_dir))
            self.halted = True
            return ActionResult(
                request.request_id,
                False,
                f"runtime hard-stopped: {exc}",
                {"forensic_path": self.last_forensic_path},
                error_code="UNHANDLED_RUNTIME_EXCEPTION",
            )

    def _handle_action_core(self, request: ActionRequest) -> ActionResult:
        try:
            action = ActionType(request.action_type)
        except ValueError:
            return ActionResult(
                request.request_id,
                False,
                f"unsupported action '{request.action_type}'",
                error_code="UNSUPPORTED_ACTION",
            )
        try:
            result = self._dispatch(action, request)
        except (KeyError, TypeError, ValueError) as exc:
            return ActionResult(request.request_id, False, f"invalid payload: {exc}", error_code="INVALID_PAYLOAD")
        if action in PERSISTED_ACTIONS:
            self._persist()
        return result

    def _dispatch(self, action: ActionType, request: ActionRequest) -> ActionResult:
        rid, caller, payload = request.request_id, request.actor_id, request.payload
        game = self.game

        if action == ActionType.INITIALIZE:
            return self._state_result(rid, "core minted", game.initialize(caller))
        if action == ActionType.PASS_CORE:
            return self._state_result(rid, "core passed", game.pass_core(caller, str(payload["to"])))
        if action == ActionType.GRAB_CORE:
            return self._state_result(rid, "core grabbed", game.grab_core(caller))
        if action == ActionType.SPAWN_GENERATION:
            return self._state_result(rid, "new generation spawned", game.spawn_new_generation(caller))
        if action == ActionType.ADMIN_RESET:
            return self._state_result(rid, "admin reset complete", game.admin_reset(caller))
        if action == ActionType.REGISTER_IDENTITY:
            participant, handle = str(payload["participant"]), int(payload["handle"])
            game.register_identity(caller, participant, handle)
            return ActionResult(rid, True, "identity registered", {"participant": normalize_identity(participant), "handle": handle})
        if action == ActionType.SET_ACTIVE:
            active = bool(payload["active"])
            game.set_active(caller, active)
            return ActionResult(rid, True, "game resumed" if active else "game paused", {"active": active})
        if action == ActionType.ADVANCE_TICKS:
            tick = self.clock.advance(int(payload.get("ticks", 1)))
            return ActionResult(rid, True, f"advanced to tick {tick}", {"tick": tick})

        if action == ActionType.GET_GAME_STATE:
            return self._state_result(rid, "game state", game.game_state())
        if action == ActionType.GET_POINTS:
            participant = normalize_identity(payload.get("participant", caller))
            return ActionResult(rid, True, "points", {"participant": participant, "points": game.points_of(participant)})
        if action == ActionType.GET_DEAD_GENERATION:
            generation_id = int(payload["generation_id"])
            holder = game.dead_generation_holder(generation_id)
            return ActionResult(rid, True, "dead generation holder", {"generation_id": generation_id, "holder": holder})
        if action == ActionType.GET_LEADERBOARD:
            entries = build_leaderboard(
                game.history,
                game.points.balances(),
                game.state.current_holder,
                limit=int(payload.get("limit", 10)),
            )
            return ActionResult(rid, True, "leaderboard", {"leaderboard": [asdict(e) for e in entries]})
        if action == ActionType.GET_MELTDOWN_HISTORY:
            events = meltdown_history(game.history, limit=int(payload.get("limit", 50)))
            return ActionResult(rid, True, "meltdown history", {"meltdowns": [asdict(e) for e in events]})
        if action == ActionType.GET_ACHIEVEMENTS:
            participant = normalize_identity(payload.get("participant", caller))
            unlocked = unlocked_achievements(game.points_of(participant), game.history.grabs_by(participant))
            return ActionResult(rid, True, "achievements", {"participant": participant, "achievements": [a.achievement_id for a in unlocked]})
        if action == ActionType.GET_STABILITY:
            report = game.stability()
            data = asdict(report)
            data["level"] = report.level.value
            data["phase"] = game.phase().value
            data["can_respawn"] = game.can_respawn()
            return ActionResult(rid, True, "stability", data)

        return ActionResult(rid, False, f"unsupported action '{action.value}'", error_code="UNSUPPORTED_ACTION")

    def _state_result(self, request_id: str, message: str, view: Any) -> ActionResult:
        data = asdict(view)
        data["generation_counter"] = self.game.state.generation_counter
        data["tick"] = self.clock.current_tick()
        return ActionResult(request_id, True, message, data)

    def _resume(self) -> None:
        snapshot = self.store.load_game_state()
        if snapshot is None:
            return
        history = self.store.load_transfers()
        self.game.restore(
            snapshot,
            balances=self.store.load_points(),
            handles=self.store.load_identities(),
            deaths=self.store.load_generations(),
            history=history,
        )
        self._persisted_transfers = len(history)
        saved_tick = max(self.store.load_saved_tick(), self.game.state.last_activity_tick)
        if saved_tick > self.clock.current_tick():
            self.clock.set(saved_tick)

    def _persist(self) -> None:
        records = list(self.game.history)
        for record in records[self._persisted_transfers :]:
            self.store.save_transfer(record)
        self._persisted_transfers = len(records)
        self.store.save_points(self.game.points.balances())
        self.store.save_generations(self.game.deaths)
        self.store.save_identities(self.game.identities.handles())
        self.store.save_game_state(self.game.state.snapshot(), tick=self.clock.current_tick())

    def refresh_analytics(self) -> AnalyticsStore:
        return run_analytics_refresh(self.paths.sqlite_path, self.paths.duckdb_path)

    def export(self) -> list[Path]:
        self.refresh_analytics()
        return ExportService(self.paths.duckdb_path).export_required_datasets(self.paths.export_dir)
