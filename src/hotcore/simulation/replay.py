from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path

from hotcore.contracts import ActionRequest, ActionType, GameConfig
from hotcore.core import make_id
from hotcore.simulation.runtime import GameRuntime


@dataclass(slots=True)
class ReplayAction:
    action_type: str
    payload: dict
    actor_id: str


class ReplayHarness:
    def __init__(self, config: GameConfig, start_tick: int = 0) -> None:
        self.config = config
        self.start_tick = start_tick
        self.actions: list[ReplayAction] = []

    def record(self, action_type: ActionType | str, payload: dict | None = None, actor_id: str = "") -> None:
        if isinstance(action_type, ActionType):
            action_type = action_type.value
        self.actions.append(ReplayAction(action_type=action_type, payload=dict(payload or {}), actor_id=actor_id))

    def save(self, path: Path) -> None:
        data = {
            "config": asdict(self.config),
            "start_tick": self.start_tick,
            "actions": [{"action_type": a.action_type, "payload": a.payload, "actor_id": a.actor_id} for a in self.actions],
        }
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @staticmethod
    def load(path: Path) -> ReplayHarness:
        data = json.loads(path.read_text(encoding="utf-8"))
        config = GameConfig(**{k: int(v) for k, v in data["config"].items()})
        config.validate()
        harness = ReplayHarness(config=config, start_tick=int(data.get("start_tick", 0)))
        for raw in data["actions"]:
            harness.actions.append(ReplayAction(action_type=raw["action_type"], payload=raw["payload"], actor_id=raw["actor_id"]))
        return harness

    def run(self, root: Path) -> GameRuntime:
        runtime = GameRuntime(root=root, config=self.config, start_tick=self.start_tick)
        for action in self.actions:
            runtime.handle_action(ActionRequest(make_id("req"), action.action_type, action.payload, action.actor_id))
        return runtime

    def replay(self, root: Path) -> tuple[dict, dict]:
        runtime_a = self.run(root / "replay_a")
        runtime_b = self.run(root / "replay_b")
        return self.fingerprint(runtime_a), self.fingerprint(runtime_b)

    @staticmethod
    def fingerprint(runtime: GameRuntime) -> dict:
        game = runtime.game
        return {
            "tick": runtime.clock.current_tick(),
            "state": game.state.snapshot(),
            "points": dict(sorted(game.points.balances().items())),
            "deaths": {r.generation_id: r.last_holder for r in game.deaths},
            "transfers": [(r.tick, r.kind.value, r.from_holder, r.to_holder, r.generation_id) for r in game.history],
            "halted": runtime.halted,
        }
