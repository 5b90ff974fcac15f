from __future__ import annotations

from dataclasses import dataclass, field

from hotcore.contracts import ActionRequest, ActionType, GenerationPhase
from hotcore.core import PythonRandomSource, make_id
from hotcore.engine import build_leaderboard
from hotcore.simulation.runtime import GameRuntime


@dataclass(slots=True)
class AutoplaySummary:
    rounds: int
    final_tick: int
    generations: int
    passes: int = 0
    grabs: int = 0
    respawns: int = 0
    rejected: dict[str, int] = field(default_factory=dict)
    leaderboard: list[tuple[str, int]] = field(default_factory=list)


class AutoplaySimulator:
    """Seeded bots playing against a runtime, for tuning profile timings.

    Each round time advances by a random fraction of the safe window (sometimes
    well past it), then the holder tries to pass, or, once the core has melted,
    a random bot tries to grab or respawn it.
    """

    def __init__(self, runtime: GameRuntime, players: list[str], rng: PythonRandomSource, stall_probability: float = 0.2) -> None:
        if len(players) < 3:
            raise ValueError("autoplay needs at least three players")
        self.runtime = runtime
        self.players = players
        self.rng = rng
        self.stall_probability = stall_probability

    def run(self, rounds: int) -> AutoplaySummary:
        runtime = self.runtime
        admin = self.players[0]
        if not runtime.game.state.initialized:
            self._act(ActionType.INITIALIZE, admin)

        summary = AutoplaySummary(rounds=rounds, final_tick=0, generations=0)
        cfg = runtime.config
        for _ in range(rounds):
            if self.rng.rand() < self.stall_probability:
                step = self.rng.randint(cfg.safe_limit_ticks, cfg.respawn_threshold_ticks + cfg.safe_limit_ticks)
            else:
                step = self.rng.randint(1, cfg.safe_limit_ticks)
            self._act(ActionType.ADVANCE_TICKS, admin, {"ticks": step})

            phase = runtime.game.phase()
            holder = runtime.game.state.current_holder
            others = [p for p in self.players if p != holder]
            if phase == GenerationPhase.DEAD:
                self._tally(summary, "respawns", self._act(ActionType.SPAWN_GENERATION, self.rng.choice(others)))
            elif phase == GenerationPhase.MELTING:
                self._tally(summary, "grabs", self._act(ActionType.GRAB_CORE, self.rng.choice(others)))
            else:
                target = self.rng.choice(others)
                self._tally(summary, "passes", self._act(ActionType.PASS_CORE, holder, {"to": target}))

        state = runtime.game.state
        summary.final_tick = runtime.clock.current_tick()
        summary.generations = state.generation_counter
        summary.leaderboard = [
            (e.participant, e.points)
            for e in build_leaderboard(runtime.game.history, runtime.game.points.balances(), state.current_holder)
        ]
        return summary

    def _act(self, action: ActionType, actor: str, payload: dict | None = None):
        return self.runtime.handle_action(ActionRequest(make_id("req"), action, payload or {}, actor))

    def _tally(self, summary: AutoplaySummary, counter: str, result) -> None:
        if result.success:
            setattr(summary, counter, getattr(summary, counter) + 1)
            return
        code = result.error_code or "UNKNOWN"
        summary.rejected[code] = summary.rejected.get(code, 0) + 1
