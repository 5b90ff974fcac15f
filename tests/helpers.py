from __future__ import annotations

from hotcore.adapters import InMemoryOwnershipLedger, ManualTickSource
from hotcore.contracts import ActionRequest, ActionResult, ActionType, GameConfig
from hotcore.core import make_id
from hotcore.engine import CoreGame

ADMIN = "admin"

# safe limit 900, interval 100 / 10 pts, burn 5% per 30 ticks, cooldown 1800, inactivity 86400
DEFAULT_CONFIG = GameConfig()


class SettableClock:
    def __init__(self, tick: int = 0) -> None:
        self.tick = tick

    def current_tick(self) -> int:
        return self.tick


def new_game(config: GameConfig | None = None, start_tick: int = 0) -> tuple[CoreGame, ManualTickSource, InMemoryOwnershipLedger]:
    clock = ManualTickSource(start_tick)
    ledger = InMemoryOwnershipLedger()
    game = CoreGame(config or DEFAULT_CONFIG, ledger=ledger, clock=clock)
    game.initialize(ADMIN)
    return game, clock, ledger


def act(runtime, action: ActionType, actor: str = ADMIN, **payload) -> ActionResult:
    return runtime.handle_action(ActionRequest(make_id("req"), action, payload, actor))
