from .game import CoreGame
from .identity import IdentityRegistry
from .insights import (
    ACHIEVEMENTS,
    TransferHistory,
    build_leaderboard,
    meltdown_history,
    stability_report,
    unlocked_achievements,
)
from .phoenix import PhoenixController
from .points import PointsLedger
from .possession import PossessionController, Transition
from .state import DeathRegistry, GameState

__all__ = [
    "ACHIEVEMENTS",
    "CoreGame",
    "DeathRegistry",
    "GameState",
    "IdentityRegistry",
    "PhoenixController",
    "PointsLedger",
    "PossessionController",
    "TransferHistory",
    "Transition",
    "build_leaderboard",
    "meltdown_history",
    "stability_report",
    "unlocked_achievements",
]
