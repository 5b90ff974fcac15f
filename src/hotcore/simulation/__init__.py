from .autoplay import AutoplaySimulator, AutoplaySummary
from .replay import ReplayAction, ReplayHarness
from .runtime import GameRuntime, RuntimePaths

__all__ = [
    "AutoplaySimulator",
    "AutoplaySummary",
    "GameRuntime",
    "ReplayAction",
    "ReplayHarness",
    "RuntimePaths",
]
