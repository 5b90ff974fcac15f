from __future__ import annotations

from hotcore.contracts import TickSource


class ManualTickSource(TickSource):
    """Host-driven tick counter for local runtimes, replays and tests."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("tick source cannot start before zero")
        self._tick = start

    def current_tick(self) -> int:
        return self._tick

    def advance(self, ticks: int = 1) -> int:
        if ticks < 0:
            raise ValueError("time never moves backward")
        self._tick += ticks
        return self._tick

    def set(self, tick: int) -> None:
        if tick < self._tick:
            raise ValueError(f"cannot rewind tick source from {self._tick} to {tick}")
        self._tick = tick
