from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Iterator

from hotcore.contracts import EMPTY_IDENTITY, GenerationRecord


@dataclass(slots=True)
class GameState:
    """The single mutable aggregate of a running game.

    Owned by ``CoreGame``; controllers work on a copy and the facade swaps it in
    only after every step of an operation has succeeded.
    """

    current_holder: str = EMPTY_IDENTITY
    previous_holder: str = EMPTY_IDENTITY
    last_transfer_tick: int = 0
    last_activity_tick: int = 0
    active_generation_id: int = 0
    generation_counter: int = 0
    admin: str = EMPTY_IDENTITY
    initialized: bool = False
    active: bool = False

    def copy(self) -> GameState:
        return replace(self)

    def held_ticks(self, now: int) -> int:
        return max(0, now - self.last_transfer_tick)

    def inactive_ticks(self, now: int) -> int:
        return max(0, now - self.last_activity_tick)

    def snapshot(self) -> dict[str, Any]:
        return asdict(self)

    def invariant_violations(self) -> list[str]:
        issues: list[str] = []
        if not self.initialized:
            return issues
        if self.current_holder == EMPTY_IDENTITY:
            issues.append("current holder is empty")
        if self.current_holder == self.previous_holder:
            issues.append("current holder equals previous holder")
        if self.active_generation_id < 1:
            issues.append("no active generation")
        if self.active_generation_id > self.generation_counter:
            issues.append("active generation id exceeds generation counter")
        if self.last_transfer_tick > self.last_activity_tick:
            issues.append("last transfer tick is ahead of last activity tick")
        return issues


class DeathRegistry:
    """Generation id -> record of its last holder.

    Plain key-value storage; write-once is enforced by ``PhoenixController``.
    """

    def __init__(self) -> None:
        self._records: dict[int, GenerationRecord] = {}

    def get(self, generation_id: int) -> GenerationRecord | None:
        return self._records.get(generation_id)

    def put(self, record: GenerationRecord) -> None:
        self._records[record.generation_id] = record

    def __contains__(self, generation_id: object) -> bool:
        return generation_id in self._records

    def __iter__(self) -> Iterator[GenerationRecord]:
        return iter(sorted(self._records.values(), key=lambda r: r.generation_id))

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
