from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from hotcore.contracts import (
    Achievement,
    GameConfig,
    LeaderboardEntry,
    MeltdownEvent,
    StabilityLevel,
    StabilityReport,
    TransferKind,
    TransferRecord,
)

ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement("first_hold", "First Contact", "Hold the Core for the first time", "points", 1),
    Achievement("centurion", "Centurion", "Accumulate 100+ points", "points", 100),
    Achievement("survivor", "Survivor", "Secure the Core 5+ times", "grabs", 5),
    Achievement("whale", "Whale", "Accumulate 1,000+ points", "points", 1000),
)

WARNING_HEAT = 0.5
CRITICAL_HEAT = 0.8


class TransferHistory:
    """Append-only log of every committed change of possession."""

    def __init__(self) -> None:
        self._records: list[TransferRecord] = []

    def append(self, record: TransferRecord) -> None:
        self._records.append(record)

    def __iter__(self) -> Iterator[TransferRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def latest(self) -> TransferRecord | None:
        return self._records[-1] if self._records else None

    def grabs_by(self, participant: str) -> int:
        return sum(1 for r in self._records if r.kind == TransferKind.GRAB and r.to_holder == participant)

    def clear(self) -> None:
        self._records.clear()


def build_leaderboard(
    history: Iterable[TransferRecord],
    points: Mapping[str, int],
    current_holder: str,
    limit: int = 10,
) -> list[LeaderboardEntry]:
    holds: dict[str, int] = {}
    last_seen: dict[str, int] = {}
    for record in history:
        holds[record.to_holder] = holds.get(record.to_holder, 0) + 1
        last_seen[record.to_holder] = max(last_seen.get(record.to_holder, record.tick), record.tick)

    ordered = sorted(holds, key=lambda p: (-points.get(p, 0), -holds[p], p))
    return [
        LeaderboardEntry(
            rank=idx + 1,
            participant=participant,
            points=points.get(participant, 0),
            holds=holds[participant],
            is_active=participant == current_holder,
            last_active_tick=last_seen[participant],
        )
        for idx, participant in enumerate(ordered[: max(limit, 0)])
    ]


def meltdown_history(history: Iterable[TransferRecord], limit: int = 50) -> list[MeltdownEvent]:
    events = [
        MeltdownEvent(
            event_id=record.transfer_id,
            tick=record.tick,
            generation_id=record.generation_id,
            defaulter=record.from_holder,
            hero=record.to_holder,
        )
        for record in history
        if record.kind == TransferKind.GRAB
    ]
    events.reverse()
    return events[: max(limit, 0)]


def unlocked_achievements(points: int, grab_count: int) -> list[Achievement]:
    metrics = {"points": points, "grabs": grab_count}
    return [a for a in ACHIEVEMENTS if metrics[a.metric] >= a.threshold]


def stability_report(held_ticks: int, config: GameConfig) -> StabilityReport:
    held = max(0, held_ticks)
    heat = held / config.safe_limit_ticks
    percent = max(0.0, min(100.0, (1.0 - heat) * 100.0))
    if held > config.safe_limit_ticks:
        level = StabilityLevel.MELTDOWN
        alerts = [f"Core melted {held - config.safe_limit_ticks} ticks ago - open to grabs"]
    elif heat >= CRITICAL_HEAT:
        level = StabilityLevel.CRITICAL
        alerts = [f"Stability at {percent:.0f}% - MELTDOWN IMMINENT"]
    elif heat >= WARNING_HEAT:
        level = StabilityLevel.WARNING
        alerts = ["Stability below 50% - Monitor closely"]
    else:
        level = StabilityLevel.NOMINAL
        alerts = []
    return StabilityReport(held_ticks=held, heat=heat, stability_percent=percent, level=level, alerts=alerts)
