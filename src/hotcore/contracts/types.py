from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence

EMPTY_IDENTITY = ""
UNREGISTERED_HANDLE = 0
BPS_DENOMINATOR = 10_000


class ActionType(str, Enum):
    INITIALIZE = "initialize"
    PASS_CORE = "pass_core"
    GRAB_CORE = "grab_core"
    SPAWN_GENERATION = "spawn_generation"
    ADMIN_RESET = "admin_reset"
    REGISTER_IDENTITY = "register_identity"
    SET_ACTIVE = "set_active"
    ADVANCE_TICKS = "advance_ticks"
    GET_GAME_STATE = "get_game_state"
    GET_POINTS = "get_points"
    GET_DEAD_GENERATION = "get_dead_generation"
    GET_LEADERBOARD = "get_leaderboard"
    GET_MELTDOWN_HISTORY = "get_meltdown_history"
    GET_ACHIEVEMENTS = "get_achievements"
    GET_STABILITY = "get_stability"


class GenerationPhase(str, Enum):
    STABLE = "stable"
    MELTING = "melting"
    DEAD = "dead"


class TransferKind(str, Enum):
    GENESIS = "genesis"
    PASS = "pass"
    GRAB = "grab"
    PHOENIX = "phoenix"
    ADMIN_RESET = "admin_reset"


class StabilityLevel(str, Enum):
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"
    MELTDOWN = "meltdown"


@dataclass(slots=True)
class LedgerReceipt:
    ok: bool
    reason: str = ""


class OwnershipLedger(Protocol):
    def mint(self, owner: str, generation_id: int) -> LedgerReceipt: ...

    def transfer_ownership(self, from_owner: str, to_owner: str, generation_id: int) -> LedgerReceipt: ...


class TickSource(Protocol):
    def current_tick(self) -> int: ...


class RandomSource(Protocol):
    def rand(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...

    def choice(self, items: Sequence[Any]) -> Any: ...


@dataclass(frozen=True, slots=True)
class GameConfig:
    points_per_interval: int = 10
    interval_ticks: int = 100
    safe_limit_ticks: int = 900
    burn_rate_bps: int = 500
    burn_interval_ticks: int = 30
    inactivity_limit_ticks: int = 86_400
    phoenix_cooldown_ticks: int = 1_800

    def validate(self) -> None:
        positive = {
            "interval_ticks": self.interval_ticks,
            "safe_limit_ticks": self.safe_limit_ticks,
            "burn_interval_ticks": self.burn_interval_ticks,
            "inactivity_limit_ticks": self.inactivity_limit_ticks,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.points_per_interval < 0:
            raise ValueError("points_per_interval must not be negative")
        if self.phoenix_cooldown_ticks < 0:
            raise ValueError("phoenix_cooldown_ticks must not be negative")
        if not 0 <= self.burn_rate_bps <= BPS_DENOMINATOR:
            raise ValueError(f"burn_rate_bps must be within 0..{BPS_DENOMINATOR}, got {self.burn_rate_bps}")

    @property
    def respawn_threshold_ticks(self) -> int:
        return self.safe_limit_ticks + self.phoenix_cooldown_ticks


@dataclass(slots=True)
class ProfileManifest:
    resource_type: str
    schema_version: str
    resource_version: str
    checksum: str


@dataclass(slots=True)
class GameStateView:
    current_holder: str
    previous_holder: str
    last_transfer_tick: int
    melting: bool
    active_generation_id: int


@dataclass(slots=True)
class Settlement:
    holder: str
    held_ticks: int
    balance_before: int
    balance_after: int
    earned: int = 0
    penalty: int = 0
    penalty_periods: int = 0

    @property
    def delta(self) -> int:
        return self.balance_after - self.balance_before


@dataclass(slots=True)
class GenerationRecord:
    generation_id: int
    last_holder: str
    retired_tick: int
    cause: TransferKind


@dataclass(slots=True)
class TransferRecord:
    transfer_id: str
    tick: int
    generation_id: int
    kind: TransferKind
    from_holder: str
    to_holder: str
    settlement: Settlement | None = None


@dataclass(slots=True)
class GameEvent:
    event_id: str
    time: datetime
    tick: int
    scope: str
    event_type: str
    actors: list[str]
    claims: list[str]
    severity: str = "normal"


@dataclass(slots=True)
class StabilityReport:
    held_ticks: int
    heat: float
    stability_percent: float
    level: StabilityLevel
    alerts: list[str] = field(default_factory=list)


@dataclass(slots=True)
class LeaderboardEntry:
    rank: int
    participant: str
    points: int
    holds: int
    is_active: bool
    last_active_tick: int


@dataclass(slots=True)
class MeltdownEvent:
    event_id: str
    tick: int
    generation_id: int
    defaulter: str
    hero: str


@dataclass(slots=True)
class Achievement:
    achievement_id: str
    name: str
    description: str
    metric: str
    threshold: int


@dataclass(slots=True)
class ActionRequest:
    request_id: str
    action_type: ActionType | str
    payload: dict[str, Any]
    actor_id: str


@dataclass(slots=True)
class ActionResult:
    request_id: str
    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    error_code: str | None = None


@dataclass(slots=True)
class ForensicArtifact:
    artifact_id: str
    timestamp: datetime
    engine_scope: str
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
    identifiers: Mapping[str, str]
    causal_fragment: Sequence[str]
