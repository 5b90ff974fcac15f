from .types import (
    BPS_DENOMINATOR,
    EMPTY_IDENTITY,
    UNREGISTERED_HANDLE,
    Achievement,
    ActionRequest,
    ActionResult,
    ActionType,
    ForensicArtifact,
    GameConfig,
    GameEvent,
    GameStateView,
    GenerationPhase,
    GenerationRecord,
    LeaderboardEntry,
    LedgerReceipt,
    MeltdownEvent,
    OwnershipLedger,
    ProfileManifest,
    RandomSource,
    Settlement,
    StabilityLevel,
    StabilityReport,
    TickSource,
    TransferKind,
    TransferRecord,
)

__all__ = [
    "BPS_DENOMINATOR",
    "EMPTY_IDENTITY",
    "UNREGISTERED_HANDLE",
    "Achievement",
    "ActionRequest",
    "ActionResult",
    "ActionType",
    "ForensicArtifact",
    "GameConfig",
    "GameEvent",
    "GameStateView",
    "GenerationPhase",
    "GenerationRecord",
    "LeaderboardEntry",
    "LedgerReceipt",
    "MeltdownEvent",
    "OwnershipLedger",
    "ProfileManifest",
    "RandomSource",
    "Settlement",
    "StabilityLevel",
    "StabilityReport",
    "TickSource",
    "TransferKind",
    "TransferRecord",
]
