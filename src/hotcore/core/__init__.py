from .config import DEFAULT_PROFILE_ID, default_game_profiles, load_game_config, profile_manifest
from .errors import (
    AlreadyHoldingError,
    AlreadyInitializedError,
    CooldownActiveError,
    DuplicateIdentityError,
    EngineIntegrityError,
    GameInactiveError,
    GameRuleError,
    InsufficientInactivityError,
    LedgerRejectedError,
    NotAdminError,
    NotHolderError,
    NotInitializedError,
    PreviousHolderError,
    StillStableError,
    ZeroTargetError,
    build_forensic_artifact,
    persist_forensic_artifact,
)
from .events import EventBus
from .ids import make_id, normalize_identity, now_utc
from .randomness import PythonRandomSource, seeded_random

__all__ = [
    "DEFAULT_PROFILE_ID",
    "AlreadyHoldingError",
    "AlreadyInitializedError",
    "CooldownActiveError",
    "DuplicateIdentityError",
    "EngineIntegrityError",
    "EventBus",
    "GameInactiveError",
    "GameRuleError",
    "InsufficientInactivityError",
    "LedgerRejectedError",
    "NotAdminError",
    "NotHolderError",
    "NotInitializedError",
    "PreviousHolderError",
    "PythonRandomSource",
    "StillStableError",
    "ZeroTargetError",
    "build_forensic_artifact",
    "default_game_profiles",
    "load_game_config",
    "make_id",
    "normalize_identity",
    "now_utc",
    "persist_forensic_artifact",
    "profile_manifest",
    "seeded_random",
]
