from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, UTC
from pathlib import Path
from uuid import uuid4

from hotcore.contracts import ForensicArtifact


class GameRuleError(Exception):
    """A rejected operation. Raised before any state is committed."""

    code = "GAME_RULE_VIOLATION"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code.replace("_", " ").lower())


class AlreadyInitializedError(GameRuleError):
    code = "ALREADY_INITIALIZED"


class NotInitializedError(GameRuleError):
    code = "NOT_INITIALIZED"


class GameInactiveError(GameRuleError):
    code = "GAME_INACTIVE"


class NotHolderError(GameRuleError):
    code = "NOT_HOLDER"


class ZeroTargetError(GameRuleError):
    code = "ZERO_TARGET"


class PreviousHolderError(GameRuleError):
    code = "PREVIOUS_HOLDER"


class DuplicateIdentityError(GameRuleError):
    code = "DUPLICATE_IDENTITY"


class StillStableError(GameRuleError):
    code = "STILL_STABLE"


class AlreadyHoldingError(GameRuleError):
    code = "ALREADY_HOLDING"


class CooldownActiveError(GameRuleError):
    code = "COOLDOWN_ACTIVE"


class NotAdminError(GameRuleError):
    code = "NOT_ADMIN"


class InsufficientInactivityError(GameRuleError):
    code = "INSUFFICIENT_INACTIVITY"


class LedgerRejectedError(GameRuleError):
    code = "LEDGER_REJECTED"


class EngineIntegrityError(RuntimeError):
    def __init__(self, artifact: ForensicArtifact) -> None:
        super().__init__(artifact.message)
        self.artifact = artifact


def build_forensic_artifact(
    engine_scope: str,
    error_code: str,
    message: str,
    state_snapshot: dict[str, object],
    context: dict[str, object],
    identifiers: dict[str, str],
    causal_fragment: list[str],
) -> ForensicArtifact:
    return ForensicArtifact(
        artifact_id=str(uuid4()),
        timestamp=datetime.now(UTC),
        engine_scope=engine_scope,
        error_code=error_code,
        message=message,
        state_snapshot=state_snapshot,
        context=context,
        identifiers=identifiers,
        causal_fragment=causal_fragment,
    )


def persist_forensic_artifact(artifact: ForensicArtifact, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"forensic_{artifact.artifact_id}.json"
    path.write_text(json.dumps(asdict(artifact), default=str, indent=2), encoding="utf-8")
    return path
