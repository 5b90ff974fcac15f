from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from hotcore.contracts import EMPTY_IDENTITY

ZERO_ADDRESS = "0x" + "0" * 40


def now_utc() -> datetime:
    return datetime.now(UTC)


def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def normalize_identity(raw: str | None) -> str:
    """Canonical form of a participant identifier; wallet addresses compare case-insensitively."""
    if raw is None:
        return EMPTY_IDENTITY
    identity = str(raw).strip().lower()
    if identity == ZERO_ADDRESS:
        return EMPTY_IDENTITY
    return identity
