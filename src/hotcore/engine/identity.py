from __future__ import annotations

from hotcore.contracts import UNREGISTERED_HANDLE


class IdentityRegistry:
    """Participant -> external uniqueness handle (e.g. a Farcaster fid).

    Registration does not check uniqueness across participants; linked
    identities are detected when the core changes hands.
    """

    def __init__(self) -> None:
        self._handles: dict[str, int] = {}

    def register(self, participant: str, handle: int) -> None:
        if handle < 0:
            raise ValueError(f"identity handle must not be negative, got {handle}")
        if handle == UNREGISTERED_HANDLE:
            self._handles.pop(participant, None)
            return
        self._handles[participant] = handle

    def lookup(self, participant: str) -> int:
        return self._handles.get(participant, UNREGISTERED_HANDLE)

    def handles(self) -> dict[str, int]:
        return dict(self._handles)

    def linked(self, a: str, b: str) -> bool:
        handle = self.lookup(a)
        return handle != UNREGISTERED_HANDLE and handle == self.lookup(b)

    def clear(self) -> None:
        self._handles.clear()
