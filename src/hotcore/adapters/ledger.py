from __future__ import annotations

from hotcore.contracts import EMPTY_IDENTITY, LedgerReceipt, OwnershipLedger


class InMemoryOwnershipLedger(OwnershipLedger):
    def __init__(self) -> None:
        self._owners: dict[int, str] = {}
        self.refuse_next: str | None = None

    def mint(self, owner: str, generation_id: int) -> LedgerReceipt:
        refused = self._take_refusal()
        if refused is not None:
            return refused
        if owner == EMPTY_IDENTITY:
            return LedgerReceipt(False, "cannot mint to the empty identity")
        if generation_id in self._owners:
            return LedgerReceipt(False, f"token {generation_id} already minted")
        self._owners[generation_id] = owner
        return LedgerReceipt(True)

    def transfer_ownership(self, from_owner: str, to_owner: str, generation_id: int) -> LedgerReceipt:
        refused = self._take_refusal()
        if refused is not None:
            return refused
        if self._owners.get(generation_id) != from_owner:
            return LedgerReceipt(False, f"{from_owner} does not own token {generation_id}")
        if to_owner == EMPTY_IDENTITY:
            return LedgerReceipt(False, "cannot transfer to the empty identity")
        self._owners[generation_id] = to_owner
        return LedgerReceipt(True)

    def owner_of(self, generation_id: int) -> str:
        return self._owners.get(generation_id, EMPTY_IDENTITY)

    def refuse(self, reason: str = "ledger refused the request") -> None:
        """Make the next mint or transfer fail with ``reason``."""
        self.refuse_next = reason

    def _take_refusal(self) -> LedgerReceipt | None:
        if self.refuse_next is None:
            return None
        reason, self.refuse_next = self.refuse_next, None
        return LedgerReceipt(False, reason)
