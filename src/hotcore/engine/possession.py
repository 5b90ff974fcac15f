from __future__ import annotations

from dataclasses import dataclass

from hotcore.contracts import (
    EMPTY_IDENTITY,
    GameConfig,
    GenerationRecord,
    OwnershipLedger,
    Settlement,
    TransferKind,
    TransferRecord,
)
from hotcore.core import (
    AlreadyHoldingError,
    DuplicateIdentityError,
    LedgerRejectedError,
    NotHolderError,
    PreviousHolderError,
    StillStableError,
    ZeroTargetError,
    make_id,
)
from hotcore.engine.identity import IdentityRegistry
from hotcore.engine.points import PointsLedger
from hotcore.engine.state import GameState


@dataclass(slots=True)
class Transition:
    """Everything an operation wants to commit. Built without touching shared state."""

    state: GameState
    record: TransferRecord
    settlement: Settlement | None = None
    death: GenerationRecord | None = None


def is_melting(state: GameState, config: GameConfig, now: int) -> bool:
    return state.held_ticks(now) > config.safe_limit_ticks


def request_transfer(ledger: OwnershipLedger, from_owner: str, to_owner: str, generation_id: int) -> None:
    receipt = ledger.transfer_ownership(from_owner, to_owner, generation_id)
    if not receipt.ok:
        raise LedgerRejectedError(receipt.reason or f"transfer of generation {generation_id} refused")


def request_mint(ledger: OwnershipLedger, owner: str, generation_id: int) -> None:
    receipt = ledger.mint(owner, generation_id)
    if not receipt.ok:
        raise LedgerRejectedError(receipt.reason or f"mint of generation {generation_id} refused")


class PossessionController:
    def __init__(
        self,
        config: GameConfig,
        points: PointsLedger,
        identities: IdentityRegistry,
        ledger: OwnershipLedger,
    ) -> None:
        self._config = config
        self._points = points
        self._identities = identities
        self._ledger = ledger

    def pass_core(self, state: GameState, sender: str, to: str, now: int) -> Transition:
        if sender != state.current_holder:
            raise NotHolderError(f"{sender or '<empty>'} does not hold the core")
        if to == EMPTY_IDENTITY:
            raise ZeroTargetError("cannot pass the core to the empty identity")
        if to == sender:
            raise AlreadyHoldingError("cannot pass the core to yourself")
        if to == state.previous_holder:
            raise PreviousHolderError(f"cannot pass the core back to previous holder {to}")
        if self._identities.linked(sender, to):
            raise DuplicateIdentityError(f"{sender} and {to} share identity handle {self._identities.lookup(sender)}")

        settlement = self._points.preview(sender, state.held_ticks(now))
        request_transfer(self._ledger, sender, to, state.active_generation_id)
        return self._handoff(state, sender, to, now, TransferKind.PASS, settlement)

    def grab(self, state: GameState, sender: str, now: int) -> Transition:
        # No previous-holder or identity checks: seizing a melted core is the penalty path.
        if not is_melting(state, self._config, now):
            raise StillStableError(f"core held {state.held_ticks(now)} ticks, safe limit {self._config.safe_limit_ticks}")
        holder = state.current_holder
        if sender == holder:
            raise AlreadyHoldingError(f"{sender} already holds the core")

        settlement = self._points.preview(holder, state.held_ticks(now))
        request_transfer(self._ledger, holder, sender, state.active_generation_id)
        return self._handoff(state, holder, sender, now, TransferKind.GRAB, settlement)

    def _handoff(
        self,
        state: GameState,
        from_holder: str,
        to_holder: str,
        now: int,
        kind: TransferKind,
        settlement: Settlement,
    ) -> Transition:
        nxt = state.copy()
        nxt.previous_holder = from_holder
        nxt.current_holder = to_holder
        nxt.last_transfer_tick = now
        nxt.last_activity_tick = now
        record = TransferRecord(
            transfer_id=make_id("xfer"),
            tick=now,
            generation_id=state.active_generation_id,
            kind=kind,
            from_holder=from_holder,
            to_holder=to_holder,
            settlement=settlement,
        )
        return Transition(state=nxt, record=record, settlement=settlement)
