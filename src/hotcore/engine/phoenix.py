from __future__ import annotations

from hotcore.contracts import (
    EMPTY_IDENTITY,
    GameConfig,
    GenerationRecord,
    OwnershipLedger,
    TransferKind,
    TransferRecord,
)
from hotcore.core import (
    CooldownActiveError,
    EngineIntegrityError,
    InsufficientInactivityError,
    NotAdminError,
    StillStableError,
    build_forensic_artifact,
    make_id,
)
from hotcore.engine.possession import Transition, request_mint
from hotcore.engine.state import DeathRegistry, GameState


class PhoenixController:
    """Retires abandoned generations and mints their successors.

    A generation dies in two stages: it must first melt (held past the safe
    limit) and then stay unclaimed for the phoenix cooldown. During the cooldown
    the live holder can still be grabbed. The admin path skips both gates and
    instead requires the whole game to have been idle for the inactivity limit.
    """

    def __init__(self, config: GameConfig, deaths: DeathRegistry, ledger: OwnershipLedger) -> None:
        self._config = config
        self._deaths = deaths
        self._ledger = ledger

    def can_respawn(self, state: GameState, now: int) -> bool:
        return state.held_ticks(now) > self._config.respawn_threshold_ticks

    def dead_generation_holder(self, generation_id: int) -> str:
        record = self._deaths.get(generation_id)
        return record.last_holder if record is not None else EMPTY_IDENTITY

    def spawn_new_generation(self, state: GameState, initiator: str, now: int) -> Transition:
        held = state.held_ticks(now)
        if held <= self._config.safe_limit_ticks:
            raise StillStableError(f"generation {state.active_generation_id} is still stable")
        if held <= self._config.respawn_threshold_ticks:
            remaining = self._config.respawn_threshold_ticks - held + 1
            raise CooldownActiveError(f"phoenix cooldown active for {remaining} more ticks")
        return self._rebirth(state, initiator, now, TransferKind.PHOENIX)

    def admin_reset(self, state: GameState, sender: str, now: int) -> Transition:
        if sender != state.admin:
            raise NotAdminError(f"{sender or '<empty>'} is not the admin")
        idle = state.inactive_ticks(now)
        if idle < self._config.inactivity_limit_ticks:
            raise InsufficientInactivityError(
                f"game idle for {idle} ticks, needs {self._config.inactivity_limit_ticks}"
            )
        return self._rebirth(state, sender, now, TransferKind.ADMIN_RESET)

    def _rebirth(self, state: GameState, new_holder: str, now: int, cause: TransferKind) -> Transition:
        retiring = state.active_generation_id
        if retiring in self._deaths:
            raise EngineIntegrityError(
                build_forensic_artifact(
                    engine_scope="phoenix",
                    error_code="DEATH_RECORD_REWRITE",
                    message=f"generation {retiring} already has a death record",
                    state_snapshot=state.snapshot(),
                    context={"tick": now, "cause": cause.value},
                    identifiers={"initiator": new_holder},
                    causal_fragment=["phoenix_rebirth", "death_registry_write_once"],
                )
            )

        new_generation = state.generation_counter + 1
        request_mint(self._ledger, new_holder, new_generation)

        death = GenerationRecord(
            generation_id=retiring,
            last_holder=state.current_holder,
            retired_tick=now,
            cause=cause,
        )
        nxt = state.copy()
        nxt.active_generation_id = new_generation
        nxt.generation_counter = new_generation
        nxt.current_holder = new_holder
        nxt.previous_holder = EMPTY_IDENTITY
        nxt.last_transfer_tick = now
        nxt.last_activity_tick = now
        record = TransferRecord(
            transfer_id=make_id("xfer"),
            tick=now,
            generation_id=new_generation,
            kind=cause,
            from_holder=state.current_holder,
            to_holder=new_holder,
        )
        return Transition(state=nxt, record=record, death=death)
