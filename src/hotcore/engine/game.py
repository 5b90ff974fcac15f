from __future__ import annotations

from typing import Any, Iterable

from hotcore.contracts import (
    EMPTY_IDENTITY,
    GameConfig,
    GameEvent,
    GameStateView,
    GenerationPhase,
    GenerationRecord,
    OwnershipLedger,
    StabilityReport,
    TickSource,
    TransferKind,
    TransferRecord,
)
from hotcore.core import (
    AlreadyInitializedError,
    EngineIntegrityError,
    EventBus,
    GameInactiveError,
    NotAdminError,
    NotInitializedError,
    ZeroTargetError,
    build_forensic_artifact,
    make_id,
    normalize_identity,
    now_utc,
)
from hotcore.engine.identity import IdentityRegistry
from hotcore.engine.insights import TransferHistory, stability_report
from hotcore.engine.phoenix import PhoenixController
from hotcore.engine.points import PointsLedger
from hotcore.engine.possession import PossessionController, Transition, is_melting, request_mint
from hotcore.engine.state import DeathRegistry, GameState


class CoreGame:
    """Operation surface of the possession game.

    Every mutating call reads the tick once, validates against the committed
    state, lets a controller build a ``Transition`` (calling the ownership
    ledger last), and only then commits points, death record, history and state
    together. A rejected call raises ``GameRuleError`` and leaves everything as
    it was.
    """

    def __init__(
        self,
        config: GameConfig,
        ledger: OwnershipLedger,
        clock: TickSource,
        event_bus: EventBus | None = None,
    ) -> None:
        config.validate()
        self.config = config
        self.ledger = ledger
        self.clock = clock
        self.event_bus = event_bus or EventBus()

        self.points = PointsLedger(config)
        self.identities = IdentityRegistry()
        self.deaths = DeathRegistry()
        self.history = TransferHistory()
        self.possession = PossessionController(config, self.points, self.identities, ledger)
        self.phoenix = PhoenixController(config, self.deaths, ledger)
        self._state = GameState()

    # === Lifecycle ===

    def initialize(self, caller: str) -> GameStateView:
        admin = normalize_identity(caller)
        if self._state.initialized:
            raise AlreadyInitializedError("core already minted")
        if admin == EMPTY_IDENTITY:
            raise NotAdminError("the empty identity cannot administer the game")
        now = self._now()
        # token ids are never reused across teardown
        generation = self._state.generation_counter + 1
        request_mint(self.ledger, admin, generation)

        state = GameState(
            current_holder=admin,
            previous_holder=EMPTY_IDENTITY,
            last_transfer_tick=now,
            last_activity_tick=now,
            active_generation_id=generation,
            generation_counter=generation,
            admin=admin,
            initialized=True,
            active=True,
        )
        record = TransferRecord(
            transfer_id=make_id("xfer"),
            tick=now,
            generation_id=generation,
            kind=TransferKind.GENESIS,
            from_holder=EMPTY_IDENTITY,
            to_holder=admin,
        )
        self._commit(Transition(state=state, record=record), now, "phoenix", "core_minted", [admin])
        return self.game_state()

    def teardown(self) -> None:
        minted = self._state.generation_counter
        self.points.clear()
        self.identities.clear()
        self.deaths.clear()
        self.history.clear()
        self._state = GameState(generation_counter=minted)

    def restore(
        self,
        snapshot: dict[str, Any],
        balances: dict[str, int],
        handles: dict[str, int],
        deaths: Iterable[GenerationRecord],
        history: Iterable[TransferRecord],
    ) -> None:
        """Rebuild a saved game in place of the current one."""
        state = GameState(**snapshot)
        issues = state.invariant_violations()
        if issues:
            raise EngineIntegrityError(
                build_forensic_artifact(
                    engine_scope="restore",
                    error_code="INVARIANT_VIOLATION",
                    message="; ".join(issues),
                    state_snapshot=state.snapshot(),
                    context={"participants": len(balances)},
                    identifiers={},
                    causal_fragment=["load_game_state", "restore"],
                )
            )
        self.teardown()
        self.points.restore(balances)
        for participant, handle in handles.items():
            self.identities.register(participant, handle)
        for record in deaths:
            self.deaths.put(record)
        for record in history:
            self.history.append(record)
        self._state = state

    # === Mutating operations ===

    def pass_core(self, caller: str, to: str) -> GameStateView:
        sender, target = normalize_identity(caller), normalize_identity(to)
        now = self._playable_now()
        transition = self.possession.pass_core(self._state, sender, target, now)
        self._commit(transition, now, "possession", "core_passed", [sender, target])
        return self.game_state()

    def grab_core(self, caller: str) -> GameStateView:
        sender = normalize_identity(caller)
        now = self._playable_now()
        transition = self.possession.grab(self._state, sender, now)
        self._commit(
            transition,
            now,
            "possession",
            "core_grabbed",
            [transition.record.from_holder, sender],
            severity="high",
        )
        return self.game_state()

    def spawn_new_generation(self, caller: str) -> GameStateView:
        initiator = normalize_identity(caller)
        now = self._playable_now()
        if initiator == EMPTY_IDENTITY:
            raise ZeroTargetError("cannot bind a generation to the empty identity")
        transition = self.phoenix.spawn_new_generation(self._state, initiator, now)
        self._commit(transition, now, "phoenix", "generation_spawned", [initiator], severity="high")
        return self.game_state()

    def admin_reset(self, caller: str) -> GameStateView:
        sender = normalize_identity(caller)
        self._require_initialized()
        now = self._now()
        transition = self.phoenix.admin_reset(self._state, sender, now)
        self._commit(transition, now, "admin", "admin_reset", [sender], severity="high")
        return self.game_state()

    def register_identity(self, caller: str, participant: str, handle: int) -> None:
        sender = normalize_identity(caller)
        self._require_initialized()
        self._require_admin(sender)
        now = self._now()
        target = normalize_identity(participant)
        self.identities.register(target, int(handle))
        self._publish(now, "identity", "identity_registered", [target], [f"handle={int(handle)}"])

    def set_active(self, caller: str, active: bool) -> None:
        sender = normalize_identity(caller)
        self._require_initialized()
        self._require_admin(sender)
        now = self._now()
        self._state.active = bool(active)
        event_type = "game_resumed" if active else "game_paused"
        self._publish(now, "admin", event_type, [sender], [f"active={bool(active)}"])

    # === Reads ===

    @property
    def state(self) -> GameState:
        return self._state.copy()

    def game_state(self) -> GameStateView:
        return GameStateView(
            current_holder=self._state.current_holder,
            previous_holder=self._state.previous_holder,
            last_transfer_tick=self._state.last_transfer_tick,
            melting=self.is_melting(),
            active_generation_id=self._state.active_generation_id,
        )

    def points_of(self, participant: str) -> int:
        return self.points.balance_of(normalize_identity(participant))

    def identity_of(self, participant: str) -> int:
        return self.identities.lookup(normalize_identity(participant))

    def held_ticks(self) -> int:
        if not self._state.initialized:
            return 0
        return self._state.held_ticks(self.clock.current_tick())

    def is_melting(self) -> bool:
        if not self._state.initialized:
            return False
        return is_melting(self._state, self.config, self.clock.current_tick())

    def can_respawn(self) -> bool:
        if not self._state.initialized:
            return False
        return self.phoenix.can_respawn(self._state, self.clock.current_tick())

    def phase(self) -> GenerationPhase:
        if self.can_respawn():
            return GenerationPhase.DEAD
        if self.is_melting():
            return GenerationPhase.MELTING
        return GenerationPhase.STABLE

    def stability(self) -> StabilityReport:
        return stability_report(self.held_ticks(), self.config)

    def dead_generation_holder(self, generation_id: int) -> str:
        return self.phoenix.dead_generation_holder(int(generation_id))

    def generation_record(self, generation_id: int) -> GenerationRecord | None:
        return self.deaths.get(int(generation_id))

    # === Internals ===

    def _now(self) -> int:
        now = int(self.clock.current_tick())
        if self._state.initialized and now < self._state.last_activity_tick:
            raise EngineIntegrityError(
                build_forensic_artifact(
                    engine_scope="clock",
                    error_code="TICK_REGRESSION",
                    message=f"tick {now} is behind last activity tick {self._state.last_activity_tick}",
                    state_snapshot=self._state.snapshot(),
                    context={"observed_tick": now},
                    identifiers={},
                    causal_fragment=["tick_source", "monotonic_time"],
                )
            )
        return now

    def _playable_now(self) -> int:
        self._require_initialized()
        if not self._state.active:
            raise GameInactiveError("the game is paused")
        return self._now()

    def _require_initialized(self) -> None:
        if not self._state.initialized:
            raise NotInitializedError("core has not been minted yet")

    def _require_admin(self, sender: str) -> None:
        if sender != self._state.admin:
            raise NotAdminError(f"{sender or '<empty>'} is not the admin")

    def _commit(
        self,
        transition: Transition,
        now: int,
        scope: str,
        event_type: str,
        actors: list[str],
        severity: str = "normal",
    ) -> None:
        issues = transition.state.invariant_violations()
        if issues:
            raise EngineIntegrityError(
                build_forensic_artifact(
                    engine_scope=scope,
                    error_code="INVARIANT_VIOLATION",
                    message="; ".join(issues),
                    state_snapshot=transition.state.snapshot(),
                    context={"tick": now, "event_type": event_type},
                    identifiers={"transfer_id": transition.record.transfer_id},
                    causal_fragment=[event_type, "commit"],
                )
            )
        if transition.settlement is not None:
            self.points.apply(transition.settlement)
        if transition.death is not None:
            self.deaths.put(transition.death)
        self.history.append(transition.record)
        self._state = transition.state

        claims = [f"generation {transition.record.generation_id} held by {transition.record.to_holder}"]
        if transition.settlement is not None:
            s = transition.settlement
            claims.append(f"{s.holder} settled {s.balance_before}->{s.balance_after} after {s.held_ticks} ticks")
        if transition.death is not None:
            claims.append(f"generation {transition.death.generation_id} died with {transition.death.last_holder}")
        self._publish(now, scope, event_type, actors, claims, severity)

    def _publish(
        self,
        now: int,
        scope: str,
        event_type: str,
        actors: list[str],
        claims: list[str],
        severity: str = "normal",
    ) -> None:
        self.event_bus.publish(
            GameEvent(
                event_id=make_id("ge"),
                time=now_utc(),
                tick=now,
                scope=scope,
                event_type=event_type,
                actors=[a for a in actors if a],
                claims=claims,
                severity=severity,
            )
        )
