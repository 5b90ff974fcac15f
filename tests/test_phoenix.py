from __future__ import annotations

import pytest

from hotcore.adapters import InMemoryOwnershipLedger
from hotcore.contracts import GameConfig, GenerationPhase, GenerationRecord, TransferKind
from hotcore.core import (
    CooldownActiveError,
    EngineIntegrityError,
    InsufficientInactivityError,
    LedgerRejectedError,
    NotAdminError,
    StillStableError,
)
from hotcore.engine import CoreGame
from tests.helpers import ADMIN, SettableClock, new_game


def _abandoned_game():
    game, clock, ledger = new_game()
    clock.set(10)
    game.pass_core(ADMIN, "holder")
    return game, clock, ledger


def test_respawn_is_gated_by_meltdown_then_cooldown():
    game, clock, _ = _abandoned_game()
    clock.set(10 + 900)
    with pytest.raises(StillStableError):
        game.spawn_new_generation("phoenix")

    clock.set(10 + 901)
    assert game.phase() == GenerationPhase.MELTING
    with pytest.raises(CooldownActiveError):
        game.spawn_new_generation("phoenix")

    clock.set(10 + 2700)
    assert not game.can_respawn()
    with pytest.raises(CooldownActiveError):
        game.spawn_new_generation("phoenix")

    clock.set(10 + 2701)
    assert game.can_respawn()
    assert game.phase() == GenerationPhase.DEAD


def test_spawn_records_death_and_hands_new_generation_to_initiator():
    game, clock, ledger = _abandoned_game()
    clock.set(10 + 2701)
    game.spawn_new_generation("phoenix")

    state = game.state
    assert game.dead_generation_holder(1) == "holder"
    assert state.active_generation_id == 2
    assert state.generation_counter == 2
    assert state.current_holder == "phoenix"
    assert state.previous_holder == ""
    assert state.last_transfer_tick == 10 + 2701
    assert ledger.owner_of(2) == "phoenix"
    assert ledger.owner_of(1) == "holder"
    assert game.generation_record(1).cause == TransferKind.PHOENIX
    assert game.dead_generation_holder(2) == ""

    # previous holder is cleared, so the new holder may hand it straight back
    game.pass_core("phoenix", "holder")
    assert game.state.current_holder == "holder"


def test_grab_during_cooldown_keeps_the_generation_alive():
    game, clock, _ = _abandoned_game()
    clock.set(10 + 1500)
    game.grab_core("rescuer")
    clock.set(1510 + 900)
    with pytest.raises(StillStableError):
        game.spawn_new_generation("phoenix")
    clock.set(10 + 2701)
    with pytest.raises(CooldownActiveError):
        game.spawn_new_generation("phoenix")
    assert game.state.active_generation_id == 1


def test_generation_ids_strictly_increase():
    game, clock, _ = new_game()
    seen = [game.state.active_generation_id]
    for spawner in ["p1", "p2", "p3"]:
        clock.advance(2701)
        game.spawn_new_generation(spawner)
        state = game.state
        assert state.active_generation_id > seen[-1]
        assert state.generation_counter >= state.active_generation_id
        seen.append(state.active_generation_id)
    assert seen == [1, 2, 3, 4]
    assert [game.dead_generation_holder(g) for g in (1, 2, 3)] == [ADMIN, "p1", "p2"]


def test_admin_reset_requires_admin_and_global_inactivity():
    game, clock, ledger = _abandoned_game()
    clock.set(10 + 86_399)
    with pytest.raises(NotAdminError):
        game.admin_reset("holder")
    with pytest.raises(InsufficientInactivityError):
        game.admin_reset(ADMIN)

    clock.set(10 + 86_400)
    game.admin_reset(ADMIN)
    state = game.state
    assert state.active_generation_id == 2
    assert state.current_holder == ADMIN
    assert state.previous_holder == ""
    assert game.dead_generation_holder(1) == "holder"
    assert game.generation_record(1).cause == TransferKind.ADMIN_RESET
    assert ledger.owner_of(2) == ADMIN


def test_death_record_is_write_once():
    game, clock, _ = _abandoned_game()
    game.deaths.put(GenerationRecord(1, "someone", 0, TransferKind.PHOENIX))
    clock.set(10 + 2701)
    before = game.state
    with pytest.raises(EngineIntegrityError) as ex:
        game.spawn_new_generation("phoenix")
    assert ex.value.artifact.error_code == "DEATH_RECORD_REWRITE"
    assert game.state == before


def test_refused_mint_records_no_death():
    game, clock, ledger = _abandoned_game()
    clock.set(10 + 2701)
    ledger.refuse()
    with pytest.raises(LedgerRejectedError):
        game.spawn_new_generation("phoenix")
    assert len(game.deaths) == 0
    assert game.state.active_generation_id == 1


def test_time_moving_backward_is_an_integrity_failure():
    clock = SettableClock(100)
    game = CoreGame(GameConfig(), ledger=InMemoryOwnershipLedger(), clock=clock)
    game.initialize(ADMIN)
    clock.tick = 50
    with pytest.raises(EngineIntegrityError) as ex:
        game.pass_core(ADMIN, "bob")
    assert ex.value.artifact.error_code == "TICK_REGRESSION"
    assert game.state.current_holder == ADMIN
