from __future__ import annotations

from pathlib import Path

import pytest

from hotcore.contracts import GameEvent
from hotcore.core import PreviousHolderError, load_game_config, seeded_random
from hotcore.simulation import AutoplaySimulator, GameRuntime
from tests.helpers import ADMIN, new_game


def test_committed_operations_publish_events_and_failures_do_not():
    game, clock, _ = new_game()
    seen: list[GameEvent] = []
    game.event_bus.subscribe(seen.append)

    game.pass_core(ADMIN, "bob")
    with pytest.raises(PreviousHolderError):
        game.pass_core("bob", ADMIN)
    clock.advance(1000)
    game.grab_core("carol")

    assert [e.event_type for e in seen] == ["core_passed", "core_grabbed"]
    assert seen[1].severity == "high"
    assert seen[1].tick == 1000
    assert game.event_bus.emitted_count("possession") == 2
    assert game.event_bus.emitted_count("phoenix") == 1


def _summary(root: Path, seed: int):
    runtime = GameRuntime(root=root, config=load_game_config("testnet_fast"))
    players = [f"bot{i}" for i in range(5)]
    return AutoplaySimulator(runtime, players, seeded_random(seed)).run(40), runtime


def test_autoplay_is_deterministic_for_a_seed(tmp_path: Path):
    first, runtime = _summary(tmp_path / "a", 11)
    second, _ = _summary(tmp_path / "b", 11)
    assert first == second
    assert first.passes + first.grabs + first.respawns > 0
    assert not runtime.halted
    assert all(balance >= 0 for balance in runtime.game.points.balances().values())
    assert runtime.game.state.generation_counter >= runtime.game.state.active_generation_id


def test_autoplay_needs_three_players(tmp_path: Path):
    runtime = GameRuntime(root=tmp_path)
    with pytest.raises(ValueError):
        AutoplaySimulator(runtime, ["a", "b"], seeded_random(1))
