from __future__ import annotations

import pytest

from hotcore.contracts import GameConfig, Settlement
from hotcore.engine import PointsLedger


def _ledger_with(balance: int, holder: str = "alice") -> PointsLedger:
    ledger = PointsLedger(GameConfig())
    ledger.apply(Settlement(holder, 0, 0, balance))
    return ledger


def test_safe_zone_earns_whole_intervals_only():
    ledger = PointsLedger(GameConfig())
    settlement = ledger.settle("alice", 250)
    assert settlement.earned == 20
    assert ledger.balance_of("alice") == 20


def test_holding_exactly_the_safe_limit_still_earns():
    ledger = PointsLedger(GameConfig())
    ledger.settle("alice", 900)
    assert ledger.balance_of("alice") == 90


def test_one_burn_period_takes_five_percent():
    ledger = _ledger_with(100)
    settlement = ledger.settle("alice", 900 + 30)
    assert settlement.penalty_periods == 1
    assert settlement.penalty == 5
    assert ledger.balance_of("alice") == 95


def test_melting_without_a_full_burn_period_neither_earns_nor_burns():
    ledger = _ledger_with(100)
    settlement = ledger.settle("alice", 929)
    assert settlement.earned == 0
    assert settlement.penalty == 0
    assert ledger.balance_of("alice") == 100


def test_penalty_larger_than_balance_floors_at_zero():
    ledger = _ledger_with(100)
    ledger.settle("alice", 900 + 30 * 25)
    assert ledger.balance_of("alice") == 0


def test_penalty_rounds_down():
    ledger = _ledger_with(90)
    settlement = ledger.settle("alice", 930)
    assert settlement.penalty == 4
    assert ledger.balance_of("alice") == 86


def test_negative_hold_is_treated_as_zero():
    ledger = PointsLedger(GameConfig())
    settlement = ledger.settle("alice", -50)
    assert settlement.held_ticks == 0
    assert ledger.balance_of("alice") == 0


def test_settlement_touches_only_the_holder():
    ledger = _ledger_with(40, holder="bob")
    ledger.settle("alice", 300)
    assert ledger.balances() == {"bob": 40, "alice": 30}


def test_preview_does_not_commit():
    ledger = PointsLedger(GameConfig())
    preview = ledger.preview("alice", 500)
    assert preview.balance_after == 50
    assert ledger.balance_of("alice") == 0


def test_stale_settlement_is_refused():
    ledger = PointsLedger(GameConfig())
    stale = ledger.preview("alice", 500)
    ledger.settle("alice", 100)
    with pytest.raises(ValueError):
        ledger.apply(stale)
