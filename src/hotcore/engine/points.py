from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict

from hotcore.contracts import BPS_DENOMINATOR, GameConfig, Settlement


class PointsLedger:
    """Participant -> non-negative score, settled whenever a holder loses the core.

    Inside the safe window a holder earns ``points_per_interval`` per completed
    interval. Past it nothing is earned; instead every completed burn interval
    beyond the safe limit burns ``burn_rate_bps`` of the current balance, and the
    balance floors at zero.
    """

    def __init__(self, config: GameConfig) -> None:
        self._config = config
        self._balances: DefaultDict[str, int] = defaultdict(int)

    def balance_of(self, participant: str) -> int:
        return self._balances.get(participant, 0)

    def balances(self) -> dict[str, int]:
        return {p: b for p, b in self._balances.items()}

    def preview(self, holder: str, held_ticks: int) -> Settlement:
        cfg = self._config
        held = max(0, held_ticks)
        balance = self.balance_of(holder)

        if held <= cfg.safe_limit_ticks:
            earned = (held // cfg.interval_ticks) * cfg.points_per_interval
            return Settlement(holder, held, balance, balance + earned, earned=earned)

        meltdown_ticks = held - cfg.safe_limit_ticks
        periods = meltdown_ticks // cfg.burn_interval_ticks
        penalty = balance * periods * cfg.burn_rate_bps // BPS_DENOMINATOR
        after = 0 if penalty >= balance else balance - penalty
        return Settlement(holder, held, balance, after, penalty=penalty, penalty_periods=periods)

    def apply(self, settlement: Settlement) -> None:
        if settlement.balance_after < 0:
            raise ValueError(f"settlement for {settlement.holder} would go negative")
        if self.balance_of(settlement.holder) != settlement.balance_before:
            raise ValueError(f"stale settlement for {settlement.holder}")
        self._balances[settlement.holder] = settlement.balance_after

    def settle(self, holder: str, held_ticks: int) -> Settlement:
        settlement = self.preview(holder, held_ticks)
        self.apply(settlement)
        return settlement

    def restore(self, balances: dict[str, int]) -> None:
        if any(b < 0 for b in balances.values()):
            raise ValueError("saved balances must not be negative")
        self._balances.clear()
        self._balances.update(balances)

    def clear(self) -> None:
        self._balances.clear()
