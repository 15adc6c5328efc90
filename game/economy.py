"""Serve pricing: base price, tip and the perfect-serve combo bonus."""
from __future__ import annotations

from dataclasses import dataclass

from config import BASE_PRICE, COMBO_BONUS_CAP
from game.state import RoundState


@dataclass(frozen=True)
class ServeResult:
    base: int
    tip: int
    combo_bonus: int
    earned: int
    perfect: bool
    streak: int


def combo_bonus_for_streak(streak: int, cap: int = COMBO_BONUS_CAP) -> int:
    return min(cap, max(0, streak))


class ComboEconomy:
    """Scores a completed order and updates the round accumulators.

    A serve is perfect when the customer still pays the maximum tip, i.e.
    they were served before their overtime dropped the tip.
    """

    def __init__(self, base_price: int = BASE_PRICE, bonus_cap: int = COMBO_BONUS_CAP) -> None:
        self.base_price = base_price
        self.bonus_cap = bonus_cap

    def settle(self, state: RoundState, tip: int, tip_max: int) -> ServeResult:
        perfect = tip == tip_max
        if perfect:
            state.combo += 1
            state.best_combo = max(state.best_combo, state.combo)
            state.perfect_serves += 1
            combo_bonus = combo_bonus_for_streak(state.combo, self.bonus_cap)
        else:
            state.combo = 0
            combo_bonus = 0

        earned = self.base_price + tip + combo_bonus
        state.base_total += self.base_price
        state.tip_total += tip
        state.combo_bonus_total += combo_bonus
        state.earned += earned
        state.served += 1

        return ServeResult(
            base=self.base_price,
            tip=tip,
            combo_bonus=combo_bonus,
            earned=earned,
            perfect=perfect,
            streak=state.combo,
        )
