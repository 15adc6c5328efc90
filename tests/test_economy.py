"""Tests for serve pricing and the perfect-serve combo streak."""
from __future__ import annotations

import unittest

from config import BASE_PRICE, COMBO_BONUS_CAP
from game.economy import ComboEconomy, combo_bonus_for_streak
from game.state import RoundState

TIP_MAX = 7


class TestComboBonus(unittest.TestCase):
    def test_bonus_saturates_at_cap(self):
        self.assertEqual([combo_bonus_for_streak(s) for s in range(8)], [0, 1, 2, 3, 4, 5, 5, 5])

    def test_negative_streak_gives_no_bonus(self):
        self.assertEqual(combo_bonus_for_streak(-2), 0)

    def test_cap_constant(self):
        self.assertEqual(COMBO_BONUS_CAP, 5)


class TestSettle(unittest.TestCase):
    def setUp(self):
        self.economy = ComboEconomy()
        self.state = RoundState()

    def test_two_perfect_serves_build_streak(self):
        first = self.economy.settle(self.state, tip=7, tip_max=TIP_MAX)
        second = self.economy.settle(self.state, tip=7, tip_max=TIP_MAX)

        self.assertEqual((first.streak, first.combo_bonus), (1, 1))
        self.assertEqual((second.streak, second.combo_bonus), (2, 2))
        self.assertEqual(self.state.best_combo, 2)
        self.assertEqual(self.state.perfect_serves, 2)

    def test_non_perfect_serve_resets_streak(self):
        for _ in range(4):
            self.economy.settle(self.state, tip=7, tip_max=TIP_MAX)
        result = self.economy.settle(self.state, tip=5, tip_max=TIP_MAX)

        self.assertFalse(result.perfect)
        self.assertEqual(result.combo_bonus, 0)
        self.assertEqual(self.state.combo, 0)
        self.assertEqual(self.state.best_combo, 4)
        self.assertEqual(self.state.perfect_serves, 4)

    def test_earned_is_base_plus_tip_plus_bonus(self):
        result = self.economy.settle(self.state, tip=3, tip_max=TIP_MAX)
        self.assertEqual(result.earned, BASE_PRICE + 3)
        result = self.economy.settle(self.state, tip=7, tip_max=TIP_MAX)
        self.assertEqual(result.earned, BASE_PRICE + 7 + 1)

    def test_accumulators(self):
        self.economy.settle(self.state, tip=7, tip_max=TIP_MAX)
        self.economy.settle(self.state, tip=0, tip_max=TIP_MAX)

        self.assertEqual(self.state.served, 2)
        self.assertEqual(self.state.base_total, 2 * BASE_PRICE)
        self.assertEqual(self.state.tip_total, 7)
        self.assertEqual(self.state.combo_bonus_total, 1)
        self.assertEqual(self.state.earned, 2 * BASE_PRICE + 7 + 1)
        self.assertEqual(
            self.state.earned,
            self.state.base_total + self.state.tip_total + self.state.combo_bonus_total,
        )

    def test_long_streak_bonus_never_exceeds_cap(self):
        bonuses = [self.economy.settle(self.state, tip=7, tip_max=TIP_MAX).combo_bonus for _ in range(9)]
        self.assertEqual(bonuses, [1, 2, 3, 4, 5, 5, 5, 5, 5])
        self.assertEqual(self.state.best_combo, 9)


if __name__ == "__main__":
    unittest.main()
