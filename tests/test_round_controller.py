"""Tests for the round timer, spawning, modes and progression."""
from __future__ import annotations

import json
import unittest
from pathlib import Path
import tempfile

from config import MAX_FRAME_DT, ROUND_DURATION_MAX, ROUND_DURATION_MIN, ZONES
from game import OrderSignal, RoundController, RoundMode
from game.entities import Rect
from game.order_session import OrderState
from game.progress import ProgressStore

IN_CUP = Rect(*ZONES["cup"]).center


def controller_with_single_customer(seed: int = 4) -> RoundController:
    """Started level 1 with exactly one fresh customer and spawning held off."""
    ctrl = RoundController(seed)
    ctrl.start_level(1)
    ctrl.queue.clear()
    ctrl.queue.enqueue()
    ctrl.state.spawn_timer = 10_000.0
    ctrl._sync_session()
    return ctrl


def prepare_front_order(ctrl: RoundController) -> None:
    for ingredient in ctrl.session.drink.ingredients:
        ctrl.add_ingredient(ingredient, IN_CUP)
    ctrl.advance_whisk(1.0)


class TestStartLevel(unittest.TestCase):
    def test_controller_starts_in_menu(self):
        ctrl = RoundController(1)
        self.assertEqual(ctrl.mode, RoundMode.MENU)
        self.assertEqual(ctrl.unlocked_level, 1)
        self.assertEqual(ctrl.selected_difficulty, "easy")

    def test_start_level_resets_and_seeds_customers(self):
        for seed in range(10):
            ctrl = RoundController(seed)
            ctrl.state.earned = 999
            ctrl.state.combo = 4
            self.assertEqual(ctrl.start_level(1), 1)

            self.assertEqual(ctrl.mode, RoundMode.PLAY)
            self.assertIn(len(ctrl.queue), (1, 2))
            self.assertEqual(ctrl.state.earned, 0)
            self.assertEqual(ctrl.state.combo, 0)
            self.assertEqual(ctrl.state.goal, 120)
            self.assertGreaterEqual(ctrl.state.duration, ROUND_DURATION_MIN)
            self.assertLessEqual(ctrl.state.duration, ROUND_DURATION_MAX)
            self.assertEqual(ctrl.state.time_left, ctrl.state.duration)
            self.assertIs(ctrl.session.customer, ctrl.queue.front())
            self.assertEqual(ctrl.session.state, OrderState.BUILDING)

    def test_level_one_customers_order_level_drinks(self):
        ctrl = RoundController(2)
        ctrl.start_level(1)
        for _ in range(400):
            ctrl.tick(MAX_FRAME_DT)
        for customer in ctrl.queue:
            self.assertIn(customer.drink_id, ("hot", "boba"))

    def test_locked_level_falls_back_to_next_playable(self):
        ctrl = RoundController(3)
        self.assertEqual(ctrl.start_level(3), 1)
        self.assertEqual(ctrl.state.level_id, 1)

    def test_same_seed_reproduces_round(self):
        a = RoundController(21)
        b = RoundController(21)
        a.start_level(1)
        b.start_level(1)
        for _ in range(300):
            a.tick(MAX_FRAME_DT)
            b.tick(MAX_FRAME_DT)
        self.assertEqual(a.state.duration, b.state.duration)
        self.assertEqual([c.drink_id for c in a.queue], [c.drink_id for c in b.queue])
        self.assertEqual(a.session.order_line, b.session.order_line)


class TestTick(unittest.TestCase):
    def test_tick_ignored_outside_play(self):
        ctrl = RoundController(1)
        ctrl.tick(MAX_FRAME_DT)
        self.assertEqual(ctrl.mode, RoundMode.MENU)
        self.assertEqual(len(ctrl.queue), 0)

    def test_delta_time_is_clamped(self):
        ctrl = controller_with_single_customer()
        customer = ctrl.queue.front()
        time_left = ctrl.state.time_left
        ctrl.tick(5.0)
        self.assertAlmostEqual(ctrl.state.time_left, time_left - MAX_FRAME_DT)
        self.assertAlmostEqual(customer.patience_left, 20.0 - MAX_FRAME_DT)

    def test_negative_delta_is_ignored(self):
        ctrl = controller_with_single_customer()
        time_left = ctrl.state.time_left
        ctrl.tick(-1.0)
        self.assertEqual(ctrl.state.time_left, time_left)

    def test_spawn_countdown_enqueues_and_reseeds(self):
        ctrl = controller_with_single_customer()
        ctrl.state.spawn_timer = 0.01
        ctrl.tick(MAX_FRAME_DT)
        self.assertEqual(len(ctrl.queue), 2)
        self.assertGreaterEqual(ctrl.state.spawn_timer, 4.0)
        self.assertLess(ctrl.state.spawn_timer, 7.0)

    def test_spawning_respects_line_cap(self):
        ctrl = RoundController(6)
        ctrl.select_difficulty("easy")
        ctrl.start_level(1)
        for _ in range(2000):
            ctrl.tick(MAX_FRAME_DT)
            self.assertLessEqual(len(ctrl.queue), 3)

    def test_customer_who_gives_up_is_counted_lost(self):
        ctrl = controller_with_single_customer()
        for _ in range(600):
            ctrl.tick(MAX_FRAME_DT)
        self.assertEqual(ctrl.state.customers_lost, 1)
        self.assertEqual(len(ctrl.queue), 0)
        self.assertEqual(ctrl.session.state, OrderState.EMPTY)
        self.assertIn("A customer left...", ctrl.event_log)

    def test_session_rebinds_when_front_leaves(self):
        ctrl = controller_with_single_customer()
        first = ctrl.queue.front()
        ctrl.state.spawn_timer = 25.0
        for _ in range(600):
            ctrl.tick(MAX_FRAME_DT)
        self.assertIsNot(ctrl.session.customer, first)
        self.assertIs(ctrl.session.customer, ctrl.queue.front())


class TestPause(unittest.TestCase):
    def test_pause_freezes_all_timers(self):
        ctrl = controller_with_single_customer()
        ctrl.state.spawn_timer = 3.0
        customer = ctrl.queue.front()
        self.assertTrue(ctrl.pause())
        frozen = (ctrl.state.time_left, ctrl.state.spawn_timer, customer.patience_left)
        for _ in range(100):
            ctrl.tick(MAX_FRAME_DT)
        self.assertEqual((ctrl.state.time_left, ctrl.state.spawn_timer, customer.patience_left), frozen)

        self.assertTrue(ctrl.resume())
        ctrl.tick(MAX_FRAME_DT)
        self.assertLess(ctrl.state.time_left, frozen[0])

    def test_pause_only_toggles_with_play(self):
        ctrl = RoundController(1)
        self.assertFalse(ctrl.pause())
        self.assertFalse(ctrl.resume())
        ctrl.start_level(1)
        self.assertFalse(ctrl.resume())
        self.assertTrue(ctrl.toggle_pause())
        self.assertEqual(ctrl.mode, RoundMode.PAUSE)
        self.assertFalse(ctrl.return_to_menu())
        self.assertTrue(ctrl.toggle_pause())
        self.assertEqual(ctrl.mode, RoundMode.PLAY)

    def test_commands_ignored_while_paused(self):
        ctrl = controller_with_single_customer()
        ctrl.pause()
        self.assertEqual(ctrl.add_ingredient("milk", IN_CUP), OrderSignal.ROUND_INACTIVE)
        self.assertEqual(ctrl.advance_whisk(1.0), OrderSignal.ROUND_INACTIVE)
        self.assertEqual(ctrl.serve(), (OrderSignal.ROUND_INACTIVE, None))
        self.assertEqual(ctrl.session.added, set())


class TestServe(unittest.TestCase):
    def test_serve_pops_customer_and_pays(self):
        ctrl = controller_with_single_customer()
        ctrl.queue.enqueue()
        first, second = list(ctrl.queue)
        prepare_front_order(ctrl)

        signal, result = ctrl.serve()

        self.assertEqual(signal, OrderSignal.SERVED)
        self.assertEqual(result.earned, 13)
        self.assertEqual(ctrl.state.earned, 13)
        self.assertEqual(list(ctrl.queue), [second])
        self.assertIs(ctrl.session.customer, second)
        self.assertEqual(ctrl.session.state, OrderState.BUILDING)
        self.assertEqual(ctrl.feedback, "Perfect serve! Combo up!")

    def test_premature_serve_reports_not_ready(self):
        ctrl = controller_with_single_customer()
        signal, result = ctrl.serve()
        self.assertEqual(signal, OrderSignal.NOT_READY)
        self.assertIsNone(result)
        self.assertEqual(ctrl.state.served, 0)
        self.assertEqual(len(ctrl.queue), 1)
        self.assertTrue(ctrl.feedback.startswith("Not ready yet"))

    def test_serve_with_empty_line(self):
        ctrl = controller_with_single_customer()
        ctrl.queue.clear()
        ctrl._sync_session()
        self.assertEqual(ctrl.serve(), (OrderSignal.NO_ORDER, None))

    def test_late_serve_breaks_combo(self):
        ctrl = controller_with_single_customer()
        prepare_front_order(ctrl)
        ctrl.serve()
        self.assertEqual(ctrl.state.combo, 1)

        ctrl.queue.enqueue()
        ctrl._sync_session()
        ctrl.queue.front().tip = 5
        prepare_front_order(ctrl)
        _, result = ctrl.serve()
        self.assertFalse(result.perfect)
        self.assertEqual(result.combo_bonus, 0)
        self.assertEqual(ctrl.state.combo, 0)
        self.assertEqual(ctrl.state.best_combo, 1)

    def test_pointer_taps_whisk_and_serve(self):
        ctrl = controller_with_single_customer()
        for ingredient in ctrl.session.drink.ingredients:
            ctrl.add_ingredient(ingredient, IN_CUP)
        whisk = Rect(*ZONES["whisk"]).center
        for _ in range(20):
            ctrl.pointer_down(whisk)
        self.assertTrue(ctrl.session.is_ready())
        self.assertEqual(ctrl.pointer_down(Rect(*ZONES["serve"]).center), OrderSignal.SERVED)
        self.assertEqual(ctrl.state.served, 1)

    def test_feedback_for_wrong_ingredient(self):
        ctrl = controller_with_single_customer()
        wrong = next(i for i in ("shimmer", "lavender_syrup") if i not in ctrl.session.drink.required)
        self.assertEqual(ctrl.add_ingredient(wrong, IN_CUP), OrderSignal.WRONG_INGREDIENT)
        self.assertEqual(ctrl.feedback, "Oops! That's not for this drink.")


class TestRoundEnd(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.save_path = Path(self._tmp.name) / "save.json"
        self.store = ProgressStore(self.save_path)

    def tearDown(self):
        self._tmp.cleanup()

    def _finish(self, ctrl: RoundController, earned: int) -> None:
        ctrl.state.earned = earned
        ctrl.state.time_left = 0.01
        ctrl.tick(MAX_FRAME_DT)

    def test_success_unlocks_next_level_and_persists(self):
        ctrl = RoundController(1, store=self.store)
        ctrl.start_level(1)
        self._finish(ctrl, earned=120)

        self.assertEqual(ctrl.mode, RoundMode.RESULTS)
        self.assertTrue(ctrl.state.success)
        self.assertEqual(ctrl.state.time_left, 0.0)
        self.assertEqual(ctrl.unlocked_level, 2)
        self.assertEqual(json.loads(self.save_path.read_text())["unlocked_level"], 2)

        self.assertEqual(ctrl.continue_after_results(), 2)
        self.assertEqual(ctrl.state.goal, 180)

    def test_failure_repeats_level(self):
        ctrl = RoundController(1, store=self.store)
        ctrl.start_level(1)
        self._finish(ctrl, earned=119)

        self.assertFalse(ctrl.state.success)
        self.assertEqual(ctrl.unlocked_level, 1)
        self.assertEqual(ctrl.continue_after_results(), 1)

    def test_unlock_is_capped_at_last_level(self):
        ctrl = RoundController(1, store=self.store)
        ctrl.unlocked_level = 5
        ctrl.start_level(5)
        self._finish(ctrl, earned=5000)
        self.assertEqual(ctrl.unlocked_level, 5)
        self.assertEqual(ctrl.continue_after_results(), 5)

    def test_replaying_old_level_does_not_lower_unlock(self):
        ctrl = RoundController(1, store=self.store)
        ctrl.unlocked_level = 4
        ctrl.start_level(1)
        self._finish(ctrl, earned=120)
        self.assertEqual(ctrl.unlocked_level, 4)

    def test_timers_stop_after_results(self):
        ctrl = RoundController(1, store=self.store)
        ctrl.start_level(1)
        self._finish(ctrl, earned=0)
        queue_len = len(ctrl.queue)
        ctrl.tick(MAX_FRAME_DT)
        self.assertEqual(ctrl.state.time_left, 0.0)
        self.assertEqual(len(ctrl.queue), queue_len)

    def test_return_to_menu_from_results(self):
        ctrl = RoundController(1, store=self.store)
        self.assertIsNone(ctrl.continue_after_results())
        ctrl.start_level(1)
        self._finish(ctrl, earned=0)
        self.assertTrue(ctrl.return_to_menu())
        self.assertEqual(ctrl.mode, RoundMode.MENU)

    def test_receipt_lists_totals(self):
        ctrl = RoundController(1, store=self.store)
        ctrl.start_level(1)
        self._finish(ctrl, earned=130)
        receipt = dict(ctrl.receipt())
        self.assertEqual(receipt["TOTAL"], "$130")
        self.assertEqual(receipt["Goal"], "$120")


class TestProgression(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.save_path = Path(self._tmp.name) / "save.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_saved_progress_is_restored(self):
        self.save_path.write_text(json.dumps({"unlocked_level": 3, "selected_difficulty": "hard"}))
        ctrl = RoundController(1, store=ProgressStore(self.save_path))
        self.assertEqual(ctrl.unlocked_level, 3)
        self.assertEqual(ctrl.selected_difficulty, "hard")
        self.assertEqual(ctrl.start_next(), 3)
        self.assertEqual(ctrl.queue.difficulty.line_cap, 7)

    def test_corrupt_save_falls_back_to_defaults(self):
        self.save_path.write_text("{not json")
        ctrl = RoundController(1, store=ProgressStore(self.save_path))
        self.assertEqual(ctrl.unlocked_level, 1)
        self.assertEqual(ctrl.selected_difficulty, "easy")

    def test_select_difficulty_rules(self):
        ctrl = RoundController(1, store=ProgressStore(self.save_path))
        self.assertFalse(ctrl.select_difficulty("nightmare"))
        self.assertTrue(ctrl.select_difficulty("medium"))
        self.assertEqual(json.loads(self.save_path.read_text())["selected_difficulty"], "medium")
        ctrl.start_level(1)
        self.assertFalse(ctrl.select_difficulty("hard"))
        self.assertEqual(ctrl.selected_difficulty, "medium")

    def test_reset_progress(self):
        ctrl = RoundController(1, store=ProgressStore(self.save_path))
        ctrl.unlocked_level = 4
        ctrl.reset_progress()
        self.assertEqual(ctrl.unlocked_level, 1)
        self.assertEqual(json.loads(self.save_path.read_text())["unlocked_level"], 1)

    def test_menu_info_describes_next_level(self):
        ctrl = RoundController(1)
        level_line, difficulty_line = ctrl.menu_info()
        self.assertIn("Hot Matcha + Boba Matcha", level_line)
        self.assertIn("Goal $120", level_line)
        self.assertIn("line 3", difficulty_line)


class TestSnapshot(unittest.TestCase):
    def test_snapshot_reflects_state(self):
        ctrl = controller_with_single_customer()
        ctrl.add_ingredient("milk", IN_CUP)
        snap = ctrl.snapshot()

        self.assertEqual(snap.mode, RoundMode.PLAY)
        self.assertEqual(snap.level_name, "Day 1")
        self.assertEqual(len(snap.customers), 1)
        self.assertEqual(snap.customers[0].patience_fraction, 1.0)
        self.assertEqual(snap.order.added, frozenset({"milk"}))
        self.assertFalse(snap.order.ready)
        self.assertIsNone(snap.drag)

    def test_snapshot_is_detached_from_state(self):
        ctrl = controller_with_single_customer()
        snap = ctrl.snapshot()
        ctrl.add_ingredient("milk", IN_CUP)
        self.assertEqual(snap.order.added, frozenset())


if __name__ == "__main__":
    unittest.main()
