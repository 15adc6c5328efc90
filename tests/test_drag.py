"""Tests for tray drag-and-drop and the bounce-back animation."""
from __future__ import annotations

import random
import unittest

from config import INGREDIENT_IDS, TRAY_SLOT_SIZE, ZONES
from drink_catalog import DEFAULT_DRINK_DEFINITIONS
from game.drag import DragInteraction, build_tray_slots
from game.entities import Customer, Rect
from game.order_session import OrderSession, OrderSignal, OrderState

CUP = Rect(*ZONES["cup"])
TRAY = Rect(*ZONES["tray"])


def hot_session() -> OrderSession:
    session = OrderSession(dict(DEFAULT_DRINK_DEFINITIONS), CUP, random.Random(0))
    session.new_order(Customer(customer_id=1, name="Kevin", drink_id="hot", patience_left=20.0, tip=7))
    return session


class TestTraySlots(unittest.TestCase):
    def test_one_slot_per_ingredient_anchored_in_tray(self):
        slots = build_tray_slots()
        self.assertEqual([slot.ingredient_id for slot in slots], INGREDIENT_IDS)
        for slot in slots:
            self.assertEqual((slot.rect.w, slot.rect.h), (TRAY_SLOT_SIZE, TRAY_SLOT_SIZE))
            self.assertTrue(TRAY.contains((slot.rect.x, slot.rect.y)))
            self.assertTrue(TRAY.contains(slot.rect.center))

    def test_four_columns_then_wrap(self):
        slots = build_tray_slots()
        self.assertEqual(slots[0].rect.y, slots[3].rect.y)
        self.assertGreater(slots[4].rect.y, slots[0].rect.y)
        self.assertEqual(slots[4].rect.x, slots[0].rect.x)


class TestDragInteraction(unittest.TestCase):
    def setUp(self):
        self.drag = DragInteraction()
        self.session = hot_session()
        self.centers = {slot.ingredient_id: slot.rect.center for slot in self.drag.slots}

    def _drag_to(self, ingredient_id, target):
        self.assertTrue(self.drag.pointer_down(self.centers[ingredient_id]))
        self.drag.pointer_move(target)
        return self.drag.pointer_up(self.session)

    def test_pointer_down_outside_tray_starts_nothing(self):
        self.assertFalse(self.drag.pointer_down((5.0, 5.0)))
        self.assertIsNone(self.drag.token)
        self.assertIsNone(self.drag.pointer_up(self.session))

    def test_token_follows_pointer(self):
        self.drag.pointer_down(self.centers["milk"])
        self.drag.pointer_move((400.0, 300.0))
        self.assertTrue(self.drag.dragging)
        self.assertEqual(self.drag.token.position, (400.0, 300.0))

    def test_correct_drop_adds_ingredient_and_ends_drag(self):
        self.assertEqual(self._drag_to("milk", CUP.center), OrderSignal.ADDED)
        self.assertIsNone(self.drag.token)
        self.assertEqual(self.session.added, {"milk"})

    def test_drop_outside_cup_ends_drag_without_change(self):
        self.assertEqual(self._drag_to("milk", (700.0, 50.0)), OrderSignal.DROP_OUTSIDE_TARGET)
        self.assertIsNone(self.drag.token)
        self.assertEqual(self.session.added, set())

    def test_wrong_ingredient_bounces_back_to_slot(self):
        self.assertEqual(self._drag_to("boba", CUP.center), OrderSignal.WRONG_INGREDIENT)
        token = self.drag.token
        self.assertIsNotNone(token)
        self.assertTrue(token.bounce_back)
        self.assertFalse(self.drag.dragging)

        last_distance = None
        for _ in range(100):
            if self.drag.token is None:
                break
            distance = abs(token.origin_x - token.x) + abs(token.origin_y - token.y)
            if last_distance is not None:
                self.assertLessEqual(distance, last_distance)
            last_distance = distance
            self.drag.update()
        self.assertIsNone(self.drag.token)
        self.assertEqual(self.session.added, set())
        self.assertEqual(self.session.state, OrderState.BUILDING)

    def test_no_new_drag_while_bouncing(self):
        self._drag_to("boba", CUP.center)
        self.assertFalse(self.drag.pointer_down(self.centers["milk"]))
        self.drag.pointer_move((0.0, 0.0))
        self.assertNotEqual(self.drag.token.position, (0.0, 0.0))

    def test_cancel_drops_token(self):
        self.drag.pointer_down(self.centers["water"])
        self.drag.cancel()
        self.assertIsNone(self.drag.token)
        self.assertFalse(self.drag.dragging)


if __name__ == "__main__":
    unittest.main()
