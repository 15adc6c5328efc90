"""Pointer drag-and-drop from the ingredient tray into the cup."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from config import (
    BOUNCE_BACK_EASE,
    BOUNCE_BACK_SNAP_DISTANCE,
    INGREDIENT_IDS,
    TRAY_COLUMNS,
    TRAY_SLOT_GAP,
    TRAY_SLOT_PADDING,
    TRAY_SLOT_SIZE,
    ZONES,
)
from game.entities import DragToken, Point, Rect
from game.order_session import OrderSession, OrderSignal


@dataclass(frozen=True)
class TraySlot:
    ingredient_id: str
    rect: Rect


def build_tray_slots(
    ingredient_ids: Sequence[str] = INGREDIENT_IDS,
    tray: Rect = Rect(*ZONES["tray"]),
) -> List[TraySlot]:
    slots: List[TraySlot] = []
    step = TRAY_SLOT_SIZE + TRAY_SLOT_GAP
    for idx, ingredient_id in enumerate(ingredient_ids):
        col = idx % TRAY_COLUMNS
        row = idx // TRAY_COLUMNS
        rect = Rect(
            tray.x + TRAY_SLOT_PADDING + col * step,
            tray.y + TRAY_SLOT_PADDING + row * step,
            TRAY_SLOT_SIZE,
            TRAY_SLOT_SIZE,
        )
        slots.append(TraySlot(ingredient_id, rect))
    return slots


class DragInteraction:
    """Turns pointer down/move/up into ``OrderSession.add_ingredient`` calls.

    A rejected (wrong) ingredient is not dropped immediately: the token eases
    back toward its tray slot on every :meth:`update` until it is close
    enough to discard.
    """

    def __init__(self, slots: Optional[List[TraySlot]] = None) -> None:
        self.slots = slots if slots is not None else build_tray_slots()
        self.token: Optional[DragToken] = None

    @property
    def dragging(self) -> bool:
        return self.token is not None and not self.token.bounce_back

    def hit_test(self, pos: Point) -> Optional[TraySlot]:
        for slot in self.slots:
            if slot.rect.contains(pos):
                return slot
        return None

    def pointer_down(self, pos: Point) -> bool:
        if self.token is not None:
            return False
        slot = self.hit_test(pos)
        if slot is None:
            return False
        origin_x, origin_y = slot.rect.center
        self.token = DragToken(
            ingredient_id=slot.ingredient_id,
            x=pos[0],
            y=pos[1],
            origin_x=origin_x,
            origin_y=origin_y,
        )
        return True

    def pointer_move(self, pos: Point) -> None:
        if not self.dragging:
            return
        self.token.x, self.token.y = pos

    def pointer_up(self, session: OrderSession) -> Optional[OrderSignal]:
        if not self.dragging:
            return None
        token = self.token
        signal = session.add_ingredient(token.ingredient_id, token.position)
        if signal == OrderSignal.WRONG_INGREDIENT:
            token.bounce_back = True
        else:
            self.token = None
        return signal

    def update(self) -> None:
        token = self.token
        if token is None or not token.bounce_back:
            return
        dx = token.origin_x - token.x
        dy = token.origin_y - token.y
        if math.hypot(dx, dy) < BOUNCE_BACK_SNAP_DISTANCE:
            self.token = None
            return
        token.x += dx * BOUNCE_BACK_EASE
        token.y += dy * BOUNCE_BACK_EASE

    def cancel(self) -> None:
        self.token = None
