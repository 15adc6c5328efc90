"""Fulfilment state machine for the customer at the front of the line."""
from __future__ import annotations

import random
from enum import Enum
from typing import Dict, Optional, Set, Tuple

from drink_catalog import DrinkDefinition
from game.economy import ComboEconomy, ServeResult
from game.entities import Customer, Point, Rect
from game.state import RoundState


class OrderState(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    WHISKING = "whisking"
    READY = "ready"


class OrderSignal(str, Enum):
    """Outcome of a player command. Values key ``config.FEEDBACK_MESSAGES``."""

    ROUND_INACTIVE = "round_inactive"
    NO_ORDER = "no_order"
    DROP_OUTSIDE_TARGET = "drop_outside_target"
    WRONG_INGREDIENT = "wrong_ingredient"
    ALREADY_ADDED = "already_added"
    ADDED = "added"
    INGREDIENTS_COMPLETE = "ingredients_complete"
    NEEDS_INGREDIENTS = "needs_ingredients"
    WHISKED = "whisked"
    READY = "ready"
    NOT_READY = "not_ready"
    SERVED = "served"


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


class OrderSession:
    """Tracks added ingredients and whisk progress for one bound customer.

    The session never owns the customer; the queue does. ``added`` is kept a
    subset of the bound drink's required ingredients at all times.
    """

    def __init__(self, drinks: Dict[str, DrinkDefinition], target: Rect, rng: random.Random) -> None:
        self.drinks = drinks
        self.target = target
        self.rng = rng
        self.customer: Optional[Customer] = None
        self.drink: Optional[DrinkDefinition] = None
        self.added: Set[str] = set()
        self.whisk_progress: float = 0.0
        self.order_line: str = ""
        self.state: OrderState = OrderState.EMPTY

    def new_order(self, customer: Customer) -> None:
        self.customer = customer
        self.drink = self.drinks[customer.drink_id]
        self.added = set()
        self.whisk_progress = 0.0
        self.order_line = self.rng.choice(self.drink.order_lines)
        self.state = OrderState.BUILDING

    def clear(self) -> None:
        self.customer = None
        self.drink = None
        self.added = set()
        self.whisk_progress = 0.0
        self.order_line = ""
        self.state = OrderState.EMPTY

    def _ingredients_complete(self) -> bool:
        return self.drink is not None and self.added == self.drink.required

    def is_ready(self) -> bool:
        return self._ingredients_complete() and self.whisk_progress >= 1.0

    def add_ingredient(self, ingredient_id: str, drop_point: Point) -> OrderSignal:
        if self.drink is None or self.state == OrderState.EMPTY:
            return OrderSignal.NO_ORDER
        if not self.target.contains(drop_point):
            return OrderSignal.DROP_OUTSIDE_TARGET
        if ingredient_id not in self.drink.required:
            return OrderSignal.WRONG_INGREDIENT
        if ingredient_id in self.added:
            return OrderSignal.ALREADY_ADDED

        self.added.add(ingredient_id)
        if self._ingredients_complete():
            self.state = OrderState.WHISKING
            return OrderSignal.INGREDIENTS_COMPLETE
        return OrderSignal.ADDED

    def advance_whisk(self, amount: float) -> OrderSignal:
        if self.drink is None or self.state == OrderState.EMPTY:
            return OrderSignal.NO_ORDER
        if self.state == OrderState.BUILDING:
            return OrderSignal.NEEDS_INGREDIENTS

        self.whisk_progress = clamp(self.whisk_progress + amount, 0.0, 1.0)
        if self.is_ready():
            self.state = OrderState.READY
            return OrderSignal.READY
        self.state = OrderState.WHISKING
        return OrderSignal.WHISKED

    def serve(
        self,
        economy: ComboEconomy,
        round_state: RoundState,
        tip_max: int,
    ) -> Tuple[OrderSignal, Optional[ServeResult]]:
        if self.customer is None or not self.is_ready():
            return OrderSignal.NOT_READY, None
        result = economy.settle(round_state, tip=self.customer.tip, tip_max=tip_max)
        self.clear()
        return OrderSignal.SERVED, result
