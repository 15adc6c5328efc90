"""Waiting line with stepped patience/tip decay."""
from __future__ import annotations

import math
import random
from typing import Iterator, List, Optional, Sequence

from config import CUSTOMER_IDENTITIES
from difficulty_catalog import DifficultyDefinition
from game.entities import Customer, Mood


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


class CustomerQueue:
    """FIFO line of customers for the active level and difficulty.

    Customers are only mutated by :meth:`tick` and only removed by
    :meth:`reap` (gave up) or :meth:`remove` (served).
    """

    def __init__(
        self,
        rng: random.Random,
        difficulty: DifficultyDefinition,
        drink_ids: Sequence[str],
    ) -> None:
        self.rng = rng
        self.difficulty = difficulty
        self.drink_ids: List[str] = list(drink_ids)
        self.customers: List[Customer] = []
        self._next_id = 1

    def configure(self, difficulty: DifficultyDefinition, drink_ids: Sequence[str]) -> None:
        self.difficulty = difficulty
        self.drink_ids = list(drink_ids)

    def __len__(self) -> int:
        return len(self.customers)

    def __iter__(self) -> Iterator[Customer]:
        return iter(self.customers)

    @property
    def is_full(self) -> bool:
        return len(self.customers) >= self.difficulty.line_cap

    def enqueue(self) -> Optional[Customer]:
        if self.is_full or not self.drink_ids:
            return None
        name = self.rng.choice(sorted(CUSTOMER_IDENTITIES))
        drink_id = self.rng.choice(self.drink_ids)
        customer = Customer(
            customer_id=self._next_id,
            name=name,
            drink_id=drink_id,
            patience_left=float(self.difficulty.patience),
            tip=self.difficulty.tip_max,
        )
        self._next_id += 1
        self.customers.append(customer)
        return customer

    def tick(self, dt: float) -> None:
        tip_max = self.difficulty.tip_max
        for customer in self.customers:
            if customer.leaving:
                continue

            customer.patience_left -= dt
            if customer.patience_left >= 0:
                continue

            customer.overtime += dt
            # Stepped: the tip holds at tip_max for the first full second of overtime.
            customer.tip = int(clamp(tip_max - math.floor(customer.overtime), 0, tip_max))
            if customer.tip <= 0:
                customer.mood = Mood.MAD
                if customer.overtime >= tip_max + 1:
                    customer.leaving = True

    def reap(self) -> int:
        survivors = [customer for customer in self.customers if not customer.leaving]
        removed = len(self.customers) - len(survivors)
        self.customers = survivors
        return removed

    def front(self) -> Optional[Customer]:
        return next((customer for customer in self.customers if not customer.leaving), None)

    def remove(self, customer: Customer) -> bool:
        for idx, queued in enumerate(self.customers):
            if queued is customer:
                del self.customers[idx]
                return True
        return False

    def clear(self) -> None:
        self.customers = []
