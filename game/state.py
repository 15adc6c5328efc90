"""Round bookkeeping and the read-only snapshot handed to the presentation layer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RoundMode(str, Enum):
    MENU = "MENU"
    PLAY = "PLAY"
    PAUSE = "PAUSE"
    RESULTS = "RESULTS"


@dataclass
class RoundState:
    """Timers and money accumulators for one level attempt."""

    level_id: int = 1
    goal: int = 0
    duration: float = 0.0
    time_left: float = 0.0
    base_total: int = 0
    tip_total: int = 0
    combo_bonus_total: int = 0
    earned: int = 0
    served: int = 0
    customers_lost: int = 0
    combo: int = 0
    best_combo: int = 0
    perfect_serves: int = 0
    spawn_timer: float = 0.0
    mode: RoundMode = RoundMode.MENU
    success: Optional[bool] = None

    def reset(self, level_id: int, goal: int, duration: float) -> None:
        self.level_id = level_id
        self.goal = goal
        self.duration = duration
        self.time_left = duration
        self.base_total = 0
        self.tip_total = 0
        self.combo_bonus_total = 0
        self.earned = 0
        self.served = 0
        self.customers_lost = 0
        self.combo = 0
        self.best_combo = 0
        self.perfect_serves = 0
        self.spawn_timer = 0.0
        self.success = None


@dataclass(frozen=True)
class CustomerView:
    customer_id: int
    name: str
    drink_id: str
    drink_name: str
    patience_fraction: float
    tip: int
    mood: str
    sprite: str


@dataclass(frozen=True)
class OrderView:
    customer_name: str
    drink_id: str
    drink_name: str
    required: Tuple[str, ...]
    added: frozenset
    whisk_progress: float
    order_line: str
    state: str
    ready: bool
    cup_image: str
    tip: int


@dataclass(frozen=True)
class DragView:
    ingredient_id: str
    x: float
    y: float
    bounce_back: bool


@dataclass(frozen=True)
class RoundSnapshot:
    mode: RoundMode
    level_id: int
    level_name: str
    goal: int
    duration: float
    time_left: float
    earned: int
    served: int
    base_total: int
    tip_total: int
    combo_bonus_total: int
    customers_lost: int
    combo: int
    best_combo: int
    perfect_serves: int
    difficulty_key: str
    difficulty_label: str
    unlocked_level: int
    success: Optional[bool]
    customers: Tuple[CustomerView, ...]
    order: Optional[OrderView]
    drag: Optional[DragView]
    feedback: str
