"""Core dataclasses for the Matcha Mother simulation."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from config import CUSTOMER_IDENTITIES

Point = Tuple[float, float]


class Mood(str, Enum):
    HAPPY = "happy"
    MAD = "mad"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in world coordinates (edges inclusive)."""

    x: float
    y: float
    w: float
    h: float

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h

    @property
    def center(self) -> Point:
        return (self.x + self.w / 2, self.y + self.h / 2)


@dataclass
class Customer:
    """A customer waiting in line.

    ``patience_left`` keeps counting down past zero; ``overtime`` tracks the
    seconds spent after patience ran out and drives the stepped tip decay.
    """

    customer_id: int
    name: str
    drink_id: str
    patience_left: float
    tip: int
    overtime: float = 0.0
    mood: Mood = Mood.HAPPY
    leaving: bool = False

    @property
    def sprite(self) -> str:
        return CUSTOMER_IDENTITIES.get(self.name, {}).get(self.mood.value, "")


@dataclass
class DragToken:
    """An ingredient being dragged from the tray, or easing back to it."""

    ingredient_id: str
    x: float
    y: float
    origin_x: float
    origin_y: float
    bounce_back: bool = False

    @property
    def position(self) -> Point:
        return (self.x, self.y)
