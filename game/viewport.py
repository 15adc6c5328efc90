"""Letterboxed mapping between window pixels and world coordinates."""
from __future__ import annotations

from dataclasses import dataclass

from config import WORLD_H, WORLD_W
from game.entities import Point


@dataclass
class Viewport:
    world_w: float = WORLD_W
    world_h: float = WORLD_H
    scale: float = 1.0
    off_x: float = 0.0
    off_y: float = 0.0

    def resize(self, width: float, height: float) -> None:
        """Fit the world inside ``width`` x ``height``, centred."""
        if width <= 0 or height <= 0:
            return
        self.scale = min(width / self.world_w, height / self.world_h)
        self.off_x = (width - self.world_w * self.scale) / 2
        self.off_y = (height - self.world_h * self.scale) / 2

    def to_world(self, x: float, y: float) -> Point:
        return ((x - self.off_x) / self.scale, (y - self.off_y) / self.scale)

    def to_screen(self, x: float, y: float) -> Point:
        return (x * self.scale + self.off_x, y * self.scale + self.off_y)
