from __future__ import annotations

import random
from dataclasses import dataclass

from .content import CAMERA_DEADZONE, MAX_SHAKE, SHAKE_DECAY


@dataclass
class Camera:
    """Deadzone-follow camera.

    ``x``/``y`` is the world point at the centre of the view. The camera only
    moves when the tracked subject leaves the central deadzone rectangle, and
    then just far enough to keep the subject on the rectangle's edge.
    """

    view_w: int = 960
    view_h: int = 540
    x: float = 0.0
    y: float = 0.0
    shake: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def deadzone(self) -> tuple[float, float]:
        return self.view_w * CAMERA_DEADZONE, self.view_h * CAMERA_DEADZONE

    def center_on(self, x: float, y: float) -> None:
        self.x, self.y = x, y

    def follow(self, x: float, y: float) -> None:
        dz_w, dz_h = self.deadzone
        if x > self.x + dz_w:
            self.x = x - dz_w
        elif x < self.x - dz_w:
            self.x = x + dz_w
        if y > self.y + dz_h:
            self.y = y - dz_h
        elif y < self.y - dz_h:
            self.y = y + dz_h

    def add_shake(self, amount: float) -> None:
        self.shake = min(self.shake + amount, MAX_SHAKE)

    def update(self, rng: random.Random) -> None:
        self.offset_x = (rng.random() - 0.5) * self.shake
        self.offset_y = (rng.random() - 0.5) * self.shake
        self.shake *= SHAKE_DECAY
        if self.shake < 0.1:
            self.shake = 0.0

    def transform(self) -> tuple[float, float]:
        # Top-left world coordinate of the view, shake included
        return (
            self.x - self.view_w / 2 + self.offset_x,
            self.y - self.view_h / 2 + self.offset_y,
        )

    def resize(self, width: int, height: int) -> None:
        self.view_w, self.view_h = width, height
