from __future__ import annotations

import math
from typing import Dict, Optional, Protocol

import pygame

from .config import InputConfig
from .context import ControlSignal


class InputSource(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...

    def sample(self) -> ControlSignal: ...


class KeyboardMouseInput:
    """A/D or arrows turn, W/S throttle, Space/left click fire, Shift/right click special."""

    def __init__(self, cfg: InputConfig) -> None:
        self.thrust_step = cfg.thrust_step
        self._special_latch = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 3:
            self._special_latch = True
        elif event.type == pygame.KEYDOWN and event.key in (pygame.K_LSHIFT, pygame.K_RSHIFT):
            self._special_latch = True

    def sample(self) -> ControlSignal:
        keys = pygame.key.get_pressed()
        buttons = pygame.mouse.get_pressed()
        turn = 0
        if keys[pygame.K_a] or keys[pygame.K_LEFT]:
            turn -= 1
        if keys[pygame.K_d] or keys[pygame.K_RIGHT]:
            turn += 1
        thrust = 0.0
        if keys[pygame.K_w] or keys[pygame.K_UP]:
            thrust += self.thrust_step
        if keys[pygame.K_s] or keys[pygame.K_DOWN]:
            thrust -= self.thrust_step
        signal = ControlSignal(
            turn_direction=turn,
            thrust_delta=thrust,
            fire=bool(keys[pygame.K_SPACE] or buttons[0]),
            special=self._special_latch,
            is_pointer_device=True,
        )
        self._special_latch = False
        return signal


class TouchStickInput:
    """Single virtual stick on the left half, fire zone on the right half.

    Stick x beyond the deadzone turns, stick y trims the throttle (up = more).
    A second finger in the fire zone triggers the special weapon.
    """

    def __init__(self, cfg: InputConfig, width: int, height: int) -> None:
        self.thrust_step = cfg.thrust_step
        self.radius = cfg.stick_radius
        self.deadzone = cfg.stick_deadzone
        self.width = width
        self.height = height
        self._stick_finger: Optional[int] = None
        self._stick_origin = (0.0, 0.0)
        self._stick = (0.0, 0.0)
        self._fire_fingers: Dict[int, tuple[float, float]] = {}
        self._special_latch = False

    def _px(self, event: pygame.event.Event) -> tuple[float, float]:
        return event.x * self.width, event.y * self.height

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.FINGERDOWN:
            x, y = self._px(event)
            if x < self.width / 2 and self._stick_finger is None:
                self._stick_finger = event.finger_id
                self._stick_origin = (x, y)
                self._stick = (0.0, 0.0)
            else:
                self._fire_fingers[event.finger_id] = (x, y)
                if len(self._fire_fingers) >= 2:
                    self._special_latch = True
        elif event.type == pygame.FINGERMOTION and event.finger_id == self._stick_finger:
            x, y = self._px(event)
            dx, dy = x - self._stick_origin[0], y - self._stick_origin[1]
            dist = min(math.hypot(dx, dy), self.radius)
            angle = math.atan2(dy, dx)
            self._stick = (math.cos(angle) * dist / self.radius, math.sin(angle) * dist / self.radius)
        elif event.type == pygame.FINGERUP:
            if event.finger_id == self._stick_finger:
                self._stick_finger = None
                self._stick = (0.0, 0.0)
            self._fire_fingers.pop(event.finger_id, None)

    def sample(self) -> ControlSignal:
        sx, sy = self._stick
        turn = 0
        if sx > self.deadzone:
            turn = 1
        elif sx < -self.deadzone:
            turn = -1
        thrust = 0.0
        if abs(sy) > self.deadzone:
            thrust = -sy * self.thrust_step
        signal = ControlSignal(
            turn_direction=turn,
            thrust_delta=thrust,
            fire=bool(self._fire_fingers),
            special=self._special_latch,
            is_pointer_device=False,
        )
        self._special_latch = False
        return signal


def make_input(cfg: InputConfig, width: int, height: int) -> InputSource:
    if cfg.backend == "touch":
        return TouchStickInput(cfg, width, height)
    return KeyboardMouseInput(cfg)
