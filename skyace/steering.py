"""Per-archetype enemy steering.

Every policy is a pure mapping from the enemy's situation (vector to the
player, AI timer, a random roll and its current velocity) to a new velocity.
The archetype is the only discriminant; there is no hidden state.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Tuple

from .content import (
    ACE_BURST_ANGLE,
    ACE_BURST_CHANCE,
    ACE_BURST_RANGE,
    ACE_BURST_SPEED,
    AIM_ERROR,
    BOMBER_LOITER_DRAG,
    BOMBER_LOITER_RANGE,
    ENEMY_ROLL_GAIN,
    ENEMY_ROLL_SMOOTHING,
    FIGHTER_STRAFE_RANGE,
    SCOUT_RETREAT_RANGE,
    VETERAN_BAND,
)

Vec = Tuple[float, float]


def _along(angle: float, speed: float) -> Vec:
    return math.cos(angle) * speed, math.sin(angle) * speed


def wrap_angle(a: float) -> float:
    """Normalise an angle to (-pi, pi]."""
    a = math.fmod(a, math.tau)
    if a <= -math.pi:
        a += math.tau
    elif a > math.pi:
        a -= math.tau
    return a


def _rookie(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    return _along(bearing, speed)


def _scout(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    if dist < SCOUT_RETREAT_RANGE:
        return _along(bearing + math.pi, speed)
    return _along(bearing, speed)


def _fighter(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    if dist < FIGHTER_STRAFE_RANGE:
        return _along(bearing + math.pi / 2 * math.sin(timer * 0.05), speed)
    return _along(bearing, speed)


def _veteran(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    near, far = VETERAN_BAND
    if dist > far:
        return _along(bearing, speed)
    if dist < near:
        return _along(bearing + math.pi, speed)
    return _along(bearing + math.pi / 2, speed)


def _bomber(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    if dist > BOMBER_LOITER_RANGE:
        return _along(bearing, speed)
    return vel[0] * BOMBER_LOITER_DRAG, vel[1] * BOMBER_LOITER_DRAG


def _elite(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    return _along(bearing + math.sin(timer * 0.06) * math.pi / 2, speed)


def _ace(bearing: float, dist: float, speed: float, timer: int, roll: float, vel: Vec) -> Vec:
    if dist < ACE_BURST_RANGE and roll < ACE_BURST_CHANCE:
        # Break left or right depending on the same roll
        side = 1.0 if roll < ACE_BURST_CHANCE / 2 else -1.0
        return _along(bearing + side * ACE_BURST_ANGLE, speed * ACE_BURST_SPEED)
    return _along(bearing + math.sin(timer * 0.1) * math.pi / 3, speed)


POLICIES: Dict[str, Callable[[float, float, float, int, float, Vec], Vec]] = {
    "rookie": _rookie,
    "scout": _scout,
    "fighter": _fighter,
    "veteran": _veteran,
    "bomber": _bomber,
    "elite": _elite,
    "ace": _ace,
}


def steer(archetype: str, to_player: Vec, speed: float, timer: int, roll: float, vel: Vec = (0.0, 0.0)) -> Vec:
    dx, dy = to_player
    bearing = math.atan2(dy, dx)
    dist = math.hypot(dx, dy)
    return POLICIES[archetype](bearing, dist, speed, timer, roll, vel)


def bank(prev_heading: float, heading: float, roll: float) -> float:
    target = max(-1.0, min(1.0, wrap_angle(heading - prev_heading) * ENEMY_ROLL_GAIN))
    return roll + (target - roll) * ENEMY_ROLL_SMOOTHING


def aim_error(accuracy: float, roll: float) -> float:
    """Uniform angular error in +/- AIM_ERROR / accuracy; ``roll`` is in [0, 1)."""
    half = AIM_ERROR / accuracy
    return (roll * 2.0 - 1.0) * half
