from __future__ import annotations

import logging
import math
from typing import Optional

import esper

from .content import (
    FIRE_RATE_BOOST_DURATION_MS,
    FIRE_RATE_BOOST_MS,
    GUN_CONVERGENCE,
    GUN_JITTER,
    GUN_NOSE,
    GUN_OFFSET,
    MIN_FIRE_INTERVAL_MS,
    MISSILE_FAN,
    PICKUP_ARMOR,
    PICKUP_HEAL_FRACTION,
    PLAYER_BASE_TURN,
    PLAYER_DRAG,
    PLAYER_HIT_SHAKE,
    PLAYER_INVULNERABLE_MS,
    PLAYER_MIN_SPEED,
    PLAYER_REGEN_DELAY_MS,
    PLAYER_REGEN_RATE,
    PLAYER_ROLL_SMOOTHING,
    PLAYER_THRUST_ACCEL,
    PLAYER_THRUST_TURN_BONUS,
    SPECIAL_MAX,
    WORLD_HALF,
)
from .context import GameContext
from .ecs_components import Effect, Enemy, Flight, Health, PlayerShip, Position, Velocity
from .factories import create_bullet, create_missile

log = logging.getLogger(__name__)


def turn(flight: Flight, direction: int) -> None:
    """Rotate the heading one step; faster with more thrust."""
    increment = PLAYER_BASE_TURN + PLAYER_THRUST_TURN_BONUS * flight.thrust
    flight.turn_rate = increment * direction
    flight.heading += flight.turn_rate


def adjust_thrust(flight: Flight, delta: float) -> None:
    flight.thrust = max(0.0, min(1.0, flight.thrust + delta))


def fly(pos: Position, vel: Velocity, flight: Flight, ship: PlayerShip, step: float = 1.0) -> None:
    """Advance the powered flight model by one tick.

    Thrust pushes along the heading, drag bleeds speed, and the result is held
    between the stall speed and the upgrade-dependent top speed before being
    integrated. Hitting the world edge clamps the position and bounces the
    normal velocity component back at half strength.
    """
    accel = PLAYER_THRUST_ACCEL * flight.thrust * step
    vel.x += math.cos(flight.heading) * accel
    vel.y += math.sin(flight.heading) * accel
    drag = PLAYER_DRAG ** step
    vel.x *= drag
    vel.y *= drag

    speed = math.hypot(vel.x, vel.y)
    if speed < PLAYER_MIN_SPEED:
        vel.x = math.cos(flight.heading) * PLAYER_MIN_SPEED
        vel.y = math.sin(flight.heading) * PLAYER_MIN_SPEED
    elif speed > ship.max_speed:
        vel.x = vel.x / speed * ship.max_speed
        vel.y = vel.y / speed * ship.max_speed

    pos.x += vel.x * step
    pos.y += vel.y * step

    if pos.x < -WORLD_HALF or pos.x > WORLD_HALF:
        pos.x = max(-WORLD_HALF, min(WORLD_HALF, pos.x))
        vel.x = -vel.x * 0.5
    if pos.y < -WORLD_HALF or pos.y > WORLD_HALF:
        pos.y = max(-WORLD_HALF, min(WORLD_HALF, pos.y))
        vel.y = -vel.y * 0.5

    # Banking is cosmetic: ease the roll toward the normalised turn rate
    max_turn = PLAYER_BASE_TURN + PLAYER_THRUST_TURN_BONUS
    target = max(-1.0, min(1.0, flight.turn_rate / max_turn))
    flight.roll += (target - flight.roll) * PLAYER_ROLL_SMOOTHING


def regenerate(ship: PlayerShip, health: Health, now: float, step: float = 1.0) -> None:
    if ship.downed:
        return
    if now - ship.last_hit > PLAYER_REGEN_DELAY_MS:
        health.current = min(health.current + PLAYER_REGEN_RATE * step, health.max_hp)


def expire_timers(ship: PlayerShip, now: float) -> None:
    if ship.invulnerable and now - ship.invulnerable_since > PLAYER_INVULNERABLE_MS:
        ship.invulnerable = False
    ship.effects = [fx for fx in ship.effects if fx.expires_at > now]


def fire_interval(ship: PlayerShip) -> float:
    interval = ship.base_fire_interval
    if any(fx.kind == "fireRate" for fx in ship.effects):
        interval = max(MIN_FIRE_INTERVAL_MS, interval - FIRE_RATE_BOOST_MS)
    return interval


def take_damage(ctx: GameContext, ship: PlayerShip, health: Health, amount: float) -> float:
    """Apply a hit after armor. Returns the health actually removed.

    The first hit that empties the hull latches ``ship.downed``; nothing later
    in the tick can bring the ship back.
    """
    if ship.invulnerable or ship.downed:
        return 0.0
    actual = max(1.0, amount - ship.armor)
    before = health.current
    health.current = max(0.0, health.current - actual)
    ship.last_hit = ctx.now_ms
    ctx.camera.shake = PLAYER_HIT_SHAKE
    if health.current <= 0:
        ship.downed = True
        log.debug("Player downed at %.0f ms", ctx.now_ms)
    return before - health.current


def fire(ctx: GameContext, pos: Position, flight: Flight, ship: PlayerShip) -> bool:
    now = ctx.now_ms
    if now - ship.last_fired < fire_interval(ship):
        return False
    ship.last_fired = now

    a = flight.heading
    nose_x = pos.x + math.cos(a) * GUN_NOSE
    nose_y = pos.y + math.sin(a) * GUN_NOSE
    # Left gun sits at heading - pi/2 and converges toward the centreline
    for side in (-1, 1):
        gx = nose_x + math.cos(a + side * math.pi / 2) * GUN_OFFSET
        gy = nose_y + math.sin(a + side * math.pi / 2) * GUN_OFFSET
        jitter = (ctx.rng.random() - 0.5) * GUN_JITTER
        create_bullet(ctx, gx, gy, a - side * GUN_CONVERGENCE + jitter, ship.damage, "player")
    return True


def nearest_enemy(x: float, y: float) -> Optional[int]:
    best: Optional[int] = None
    best_d = math.inf
    for e, (epos, _enemy) in sorted(esper.get_components(Position, Enemy), key=lambda r: r[0]):
        if not esper.entity_exists(e):
            continue
        d = math.hypot(epos.x - x, epos.y - y)
        if d < best_d:
            best_d = d
            best = e
    return best


def fire_special(ctx: GameContext, pos: Position, flight: Flight, ship: PlayerShip, missile_level: int) -> bool:
    if ship.special_charge < SPECIAL_MAX or missile_level <= 0:
        return False
    ship.special_charge = 0.0
    target = nearest_enemy(pos.x, pos.y)
    count = 2 + missile_level
    for i in range(count):
        angle = flight.heading + (i - count / 2) * MISSILE_FAN
        create_missile(ctx, pos.x, pos.y, angle, target)
    log.debug("Launched %d missiles at target %s", count, target)
    return True


def collect_pickup(ctx: GameContext, kind: str, ship: PlayerShip, health: Health) -> None:
    if ship.downed:
        return
    if kind == "health":
        health.current = min(health.current + health.max_hp * PICKUP_HEAL_FRACTION, health.max_hp)
    elif kind == "armor":
        ship.armor += PICKUP_ARMOR
    elif kind == "fireRate":
        # Refresh rather than stack
        ship.effects = [fx for fx in ship.effects if fx.kind != "fireRate"]
        ship.effects.append(Effect("fireRate", ctx.now_ms + FIRE_RATE_BOOST_DURATION_MS))
    elif kind == "shield":
        ship.invulnerable = True
        ship.invulnerable_since = ctx.now_ms
    else:
        raise ValueError(f"Unknown pickup kind: {kind}")
