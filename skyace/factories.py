from __future__ import annotations

import math
import random
from typing import Optional

import esper

from .content import (
    BOMB_ARM_MS,
    BOMB_BLAST_RADIUS,
    BOMB_DAMAGE,
    BOMB_DRIFT,
    BOMB_FUSE_MS,
    BOMB_SIZE,
    BULLET_LIFETIME_MS,
    BULLET_SIZE,
    BULLET_SPEED,
    EXPLOSION_COLORS,
    EXPLOSION_PARTICLES,
    MISSILE_DAMAGE,
    MISSILE_LIFETIME_MS,
    MISSILE_SIZE,
    MISSILE_SPEED,
    MISSILE_TURN,
    PARTICLE_LIFETIME,
    PICKUP_COLORS,
    PICKUP_MAGNET_RADIUS,
    PICKUP_SIZE,
    PICKUP_WEIGHTS,
    PLAYER_MIN_SPEED,
    PLAYER_SIZE,
    PLAYER_START_THRUST,
    SMOKE_COLOR,
    SMOKE_LIFETIME,
    archetype,
)
from .context import GameContext
from .economy import Loadout
from .ecs_components import (
    Bomb,
    Bullet,
    Collider,
    Enemy,
    Flight,
    Health,
    Missile,
    Particle,
    Pickup,
    PlayerShip,
    Position,
    Sprite,
    Velocity,
)


def create_player(loadout: Loadout, pos: tuple[float, float] = (0.0, 0.0)) -> int:
    e = esper.create_entity()
    esper.add_component(e, Position(float(pos[0]), float(pos[1])))
    esper.add_component(e, Velocity(PLAYER_MIN_SPEED, 0.0))
    esper.add_component(e, Flight(heading=0.0, thrust=PLAYER_START_THRUST))
    esper.add_component(e, Health(current=loadout.max_health, max_hp=loadout.max_health))
    esper.add_component(e, Collider(radius=PLAYER_SIZE))
    esper.add_component(e, Sprite((0, 212, 255), PLAYER_SIZE))
    esper.add_component(e, PlayerShip(
        armor=loadout.armor,
        damage=loadout.damage,
        max_speed=loadout.max_speed,
        base_fire_interval=loadout.fire_interval,
    ))
    return e


def apply_loadout(ship: PlayerShip, health: Health, loadout: Loadout, refill: bool = False) -> None:
    ship.armor = loadout.armor
    ship.damage = loadout.damage
    ship.max_speed = loadout.max_speed
    ship.base_fire_interval = loadout.fire_interval
    health.max_hp = loadout.max_health
    if refill:
        health.current = health.max_hp
    else:
        health.current = min(health.current, health.max_hp)


def create_enemy(kind: str, x: float, y: float) -> int:
    stats = archetype(kind)
    e = esper.create_entity()
    esper.add_component(e, Position(x, y))
    esper.add_component(e, Velocity(0.0, 0.0))
    esper.add_component(e, Flight())
    esper.add_component(e, Health(current=stats.max_health, max_hp=stats.max_health))
    esper.add_component(e, Collider(radius=stats.size))
    esper.add_component(e, Sprite(stats.color, stats.size))
    esper.add_component(e, Enemy(
        archetype=kind,
        speed=stats.speed,
        damage=stats.damage,
        fire_interval=stats.fire_interval_ms,
        accuracy=stats.accuracy,
        credits=stats.credits,
    ))
    return e


def create_bullet(ctx: GameContext, x: float, y: float, angle: float, damage: float, owner: str) -> int:
    e = esper.create_entity()
    esper.add_component(e, Position(x, y))
    esper.add_component(e, Velocity(math.cos(angle) * BULLET_SPEED, math.sin(angle) * BULLET_SPEED))
    esper.add_component(e, Bullet(damage=damage, owner=owner, created=ctx.now_ms, lifetime=BULLET_LIFETIME_MS))
    esper.add_component(e, Collider(radius=BULLET_SIZE))
    color = (255, 255, 0) if owner == "player" else (255, 68, 68)
    esper.add_component(e, Sprite(color, BULLET_SIZE))
    return e


def create_missile(ctx: GameContext, x: float, y: float, angle: float, target: Optional[int]) -> int:
    e = esper.create_entity()
    esper.add_component(e, Position(x, y))
    esper.add_component(e, Velocity(math.cos(angle) * MISSILE_SPEED, math.sin(angle) * MISSILE_SPEED))
    esper.add_component(e, Flight(heading=angle))
    esper.add_component(e, Missile(
        target=target,
        damage=MISSILE_DAMAGE,
        speed=MISSILE_SPEED,
        turn=MISSILE_TURN,
        created=ctx.now_ms,
        lifetime=MISSILE_LIFETIME_MS,
    ))
    esper.add_component(e, Collider(radius=MISSILE_SIZE))
    esper.add_component(e, Sprite((255, 136, 0), MISSILE_SIZE))
    return e


def create_bomb(ctx: GameContext, x: float, y: float) -> int:
    e = esper.create_entity()
    esper.add_component(e, Position(x, y))
    esper.add_component(e, Velocity(*BOMB_DRIFT))
    esper.add_component(e, Bomb(
        damage=BOMB_DAMAGE,
        blast_radius=BOMB_BLAST_RADIUS,
        created=ctx.now_ms,
        arm_at=ctx.now_ms + BOMB_ARM_MS,
        fuse_at=ctx.now_ms + BOMB_FUSE_MS,
    ))
    esper.add_component(e, Collider(radius=BOMB_SIZE))
    esper.add_component(e, Sprite((51, 51, 51), BOMB_SIZE))
    return e


def roll_pickup_kind(rng: random.Random) -> str:
    roll = rng.random()
    acc = 0.0
    for kind, weight in PICKUP_WEIGHTS:
        acc += weight
        if roll < acc:
            return kind
    return PICKUP_WEIGHTS[-1][0]


def create_pickup(ctx: GameContext, x: float, y: float, kind: Optional[str] = None) -> int:
    kind = kind or roll_pickup_kind(ctx.rng)
    e = esper.create_entity()
    esper.add_component(e, Position(x, y))
    esper.add_component(e, Pickup(kind=kind, magnet_radius=PICKUP_MAGNET_RADIUS, bob_phase=ctx.fx_rng.random() * math.tau))
    esper.add_component(e, Collider(radius=PICKUP_SIZE))
    esper.add_component(e, Sprite(PICKUP_COLORS[kind], PICKUP_SIZE))
    return e


def spawn_particle(x: float, y: float, vx: float, vy: float, color: tuple[int, int, int], size: float, lifetime: int) -> int:
    e = esper.create_entity()
    esper.add_component(e, Position(x, y))
    esper.add_component(e, Velocity(vx, vy))
    esper.add_component(e, Particle(color=color, size=size, lifetime=lifetime))
    return e


def spawn_explosion(ctx: GameContext, x: float, y: float, size: float) -> None:
    rng = ctx.fx_rng
    for i in range(EXPLOSION_PARTICLES):
        angle = math.tau * i / EXPLOSION_PARTICLES
        speed = rng.random() * 5 + 2
        spawn_particle(
            x, y,
            math.cos(angle) * speed, math.sin(angle) * speed,
            rng.choice(EXPLOSION_COLORS),
            rng.random() * 5 + 3,
            PARTICLE_LIFETIME,
        )
    ctx.camera.add_shake(size / 10)


def spawn_smoke(x: float, y: float) -> int:
    return spawn_particle(x, y, 0.0, 0.0, SMOKE_COLOR, 3, SMOKE_LIFETIME)
