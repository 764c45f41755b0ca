from __future__ import annotations

import math

import esper

from .content import (
    ENGAGEMENT_RANGE,
    PICKUP_DROP_CHANCE,
    SPECIAL_MAX,
    SPECIAL_PER_KILL,
    VOLLEY_ARCHETYPES,
    VOLLEY_OFFSET,
    VOLLEY_SPREAD,
)
from .context import GameContext
from .ecs_components import Bomb, Collider, Enemy, Health, PlayerShip, Position
from .factories import create_bomb, create_bullet, create_pickup, spawn_explosion
from .player import take_damage
from .steering import aim_error


def damage_enemy(ctx: GameContext, eid: int, amount: float) -> bool:
    """Damage a live enemy. Returns True if this hit destroyed it."""
    if not esper.entity_exists(eid):
        return False
    health = esper.component_for_entity(eid, Health)
    health.current -= amount
    if health.current <= 0:
        kill_enemy(ctx, eid)
        return True
    return False


def kill_enemy(ctx: GameContext, eid: int) -> None:
    enemy = esper.component_for_entity(eid, Enemy)
    pos = esper.component_for_entity(eid, Position)
    col = esper.component_for_entity(eid, Collider)

    ship = None
    if ctx.player is not None and esper.entity_exists(ctx.player):
        ship = esper.component_for_entity(ctx.player, PlayerShip)
    # A downed pilot earns nothing for kills that land after the fatal hit
    if ship is None or not ship.downed:
        ctx.stats.credits += enemy.credits
        ctx.stats.kills += 1
        ctx.stats.wave_kills += 1
        if ship is not None:
            ship.special_charge = min(ship.special_charge + SPECIAL_PER_KILL, SPECIAL_MAX)

    spawn_explosion(ctx, pos.x, pos.y, col.radius * 2)
    if ctx.rng.random() < PICKUP_DROP_CHANCE:
        create_pickup(ctx, pos.x, pos.y)
    # Deferred: the entity stays readable until end-of-tick compaction
    esper.delete_entity(eid)


def blast_damage(damage: float, dist: float, radius: float) -> float:
    if dist >= radius:
        return 0.0
    return damage * (1.0 - dist / radius)


def detonate_bomb(ctx: GameContext, eid: int) -> None:
    bomb = esper.component_for_entity(eid, Bomb)
    pos = esper.component_for_entity(eid, Position)
    spawn_explosion(ctx, pos.x, pos.y, bomb.blast_radius)
    if ctx.player is not None:
        ppos = esper.component_for_entity(ctx.player, Position)
        dist = math.hypot(ppos.x - pos.x, ppos.y - pos.y)
        amount = blast_damage(bomb.damage, dist, bomb.blast_radius)
        if amount > 0:
            take_damage(
                ctx,
                esper.component_for_entity(ctx.player, PlayerShip),
                esper.component_for_entity(ctx.player, Health),
                amount,
            )
    esper.delete_entity(eid)


def enemy_fire(ctx: GameContext, enemy: Enemy, pos: Position, bearing: float, dist: float) -> bool:
    """Fire at the player if in range and off cooldown."""
    if dist >= ENGAGEMENT_RANGE:
        return False
    if ctx.now_ms - enemy.last_fired < enemy.fire_interval:
        return False
    enemy.last_fired = ctx.now_ms

    if enemy.archetype == "bomber":
        create_bomb(ctx, pos.x, pos.y)
        return True

    count = 3 if enemy.archetype in VOLLEY_ARCHETYPES else 1
    side_x, side_y = math.cos(bearing + math.pi / 2), math.sin(bearing + math.pi / 2)
    for i in range(count):
        lane = i - (count - 1) / 2
        angle = bearing + lane * VOLLEY_SPREAD + aim_error(enemy.accuracy, ctx.rng.random())
        create_bullet(
            ctx,
            pos.x + side_x * lane * VOLLEY_OFFSET,
            pos.y + side_y * lane * VOLLEY_OFFSET,
            angle,
            enemy.damage,
            "enemy",
        )
    return True
