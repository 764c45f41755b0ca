from __future__ import annotations

import math

import esper

from .combat import damage_enemy, detonate_bomb, enemy_fire
from .content import (
    BOMB_PROXIMITY,
    CONTACT_DAMAGE_TO_ENEMY,
    CONTACT_DAMAGE_TO_PLAYER,
    MISSILE_HIT_EXPLOSION,
    MISSILE_SMOKE_CHANCE,
    PARTICLE_DRAG,
    PICKUP_MAGNET_SPEED,
    SPAWN_EVERY_TICKS,
)
from .context import GameContext
from .economy import UpgradeKind, UpgradeLedger
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
    Velocity,
)
from .factories import spawn_explosion, spawn_smoke
from .player import (
    adjust_thrust,
    collect_pickup,
    expire_timers,
    fire,
    fire_special,
    fly,
    regenerate,
    take_damage,
    turn,
)
from .steering import bank, steer, wrap_angle
from .waves import WaveDirector


def _ordered(*component_types):
    # Stable snapshot in creation order, skipping entities already marked dead
    return [
        (e, comps)
        for e, comps in sorted(esper.get_components(*component_types), key=lambda r: r[0])
        if esper.entity_exists(e)
    ]


class InputSystem(esper.Processor):
    def __init__(self, ctx: GameContext, ledger: UpgradeLedger) -> None:
        super().__init__()
        self.ctx = ctx
        self.ledger = ledger

    def process(self, dt: float) -> None:
        signal = self.ctx.control
        for _, (pos, flight, ship) in esper.get_components(Position, Flight, PlayerShip):
            if ship.downed:
                continue
            turn(flight, signal.turn_direction)
            if signal.thrust_delta:
                adjust_thrust(flight, signal.thrust_delta)
            if signal.fire:
                fire(self.ctx, pos, flight, ship)
            if signal.special:
                fire_special(self.ctx, pos, flight, ship, self.ledger.level(UpgradeKind.MISSILES))


class PlayerFlightSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        step = self.ctx.step
        for _, (pos, vel, flight, ship, health) in esper.get_components(Position, Velocity, Flight, PlayerShip, Health):
            fly(pos, vel, flight, ship, step)
            regenerate(ship, health, self.ctx.now_ms, step)
            expire_timers(ship, self.ctx.now_ms)


class EnemyAISystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.player is None:
            return
        ppos = esper.component_for_entity(self.ctx.player, Position)
        step = self.ctx.step
        for _, (pos, vel, flight, enemy) in _ordered(Position, Velocity, Flight, Enemy):
            dx, dy = ppos.x - pos.x, ppos.y - pos.y
            enemy.ai_timer += 1
            vel.x, vel.y = steer(
                enemy.archetype, (dx, dy), enemy.speed, enemy.ai_timer,
                self.ctx.rng.random(), (vel.x, vel.y),
            )
            if vel.x or vel.y:
                prev = flight.heading
                flight.heading = math.atan2(vel.y, vel.x)
                flight.roll = bank(prev, flight.heading, flight.roll)
            pos.x += vel.x * step
            pos.y += vel.y * step
            enemy_fire(self.ctx, enemy, pos, math.atan2(dy, dx), math.hypot(dx, dy))


class ProjectileSystem(esper.Processor):
    """Moves bullets, steers missiles and arms or detonates bombs."""

    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        now = self.ctx.now_ms
        step = self.ctx.step

        for e, (pos, vel, bullet) in _ordered(Position, Velocity, Bullet):
            pos.x += vel.x * step
            pos.y += vel.y * step
            if now - bullet.created > bullet.lifetime:
                esper.delete_entity(e)

        for e, (pos, vel, flight, missile) in _ordered(Position, Velocity, Flight, Missile):
            steer_missile(pos, flight, missile)
            vel.x = math.cos(flight.heading) * missile.speed
            vel.y = math.sin(flight.heading) * missile.speed
            pos.x += vel.x * step
            pos.y += vel.y * step
            if self.ctx.fx_rng.random() < MISSILE_SMOKE_CHANCE:
                spawn_smoke(pos.x, pos.y)
            if now - missile.created > missile.lifetime:
                esper.delete_entity(e)

        ppos = esper.component_for_entity(self.ctx.player, Position) if self.ctx.player is not None else None
        for e, (pos, vel, bomb) in _ordered(Position, Velocity, Bomb):
            pos.x += vel.x * step
            pos.y += vel.y * step
            if now > bomb.arm_at:
                bomb.armed = True
            if now >= bomb.fuse_at:
                detonate_bomb(self.ctx, e)
            elif bomb.armed and ppos is not None and math.hypot(ppos.x - pos.x, ppos.y - pos.y) < BOMB_PROXIMITY:
                detonate_bomb(self.ctx, e)


def steer_missile(pos: Position, flight: Flight, missile: Missile) -> None:
    """Turn a fraction of the way toward the target; fly straight if it is gone."""
    if missile.target is None or not esper.entity_exists(missile.target):
        return
    tpos = esper.component_for_entity(missile.target, Position)
    bearing = math.atan2(tpos.y - pos.y, tpos.x - pos.x)
    flight.heading += wrap_angle(bearing - flight.heading) * missile.turn


class PickupSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.player is None:
            return
        ppos = esper.component_for_entity(self.ctx.player, Position)
        pcol = esper.component_for_entity(self.ctx.player, Collider)
        ship = esper.component_for_entity(self.ctx.player, PlayerShip)
        health = esper.component_for_entity(self.ctx.player, Health)
        if ship.downed:
            return
        for e, (pos, col, pick) in _ordered(Position, Collider, Pickup):
            dx, dy = ppos.x - pos.x, ppos.y - pos.y
            dist = math.hypot(dx, dy)
            if 0 < dist < pick.magnet_radius:
                pull = min(PICKUP_MAGNET_SPEED * self.ctx.step, dist)
                pos.x += dx / dist * pull
                pos.y += dy / dist * pull
            if dist < pcol.radius + col.radius:
                collect_pickup(self.ctx, pick.kind, ship, health)
                esper.delete_entity(e)


class ParticleSystem(esper.Processor):
    def process(self, dt: float) -> None:
        for e, (pos, vel, particle) in esper.get_components(Position, Velocity, Particle):
            pos.x += vel.x
            pos.y += vel.y
            vel.x *= PARTICLE_DRAG
            vel.y *= PARTICLE_DRAG
            particle.age += 1
            if particle.age > particle.lifetime:
                esper.delete_entity(e)


class WaveSpawnSystem(esper.Processor):
    def __init__(self, ctx: GameContext, director: WaveDirector) -> None:
        super().__init__()
        self.ctx = ctx
        self.director = director

    def process(self, dt: float) -> None:
        self.ctx.spawn_timer += 1
        if self.ctx.spawn_timer % SPAWN_EVERY_TICKS == 0:
            self.director.spawn_enemy()


class CollisionSystem(esper.Processor):
    """Pairwise proximity tests, resolved in a fixed order.

    1. player bullets vs enemies (first enemy in creation order wins)
    2. missiles vs enemies (same rule, radius includes the missile)
    3. enemy bullets vs the player
    4. enemy bodies vs the player (contact damage both ways, every tick)
    """

    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        enemies = _ordered(Position, Collider, Enemy)

        for be, (bpos, bullet) in _ordered(Position, Bullet):
            if bullet.owner != "player":
                continue
            for ee, (epos, ecol, _enemy) in enemies:
                if not esper.entity_exists(ee):
                    continue
                if math.hypot(epos.x - bpos.x, epos.y - bpos.y) < ecol.radius:
                    damage_enemy(self.ctx, ee, bullet.damage)
                    esper.delete_entity(be)
                    break

        for me, (mpos, mcol, missile) in _ordered(Position, Collider, Missile):
            for ee, (epos, ecol, _enemy) in enemies:
                if not esper.entity_exists(ee):
                    continue
                if math.hypot(epos.x - mpos.x, epos.y - mpos.y) < ecol.radius + mcol.radius:
                    damage_enemy(self.ctx, ee, missile.damage)
                    spawn_explosion(self.ctx, mpos.x, mpos.y, MISSILE_HIT_EXPLOSION)
                    esper.delete_entity(me)
                    break

        if self.ctx.player is None:
            return
        ppos = esper.component_for_entity(self.ctx.player, Position)
        pcol = esper.component_for_entity(self.ctx.player, Collider)
        ship = esper.component_for_entity(self.ctx.player, PlayerShip)
        health = esper.component_for_entity(self.ctx.player, Health)

        for be, (bpos, bullet) in _ordered(Position, Bullet):
            if bullet.owner != "enemy":
                continue
            if math.hypot(ppos.x - bpos.x, ppos.y - bpos.y) < pcol.radius:
                take_damage(self.ctx, ship, health, bullet.damage)
                esper.delete_entity(be)

        for ee, (epos, ecol, _enemy) in enemies:
            if not esper.entity_exists(ee):
                continue
            if math.hypot(ppos.x - epos.x, ppos.y - epos.y) < pcol.radius + ecol.radius:
                take_damage(self.ctx, ship, health, CONTACT_DAMAGE_TO_PLAYER)
                damage_enemy(self.ctx, ee, CONTACT_DAMAGE_TO_ENEMY)


class CameraSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if self.ctx.player is not None:
            ppos = esper.component_for_entity(self.ctx.player, Position)
            self.ctx.camera.follow(ppos.x, ppos.y)
        self.ctx.camera.update(self.ctx.fx_rng)
