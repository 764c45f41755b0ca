import math

import esper
import pytest

from skyace.content import PLAYER_MIN_SPEED, WORLD_HALF
from skyace.ecs_components import Bullet, Flight, Health, Missile, PlayerShip, Position, Velocity
from skyace.factories import create_enemy
from skyace.player import (
    adjust_thrust,
    collect_pickup,
    expire_timers,
    fire,
    fire_interval,
    fire_special,
    fly,
    nearest_enemy,
    regenerate,
    take_damage,
    turn,
)


def make_ship(**kw):
    defaults = dict(armor=10.0, damage=10.0, max_speed=3.5, base_fire_interval=140.0)
    defaults.update(kw)
    return PlayerShip(**defaults)


def test_thrust_is_clamped():
    flight = Flight(thrust=0.95)
    adjust_thrust(flight, 0.2)
    assert flight.thrust == 1.0
    adjust_thrust(flight, -3)
    assert flight.thrust == 0.0


def test_turn_rate_grows_with_thrust():
    slow, fast = Flight(thrust=0.0), Flight(thrust=1.0)
    turn(slow, 1)
    turn(fast, -1)
    assert slow.heading == pytest.approx(0.045)
    assert fast.heading == pytest.approx(-0.075)
    assert fast.turn_rate < 0


def test_stalled_plane_is_pushed_to_min_speed_along_heading():
    pos, vel = Position(0, 0), Velocity(0, 0)
    flight = Flight(heading=math.pi / 2, thrust=0.0)
    fly(pos, vel, flight, make_ship())
    assert math.hypot(vel.x, vel.y) == pytest.approx(PLAYER_MIN_SPEED)
    assert vel.y == pytest.approx(PLAYER_MIN_SPEED)
    assert pos.y == pytest.approx(PLAYER_MIN_SPEED)


def test_speed_is_capped():
    pos, vel = Position(0, 0), Velocity(100, 0)
    fly(pos, vel, Flight(thrust=1.0), make_ship(max_speed=4.0))
    assert math.hypot(vel.x, vel.y) == pytest.approx(4.0)


def test_world_edge_bounces_inelastically():
    pos, vel = Position(WORLD_HALF - 1, 0), Velocity(5, 0)
    fly(pos, vel, Flight(thrust=0.0), make_ship(max_speed=10.0))
    assert pos.x == WORLD_HALF
    assert vel.x == pytest.approx(-5 * 0.95 * 0.5)


def test_roll_follows_turn_direction():
    pos, vel = Position(0, 0), Velocity(2, 0)
    flight = Flight(thrust=0.5)
    turn(flight, 1)
    fly(pos, vel, flight, make_ship())
    assert flight.roll > 0


def test_armor_mitigation_has_a_floor_of_one(playing):
    ship, health = make_ship(armor=10.0), Health(100, 100)
    assert take_damage(playing.ctx, ship, health, 15) == pytest.approx(5)
    assert take_damage(playing.ctx, ship, health, 5) == pytest.approx(1)
    assert health.current == pytest.approx(94)
    assert playing.ctx.camera.shake == 10


def test_invulnerable_player_takes_no_damage(playing):
    ship, health = make_ship(invulnerable=True), Health(100, 100)
    assert take_damage(playing.ctx, ship, health, 500) == 0
    assert health.current == 100
    assert ship.last_hit == -math.inf


def test_health_never_goes_negative(playing):
    ship, health = make_ship(), Health(30, 100)
    take_damage(playing.ctx, ship, health, 1000)
    assert health.current == 0


def test_regeneration_waits_for_quiet_period():
    ship, health = make_ship(last_hit=0.0), Health(50, 100)
    regenerate(ship, health, now=4000)
    assert health.current == 50
    regenerate(ship, health, now=5001)
    assert health.current == pytest.approx(50.5)


def test_fire_is_rate_limited(playing):
    ctx = playing.ctx
    pos, flight, ship = Position(0, 0), Flight(), make_ship()
    bullets_before = len(esper.get_component(Bullet))
    assert fire(ctx, pos, flight, ship)
    assert len(esper.get_component(Bullet)) == bullets_before + 2
    assert not fire(ctx, pos, flight, ship)
    ctx.now_ms += 140
    assert fire(ctx, pos, flight, ship)


def test_guns_sit_either_side_of_the_nose(playing):
    fire(playing.ctx, Position(0, 0), Flight(heading=0.0), make_ship())
    ys = sorted(pos.y for _, (pos, _b) in esper.get_components(Position, Bullet))
    assert ys == pytest.approx([-10.0, 10.0])


def test_special_needs_charge_and_missile_level(playing):
    ctx = playing.ctx
    ship = make_ship(special_charge=100.0)
    assert not fire_special(ctx, Position(0, 0), Flight(), ship, missile_level=0)
    assert ship.special_charge == 100.0
    ship.special_charge = 90.0
    assert not fire_special(ctx, Position(0, 0), Flight(), ship, missile_level=2)


def test_special_fans_missiles_at_nearest_enemy(playing):
    ctx = playing.ctx
    far = create_enemy("rookie", 500, 0)
    near = create_enemy("rookie", 0, 200)
    ship = make_ship(special_charge=100.0)
    assert fire_special(ctx, Position(0, 0), Flight(), ship, missile_level=1)
    assert ship.special_charge == 0
    missiles = esper.get_component(Missile)
    assert len(missiles) == 3
    assert all(m.target == near for _, m in missiles)
    assert far != near


def test_nearest_enemy_ties_go_to_the_older_enemy(playing):
    first = create_enemy("rookie", 100, 0)
    create_enemy("rookie", -100, 0)
    assert nearest_enemy(0, 0) == first


def test_nearest_enemy_skips_dying_enemies(playing):
    dying = create_enemy("rookie", 50, 0)
    other = create_enemy("rookie", 300, 0)
    esper.delete_entity(dying)
    assert nearest_enemy(0, 0) == other


def test_fire_rate_pickup_is_an_expiring_effect(playing):
    ctx = playing.ctx
    ship, health = make_ship(), Health(100, 100)
    collect_pickup(ctx, "fireRate", ship, health)
    assert fire_interval(ship) == 120
    ctx.now_ms += 10_001
    expire_timers(ship, ctx.now_ms)
    assert ship.effects == []
    assert fire_interval(ship) == 140


def test_fire_rate_boost_respects_the_floor(playing):
    ship, health = make_ship(base_fire_interval=60.0), Health(100, 100)
    collect_pickup(playing.ctx, "fireRate", ship, health)
    assert fire_interval(ship) == 50


def test_pickups_heal_armor_and_shield(playing):
    ctx = playing.ctx
    ship, health = make_ship(), Health(50, 200)
    collect_pickup(ctx, "health", ship, health)
    assert health.current == 100
    collect_pickup(ctx, "armor", ship, health)
    assert ship.armor == 15
    collect_pickup(ctx, "shield", ship, health)
    assert ship.invulnerable
    ctx.now_ms += 2001
    expire_timers(ship, ctx.now_ms)
    assert not ship.invulnerable


def test_unknown_pickup_kind_raises(playing):
    with pytest.raises(ValueError):
        collect_pickup(playing.ctx, "nuke", make_ship(), Health(1, 1))


def test_emptying_the_hull_latches_downed(playing):
    ship, health = make_ship(armor=0.0), Health(10, 100)
    take_damage(playing.ctx, ship, health, 4)
    assert not ship.downed
    take_damage(playing.ctx, ship, health, 50)
    assert ship.downed
    assert take_damage(playing.ctx, ship, health, 50) == 0


def test_downed_ship_ignores_pickups_and_regeneration(playing):
    ship, health = make_ship(downed=True), Health(0, 100)
    collect_pickup(playing.ctx, "health", ship, health)
    collect_pickup(playing.ctx, "shield", ship, health)
    regenerate(ship, health, now=60_000)
    assert health.current == 0
    assert not ship.invulnerable
