import math

import esper
import pytest

from skyace.combat import blast_damage, detonate_bomb
from skyace.ecs_components import Bomb, Flight, Missile, Position
from skyace.ecs_systems import ProjectileSystem, steer_missile
from skyace.factories import create_bomb, create_bullet, create_enemy, create_missile
from skyace.steering import wrap_angle


def _bearing_error(mid, target):
    pos = esper.component_for_entity(mid, Position)
    tpos = esper.component_for_entity(target, Position)
    heading = esper.component_for_entity(mid, Flight).heading
    return abs(wrap_angle(math.atan2(tpos.y - pos.y, tpos.x - pos.x) - heading))


def test_missile_turns_toward_live_target(playing):
    target = create_enemy("bomber", 500, 0)
    mid = create_missile(playing.ctx, 0, 0, math.pi / 2, target)
    before = _bearing_error(mid, target)
    steer_missile(
        esper.component_for_entity(mid, Position),
        esper.component_for_entity(mid, Flight),
        esper.component_for_entity(mid, Missile),
    )
    after = _bearing_error(mid, target)
    assert after < before
    # Proportional, not snap-to
    assert after == pytest.approx(before * 0.9)


def test_missile_converges_over_many_ticks(playing):
    target = create_enemy("bomber", 2000, 0)
    mid = create_missile(playing.ctx, 0, 0, -math.pi / 2, target)
    errors = []
    system = ProjectileSystem(playing.ctx)
    for _ in range(20):
        system.process(0)
        errors.append(_bearing_error(mid, target))
    assert errors[-1] < errors[0]


def test_missile_goes_ballistic_when_target_dies(playing):
    target = create_enemy("rookie", 500, 0)
    mid = create_missile(playing.ctx, 0, 0, 1.0, target)
    esper.delete_entity(target)
    flight = esper.component_for_entity(mid, Flight)
    steer_missile(esper.component_for_entity(mid, Position), flight, esper.component_for_entity(mid, Missile))
    assert flight.heading == 1.0
    # Still ballistic after compaction removed the target for good
    esper.clear_dead_entities()
    steer_missile(esper.component_for_entity(mid, Position), flight, esper.component_for_entity(mid, Missile))
    assert flight.heading == 1.0


def test_missile_without_target_flies_straight(playing):
    mid = create_missile(playing.ctx, 0, 0, 0.3, None)
    ProjectileSystem(playing.ctx).process(0)
    assert esper.component_for_entity(mid, Flight).heading == 0.3
    pos = esper.component_for_entity(mid, Position)
    assert math.atan2(pos.y, pos.x) == pytest.approx(0.3)


def test_bullets_expire_after_lifetime(playing):
    ctx = playing.ctx
    bid = create_bullet(ctx, 0, -500, -math.pi / 2, 10, "player")
    system = ProjectileSystem(ctx)
    ctx.now_ms = 1999
    system.process(0)
    assert esper.entity_exists(bid)
    ctx.now_ms = 2001
    system.process(0)
    assert not esper.entity_exists(bid)


def test_missiles_expire_after_lifetime(playing):
    ctx = playing.ctx
    mid = create_missile(ctx, 0, 0, 0.0, None)
    ctx.now_ms = 5001
    ProjectileSystem(ctx).process(0)
    assert not esper.entity_exists(mid)


@pytest.mark.parametrize(
    "dist, expected",
    [(0, 30.0), (50, 15.0), (99, 0.3), (100, 0.0), (250, 0.0)],
)
def test_blast_damage_falls_off_linearly(dist, expected):
    assert blast_damage(30.0, dist, 100.0) == pytest.approx(expected)


def test_bomb_arms_then_detonates_near_player(playing, player_parts):
    ctx = playing.ctx
    _pos, _ship, health = player_parts
    bid = create_bomb(ctx, 0, 30)
    system = ProjectileSystem(ctx)

    ctx.now_ms = 100
    system.process(0)
    assert esper.entity_exists(bid)
    assert not esper.component_for_entity(bid, Bomb).armed
    assert health.current == 100

    ctx.now_ms = 600
    system.process(0)
    assert not esper.entity_exists(bid)
    expected = 100 - (30 * (1 - 34 / 100) - 10)
    assert health.current == pytest.approx(expected)


def test_bomb_self_detonates_on_fuse(playing, player_parts):
    ctx = playing.ctx
    _pos, _ship, health = player_parts
    bid = create_bomb(ctx, 1000, 1000)
    ctx.now_ms = 6000
    ProjectileSystem(ctx).process(0)
    assert not esper.entity_exists(bid)
    assert health.current == 100


def test_detonation_spawns_explosion_and_shake(playing):
    ctx = playing.ctx
    bid = create_bomb(ctx, 400, 400)
    detonate_bomb(ctx, bid)
    assert ctx.camera.shake == pytest.approx(10.0)
    assert not esper.entity_exists(bid)
