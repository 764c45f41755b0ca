import esper
import pytest

from skyace.context import ControlSignal
from skyace.ecs_components import Bomb, Bullet, Flight, Health, Pickup, PlayerShip, Position
from skyace.ecs_systems import CameraSystem
from skyace.factories import create_bomb, create_enemy, create_pickup, spawn_explosion
from skyace.player import take_damage
from skyace.state import GameState, StateMachine, TransitionError


def kill_player(sim):
    pid = sim.player
    take_damage(sim.ctx, esper.component_for_entity(pid, PlayerShip), esper.component_for_entity(pid, Health), 10_000)


def test_starts_in_menu_and_refuses_to_tick(sim):
    assert sim.state == GameState.MENU
    with pytest.raises(TransitionError):
        sim.tick()


def test_illegal_command_leaves_state_alone(sim):
    with pytest.raises(TransitionError):
        sim.next_wave()
    assert sim.state == GameState.MENU
    with pytest.raises(TransitionError):
        sim.command("warp")


def test_state_machine_table():
    fsm = StateMachine()
    assert fsm.can("start")
    assert not fsm.can("retry")
    fsm.fire("open_hangar")
    assert fsm.state == GameState.HANGAR
    assert fsm.previous == GameState.MENU
    fsm.fire("start")
    with pytest.raises(TransitionError):
        fsm.fire("open_hangar")


def test_start_creates_player_and_wave(playing):
    assert playing.state == GameState.PLAYING
    assert playing.player is not None
    assert playing.ctx.stats.wave == 1
    assert playing.director.remaining == 8
    hud = playing.hud()
    assert hud.health_pct == 100
    assert hud.armor_pct == 100
    assert hud.special_pct == 0
    assert hud.remaining_enemies == 8


def test_tick_advances_clock_and_flies(playing):
    flight = esper.component_for_entity(playing.player, Flight)
    playing.tick(ControlSignal(turn_direction=1, thrust_delta=0.1))
    assert playing.ctx.tick == 1
    assert playing.ctx.now_ms == pytest.approx(1000 / 60)
    assert flight.heading > 0
    assert flight.thrust == pytest.approx(0.6)


def test_fire_signal_spawns_bullets(playing):
    playing.tick(ControlSignal(fire=True))
    assert len(esper.get_component(Bullet)) == 2


def test_player_death_ends_the_run(playing):
    kill_player(playing)
    assert playing.tick() == GameState.GAME_OVER
    with pytest.raises(TransitionError):
        playing.tick()


def test_health_pickup_cannot_revive_a_bombed_player(playing, player_parts):
    _, ship, health = player_parts
    health.current = 5
    bomb = create_bomb(playing.ctx, 0, 0)
    esper.component_for_entity(bomb, Bomb).arm_at = -1
    create_pickup(playing.ctx, 0, 0, "health")
    assert playing.tick() == GameState.GAME_OVER
    assert ship.downed
    assert health.current == 0
    assert len(esper.get_component(Pickup)) == 1


def test_game_over_wins_over_wave_complete(playing):
    playing.director.remaining = 0
    kill_player(playing)
    assert playing.tick() == GameState.GAME_OVER


def test_retry_resets_wave_but_keeps_credits(playing):
    playing.ctx.stats.wave = 4
    playing.ctx.stats.kills = 30
    playing.ctx.stats.credits = 250
    kill_player(playing)
    playing.tick()
    playing.retry()
    assert playing.state == GameState.PLAYING
    assert playing.ctx.stats.wave == 1
    assert playing.ctx.stats.kills == 0
    assert playing.ctx.stats.credits == 250
    assert esper.component_for_entity(playing.player, Health).current == 100
    assert playing.director.remaining == 8


def test_next_wave_keeps_the_same_plane(playing):
    playing.director.remaining = 0
    playing.tick()
    pid = playing.player
    playing.next_wave()
    assert playing.player == pid
    assert playing.ctx.stats.wave == 2


def test_hangar_after_wave_complete_launches_next_wave(playing):
    playing.director.remaining = 0
    playing.tick()
    playing.ctx.stats.credits = 100
    playing.command("open_hangar")
    assert playing.state == GameState.HANGAR
    playing.command("purchase", "speed")
    assert playing.ledger.level("speed") == 2
    playing.command("start")
    assert playing.state == GameState.PLAYING
    assert playing.ctx.stats.wave == 2
    ship = esper.component_for_entity(playing.player, PlayerShip)
    assert ship.max_speed == pytest.approx(4.0)


def test_hangar_after_game_over_restarts_at_wave_one(playing):
    playing.ctx.stats.wave = 3
    kill_player(playing)
    playing.tick()
    playing.open_hangar()
    playing.start_game()
    assert playing.ctx.stats.wave == 1


def test_menu_round_trip(sim):
    sim.open_hangar()
    sim.return_to_menu()
    sim.start_game()
    assert sim.ctx.stats.wave == 1


def test_upgrade_rows_follow_credits(playing):
    playing.ctx.stats.credits = 150
    rows = {r.kind: r for r in playing.upgrade_rows()}
    assert rows["damage"].affordable
    assert rows["damage"].next_cost == 100
    assert not rows["missiles"].affordable
    assert rows["missiles"].level == 0


def test_snapshot_lists_every_entity_kind(playing):
    create_enemy("fighter", 300, 0)
    playing.tick(ControlSignal(fire=True))
    snap = playing.snapshot()
    assert snap.player is not None
    assert snap.player.variant == "player"
    assert len(snap.enemies) == 1
    assert snap.enemies[0].variant == "fighter"
    assert len(snap.bullets) >= 2
    assert snap.now_ms == playing.ctx.now_ms


def test_camera_tracks_player_out_of_deadzone(playing):
    for _ in range(200):
        playing.tick(ControlSignal(thrust_delta=0.05))
    cam = playing.ctx.camera
    px = esper.component_for_entity(playing.player, Position).x
    dz_w, _ = cam.deadzone
    assert abs(px - cam.x) <= dz_w + 1e-6


def test_two_simulations_do_not_share_entities(playing):
    from skyace.simulation import Simulation

    other = Simulation(seed=5)
    try:
        other.start_game()
        create_enemy("rookie", 100, 100)
        playing.activate()
        assert playing.hud().remaining_enemies == 8
        other.activate()
        assert other.hud().remaining_enemies == 9
    finally:
        other.close()
        playing.activate()


def test_effects_draw_from_their_own_rng(playing):
    ctx = playing.ctx
    gameplay = ctx.rng.getstate()
    spawn_explosion(ctx, 0, 0, 60)
    create_pickup(ctx, 500, 500, "armor")
    CameraSystem(ctx).process(ctx.dt_ms)
    assert ctx.camera.offset_x or ctx.camera.offset_y
    assert ctx.rng.getstate() == gameplay


def test_explosions_do_not_shift_a_seeded_run(playing):
    from skyace.simulation import Simulation

    other = Simulation(seed=1234)
    try:
        other.start_game()
        spawn_explosion(other.ctx, 0, 0, 80)
        for _ in range(130):
            other.tick()
        playing.activate()
        for _ in range(130):
            playing.tick()
        assert playing.ctx.rng.getstate() == other.ctx.rng.getstate()
        assert playing.hud().remaining_enemies == other.hud().remaining_enemies
    finally:
        other.close()
        playing.activate()
