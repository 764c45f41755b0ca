import pygame

from skyace.context import ControlSignal
from skyace.factories import create_bomb, create_enemy, create_pickup
from skyace.renderer import BACKGROUND, Renderer


def test_draws_a_busy_snapshot(playing):
    ctx = playing.ctx
    create_enemy("bomber", 200, 0)
    create_pickup(ctx, -600, 300, "shield")
    create_bomb(ctx, 100, 100)
    for _ in range(40):
        playing.tick(ControlSignal(fire=True))
    snap = playing.snapshot()
    assert snap.enemies and snap.bullets and snap.pickups
    surface = pygame.Surface((960, 540))
    Renderer(960, 540).draw(surface, snap)
    camx, camy = snap.camera
    centre = (int(snap.player.x - camx), int(snap.player.y - camy))
    assert surface.get_at(centre)[:3] != BACKGROUND


def test_menu_snapshot_without_player_draws(sim):
    snap = sim.snapshot()
    assert snap.player is None
    surface = pygame.Surface((320, 200))
    Renderer(320, 200).draw(surface, snap)
