from __future__ import annotations

import math

import pygame

from .content import WORLD_HALF
from .snapshot import DrawItem, RenderSnapshot

BACKGROUND = (16, 24, 40)
GRID_COLOR = (28, 38, 58)
BOUNDS_COLOR = (70, 80, 110)
GRID_SIZE = 100


def _ship_points(item: DrawItem, sx: float, sy: float) -> list[tuple[float, float]]:
    # Nose, right wing, tail notch, left wing; wings narrow as the ship banks
    s = item.size
    span = s * (1.0 - 0.4 * abs(item.roll))
    shape = [(s, 0.0), (-s * 0.7, span), (-s * 0.4, 0.0), (-s * 0.7, -span)]
    c, n = math.cos(item.angle), math.sin(item.angle)
    return [(sx + px * c - py * n, sy + px * n + py * c) for px, py in shape]


class Renderer:
    """Draws a RenderSnapshot with pygame primitives."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def draw(self, surface: pygame.Surface, snap: RenderSnapshot) -> None:
        camx, camy = snap.camera
        self._background(surface, camx, camy)

        def to_screen(item: DrawItem) -> tuple[float, float]:
            return item.x - camx, item.y - camy

        for p in snap.pickups:
            sx, sy = to_screen(p)
            sy += math.sin(snap.now_ms / 200.0 + p.phase) * 3
            pygame.draw.circle(surface, p.color, (int(sx), int(sy)), int(p.size))
            pygame.draw.circle(surface, (255, 255, 255), (int(sx), int(sy)), int(p.size), 1)

        for b in snap.bullets:
            sx, sy = to_screen(b)
            tail = (sx - math.cos(b.angle) * b.size * 2, sy - math.sin(b.angle) * b.size * 2)
            pygame.draw.line(surface, b.color, tail, (sx, sy), 2)
            pygame.draw.circle(surface, b.color, (int(sx), int(sy)), max(1, int(b.size / 2)))

        for m in snap.missiles:
            sx, sy = to_screen(m)
            nose = (sx + math.cos(m.angle) * m.size, sy + math.sin(m.angle) * m.size)
            tail = (sx - math.cos(m.angle) * m.size, sy - math.sin(m.angle) * m.size)
            pygame.draw.line(surface, m.color, tail, nose, 3)

        for b in snap.bombs:
            sx, sy = to_screen(b)
            pygame.draw.circle(surface, b.color, (int(sx), int(sy)), int(b.size))
            if b.ring > 0:
                self._alpha_circle(surface, (255, 60, 60, 50), sx, sy, b.ring)

        for e in snap.enemies:
            sx, sy = to_screen(e)
            pygame.draw.polygon(surface, e.color, _ship_points(e, sx, sy))
            if e.health < 1.0:
                w = e.size * 2
                bar = pygame.Rect(int(sx - w / 2), int(sy - e.size - 8), int(w), 3)
                pygame.draw.rect(surface, (60, 60, 60), bar)
                bar.width = int(w * e.health)
                pygame.draw.rect(surface, (220, 60, 60), bar)

        if snap.player is not None:
            pl = snap.player
            sx, sy = to_screen(pl)
            pygame.draw.polygon(surface, pl.color, _ship_points(pl, sx, sy))
            if pl.variant == "shielded":
                pygame.draw.circle(surface, (255, 255, 0), (int(sx), int(sy)), int(pl.size * 1.5), 1)

        for p in snap.particles:
            sx, sy = to_screen(p)
            self._alpha_circle(surface, (*p.color, int(255 * p.alpha)), sx, sy, max(1.0, p.size))

    def _background(self, surface: pygame.Surface, camx: float, camy: float) -> None:
        surface.fill(BACKGROUND)
        x = (camx // GRID_SIZE) * GRID_SIZE
        while x < camx + self.width:
            sx = int(x - camx)
            pygame.draw.line(surface, GRID_COLOR, (sx, 0), (sx, self.height))
            x += GRID_SIZE
        y = (camy // GRID_SIZE) * GRID_SIZE
        while y < camy + self.height:
            sy = int(y - camy)
            pygame.draw.line(surface, GRID_COLOR, (0, sy), (self.width, sy))
            y += GRID_SIZE
        bounds = pygame.Rect(int(-WORLD_HALF - camx), int(-WORLD_HALF - camy), int(WORLD_HALF * 2), int(WORLD_HALF * 2))
        pygame.draw.rect(surface, BOUNDS_COLOR, bounds, 2)

    @staticmethod
    def _alpha_circle(surface: pygame.Surface, rgba: tuple[int, int, int, int], x: float, y: float, r: float) -> None:
        ri = int(r)
        if ri <= 0:
            return
        overlay = pygame.Surface((ri * 2 + 4, ri * 2 + 4), pygame.SRCALPHA)
        pygame.draw.circle(overlay, rgba, (ri + 2, ri + 2), ri)
        surface.blit(overlay, (int(x - ri - 2), int(y - ri - 2)))
