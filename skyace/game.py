from __future__ import annotations

import logging
from typing import Optional

import pygame

from .config import Settings, load_settings
from .content import FRAME_MS
from .controls import make_input
from .renderer import Renderer
from .simulation import Simulation
from .state import GameState
from .ui import GameUI

log = logging.getLogger(__name__)

# Longest step fed to the simulation after a stall (window drag, breakpoint)
MAX_STEP_MS = FRAME_MS * 3


class Game:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        w, h = settings.window.width, settings.window.height
        self.clock = pygame.time.Clock()
        self.screen = pygame.display.set_mode((w, h))
        pygame.display.set_caption(settings.window.title)

        self.sim = Simulation(seed=settings.seed, view=(w, h))
        self.input = make_input(settings.input, w, h)
        self.renderer = Renderer(w, h)
        self.ui = GameUI(w, h, self._on_command)
        self._dirty = True

    def _on_command(self, name: str, arg: Optional[str]) -> None:
        self.sim.command(name, arg)
        self._dirty = True

    def run(self) -> None:
        running = True
        fps = self.settings.window.fps
        while running:
            dt_ms = self.clock.tick(fps)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                self.ui.process_event(event)
                self.input.handle_event(event)

            if self._dirty or self.ui.screen_state != self.sim.state:
                self.ui.show_screen(self.sim.state, self.sim.upgrade_rows(), self.sim.wave_summary(), force=self._dirty)
                self._dirty = False

            if self.sim.state == GameState.PLAYING:
                self.sim.tick(self.input.sample(), dt_ms=min(dt_ms, MAX_STEP_MS))
                self.ui.update_hud(self.sim.hud())

            self.renderer.draw(self.screen, self.sim.snapshot())
            self.ui.update(dt_ms / 1000.0)
            self.ui.draw(self.screen)
            pygame.display.flip()
        self.sim.close()

    @staticmethod
    def init_pygame():
        pygame.init()


def run_game() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.logging.level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    Game.init_pygame()
    log.info("Starting %s (%dx%d, %s input)", settings.window.title, settings.window.width,
             settings.window.height, settings.input.backend)
    try:
        Game(settings).run()
    finally:
        pygame.quit()
