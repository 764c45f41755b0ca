from __future__ import annotations

import logging
import math
from typing import Optional

import esper

from .content import SPAWN_RING_RADIUS, WAVE_BASE, WAVE_INCREMENT, weights_for_wave
from .context import GameContext
from .ecs_components import Enemy, Position
from .factories import create_enemy

log = logging.getLogger(__name__)


def wave_quota(wave: int) -> int:
    return WAVE_BASE + wave * WAVE_INCREMENT


def live_enemy_count() -> int:
    return sum(1 for e, _ in esper.get_component(Enemy) if esper.entity_exists(e))


class WaveDirector:
    """Spawn quota, archetype mix and completion for the current wave."""

    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self.remaining = 0

    def start_wave(self) -> None:
        self.ctx.stats.wave_kills = 0
        self.ctx.spawn_timer = 0
        self.remaining = wave_quota(self.ctx.stats.wave)
        log.info("Wave %d started: %d enemies inbound", self.ctx.stats.wave, self.remaining)

    def choose_archetype(self, roll: Optional[float] = None) -> str:
        weights = weights_for_wave(self.ctx.stats.wave)
        if roll is None:
            roll = self.ctx.rng.random()
        # Weights per bracket sum to 1; scale anyway so a table edit stays safe
        target = roll * sum(weights.values())
        acc = 0.0
        kind = next(iter(weights))
        for kind, weight in weights.items():
            acc += weight
            if target < acc:
                return kind
        return kind

    def spawn_enemy(self) -> Optional[int]:
        if self.remaining <= 0:
            return None
        px = py = 0.0
        if self.ctx.player is not None:
            ppos = esper.component_for_entity(self.ctx.player, Position)
            px, py = ppos.x, ppos.y
        angle = self.ctx.rng.random() * math.tau
        x = px + math.cos(angle) * SPAWN_RING_RADIUS
        y = py + math.sin(angle) * SPAWN_RING_RADIUS
        kind = self.choose_archetype()
        eid = create_enemy(kind, x, y)
        self.remaining -= 1
        log.debug("Spawned %s at (%.0f, %.0f), %d left", kind, x, y, self.remaining)
        return eid

    def remaining_enemies(self) -> int:
        return live_enemy_count() + self.remaining

    def check_wave_complete(self) -> bool:
        return self.remaining == 0 and live_enemy_count() == 0
