from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from .camera import Camera
from .content import FRAME_MS


@dataclass
class ControlSignal:
    """Normalized per-tick control input, whatever device produced it."""
    turn_direction: int = 0  # -1, 0 or 1
    thrust_delta: float = 0.0
    fire: bool = False
    special: bool = False
    is_pointer_device: bool = False


@dataclass
class RunStats:
    wave: int = 1
    credits: int = 0
    kills: int = 0
    wave_kills: int = 0


@dataclass
class GameContext:
    rng: random.Random = field(default_factory=random.Random)
    # Particles, smoke, shake and bobbing only; gameplay rolls stay on ``rng``
    fx_rng: random.Random = field(default_factory=random.Random)
    now_ms: float = 0.0
    dt_ms: float = FRAME_MS
    tick: int = 0
    spawn_timer: int = 0
    stats: RunStats = field(default_factory=RunStats)
    camera: Camera = field(default_factory=Camera)
    control: ControlSignal = field(default_factory=ControlSignal)
    player: Optional[int] = None

    @property
    def step(self) -> float:
        # Fraction of a nominal display frame covered by this tick
        return self.dt_ms / FRAME_MS
