from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class DrawItem:
    x: float
    y: float
    angle: float = 0.0
    size: float = 1.0
    color: tuple[int, int, int] = (255, 255, 255)
    variant: str = ""
    roll: float = 0.0
    # Per-kind extras: health fraction, particle alpha, bomb ring radius, bob phase
    health: float = 1.0
    alpha: float = 1.0
    ring: float = 0.0
    phase: float = 0.0


@dataclass(frozen=True)
class RenderSnapshot:
    camera: tuple[float, float]
    pickups: List[DrawItem] = field(default_factory=list)
    bullets: List[DrawItem] = field(default_factory=list)
    missiles: List[DrawItem] = field(default_factory=list)
    bombs: List[DrawItem] = field(default_factory=list)
    enemies: List[DrawItem] = field(default_factory=list)
    player: Optional[DrawItem] = None
    particles: List[DrawItem] = field(default_factory=list)
    now_ms: float = 0.0


@dataclass(frozen=True)
class HudSummary:
    health_pct: float
    armor_pct: float
    special_pct: float
    wave: int
    credits: int
    remaining_enemies: int


@dataclass(frozen=True)
class UpgradeRow:
    kind: str
    level: int
    next_cost: int
    affordable: bool


@dataclass(frozen=True)
class WaveSummary:
    wave: int
    wave_kills: int
    wave_bonus: int
    credits: int
