from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Position:
    x: float
    y: float


@dataclass
class Velocity:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Sprite:
    color: tuple[int, int, int]
    radius: int


@dataclass
class Collider:
    radius: float


@dataclass
class Health:
    current: float
    max_hp: float


@dataclass
class Flight:
    """Heading and banking state shared by every aircraft."""
    heading: float = 0.0
    roll: float = 0.0
    turn_rate: float = 0.0
    thrust: float = 0.0


@dataclass
class Effect:
    kind: str  # currently only 'fireRate'
    expires_at: float


@dataclass
class PlayerShip:
    armor: float
    damage: float
    max_speed: float
    base_fire_interval: float
    last_fired: float = -math.inf
    last_hit: float = -math.inf
    special_charge: float = 0.0
    invulnerable: bool = False
    invulnerable_since: float = -math.inf
    downed: bool = False  # latched once health reaches zero
    effects: List[Effect] = field(default_factory=list)


@dataclass
class Enemy:
    archetype: str
    speed: float
    damage: float
    fire_interval: float
    accuracy: float
    credits: int
    last_fired: float = -math.inf
    ai_timer: int = 0


@dataclass
class Bullet:
    damage: float
    owner: str  # 'player' or 'enemy'
    created: float
    lifetime: float


@dataclass
class Missile:
    target: Optional[int]  # weak reference: entity id, checked for liveness every tick
    damage: float
    speed: float
    turn: float
    created: float
    lifetime: float


@dataclass
class Bomb:
    damage: float
    blast_radius: float
    created: float
    arm_at: float
    fuse_at: float
    armed: bool = False


@dataclass
class Pickup:
    kind: str  # 'health', 'armor', 'fireRate' or 'shield'
    magnet_radius: float
    bob_phase: float = 0.0


@dataclass
class Particle:
    color: tuple[int, int, int]
    size: float
    lifetime: int
    age: int = 0
