from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

# One display frame; per-frame constants below are scaled by dt / FRAME_MS.
FRAME_MS = 1000.0 / 60.0

# World soft bounds (square, centred on the origin)
WORLD_HALF = 3000.0

# Player flight
PLAYER_SIZE = 20
PLAYER_MIN_SPEED = 1.5
PLAYER_THRUST_ACCEL = 0.3
PLAYER_DRAG = 0.95
PLAYER_BASE_TURN = 0.045
PLAYER_THRUST_TURN_BONUS = 0.03
PLAYER_ROLL_SMOOTHING = 0.15
PLAYER_START_THRUST = 0.5
PLAYER_REGEN_DELAY_MS = 5000.0
PLAYER_REGEN_RATE = 0.5
PLAYER_INVULNERABLE_MS = 2000.0
PLAYER_HIT_SHAKE = 10.0

# Player guns
GUN_OFFSET = 10.0
GUN_NOSE = 16.0
GUN_CONVERGENCE = 0.02
GUN_JITTER = 0.05
MIN_FIRE_INTERVAL_MS = 50.0

# Special weapon
SPECIAL_MAX = 100.0
SPECIAL_PER_KILL = 10.0
MISSILE_FAN = 0.3

# Projectiles
BULLET_SPEED = 12.0
BULLET_SIZE = 4
BULLET_LIFETIME_MS = 2000.0

MISSILE_SPEED = 8.0
MISSILE_SIZE = 6
MISSILE_DAMAGE = 50.0
MISSILE_TURN = 0.1
MISSILE_LIFETIME_MS = 5000.0
MISSILE_SMOKE_CHANCE = 0.3
MISSILE_HIT_EXPLOSION = 30.0

BOMB_DRIFT = (0.0, 2.0)
BOMB_SIZE = 8
BOMB_DAMAGE = 30.0
BOMB_BLAST_RADIUS = 100.0
BOMB_ARM_MS = 500.0
BOMB_PROXIMITY = 60.0
BOMB_FUSE_MS = 6000.0

# Enemies
ENGAGEMENT_RANGE = 600.0
AIM_ERROR = 0.06
ENEMY_ROLL_GAIN = 8.0
ENEMY_ROLL_SMOOTHING = 0.1
VOLLEY_SPREAD = 0.15
VOLLEY_OFFSET = 8.0
PICKUP_DROP_CHANCE = 0.2

SCOUT_RETREAT_RANGE = 200.0
FIGHTER_STRAFE_RANGE = 300.0
VETERAN_BAND = (250.0, 400.0)
BOMBER_LOITER_RANGE = 400.0
BOMBER_LOITER_DRAG = 0.9
ACE_BURST_RANGE = 150.0
ACE_BURST_CHANCE = 0.02
ACE_BURST_ANGLE = 0.6 * math.pi
ACE_BURST_SPEED = 1.2

# Contact damage
CONTACT_DAMAGE_TO_PLAYER = 20.0
CONTACT_DAMAGE_TO_ENEMY = 50.0

# Pickups
PICKUP_SIZE = 10
PICKUP_MAGNET_RADIUS = 150.0
PICKUP_MAGNET_SPEED = 5.0
PICKUP_HEAL_FRACTION = 0.25
PICKUP_ARMOR = 5.0
FIRE_RATE_BOOST_MS = 20.0
FIRE_RATE_BOOST_DURATION_MS = 10000.0

# Particles
EXPLOSION_PARTICLES = 20
PARTICLE_LIFETIME = 60
PARTICLE_DRAG = 0.98
SMOKE_LIFETIME = 30
MAX_SHAKE = 20.0
EXPLOSION_COLORS: List[Tuple[int, int, int]] = [(255, 68, 68), (255, 136, 0), (255, 255, 0)]
SMOKE_COLOR = (150, 150, 150)

# Waves
WAVE_BASE = 5
WAVE_INCREMENT = 3
SPAWN_EVERY_TICKS = 60
SPAWN_RING_RADIUS = 800.0
WAVE_BONUS_PER_KILL = 10

# Camera
CAMERA_DEADZONE = 0.15
SHAKE_DECAY = 0.9


@dataclass(frozen=True)
class ArchetypeStats:
    max_health: float
    speed: float
    size: int
    fire_interval_ms: float
    damage: float
    credits: int
    accuracy: float
    color: tuple[int, int, int]


ARCHETYPES: Dict[str, ArchetypeStats] = {
    "rookie": ArchetypeStats(20, 1.8, 14, 2000, 4, 5, 0.30, (170, 170, 170)),
    "scout": ArchetypeStats(30, 2.0, 15, 1500, 5, 10, 0.50, (136, 255, 136)),
    "fighter": ArchetypeStats(60, 2.5, 18, 800, 8, 25, 0.65, (255, 136, 136)),
    "veteran": ArchetypeStats(100, 2.7, 19, 700, 10, 40, 0.80, (255, 200, 90)),
    "bomber": ArchetypeStats(150, 1.0, 25, 2000, 15, 50, 0.50, (136, 136, 255)),
    "elite": ArchetypeStats(200, 2.9, 21, 600, 11, 75, 0.85, (90, 230, 230)),
    "ace": ArchetypeStats(300, 3.0, 22, 500, 12, 100, 0.95, (255, 136, 255)),
}

# Archetypes that fire a three-round volley instead of a single bullet
VOLLEY_ARCHETYPES = frozenset({"ace", "elite"})

# (minimum wave, weights). Looked up highest bracket first.
WAVE_TABLE: List[Tuple[int, Dict[str, float]]] = [
    (1, {"rookie": 0.70, "scout": 0.30}),
    (3, {"rookie": 0.40, "scout": 0.35, "fighter": 0.25}),
    (5, {"rookie": 0.20, "scout": 0.30, "fighter": 0.30, "veteran": 0.10, "bomber": 0.10}),
    (8, {"scout": 0.20, "fighter": 0.30, "veteran": 0.20, "bomber": 0.15, "elite": 0.10, "ace": 0.05}),
    (12, {"fighter": 0.25, "veteran": 0.25, "bomber": 0.15, "elite": 0.20, "ace": 0.15}),
]

PICKUP_WEIGHTS: List[Tuple[str, float]] = [
    ("health", 0.4),
    ("armor", 0.3),
    ("fireRate", 0.2),
    ("shield", 0.1),
]

PICKUP_COLORS: Dict[str, tuple[int, int, int]] = {
    "health": (255, 0, 0),
    "armor": (0, 212, 255),
    "fireRate": (255, 170, 0),
    "shield": (255, 255, 0),
}

# kind -> (starting level, base cost, cost multiplier)
UPGRADE_TABLE: Dict[str, Tuple[int, int, float]] = {
    "maxHealth": (1, 100, 1.5),
    "armor": (1, 100, 1.5),
    "speed": (1, 100, 1.5),
    "fireRate": (1, 100, 1.5),
    "damage": (1, 100, 1.5),
    "missiles": (0, 500, 1.3),
}


def archetype(name: str) -> ArchetypeStats:
    # The archetype set is closed; an unknown tag is a programming error.
    return ARCHETYPES[name]


def weights_for_wave(wave: int) -> Dict[str, float]:
    for min_wave, weights in reversed(WAVE_TABLE):
        if wave >= min_wave:
            return weights
    return WAVE_TABLE[0][1]
