from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .content import UPGRADE_TABLE

log = logging.getLogger(__name__)


class UpgradeKind(str, Enum):
    MAX_HEALTH = "maxHealth"
    ARMOR = "armor"
    SPEED = "speed"
    FIRE_RATE = "fireRate"
    DAMAGE = "damage"
    MISSILES = "missiles"


@dataclass
class Upgrade:
    level: int
    base_cost: int
    multiplier: float

    def cost_at(self, level: int) -> int:
        return math.floor(self.base_cost * self.multiplier ** (level - 1))

    @property
    def next_cost(self) -> int:
        # Missiles start locked at level 0; unlocking costs the base price.
        return self.cost_at(max(self.level, 1))


@dataclass
class Loadout:
    max_health: float
    armor: float
    max_speed: float
    fire_interval: float
    damage: float
    missile_level: int


class UpgradeLedger:
    """Session-scoped upgrade levels and the credit rules for buying them."""

    def __init__(self) -> None:
        self.upgrades: Dict[UpgradeKind, Upgrade] = {}
        self.reset()

    def __getitem__(self, kind: UpgradeKind | str) -> Upgrade:
        return self.upgrades[UpgradeKind(kind)]

    def level(self, kind: UpgradeKind | str) -> int:
        return self[kind].level

    def cost(self, kind: UpgradeKind | str) -> int:
        return self[kind].next_cost

    def can_afford(self, kind: UpgradeKind | str, credits: int) -> bool:
        return credits >= self.cost(kind)

    def purchase(self, kind: UpgradeKind | str, credits: int) -> tuple[bool, int]:
        """Try to buy one level. Returns (bought, credits left)."""
        upgrade = self[kind]
        cost = upgrade.next_cost
        if not self.can_afford(kind, credits):
            log.debug("Rejected %s upgrade: cost %d, credits %d", UpgradeKind(kind).value, cost, credits)
            return False, credits
        upgrade.level += 1
        log.info("Bought %s level %d for %d", UpgradeKind(kind).value, upgrade.level, cost)
        return True, credits - cost

    def reset(self) -> None:
        self.upgrades = {
            UpgradeKind(kind): Upgrade(level, cost, mult)
            for kind, (level, cost, mult) in UPGRADE_TABLE.items()
        }

    def loadout(self) -> Loadout:
        return Loadout(
            max_health=100.0 * self.level(UpgradeKind.MAX_HEALTH),
            armor=10.0 * self.level(UpgradeKind.ARMOR),
            max_speed=3.0 + 0.5 * self.level(UpgradeKind.SPEED),
            fire_interval=150.0 - 10.0 * self.level(UpgradeKind.FIRE_RATE),
            damage=10.0 * self.level(UpgradeKind.DAMAGE),
            missile_level=self.level(UpgradeKind.MISSILES),
        )

    def rows(self, credits: int) -> List[tuple[UpgradeKind, int, int, bool]]:
        return [
            (kind, up.level, up.next_cost, self.can_afford(kind, credits))
            for kind, up in self.upgrades.items()
        ]
