from __future__ import annotations

import itertools
import logging
import math
import random
from typing import Optional

import esper

from .content import FRAME_MS, WAVE_BONUS_PER_KILL
from .context import ControlSignal, GameContext
from .economy import UpgradeKind, UpgradeLedger
from .ecs_components import (
    Bomb,
    Bullet,
    Enemy,
    Flight,
    Health,
    Missile,
    Particle,
    Pickup,
    PlayerShip,
    Position,
    Sprite,
    Velocity,
)
from .ecs_systems import (
    CameraSystem,
    CollisionSystem,
    EnemyAISystem,
    InputSystem,
    ParticleSystem,
    PickupSystem,
    PlayerFlightSystem,
    ProjectileSystem,
    WaveSpawnSystem,
)
from .factories import apply_loadout, create_player
from .snapshot import DrawItem, HudSummary, RenderSnapshot, UpgradeRow, WaveSummary
from .state import GameState, StateMachine, TransitionError
from .waves import WaveDirector

log = logging.getLogger(__name__)

_world_ids = itertools.count(1)


class Simulation:
    """Owns one esper world and everything that mutates it.

    Processors run once per ``tick`` in priority order: input, player flight,
    enemy AI, projectiles, pickups, particles, wave spawning, collisions and
    finally the camera. Entities removed during a tick are only marked dead;
    the world is compacted once every processor has run.
    """

    def __init__(
        self,
        ledger: Optional[UpgradeLedger] = None,
        seed: Optional[int] = None,
        view: tuple[int, int] = (960, 540),
    ) -> None:
        self.world_name = f"skyace-{next(_world_ids)}"
        self.ledger = ledger or UpgradeLedger()
        self.ctx = GameContext(rng=random.Random(seed), fx_rng=random.Random(seed))
        self.ctx.camera.resize(*view)
        self.fsm = StateMachine()
        self.director = WaveDirector(self.ctx)
        self._launch_next_wave = False
        self._run_over = False

        self.activate()
        esper.clear_database()
        esper.add_processor(InputSystem(self.ctx, self.ledger), priority=100)
        esper.add_processor(PlayerFlightSystem(self.ctx), priority=90)
        esper.add_processor(EnemyAISystem(self.ctx), priority=80)
        esper.add_processor(ProjectileSystem(self.ctx), priority=70)
        esper.add_processor(PickupSystem(self.ctx), priority=65)
        esper.add_processor(ParticleSystem(), priority=60)
        esper.add_processor(WaveSpawnSystem(self.ctx, self.director), priority=50)
        esper.add_processor(CollisionSystem(self.ctx), priority=40)
        esper.add_processor(CameraSystem(self.ctx), priority=30)

    # -- world binding --------------------------------------------------

    def activate(self) -> None:
        esper.switch_world(self.world_name)

    def close(self) -> None:
        esper.switch_world("default")
        esper.delete_world(self.world_name)

    @property
    def state(self) -> GameState:
        return self.fsm.state

    @property
    def player(self) -> Optional[int]:
        return self.ctx.player

    # -- commands -------------------------------------------------------

    def start_game(self) -> None:
        self.fsm.fire("start")
        self.activate()
        if self._run_over:
            self.ctx.stats.wave = 1
            self.ctx.stats.kills = 0
        elif self._launch_next_wave:
            self.ctx.stats.wave += 1
        self._run_over = False
        self._launch_next_wave = False
        self._reset_world()
        log.info("Sortie launched at wave %d", self.ctx.stats.wave)
        self.director.start_wave()

    def open_hangar(self) -> None:
        came_from = self.fsm.state
        self.fsm.fire("open_hangar")
        if came_from == GameState.WAVE_COMPLETE:
            self._launch_next_wave = True

    def return_to_menu(self) -> None:
        self.fsm.fire("menu")

    def next_wave(self) -> None:
        self.fsm.fire("next_wave")
        self.activate()
        self._launch_next_wave = False
        self.ctx.stats.wave += 1
        self.director.start_wave()

    def retry(self) -> None:
        self.fsm.fire("retry")
        self.activate()
        self.ctx.stats.wave = 1
        self.ctx.stats.kills = 0
        self._run_over = False
        self._launch_next_wave = False
        self._reset_world()
        self.director.start_wave()

    def purchase_upgrade(self, kind: UpgradeKind | str) -> bool:
        kind = UpgradeKind(kind)
        bought, self.ctx.stats.credits = self.ledger.purchase(kind, self.ctx.stats.credits)
        if bought and self.ctx.player is not None:
            self.activate()
            apply_loadout(
                esper.component_for_entity(self.ctx.player, PlayerShip),
                esper.component_for_entity(self.ctx.player, Health),
                self.ledger.loadout(),
                refill=kind == UpgradeKind.MAX_HEALTH,
            )
        return bought

    def command(self, name: str, arg: Optional[str] = None) -> None:
        """Dispatch a UI command by name."""
        handlers = {
            "start": self.start_game,
            "open_hangar": self.open_hangar,
            "menu": self.return_to_menu,
            "next_wave": self.next_wave,
            "retry": self.retry,
        }
        if name == "purchase":
            self.purchase_upgrade(arg)
        elif name in handlers:
            handlers[name]()
        else:
            raise TransitionError(f"Unknown command: {name}")

    def _reset_world(self) -> None:
        esper.clear_database()
        self.ctx.spawn_timer = 0
        self.ctx.control = ControlSignal()
        self.ctx.player = create_player(self.ledger.loadout())
        ppos = esper.component_for_entity(self.ctx.player, Position)
        self.ctx.camera.center_on(ppos.x, ppos.y)
        self.ctx.camera.shake = 0.0

    # -- tick -----------------------------------------------------------

    def tick(self, signal: Optional[ControlSignal] = None, dt_ms: float = FRAME_MS) -> GameState:
        if self.fsm.state != GameState.PLAYING:
            raise TransitionError(f"Cannot tick while {self.fsm.state.value}")
        self.activate()
        self.ctx.now_ms += dt_ms
        self.ctx.dt_ms = dt_ms
        self.ctx.tick += 1
        self.ctx.control = signal or ControlSignal()

        esper.process(dt_ms)
        esper.clear_dead_entities()

        ship = esper.component_for_entity(self.ctx.player, PlayerShip)
        if ship.downed:
            self._run_over = True
            self.fsm.fire("game_over")
            log.info("Game over at wave %d with %d kills", self.ctx.stats.wave, self.ctx.stats.kills)
        elif self.director.check_wave_complete():
            self.fsm.fire("wave_complete")
            log.info("Wave %d complete: %d kills", self.ctx.stats.wave, self.ctx.stats.wave_kills)
        return self.fsm.state

    # -- read-only views -----------------------------------------------

    def snapshot(self) -> RenderSnapshot:
        self.activate()

        def ordered(*types):
            return sorted(esper.get_components(*types), key=lambda r: r[0])

        pickups = [
            DrawItem(pos.x, pos.y, size=spr.radius, color=spr.color, variant=pick.kind, phase=pick.bob_phase)
            for _, (pos, spr, pick) in ordered(Position, Sprite, Pickup)
        ]
        bullets = [
            DrawItem(pos.x, pos.y, size=spr.radius, color=spr.color, variant=b.owner,
                     angle=_velocity_angle(vel))
            for _, (pos, vel, spr, b) in ordered(Position, Velocity, Sprite, Bullet)
        ]
        missiles = [
            DrawItem(pos.x, pos.y, angle=fl.heading, size=spr.radius, color=spr.color, variant="missile")
            for _, (pos, fl, spr, _m) in ordered(Position, Flight, Sprite, Missile)
        ]
        bombs = [
            DrawItem(pos.x, pos.y, size=spr.radius, color=spr.color, variant="armed" if b.armed else "falling",
                     ring=b.blast_radius if b.armed else 0.0)
            for _, (pos, spr, b) in ordered(Position, Sprite, Bomb)
        ]
        enemies = [
            DrawItem(pos.x, pos.y, angle=fl.heading, size=spr.radius, color=spr.color, variant=en.archetype,
                     roll=fl.roll, health=max(0.0, h.current / h.max_hp))
            for _, (pos, fl, spr, h, en) in ordered(Position, Flight, Sprite, Health, Enemy)
        ]
        player = None
        if self.ctx.player is not None:
            pos = esper.component_for_entity(self.ctx.player, Position)
            fl = esper.component_for_entity(self.ctx.player, Flight)
            ship = esper.component_for_entity(self.ctx.player, PlayerShip)
            h = esper.component_for_entity(self.ctx.player, Health)
            spr = esper.component_for_entity(self.ctx.player, Sprite)
            player = DrawItem(pos.x, pos.y, angle=fl.heading, size=spr.radius, color=spr.color,
                              variant="shielded" if ship.invulnerable else "player", roll=fl.roll,
                              health=h.current / h.max_hp)
        particles = [
            DrawItem(pos.x, pos.y, size=p.size, color=p.color, alpha=max(0.0, 1.0 - p.age / p.lifetime))
            for _, (pos, p) in ordered(Position, Particle)
        ]
        return RenderSnapshot(
            camera=self.ctx.camera.transform(),
            pickups=pickups,
            bullets=bullets,
            missiles=missiles,
            bombs=bombs,
            enemies=enemies,
            player=player,
            particles=particles,
            now_ms=self.ctx.now_ms,
        )

    def hud(self) -> HudSummary:
        self.activate()
        health_pct = armor_pct = special_pct = 0.0
        if self.ctx.player is not None:
            h = esper.component_for_entity(self.ctx.player, Health)
            ship = esper.component_for_entity(self.ctx.player, PlayerShip)
            health_pct = 100.0 * h.current / h.max_hp
            full_armor = 10.0 * self.ledger.level(UpgradeKind.ARMOR)
            armor_pct = min(100.0, 100.0 * ship.armor / full_armor)
            special_pct = ship.special_charge
        return HudSummary(
            health_pct=health_pct,
            armor_pct=armor_pct,
            special_pct=special_pct,
            wave=self.ctx.stats.wave,
            credits=self.ctx.stats.credits,
            remaining_enemies=self.director.remaining_enemies(),
        )

    def upgrade_rows(self) -> list[UpgradeRow]:
        return [
            UpgradeRow(kind.value, level, cost, affordable)
            for kind, level, cost, affordable in self.ledger.rows(self.ctx.stats.credits)
        ]

    def wave_summary(self) -> WaveSummary:
        return WaveSummary(
            wave=self.ctx.stats.wave,
            wave_kills=self.ctx.stats.wave_kills,
            wave_bonus=self.ctx.stats.wave_kills * WAVE_BONUS_PER_KILL,
            credits=self.ctx.stats.credits,
        )


def _velocity_angle(vel: Velocity) -> float:
    return math.atan2(vel.y, vel.x)
