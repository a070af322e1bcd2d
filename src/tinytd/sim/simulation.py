from __future__ import annotations

import logging
from itertools import islice
from typing import List, Optional, Union

from . import combat, placement
from .clock import clamp_dt
from .entities import Enemy
from .geometry import Point
from .maps import MapCatalog
from .models import (
    EventType,
    GameConfig,
    PlacementResult,
    RejectReason,
    SimEvent,
    SimulationSnapshot,
)
from .path import Path
from .spawner import WaveSpawner
from .state import SimulationState

logger = logging.getLogger(__name__)

MapKey = Union[int, str]


class Simulation:
    """Tower-defense simulation core.

    All mutation goes through :meth:`tick` (frame driven), :meth:`spawn_tick`
    (spawn timer driven) and the input operations. The host must serialize
    those calls; snapshots are the only thing it should read.
    """

    def __init__(self, config: Optional[GameConfig] = None, map_key: MapKey = 0):
        self.config = config or GameConfig()
        self.catalog = MapCatalog(self.config.maps)
        self.state = self._fresh_state(map_key)

    def _fresh_state(self, map_key: MapKey) -> SimulationState:
        definition, path = self.catalog.build_path(map_key, self.config.arena, self.config.tower.footprint_radius)
        economy = self.config.economy
        return SimulationState(
            config=self.config,
            map_definition=definition,
            path=path,
            cash=economy.starting_cash,
            lives=economy.starting_lives,
            spawner=WaveSpawner(interval_s=self.config.waves.spawn_interval_s),
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def cash(self) -> int:
        return self.state.cash

    @property
    def wave(self) -> int:
        return self.state.wave

    @property
    def lives(self) -> int:
        return self.state.lives

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    @property
    def spawning(self) -> bool:
        return self.state.spawner.spawning

    @property
    def path(self) -> Path:
        return self.state.path

    @property
    def spawn_interval_s(self) -> float:
        return self.state.spawner.interval_s

    def snapshot(self) -> SimulationSnapshot:
        state = self.state
        return SimulationSnapshot(
            cash=state.cash,
            wave=state.wave,
            lives=state.lives,
            spawning=state.spawner.spawning,
            spawn_remaining=state.spawner.remaining,
            game_over=state.game_over,
            elapsed_s=state.elapsed_s,
            map_id=state.map_definition.id,
            path=state.path.points,
            corridor_width=state.path.corridor_width,
            last_rejection=state.last_rejection,
            enemies=tuple(enemy.view() for enemy in state.enemies.values()),
            towers=tuple(tower.view() for tower in state.towers),
            projectiles=tuple(projectile.view() for projectile in state.projectiles),
        )

    def drain_events(self) -> List[SimEvent]:
        events = list(self.state.events)
        self.state.events.clear()
        return events

    # ------------------------------------------------------------------
    # Input operations
    # ------------------------------------------------------------------
    def can_place(self, x: float, y: float) -> bool:
        return placement.can_place(self.state, Point(float(x), float(y)))

    def placement_verdict(self, x: float, y: float) -> Optional[RejectReason]:
        if self.state.game_over:
            return RejectReason.GAME_OVER
        return placement.rejection_reason(self.state, Point(float(x), float(y)))

    def place_tower(self, x: float, y: float) -> PlacementResult:
        return placement.place_tower(self.state, Point(float(x), float(y)))

    def select_map(self, map_key: MapKey) -> None:
        """Swap the path; entities and pending spawns are dropped."""
        state = self.state
        definition, path = self.catalog.build_path(map_key, self.config.arena, self.config.tower.footprint_radius)
        dropped = state.spawner.cancel()
        state.clear_entities()
        state.map_definition = definition
        state.path = path
        state.emit(EventType.MAP_SELECTED, map_id=definition.id, dropped_spawns=dropped)
        logger.info("Map '%s' selected (%d pending spawns dropped)", definition.id, dropped)

    def reset(self) -> None:
        map_id = self.state.map_definition.id
        self.state = self._fresh_state(map_id)
        self.state.emit(EventType.RESET, map_id=map_id)
        logger.info("Simulation reset on map '%s'", map_id)

    def start_wave(self) -> bool:
        """Arm the spawner for the next wave; no-op while a wave is spawning."""
        state = self.state
        if state.game_over or state.spawner.spawning:
            return False

        state.wave += 1
        count = self.config.waves.enemy_count(state.wave)
        state.spawner.arm(state.wave, count)
        state.emit(EventType.WAVE_STARTED, enemies=count)
        logger.info("Wave %d started: %d enemies every %.2fs", state.wave, count, state.spawner.interval_s)
        if not state.spawner.spawning:
            state.emit(EventType.WAVE_COMPLETED, spawned=0)
        return True

    def spawn_tick(self) -> Optional[Enemy]:
        """One spawn-timer firing. Returns the spawned enemy, if any."""
        state = self.state
        if state.game_over or not state.spawner.spawning:
            return None

        enemy: Optional[Enemy] = None
        if state.path.waypoint_count() > 0:
            rules = self.config.enemy
            hp = rules.hp_for_wave(state.wave)
            enemy = Enemy(
                uid=state.allocate_uid(),
                hp=hp,
                max_hp=hp,
                speed=rules.speed_for_wave(state.wave),
                position=state.path.start,
            )
            state.enemies[enemy.uid] = enemy
            state.emit(EventType.ENEMY_SPAWNED, enemy_uid=enemy.uid, hp=hp)

        state.spawner.fire()
        if not state.spawner.spawning:
            state.emit(EventType.WAVE_COMPLETED, spawned=state.spawner.fired)
            logger.info("Wave %d finished spawning (%d enemies)", state.wave, state.spawner.fired)
        return enemy

    # ------------------------------------------------------------------
    # Frame tick
    # ------------------------------------------------------------------
    def tick(self, dt: float) -> List[SimEvent]:
        """Advance physics by ``dt`` seconds; returns the events it produced.

        Order: enemies move, leaks are swept, towers fire, projectiles resolve,
        dead projectiles are swept.
        """
        state = self.state
        if state.game_over:
            return []

        dt = clamp_dt(dt, self.config.max_dt)
        before = state.emitted
        state.elapsed_s += dt

        combat.advance_enemies(state, dt)
        combat.sweep_reached(state)
        if not state.game_over:
            combat.fire_towers(state, dt)
            combat.resolve_projectiles(state, dt)
            combat.sweep_projectiles(state)

        produced = min(state.emitted - before, len(state.events))
        # Walk the log from its tail; only this tick's events are read.
        tail = list(islice(reversed(state.events), produced))
        tail.reverse()
        return tail
