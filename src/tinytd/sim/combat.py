from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .entities import Enemy, Projectile
from .geometry import Point, distance
from .models import EventType
from .state import SimulationState

logger = logging.getLogger(__name__)


def select_target(origin: Point, max_range: float, enemies: Iterable[Enemy]) -> Optional[Enemy]:
    """Nearest enemy within ``max_range`` of ``origin``.

    Enemies that reached the goal are skipped. Equal distances keep the first
    enemy in iteration order (spawn order for the simulation's collection).
    """
    nearest: Optional[Enemy] = None
    nearest_distance = float("inf")
    for enemy in enemies:
        if enemy.reached:
            continue
        d = distance(origin, enemy.position)
        if d <= max_range and d < nearest_distance:
            nearest = enemy
            nearest_distance = d
    return nearest


def advance_enemies(state: SimulationState, dt: float) -> None:
    threshold = state.config.enemy.arrival_threshold
    for enemy in state.enemies.values():
        enemy.update(dt, state.path, threshold)


def sweep_reached(state: SimulationState) -> int:
    """Remove enemies at the goal, one life each. Returns the number leaked."""
    reached = [uid for uid, enemy in state.enemies.items() if enemy.reached]
    for uid in reached:
        del state.enemies[uid]
        state.lives -= 1
        state.emit(EventType.ENEMY_LEAKED, enemy_uid=uid, lives=state.lives)
        logger.debug("Enemy %d reached the goal, lives left %d", uid, state.lives)

    if reached and state.lives <= 0 and not state.game_over:
        state.game_over = True
        state.spawner.cancel()
        state.emit(EventType.GAME_OVER, lives=state.lives)
        logger.warning("Game over on wave %d", state.wave)
    return len(reached)


def fire_towers(state: SimulationState, dt: float) -> List[Projectile]:
    fired: List[Projectile] = []
    projectile_rules = state.config.projectile
    for tower in state.towers:
        tower.tick_cooldown(dt)
        if not tower.can_attack():
            continue

        target = select_target(tower.position, tower.range, state.enemies.values())
        if target is None:
            tower.idle()
            continue

        projectile = Projectile(
            uid=state.allocate_uid(),
            position=tower.position,
            target_uid=target.uid,
            speed=projectile_rules.speed,
            damage=tower.damage,
        )
        tower.rearm()
        fired.append(projectile)

    state.projectiles.extend(fired)
    return fired


def resolve_projectiles(state: SimulationState, dt: float) -> int:
    """Move projectiles and apply impacts. Returns the number of kills.

    A kill removes the enemy from the collection before the reward is paid,
    so any other projectile still chasing it finds no target and dies.
    """
    threshold = state.config.projectile.impact_threshold
    reward = state.config.economy.kill_reward
    kills = 0
    for projectile in state.projectiles:
        target = projectile.update(dt, state.enemies, threshold)
        if target is None:
            continue
        if not target.take_damage(projectile.damage):
            continue
        if state.enemies.pop(target.uid, None) is None:
            continue
        state.cash += reward
        kills += 1
        state.emit(EventType.ENEMY_KILLED, enemy_uid=target.uid, reward=reward, cash=state.cash)
        logger.debug("Enemy %d killed, cash %d", target.uid, state.cash)
    return kills


def sweep_projectiles(state: SimulationState) -> None:
    state.projectiles[:] = [projectile for projectile in state.projectiles if not projectile.dead]
