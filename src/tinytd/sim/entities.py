from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .geometry import Point, distance, step_towards
from .models import EnemyState, EnemyView, ProjectileView, TowerView
from .path import Path


@dataclass(slots=True)
class Enemy:
    uid: int
    hp: int
    max_hp: int
    speed: float
    position: Point
    waypoint_index: int = 0
    state: EnemyState = EnemyState.TRAVELING

    @property
    def reached(self) -> bool:
        return self.state is EnemyState.REACHED

    @property
    def hp_ratio(self) -> float:
        return self.hp / self.max_hp if self.max_hp > 0 else 0.0

    def update(self, dt: float, path: Path, arrival_threshold: float = 1.0) -> None:
        """Steer towards the next waypoint.

        Arriving at a waypoint only advances the index; leftover travel is not
        carried into the next segment.
        """
        if self.state is EnemyState.REACHED:
            return

        target = path.point_at(self.waypoint_index + 1)
        if distance(self.position, target) < arrival_threshold:
            if self.waypoint_index < path.last_index:
                self.waypoint_index += 1
            else:
                self.state = EnemyState.REACHED
            return

        self.position = step_towards(self.position, target, self.speed * dt)

    def take_damage(self, amount: int) -> bool:
        """Apply damage; returns True when the enemy is dead."""
        self.hp = max(0, self.hp - max(0, amount))
        return self.hp <= 0

    def view(self) -> EnemyView:
        return EnemyView(
            uid=self.uid,
            x=self.position.x,
            y=self.position.y,
            hp=self.hp,
            max_hp=self.max_hp,
            hp_ratio=self.hp_ratio,
            waypoint_index=self.waypoint_index,
        )


@dataclass(slots=True)
class Tower:
    uid: int
    position: Point
    range: float
    fire_rate: float
    damage: int
    cooldown: float = 0.0

    def tick_cooldown(self, dt: float) -> None:
        self.cooldown -= dt

    def can_attack(self) -> bool:
        return self.cooldown <= 0.0

    def rearm(self) -> None:
        # Reset relative to zero: idle time never banks extra shots.
        self.cooldown = 1.0 / self.fire_rate

    def idle(self) -> None:
        self.cooldown = max(self.cooldown, 0.0)

    def view(self) -> TowerView:
        return TowerView(
            uid=self.uid,
            x=self.position.x,
            y=self.position.y,
            range=self.range,
            cooldown=self.cooldown,
        )


@dataclass(slots=True)
class Projectile:
    uid: int
    position: Point
    target_uid: int
    speed: float
    damage: int
    dead: bool = False

    def update(
        self,
        dt: float,
        enemies: Mapping[int, Enemy],
        impact_threshold: float = 6.0,
    ) -> Optional[Enemy]:
        """Home in on the target; returns the enemy when this tick is an impact.

        The target is looked up by uid every tick. A target that is gone or has
        reached the goal terminates the projectile without an impact.
        """
        if self.dead:
            return None

        target = enemies.get(self.target_uid)
        if target is None or target.reached:
            self.dead = True
            return None

        if distance(self.position, target.position) < impact_threshold:
            self.dead = True
            return target

        self.position = step_towards(self.position, target.position, self.speed * dt)
        return None

    def view(self) -> ProjectileView:
        return ProjectileView(
            uid=self.uid,
            x=self.position.x,
            y=self.position.y,
            target_uid=self.target_uid,
        )
