from __future__ import annotations

import unittest

from tinytd.sim.entities import Enemy, Projectile, Tower
from tinytd.sim.geometry import Point
from tinytd.sim.models import EnemyState
from tinytd.sim.path import Path


def _line_path() -> Path:
    return Path.from_points([Point(0, 0), Point(100, 0), Point(100, 50)], corridor_width=24.0)


def _enemy(uid: int = 1, hp: int = 3, speed: float = 50.0, position: Point = Point(0, 0)) -> Enemy:
    return Enemy(uid=uid, hp=hp, max_hp=hp, speed=speed, position=position)


class EnemyTests(unittest.TestCase):
    def test_moves_towards_next_waypoint(self) -> None:
        enemy = _enemy()
        enemy.update(1.0, _line_path())
        self.assertEqual(enemy.position, Point(50.0, 0.0))
        self.assertEqual(enemy.waypoint_index, 0)

    def test_snaps_to_next_segment_without_carry_over(self) -> None:
        path = _line_path()
        enemy = _enemy(speed=80.0)
        enemy.update(1.0, path)
        enemy.update(1.0, path)
        # Lands on the waypoint instead of spilling 60 units onto the next segment.
        self.assertEqual(enemy.position, Point(100.0, 0.0))
        enemy.update(1.0, path)
        self.assertEqual(enemy.waypoint_index, 1)
        self.assertEqual(enemy.position, Point(100.0, 0.0))

    def test_reaches_goal_and_stops(self) -> None:
        path = _line_path()
        enemy = _enemy(speed=500.0)
        indices = []
        for _ in range(10):
            enemy.update(0.5, path)
            indices.append(enemy.waypoint_index)
        self.assertTrue(enemy.reached)
        self.assertEqual(enemy.state, EnemyState.REACHED)
        self.assertEqual(enemy.position, Point(100.0, 50.0))
        self.assertEqual(indices, sorted(indices))
        self.assertLessEqual(max(indices), path.waypoint_count() - 1)

        enemy.update(1.0, path)
        self.assertEqual(enemy.position, Point(100.0, 50.0))

    def test_damage_never_drops_hp_below_zero(self) -> None:
        enemy = _enemy(hp=2)
        self.assertFalse(enemy.take_damage(1))
        self.assertEqual(enemy.hp, 1)
        self.assertAlmostEqual(enemy.hp_ratio, 0.5)
        self.assertTrue(enemy.take_damage(5))
        self.assertEqual(enemy.hp, 0)
        self.assertEqual(enemy.view().hp_ratio, 0.0)


class TowerTests(unittest.TestCase):
    def test_cooldown_rearms_relative_to_zero(self) -> None:
        tower = Tower(uid=1, position=Point(0, 0), range=120.0, fire_rate=2.0, damage=1)
        self.assertTrue(tower.can_attack())
        tower.tick_cooldown(3.0)
        tower.rearm()
        self.assertEqual(tower.cooldown, 0.5)
        tower.tick_cooldown(0.25)
        self.assertFalse(tower.can_attack())

    def test_idle_floors_cooldown_at_zero(self) -> None:
        tower = Tower(uid=1, position=Point(0, 0), range=120.0, fire_rate=1.0, damage=1)
        tower.tick_cooldown(0.05)
        tower.idle()
        self.assertEqual(tower.cooldown, 0.0)


class ProjectileTests(unittest.TestCase):
    def test_homes_on_live_target_position(self) -> None:
        enemy = _enemy(position=Point(100, 0))
        projectile = Projectile(uid=9, position=Point(0, 0), target_uid=enemy.uid, speed=400.0, damage=1)
        enemies = {enemy.uid: enemy}

        self.assertIsNone(projectile.update(0.1, enemies))
        self.assertEqual(projectile.position, Point(40.0, 0.0))

        enemy.position = Point(40, 25)
        self.assertIsNone(projectile.update(0.05, enemies))
        self.assertEqual(projectile.position, Point(40.0, 20.0))

        self.assertIs(projectile.update(0.05, enemies), enemy)
        self.assertTrue(projectile.dead)

    def test_missing_target_terminates_quietly(self) -> None:
        projectile = Projectile(uid=9, position=Point(0, 0), target_uid=42, speed=400.0, damage=1)
        self.assertIsNone(projectile.update(0.1, {}))
        self.assertTrue(projectile.dead)
        self.assertIsNone(projectile.update(0.1, {}))

    def test_target_at_goal_terminates_projectile(self) -> None:
        enemy = _enemy(position=Point(1, 0))
        enemy.state = EnemyState.REACHED
        projectile = Projectile(uid=9, position=Point(0, 0), target_uid=enemy.uid, speed=400.0, damage=1)
        self.assertIsNone(projectile.update(0.1, {enemy.uid: enemy}))
        self.assertTrue(projectile.dead)
        self.assertEqual(enemy.hp, enemy.max_hp)


if __name__ == "__main__":
    unittest.main()
