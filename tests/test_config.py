from __future__ import annotations

import importlib.util
import json
import tempfile
import unittest
from pathlib import Path

from tinytd.config import ConfigError, config_from_dict, default_config, load_config
from tinytd.sim.models import GameConfig
from tinytd.sim.simulation import Simulation


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, name: str, text: str) -> Path:
        path = self.root / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_default_config_constants(self) -> None:
        config = default_config()
        self.assertEqual(config, GameConfig())
        self.assertEqual(
            (config.economy.starting_cash, config.economy.starting_lives, config.economy.tower_cost),
            (100, 20, 50),
        )
        self.assertEqual(config.economy.kill_reward, 10)
        self.assertEqual((config.tower.range, config.tower.fire_rate, config.tower.damage), (120.0, 1.0, 1))
        self.assertEqual(config.projectile.speed, 400.0)
        self.assertEqual(config.waves.spawn_interval_s, 0.6)
        self.assertEqual(config.max_dt, 0.05)
        self.assertEqual(config.maps, ())

    def test_load_json_overrides_and_custom_maps(self) -> None:
        path = self._write(
            "rules.json",
            json.dumps(
                {
                    "economy": {"starting_cash": 250, "kill_reward": 5},
                    "waves": {"base_count": 4},
                    "maps": [
                        {"id": "straight", "name": "Straight", "waypoints": [[0, 0.5], [1, 0.5]], "corridor_width": 40},
                    ],
                }
            ),
        )
        config = load_config(path)
        self.assertEqual(config.economy.starting_cash, 250)
        self.assertEqual(config.economy.kill_reward, 5)
        self.assertEqual(config.economy.tower_cost, 50)
        self.assertEqual(config.waves.enemy_count(1), 6)

        sim = Simulation(config)
        self.assertEqual(sim.cash, 250)
        self.assertEqual(sim.state.map_definition.id, "straight")
        self.assertEqual(sim.path.points, (sim.path.start, sim.path.goal))
        self.assertEqual(sim.path.corridor_width, 40.0)

    @unittest.skipIf(importlib.util.find_spec("yaml") is None, "PyYAML is not installed")
    def test_load_yaml(self) -> None:
        path = self._write("rules.yaml", "tower:\n  range: 150\n  fire_rate: 2\nmax_dt: 0.1\n")
        config = load_config(path)
        self.assertEqual(config.tower.range, 150.0)
        self.assertEqual(config.tower.fire_rate, 2.0)
        self.assertEqual(config.max_dt, 0.1)

    def test_missing_and_unsupported_files(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self.root / "absent.json")
        with self.assertRaises(ConfigError):
            load_config(self._write("rules.toml", "x = 1\n"))
        with self.assertRaises(ConfigError):
            load_config(self._write("broken.json", "{not json"))

    def test_invalid_values_are_config_errors(self) -> None:
        bad_payloads = [
            [],
            {"economy": []},
            {"maps": {"id": "x"}},
            {"tower": {"range": -5}},
            {"tower": {"fire_rate": "fast"}},
            {"economy": {"starting_cash": 2.5}},
            {"economy": {"tower_cost": True}},
            {"max_dt": 0},
            {"maps": [{"id": "a", "waypoints": [[0, 0], [1, 1]]}, {"id": "a", "waypoints": [[0, 0], [1, 1]]}]},
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(ConfigError):
                    config_from_dict(payload)


if __name__ == "__main__":
    unittest.main()
