from __future__ import annotations

import math
import unittest

from tinytd.sim.geometry import Point, distance, point_segment_distance, step_towards
from tinytd.sim.maps import BUILTIN_MAPS, MapCatalog
from tinytd.sim.models import Arena, MapDefinition, MapNotFoundError, ModelError
from tinytd.sim.path import Path, resolve_path


class GeometryTests(unittest.TestCase):
    def test_distance_is_euclidean(self) -> None:
        self.assertAlmostEqual(distance(Point(0, 0), Point(3, 4)), 5.0)
        self.assertEqual(distance(Point(2, 2), Point(2, 2)), 0.0)

    def test_point_segment_distance_clamps_projection(self) -> None:
        a, b = Point(0, 0), Point(10, 0)
        self.assertAlmostEqual(point_segment_distance(Point(5, 3), a, b), 3.0)
        # Beyond the end points the nearest point is the end point itself.
        self.assertAlmostEqual(point_segment_distance(Point(-4, 3), a, b), 5.0)
        self.assertAlmostEqual(point_segment_distance(Point(13, 4), a, b), 5.0)

    def test_zero_length_segment_degrades_to_point_distance(self) -> None:
        a = Point(1, 1)
        result = point_segment_distance(Point(4, 5), a, a)
        self.assertFalse(math.isnan(result))
        self.assertAlmostEqual(result, 5.0)

    def test_step_towards_never_overshoots(self) -> None:
        self.assertEqual(step_towards(Point(0, 0), Point(10, 0), 4.0), Point(4.0, 0.0))
        self.assertEqual(step_towards(Point(0, 0), Point(10, 0), 25.0), Point(10.0, 0.0))
        self.assertEqual(step_towards(Point(3, 3), Point(3, 3), 1.0), Point(3.0, 3.0))


class PathTests(unittest.TestCase):
    def setUp(self) -> None:
        self.path = Path.from_points([Point(0, 0), Point(100, 0), Point(100, 100)], corridor_width=24.0, placement_padding=14.0)

    def test_point_at_is_clamped(self) -> None:
        self.assertEqual(self.path.waypoint_count(), 3)
        self.assertEqual(self.path.point_at(1), Point(100, 0))
        self.assertEqual(self.path.point_at(3), Point(100, 100))
        self.assertEqual(self.path.point_at(99), Point(100, 100))

    def test_corridor_includes_padding(self) -> None:
        # Half width 12 + padding 14 = 26.
        self.assertTrue(self.path.corridor_contains(Point(50, 25)))
        self.assertTrue(self.path.corridor_contains(Point(50, 26)))
        self.assertFalse(self.path.corridor_contains(Point(50, 27)))
        self.assertTrue(self.path.corridor_contains(Point(120, 60)))
        self.assertFalse(self.path.corridor_contains(Point(50, 60)))

    def test_distance_to_takes_nearest_segment(self) -> None:
        self.assertAlmostEqual(self.path.distance_to(Point(50, 30)), 30.0)
        self.assertAlmostEqual(self.path.distance_to(Point(120, 60)), 20.0)
        self.assertAlmostEqual(self.path.distance_to(Point(100, 0)), 0.0)
        # Past the goal the end point is nearest.
        self.assertAlmostEqual(self.path.distance_to(Point(103, 104)), 5.0)

    def test_path_requires_two_waypoints(self) -> None:
        with self.assertRaises(ModelError):
            Path.from_points([Point(0, 0)], corridor_width=24.0)

    def test_resolve_path_scales_logical_points(self) -> None:
        points = resolve_path([Point(0.0625, 0.5), Point(1.0, 0.25)], 800, 600)
        self.assertEqual(points, [Point(50.0, 300.0), Point(800.0, 150.0)])


class MapCatalogTests(unittest.TestCase):
    def test_builtin_catalog_lookup(self) -> None:
        catalog = MapCatalog()
        self.assertEqual(len(catalog), len(BUILTIN_MAPS))
        self.assertEqual(catalog.get(0).id, "meadow")
        self.assertEqual(catalog.get("switchback").id, "switchback")
        self.assertEqual(catalog.get("2").id, catalog.get(2).id)
        with self.assertRaises(MapNotFoundError):
            catalog.get(len(BUILTIN_MAPS))
        with self.assertRaises(MapNotFoundError):
            catalog.get("missing")

    def test_default_map_layout(self) -> None:
        definition, path = MapCatalog().build_path(0, Arena(), placement_padding=14.0)
        self.assertEqual(definition.id, "meadow")
        self.assertEqual(path.start, Point(50.0, 300.0))
        self.assertEqual(path.goal, Point(750.0, 300.0))
        self.assertEqual(path.corridor_width, 24.0)

    def test_map_definition_validation(self) -> None:
        parsed = MapDefinition.from_dict({"id": "line", "waypoints": [[0, 0.5], {"x": 1, "y": 0.5}]})
        self.assertEqual(parsed.waypoints, (Point(0.0, 0.5), Point(1.0, 0.5)))
        with self.assertRaises(ModelError):
            MapDefinition.from_dict({"id": "short", "waypoints": [[0, 0]]})
        with self.assertRaises(ModelError):
            MapDefinition.from_dict({"id": "outside", "waypoints": [[0, 0], [2, 0]]})
        with self.assertRaises(ModelError):
            MapDefinition.from_dict({"id": "bad", "waypoints": [[0, 0], ["x"]]})


if __name__ == "__main__":
    unittest.main()
