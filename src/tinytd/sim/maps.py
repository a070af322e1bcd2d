from __future__ import annotations

from typing import Any, Dict, List, Sequence, Union

from .geometry import Point
from .models import Arena, MapDefinition, MapNotFoundError
from .path import Path, resolve_path


BUILTIN_MAPS: tuple[MapDefinition, ...] = (
    MapDefinition(
        id="meadow",
        name="Meadow",
        waypoints=(
            Point(0.0625, 0.5),
            Point(0.25, 0.25),
            Point(0.5, 0.5),
            Point(0.75, 0.4),
            Point(0.9375, 0.5),
        ),
        corridor_width=24.0,
    ),
    MapDefinition(
        id="switchback",
        name="Switchback",
        waypoints=(
            Point(0.0625, 0.15),
            Point(0.9, 0.15),
            Point(0.9, 0.5),
            Point(0.1, 0.5),
            Point(0.1, 0.85),
            Point(0.9375, 0.85),
        ),
        corridor_width=24.0,
    ),
    MapDefinition(
        id="canyon",
        name="Canyon",
        waypoints=(
            Point(0.5, 0.05),
            Point(0.5, 0.35),
            Point(0.2, 0.55),
            Point(0.8, 0.75),
            Point(0.5, 0.95),
        ),
        corridor_width=32.0,
    ),
)


class MapCatalog:
    """Ordered set of selectable maps, addressable by index or id."""

    def __init__(self, maps: Sequence[MapDefinition] = ()):
        self.maps: tuple[MapDefinition, ...] = tuple(maps) or BUILTIN_MAPS

    def __len__(self) -> int:
        return len(self.maps)

    def get(self, key: Union[int, str]) -> MapDefinition:
        if isinstance(key, int) and not isinstance(key, bool):
            if 0 <= key < len(self.maps):
                return self.maps[key]
            raise MapNotFoundError(f"Map index out of range: {key} (catalog has {len(self.maps)} maps)")

        map_id = str(key).strip()
        for item in self.maps:
            if item.id == map_id:
                return item
        if map_id.isdigit():
            return self.get(int(map_id))
        raise MapNotFoundError(f"Map not found: {map_id}")

    def build_path(self, key: Union[int, str], arena: Arena, placement_padding: float) -> tuple[MapDefinition, Path]:
        definition = self.get(key)
        points = resolve_path(definition.waypoints, arena.width, arena.height)
        return definition, Path.from_points(points, definition.corridor_width, placement_padding)

    def describe(self) -> List[Dict[str, Any]]:
        return [dict(item.to_dict(), index=idx) for idx, item in enumerate(self.maps)]
