"""Real-time tower-defense simulation core."""

from .clock import HeadlessDriver, WaveReport, clamp_dt
from .combat import select_target
from .entities import Enemy, Projectile, Tower
from .geometry import Point, distance, point_segment_distance
from .maps import BUILTIN_MAPS, MapCatalog
from .models import (
    EnemyState,
    EventType,
    GameConfig,
    MapDefinition,
    MapNotFoundError,
    ModelError,
    PlacementResult,
    RejectReason,
    SimEvent,
    SimulationSnapshot,
    SpawnerState,
)
from .path import Path, resolve_path
from .runner import SimulationRunner
from .simulation import Simulation
from .spawner import WaveSpawner

__all__ = [
    "HeadlessDriver",
    "WaveReport",
    "clamp_dt",
    "select_target",
    "Enemy",
    "Projectile",
    "Tower",
    "Point",
    "distance",
    "point_segment_distance",
    "BUILTIN_MAPS",
    "MapCatalog",
    "EnemyState",
    "EventType",
    "GameConfig",
    "MapDefinition",
    "MapNotFoundError",
    "ModelError",
    "PlacementResult",
    "RejectReason",
    "SimEvent",
    "SimulationSnapshot",
    "SpawnerState",
    "Path",
    "resolve_path",
    "SimulationRunner",
    "Simulation",
    "WaveSpawner",
]
