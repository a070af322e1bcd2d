from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .geometry import Point


class ModelError(ValueError):
    """Raised for malformed map or rules payloads."""


class MapNotFoundError(LookupError):
    """Raised when a map index or id is not in the catalog."""


def _require(payload: Dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise ModelError(f"Missing required field: {key}")
    return payload[key]


def _stable_float(value: float, digits: int = 10) -> float:
    rounded = round(float(value), digits)
    # Normalize signed zero to keep deterministic JSON across runtimes.
    return 0.0 if rounded == 0.0 else rounded


def _stabilize_numeric_payload(payload: Any, digits: int = 10) -> Any:
    if isinstance(payload, Enum):
        return payload.value
    if isinstance(payload, float):
        return _stable_float(payload, digits=digits)
    if isinstance(payload, (list, tuple)):
        return [_stabilize_numeric_payload(item, digits=digits) for item in payload]
    if isinstance(payload, dict):
        return {key: _stabilize_numeric_payload(value, digits=digits) for key, value in payload.items()}
    return payload


def _finite_float(payload: Dict[str, Any], key: str, default: float) -> float:
    try:
        value = float(payload.get(key, default))
    except (TypeError, ValueError) as exc:
        raise ModelError(f"Field '{key}' must be a number.") from exc
    if not math.isfinite(value):
        raise ModelError(f"Field '{key}' must be finite.")
    return value


def _positive_float(payload: Dict[str, Any], key: str, default: float) -> float:
    value = _finite_float(payload, key, default)
    if value <= 0.0:
        raise ModelError(f"Field '{key}' must be a positive number, got {value}.")
    return value


def _non_negative_int(payload: Dict[str, Any], key: str, default: int) -> int:
    raw = payload.get(key, default)
    if isinstance(raw, bool):
        raise ModelError(f"Field '{key}' must be an integer.")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ModelError(f"Field '{key}' must be an integer.") from exc
    if value != raw and not isinstance(raw, str):
        raise ModelError(f"Field '{key}' must be an integer, got {raw}.")
    if value < 0:
        raise ModelError(f"Field '{key}' must be >= 0, got {value}.")
    return value


class EnemyState(str, Enum):
    TRAVELING = "traveling"
    REACHED = "reached"


class SpawnerState(str, Enum):
    IDLE = "idle"
    SPAWNING = "spawning"


class RejectReason(str, Enum):
    ON_PATH = "on_path"
    OVERLAPS_TOWER = "overlaps_tower"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    GAME_OVER = "game_over"


class EventType(str, Enum):
    WAVE_STARTED = "wave_started"
    ENEMY_SPAWNED = "enemy_spawned"
    WAVE_COMPLETED = "wave_completed"
    TOWER_PLACED = "tower_placed"
    PLACEMENT_REJECTED = "placement_rejected"
    ENEMY_KILLED = "enemy_killed"
    ENEMY_LEAKED = "enemy_leaked"
    MAP_SELECTED = "map_selected"
    GAME_OVER = "game_over"
    RESET = "reset"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class MapDefinition:
    id: str
    name: str
    waypoints: tuple[Point, ...]
    corridor_width: float = 24.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "MapDefinition":
        map_id = str(_require(payload, "id")).strip()
        if not map_id:
            raise ModelError("Map id cannot be empty.")

        waypoints = []
        for item in _require(payload, "waypoints"):
            try:
                x, y = (float(item["x"]), float(item["y"])) if isinstance(item, dict) else (float(item[0]), float(item[1]))
            except (KeyError, IndexError, TypeError, ValueError) as exc:
                raise ModelError(f"Map '{map_id}' has a malformed waypoint: {item!r}") from exc
            if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
                raise ModelError(f"Map '{map_id}' waypoint {item!r} is outside the logical 0..1 space.")
            waypoints.append(Point(x, y))
        if len(waypoints) < 2:
            raise ModelError(f"Map '{map_id}' needs at least 2 waypoints, got {len(waypoints)}.")

        return cls(
            id=map_id,
            name=str(payload.get("name", map_id)),
            waypoints=tuple(waypoints),
            corridor_width=_positive_float(payload, "corridor_width", 24.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "waypoints": [{"x": point.x, "y": point.y} for point in self.waypoints],
            "corridor_width": self.corridor_width,
        }


@dataclass(slots=True, frozen=True)
class EconomyRules:
    starting_cash: int = 100
    starting_lives: int = 20
    tower_cost: int = 50
    kill_reward: int = 10

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EconomyRules":
        return cls(
            starting_cash=_non_negative_int(payload, "starting_cash", 100),
            starting_lives=max(1, _non_negative_int(payload, "starting_lives", 20)),
            tower_cost=_non_negative_int(payload, "tower_cost", 50),
            kill_reward=_non_negative_int(payload, "kill_reward", 10),
        )


@dataclass(slots=True, frozen=True)
class TowerRules:
    range: float = 120.0
    fire_rate: float = 1.0
    damage: int = 1
    footprint_radius: float = 14.0
    min_separation: float = 28.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TowerRules":
        return cls(
            range=_positive_float(payload, "range", 120.0),
            fire_rate=_positive_float(payload, "fire_rate", 1.0),
            damage=_non_negative_int(payload, "damage", 1),
            footprint_radius=_positive_float(payload, "footprint_radius", 14.0),
            min_separation=_positive_float(payload, "min_separation", 28.0),
        )


@dataclass(slots=True, frozen=True)
class ProjectileRules:
    speed: float = 400.0
    impact_threshold: float = 6.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProjectileRules":
        return cls(
            speed=_positive_float(payload, "speed", 400.0),
            impact_threshold=_positive_float(payload, "impact_threshold", 6.0),
        )


@dataclass(slots=True, frozen=True)
class EnemyRules:
    base_hp: int = 1
    hp_wave_divisor: int = 3
    base_speed: float = 60.0
    speed_per_wave: float = 5.0
    arrival_threshold: float = 1.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EnemyRules":
        return cls(
            base_hp=max(1, _non_negative_int(payload, "base_hp", 1)),
            hp_wave_divisor=max(1, _non_negative_int(payload, "hp_wave_divisor", 3)),
            base_speed=_positive_float(payload, "base_speed", 60.0),
            speed_per_wave=_finite_float(payload, "speed_per_wave", 5.0),
            arrival_threshold=_positive_float(payload, "arrival_threshold", 1.0),
        )

    def hp_for_wave(self, wave: int) -> int:
        return self.base_hp + wave // self.hp_wave_divisor

    def speed_for_wave(self, wave: int) -> float:
        return max(0.0, self.base_speed + self.speed_per_wave * wave)


@dataclass(slots=True, frozen=True)
class WaveRules:
    base_count: int = 10
    count_per_wave: int = 2
    spawn_interval_s: float = 0.6

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WaveRules":
        return cls(
            base_count=_non_negative_int(payload, "base_count", 10),
            count_per_wave=_non_negative_int(payload, "count_per_wave", 2),
            spawn_interval_s=_positive_float(payload, "spawn_interval_s", 0.6),
        )

    def enemy_count(self, wave: int) -> int:
        return self.base_count + self.count_per_wave * wave


@dataclass(slots=True, frozen=True)
class Arena:
    width: float = 800.0
    height: float = 600.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Arena":
        return cls(
            width=_positive_float(payload, "width", 800.0),
            height=_positive_float(payload, "height", 600.0),
        )


@dataclass(slots=True, frozen=True)
class GameConfig:
    economy: EconomyRules = field(default_factory=EconomyRules)
    tower: TowerRules = field(default_factory=TowerRules)
    projectile: ProjectileRules = field(default_factory=ProjectileRules)
    enemy: EnemyRules = field(default_factory=EnemyRules)
    waves: WaveRules = field(default_factory=WaveRules)
    arena: Arena = field(default_factory=Arena)
    # Empty means the built-in catalog.
    maps: tuple[MapDefinition, ...] = tuple()
    max_dt: float = 0.05

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GameConfig":
        maps = tuple(MapDefinition.from_dict(item) for item in payload.get("maps", []))
        seen: set[str] = set()
        for item in maps:
            if item.id in seen:
                raise ModelError(f"Duplicate map id: {item.id}")
            seen.add(item.id)

        return cls(
            economy=EconomyRules.from_dict(payload.get("economy", {})),
            tower=TowerRules.from_dict(payload.get("tower", {})),
            projectile=ProjectileRules.from_dict(payload.get("projectile", {})),
            enemy=EnemyRules.from_dict(payload.get("enemy", {})),
            waves=WaveRules.from_dict(payload.get("waves", {})),
            arena=Arena.from_dict(payload.get("arena", {})),
            maps=maps,
            max_dt=_positive_float(payload, "max_dt", 0.05),
        )


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class SimEvent:
    type: EventType
    at_s: float
    wave: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return _stabilize_numeric_payload(asdict(self))


@dataclass(slots=True, frozen=True)
class PlacementResult:
    accepted: bool
    reason: Optional[RejectReason] = None
    tower_uid: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "reason": self.reason.value if self.reason is not None else None,
            "tower_uid": self.tower_uid,
        }


@dataclass(slots=True, frozen=True)
class EnemyView:
    uid: int
    x: float
    y: float
    hp: int
    max_hp: int
    hp_ratio: float
    waypoint_index: int


@dataclass(slots=True, frozen=True)
class TowerView:
    uid: int
    x: float
    y: float
    range: float
    cooldown: float


@dataclass(slots=True, frozen=True)
class ProjectileView:
    uid: int
    x: float
    y: float
    target_uid: int


@dataclass(slots=True, frozen=True)
class SimulationSnapshot:
    cash: int
    wave: int
    lives: int
    spawning: bool
    spawn_remaining: int
    game_over: bool
    elapsed_s: float
    map_id: str
    path: tuple[Point, ...]
    corridor_width: float
    last_rejection: Optional[RejectReason]
    enemies: tuple[EnemyView, ...]
    towers: tuple[TowerView, ...]
    projectiles: tuple[ProjectileView, ...]

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["path"] = [{"x": point.x, "y": point.y} for point in self.path]
        return _stabilize_numeric_payload(payload)
