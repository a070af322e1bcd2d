"""tinytd tower-defense simulation package."""

from .config import ConfigError, config_from_dict, default_config, load_config
from .formatting import format_snapshot, format_wave_table, summarize_placements
from .sim import (
    GameConfig,
    HeadlessDriver,
    MapCatalog,
    MapNotFoundError,
    ModelError,
    PlacementResult,
    RejectReason,
    Simulation,
    SimulationRunner,
    SimulationSnapshot,
)

__all__ = [
    "load_config",
    "config_from_dict",
    "default_config",
    "ConfigError",
    "format_snapshot",
    "format_wave_table",
    "summarize_placements",
    "GameConfig",
    "HeadlessDriver",
    "MapCatalog",
    "MapNotFoundError",
    "ModelError",
    "PlacementResult",
    "RejectReason",
    "Simulation",
    "SimulationRunner",
    "SimulationSnapshot",
]
