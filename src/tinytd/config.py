from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .sim.models import GameConfig, ModelError


class ConfigError(RuntimeError):
    """Raised when configuration file is invalid."""


def _read_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc

    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise ConfigError(
                "YAML config requested, but PyYAML is not installed. "
                "Install the `yaml` extra or use JSON."
            ) from exc
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format '{suffix}'. Use .json or .yaml/.yml.")


_SECTIONS = ("economy", "tower", "projectile", "enemy", "waves", "arena")


def config_from_dict(payload: Any) -> GameConfig:
    if not isinstance(payload, dict):
        raise ConfigError("Config root must be an object (JSON/YAML mapping).")

    for section in _SECTIONS:
        if not isinstance(payload.get(section, {}), dict):
            raise ConfigError(f"Config section '{section}' must be an object.")
    if not isinstance(payload.get("maps", []), list):
        raise ConfigError("Config field 'maps' must be a list of map definitions.")

    try:
        return GameConfig.from_dict(payload)
    except ModelError as exc:
        raise ConfigError(str(exc)) from exc


def load_config(path: Path | str) -> GameConfig:
    return config_from_dict(_read_raw(Path(path)))


def default_config() -> GameConfig:
    return GameConfig()
