from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

FILL_ATOMIC = "atomic"
FILL_PER_CELL = "per_cell"
FILL_HISTORY_MODES = (FILL_ATOMIC, FILL_PER_CELL)

APP_NAME = "tessera"


def _as_int(value: str) -> int:
    return int(value.strip())


def _as_float(value: str) -> float:
    return float(value.strip())


@dataclass
class EditorConfig:
    """Editor-wide defaults for map size, history and the cave tools.

    Order of precedence (lowest to highest): built-in defaults < embedded
    defaults.yaml < user YAML file < TESSERA_* environment variables.
    """

    map_width: int = 100
    map_height: int = 100
    tile_size: int = 32
    history_capacity: int = 50
    # "atomic": one undo step per fill; "per_cell": one undo step per replaced cell
    fill_history: str = FILL_ATOMIC
    cave_batch_size: int = 500
    cave_wall_probability: float = 0.46
    cave_iterations: int = 5
    floor_frame: int = 0
    wall_frame: int = 1

    ENV_MAPPING = {
        "TESSERA_MAP_WIDTH": ("map_width", _as_int),
        "TESSERA_MAP_HEIGHT": ("map_height", _as_int),
        "TESSERA_TILE_SIZE": ("tile_size", _as_int),
        "TESSERA_HISTORY_CAPACITY": ("history_capacity", _as_int),
        "TESSERA_FILL_HISTORY": ("fill_history", str),
        "TESSERA_CAVE_BATCH_SIZE": ("cave_batch_size", _as_int),
        "TESSERA_CAVE_WALL_PROBABILITY": ("cave_wall_probability", _as_float),
        "TESSERA_CAVE_ITERATIONS": ("cave_iterations", _as_int),
        "TESSERA_FLOOR_FRAME": ("floor_frame", _as_int),
        "TESSERA_WALL_FRAME": ("wall_frame", _as_int),
    }

    # ------------------------ Core API ------------------------
    def validate(self) -> None:
        """Validate settings, raising ValueError for values the engine cannot honour."""
        for name in ("map_width", "map_height", "tile_size", "history_capacity", "cave_batch_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.cave_iterations, int) or self.cave_iterations < 0:
            raise ValueError(f"cave_iterations must be >= 0, got {self.cave_iterations!r}")
        if not 0.0 <= float(self.cave_wall_probability) <= 1.0:
            raise ValueError(f"cave_wall_probability must be within [0, 1], got {self.cave_wall_probability!r}")
        self.cave_wall_probability = float(self.cave_wall_probability)
        self.fill_history = str(self.fill_history).strip().lower()
        if self.fill_history not in FILL_HISTORY_MODES:
            raise ValueError(f"fill_history must be one of {FILL_HISTORY_MODES}, got {self.fill_history!r}")
        for name in ("floor_frame", "wall_frame"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    # ------------------------ Loading & Overrides ------------------------
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EditorConfig":
        allowed = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        obj = cls(**{k: v for k, v in data.items() if k in allowed})
        obj.validate()
        return obj

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        env = os.environ if env is None else env
        out: Dict[str, Any] = {}
        for env_key, (field_name, caster) in cls.ENV_MAPPING.items():
            if env_key in env and env[env_key] != "":
                try:
                    out[field_name] = caster(env[env_key])
                except ValueError as exc:
                    raise ValueError(f"Invalid value for {env_key}={env[env_key]!r}: {exc}") from exc
        return out

    @staticmethod
    def read_yaml(text: str, source: str = "<string>") -> Dict[str, Any]:
        raw = yaml.safe_load(text) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config {source} must contain a mapping at the top level")
        return raw

    @classmethod
    def embedded_defaults(cls) -> Dict[str, Any]:
        data = resource_files("tessera.config").joinpath("defaults.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded editor defaults resource")
        return cls.read_yaml(data, "defaults.yaml")

    @classmethod
    def discover_config_path(cls, env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
        env = os.environ if env is None else env
        env_path = env.get("TESSERA_CONFIG")
        if env_path:
            return Path(env_path).expanduser().resolve()
        default_path = Path(user_config_dir(appname=APP_NAME)) / "config.yaml"
        if default_path.exists():
            return default_path
        return None

    @classmethod
    def from_sources(
        cls,
        *,
        env: Optional[Mapping[str, str]] = None,
        file_path: Optional[Path | str] = None,
    ) -> "EditorConfig":
        data: Dict[str, Any] = dict(cls.embedded_defaults())
        chosen = Path(file_path).expanduser().resolve() if file_path is not None else cls.discover_config_path(env)
        if chosen is not None:
            if not chosen.exists():
                raise FileNotFoundError(f"Config file not found: {chosen}")
            data.update(cls.read_yaml(chosen.read_text(encoding="utf-8"), str(chosen)))
            logger.debug("Loaded editor config from path: %s", chosen)
        data.update(cls.from_env(env))
        config = cls.from_dict(data)
        logger.info(
            "Editor config: map %dx%d, history %d (%s fills), cave batch %d",
            config.map_width,
            config.map_height,
            config.history_capacity,
            config.fill_history,
            config.cave_batch_size,
        )
        return config


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> EditorConfig:
    """Load the editor configuration from every source."""
    return EditorConfig.from_sources(env=env, file_path=path)
