"""
Configuration loading for rendering runs.

Settings come from defaults, then an optional JSON file, then
``CHAOS_GAME_*`` environment variables, then command-line overrides.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Dict, Any, Optional, Union

from ..core.game import MIN_STEPS, MAX_STEPS

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for a chaos game or explore render."""

    # Canvas
    width: int = 1200
    height: int = 800

    # Chaos game
    steps: int = 100_000
    seed: Optional[int] = None

    # Explore
    max_iterations: int = 100
    escape_radius: float = 2.0
    workers: int = 1
    tile_size: int = 64

    # Coloring
    palette: str = 'hot'
    log_scale: bool = True

    def validate(self):
        """Validate configuration parameters."""
        if self.width < 2 or self.height < 2:
            raise ValueError("Width and height must be at least 2")

        if not MIN_STEPS <= self.steps <= MAX_STEPS:
            raise ValueError(f"steps must be between {MIN_STEPS} and {MAX_STEPS}")

        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive")

        if self.escape_radius <= 0:
            raise ValueError("escape_radius must be positive")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.tile_size < 1:
            raise ValueError("tile_size must be >= 1")

    def update(self, **kwargs) -> 'RenderConfig':
        """Apply overrides, ignoring None values, and re-validate."""
        for key, value in kwargs.items():
            if value is None:
                continue
            if not hasattr(self, key):
                raise ValueError(f"Unknown configuration parameter: {key}")
            setattr(self, key, value)
        self.validate()
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EnvironmentConfig:
    """Reads ``CHAOS_GAME_<FIELD>`` overrides from the environment."""

    PREFIX = 'CHAOS_GAME_'

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def overrides(self) -> Dict[str, Any]:
        result = {}
        for field in fields(RenderConfig):
            raw = self.environ.get(self.PREFIX + field.name.upper())
            if raw is None:
                continue
            result[field.name] = _coerce(field.name, raw)
        return result


def _coerce(name: str, raw: str) -> Any:
    default = getattr(RenderConfig, name)
    try:
        if isinstance(default, bool):
            return raw.strip().lower() in ('1', 'true', 'yes', 'on')
        if isinstance(default, int) or name == 'seed':
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None
    return raw


class ConfigManager:
    """Loads render configuration from JSON files."""

    def load_config(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a JSON configuration file.

        Args:
            filepath: Path to the file

        Returns:
            Parsed configuration dictionary
        """
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {filepath} must contain a JSON object")
        logger.info(f"Loaded configuration from {filepath}")
        return data

    def create_render_config(self, data: Dict[str, Any]) -> RenderConfig:
        """Build a validated RenderConfig from the ``render`` section (or the top level)."""
        section = data.get('render', data)
        known = {f.name for f in fields(RenderConfig)}
        unknown = set(section) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")
        config = RenderConfig(**{k: v for k, v in section.items() if k in known})
        config.validate()
        return config

    def save_config(self, config: RenderConfig, filepath: Union[str, Path]) -> None:
        filepath = Path(filepath)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump({'render': config.to_dict()}, f, indent=2)
        logger.info(f"Saved configuration: {filepath}")


def load_config_from_args(config_file: Optional[str] = None,
                          environ: Optional[Dict[str, str]] = None) -> RenderConfig:
    """
    Resolve the configuration used by the CLI.

    Args:
        config_file: Optional JSON configuration file
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated RenderConfig
    """
    manager = ConfigManager()
    if config_file:
        config = manager.create_render_config(manager.load_config(config_file))
    else:
        config = RenderConfig()
    return config.update(**EnvironmentConfig(environ).overrides())
