"""
Configuration Loader

Loads seqpipe settings from seqpipe.json in the project root.
Environment variables always take precedence over config file values.

Config file location (in order of precedence):
1. SEQPIPE_PROJECT_ROOT/seqpipe.json (if SEQPIPE_PROJECT_ROOT is set)
2. CWD/seqpipe.json

Supported settings in seqpipe.json:
{
    "default_capacity": 8,        // -> SEQPIPE_DEFAULT_CAPACITY
    "growth_factor": 2.0,         // -> SEQPIPE_GROWTH_FACTOR
    "max_capacity": null,         // -> SEQPIPE_MAX_CAPACITY (null = unbounded)
    "trace": false                // -> SEQPIPE_TRACE
}
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .logging_config import configure_logger_for_trace

logger = configure_logger_for_trace(__name__)

CONFIG_FILENAME = "seqpipe.json"


class SequenceSettings(BaseModel):
    """Storage and tracing settings shared by sequences and pipelines."""
    model_config = ConfigDict(frozen=True)

    default_capacity: int = Field(8, ge=0)      # Slots preallocated when no capacity is given
    growth_factor: float = Field(2.0, gt=1.0)   # Capacity multiplier when a sequence is full
    max_capacity: Optional[int] = Field(None, ge=1)
    trace: bool = False                         # Log stage events when no hook is given

    @property
    def initial_capacity(self) -> int:
        """default_capacity, clamped to max_capacity."""
        if self.max_capacity is None:
            return self.default_capacity
        return min(self.default_capacity, self.max_capacity)


class ConfigLoader:
    """
    Loads configuration from seqpipe.json file.

    ::: This is-in-layer Service-Layer.
    ::: This is a loader.
    ::: This is stateless.

    Priority: Environment variables > seqpipe.json > defaults
    """

    # Mapping from seqpipe.json keys to environment variable names
    CONFIG_KEY_TO_ENV = {
        "default_capacity": "SEQPIPE_DEFAULT_CAPACITY",
        "growth_factor": "SEQPIPE_GROWTH_FACTOR",
        "max_capacity": "SEQPIPE_MAX_CAPACITY",
        "trace": "SEQPIPE_TRACE",
    }

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._config_path: Optional[Path] = None
        self._loaded = False

    def load(self, project_root: Optional[Path] = None) -> bool:
        """
        Load configuration from seqpipe.json.

        Args:
            project_root: Project root directory. If None, uses SEQPIPE_PROJECT_ROOT or CWD.

        Returns:
            True if config file was found and loaded, False otherwise.
        """
        if self._loaded:
            return self._config_path is not None

        if project_root is None:
            env_root = os.getenv("SEQPIPE_PROJECT_ROOT")
            project_root = Path(env_root) if env_root else Path.cwd()

        config_path = Path(project_root) / CONFIG_FILENAME
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                logger.warning("Invalid JSON in %s: %s", config_path, e)
            except OSError as e:
                logger.warning("Error loading %s: %s", config_path, e)
            else:
                if isinstance(data, dict):
                    self._config = data
                    self._config_path = config_path
                    logger.info("Loaded config from: %s", config_path)
                else:
                    logger.warning("Ignoring %s: top level must be an object", config_path)

        self._loaded = True
        return self._config_path is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value."""
        return self._config.get(key, default)

    def _raw_values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for key, env_var in self.CONFIG_KEY_TO_ENV.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                if key == "max_capacity" and env_value.strip().lower() in ("", "none", "null"):
                    values[key] = None
                else:
                    values[key] = env_value.strip()
            elif key in self._config:
                values[key] = self._config[key]
        return values

    def build_settings(self) -> SequenceSettings:
        """
        Build validated settings with defaults applied.

        Values that fail validation are dropped (and logged) so the
        default for that field is used instead.
        """
        self.load()
        values = self._raw_values()
        try:
            return SequenceSettings(**values)
        except ValidationError as e:
            invalid = {err["loc"][0] for err in e.errors() if err.get("loc")}
            for key in sorted(invalid, key=str):
                logger.warning("Invalid value for %s: %r, using default", key, values.get(key))
            return SequenceSettings(**{k: v for k, v in values.items() if k not in invalid})

    @property
    def config_path(self) -> Optional[Path]:
        """Path to the loaded config file, or None if not loaded."""
        return self._config_path

    @property
    def config(self) -> Dict[str, Any]:
        """The loaded configuration dictionary."""
        return self._config.copy()


# Global singletons
_config_loader: Optional[ConfigLoader] = None
_settings: Optional[SequenceSettings] = None


def get_config_loader() -> ConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_config(project_root: Optional[Path] = None) -> bool:
    """
    Load configuration from seqpipe.json.

    Args:
        project_root: Project root directory. If None, auto-detects.

    Returns:
        True if config was loaded, False otherwise.
    """
    return get_config_loader().load(project_root)


def get_settings() -> SequenceSettings:
    """Get the cached settings, building them on first use."""
    global _settings
    if _settings is None:
        _settings = get_config_loader().build_settings()
    return _settings


def reset_settings() -> None:
    """Forget the loaded config file and cached settings."""
    global _config_loader, _settings
    _config_loader = None
    _settings = None
