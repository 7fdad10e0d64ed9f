"""Process-wide loader defaults, with YAML and environment loading"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError
from .logging_utils import LoggerLike, get_structured_logger

logger = get_structured_logger(__name__)

# Sentinel fetch timestamp for "not yet fetched". Sorts after any real
# epoch-millisecond timestamp.
NEVER_FETCHED = 8640000000000000

DEFAULT_INTERVAL = 0.5
DEFAULT_MAX_FETCHES = 200

# Default config search paths (in order)
CONFIG_PATHS = [
    Path("dataloader.yaml"),
    Path.home() / ".config" / "dataloader" / "config.yaml",
    Path("/etc/dataloader/config.yaml"),
]

ENV_INTERVAL = "DATALOADER_INTERVAL"
ENV_MAX_FETCHES = "DATALOADER_MAX_FETCHES"

_UNSET: Any = object()


@dataclass(frozen=True)
class LoaderConfig:
    """
    Defaults copied into each DataLoader at construction time.

    Attributes:
        interval: Seconds to wait before each polling tick
        max_fetches: Safety cap on cumulative fetch dispatches per load
        logger: Logger used for diagnostics, or None when disabled
    """

    interval: float = DEFAULT_INTERVAL
    max_fetches: int = DEFAULT_MAX_FETCHES
    logger: Optional[LoggerLike] = field(
        default_factory=lambda: logging.getLogger("dataloader"), compare=False
    )


def _validate_interval(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"interval must be a number, got {value!r}")
    if value < 0:
        raise ConfigError(f"interval must be >= 0, got {value!r}")
    return float(value)


def _validate_max_fetches(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"max_fetches must be an integer, got {value!r}")
    if value < 0:
        raise ConfigError(f"max_fetches must be >= 0, got {value!r}")
    return value


def _validate_logger(value: Any) -> Optional[LoggerLike]:
    if value is None or value is False:
        return None
    if isinstance(value, (logging.Logger, logging.LoggerAdapter)):
        return value
    raise ConfigError(f"logger must be a logging.Logger, LoggerAdapter or False, got {value!r}")


_config = LoaderConfig()


def get_config() -> LoaderConfig:
    """Get the current process-wide loader defaults."""
    return _config


def configure(
    interval: Optional[float] = None,
    max_fetches: Optional[int] = None,
    logger: Any = _UNSET,
) -> LoaderConfig:
    """
    Replace process-wide loader defaults.

    Only loaders constructed afterwards pick up the new values.

    Args:
        interval: Default polling interval in seconds
        max_fetches: Default safety cap on dispatches per load
        logger: Logger or LoggerAdapter to use; False or None disables logging

    Returns:
        The new LoaderConfig

    Raises:
        ConfigError: If any value is malformed
    """
    global _config

    changes: dict[str, Any] = {}
    if interval is not None:
        changes["interval"] = _validate_interval(interval)
    if max_fetches is not None:
        changes["max_fetches"] = _validate_max_fetches(max_fetches)
    if logger is not _UNSET:
        changes["logger"] = _validate_logger(logger)

    _config = replace(_config, **changes)
    return _config


def reset_config() -> LoaderConfig:
    """Restore built-in defaults."""
    global _config
    _config = LoaderConfig()
    return _config


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations"""
    for path in CONFIG_PATHS:
        if path.exists():
            return path
    return None


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    interval = os.environ.get(ENV_INTERVAL)
    if interval is not None:
        try:
            overrides["interval"] = float(interval)
        except ValueError as e:
            raise ConfigError(f"{ENV_INTERVAL} must be a number, got {interval!r}") from e

    max_fetches = os.environ.get(ENV_MAX_FETCHES)
    if max_fetches is not None:
        try:
            overrides["max_fetches"] = int(max_fetches)
        except ValueError as e:
            raise ConfigError(
                f"{ENV_MAX_FETCHES} must be an integer, got {max_fetches!r}"
            ) from e

    return overrides


def load_config(config_path: Optional[str] = None) -> LoaderConfig:
    """
    Load loader defaults from the ``loader`` section of a YAML file.

    Environment variables DATALOADER_INTERVAL and DATALOADER_MAX_FETCHES
    override values from the file.

    Args:
        config_path: Explicit path, or None to search CONFIG_PATHS

    Returns:
        A validated LoaderConfig (the logger is left at its default)

    Raises:
        ConfigError: If the file or environment holds malformed values
    """
    path = Path(config_path) if config_path else find_config_file()

    data: dict[str, Any] = {}
    if path is None or not path.exists():
        logger.warning("No config file found, using defaults")
    else:
        logger.info(f"Loading config from: {path}", config_path=str(path))
        with open(path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        section = raw.get("loader") or {}
        if not isinstance(section, dict):
            raise ConfigError("'loader' section must be a mapping")
        unknown = set(section) - {"interval", "max_fetches"}
        if unknown:
            raise ConfigError(f"Unknown loader settings: {', '.join(sorted(unknown))}")
        data.update(section)

    data.update(_env_overrides())

    return LoaderConfig(
        interval=_validate_interval(data.get("interval", DEFAULT_INTERVAL)),
        max_fetches=_validate_max_fetches(data.get("max_fetches", DEFAULT_MAX_FETCHES)),
    )


def configure_from_file(config_path: Optional[str] = None) -> LoaderConfig:
    """Load defaults from YAML/env and install them process-wide."""
    loaded = load_config(config_path)
    return configure(interval=loaded.interval, max_fetches=loaded.max_fetches)
