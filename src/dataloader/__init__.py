"""
dataloader: poll independently configured data sources onto a shared model.

Each source reports its status through model fields (<id>_error,
<id>_fetched_at, <id>_loading, <id>_ready) and the loader converges to idle
once every source is satisfied or guarded off.
"""

__version__ = "0.1.0"

from .config import (
    NEVER_FETCHED,
    LoaderConfig,
    configure,
    configure_from_file,
    get_config,
    load_config,
    reset_config,
)
from .errors import ConfigError, DataLoaderError, SourceNotFoundError
from .keys import PropKeys, prop_keys
from .loader import DataLoader
from .source import CallbackSource, DataSource
from .task import FetchState, FetchTask
from .worker import PollingWorker

__all__ = [
    "NEVER_FETCHED",
    "CallbackSource",
    "ConfigError",
    "DataLoader",
    "DataLoaderError",
    "DataSource",
    "FetchState",
    "FetchTask",
    "LoaderConfig",
    "PollingWorker",
    "PropKeys",
    "SourceNotFoundError",
    "configure",
    "configure_from_file",
    "get_config",
    "load_config",
    "prop_keys",
    "reset_config",
]
