"""
hotconf - Layered YAML configuration with hot reload

Loads a service's base configuration file, merges environment-specific and
override files on top, decodes the result into a caller-owned target and
keeps it current as the files change.

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"

from hotconf.config import (
    ConfigHandle,
    ConfigLoader,
    ConfigStore,
    LoaderSettings,
    RedisConfigStore,
    load_config,
)
from hotconf.utils.exceptions import (
    ConfigDecodeError,
    ConfigParseError,
    ConfigReadError,
    ConfigurationError,
    HotconfError,
)
from hotconf.utils.logging import get_logger, setup_logging

__all__ = [
    "__version__",
    "ConfigHandle",
    "ConfigLoader",
    "ConfigStore",
    "LoaderSettings",
    "RedisConfigStore",
    "load_config",
    "HotconfError",
    "ConfigurationError",
    "ConfigReadError",
    "ConfigParseError",
    "ConfigDecodeError",
    "get_logger",
    "setup_logging",
]
