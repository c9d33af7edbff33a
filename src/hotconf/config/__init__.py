"""
hotconf Configuration Module

Layered YAML configuration with hot reload:
- Base file located through the search paths
- Environment-specific files chosen by selector variables
- Static override and test files
- Thread-safe cache of the latest good configuration, optionally mirrored to Redis
"""

from hotconf.config.environments import ConfigSources, resolve_sources
from hotconf.config.loader import ConfigHandle, ConfigLoader, LoadState, load_config
from hotconf.config.merger import deep_merge, merge_files, read_yaml
from hotconf.config.settings import LoaderSettings, get_settings
from hotconf.config.store import ConfigStore, RedisConfigStore
from hotconf.config.watcher import FileWatcher

__all__ = [
    "ConfigHandle",
    "ConfigLoader",
    "ConfigSources",
    "ConfigStore",
    "FileWatcher",
    "LoadState",
    "LoaderSettings",
    "RedisConfigStore",
    "deep_merge",
    "get_settings",
    "load_config",
    "merge_files",
    "read_yaml",
    "resolve_sources",
]
