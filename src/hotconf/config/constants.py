"""
hotconf Default Configuration Constants

File-layout conventions and environment selector names used to locate
configuration sources. These are the defaults behind LoaderSettings.
"""

# Directories searched for the base file, first match wins
DEFAULT_SEARCH_PATHS: tuple[str, ...] = (".", "./config")

# Directory holding environment-specific and static override files
DEFAULT_CONFIG_DIR = "./config"

# Base file extensions, tried in order within each search path
DEFAULT_EXTENSIONS: tuple[str, ...] = ("yaml", "yml")

# Extension used for selector and static override files
LAYER_EXTENSION = "yaml"

# Environment selectors in fixed precedence order: production, staging, local
DEFAULT_ENV_SELECTORS: tuple[str, ...] = (
    "HOTCONF_PROD_CONFIG",
    "HOTCONF_STAGE_CONFIG",
    "HOTCONF_LOCAL_CONFIG",
)

# Static overrides merged after the selectors; the last one wins
DEFAULT_STATIC_OVERRIDES: tuple[str, ...] = ("override", "tests")

DEFAULT_RELOAD_DEBOUNCE_SECONDS = 0.1

# Redis mirror key layout
REDIS_KEY_PREFIX = "hotconf:config:"
REDIS_UPDATES_CHANNEL = "hotconf:config:updates"
