"""
hotconf Utility Modules

Common utilities for logging and exceptions.
"""

from hotconf.utils.exceptions import (
    ConfigDecodeError,
    ConfigParseError,
    ConfigReadError,
    ConfigurationError,
    HotconfError,
)
from hotconf.utils.logging import get_logger, null_logger, setup_logging

__all__ = [
    "get_logger",
    "null_logger",
    "setup_logging",
    "HotconfError",
    "ConfigurationError",
    "ConfigReadError",
    "ConfigParseError",
    "ConfigDecodeError",
]
