"""
hotconf Custom Exceptions

Defines the exception hierarchy raised by configuration loading.
"""

from typing import Any


class HotconfError(Exception):
    """Base exception class for hotconf-specific errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(HotconfError):
    """Raised when a configuration name, target or loader setting is invalid."""

    def __init__(
        self,
        message: str,
        config_name: str | None = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.config_name = config_name


class ConfigReadError(ConfigurationError):
    """Raised when a configuration file cannot be located or read."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.path = path


class ConfigParseError(ConfigReadError):
    """Raised when a configuration file is not valid YAML or not a mapping."""
    pass


class ConfigDecodeError(ConfigurationError):
    """Raised when merged configuration does not decode into the target."""

    def __init__(
        self,
        message: str,
        target_type: str | None = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.target_type = target_type
