"""
hotconf Loader Settings

Settings for the loader itself, read from the environment (prefix
``HOTCONF_LOADER_``) and an optional ``.env`` file:

1. Default values (constants)
2. ``.env`` file
3. Environment variables
4. Keyword arguments passed by the composition root
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hotconf.config.constants import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_ENV_SELECTORS,
    DEFAULT_EXTENSIONS,
    DEFAULT_RELOAD_DEBOUNCE_SECONDS,
    DEFAULT_SEARCH_PATHS,
    DEFAULT_STATIC_OVERRIDES,
)


class LoaderSettings(BaseSettings):
    """Loader configuration using Pydantic for validation."""

    model_config = SettingsConfigDict(
        env_prefix="HOTCONF_LOADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # File layout
    base_dir: Path = Field(default=Path("."))
    search_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_SEARCH_PATHS))
    config_dir: str = Field(default=DEFAULT_CONFIG_DIR)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    # Layer selection
    env_selectors: list[str] = Field(default_factory=lambda: list(DEFAULT_ENV_SELECTORS))
    static_overrides: list[str] = Field(default_factory=lambda: list(DEFAULT_STATIC_OVERRIDES))

    # Hot reload
    watch_enabled: bool = Field(default=True)
    reload_debounce_seconds: float = Field(default=DEFAULT_RELOAD_DEBOUNCE_SECONDS, ge=0.0)

    @field_validator("search_paths", "extensions")
    @classmethod
    def _not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("must contain at least one entry")
        return value

    @field_validator("extensions")
    @classmethod
    def _strip_dots(cls, value: list[str]) -> list[str]:
        return [ext.lstrip(".") for ext in value]

    def resolve(self, path: str | Path) -> Path:
        """Resolve a layout path against base_dir."""
        return self.base_dir / path


@lru_cache
def get_settings() -> LoaderSettings:
    """Get the process-wide loader settings read from the environment."""
    return LoaderSettings()
