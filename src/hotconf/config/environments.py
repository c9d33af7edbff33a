"""
hotconf Source Resolution

Decides which files take part in a merge and in what order. Environment
selectors pick environment-specific files; static overrides always follow.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hotconf.config.constants import LAYER_EXTENSION
from hotconf.config.settings import LoaderSettings
from hotconf.utils.exceptions import ConfigurationError
from hotconf.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConfigSources:
    """Files participating in a merge, lowest precedence first."""

    name: str
    base: Path | None
    layers: tuple[Path, ...] = field(default_factory=tuple)

    @property
    def files(self) -> tuple[Path, ...]:
        """Every file that takes part in the merge, in merge order."""
        if self.base is None:
            return self.layers
        return (self.base, *self.layers)


def normalize_name(config_name: str) -> str:
    """Lowercase a configuration name and check it is usable as a file stem."""
    if not isinstance(config_name, str) or not config_name.strip():
        raise ConfigurationError(
            "configuration name must be a non-empty string",
            config_name=str(config_name),
            error_code="invalid_name",
        )
    name = config_name.strip().lower()
    if not _is_safe_stem(name):
        raise ConfigurationError(
            f"configuration name {config_name!r} is not a valid file stem",
            config_name=config_name,
            error_code="invalid_name",
        )
    return name


def _is_safe_stem(stem: str) -> bool:
    return bool(stem) and stem not in (".", "..") and "/" not in stem and "\\" not in stem


def find_base_file(name: str, settings: LoaderSettings) -> Path | None:
    """Return the first existing base file over the search paths, or None."""
    for search_path in settings.search_paths:
        directory = settings.resolve(search_path)
        for ext in settings.extensions:
            candidate = directory / f"{name}.{ext}"
            if candidate.is_file():
                return candidate
    return None


def selected_environments(
    settings: LoaderSettings,
    environ: Mapping[str, str] | None = None,
    log: Any = None,
) -> list[str]:
    """Selector values in fixed precedence order, skipping unset ones."""
    environ = os.environ if environ is None else environ
    log = log if log is not None else logger
    selected = []
    for variable in settings.env_selectors:
        value = (environ.get(variable) or "").strip()
        if not value:
            continue
        if not _is_safe_stem(value):
            log.warning(
                "config_selector_ignored",
                selector=variable,
                value=value,
                reason="not a plain file stem",
            )
            continue
        selected.append(value)
    return selected


def resolve_sources(
    config_name: str,
    settings: LoaderSettings,
    environ: Mapping[str, str] | None = None,
    log: Any = None,
) -> ConfigSources:
    """Resolve the base file and the ordered optional layers for a name."""
    name = normalize_name(config_name)
    base = find_base_file(name, settings)

    config_dir = settings.resolve(settings.config_dir)
    log = log if log is not None else logger
    stems = selected_environments(settings, environ, log) + list(settings.static_overrides)

    layers: list[Path] = []
    for stem in stems:
        candidate = config_dir / f"{stem}.{LAYER_EXTENSION}"
        if not candidate.is_file():
            log.debug("config_layer_missing", file=str(candidate))
            continue
        layers.append(candidate)

    return ConfigSources(name=name, base=base, layers=_keep_last(layers))


def _keep_last(paths: list[Path]) -> tuple[Path, ...]:
    # A file listed twice keeps only its highest-precedence position
    seen: set[Path] = set()
    kept: list[Path] = []
    for path in reversed(paths):
        resolved = path.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        kept.append(path)
    return tuple(reversed(kept))
