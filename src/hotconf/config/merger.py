"""
hotconf File Merger

Parses YAML configuration files and folds them into one working tree.
Later files override earlier ones key by key; nested mappings merge
recursively, every other value is replaced whole.
"""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from hotconf.utils.exceptions import ConfigParseError, ConfigReadError
from hotconf.utils.logging import get_logger

logger = get_logger(__name__)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _stringify_keys(data: Any, path: Path, ancestors: frozenset[int] = frozenset()) -> Any:
    # YAML allows int/bool keys; decoded targets expect field names
    if not isinstance(data, (Mapping, list)):
        return data
    # Anchors may alias an enclosing node; shared non-enclosing aliases are fine
    if id(data) in ancestors:
        raise ConfigParseError(
            f"{path} contains a recursive structure (an alias refers to its own parent)",
            path=str(path),
            error_code="recursive_structure",
        )
    ancestors = ancestors | {id(data)}
    if isinstance(data, Mapping):
        return {str(k): _stringify_keys(v, path, ancestors) for k, v in data.items()}
    return [_stringify_keys(item, path, ancestors) for item in data]


def read_yaml(path: str | Path) -> dict[str, Any]:
    """Load one YAML file with SafeLoader. Returns a mapping; empty file is {}."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(
            f"invalid YAML in {path}: {e}",
            path=str(path),
            error_code="yaml_syntax",
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(
            f"cannot read {path}: {e}",
            path=str(path),
            error_code="unreadable",
        ) from e

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigParseError(
            f"{path} has invalid structure (expected mapping, got {type(data).__name__})",
            path=str(path),
            error_code="not_a_mapping",
        )
    return _stringify_keys(data, path)


def merge_files(
    base: Path,
    layers: Iterable[Path] = (),
    *,
    strict: bool = False,
    log: Any = None,
) -> dict[str, Any]:
    """
    Build the working configuration set from a base file and ordered layers.

    The base file failing is always raised. A failing layer is raised when
    ``strict`` is set, otherwise it is logged as a warning and skipped.
    """
    log = log if log is not None else logger
    merged = read_yaml(base)

    for path in layers:
        try:
            data = read_yaml(path)
        except ConfigReadError as e:
            if strict:
                raise
            log.warning("config_file_merge_failed", file=str(path), error=str(e))
            continue
        merged = deep_merge(merged, data)
        log.debug("config_file_merged", file=str(path), keys=len(data))

    return merged
