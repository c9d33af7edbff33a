"""
hotconf Configuration Loader

Loads layered YAML configuration into a caller-owned target:

1. Base file (``<name>.yaml`` in the search paths)
2. Environment-specific files picked by the selector variables
3. ``config/override.yaml``
4. ``config/tests.yaml``

The decoded result is cached in a ConfigStore and every merged file is
watched; a change re-reads the same files, decodes and refreshes the
target and the store, or logs and keeps the last good value.
"""

import copy
import threading
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from hotconf.config.environments import ConfigSources, normalize_name, resolve_sources
from hotconf.config.merger import merge_files
from hotconf.config.settings import LoaderSettings, get_settings
from hotconf.config.store import ConfigStore
from hotconf.config.watcher import FileWatcher
from hotconf.utils.exceptions import (
    ConfigDecodeError,
    ConfigReadError,
    ConfigurationError,
    HotconfError,
)
from hotconf.utils.logging import null_logger

T = TypeVar("T")


class LoadState(Enum):
    """Lifecycle of one configuration name."""
    IDLE = "idle"
    RESOLVING = "resolving"
    MERGING = "merging"
    DECODING = "decoding"
    CACHED = "cached"
    WATCHING = "watching"
    FAILED = "failed"


@dataclass
class _Registration:
    name: str
    target: Any
    sources: ConfigSources
    lock: threading.Lock
    state: LoadState = LoadState.IDLE
    watcher: FileWatcher | None = None
    loaded_at: datetime | None = None
    reload_count: int = 0


def decode(data: Mapping[str, Any], target: Any) -> Any:
    """Decode a merged tree into a new value shaped like target.

    The target itself is not touched; see ``apply``.
    """
    if isinstance(target, BaseModel):
        try:
            return type(target).model_validate(dict(data))
        except ValidationError as e:
            raise ConfigDecodeError(
                f"{type(target).__name__}: {e.error_count()} validation error(s): {e}",
                target_type=type(target).__name__,
                error_code="validation_failed",
            ) from e
    if isinstance(target, MutableMapping):
        return copy.deepcopy(dict(data))
    raise ConfigurationError(
        f"unsupported configuration target type {type(target).__name__}; "
        "expected a pydantic model instance or a mutable mapping",
        error_code="unsupported_target",
    )


def apply(target: Any, value: Any) -> None:
    """Overwrite target's contents with a decoded value, keeping its identity."""
    if isinstance(target, BaseModel):
        # Same slots pydantic's own copy sets; works for frozen models too
        object.__setattr__(target, "__dict__", value.__dict__)
        object.__setattr__(target, "__pydantic_extra__", value.__pydantic_extra__)
        object.__setattr__(target, "__pydantic_fields_set__", value.__pydantic_fields_set__)
    else:
        target.clear()
        target.update(value)


def _snapshot(target: Any) -> Any:
    if isinstance(target, BaseModel):
        return target.model_copy(deep=True)
    return copy.deepcopy(target)


class ConfigHandle(Generic[T]):
    """Accessor for a loaded configuration.

    ``get()`` returns a consistent copy taken under the same lock reloads
    hold, so readers never observe a half-applied reload.
    """

    def __init__(self, loader: "ConfigLoader", registration: _Registration):
        self._loader = loader
        self._registration = registration

    @property
    def name(self) -> str:
        return self._registration.name

    @property
    def sources(self) -> ConfigSources:
        return self._registration.sources

    @property
    def state(self) -> LoadState:
        return self._registration.state

    @property
    def target(self) -> T:
        return self._registration.target

    @property
    def watcher(self) -> FileWatcher | None:
        return self._registration.watcher

    @property
    def reload_count(self) -> int:
        return self._registration.reload_count

    @property
    def loaded_at(self) -> datetime | None:
        """When the target was last refreshed by a load or reload."""
        return self._registration.loaded_at

    def get(self) -> T:
        with self._registration.lock:
            return _snapshot(self._registration.target)

    def reload(self) -> bool:
        return self._loader.reload(self.name)

    def stop(self) -> None:
        self._loader.unwatch(self.name)

    def __repr__(self) -> str:
        return f"ConfigHandle(name={self.name!r}, state={self.state.value})"


class ConfigLoader:
    """Loads, caches and hot-reloads named configurations."""

    def __init__(
        self,
        store: ConfigStore | None = None,
        settings: LoaderSettings | None = None,
        logger: Any = None,
        observer_factory: Callable[[], Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self.store = store if store is not None else ConfigStore()
        self.settings = settings if settings is not None else get_settings()
        self.logger = logger if logger is not None else null_logger()
        self._observer_factory = observer_factory
        self._environ = environ
        self._registrations: dict[str, _Registration] = {}
        # Stage of an in-flight load, or FAILED once the latest load of a name failed
        self._progress: dict[str, LoadState] = {}
        self._lock = threading.Lock()

    def load(self, config_name: str, target: T) -> ConfigHandle[T]:
        """
        Load a named configuration into target and start watching its files.

        Raises ConfigReadError when the base file is missing or unreadable and
        ConfigDecodeError when the merged tree does not fit the target. On
        either failure nothing is cached and no watcher is installed.
        """
        name = normalize_name(config_name)
        self._set_progress(name, LoadState.RESOLVING)
        sources = resolve_sources(name, self.settings, self._environ, log=self.logger)

        try:
            if sources.base is None:
                searched = [str(self.settings.resolve(p)) for p in self.settings.search_paths]
                raise ConfigReadError(
                    f"no {name}.{{{','.join(self.settings.extensions)}}} in {searched}",
                    config_name=name,
                    error_code="base_not_found",
                )
            self._set_progress(name, LoadState.MERGING)
            data = merge_files(sources.base, sources.layers, log=self.logger)
        except ConfigReadError as e:
            self.logger.error(
                "config_read_failed",
                name=name,
                stage=self._progress.get(name, LoadState.RESOLVING).value,
                error=str(e),
            )
            self._set_progress(name, LoadState.FAILED)
            raise type(e)(
                f"failed to read configuration file: {e.message}",
                config_name=name,
                path=e.path,
                error_code=e.error_code,
            ) from e

        lock = self._name_lock(name)
        self._set_progress(name, LoadState.DECODING)
        with lock:
            try:
                value = decode(data, target)
            except ConfigDecodeError as e:
                self._set_progress(name, LoadState.FAILED)
                self.logger.error("config_decode_failed", name=name, error=str(e))
                raise ConfigDecodeError(
                    f"failed to parse configuration: {e.message}",
                    config_name=name,
                    target_type=e.target_type,
                    error_code=e.error_code,
                ) from e
            except ConfigurationError:
                self._set_progress(name, LoadState.FAILED)
                raise
            apply(target, value)
            self.store.store(name, target)

        registration = _Registration(
            name=name,
            target=target,
            sources=sources,
            lock=lock,
            state=LoadState.CACHED,
            loaded_at=datetime.now(),
        )
        self._register(registration)
        self._set_progress(name, None)

        if self.settings.watch_enabled:
            self._watch(registration)

        self.logger.info(
            "config_loaded",
            name=name,
            files=[str(p) for p in sources.files],
            watching=registration.state is LoadState.WATCHING,
        )
        return ConfigHandle(self, registration)

    def reload(self, config_name: str, changed: list[Path] | None = None) -> bool:
        """
        Re-read a loaded configuration's files and refresh target and store.

        Every watched file must parse; on any failure the previous target
        contents and cache entry are kept and False is returned.
        """
        name = normalize_name(config_name)
        with self._lock:
            registration = self._registrations.get(name)
        if registration is None:
            self.logger.warning("config_reload_unknown", name=name)
            return False

        for path in changed or ():
            self.logger.info("config_file_changed", name=name, file=str(path))

        sources = registration.sources
        with registration.lock:
            try:
                data = merge_files(sources.base, sources.layers, strict=True, log=self.logger)
                value = decode(data, registration.target)
            except HotconfError as e:
                self.logger.error("config_reload_failed", name=name, error=str(e))
                return False
            apply(registration.target, value)
            self.store.store(name, registration.target)
            registration.reload_count += 1
            registration.loaded_at = datetime.now()

        self.logger.info("config_reloaded", name=name, reload_count=registration.reload_count)
        return True

    def state(self, config_name: str) -> LoadState:
        """
        Lifecycle state of a name.

        An in-flight load reports its stage. Otherwise a registered name reports
        its live state even if a later load() of it failed, since the earlier
        value is still served and watched. FAILED means no load of the name has
        succeeded since its last failure; IDLE means it was never loaded.
        """
        name = normalize_name(config_name)
        with self._lock:
            progress = self._progress.get(name)
            registration = self._registrations.get(name)
        if progress is not None and progress is not LoadState.FAILED:
            return progress
        if registration is not None:
            return registration.state
        return progress or LoadState.IDLE

    def get(self, config_name: str) -> Any:
        """Consistent copy of a loaded target, or None when not loaded."""
        name = normalize_name(config_name)
        with self._lock:
            registration = self._registrations.get(name)
        if registration is None:
            return None
        with registration.lock:
            return _snapshot(registration.target)

    def unwatch(self, config_name: str) -> None:
        """Stop watching one configuration; its cached value stays."""
        name = normalize_name(config_name)
        with self._lock:
            registration = self._registrations.get(name)
        if registration is None or registration.watcher is None:
            return
        registration.watcher.stop()
        registration.watcher = None
        registration.state = LoadState.CACHED

    def close(self) -> None:
        """Stop every watcher."""
        with self._lock:
            names = list(self._registrations)
        for name in names:
            self.unwatch(name)

    def __enter__(self) -> "ConfigLoader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _set_progress(self, name: str, stage: LoadState | None) -> None:
        with self._lock:
            if stage is None:
                self._progress.pop(name, None)
            else:
                self._progress[name] = stage

    def _name_lock(self, name: str) -> threading.Lock:
        with self._lock:
            existing = self._registrations.get(name)
            return existing.lock if existing is not None else threading.Lock()

    def _register(self, registration: _Registration) -> None:
        with self._lock:
            previous = self._registrations.get(registration.name)
            self._registrations[registration.name] = registration
        if previous is not None and previous.watcher is not None:
            previous.watcher.stop()

    def _watch(self, registration: _Registration) -> None:
        name = registration.name

        def on_change(changed: list[Path]) -> None:
            self.reload(name, changed)

        watcher = FileWatcher(
            registration.sources.files,
            on_change,
            debounce_seconds=self.settings.reload_debounce_seconds,
            observer_factory=self._observer_factory,
            name=name,
            logger=self.logger,
        )
        try:
            watcher.start()
        except OSError as e:
            # Watching is best effort; the load itself already succeeded
            self.logger.warning("config_watch_failed", name=name, error=str(e))
            return
        registration.watcher = watcher
        registration.state = LoadState.WATCHING


def load_config(
    config_name: str,
    target: T,
    logger: Any = None,
    *,
    store: ConfigStore | None = None,
    settings: LoaderSettings | None = None,
    observer_factory: Callable[[], Any] | None = None,
) -> ConfigHandle[T]:
    """Load one configuration with a dedicated loader."""
    loader = ConfigLoader(
        store=store,
        settings=settings,
        logger=logger,
        observer_factory=observer_factory,
    )
    return loader.load(config_name, target)
