"""
Pytest configuration and shared fixtures for hotconf tests.
"""

import logging
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import yaml
from pydantic import BaseModel

from hotconf.config.constants import DEFAULT_ENV_SELECTORS
from hotconf.config.settings import LoaderSettings

# Configure test logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


class DatabaseConfig(BaseModel):
    host: str = "localhost"
    port: int = 5432


class ServiceConfig(BaseModel):
    """Target model used across loader tests."""
    port: int = 0
    name: str = ""
    debug: bool = False
    database: DatabaseConfig = DatabaseConfig()
    tags: list[str] = []


class RecordingLogger:
    """Collects structured log calls as (level, event, fields)."""

    def __init__(self):
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kwargs) -> None:
        self.records.append((level, event, kwargs))

    def debug(self, event: str, **kwargs) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        self._record("error", event, **kwargs)

    def exception(self, event: str, **kwargs) -> None:
        self._record("exception", event, **kwargs)

    def events(self, level: str | None = None) -> list[str]:
        return [event for lvl, event, _ in self.records if level is None or lvl == level]


class FakeObserver:
    """Stands in for a watchdog observer; records scheduling calls."""

    def __init__(self):
        self.scheduled: list[tuple[Any, str, bool]] = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.scheduled.append((handler, path, recursive))

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        pass


def _write_yaml(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


@pytest.fixture
def write_yaml():
    """Helper writing a mapping to a YAML file, creating parent directories."""
    return _write_yaml


@pytest.fixture
def config_root(tmp_path) -> Path:
    """Empty directory tree with a config/ subdirectory."""
    (tmp_path / "config").mkdir()
    return tmp_path


@pytest.fixture
def settings(config_root) -> LoaderSettings:
    """Loader settings rooted at the temporary tree, watching disabled."""
    return LoaderSettings(base_dir=config_root, watch_enabled=False, reload_debounce_seconds=0.05)


@pytest.fixture(autouse=True)
def clean_selectors(monkeypatch):
    """Make sure no selector variable leaks in from the host environment."""
    for variable in DEFAULT_ENV_SELECTORS:
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def observers() -> list[FakeObserver]:
    """Every FakeObserver created through observer_factory below."""
    return []


@pytest.fixture
def observer_factory(observers):
    def factory() -> FakeObserver:
        observer = FakeObserver()
        observers.append(observer)
        return observer
    return factory


@pytest.fixture
def mock_redis_client():
    """Mock synchronous Redis client for testing."""
    client = MagicMock()
    client.set = MagicMock(return_value=True)
    client.get = MagicMock(return_value=None)
    client.publish = MagicMock(return_value=1)
    return client


@pytest.fixture
def service_config_cls() -> type[ServiceConfig]:
    return ServiceConfig


@pytest.fixture
def target() -> ServiceConfig:
    """Fresh caller-owned configuration target."""
    return ServiceConfig()
