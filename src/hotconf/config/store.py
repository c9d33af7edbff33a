"""
hotconf Config Store

Keyed cache of the latest successfully decoded configuration, safe to read
from any thread while the reload worker writes to it. ``RedisConfigStore``
additionally mirrors every snapshot to Redis so other processes can read it.
"""

import copy
import json
import threading
from typing import Any

import redis
from pydantic import BaseModel

from hotconf.config.constants import REDIS_KEY_PREFIX, REDIS_UPDATES_CHANNEL
from hotconf.utils.logging import get_logger


class ConfigStore:
    """Thread-safe mapping of configuration name to decoded snapshot."""

    def __init__(self):
        self._entries: dict[str, Any] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()

    def store(self, name: str, value: Any) -> None:
        """Replace the entry for name with a snapshot of value."""
        snapshot = _snapshot(value)
        with self._lock:
            self._entries[self._key(name)] = snapshot

    def load(self, name: str) -> tuple[Any, bool]:
        """Return (snapshot, True) for a cached name, else (None, False)."""
        with self._lock:
            if self._key(name) not in self._entries:
                return None, False
            value = self._entries[self._key(name)]
        return _snapshot(value), True

    def get(self, name: str, default: Any = None) -> Any:
        value, found = self.load(name)
        return value if found else default

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return self._key(name) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisConfigStore(ConfigStore):
    """Config store that writes every snapshot through to Redis."""

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = REDIS_KEY_PREFIX,
        updates_channel: str = REDIS_UPDATES_CHANNEL,
        logger: Any = None,
    ):
        super().__init__()
        self.client = client
        self.key_prefix = key_prefix
        self.updates_channel = updates_channel
        self.logger = logger if logger is not None else get_logger(__name__)

    @classmethod
    def from_url(cls, url: str, password: str | None = None, **kwargs) -> "RedisConfigStore":
        """Build a store with a Redis client created from a URL."""
        redis_kwargs = {
            "decode_responses": True,
            "socket_timeout": 5,
            "socket_connect_timeout": 5,
            "retry_on_timeout": True,
        }
        if password:
            redis_kwargs["password"] = password
        return cls(redis.from_url(url, **redis_kwargs), **kwargs)

    def redis_key(self, name: str) -> str:
        return f"{self.key_prefix}{self._key(name)}"

    def store(self, name: str, value: Any) -> None:
        super().store(name, value)
        try:
            payload = json.dumps(_to_jsonable(value), default=str)
            self.client.set(self.redis_key(name), payload)
            self.client.publish(self.updates_channel, self._key(name))
        except (redis.RedisError, TypeError, ValueError) as e:
            # The local entry is authoritative; the mirror catches up on next store
            self.logger.warning("config_mirror_failed", name=self._key(name), error=str(e))

    def load(self, name: str) -> tuple[Any, bool]:
        value, found = super().load(name)
        if found:
            return value, True

        try:
            payload = self.client.get(self.redis_key(name))
        except redis.RedisError as e:
            self.logger.warning("config_mirror_failed", name=self._key(name), error=str(e))
            return None, False

        if payload is None:
            return None, False
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        try:
            return json.loads(payload), True
        except ValueError as e:
            self.logger.warning("config_mirror_corrupt", name=self._key(name), error=str(e))
            return None, False


def _snapshot(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    return copy.deepcopy(value)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value
