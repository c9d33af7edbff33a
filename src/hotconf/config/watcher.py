"""
hotconf File Watcher

Bridges filesystem notifications to a reload callback. A watchdog observer
pushes events for watched files onto a queue; a single worker thread drains
it, coalesces bursts within the debounce window and calls the callback, so
callbacks for one watcher never run concurrently.
"""

import queue
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from hotconf.config.constants import DEFAULT_RELOAD_DEBOUNCE_SECONDS
from hotconf.utils.logging import get_logger

# Event types that mean a file's content may have changed
_RELEVANT_EVENTS = frozenset({"modified", "created", "moved", "closed"})

_STOP = object()


def _as_path(raw: Any) -> Path | None:
    if not raw:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="surrogateescape")
    return Path(raw).resolve()


class _ChangeHandler(FileSystemEventHandler):
    """Forwards events touching a watched file to the watcher."""

    def __init__(self, watcher: "FileWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELEVANT_EVENTS:
            return
        # Editors that save atomically show up as a move onto the watched name
        for raw in (event.src_path, getattr(event, "dest_path", "")):
            path = _as_path(raw)
            if path is not None and path in self.watcher.paths:
                self.watcher.notify(path)


class FileWatcher:
    """Watches a fixed set of files and calls back with the changed paths."""

    def __init__(
        self,
        paths: Iterable[str | Path],
        callback: Callable[[list[Path]], Any],
        *,
        debounce_seconds: float = DEFAULT_RELOAD_DEBOUNCE_SECONDS,
        observer_factory: Callable[[], Any] | None = None,
        name: str = "config",
        logger: Any = None,
    ):
        self.paths = frozenset(Path(p).resolve() for p in paths)
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.name = name
        self.logger = logger if logger is not None else get_logger(__name__)

        self._observer_factory = observer_factory or Observer
        self._observer: Any = None
        self._queue: queue.Queue = queue.Queue()
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """Schedule the watched directories and start the worker thread."""
        if self.running:
            return

        self._stop_event.clear()
        self._queue = queue.Queue()
        self._observer = self._observer_factory()
        handler = _ChangeHandler(self)
        for directory in sorted({path.parent for path in self.paths}):
            self._observer.schedule(handler, str(directory), recursive=False)
        self._observer.start()

        self._worker = threading.Thread(
            target=self._run,
            name=f"hotconf-watch-{self.name}",
            daemon=True,
        )
        self._worker.start()
        self.logger.debug(
            "config_watch_started",
            name=self.name,
            files=[str(p) for p in sorted(self.paths)],
        )

    def notify(self, path: str | Path) -> None:
        """Queue a change notification for a watched file."""
        self._queue.put(Path(path).resolve())

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the observer and the worker thread."""
        self._stop_event.set()
        self._queue.put(_STOP)

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout)
            self._observer = None

        if self._worker is not None:
            self._worker.join(timeout)
            self._worker = None
        self.logger.debug("config_watch_stopped", name=self.name)

    def _next_batch(self) -> list[Path] | None:
        """Block for one change, then gather any that follow within the window."""
        item = self._queue.get()
        if item is _STOP:
            return None

        changed = [item]
        deadline = time.monotonic() + self.debounce_seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                break
            if item is _STOP:
                return None
            if item not in changed:
                changed.append(item)
        return changed

    def _run(self) -> None:
        while not self._stop_event.is_set():
            changed = self._next_batch()
            if changed is None or self._stop_event.is_set():
                break
            try:
                self.callback(changed)
            except Exception:
                # Reload errors are contained; watching continues
                self.logger.exception("config_watch_callback_failed", name=self.name)
