"""Hot reload: watches the defaults/overrides directories and reloads keys.

# ─── HOW HOT RELOAD WORKS ──────────────────────────────────────────────
#
#   watchdog observer thread            asyncio event loop
#   ────────────────────────            ─────────────────────────────────
#   on_modified(database.yaml) ──call_soon_threadsafe──→ restart timer("database")
#   on_modified(database.yaml) ──call_soon_threadsafe──→ restart timer("database")
#                                        ... quiet for `debounce` seconds ...
#                                        timer fires → service.reload("database")
#
# Every event restarts the per-key timer, so a key reloads once its file has
# been quiet for the debounce period.
#
# A watched directory that does not exist yet is "pending": its nearest
# existing parent is watched instead.  When the directory appears it is
# scheduled, and every configuration file already inside it is reloaded.
# A watched directory that is deleted goes back to pending.
#
# Reload failures and watcher problems are logged and never escape: the
# process keeps running and the last good snapshot keeps serving reads.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from collections.abc import Callable, Sequence
from pathlib import Path

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from layerconf.config.settings import CONFIG_FILE_EXTENSIONS
from layerconf.services.config_service import ConfigService
from layerconf.utils.logging import get_logger


class ConfigWatcher:
    """Triggers :meth:`ConfigService.reload` when a configuration file changes.

    Parameters
    ----------
    service:
        The service whose keys are reloaded.
    directories:
        Directories to watch (non-recursively).  They do not have to exist
        yet; see the module docstring.
    debounce:
        Quiet period in seconds before a changed key is reloaded.
    observer_factory:
        Builds the watchdog observer; defaults to the platform ``Observer``.
        Pass e.g. ``PollingObserver`` for network filesystems.
    logger:
        Optional structlog logger.
    """

    def __init__(
        self,
        service: ConfigService,
        directories: Sequence[str | Path],
        debounce: float = 0.5,
        observer_factory: Callable[[], BaseObserver] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._service = service
        self._directories = [Path(directory) for directory in directories]
        self._debounce = debounce
        self._observer_factory = observer_factory or Observer
        self._logger = logger or get_logger(__name__)
        self._observer: BaseObserver | None = None
        self._handler = _ConfigFileEventHandler(self)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._targets: frozenset[Path] = frozenset()
        self._pending: set[Path] = set()
        self._watches: dict[Path, ObservedWatch] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._observer is not None

    async def start(self) -> None:
        """Schedule every watched directory (or its nearest existing parent)."""
        if self._observer is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._observer = self._observer_factory()
        self._targets = frozenset(directory.resolve() for directory in self._directories)
        self._pending = set(self._targets)

        self._watch_pending(rescan=False)
        for target in sorted(self._pending):
            if not target.is_dir():
                self._logger.warning("watch_directory_missing", directory=str(target))

        if not self._watches:
            self._observer = None
            self._logger.warning("config_watcher_idle", directories=[str(d) for d in self._directories])
            return

        self._observer.start()
        self._logger.info(
            "config_watcher_started",
            directories=sorted(str(target) for target in self._targets),
            watching=sorted(str(path) for path in self._watches),
            debounce=self._debounce,
        )

    async def stop(self) -> None:
        """Release the subscription, drop pending reloads and await running ones."""
        observer, self._observer = self._observer, None
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._watches.clear()
        self._pending.clear()

        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join, 2.0)
            self._logger.debug("config_watcher_stopped")

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Observer thread side
    # ------------------------------------------------------------------

    def notify_path_changed(self, path: str | bytes) -> None:
        """Schedule a debounced reload for the key behind *path*.

        Safe to call from any thread.  Paths without a configuration file
        extension, or outside the watched directories, are ignored.
        """
        key = key_from_path(path)
        if key is None or Path(os.fsdecode(path)).parent.resolve() not in self._targets:
            return
        self._call_soon(self._schedule_reload, key)

    def notify_directory_created(self, path: str | bytes) -> None:
        """Start watching any pending directory that now exists."""
        self._call_soon(self._watch_pending, True)

    def notify_directory_deleted(self, path: str | bytes) -> None:
        directory = Path(os.fsdecode(path))
        if directory in self._targets:
            self._logger.error("watch_directory_deleted", directory=str(directory))
            self._call_soon(self._forget_directory, directory)

    def _call_soon(self, callback: Callable, *args: object) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # The event loop has already been closed.
            self._logger.debug("config_event_dropped", callback=getattr(callback, "__name__", repr(callback)))

    # ------------------------------------------------------------------
    # Event loop side
    # ------------------------------------------------------------------

    def _watch_pending(self, rescan: bool) -> None:
        if self._observer is None:
            return
        for target in sorted(self._pending):
            if target.is_dir():
                if self._schedule(target):
                    self._pending.discard(target)
                    if rescan:
                        self._logger.info("watch_directory_added", directory=str(target))
                        self._reload_directory(target)
                continue
            parent = _nearest_existing_parent(target)
            if parent is not None:
                self._schedule(parent)

    def _schedule(self, path: Path) -> bool:
        if path in self._watches:
            return True
        try:
            watch = self._observer.schedule(self._handler, str(path), recursive=False)
        except OSError as exc:
            self._logger.error("watch_schedule_failed", directory=str(path), error=str(exc))
            return False
        self._watches[path] = watch
        return True

    def _forget_directory(self, directory: Path) -> None:
        watch = self._watches.pop(directory, None)
        if watch is not None and self._observer is not None:
            # watchdog may already have dropped the watch along with its emitter.
            with contextlib.suppress(KeyError):
                self._observer.unschedule(watch)
        self._pending.add(directory)
        self._watch_pending(rescan=True)

    def _reload_directory(self, directory: Path) -> None:
        try:
            paths = sorted(directory.iterdir())
        except OSError as exc:
            self._logger.error("watch_directory_scan_failed", directory=str(directory), error=str(exc))
            return
        for path in paths:
            key = key_from_path(path)
            if key is not None and path.is_file():
                self._schedule_reload(key)

    def _schedule_reload(self, key: str) -> None:
        if self._observer is None or self._loop is None:
            return
        pending = self._timers.pop(key, None)
        if pending is not None:
            pending.cancel()
        self._timers[key] = self._loop.call_later(self._debounce, self._fire_reload, key)

    def _fire_reload(self, key: str) -> None:
        self._timers.pop(key, None)
        task = asyncio.ensure_future(self._reload(key), loop=self._loop)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _reload(self, key: str) -> None:
        self._logger.info("config_change_detected", key=key)
        try:
            event = await self._service.reload(key)
        except Exception as exc:
            self._logger.error("hot_reload_failed", key=key, error=str(exc))
            return
        if event is None:
            self._logger.debug("hot_reload_skipped", key=key)


class _ConfigFileEventHandler(FileSystemEventHandler):
    """Forwards watchdog file events to the owning :class:`ConfigWatcher`."""

    def __init__(self, watcher: ConfigWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            self._watcher.notify_directory_created(event.src_path)
        else:
            self._watcher.notify_path_changed(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.notify_path_changed(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            self._watcher.notify_directory_deleted(event.src_path)
            self._watcher.notify_directory_created(event.dest_path)
        else:
            self._watcher.notify_path_changed(event.dest_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            self._watcher.notify_directory_deleted(event.src_path)


def key_from_path(path: str | bytes | Path) -> str | None:
    """Return the configuration key for a file path, or ``None``.

    ``/etc/app/config_mrg/module.deep.test.yaml`` → ``"module.deep.test"``.
    """
    file_path = Path(os.fsdecode(path))
    if file_path.suffix not in CONFIG_FILE_EXTENSIONS:
        return None
    return file_path.stem or None


def _nearest_existing_parent(path: Path) -> Path | None:
    for parent in path.parents:
        if parent.is_dir():
            return parent
    return None
