"""
Filesystem save watcher.

Some acme mounts do not expose a usable ``log`` file.  This source uses
watchdog to notice files written under a project root and maps each one
to the acme window holding it through the ``index`` file, producing the
same :class:`~acmefmt.acme.events.SaveEvent` stream as :class:`AcmeLog`.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from typing import Callable, Iterator, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .events import SAVE_OP, SaveEvent, read_index

logger = logging.getLogger(__name__)


class SaveEventHandler(FileSystemEventHandler):
    """
    Watchdog event handler that turns on-disk writes into save events.

    Parameters
    ----------
    lookup:
        Callable returning the ``{file name: window id}`` map of open
        windows.
    sink:
        Callable receiving each :class:`SaveEvent`.
    debounce_seconds:
        Minimum delay between two events for the same file (one Put can
        surface as several modify notifications).
    """

    def __init__(
        self,
        lookup: Callable[[], dict[str, int]],
        sink: Callable[[SaveEvent], None],
        debounce_seconds: float = 0.5,
    ) -> None:
        super().__init__()
        self._lookup = lookup
        self._sink = sink
        self._debounce = debounce_seconds
        self._last_event: dict[str, float] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Watchdog event dispatch
    # ------------------------------------------------------------------

    def on_modified(self, event) -> None:
        if not event.is_directory:
            self._handle_write(event.src_path)

    def on_created(self, event) -> None:
        if not event.is_directory:
            self._handle_write(event.src_path)

    def on_moved(self, event) -> None:
        # Editors that save via rename-over surface as a move
        if not event.is_directory:
            self._handle_write(event.dest_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_debounced(self, path: str) -> bool:
        now = time.time()
        with self._lock:
            last = self._last_event.get(path, 0.0)
            if now - last < self._debounce:
                return True
            self._last_event[path] = now
        return False

    def _handle_write(self, path) -> None:
        path = os.path.abspath(os.fsdecode(path))
        if self._is_debounced(path):
            return
        try:
            windows = self._lookup()
        except OSError as exc:
            logger.warning("[Watcher] Cannot read acme index: %s", exc)
            return
        win_id = windows.get(path)
        if win_id is None:
            logger.debug("[Watcher] %s is not open in acme", path)
            return
        logger.info("[Watcher] Saved: %s (window %d)", path, win_id)
        self._sink(SaveEvent(win_id=win_id, name=path, op=SAVE_OP))


class SaveWatcher:
    """
    Watch *root* and yield save events for files open in acme.

    Usage::

        watcher = SaveWatcher(mount, root="/path/to/project")
        for event in watcher:   # starts the observer; Ctrl-C stops
            ...
    """

    def __init__(
        self,
        mount: str,
        root: str,
        debounce_seconds: float = 0.5,
    ) -> None:
        self._mount = mount
        self._root = os.path.abspath(root)
        self._queue: "queue.Queue[SaveEvent]" = queue.Queue()
        self._stop_event = threading.Event()
        self._observer: Optional[Observer] = None
        self._handler = SaveEventHandler(
            lookup=lambda: read_index(self._mount),
            sink=self._queue.put,
            debounce_seconds=debounce_seconds,
        )

    @property
    def handler(self) -> SaveEventHandler:
        return self._handler

    def start(self) -> None:
        """Start the watchdog observer in its background thread."""
        observer = Observer()
        observer.schedule(self._handler, self._root, recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("[Watcher] Watching %s", self._root)

    def stop(self) -> None:
        """Stop the observer and end iteration."""
        self._stop_event.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("[Watcher] Stopped")

    def __iter__(self) -> Iterator[SaveEvent]:
        if self._observer is None:
            self.start()
        try:
            while not self._stop_event.is_set():
                try:
                    yield self._queue.get(timeout=1)
                except queue.Empty:
                    continue
        finally:
            self.stop()
