"""Debounced watcher that reports working-tree changes relevant to git."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from watchdog.events import (
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_OPENED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from gitpanel.watcher.relevance import has_relevant_change

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 1.0
DEFAULT_LATENCY = 1.0

# Reads (git itself opening the index) must not count as changes
_READ_ONLY_EVENTS = frozenset({EVENT_TYPE_OPENED, EVENT_TYPE_CLOSED_NO_WRITE})


class _EventCollector(FileSystemEventHandler):
    """Forward the paths of raw watchdog events to the owning watcher."""

    def __init__(self, watcher: "ChangeWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _READ_ONLY_EVENTS:
            return
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(os.fsdecode(dest))
        self._watcher._collect(paths)


class ChangeWatcher:
    """Watch a directory tree and call *on_change* after relevant changes settle.

    Raw events are batched for *latency* seconds, the batch is filtered with
    :func:`has_relevant_change`, and a relevant batch (re)arms a *debounce*
    timer.  *on_change* runs on the timer thread, at most once per quiet
    period, and never after :meth:`stop` has returned.

    Usage::

        watcher = ChangeWatcher(repo_root, refresh)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        path: Union[str, Path],
        on_change: Callable[[], None],
        *,
        debounce: float = DEFAULT_DEBOUNCE,
        latency: float = DEFAULT_LATENCY,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self.path = Path(path)
        self.debounce = debounce
        self.latency = latency
        self._on_change = on_change
        self._observer_factory = observer_factory

        # _lock guards state shared with the timers and is never held while
        # on_change runs, so a callback may call pause()/resume() from any
        # thread. _callback_lock is held for the duration of on_change; stop()
        # takes it after clearing _active. _batch_lock only guards the raw
        # event buffer.
        self._lock = threading.RLock()
        self._callback_lock = threading.RLock()
        self._batch_lock = threading.Lock()

        self._observer = None
        self._active = False
        self._paused = False
        self._generation = 0
        self._debounce_timer: Optional[threading.Timer] = None
        self._batch_timer: Optional[threading.Timer] = None
        self._pending: List[str] = []

    # ---- lifecycle ----

    @property
    def is_watching(self) -> bool:
        return self._active

    @property
    def is_paused(self) -> bool:
        return self._paused

    def start(self) -> None:
        """Begin watching. Calling start() on a running watcher does nothing."""
        with self._lock:
            if self._observer is not None:
                return
            observer = self._observer_factory()
            observer.schedule(_EventCollector(self), str(self.path), recursive=True)
            observer.start()
            self._observer = observer
            self._active = True
            self._generation += 1
        logger.debug("watching %s", self.path)

    def stop(self) -> None:
        """Stop watching and release the OS watch before returning."""
        with self._lock:
            self._active = False
            self._generation += 1
            if self._debounce_timer is not None:
                self._debounce_timer.cancel()
                self._debounce_timer = None
            observer, self._observer = self._observer, None
        with self._batch_lock:
            if self._batch_timer is not None:
                self._batch_timer.cancel()
                self._batch_timer = None
            self._pending.clear()

        # Wait out a callback that passed the active check before we cleared it.
        with self._callback_lock:
            pass

        if observer is None:
            return
        observer.stop()
        observer.join()
        logger.debug("stopped watching %s", self.path)

    def pause(self) -> None:
        """Ignore changes until resume(); used around self-inflicted git writes."""
        with self._lock:
            self._paused = True

    def resume(self) -> None:
        with self._lock:
            self._paused = False

    def __enter__(self) -> "ChangeWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    # ---- event flow ----

    def _collect(self, paths: List[str]) -> None:
        """Buffer raw event paths; the first one opens a *latency* window."""
        if not self._active:
            return
        with self._batch_lock:
            self._pending.extend(paths)
            if self._batch_timer is None:
                timer = threading.Timer(max(self.latency, 0.0), self._flush_batch)
                timer.daemon = True
                self._batch_timer = timer
                timer.start()

    def _flush_batch(self) -> None:
        with self._batch_lock:
            paths, self._pending = self._pending, []
            self._batch_timer = None
        if paths:
            self.handle_paths(paths)

    def handle_paths(self, paths: Iterable[str]) -> bool:
        """Feed one batch of changed paths through the filter and debounce.

        Returns True if the batch (re)armed the debounce timer.
        """
        with self._lock:
            if not self._active or self._paused:
                return False
            if not has_relevant_change(paths):
                return False

            if self._debounce_timer is not None:
                self._debounce_timer.cancel()
            self._generation += 1
            timer = threading.Timer(self.debounce, self._fire, args=(self._generation,))
            timer.daemon = True
            self._debounce_timer = timer
            timer.start()
            return True

    def _fire(self, generation: int) -> None:
        with self._callback_lock:
            with self._lock:
                # A cancelled timer can still reach here if it was already running.
                if not self._active or generation != self._generation:
                    return
                self._debounce_timer = None
            logger.debug("change detected under %s", self.path)
            self._on_change()
