"""Repository session — keeps a status snapshot fresh while a tree is watched.

Ties a :class:`Repository` to a :class:`ChangeWatcher`: out-of-band changes
trigger a refresh, and the session's own git operations pause the watcher so
they do not trigger a second, redundant refresh.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from gitpanel.config.schema import WatcherConfig
from gitpanel.git.errors import GitError
from gitpanel.git.models import FileDiff, FileStatus, RepositoryStatus
from gitpanel.git.repository import Repository
from gitpanel.watcher.change_watcher import ChangeWatcher

logger = logging.getLogger(__name__)

WatcherFactory = Callable[[Repository, Callable[[], None]], ChangeWatcher]


class RepositorySession:
    """Status snapshot, file selection and staging actions for one repository.

    All state is replaced, never mutated in place, so readers on other
    threads always see a complete snapshot.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        on_refresh: Optional[Callable[[RepositoryStatus], None]] = None,
        watcher_config: Optional[WatcherConfig] = None,
        watcher_factory: Optional[WatcherFactory] = None,
    ) -> None:
        self.repository = repository
        self.watcher_config = watcher_config or WatcherConfig()
        self._on_refresh = on_refresh
        self._watcher_factory = watcher_factory or self._default_watcher
        self._watcher: Optional[ChangeWatcher] = None
        self._resume_timer: Optional[threading.Timer] = None
        self._lock = threading.RLock()

        self.status: Optional[RepositoryStatus] = None
        self.selected_file: Optional[FileStatus] = None
        self.selected_diff: Optional[FileDiff] = None
        self.show_staged_diff = False
        self.error_message: Optional[str] = None

    def _default_watcher(self, repository: Repository, callback: Callable[[], None]) -> ChangeWatcher:
        return ChangeWatcher(
            repository.path,
            callback,
            debounce=self.watcher_config.debounce,
            latency=self.watcher_config.latency,
        )

    # ---- lifecycle ----

    def open(self) -> None:
        """Load the first snapshot and start watching for changes."""
        self.refresh()
        with self._lock:
            if self._watcher is None:
                self._watcher = self._watcher_factory(self.repository, self.refresh)
                self._watcher.start()

    def close(self) -> None:
        with self._lock:
            watcher, self._watcher = self._watcher, None
            if self._resume_timer is not None:
                self._resume_timer.cancel()
                self._resume_timer = None
        if watcher is not None:
            watcher.stop()

    def __enter__(self) -> "RepositorySession":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_loading(self) -> bool:
        return self.status is None

    # ---- refresh ----

    def refresh(self) -> RepositoryStatus:
        """Re-read status, drop a selection whose file vanished, notify."""
        with self._lock:
            watcher = self._watcher
        if watcher is not None:
            watcher.pause()

        self.error_message = None
        new_status = self.repository.status()

        with self._lock:
            self.status = new_status
            selected = self.selected_file
            if selected is not None and all(f.path != selected.path for f in new_status.files):
                self.selected_file = None
                self.selected_diff = None

        if self._on_refresh is not None:
            self._on_refresh(new_status)

        if watcher is not None:
            self._schedule_resume(watcher)
        return new_status

    def _schedule_resume(self, watcher: ChangeWatcher) -> None:
        delay = self.watcher_config.resume_delay
        with self._lock:
            if self._resume_timer is not None:
                self._resume_timer.cancel()
                self._resume_timer = None
            if delay > 0:
                timer = threading.Timer(delay, watcher.resume)
                timer.daemon = True
                self._resume_timer = timer
                timer.start()
                return
        # Outside the session lock: the watcher may be running a refresh
        # that is waiting for it.
        watcher.resume()

    # ---- selection ----

    def select_file(self, path: str, staged: bool = False) -> Optional[FileDiff]:
        """Select *path* and load its diff (index side when *staged*)."""
        entry = None
        if self.status is not None:
            entry = next((f for f in self.status.files if f.path == path), None)
        diffs = self.repository.diff(path, staged=staged)
        with self._lock:
            self.selected_file = entry or FileStatus(path=path)
            self.show_staged_diff = staged
            self.selected_diff = diffs[0] if diffs else None
            return self.selected_diff

    # ---- git operations ----

    def _perform(self, operation: Callable[[], None]) -> bool:
        """Run a mutation; refresh on success, record the error on failure."""
        with self._lock:
            watcher = self._watcher
        if watcher is not None:
            watcher.pause()
        try:
            operation()
        except GitError as exc:
            logger.debug("operation failed in %s: %s", self.repository.path, exc)
            self.error_message = str(exc)
            if watcher is not None:
                self._schedule_resume(watcher)
            return False
        self.refresh()
        return True

    def stage(self, paths: List[str]) -> bool:
        return self._perform(lambda: self.repository.stage(paths))

    def unstage(self, paths: List[str]) -> bool:
        return self._perform(lambda: self.repository.unstage(paths))

    def stage_all(self) -> bool:
        return self._perform(self.repository.stage_all)

    def unstage_all(self) -> bool:
        return self._perform(self.repository.unstage_all)

    def discard(self, paths: List[str]) -> bool:
        return self._perform(lambda: self.repository.discard_changes(paths))

    def commit(self, message: str) -> bool:
        return self._perform(lambda: self.repository.commit(message))
