"""Filesystem watching — relevance filter and debounced change notification."""

from gitpanel.watcher.change_watcher import ChangeWatcher
from gitpanel.watcher.relevance import has_relevant_change, is_relevant_path

__all__ = [
    "ChangeWatcher",
    "has_relevant_change",
    "is_relevant_path",
]
