"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

OutputFormat = Literal["terminal", "json", "yaml"]

OUTPUT_FORMATS: tuple[str, ...] = ("terminal", "json", "yaml")


@dataclass
class GitConfig:
    binary: str = "git"
    timeout: float = 30.0  # seconds before a git process is killed


@dataclass
class StatusConfig:
    keep_unknown_codes: bool = False  # surface unmapped XY codes as "unknown"
    strip_rename_score: bool = False  # drop "R100 " from rename/copy paths


@dataclass
class WatcherConfig:
    debounce: float = 1.0  # quiet period before the change callback fires
    latency: float = 1.0  # window for coalescing raw filesystem events
    resume_delay: float = 0.5  # re-enable the watcher this long after a refresh


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_summary: bool = True


@dataclass
class GitPanelConfig:
    version: str = "1.0"
    git: GitConfig = field(default_factory=GitConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
