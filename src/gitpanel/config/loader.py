"""Load and merge configuration from .gitpanel.toml and env vars."""

from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from gitpanel.config.schema import (
    OUTPUT_FORMATS,
    GitConfig,
    GitPanelConfig,
    OutputConfig,
    StatusConfig,
    WatcherConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".gitpanel.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _env_float(name: str) -> Optional[float]:
    val = os.environ.get(name)
    if not val:
        return None
    try:
        return float(val)
    except ValueError:
        logger.debug("ignoring non-numeric %s=%r", name, val)
        return None


def _merge_env_overrides(cfg: GitPanelConfig) -> None:
    """Apply GITPANEL_* environment variable overrides."""
    if val := os.environ.get("GITPANEL_GIT_BINARY"):
        cfg.git.binary = val
    if (timeout := _env_float("GITPANEL_TIMEOUT")) is not None:
        cfg.git.timeout = timeout
    if (debounce := _env_float("GITPANEL_DEBOUNCE")) is not None:
        cfg.watcher.debounce = debounce
    if val := os.environ.get("GITPANEL_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _validate(cfg: GitPanelConfig) -> None:
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Invalid output format {cfg.output.format!r}; "
            f"expected one of {', '.join(OUTPUT_FORMATS)}"
        )
    for name, value in (
        ("git.timeout", cfg.git.timeout),
        ("watcher.debounce", cfg.watcher.debounce),
        ("watcher.latency", cfg.watcher.latency),
        ("watcher.resume_delay", cfg.watcher.resume_delay),
    ):
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
            raise ConfigError(f"{name} must be a non-negative number, got {value!r}")
    if cfg.git.timeout == 0:
        raise ConfigError("git.timeout must be greater than zero")


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> GitPanelConfig:
    """Load, validate, and return a GitPanelConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = GitPanelConfig()
    else:
        logger.debug("loading config from %s", config_path)
        raw = _parse_toml(config_path)
        cfg = GitPanelConfig(
            version=raw.get("version", "1.0"),
            git=_build_section(raw, GitConfig, "git"),
            status=_build_section(raw, StatusConfig, "status"),
            watcher=_build_section(raw, WatcherConfig, "watcher"),
            output=_build_section(raw, OutputConfig, "output"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
