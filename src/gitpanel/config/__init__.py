"""Configuration loading, schema, and defaults."""

from gitpanel.config.loader import ConfigError, load_config
from gitpanel.config.schema import GitPanelConfig, OUTPUT_FORMATS

__all__ = [
    "ConfigError",
    "GitPanelConfig",
    "OUTPUT_FORMATS",
    "load_config",
]
